"""
Surface Analysis Module

Implements marching-cubes surface extraction and mesh volume calculation.
"""

from .surface_extractor import SurfaceExtractor
from .volume_integrator import VolumeIntegrator

__all__ = ['SurfaceExtractor', 'VolumeIntegrator']
