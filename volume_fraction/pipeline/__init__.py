"""
Pipeline Module

Orchestrates masking, surface extraction and volume integration.
"""

from .volume_fraction_pipeline import VolumeFractionPipeline

__all__ = ['VolumeFractionPipeline']
