"""
Surface-Based Volume Fraction

Measures how much of a region of interest in a stack of grayscale slices is
occupied by foreground voxels.

This package implements:
- Per-slice region of interest and threshold masking into binary voxel masks
- Marching-cubes isosurface extraction with optional resampling
- Mesh volume calculation using signed tetrahedron integration
- A pipeline reporting foreground volume, total volume and their ratio
"""

__version__ = "1.0.0"
__author__ = "Volume Fraction Team"

from .masking import VoxelGrid, RegionMaskBuilder
from .surface import SurfaceExtractor, VolumeIntegrator
from .pipeline import VolumeFractionPipeline
from .data_models import (
    ThresholdRange, Region, MaskPair, Mesh, VolumeFractionResult, PipelineState
)
from .errors import (
    VolumeFractionError, InvalidRangeError, InvalidRegionError,
    InvalidParameterError, UninitializedInputError
)

__all__ = [
    # Masking
    'VoxelGrid', 'RegionMaskBuilder',
    # Surface
    'SurfaceExtractor', 'VolumeIntegrator',
    # Pipeline
    'VolumeFractionPipeline',
    # Data Models
    'ThresholdRange', 'Region', 'MaskPair', 'Mesh', 'VolumeFractionResult', 'PipelineState',
    # Errors
    'VolumeFractionError', 'InvalidRangeError', 'InvalidRegionError',
    'InvalidParameterError', 'UninitializedInputError'
]
