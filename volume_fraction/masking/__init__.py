"""
Voxel Masking Module

Holds the voxel grid and turns regions of interest into binary voxel masks.
"""

from .voxel_grid import VoxelGrid
from .region_mask_builder import RegionMaskBuilder

__all__ = ['VoxelGrid', 'RegionMaskBuilder']
