"""
Surface Extractor

Marching-cubes isosurface extraction from a binary voxel mask.
"""

import numpy as np
from skimage import measure
from typing import Optional, Tuple
import logging

from ..data_models import Mesh
from ..errors import InvalidParameterError
from ..utils.config_manager import ConfigManager


class SurfaceExtractor:
    """Deterministic single-channel marching-cubes wrapper with optional resampling."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize surface extractor.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        surface_config = self.config.get_surface_params()

        # Iso level sits between background (0) and the mask foreground value
        self.iso_level = surface_config.get('iso_level', 128)

        self.logger.info(f"Surface extractor initialized: iso_level={self.iso_level}")

    @staticmethod
    def validate_resampling(resampling_factor: int) -> int:
        """Check that a resampling factor is a non-negative integer."""
        if isinstance(resampling_factor, bool) or not isinstance(resampling_factor, (int, np.integer)):
            raise InvalidParameterError("Resampling value must be an integer")
        if resampling_factor < 0:
            raise InvalidParameterError("Resampling value must be >= 0")
        return int(resampling_factor)

    def extract(self,
                mask: np.ndarray,
                iso_level: Optional[float] = None,
                resampling_factor: int = 0,
                voxel_size: Tuple[float, float, float] = (1.0, 1.0, 1.0)) -> Mesh:
        """
        Extract the isosurface of a binary mask.

        The mask is padded with one voxel of background on every face so
        that foreground touching the border still gives a closed surface.

        Args:
            mask: (depth, height, width) mask with values {0, foreground}
            iso_level: Surface level; defaults to the configured level
            resampling_factor: 0 or 1 for full resolution, n > 1 averages n^3 blocks
            voxel_size: Calibrated (pixel_width, pixel_height, pixel_depth)

        Returns:
            Mesh with vertices in calibrated (x, y, z) coordinates
        """
        factor = self.validate_resampling(resampling_factor)
        level = float(self.iso_level if iso_level is None else iso_level)

        mask = np.asarray(mask)
        if mask.ndim != 3:
            raise InvalidParameterError(f"Mask must be three-dimensional, got shape {mask.shape}")

        # astype copies, the caller's mask is never touched
        field = mask.astype(np.float32)
        if factor > 1:
            # Partial edge blocks average only the voxels inside the volume
            block_size = (factor, factor, factor)
            sums = measure.block_reduce(field, block_size=block_size, func=np.sum, cval=0)
            counts = measure.block_reduce(np.ones_like(field), block_size=block_size, func=np.sum, cval=0)
            field = sums / counts

        field = np.pad(field, 1, mode='constant', constant_values=0)

        if field.max() <= level:
            self.logger.debug("No voxel above iso level, returning empty mesh")
            return Mesh()

        vertices, faces, _normals, _values = measure.marching_cubes(field, level=level)

        # Undo padding, map block indices back to voxel centres
        vertices = vertices - 1.0
        if factor > 1:
            vertices = vertices * factor + (factor - 1) / 2.0

        # (z, y, x) array order -> calibrated (x, y, z)
        vertices = vertices[:, ::-1] * np.asarray(voxel_size, dtype=np.float64)

        mesh = Mesh(vertices=vertices, faces=faces)

        self.logger.debug(f"Extracted surface: {mesh.vertex_count} vertices, "
                          f"{mesh.triangle_count} triangles (resampling={factor})")

        return mesh
