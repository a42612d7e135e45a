"""
Voxel Grid

Read-only 3D intensity buffer with per-slice geometry and voxel calibration.
"""

import numpy as np
from typing import Iterable, Tuple, Union
import logging

from ..data_models import GRAY8_BOUND, GRAY16_BOUND
from ..errors import InvalidParameterError

_TYPE_BOUNDS = {
    np.dtype(np.uint8): GRAY8_BOUND,
    np.dtype(np.uint16): GRAY16_BOUND,
}


class VoxelGrid:
    """Stack of 2D grayscale slices stored as a (depth, height, width) array."""

    def __init__(self,
                 slices: Union[np.ndarray, Iterable[np.ndarray]],
                 voxel_size: Tuple[float, float, float] = (1.0, 1.0, 1.0)):
        """
        Initialize voxel grid.

        Args:
            slices: 3D array (depth, height, width), a single 2D slice, or an
                iterable of equally sized 2D slices
            voxel_size: Calibrated (pixel_width, pixel_height, pixel_depth)
        """
        self.logger = logging.getLogger(__name__)

        if isinstance(slices, np.ndarray):
            data = slices
        else:
            slice_list = [np.asarray(s) for s in slices]
            if not slice_list:
                raise InvalidParameterError("Volume must contain at least one slice")
            if len({s.shape for s in slice_list}) != 1:
                raise InvalidParameterError("All slices must have the same dimensions")
            data = np.stack(slice_list)

        if data.ndim == 2:
            data = data[np.newaxis, ...]
        if data.ndim != 3:
            raise InvalidParameterError(f"Volume must be 2D or 3D, got {data.ndim} dimensions")
        if data.size == 0:
            raise InvalidParameterError("Volume must not be empty")
        if data.dtype not in _TYPE_BOUNDS:
            raise InvalidParameterError(f"Unsupported pixel type {data.dtype}; expected uint8 or uint16")

        if len(voxel_size) != 3 or any(s <= 0 for s in voxel_size):
            raise InvalidParameterError("Voxel size must be three positive values")

        self._data = np.array(data, copy=True)
        self._data.setflags(write=False)
        self.voxel_size = tuple(float(s) for s in voxel_size)

        self.logger.debug(f"Voxel grid created: {self.width}x{self.height}x{self.depth} {self.dtype}")

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def depth(self) -> int:
        return self._data.shape[0]

    @property
    def height(self) -> int:
        return self._data.shape[1]

    @property
    def width(self) -> int:
        return self._data.shape[2]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._data.shape

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def type_bound(self) -> int:
        """Largest representable intensity (255 or 65535)."""
        return _TYPE_BOUNDS[self._data.dtype]

    @property
    def bit_depth(self) -> int:
        return self._data.dtype.itemsize * 8

    def get_slice(self, slice_number: int) -> np.ndarray:
        """Get a slice by its 1-based number."""
        if not 1 <= slice_number <= self.depth:
            raise IndexError(f"Slice {slice_number} outside [1, {self.depth}]")
        return self._data[slice_number - 1]

    def get_voxel(self, x: int, y: int, z: int) -> int:
        """Get the intensity at pixel (x, y) of 1-based slice z."""
        plane = self.get_slice(z)
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} slice")
        return int(plane[y, x])

    def is_binary(self) -> bool:
        """True for an 8-bit grid holding only 0 and 255."""
        if self._data.dtype != np.uint8:
            return False
        return bool(np.all((self._data == 0) | (self._data == GRAY8_BOUND)))

    def needs_thresholds(self) -> bool:
        return not self.is_binary()
