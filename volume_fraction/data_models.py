"""
Data Models for Volume Fraction Pipeline

Defines all data structures used throughout the system.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple
import cv2
import numpy as np
import trimesh

from .errors import InvalidRangeError, InvalidRegionError

GRAY8_BOUND = 0xFF
GRAY16_BOUND = 0xFFFF

# (min, max) defaults per pixel type bound
DEFAULT_THRESHOLDS: Dict[int, Tuple[int, int]] = {
    GRAY8_BOUND: (128, 255),
    GRAY16_BOUND: (2424, 11_215),
}


class PipelineState(Enum):
    """Progress of one pipeline invocation."""
    IDLE = "idle"
    MASKS_BUILT = "masks_built"
    FOREGROUND_EXTRACTED = "foreground_extracted"
    TOTAL_EXTRACTED = "total_extracted"
    INTEGRATED = "integrated"
    DONE = "done"


@dataclass(frozen=True)
class ThresholdRange:
    """Inclusive foreground intensity range for a given pixel type."""
    min_value: int
    max_value: int
    type_bound: int = GRAY8_BOUND  # 255 for 8-bit, 65535 for 16-bit

    def __post_init__(self):
        for bound in (self.min_value, self.max_value):
            if isinstance(bound, bool) or not isinstance(bound, (int, np.integer)):
                raise InvalidRangeError(f"Threshold {bound!r} must be an integer")
        if not 0 <= self.min_value <= self.type_bound:
            raise InvalidRangeError("Min threshold out of bounds")
        if not 0 <= self.max_value <= self.type_bound:
            raise InvalidRangeError("Max threshold out of bounds")
        if self.min_value > self.max_value:
            raise InvalidRangeError("Minimum threshold must be less or equal to maximum threshold")

    @classmethod
    def default_for(cls, type_bound: int,
                    overrides: Optional[Dict[str, int]] = None) -> 'ThresholdRange':
        """
        Create the type-specific default range.

        Args:
            type_bound: Maximum pixel value of the source type
            overrides: Optional {'min': ..., 'max': ...} replacing the built-in defaults

        Returns:
            Default threshold range for the pixel type
        """
        if type_bound not in DEFAULT_THRESHOLDS:
            raise InvalidRangeError(f"No default thresholds for pixel type bound {type_bound}")

        min_value, max_value = DEFAULT_THRESHOLDS[type_bound]
        if overrides:
            min_value = overrides.get('min', min_value)
            max_value = overrides.get('max', max_value)
        return cls(min_value, max_value, type_bound)

    def contains(self, values: np.ndarray) -> np.ndarray:
        """Pixel-wise inclusive range test."""
        return (values >= self.min_value) & (values <= self.max_value)


@dataclass
class Region:
    """
    Region of interest on one slice.

    A region answers which pixels of a slice it covers. ``slice_index`` is
    1-based; None makes the region apply to every slice.
    """
    slice_index: Optional[int]
    kind: str  # "rectangle", "polygon" or "mask"
    bounds: Optional[Tuple[int, int, int, int]] = None  # (x, y, width, height)
    points: Optional[np.ndarray] = None  # Nx2 polygon vertices (x, y)
    pixel_mask: Optional[np.ndarray] = None  # HxW boolean coverage

    @classmethod
    def rectangle(cls, slice_index: Optional[int], x: int, y: int,
                  width: int, height: int) -> 'Region':
        if width < 0 or height < 0:
            raise InvalidRegionError("Rectangle width and height must be non-negative")
        return cls(slice_index, "rectangle", bounds=(int(x), int(y), int(width), int(height)))

    @classmethod
    def polygon(cls, slice_index: Optional[int], points: Sequence[Sequence[float]]) -> 'Region':
        vertices = np.asarray(points, dtype=np.float64)
        if vertices.ndim != 2 or vertices.shape[1] != 2 or len(vertices) < 3:
            raise InvalidRegionError("Polygon needs at least three (x, y) vertices")
        return cls(slice_index, "polygon", points=vertices)

    @classmethod
    def from_mask(cls, slice_index: Optional[int], mask: np.ndarray) -> 'Region':
        pixel_mask = np.asarray(mask).astype(bool)
        if pixel_mask.ndim != 2:
            raise InvalidRegionError("Region mask must be two-dimensional")
        return cls(slice_index, "mask", pixel_mask=pixel_mask)

    def applies_to(self, slice_number: int) -> bool:
        return self.slice_index is None or self.slice_index == slice_number

    def coverage(self, height: int, width: int) -> np.ndarray:
        """
        Compute the pixels of a height x width slice covered by this region.

        Args:
            height: Slice height in pixels
            width: Slice width in pixels

        Returns:
            Boolean coverage mask of shape (height, width)
        """
        covered = np.zeros((height, width), dtype=bool)

        if self.kind == "rectangle":
            x, y, w, h = self.bounds
            x0, y0 = max(x, 0), max(y, 0)
            x1, y1 = min(x + w, width), min(y + h, height)
            if x0 < x1 and y0 < y1:
                covered[y0:y1, x0:x1] = True
        elif self.kind == "polygon":
            canvas = np.zeros((height, width), dtype=np.uint8)
            vertices = np.round(self.points).astype(np.int32)
            cv2.fillPoly(canvas, [vertices], 1)
            covered = canvas.astype(bool)
        elif self.kind == "mask":
            if self.pixel_mask.shape != (height, width):
                raise InvalidRegionError(
                    f"Region mask shape {self.pixel_mask.shape} does not match slice shape {(height, width)}")
            covered = self.pixel_mask.copy()
        else:
            raise InvalidRegionError(f"Unknown region kind: {self.kind}")

        return covered


@dataclass
class MaskPair:
    """Total (region coverage) and foreground (coverage within thresholds) masks."""
    total: np.ndarray  # (depth, height, width) uint8, values {0, foreground}
    foreground: np.ndarray


@dataclass
class Mesh:
    """Triangle mesh as vertex and face index buffers."""
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    faces: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int64))

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1, 3)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.faces)

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0

    def triangles(self) -> np.ndarray:
        """Vertex coordinates per triangle, shape (M, 3, 3)."""
        return self.vertices[self.faces]

    def to_trimesh(self) -> trimesh.Trimesh:
        """Hand the buffers to trimesh unchanged for rendering or export."""
        return trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)


@dataclass
class VolumeFractionResult:
    """Results from one volume fraction run."""
    foreground_volume: float
    total_volume: float
    ratio: float
    foreground_surface: Optional[Mesh] = None
    total_surface: Optional[Mesh] = None

    @classmethod
    def from_volumes(cls, foreground_volume: float, total_volume: float,
                     foreground_surface: Optional[Mesh] = None,
                     total_surface: Optional[Mesh] = None) -> 'VolumeFractionResult':
        ratio = foreground_volume / total_volume if total_volume > 0 else float('nan')
        return cls(foreground_volume, total_volume, ratio, foreground_surface, total_surface)
