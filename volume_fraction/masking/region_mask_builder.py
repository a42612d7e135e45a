"""
Region Mask Builder

Converts per-slice regions of interest and a threshold range into the two
binary voxel masks consumed by surface extraction.
"""

from concurrent.futures import ThreadPoolExecutor
import numpy as np
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging

from ..data_models import MaskPair, Region, ThresholdRange
from ..errors import InvalidParameterError, InvalidRangeError, InvalidRegionError
from ..utils.config_manager import ConfigManager
from .voxel_grid import VoxelGrid


class RegionMaskBuilder:
    """Builds total (region coverage) and foreground (coverage within thresholds) masks."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize region mask builder.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        self.foreground_value = self.config.get_surface_params().get('foreground_value', 255)
        self.max_workers = self.config.get_masking_params().get('max_workers', 1)

        self.logger.info(f"Region mask builder initialized: foreground={self.foreground_value}, "
                         f"workers={self.max_workers}")

    def build(self,
              volume: VoxelGrid,
              regions: Optional[Sequence[Region]],
              threshold_range: Union[ThresholdRange, Tuple[int, int]]) -> MaskPair:
        """
        Build the total and foreground masks.

        Without regions every slice is covered by one full-frame region. With
        regions, only slices that have at least one region are drawn; the
        rest stay zero in both masks. Regions on the same slice are unioned.

        Args:
            volume: Source voxel grid
            regions: Regions of interest, or None for whole slices
            threshold_range: Inclusive foreground intensity range

        Returns:
            MaskPair of uint8 arrays shaped like the volume
        """
        if volume is None:
            raise InvalidParameterError("Volume must not be None")

        threshold_range = self._resolve_thresholds(volume, threshold_range)

        if regions is None:
            regions = [Region.rectangle(None, 0, 0, volume.width, volume.height)]
        else:
            regions = list(regions)

        # All checks happen before any mask buffer is written
        self._validate_regions(volume, regions)
        slice_regions = self._group_by_slice(volume.depth, regions)

        total = np.zeros(volume.shape, dtype=np.uint8)
        foreground = np.zeros(volume.shape, dtype=np.uint8)

        def draw(slice_number: int) -> None:
            self._draw_slice(volume, slice_number, slice_regions[slice_number],
                             threshold_range, total, foreground)

        covered_slices = sorted(slice_regions)
        if self.max_workers > 1 and len(covered_slices) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                list(executor.map(draw, covered_slices))
        else:
            for slice_number in covered_slices:
                draw(slice_number)

        self.logger.debug(f"Masks built: {len(covered_slices)}/{volume.depth} slices covered, "
                          f"{np.count_nonzero(total)} total voxels, "
                          f"{np.count_nonzero(foreground)} foreground voxels")

        return MaskPair(total=total, foreground=foreground)

    def _resolve_thresholds(self, volume: VoxelGrid,
                            threshold_range: Union[ThresholdRange, Tuple[int, int]]) -> ThresholdRange:
        """Coerce a (min, max) pair and check it fits the volume's pixel type."""
        if threshold_range is None:
            raise InvalidRangeError("Threshold range must not be None")

        if not isinstance(threshold_range, ThresholdRange):
            min_value, max_value = threshold_range
            threshold_range = ThresholdRange(int(min_value), int(max_value), volume.type_bound)

        if threshold_range.max_value > volume.type_bound:
            raise InvalidRangeError(
                f"Max threshold {threshold_range.max_value} exceeds pixel type bound {volume.type_bound}")

        return threshold_range

    def _validate_regions(self, volume: VoxelGrid, regions: List[Region]) -> None:
        for region in regions:
            if region.slice_index is not None and not 1 <= region.slice_index <= volume.depth:
                raise InvalidRegionError(
                    f"Region references slice {region.slice_index} outside [1, {volume.depth}]")
            if region.kind == "mask" and region.pixel_mask.shape != (volume.height, volume.width):
                raise InvalidRegionError(
                    f"Region mask shape {region.pixel_mask.shape} does not match "
                    f"slice shape {(volume.height, volume.width)}")

    def _group_by_slice(self, depth: int, regions: List[Region]) -> Dict[int, List[Region]]:
        """Map each 1-based slice number to the regions drawn on it."""
        slice_regions: Dict[int, List[Region]] = {}
        for slice_number in range(1, depth + 1):
            on_slice = [r for r in regions if r.applies_to(slice_number)]
            if on_slice:
                slice_regions[slice_number] = on_slice
        return slice_regions

    def _draw_slice(self,
                    volume: VoxelGrid,
                    slice_number: int,
                    regions: List[Region],
                    threshold_range: ThresholdRange,
                    total: np.ndarray,
                    foreground: np.ndarray) -> None:
        """Set covered pixels of one output slice. Never clears a pixel."""
        pixels = volume.get_slice(slice_number)
        in_range = threshold_range.contains(pixels)

        out_index = slice_number - 1
        for region in regions:
            covered = region.coverage(volume.height, volume.width)
            total[out_index][covered] = self.foreground_value
            foreground[out_index][covered & in_range] = self.foreground_value
