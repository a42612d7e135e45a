"""
Volume Fraction Pipeline

Builds the region masks, extracts a surface from each, integrates both
volumes and reports foreground volume over total volume.
"""

from concurrent.futures import ThreadPoolExecutor
import numpy as np
from typing import Optional, Sequence, Tuple, Union
import logging

from ..data_models import Mesh, PipelineState, Region, ThresholdRange, VolumeFractionResult, GRAY8_BOUND
from ..errors import InvalidParameterError, UninitializedInputError
from ..masking.region_mask_builder import RegionMaskBuilder
from ..masking.voxel_grid import VoxelGrid
from ..surface.surface_extractor import SurfaceExtractor
from ..surface.volume_integrator import VolumeIntegrator
from ..utils.config_manager import ConfigManager

# Distinguishes "use the configured regions" from an explicit None (whole slices)
_CONFIGURED = object()


class VolumeFractionPipeline:
    """
    Surface-based volume fraction of a voxel volume.

    An instance holds configuration (image, regions, thresholds, resampling)
    and the outputs of the last run. It is not safe for concurrent ``run``
    calls; use one instance per thread.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize volume fraction pipeline.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        self.mask_builder = RegionMaskBuilder(self.config)
        self.surface_extractor = SurfaceExtractor(self.config)
        self.volume_integrator = VolumeIntegrator()

        surface_config = self.config.get_surface_params()
        pipeline_config = self.config.get_pipeline_params()

        self.surface_resampling = SurfaceExtractor.validate_resampling(
            surface_config.get('default_resampling', 6))
        self.parallel_branches = bool(pipeline_config.get('parallel_branches', False))

        self.image: Optional[VoxelGrid] = None
        self.regions: Optional[Tuple[Region, ...]] = None
        self.threshold_range = self._default_thresholds(GRAY8_BOUND)

        self.reset()

        self.logger.info(f"Volume fraction pipeline initialized: resampling={self.surface_resampling}, "
                         f"parallel_branches={self.parallel_branches}")

    # Outputs

    @property
    def foreground_volume(self) -> float:
        return self._foreground_volume

    @property
    def total_volume(self) -> float:
        return self._total_volume

    @property
    def volume_ratio(self) -> float:
        return self._volume_ratio

    @property
    def foreground_surface(self) -> Optional[Mesh]:
        return self._foreground_surface

    @property
    def total_surface(self) -> Optional[Mesh]:
        return self._total_surface

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def min_threshold(self) -> int:
        return self.threshold_range.min_value

    @property
    def max_threshold(self) -> int:
        return self.threshold_range.max_value

    # Configuration

    def set_image(self, image: Union[VoxelGrid, np.ndarray]) -> None:
        """
        Set the input volume and reset thresholds to its pixel type defaults.

        Args:
            image: Voxel grid, or a uint8/uint16 array wrapped into one
        """
        if image is None:
            raise InvalidParameterError("May not use a null image")
        if not isinstance(image, VoxelGrid):
            image = VoxelGrid(image)

        self.image = image
        self.threshold_range = self._default_thresholds(image.type_bound)

        self.logger.debug(f"Image set: {image.width}x{image.height}x{image.depth}, "
                          f"thresholds reset to [{self.min_threshold}, {self.max_threshold}]")

    def set_regions(self, regions: Optional[Sequence[Region]]) -> None:
        """
        Set the regions of interest; None restores whole-slice measurement.

        Args:
            regions: Non-empty collection of regions, or None
        """
        if regions is None:
            self.regions = None
            return

        regions = tuple(regions)
        if not regions:
            raise InvalidParameterError("May not use an empty region collection")
        self.regions = regions

    def set_thresholds(self, min_threshold: int, max_threshold: int) -> None:
        """Set the foreground range within the current pixel type bound."""
        self.threshold_range = ThresholdRange(min_threshold, max_threshold, self.threshold_range.type_bound)

    def set_surface_resampling(self, resampling: int) -> None:
        self.surface_resampling = SurfaceExtractor.validate_resampling(resampling)

    def needs_thresholds(self) -> bool:
        """Binary 8-bit images are measured as-is; anything else needs a range."""
        if self.image is None:
            raise UninitializedInputError("No image set")
        return self.image.needs_thresholds()

    def reset(self) -> None:
        """Clear the outputs of the last run; configuration is kept."""
        self._state = PipelineState.IDLE
        self._foreground_volume = 0.0
        self._total_volume = 0.0
        self._volume_ratio = float('nan')
        self._foreground_surface: Optional[Mesh] = None
        self._total_surface: Optional[Mesh] = None

    # Execution

    def run(self,
            volume: Optional[Union[VoxelGrid, np.ndarray]] = None,
            threshold_range: Optional[Union[ThresholdRange, Tuple[int, int]]] = None,
            regions=_CONFIGURED,
            resampling_factor: Optional[int] = None) -> VolumeFractionResult:
        """
        Measure foreground and total volume.

        Arguments left out fall back to the configured values. Passing
        ``regions=None`` explicitly measures whole slices. Any failure leaves
        the outputs of the previous run untouched.

        Args:
            volume: Input volume
            threshold_range: Foreground intensity range
            regions: Regions of interest or None
            resampling_factor: Surface resampling factor (>= 0)

        Returns:
            VolumeFractionResult with both volumes, their ratio and both meshes
        """
        volume = self._resolve_volume(volume)

        if threshold_range is None:
            if self.threshold_range.type_bound == volume.type_bound:
                threshold_range = self.threshold_range
            else:
                threshold_range = self._default_thresholds(volume.type_bound)

        if regions is _CONFIGURED:
            regions = self.regions

        if resampling_factor is None:
            resampling_factor = self.surface_resampling
        resampling_factor = SurfaceExtractor.validate_resampling(resampling_factor)

        previous_state = self._state
        self._state = PipelineState.IDLE
        try:
            result = self._execute(volume, threshold_range, regions, resampling_factor)
        except Exception:
            self._state = previous_state
            raise

        self._foreground_volume = result.foreground_volume
        self._total_volume = result.total_volume
        self._volume_ratio = result.ratio
        self._foreground_surface = result.foreground_surface
        self._total_surface = result.total_surface
        self._advance(PipelineState.DONE)

        self.logger.info(f"Volume fraction: foreground={result.foreground_volume:.4f}, "
                         f"total={result.total_volume:.4f}, ratio={result.ratio:.4f}")

        return result

    def _execute(self,
                 volume: VoxelGrid,
                 threshold_range: Union[ThresholdRange, Tuple[int, int]],
                 regions: Optional[Sequence[Region]],
                 resampling_factor: int) -> VolumeFractionResult:
        masks = self.mask_builder.build(volume, regions, threshold_range)
        self._advance(PipelineState.MASKS_BUILT)

        if self.parallel_branches:
            with ThreadPoolExecutor(max_workers=2) as executor:
                foreground_future = executor.submit(self._measure, masks.foreground, resampling_factor,
                                                    volume.voxel_size)
                total_future = executor.submit(self._measure, masks.total, resampling_factor,
                                               volume.voxel_size)
                foreground_surface, foreground_volume = foreground_future.result()
                self._advance(PipelineState.FOREGROUND_EXTRACTED)
                total_surface, total_volume = total_future.result()
                self._advance(PipelineState.TOTAL_EXTRACTED)
        else:
            foreground_surface = self.surface_extractor.extract(
                masks.foreground, resampling_factor=resampling_factor, voxel_size=volume.voxel_size)
            self._advance(PipelineState.FOREGROUND_EXTRACTED)
            total_surface = self.surface_extractor.extract(
                masks.total, resampling_factor=resampling_factor, voxel_size=volume.voxel_size)
            self._advance(PipelineState.TOTAL_EXTRACTED)

            foreground_volume = self.volume_integrator.volume(foreground_surface)
            total_volume = self.volume_integrator.volume(total_surface)

        self._advance(PipelineState.INTEGRATED)

        return VolumeFractionResult.from_volumes(foreground_volume, total_volume,
                                                 foreground_surface, total_surface)

    def _measure(self, mask: np.ndarray, resampling_factor: int,
                 voxel_size: Tuple[float, float, float]) -> Tuple[Mesh, float]:
        """Extract and integrate one mask."""
        surface = self.surface_extractor.extract(mask, resampling_factor=resampling_factor,
                                                 voxel_size=voxel_size)
        return surface, self.volume_integrator.volume(surface)

    def _resolve_volume(self, volume: Optional[Union[VoxelGrid, np.ndarray]]) -> VoxelGrid:
        if volume is None:
            volume = self.image
        if volume is None:
            raise UninitializedInputError("No input volume set")
        if isinstance(volume, VoxelGrid):
            return volume

        volume = np.asarray(volume)
        if volume.size == 0:
            raise UninitializedInputError("Input volume is empty")
        return VoxelGrid(volume)

    def _default_thresholds(self, type_bound: int) -> ThresholdRange:
        return ThresholdRange.default_for(type_bound, self.config.get_threshold_defaults(type_bound))

    def _advance(self, state: PipelineState) -> None:
        self.logger.debug(f"Pipeline state: {self._state.value} -> {state.value}")
        self._state = state
