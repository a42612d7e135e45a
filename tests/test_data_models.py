"""
Tests for data models: threshold ranges, regions, meshes and results.
"""

import math

import pytest
import numpy as np
import trimesh
from hypothesis import given, strategies as st

from volume_fraction.data_models import Mesh, Region, ThresholdRange, VolumeFractionResult
from volume_fraction.errors import InvalidRangeError, InvalidRegionError


class TestThresholdRange:
    """Test suite for threshold range validation."""

    def test_valid_range(self):
        threshold_range = ThresholdRange(128, 255)
        assert threshold_range.min_value == 128
        assert threshold_range.max_value == 255

    def test_equal_bounds_allowed(self):
        threshold_range = ThresholdRange(0, 0)
        assert threshold_range.contains(np.array([0, 1])).tolist() == [True, False]

    @pytest.mark.property
    @given(
        low=st.integers(min_value=0, max_value=254),
        gap=st.integers(min_value=1, max_value=255)
    )
    def test_property_inverted_range_rejected(self, low, gap):
        """Property test: any min > max fails with InvalidRangeError."""
        high = min(low + gap, 255)
        with pytest.raises(InvalidRangeError):
            ThresholdRange(high, low)

    def test_out_of_bounds(self):
        with pytest.raises(InvalidRangeError, match="Max threshold out of bounds"):
            ThresholdRange(0, 256)
        with pytest.raises(InvalidRangeError, match="Min threshold out of bounds"):
            ThresholdRange(-1, 10)

    def test_non_integer_bounds_rejected(self):
        with pytest.raises(InvalidRangeError, match="integer"):
            ThresholdRange(10.5, 20.7)
        with pytest.raises(InvalidRangeError, match="integer"):
            ThresholdRange(10, 20.0)
        with pytest.raises(InvalidRangeError, match="integer"):
            ThresholdRange(False, True)
        assert ThresholdRange(np.uint8(10), np.int64(20)).max_value == 20

    def test_sixteen_bit_bound(self):
        threshold_range = ThresholdRange(1000, 60000, type_bound=65535)
        assert threshold_range.contains(np.array([999, 1000, 60000, 60001], dtype=np.uint16)).tolist() == \
            [False, True, True, False]

    def test_defaults_per_type(self):
        assert ThresholdRange.default_for(255) == ThresholdRange(128, 255, 255)
        assert ThresholdRange.default_for(65535) == ThresholdRange(2424, 11215, 65535)

    def test_defaults_with_overrides(self):
        assert ThresholdRange.default_for(255, {'min': 10}) == ThresholdRange(10, 255, 255)

    def test_defaults_unknown_type(self):
        with pytest.raises(InvalidRangeError):
            ThresholdRange.default_for(4095)

    def test_range_error_is_value_error(self):
        with pytest.raises(ValueError):
            ThresholdRange(5, 4)


class TestRegion:
    """Test suite for region coverage."""

    def test_rectangle_coverage(self):
        covered = Region.rectangle(1, 1, 2, 3, 2).coverage(5, 6)
        assert covered.shape == (5, 6)
        assert covered.sum() == 6
        assert covered[2:4, 1:4].all()

    def test_rectangle_clipped_to_slice(self):
        covered = Region.rectangle(1, -2, -2, 4, 4).coverage(5, 5)
        assert covered.sum() == 4
        assert covered[0:2, 0:2].all()

    def test_rectangle_outside_slice(self):
        assert Region.rectangle(1, 10, 10, 3, 3).coverage(5, 5).sum() == 0

    def test_negative_rectangle_rejected(self):
        with pytest.raises(InvalidRegionError):
            Region.rectangle(1, 0, 0, -1, 3)

    def test_polygon_square(self):
        covered = Region.polygon(1, [(1, 1), (4, 1), (4, 4), (1, 4)]).coverage(6, 6)
        assert covered[1:5, 1:5].all()
        assert covered.sum() == 16

    def test_polygon_triangle_subset_of_bounds(self):
        covered = Region.polygon(2, [(0, 0), (9, 0), (0, 9)]).coverage(10, 10)
        assert covered[0, 0]
        assert not covered[9, 9]
        assert 0 < covered.sum() < 100

    def test_polygon_too_few_points(self):
        with pytest.raises(InvalidRegionError):
            Region.polygon(1, [(0, 0), (1, 1)])

    def test_mask_region(self):
        pixel_mask = np.zeros((3, 4), dtype=bool)
        pixel_mask[1, 2] = True
        covered = Region.from_mask(1, pixel_mask).coverage(3, 4)
        assert covered.sum() == 1
        assert covered[1, 2]

    def test_mask_region_shape_mismatch(self):
        region = Region.from_mask(1, np.ones((3, 3), dtype=bool))
        with pytest.raises(InvalidRegionError, match="does not match"):
            region.coverage(4, 4)

    def test_applies_to(self):
        assert Region.rectangle(2, 0, 0, 1, 1).applies_to(2)
        assert not Region.rectangle(2, 0, 0, 1, 1).applies_to(3)
        assert Region.rectangle(None, 0, 0, 1, 1).applies_to(7)


class TestMesh:
    """Test suite for the mesh container."""

    def test_empty_mesh(self):
        mesh = Mesh()
        assert mesh.is_empty
        assert mesh.vertex_count == 0
        assert mesh.triangles().shape == (0, 3, 3)

    def test_triangles(self):
        mesh = Mesh(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], faces=[[0, 1, 2]])
        assert mesh.triangle_count == 1
        np.testing.assert_array_equal(mesh.triangles()[0], [[0, 0, 0], [1, 0, 0], [0, 1, 0]])

    def test_to_trimesh(self, box_mesh):
        converted = box_mesh.to_trimesh()
        assert isinstance(converted, trimesh.Trimesh)
        assert len(converted.faces) == box_mesh.triangle_count


class TestVolumeFractionResult:
    """Test suite for result ratio handling."""

    def test_ratio(self):
        result = VolumeFractionResult.from_volumes(2.0, 8.0)
        assert result.ratio == 0.25

    def test_zero_total_gives_nan(self):
        result = VolumeFractionResult.from_volumes(0.0, 0.0)
        assert math.isnan(result.ratio)

    def test_zero_foreground_gives_zero(self):
        result = VolumeFractionResult.from_volumes(0.0, 3.0)
        assert result.ratio == 0.0
