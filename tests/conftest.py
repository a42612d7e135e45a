"""
Pytest configuration and fixtures for volume fraction tests.
"""

import pytest
import numpy as np
import trimesh

from volume_fraction.data_models import Mesh
from volume_fraction.masking.voxel_grid import VoxelGrid
from volume_fraction.utils.config_manager import ConfigManager


@pytest.fixture
def config_manager():
    """Fixture providing a configuration manager instance."""
    return ConfigManager()


@pytest.fixture
def tiny_volume():
    """Fixture providing the 2x2x1 volume with intensities [0, 128, 200, 255]."""
    data = np.array([[[0, 128],
                      [200, 255]]], dtype=np.uint8)
    return VoxelGrid(data)


@pytest.fixture
def saturated_volume():
    """Fixture providing a 4x4x2 volume entirely at intensity 255."""
    return VoxelGrid(np.full((2, 4, 4), 255, dtype=np.uint8))


@pytest.fixture
def layered_volume():
    """Fixture providing a 12x12x12 volume: lower half bright, upper half dark."""
    data = np.full((12, 12, 12), 50, dtype=np.uint8)
    data[:6] = 200
    return VoxelGrid(data)


@pytest.fixture
def random_volume():
    """Fixture providing a random 8-bit volume with fixed seed."""
    rng = np.random.default_rng(42)
    return VoxelGrid(rng.integers(0, 256, size=(5, 16, 20), dtype=np.uint8))


@pytest.fixture
def cube_mask():
    """Fixture providing a 10^3 mask with a 4^3 foreground cube at [3, 7)."""
    mask = np.zeros((10, 10, 10), dtype=np.uint8)
    mask[3:7, 3:7, 3:7] = 255
    return mask


@pytest.fixture
def box_mesh():
    """Fixture providing a closed 2x3x4 box mesh."""
    box = trimesh.creation.box(extents=(2.0, 3.0, 4.0))
    return Mesh(vertices=box.vertices, faces=box.faces)
