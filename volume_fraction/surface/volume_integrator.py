"""
Volume Integrator

Enclosed volume of a triangle mesh by signed tetrahedron integration.
"""

import numpy as np
import logging

from ..data_models import Mesh


class VolumeIntegrator:
    """Divergence-theorem volume of a triangle mesh."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def signed_volume(self, mesh: Mesh) -> float:
        """
        Sum the signed volumes of the tetrahedra spanned by each triangle and the origin.

        V = (1/6) * sum(v0 . (v1 x v2))

        Open or non-manifold meshes are accepted; the sum is returned as-is.

        Args:
            mesh: Triangle mesh

        Returns:
            Signed volume; the sign follows the triangle winding
        """
        if mesh is None or mesh.is_empty:
            return 0.0

        triangles = mesh.triangles()
        v0, v1, v2 = triangles[:, 0], triangles[:, 1], triangles[:, 2]
        triple_products = np.einsum('ij,ij->i', v0, np.cross(v1, v2))

        return float(np.sum(triple_products) / 6.0)

    def volume(self, mesh: Mesh) -> float:
        """Enclosed volume magnitude; winding from the extractor is not relied on."""
        return abs(self.signed_volume(mesh))

    def is_closed(self, mesh: Mesh) -> bool:
        """
        Check that every undirected edge is shared by exactly two triangles.

        Diagnostic only, the volume is computed the same way either way.
        """
        if mesh is None or mesh.is_empty:
            return False

        faces = mesh.faces
        edges = np.concatenate([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]])
        edges = np.sort(edges, axis=1)
        _, counts = np.unique(edges, axis=0, return_counts=True)

        closed = bool(np.all(counts == 2))
        if not closed:
            self.logger.debug(f"Mesh is open or non-manifold: {np.count_nonzero(counts != 2)} irregular edges")
        return closed
