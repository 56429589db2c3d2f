"""
Mesh module for the turbflow collocated closure.

Provides mesh generation, loading, wall distance and the MeshData2D
representation used by the finite volume kernels.
"""

from .mesh_data import MeshData2D
from .mesh_loader import build_mesh, load_mesh
from .structured_channel import generate as generate_structured_channel
from .wall_distance import compute_wall_distance

__all__ = [
    "MeshData2D",
    "build_mesh",
    "load_mesh",
    "generate_structured_channel",
    "compute_wall_distance",
]
