"""
MeshData2D: the static 2D mesh every face and cell kernel reads.

Geometry and the over-relaxed non-orthogonal split follow Moukalled et al.,
"The Finite Volume Method in Computational Fluid Dynamics", ch. 8.

Face arrays have length n_faces, cell arrays n_cells. S_f points from the
owner to the neighbour, outward on boundary faces.

Boundary tables have one column per transported quantity, in the order of
bc_types (U_IDX, V_IDX, P_IDX, K_IDX, EPS_IDX). Internal faces hold type -1
and value 0; d_Cb is 0 on internal faces. Neumann rows store the gradient.
The P_IDX column is carried for the outer pressure-velocity solver; the
turbulence closure only reads the velocity, k and epsilon columns.
"""

from numba import types
from numba.experimental import jitclass

_f1 = types.float64[:]
_f2 = types.float64[:, :]
_i1 = types.int64[:]
_i2 = types.int64[:, :]

mesh_data_spec = [
    # cells
    ("cell_volumes", _f1),
    ("cell_centers", _f2),
    # faces
    ("face_areas", _f1),              # |S_f|, the edge length in 2D
    ("face_centers", _f2),
    ("owner_cells", _i1),
    ("neighbor_cells", _i1),          # -1 on boundary faces
    ("cell_faces", _i2),              # faces around each cell, -1 padded
    ("face_vertices", _i2),
    ("vertices", _f2),
    # non-orthogonal decomposition S_f = E_f + T_f
    ("vector_S_f", _f2),
    ("vector_d_CE", _f2),             # P->N, or P->f on boundaries
    ("vector_E_f", _f2),
    ("vector_T_f", _f2),
    ("face_interp_factors", _f1),     # g_f, weight of the neighbour value
    # topology
    ("internal_faces", _i1),
    ("boundary_faces", _i1),
    ("boundary_patches", _i1),        # physical tag, -1 if untagged or internal
    ("wall_faces", _i1),              # boundary faces with a wall velocity condition
    # boundary conditions
    ("boundary_types", _i2),
    ("boundary_values", _f2),
    ("d_Cb", _f1),                    # owner centre to boundary face centre
]


@jitclass(mesh_data_spec)
class MeshData2D:
    def __init__(
        self,
        cell_volumes, cell_centers,
        face_areas, face_centers,
        owner_cells, neighbor_cells, cell_faces, face_vertices, vertices,
        vector_S_f, vector_d_CE, vector_E_f, vector_T_f,
        face_interp_factors,
        internal_faces, boundary_faces, boundary_patches, wall_faces,
        boundary_types, boundary_values, d_Cb,
    ):
        self.cell_volumes = cell_volumes
        self.cell_centers = cell_centers

        self.face_areas = face_areas
        self.face_centers = face_centers
        self.owner_cells = owner_cells
        self.neighbor_cells = neighbor_cells
        self.cell_faces = cell_faces
        self.face_vertices = face_vertices
        self.vertices = vertices

        self.vector_S_f = vector_S_f
        self.vector_d_CE = vector_d_CE
        self.vector_E_f = vector_E_f
        self.vector_T_f = vector_T_f
        self.face_interp_factors = face_interp_factors

        self.internal_faces = internal_faces
        self.boundary_faces = boundary_faces
        self.boundary_patches = boundary_patches
        self.wall_faces = wall_faces

        self.boundary_types = boundary_types
        self.boundary_values = boundary_values
        self.d_Cb = d_Cb
