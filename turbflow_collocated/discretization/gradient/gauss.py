import numpy as np
from numba import njit

from turbflow_collocated.mesh.bc_types import BC_WALL, BC_DIRICHLET, BC_INLET


@njit(inline="always")
def _boundary_face_value(mesh, phi, f, P, bc_column):
    """Boundary value on fixed-value faces, owner value otherwise (or always when bc_column < 0)."""
    if bc_column >= 0:
        bc_type = mesh.boundary_types[f, bc_column]
        if bc_type == BC_WALL or bc_type == BC_DIRICHLET or bc_type == BC_INLET:
            return mesh.boundary_values[f, bc_column]
    return phi[P]


@njit
def compute_cell_gradients(mesh, phi, bc_column=-1):
    """
    Green-Gauss cell gradient, grad(phi)_C = sum_f phi_f S_f / V_C.

    Internal face values are linear interpolations with g_f. bc_column
    selects the boundary table column (U_IDX, K_IDX, ...); -1 is used for
    derived fields without boundary data, such as components of grad(U).

    Returns
    -------
    grad : ndarray (n_cells, 2)
    """
    n_cells = mesh.cell_centers.shape[0]
    n_faces = mesh.owner_cells.shape[0]
    grad = np.zeros((n_cells, 2), dtype=np.float64)

    for f in range(n_faces):
        P = mesh.owner_cells[f]
        N = mesh.neighbor_cells[f]
        Sx = mesh.vector_S_f[f, 0]
        Sy = mesh.vector_S_f[f, 1]

        if N >= 0:
            g_f = mesh.face_interp_factors[f]
            phi_f = g_f * phi[N] + (1.0 - g_f) * phi[P]
            grad[N, 0] -= phi_f * Sx
            grad[N, 1] -= phi_f * Sy
        else:
            phi_f = _boundary_face_value(mesh, phi, f, P, bc_column)

        grad[P, 0] += phi_f * Sx
        grad[P, 1] += phi_f * Sy

    for c in range(n_cells):
        inv_vol = 1.0 / mesh.cell_volumes[c]
        grad[c, 0] *= inv_vol
        grad[c, 1] *= inv_vol

    return grad
