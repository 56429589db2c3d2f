import numpy as np
from numba import njit

from turbflow_collocated.mesh.bc_types import BC_WALL, BC_DIRICHLET, BC_INLET

EPS = 1e-14


@njit(inline="always")
def _is_fixed_value(bc_type):
    return bc_type == BC_WALL or bc_type == BC_DIRICHLET or bc_type == BC_INLET


@njit
def compute_cell_gradients(mesh, u, bc_column=-1):
    """
    Weighted least-squares cell gradient of a scalar field.

    Parameters
    ----------
    mesh : MeshData2D
    u : ndarray (n_cells,)
        Scalar at cell centres.
    bc_column : int
        Column of mesh.boundary_types / boundary_values holding the field's
        boundary conditions. Fixed-value faces (wall, Dirichlet, inlet) join
        the fit with their boundary value; all other boundary faces are
        skipped. -1 means the field has no boundary data (derived quantity).

    Returns
    -------
    grad : ndarray (n_cells, 2)
    """
    n_cells = mesh.cell_centers.shape[0]
    grad = np.zeros((n_cells, 2), dtype=np.float64)

    # required mesh views
    cell_faces = mesh.cell_faces
    owner_cells = mesh.owner_cells
    neighbor_cells = mesh.neighbor_cells
    cc = mesh.cell_centers
    fc = mesh.face_centers

    for c in range(n_cells):
        A00 = A01 = A11 = 0.0
        b0 = b1 = 0.0

        u_c = u[c]
        x_Px = cc[c, 0]
        x_Py = cc[c, 1]

        for f in cell_faces[c]:
            if f < 0:
                break

            P = owner_cells[f]
            N = neighbor_cells[f]

            if N >= 0:
                other = N if c == P else P
                vec0 = cc[other, 0] - x_Px
                vec1 = cc[other, 1] - x_Py
                du = u[other] - u_c
            else:
                if bc_column < 0 or not _is_fixed_value(mesh.boundary_types[f, bc_column]):
                    continue
                vec0 = fc[f, 0] - x_Px
                vec1 = fc[f, 1] - x_Py
                du = mesh.boundary_values[f, bc_column] - u_c

            r2 = vec0 * vec0 + vec1 * vec1
            if r2 < EPS:
                continue
            w = 1.0 / r2

            A00 += w * vec0 * vec0
            A01 += w * vec0 * vec1
            A11 += w * vec1 * vec1
            b0 += w * vec0 * du
            b1 += w * vec1 * du

        # constant field? → zero gradient
        if abs(b0) < EPS and abs(b1) < EPS:
            continue

        # tiny Tikhonov regularisation
        lam = 1e-8
        A00 += lam
        A11 += lam

        denom = A00 * A11 - A01 * A01
        if abs(denom) > EPS:
            grad[c, 0] = (A11 * b0 - A01 * b1) / denom
            grad[c, 1] = (A00 * b1 - A01 * b0) / denom

    return grad
