import numpy as np
from numba import njit

from turbflow_collocated.discretization.diffusion.central_diff import (
    compute_diffusive_flux_matrix_entry,
    compute_diffusive_correction,
    compute_boundary_diffusive_correction,
)
from turbflow_collocated.discretization.convection.upwind import (
    compute_convective_stencil,
    compute_boundary_convective_flux,
)


@njit
def assemble_diffusion_convection_matrix(
    mesh,
    mdot,
    gamma,
    phi,
    grad_phi,
    bc_column,
    scheme="Upwind",
    limiter="MUSCL",
):
    """Assemble sparse matrix and RHS for div(mdot φ) − div(Γ ∇φ) = 0.

    The implementation avoids Python‐level dynamic containers, which drastically
    reduces overhead inside Numba-JIT code. We pessimistically over-allocate the
    *triplet* (COO) arrays and trim the excess at the end.

    Parameters
    ----------
    mesh : MeshData2D
        Mesh object with *internal_faces*, *boundary_faces*, *owner_cells*, …
    mdot : ndarray (n_faces,)
        Face mass fluxes, owner → neighbour (outward on boundary faces).
    gamma : ndarray (n_cells,)
        Cell diffusivity Γ (already weighted by alpha*rho).
    phi : ndarray (n_cells,)
        Current cell values of the transported scalar.
    grad_phi : ndarray (n_cells, 2)
        Cell-centred gradients of the transported scalar.
    bc_column : int
        Column of mesh.boundary_types / boundary_values for this scalar.
    scheme, limiter : str
        "Upwind" or "TVD" (deferred correction with MUSCL / OSPRE / H_Cui).

    Returns
    -------
    row, col, data : ndarray
        Triplet format describing the sparse coefficient matrix.
    b : ndarray
        RHS vector.
    """
    n_cells = mesh.cell_volumes.shape[0]
    n_internal = mesh.internal_faces.shape[0]
    n_boundary = mesh.boundary_faces.shape[0]

    # ––– pessimistic non-zero count ––––––––––––––––––––––––––––––––––––––––
    # internal face: 4 entries, boundary face: 1 entry
    max_nnz = 4 * n_internal + n_boundary + n_cells
    row = np.zeros(max_nnz, dtype=np.int64)
    col = np.zeros(max_nnz, dtype=np.int64)
    data = np.zeros(max_nnz, dtype=np.float64)

    idx = 0  # running write position
    b = np.zeros(n_cells, dtype=np.float64)

    # every row gets a diagonal entry, even a cell with no active faces
    for c in range(n_cells):
        row[idx] = c; col[idx] = c; data[idx] = 0.0; idx += 1

    # ––– internal faces ––––––––––––––––––––––––––––––––––––––––––––––––––––
    for i in range(n_internal):
        f = mesh.internal_faces[i]
        P = mesh.owner_cells[f]
        N = mesh.neighbor_cells[f]
        g_f = mesh.face_interp_factors[f]
        gamma_f = (1.0 - g_f) * gamma[P] + g_f * gamma[N]

        # -- convection term (upwind + deferred correction) --
        a_P, a_N, b_corr_conv = compute_convective_stencil(
            f, mesh, mdot[f], grad_phi, phi, scheme, limiter
        )

        # -- orthogonal diffusion --
        D_f = compute_diffusive_flux_matrix_entry(f, mesh, gamma_f)
        # -- non-orthogonal correction (explicit) --
        b_corr_diff = compute_diffusive_correction(f, grad_phi, mesh, gamma_f)

        row[idx] = P; col[idx] = P; data[idx] = a_P + D_f; idx += 1
        row[idx] = P; col[idx] = N; data[idx] = a_N - D_f; idx += 1
        row[idx] = N; col[idx] = N; data[idx] = -a_N + D_f; idx += 1
        row[idx] = N; col[idx] = P; data[idx] = -a_P - D_f; idx += 1

        b[P] += b_corr_diff - b_corr_conv
        b[N] -= b_corr_diff - b_corr_conv

    # ––– boundary faces ––––––––––––––––––––––––––––––––––––––––––––––––––––
    for i in range(n_boundary):
        f = mesh.boundary_faces[i]
        bc_type = mesh.boundary_types[f, bc_column]
        bc_val = mesh.boundary_values[f, bc_column]
        P = mesh.owner_cells[f]

        a_P_diff, b_P_diff = compute_boundary_diffusive_correction(
            f, grad_phi, mesh, gamma[P], bc_type, bc_val
        )
        a_P_conv, b_P_conv = compute_boundary_convective_flux(
            f, mesh, mdot[f], phi, bc_type, bc_val
        )

        row[idx] = P; col[idx] = P; data[idx] = a_P_diff + a_P_conv; idx += 1
        b[P] += b_P_diff + b_P_conv

    # ––– trim overallocation –––––––––––––––––––––––––––––––––––––––––––––––
    return row[:idx], col[:idx], data[:idx], b
