import numpy as np
from numba import njit

from turbflow_collocated.mesh.bc_types import BC_WALL, BC_DIRICHLET, BC_INLET, BC_NEUMANN

EPS = 1.0e-14


# ──────────────────────────────────────────────────────────────────────────────
# Internal faces
# ──────────────────────────────────────────────────────────────────────────────
@njit(inline="always")
def compute_diffusive_flux_matrix_entry(f, mesh, gamma_f):
    """
    Over‑relaxed implicit conductance for one internal face.

    Parameters
    ----------
    f : int
        Face index.
    mesh : MeshData2D
        Pre‑computed geometric data (contains vector_E_f, vector_d_CE, etc.).
    gamma_f : float
        Diffusion coefficient Γ interpolated to the face.

    Returns
    -------
    D_f : float
        Positive conductance that multiplies (φ_N − φ_P) in the matrix
        stencil.
    """
    E_f = mesh.vector_E_f[f]
    d_CE = mesh.vector_d_CE[f]

    E_mag = np.sqrt(E_f[0] * E_f[0] + E_f[1] * E_f[1]) + EPS
    d_mag = np.sqrt(d_CE[0] * d_CE[0] + d_CE[1] * d_CE[1]) + EPS

    # ---- over‑relaxed orthogonal conductance (Eq 8.58) --------------------
    return gamma_f * E_mag / d_mag


@njit(inline="always")
def compute_diffusive_correction(f, grad_phi, mesh, gamma_f):
    """Explicit non-orthogonal diffusion flux Γ_f (∇φ)_f · T_f entering the owner cell."""
    P = mesh.owner_cells[f]
    N = mesh.neighbor_cells[f]
    T_f = mesh.vector_T_f[f]

    g_f = mesh.face_interp_factors[f]
    grad_f0 = (1.0 - g_f) * grad_phi[P, 0] + g_f * grad_phi[N, 0]
    grad_f1 = (1.0 - g_f) * grad_phi[P, 1] + g_f * grad_phi[N, 1]
    return gamma_f * (grad_f0 * T_f[0] + grad_f1 * T_f[1])


# ──────────────────────────────────────────────────────────────────────────────
# Boundary faces
# ──────────────────────────────────────────────────────────────────────────────
@njit(inline="always")
def compute_boundary_diffusive_correction(f, grad_phi, mesh, gamma_b, bc_type, bc_val):
    """
    Return (a_P, b_P), both written to the owner cell only.

       a_P : diagonal coefficient to add
       b_P : RHS increment to add (b[P] += b_P)

    Supports:
    - BC_WALL / BC_DIRICHLET / BC_INLET (fixed value)
    - BC_NEUMANN (fixed normal gradient bc_val)
    - anything else: zero gradient, no contribution
    """
    P = mesh.owner_cells[f]
    a_P = 0.0
    b_P = 0.0

    if bc_type == BC_WALL or bc_type == BC_DIRICHLET or bc_type == BC_INLET:
        E_f = mesh.vector_E_f[f]
        T_f = mesh.vector_T_f[f]
        E_mag = np.sqrt(E_f[0] * E_f[0] + E_f[1] * E_f[1]) + EPS
        a_P = gamma_b * E_mag / (mesh.d_Cb[f] + EPS)
        b_P = a_P * bc_val

        # --- explicit non-orthogonal correction (FluxV_b) ---
        b_P += gamma_b * (grad_phi[P, 0] * T_f[0] + grad_phi[P, 1] * T_f[1])

    elif bc_type == BC_NEUMANN:
        b_P = gamma_b * bc_val * mesh.face_areas[f]

    return a_P, b_P
