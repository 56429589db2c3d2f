"""
Explicit source fields shared by the k and epsilon equations, and the
near-wall source strategies selected at model construction.

All returned fields are per unit volume; the equations multiply by the
cell volume when they add them to the right-hand side.
"""

import numpy as np
from numba import njit, prange

from turbflow_collocated.assembly.divergence import compute_cell_divergence
from turbflow_collocated.assembly.face_flux import mdot_calculation
from turbflow_collocated.discretization.gradient import leastSquares, gauss
from turbflow_collocated.mesh.bc_types import U_IDX, V_IDX
from turbflow_collocated.turbulence.yap import yap_source

GRADIENT_SCHEMES = {
    "leastSquares": leastSquares.compute_cell_gradients,
    "Gauss": gauss.compute_cell_gradients,
}


def velocity_gradient(mesh, U, scheme="leastSquares"):
    """gradU[c, i, j] = d U_i / d x_j, using the velocity boundary values."""
    grad = GRADIENT_SCHEMES[scheme]
    n_cells = U.shape[0]
    gradU = np.zeros((n_cells, 2, 2), dtype=np.float64)
    gradU[:, 0, :] = grad(mesh, np.ascontiguousarray(U[:, 0]), U_IDX)
    gradU[:, 1, :] = grad(mesh, np.ascontiguousarray(U[:, 1]), V_IDX)
    return gradU


@njit(parallel=True)
def production(nut, gradU):
    """
    G = nut * (gradU : dev(twoSymm(gradU))), dev taken with trace/3.
    """
    n = nut.shape[0]
    G = np.empty(n, dtype=np.float64)
    for c in prange(n):
        contraction = 0.0
        for i in range(2):
            for j in range(2):
                contraction += gradU[c, i, j] * (gradU[c, i, j] + gradU[c, j, i])
        divU = gradU[c, 0, 0] + gradU[c, 1, 1]
        G[c] = nut[c] * (contraction - (2.0 / 3.0) * divU * divU)
    return G


def mag_sqr_grad_grad(mesh, gradU):
    """sum_i |grad(grad U_i)|^2 with a Green-Gauss gradient of each gradient component."""
    n_cells = gradU.shape[0]
    total = np.zeros(n_cells, dtype=np.float64)
    for i in range(2):
        for j in range(2):
            second = gauss.compute_cell_gradients(mesh, np.ascontiguousarray(gradU[:, i, j]), -1)
            total += second[:, 0] ** 2 + second[:, 1] ** 2
    return total


def extra_near_wall_term(mesh, nu, nut, gradU):
    """E = 2 nu nut magSqr(grad(grad(U)))."""
    return 2.0 * nu * nut * mag_sqr_grad_grad(mesh, gradU)


def velocity_divergence(mesh, U):
    """div(U) per unit volume from the volumetric face flux U_f . S_f."""
    ones = np.ones(U.shape[0], dtype=np.float64)
    flux = mdot_calculation(mesh, ones, np.ascontiguousarray(U))
    return compute_cell_divergence(mesh, flux)


class NearWallSource:
    """Extra explicit sources for the k and epsilon equations (per unit volume)."""

    name = "none"

    def k_source(self, model):
        return np.zeros(model.n_cells, dtype=np.float64)

    def epsilon_source(self, model):
        return np.zeros(model.n_cells, dtype=np.float64)


class NoNearWallCorrection(NearWallSource):
    """Plain Launder-Sharma: no additional sources."""


class YapCorrection(NearWallSource):
    """Yap length-scale correction added to the epsilon equation."""

    name = "yap"

    def epsilon_source(self, model):
        coeffs = model.coeffs
        S = yap_source(model.state.k, model.state.epsilon, model.y, coeffs.Cyap, coeffs.kappa)
        return model.alpha * model.rho * S


NEAR_WALL_CORRECTIONS = {
    "yap": YapCorrection,
    "none": NoNearWallCorrection,
}


def near_wall_correction(name):
    key = str(name).lower()
    if key not in NEAR_WALL_CORRECTIONS:
        raise ValueError(
            f"Unknown nearWallCorrection '{name}', expected one of {sorted(NEAR_WALL_CORRECTIONS)}"
        )
    return NEAR_WALL_CORRECTIONS[key]()
