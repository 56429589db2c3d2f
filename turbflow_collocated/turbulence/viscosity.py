import numpy as np
from numba import njit, prange

from turbflow_collocated.turbulence.damping import fMu_function


@njit(parallel=True)
def eddy_viscosity(k, epsilon, fMu, Cmu):
    """nut = Cmu fMu k^2 / epsilon, clamped to [0, inf)."""
    n = k.shape[0]
    nut = np.empty(n, dtype=np.float64)
    for i in prange(n):
        nut[i] = max(Cmu * fMu[i] * k[i] * k[i] / epsilon[i], 0.0)
    return nut


def update_viscosity(state, coeffs, nu):
    """Recompute nut in place from the current k and epsilon (fMu re-evaluated on them)."""
    fMu = fMu_function(state.k, state.epsilon, nu)
    state.nut[:] = eddy_viscosity(state.k, state.epsilon, fMu, coeffs.Cmu)
    return state.nut
