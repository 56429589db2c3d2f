import numpy as np
from numba import njit, prange


@njit(parallel=True)
def turbulent_reynolds_number(k, epsilon, nu):
    """Ret = k^2 / (nu epsilon)."""
    n = k.shape[0]
    Ret = np.empty(n, dtype=np.float64)
    for i in prange(n):
        Ret[i] = k[i] * k[i] / (nu[i] * epsilon[i])
    return Ret


@njit(parallel=True)
def fMu_function(k, epsilon, nu):
    """fMu = exp(-3.4 / (1 + Ret/50)^2)"""
    Ret = turbulent_reynolds_number(k, epsilon, nu)
    fMu = np.empty(Ret.shape[0], dtype=np.float64)
    for i in prange(Ret.shape[0]):
        fMu[i] = np.exp(-3.4 / ((1.0 + Ret[i] / 50.0) ** 2))
    return fMu


@njit(parallel=True)
def damping_functions(k, epsilon, nu):
    """
    Launder-Sharma damping functions.

        fMu = exp(-3.4 / (1 + Ret/50)^2)
        f2  = 1 - 0.3 exp(-Ret^2)

    Returns new arrays (fMu, f2). k and epsilon are assumed floored above
    zero, so Ret is always finite.
    """
    Ret = turbulent_reynolds_number(k, epsilon, nu)
    n = Ret.shape[0]
    fMu = np.empty(n, dtype=np.float64)
    f2 = np.empty(n, dtype=np.float64)
    for i in prange(n):
        fMu[i] = np.exp(-3.4 / ((1.0 + Ret[i] / 50.0) ** 2))
        f2[i] = 1.0 - 0.3 * np.exp(-Ret[i] * Ret[i])
    return fMu, f2
