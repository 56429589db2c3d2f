import numpy as np
from numba import njit, prange

# wall distance floor, a cell centre never sits on the wall
Y_SMALL = 1.0e-12


@njit(parallel=True)
def yap_source(k, epsilon, y, Cyap, kappa):
    """
    Yap length-scale correction (per unit volume, before alpha*rho weighting).

        L    = k^1.5 / epsilon
        Le   = kappa * y
        Syap = Cyap * epsilon^2/k * max((L/Le - 1) * (L/Le)^2, 0)

    Zero wherever L <= Le, positive otherwise.
    """
    n = k.shape[0]
    S = np.empty(n, dtype=np.float64)
    for i in prange(n):
        L = k[i] ** 1.5 / epsilon[i]
        Le = kappa * max(y[i], Y_SMALL)
        ratio = L / Le
        S[i] = Cyap * (epsilon[i] * epsilon[i] / k[i]) * max((ratio - 1.0) * ratio * ratio, 0.0)
    return S
