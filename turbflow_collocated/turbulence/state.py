import numpy as np
from numba import njit, prange


@njit(parallel=True)
def _bound_kernel(q, q_min):
    n = q.shape[0]
    clipped = np.zeros(n, dtype=np.int64)
    for i in prange(n):
        if not q[i] >= q_min:
            q[i] = q_min
            clipped[i] = 1
    return clipped.sum()


def bound(q, q_min, name):
    """
    Clip q in place to [q_min, inf). NaN counts as below the floor.
    Prints the pre-clip statistics when any cell was clipped; returns the count.
    """
    q_min_before = np.nanmin(q) if np.any(np.isfinite(q)) else np.nan
    q_max_before = np.nanmax(q) if np.any(np.isfinite(q)) else np.nan
    q_avg_before = np.nanmean(q) if np.any(np.isfinite(q)) else np.nan
    n_clipped = _bound_kernel(q, q_min)
    if n_clipped > 0:
        print(
            f"bounding {name}, min: {q_min_before:.6g}, max: {q_max_before:.6g}, "
            f"average: {q_avg_before:.6g} ({n_clipped} cells)"
        )
    return int(n_clipped)


class TurbulentState:
    """Owned k, epsilon and nut fields plus their floors. Fields are updated in place."""

    def __init__(self, k, epsilon, nut, k_min=1.0e-15, epsilon_min=1.0e-15):
        self.k = k
        self.epsilon = epsilon
        self.nut = nut
        self.k_min = float(k_min)
        self.epsilon_min = float(epsilon_min)

    def copy(self):
        return TurbulentState(
            self.k.copy(), self.epsilon.copy(), self.nut.copy(), self.k_min, self.epsilon_min
        )
