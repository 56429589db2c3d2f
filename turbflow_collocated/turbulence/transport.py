import numpy as np


class NewtonianTransport:
    """Constant molecular kinematic viscosity, the transport model handle the closure reads nu from."""

    def __init__(self, nu, n_cells):
        nu = np.asarray(nu, dtype=np.float64)
        if nu.ndim == 0:
            nu = np.full(n_cells, float(nu))
        if nu.shape != (n_cells,):
            raise ValueError(f"nu must be a scalar or have shape ({n_cells},), got {nu.shape}")
        if not np.all(nu > 0.0):
            raise ValueError("Molecular viscosity nu must be positive")
        self._nu = nu

    def nu(self):
        return self._nu
