from numba import njit, prange
import numpy as np


@njit(parallel=False)
def relax_equation(rhs, A_diag, phi, alpha):
    """
    Patankar-style implicit under-relaxation of a scalar transport system.
    Returns the relaxed diagonal and right-hand side; the inputs are untouched.
    """
    inv_alpha = 1.0 / alpha
    scale = (1.0 - alpha) / alpha
    n = rhs.shape[0]
    relaxed_diagonal = np.zeros(n, dtype=np.float64)
    relaxed_rhs = np.zeros(n, dtype=np.float64)

    for i in prange(n):
        a = A_diag[i]
        relaxed_diagonal[i] = a * inv_alpha
        relaxed_rhs[i] = rhs[i] + scale * a * phi[i]

    return relaxed_diagonal, relaxed_rhs


@njit(parallel=False)
def compute_residual(data, indices, indptr, x, b):
    """
    r = b - A x for a CSR matrix given by (data, indices, indptr).

    Returns ||r|| / ||b|| and the residual field.
    """
    n = b.shape[0]
    res_field = np.zeros(n, dtype=np.float64)
    res_sq = 0.0
    b_sq = 0.0

    for i in range(n):
        r_i = b[i]
        for j in range(indptr[i], indptr[i + 1]):
            r_i -= data[j] * x[indices[j]]
        res_field[i] = r_i
        res_sq += r_i * r_i
        b_sq += b[i] * b[i]

    return np.sqrt(res_sq) / max(np.sqrt(b_sq), 1e-300), res_field


def as_cell_field(value, n_cells, name):
    """Broadcast a scalar or validate a per-cell array; returns a float64 copy."""
    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim == 0:
        return np.full(n_cells, float(arr), dtype=np.float64)
    if arr.shape != (n_cells,):
        raise ValueError(
            f"{name} must be a scalar or have shape ({n_cells},), got {arr.shape}"
        )
    return arr.copy()


def borrowed_array(value, shape, name):
    """
    Return ``value`` itself when it is a float64 ndarray of ``shape``.

    Anything that would need a conversion copy is rejected, since the caller
    expects in-place updates to be seen on the next correct().
    """
    if not isinstance(value, np.ndarray) or value.dtype != np.float64:
        kind = type(value).__name__ if not isinstance(value, np.ndarray) else f"{value.dtype} array"
        raise ValueError(f"{name} must be a float64 numpy array, got {kind}")
    if value.shape != shape:
        raise ValueError(f"{name} must have shape {shape}, got {value.shape}")
    return value


def borrowed_cell_field(value, n_cells, name):
    """A scalar is broadcast into an owned field; a per-cell array is kept by reference."""
    if np.ndim(value) == 0 and not isinstance(value, np.ndarray):
        return np.full(n_cells, float(value), dtype=np.float64)
    return borrowed_array(value, (n_cells,), name)
