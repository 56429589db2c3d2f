import numpy as np
from scipy.sparse.linalg import spsolve, bicgstab, spilu, LinearOperator
from scipy.sparse import csr_matrix, issparse

from turbflow_collocated.linear_solvers.base_solver import BaseLinearSolver


def _check_system(name, A_matrix, b_vector):
    if not issparse(A_matrix):
        raise ValueError(f"{name}: A_matrix must be a scipy sparse matrix.")
    if A_matrix.shape[0] != A_matrix.shape[1]:
        raise ValueError(f"{name}: Matrix is not square ({A_matrix.shape}).")
    if A_matrix.shape[0] != b_vector.shape[0]:
        raise ValueError(
            f"{name}: Matrix rows ({A_matrix.shape[0]}) and RHS vector length ({b_vector.shape[0]}) do not match."
        )
    if A_matrix.format != "csr":
        A_matrix = csr_matrix(A_matrix)
    return A_matrix


class ScipyDirectSolver(BaseLinearSolver):
    """
    A direct linear solver using SciPy's spsolve for sparse matrices.
    """

    def __init__(self, config: dict = None):
        self.config = config if config is not None else {}

    def solve(self, A_matrix, b_vector: np.ndarray, x0: np.ndarray = None) -> np.ndarray:
        """
        Solves A*x = b with spsolve. x0 is accepted for interface symmetry and ignored.

        Raises:
        - ValueError: If matrix and vector dimensions do not match.
        - RuntimeError: If spsolve fails or returns a non-finite solution.
        """
        A_matrix = _check_system("ScipyDirectSolver", A_matrix, b_vector)
        if A_matrix.shape[0] == 0:
            return np.array([])

        try:
            solution = spsolve(A_matrix, b_vector)
        except Exception as e:
            print(f"[ERROR] ScipyDirectSolver: SciPy spsolve failed. Exception: {e}")
            raise RuntimeError(f"SciPy spsolve failed: {e}") from e

        solution = np.atleast_1d(np.asarray(solution, dtype=np.float64))
        if not np.all(np.isfinite(solution)):
            raise RuntimeError("SciPy spsolve returned a non-finite solution")
        return solution


class ScipyBiCGSTABSolver(BaseLinearSolver):
    """
    Preconditioned BiCGSTAB (incomplete-LU preconditioner) for the
    non-symmetric transport matrices. Raises when the iteration does not converge.

    config keys: rtol (1e-8), atol (1e-14), maxiter (1000), ilu (True).
    """

    def __init__(self, config: dict = None):
        self.config = config if config is not None else {}
        self.rtol = float(self.config.get("rtol", 1e-8))
        self.atol = float(self.config.get("atol", 1e-14))
        self.maxiter = int(self.config.get("maxiter", 1000))
        self.use_ilu = bool(self.config.get("ilu", True))

    def solve(self, A_matrix, b_vector: np.ndarray, x0: np.ndarray = None) -> np.ndarray:
        A_matrix = _check_system("ScipyBiCGSTABSolver", A_matrix, b_vector)
        if A_matrix.shape[0] == 0:
            return np.array([])

        M = None
        if self.use_ilu:
            try:
                ilu = spilu(A_matrix.tocsc())
            except RuntimeError as e:
                raise RuntimeError(f"ILU preconditioner failed: {e}") from e
            M = LinearOperator(A_matrix.shape, ilu.solve)

        solution, info = bicgstab(
            A_matrix, b_vector, x0=x0, rtol=self.rtol, atol=self.atol,
            maxiter=self.maxiter, M=M,
        )
        if info > 0:
            raise RuntimeError(f"BiCGSTAB did not converge in {info} iterations")
        if info < 0:
            raise RuntimeError(f"BiCGSTAB breakdown (info={info})")
        if not np.all(np.isfinite(solution)):
            raise RuntimeError("BiCGSTAB returned a non-finite solution")
        return solution
