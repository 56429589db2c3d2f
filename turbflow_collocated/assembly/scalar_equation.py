import numpy as np
from scipy.sparse import coo_matrix

from turbflow_collocated.assembly.convection_diffusion_matrix import assemble_diffusion_convection_matrix
from turbflow_collocated.core.helpers import relax_equation, compute_residual

DDT_SCHEMES = ("Euler", "steadyState")


class ScalarEquation:
    """
    Finite-volume system A q = b for one transported cell scalar q.

    The transport part div(phi q) - div(Gamma grad q) is assembled at
    construction; source terms are added per unit volume (sp for implicit
    sinks on the diagonal, su for explicit sources on the right-hand side)
    and the system is solved with any linear solver exposing ``solve(A, b, x0)``.
    """

    def __init__(self, name, mesh, mdot, gamma, q, grad_q, bc_column,
                 scheme="Upwind", limiter="MUSCL"):
        self.name = name
        self.mesh = mesh
        self.n_cells = mesh.cell_volumes.shape[0]
        self.volumes = np.asarray(mesh.cell_volumes)
        self.q_old = np.array(q, dtype=np.float64)

        row, col, data, b = assemble_diffusion_convection_matrix(
            mesh, mdot, gamma, self.q_old, grad_q, bc_column, scheme, limiter
        )
        self.A = coo_matrix((data, (row, col)), shape=(self.n_cells, self.n_cells)).tocsr()
        self.b = b
        self.residual = np.nan

    def ddt(self, scheme, weight, delta_t=None):
        """Time derivative d(weight q)/dt around the current values (Euler) or nothing (steadyState)."""
        if scheme == "steadyState":
            return self
        if scheme != "Euler":
            raise ValueError(f"Unknown ddtScheme '{scheme}', expected one of {DDT_SCHEMES}")
        if delta_t is None or not delta_t > 0.0:
            raise ValueError("Euler ddtScheme needs a positive deltaT")
        coeff = weight * self.volumes / delta_t
        self.A.setdiag(self.A.diagonal() + coeff)
        self.b += coeff * self.q_old
        return self

    def sp(self, coeff):
        """Implicit source -coeff*q (coeff >= 0 makes it a sink on the diagonal)."""
        self.A.setdiag(self.A.diagonal() + coeff * self.volumes)
        return self

    def su(self, source):
        """Explicit source added to the right-hand side."""
        self.b += source * self.volumes
        return self

    def relax(self, alpha):
        if alpha >= 1.0:
            return self
        if not alpha > 0.0:
            raise ValueError(f"{self.name}: relaxation factor must be in (0, 1], got {alpha}")
        A_diag = self.A.diagonal()
        relaxed_diag, self.b = relax_equation(self.b, A_diag, self.q_old, alpha)
        self.A.setdiag(relaxed_diag)
        return self

    def solve(self, linear_solver):
        """
        Solve into a new array; the caller decides whether to keep it.

        Raises RuntimeError naming the equation when the solver fails or the
        solution is not finite.
        """
        try:
            q = linear_solver.solve(self.A, self.b, x0=self.q_old)
        except RuntimeError as e:
            raise RuntimeError(f"{self.name} equation solve failed: {e}") from e
        q = np.asarray(q, dtype=np.float64)
        if q.shape != (self.n_cells,) or not np.all(np.isfinite(q)):
            raise RuntimeError(f"{self.name} equation solve returned a non-finite solution")

        self.residual, _ = compute_residual(
            self.A.data, self.A.indices, self.A.indptr, self.q_old, self.b
        )
        return q
