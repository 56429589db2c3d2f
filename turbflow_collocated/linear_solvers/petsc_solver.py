import numpy as np
from scipy.sparse import csr_matrix

from turbflow_collocated.linear_solvers.base_solver import BaseLinearSolver


class PetscSolver(BaseLinearSolver):
    """
    PETSc KSP backend (install the ``petsc`` extra).

    Config keys: ``ksp_type`` (default "bcgs"), ``pc_type`` (default "ilu"),
    ``rtol``, ``atol``, ``maxiter``. The KSP object is created on the first
    solve and reused afterwards; command-line PETSc options still apply.
    """

    def __init__(self, config: dict = None):
        self.config = config if config is not None else {}
        self.ksp_type = self.config.get("ksp_type", "bcgs")
        self.pc_type = self.config.get("pc_type", "ilu")
        self.rtol = float(self.config.get("rtol", 1e-8))
        self.atol = float(self.config.get("atol", 1e-12))
        self.maxiter = int(self.config.get("maxiter", 10000))
        self.ksp = None
        self.residual_norm = None

    def _make_ksp(self, PETSc):
        ksp = PETSc.KSP().create()
        ksp.setType(self.ksp_type)
        ksp.setTolerances(rtol=self.rtol, atol=self.atol, max_it=self.maxiter)
        ksp.getPC().setType(self.pc_type)
        ksp.setFromOptions()
        return ksp

    def solve(self, A_matrix, b_vector: np.ndarray, x0: np.ndarray = None) -> np.ndarray:
        from petsc4py import PETSc

        A_csr = csr_matrix(A_matrix)
        n = A_csr.shape[0]
        A_petsc = PETSc.Mat().createAIJ(size=A_csr.shape, csr=(A_csr.indptr, A_csr.indices, A_csr.data))
        A_petsc.assemble()
        b_petsc = PETSc.Vec().createWithArray(np.ascontiguousarray(b_vector, dtype=np.float64))
        x_petsc = PETSc.Vec().createSeq(n)

        if self.ksp is None:
            self.ksp = self._make_ksp(PETSc)
        self.ksp.setOperators(A_petsc)
        if x0 is not None:
            x_petsc.setArray(np.ascontiguousarray(x0, dtype=np.float64))
        self.ksp.setInitialGuessNonzero(x0 is not None)

        try:
            self.ksp.solve(b_petsc, x_petsc)
            reason = self.ksp.getConvergedReason()
            if reason <= 0:
                raise RuntimeError(f"PETSc {self.ksp_type} did not converge. Reason: {reason}")

            r_petsc = b_petsc.duplicate()
            A_petsc.mult(x_petsc, r_petsc)
            r_petsc.aypx(-1.0, b_petsc)
            self.residual_norm = r_petsc.norm()
            r_petsc.destroy()

            x = x_petsc.getArray().copy()
        finally:
            A_petsc.destroy()
            b_petsc.destroy()
            x_petsc.destroy()

        if not np.all(np.isfinite(x)):
            raise RuntimeError("PETSc returned a non-finite solution")
        return x
