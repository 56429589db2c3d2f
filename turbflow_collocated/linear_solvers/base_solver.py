from abc import ABC, abstractmethod

import numpy as np


class BaseLinearSolver(ABC):
    """Anything with a ``solve(A, b, x0=None) -> x`` method that raises RuntimeError on failure."""

    @abstractmethod
    def solve(self, A_matrix, b_vector: np.ndarray, x0: np.ndarray = None) -> np.ndarray:
        pass
