from abc import ABC, abstractmethod
import numpy as np

from turbflow_collocated.core.helpers import borrowed_array


class TurbulenceModelBase(ABC):
    """
    Abstract Base Class for RANS closures driven by an outer flow solver.

    The flow solver only relies on this capability set: read the turbulence
    fields, ask for the eddy viscosity, run one correction per outer
    iteration and reload coefficients between iterations.
    """

    def __init__(self, mesh, U, phi, transport, linear_solver):
        """
        Parameters:
        - mesh: MeshData2D object.
        - U: float64 cell velocity array (n_cells, 2), borrowed and re-read on every correct().
        - phi: float64 face mass flux array (n_faces,), borrowed, oriented owner -> neighbour.
          Inputs that would need a dtype or layout conversion raise ValueError.
        - transport: object with a nu() method returning the molecular viscosity per cell.
        - linear_solver: an object with a .solve(A, b, x0=None) method.
        """
        self.mesh = mesh
        self.transport = transport
        self.linear_solver = linear_solver
        self.n_cells = mesh.cell_volumes.shape[0]
        self.n_faces = mesh.face_areas.shape[0]

        self.U = borrowed_array(U, (self.n_cells, 2), "U")
        self.phi = borrowed_array(phi, (self.n_faces,), "phi")

    @abstractmethod
    def k(self) -> np.ndarray:
        """Turbulent kinetic energy per cell."""

    @abstractmethod
    def epsilon(self) -> np.ndarray:
        """Turbulent kinetic energy dissipation rate per cell."""

    @abstractmethod
    def nut(self) -> np.ndarray:
        """Turbulent (eddy) kinematic viscosity per cell."""

    @abstractmethod
    def correct(self) -> dict:
        """Solve the turbulence transport equations and update nut."""

    @abstractmethod
    def read(self) -> bool:
        """Re-read the model coefficients; True if any of them changed."""

    def nuEff(self) -> np.ndarray:
        """Effective kinematic viscosity nut + nu for the momentum equation."""
        return self.nut() + self.transport.nu()
