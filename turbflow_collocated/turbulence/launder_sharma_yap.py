"""
Launder-Sharma low-Reynolds k-epsilon model with Yap correction.

    Launder, B.E. and Sharma, B.I. (1974), "Application of the energy
    dissipation model of turbulence to the calculation of flow near a
    spinning disc", Letters in Heat and Mass Transfer 1, 131-138.

    Yap, C.R. (1987), "Turbulent heat and momentum transfer in recirculating
    and impinging flows", PhD thesis, Faculty of Technology, University of
    Manchester.

Default coefficients (sub-dictionary ``LaunderSharmaKEYapCoeffs``):

    Cmu 0.09, C1 1.44, C2 1.92, C3 -0.33,
    alphah 1.0, alphahk 1.0, alphaEps 0.76923, Cyap 0.83, kappa 0.41

epsilon is the modified (epsilon-tilde) dissipation, zero at walls.
"""

import copy
from enum import Enum

import numpy as np

from turbflow_collocated.assembly.scalar_equation import DDT_SCHEMES
from turbflow_collocated.core.helpers import as_cell_field, borrowed_cell_field
from turbflow_collocated.core.solver_interface import TurbulenceModelBase
from turbflow_collocated.linear_solvers.scipy_solver import ScipyDirectSolver
from turbflow_collocated.turbulence.coefficients import (
    COEFFS_DICT_NAME,
    coefficients_from_dict,
    load_config,
    model_options,
)
from turbflow_collocated.turbulence.damping import damping_functions
from turbflow_collocated.turbulence.epsilon_equation import assemble_epsilon_equation, solve_epsilon_equation
from turbflow_collocated.turbulence.k_equation import assemble_k_equation, solve_k_equation
from turbflow_collocated.turbulence.sources import (
    GRADIENT_SCHEMES,
    extra_near_wall_term,
    near_wall_correction,
    production,
    velocity_divergence,
    velocity_gradient,
)
from turbflow_collocated.turbulence.state import TurbulentState, bound
from turbflow_collocated.turbulence.viscosity import update_viscosity

CONVECTION_SCHEMES = ("Upwind", "TVD")
LIMITERS = ("MUSCL", "OSPRE", "H_Cui")

DEFAULT_K0 = 1.0e-6
DEFAULT_EPSILON0 = 1.0e-6


class CycleStage(Enum):
    IDLE = "idle"
    DAMPING_COMPUTED = "damping computed"
    EPSILON_SOLVED = "epsilon solved"
    K_SOLVED = "k solved"
    VISCOSITY_UPDATED = "viscosity updated"


class LaunderSharmaKEYap(TurbulenceModelBase):
    """
    Launder-Sharma k-epsilon closure with the Yap near-wall length-scale correction.

    The model owns k, epsilon and nut. U, phi, per-cell alpha and rho, the
    transport model and the wall distance are borrowed from the flow solver
    and re-read on every correct(); the wall distance is kept as a
    read-only view.
    """

    def __init__(
        self,
        mesh,
        U,
        phi,
        transport,
        wall_distance,
        alpha=1.0,
        rho=1.0,
        config=None,
        k0=None,
        epsilon0=None,
        linear_solver=None,
    ):
        super().__init__(
            mesh, U, phi, transport,
            linear_solver if linear_solver is not None else ScipyDirectSolver(),
        )

        y = np.asarray(wall_distance, dtype=np.float64)
        if y.shape != (self.n_cells,):
            raise ValueError(f"wall_distance must have shape ({self.n_cells},), got {y.shape}")
        y = y.view()
        y.flags.writeable = False
        self.y = y

        self.alpha = borrowed_cell_field(alpha, self.n_cells, "alpha")
        self.rho = borrowed_cell_field(rho, self.n_cells, "rho")

        self._config_source = config
        config_dict = load_config(config)
        self.coeffs = coefficients_from_dict(config_dict.get(COEFFS_DICT_NAME))
        self.options = model_options(config_dict)
        self._check_options()
        self.near_wall = near_wall_correction(self.options["nearWallCorrection"])

        k_field = as_cell_field(DEFAULT_K0 if k0 is None else k0, self.n_cells, "k0")
        eps_field = as_cell_field(DEFAULT_EPSILON0 if epsilon0 is None else epsilon0, self.n_cells, "epsilon0")
        self.state = TurbulentState(
            k_field,
            eps_field,
            np.zeros(self.n_cells, dtype=np.float64),
            k_min=self.options["kMin"],
            epsilon_min=self.options["epsilonMin"],
        )
        bound(self.state.k, self.state.k_min, "k")
        bound(self.state.epsilon, self.state.epsilon_min, "epsilon")
        self.correct_nut()

        self._active = False
        self._stage = CycleStage.IDLE
        self.stage_history = [CycleStage.IDLE]

    def _check_options(self):
        opts = self.options
        if not isinstance(opts["turbulence"], bool):
            raise ValueError(f"turbulence must be true or false, got {opts['turbulence']!r}")
        if opts["convectionScheme"] not in CONVECTION_SCHEMES:
            raise ValueError(
                f"Unknown convectionScheme '{opts['convectionScheme']}', expected one of {CONVECTION_SCHEMES}"
            )
        if opts["limiter"] not in LIMITERS:
            raise ValueError(f"Unknown limiter '{opts['limiter']}', expected one of {LIMITERS}")
        if opts["gradScheme"] not in GRADIENT_SCHEMES:
            raise ValueError(
                f"Unknown gradScheme '{opts['gradScheme']}', expected one of {tuple(GRADIENT_SCHEMES)}"
            )
        if opts["ddtScheme"] not in DDT_SCHEMES:
            raise ValueError(f"Unknown ddtScheme '{opts['ddtScheme']}', expected one of {DDT_SCHEMES}")
        if opts["ddtScheme"] == "Euler":
            if opts["deltaT"] is None or not float(opts["deltaT"]) > 0.0:
                raise ValueError("ddtScheme Euler needs a positive deltaT")
            opts["deltaT"] = float(opts["deltaT"])
        for name in ("kMin", "epsilonMin"):
            opts[name] = float(opts[name])
            if not opts[name] > 0.0:
                raise ValueError(f"{name} must be positive, got {opts[name]}")
        for name in ("k", "epsilon"):
            factor = float(opts["relaxationFactors"].get(name, 1.0))
            if not 0.0 < factor <= 1.0:
                raise ValueError(f"relaxationFactors.{name} must be in (0, 1], got {factor}")
            opts["relaxationFactors"][name] = factor

    # ------------------------------------------------------------------
    # Field access
    # ------------------------------------------------------------------
    @property
    def stage(self):
        return self._stage

    def k(self):
        return self.state.k

    def epsilon(self):
        return self.state.epsilon

    def nut(self):
        return self.state.nut

    def DkEff(self):
        """Effective diffusivity for k: nut/sigma_k + nu."""
        return self.state.nut / self.coeffs.sigma_k + self.transport.nu()

    def DepsilonEff(self):
        """Effective diffusivity for epsilon: nut/sigma_eps + nu."""
        return self.state.nut / self.coeffs.sigma_eps + self.transport.nu()

    def alphat(self):
        """Turbulent thermal diffusivity for enthalpy, alpha rho alphah nut."""
        return self.alpha * self.rho * self.coeffs.alphah * self.state.nut

    def gradient(self, q, bc_column):
        return GRADIENT_SCHEMES[self.options["gradScheme"]](self.mesh, q, bc_column)

    # ------------------------------------------------------------------
    # Coefficients
    # ------------------------------------------------------------------
    def read(self):
        """Re-read the coefficient source; replace the coefficients only if a value changed."""
        if self._active:
            raise RuntimeError("read() called during an active correction cycle")
        config_dict = load_config(self._config_source)
        new_coeffs = coefficients_from_dict(config_dict.get(COEFFS_DICT_NAME))
        if new_coeffs == self.coeffs:
            return False
        self.coeffs = new_coeffs
        return True

    # ------------------------------------------------------------------
    # Correction cycle
    # ------------------------------------------------------------------
    def correct_nut(self):
        update_viscosity(self.state, self.coeffs, self.transport.nu())

    def _enter(self, stage):
        self._stage = stage
        self.stage_history.append(stage)

    def correct(self):
        """
        One correction cycle: damping and sources, epsilon solve, k solve,
        eddy viscosity update.

        Returns a report with the initial residual of each equation and the
        number of cells clipped by the floors. A failed solve raises
        RuntimeError and leaves the fields of that stage untouched.
        """
        report = {"epsilon_residual": None, "k_residual": None, "epsilon_clipped": 0, "k_clipped": 0}
        if not self.options["turbulence"]:
            return report
        if self._active:
            raise RuntimeError("LaunderSharmaKEYap.correct() is not reentrant")

        self.stage_history = [CycleStage.IDLE]
        self._active = True
        try:
            nu = self.transport.nu()
            gradU = velocity_gradient(self.mesh, self.U, self.options["gradScheme"])
            divU = velocity_divergence(self.mesh, self.U)
            G = production(self.state.nut, gradU)
            E = extra_near_wall_term(self.mesh, nu, self.state.nut, gradU)
            _, f2 = damping_functions(self.state.k, self.state.epsilon, nu)
            self._enter(CycleStage.DAMPING_COMPUTED)

            eps_eqn = assemble_epsilon_equation(self, f2, G, E, divU)
            eps_new, report["epsilon_clipped"] = solve_epsilon_equation(self, eps_eqn)
            self.state.epsilon[:] = eps_new
            report["epsilon_residual"] = float(eps_eqn.residual)
            self._enter(CycleStage.EPSILON_SOLVED)

            k_eqn = assemble_k_equation(self, G)
            k_new, report["k_clipped"] = solve_k_equation(self, k_eqn)
            self.state.k[:] = k_new
            report["k_residual"] = float(k_eqn.residual)
            self._enter(CycleStage.K_SOLVED)

            self.correct_nut()
            self._enter(CycleStage.VISCOSITY_UPDATED)
        finally:
            self._stage = CycleStage.IDLE
            self._active = False
        self.stage_history.append(CycleStage.IDLE)
        return report

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------
    def __copy__(self):
        raise TypeError(
            "LaunderSharmaKEYap owns its turbulence fields and cannot be shallow-copied; use copy()"
        )

    def __deepcopy__(self, memo):
        clone = object.__new__(type(self))
        memo[id(self)] = clone
        # borrowed collaborators are shared, owned state is cloned
        for name in ("mesh", "transport", "linear_solver", "U", "phi", "y", "alpha", "rho"):
            setattr(clone, name, getattr(self, name))
        clone.n_cells = self.n_cells
        clone.n_faces = self.n_faces
        clone._config_source = copy.deepcopy(self._config_source, memo)
        clone.coeffs = self.coeffs
        clone.options = copy.deepcopy(self.options, memo)
        clone.near_wall = type(self.near_wall)()
        clone.state = self.state.copy()
        clone._active = False
        clone._stage = CycleStage.IDLE
        clone.stage_history = list(self.stage_history)
        return clone

    def copy(self):
        """Explicit deep clone with independent k, epsilon and nut."""
        return copy.deepcopy(self)
