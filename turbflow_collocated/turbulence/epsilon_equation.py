from turbflow_collocated.assembly.scalar_equation import ScalarEquation
from turbflow_collocated.mesh.bc_types import EPS_IDX
from turbflow_collocated.turbulence.state import bound


def assemble_epsilon_equation(model, f2, G, E, divU):
    """
    ddt(alpha rho eps) + div(phi eps) - laplacian(alpha rho DepsilonEff, eps)
      = C1 alpha rho G eps/k - Sp(C2 f2 alpha rho eps/k, eps)
        + C3 alpha rho eps divU + alpha rho E + epsilon_source

    Dissipation is the only implicit term. G, E and divU are per unit volume.
    """
    coeffs = model.coeffs
    options = model.options
    k = model.state.k
    eps = model.state.epsilon
    alpha_rho = model.alpha * model.rho

    eqn = ScalarEquation(
        "epsilon",
        model.mesh,
        model.phi,
        alpha_rho * model.DepsilonEff(),
        eps,
        model.gradient(eps, EPS_IDX),
        EPS_IDX,
        options["convectionScheme"],
        options["limiter"],
    )
    eqn.ddt(options["ddtScheme"], alpha_rho, options["deltaT"])
    eqn.su(coeffs.C1 * alpha_rho * G * eps / k)
    eqn.sp(coeffs.C2 * f2 * alpha_rho * eps / k)
    if coeffs.C3 != 0.0:
        eqn.su(coeffs.C3 * alpha_rho * eps * divU)
    eqn.su(alpha_rho * E)
    eqn.su(model.near_wall.epsilon_source(model))
    eqn.relax(options["relaxationFactors"]["epsilon"])
    return eqn


def solve_epsilon_equation(model, eqn):
    """Solve into a scratch array and bound it; the owned field is not touched."""
    eps_new = eqn.solve(model.linear_solver)
    n_clipped = bound(eps_new, model.state.epsilon_min, "epsilon")
    return eps_new, n_clipped
