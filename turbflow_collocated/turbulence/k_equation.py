from turbflow_collocated.assembly.scalar_equation import ScalarEquation
from turbflow_collocated.mesh.bc_types import K_IDX
from turbflow_collocated.turbulence.state import bound


def assemble_k_equation(model, G):
    """
    ddt(alpha rho k) + div(phi k) - laplacian(alpha rho DkEff, k)
      = alpha rho G - Sp(alpha rho eps/k, k) + k_source

    Uses the already updated epsilon.
    """
    options = model.options
    k = model.state.k
    eps = model.state.epsilon
    alpha_rho = model.alpha * model.rho

    eqn = ScalarEquation(
        "k",
        model.mesh,
        model.phi,
        alpha_rho * model.DkEff(),
        k,
        model.gradient(k, K_IDX),
        K_IDX,
        options["convectionScheme"],
        options["limiter"],
    )
    eqn.ddt(options["ddtScheme"], alpha_rho, options["deltaT"])
    eqn.su(alpha_rho * G)
    eqn.sp(alpha_rho * eps / k)
    eqn.su(model.near_wall.k_source(model))
    eqn.relax(options["relaxationFactors"]["k"])
    return eqn


def solve_k_equation(model, eqn):
    k_new = eqn.solve(model.linear_solver)
    n_clipped = bound(k_new, model.state.k_min, "k")
    return k_new, n_clipped
