import numpy as np
from numpy.testing import assert_allclose

from turbflow_collocated.assembly.face_flux import mdot_calculation
from turbflow_collocated.mesh import compute_wall_distance
from turbflow_collocated.turbulence import LaunderSharmaKEYap, ModelCoefficients, NewtonianTransport
from turbflow_collocated.turbulence.damping import damping_functions, fMu_function
from turbflow_collocated.turbulence.epsilon_equation import assemble_epsilon_equation
from turbflow_collocated.turbulence.k_equation import assemble_k_equation
from turbflow_collocated.turbulence.sources import (
    extra_near_wall_term,
    production,
    velocity_gradient,
)
from turbflow_collocated.turbulence.state import TurbulentState
from turbflow_collocated.turbulence.viscosity import eddy_viscosity, update_viscosity


def _shear_model(mesh, config=None, nu=1e-4):
    n = mesh.cell_volumes.shape[0]
    U = np.zeros((n, 2))
    U[:, 0] = 4.0 * mesh.cell_centers[:, 1] * (1.0 - mesh.cell_centers[:, 1])
    phi = mdot_calculation(mesh, np.ones(n), U)
    rng = np.random.default_rng(11)
    return LaunderSharmaKEYap(
        mesh, U, phi, NewtonianTransport(nu, n), compute_wall_distance(mesh),
        config=config,
        k0=rng.uniform(1e-3, 1e-2, n),
        epsilon0=rng.uniform(1e-3, 1e-2, n),
    )


def _sources(model):
    nu = model.transport.nu()
    gradU = velocity_gradient(model.mesh, model.U)
    G = production(model.nut(), gradU)
    E = extra_near_wall_term(model.mesh, nu, model.nut(), gradU)
    _, f2 = damping_functions(model.k(), model.epsilon(), nu)
    return f2, G, E


def test_production_of_simple_motions():
    nut = np.array([2.0, 2.0, 2.0])
    gradU = np.zeros((3, 2, 2))
    gradU[0, 0, 1] = 3.0                     # shear du/dy
    gradU[1, 0, 0], gradU[1, 1, 1] = 1.5, -1.5  # plane strain
    gradU[2, 0, 0], gradU[2, 1, 1] = 1.0, 1.0   # dilatation
    G = production(nut, gradU)
    assert_allclose(G, [2.0 * 9.0, 2.0 * 4.0 * 1.5 ** 2, 2.0 * 4.0 / 3.0], rtol=1e-12)


def test_production_vanishes_without_velocity_gradient(closed_box_mesh):
    n = closed_box_mesh.cell_volumes.shape[0]
    gradU = velocity_gradient(closed_box_mesh, np.zeros((n, 2)))
    assert_allclose(production(np.ones(n), gradU), 0.0)
    assert_allclose(extra_near_wall_term(closed_box_mesh, np.ones(n), np.ones(n), gradU), 0.0)


def test_extra_term_vanishes_for_linear_velocity(closed_box_mesh):
    mesh = closed_box_mesh
    n = mesh.cell_volumes.shape[0]
    U = np.zeros((n, 2))
    U[:, 0] = 2.0 * mesh.cell_centers[:, 1] + mesh.cell_centers[:, 0]
    gradU = velocity_gradient(mesh, U)
    assert_allclose(gradU[:, 0, 1], 2.0, rtol=1e-6)
    E = extra_near_wall_term(mesh, np.full(n, 1e-3), np.ones(n), gradU)
    assert_allclose(E, 0.0, atol=1e-8)


def test_dilatation_term_vanishes_with_zero_c3(channel_mesh):
    model = _shear_model(channel_mesh, config={"LaunderSharmaKEYapCoeffs": {"C3": 0.0}})
    f2, G, E = _sources(model)
    n = model.n_cells
    divU = np.random.default_rng(5).uniform(-10.0, 10.0, n)

    b_with = assemble_epsilon_equation(model, f2, G, E, divU).b
    b_without = assemble_epsilon_equation(model, f2, G, E, np.zeros(n)).b
    assert np.array_equal(b_with, b_without)

    model_c3 = _shear_model(channel_mesh)
    b_c3 = assemble_epsilon_equation(model_c3, f2, G, E, divU).b
    b_c3_zero = assemble_epsilon_equation(model_c3, f2, G, E, np.zeros(n)).b
    assert_allclose(
        b_c3 - b_c3_zero,
        -0.33 * model_c3.epsilon() * divU * channel_mesh.cell_volumes,
        rtol=1e-9, atol=1e-15,
    )


def test_epsilon_dissipation_is_implicit(channel_mesh):
    base = _shear_model(channel_mesh)
    doubled = _shear_model(channel_mesh, config={"LaunderSharmaKEYapCoeffs": {"C2": 3.84}})
    f2, G, E = _sources(base)
    divU = np.zeros(base.n_cells)

    eq_base = assemble_epsilon_equation(base, f2, G, E, divU)
    eq_doubled = assemble_epsilon_equation(doubled, f2, G, E, divU)

    sink = 1.92 * f2 * base.epsilon() / base.k() * channel_mesh.cell_volumes
    assert_allclose(eq_doubled.A.diagonal() - eq_base.A.diagonal(), sink, rtol=1e-9)
    assert_allclose(eq_doubled.b, eq_base.b)


def test_k_equation_production_and_sink(channel_mesh):
    model = _shear_model(channel_mesh)
    n = model.n_cells
    G = np.linspace(0.0, 1.0, n)

    eq0 = assemble_k_equation(model, np.zeros(n))
    eqG = assemble_k_equation(model, G)
    assert_allclose(eqG.b - eq0.b, G * channel_mesh.cell_volumes, rtol=1e-12, atol=1e-18)

    # the epsilon/k sink sits on the diagonal
    no_sink = assemble_k_equation(model, np.zeros(n))
    no_sink.sp(-model.epsilon() / model.k())
    assert np.all(eq0.A.diagonal() - no_sink.A.diagonal() > 0.0)


def test_viscosity_update_uses_current_fields():
    k = np.array([1e-3, 2e-2, 1e-15, 0.5])
    eps = np.array([1e-3, 1e-4, 1e-15, 1e-2])
    nu = np.full(4, 1e-5)

    state = TurbulentState(k, eps, np.full(4, -1.0))

    nut = update_viscosity(state, ModelCoefficients(), nu)
    assert nut is state.nut
    expected = 0.09 * fMu_function(k, eps, nu) * k ** 2 / eps
    assert_allclose(state.nut, expected, rtol=1e-12)
    assert np.all(state.nut >= 0.0)


def test_eddy_viscosity_clamps_negative_values():
    nut = eddy_viscosity(np.array([1.0]), np.array([1.0]), np.array([-0.5]), 0.09)
    assert nut[0] == 0.0
