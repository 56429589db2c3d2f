import numpy as np
from numpy.testing import assert_allclose
from scipy.sparse import coo_matrix
from scipy.sparse.linalg import spsolve

from turbflow_collocated.assembly.convection_diffusion_matrix import assemble_diffusion_convection_matrix
from turbflow_collocated.assembly.divergence import compute_divergence_from_face_fluxes, compute_cell_divergence
from turbflow_collocated.assembly.face_flux import mdot_calculation
from turbflow_collocated.discretization.gradient.leastSquares import compute_cell_gradients
from turbflow_collocated.mesh import generate_structured_channel
from turbflow_collocated.mesh.bc_types import K_IDX


def _solve(mesh, mdot, gamma, phi, scheme="Upwind"):
    n = mesh.cell_volumes.shape[0]
    grad = compute_cell_gradients(mesh, phi, K_IDX)
    row, col, data, b = assemble_diffusion_convection_matrix(mesh, mdot, gamma, phi, grad, K_IDX, scheme, "MUSCL")
    A = coo_matrix((data, (row, col)), shape=(n, n)).tocsr()
    return A, b, spsolve(A, b)


def test_pure_diffusion_between_fixed_walls_is_linear():
    mesh = generate_structured_channel(Lx=1.0, Ly=2.0, nx=3, ny=10, boundary_conditions={
        "bottom": {"velocity": {"bc": "wall"}},
        "top": {"velocity": {"bc": "wall"}, "k": {"bc": "dirichlet", "value": 1.0}},
    })
    n = mesh.cell_volumes.shape[0]
    mdot = np.zeros(mesh.face_areas.shape[0])
    gamma = np.full(n, 0.3)

    A, b, k = _solve(mesh, mdot, gamma, np.zeros(n))

    assert_allclose(k, mesh.cell_centers[:, 1] / 2.0, atol=1e-12)
    # the matrix is an M-matrix: positive diagonal, non-positive off-diagonals
    assert np.all(A.diagonal() > 0.0)
    off = A - coo_matrix((A.diagonal(), (np.arange(n), np.arange(n))), shape=(n, n))
    assert off.max() <= 0.0


def test_uniform_inflow_is_transported_unchanged():
    bcs = {
        "bottom": {"velocity": {"bc": "wall"}, "k": {"bc": "zerogradient"}},
        "top": {"velocity": {"bc": "wall"}, "k": {"bc": "zerogradient"}},
        "left": {"velocity": {"bc": "inlet", "value": [1.0, 0.0]}, "k": {"bc": "inlet", "value": 0.25}},
        "right": {"velocity": {"bc": "outlet"}},
    }
    mesh = generate_structured_channel(Lx=3.0, Ly=1.0, nx=9, ny=4, boundary_conditions=bcs)
    n = mesh.cell_volumes.shape[0]
    U = np.zeros((n, 2))
    U[:, 0] = 1.0
    mdot = mdot_calculation(mesh, np.ones(n), U)
    assert_allclose(compute_divergence_from_face_fluxes(mesh, mdot), 0.0, atol=1e-12)

    for scheme in ("Upwind", "TVD"):
        _, _, k = _solve(mesh, mdot, np.full(n, 1e-3), np.full(n, 0.25), scheme)
        assert_allclose(k, 0.25, rtol=1e-10)


def test_upwind_decays_towards_outlet_without_overshoot():
    bcs = {
        "bottom": {"velocity": {"bc": "wall"}, "k": {"bc": "zerogradient"}},
        "top": {"velocity": {"bc": "wall"}, "k": {"bc": "zerogradient"}},
        "left": {"velocity": {"bc": "inlet", "value": [1.0, 0.0]}, "k": {"bc": "inlet", "value": 1.0}},
        "right": {"velocity": {"bc": "outlet"}, "k": {"bc": "dirichlet", "value": 0.0}},
    }
    mesh = generate_structured_channel(Lx=1.0, Ly=1.0, nx=10, ny=2, boundary_conditions=bcs)
    n = mesh.cell_volumes.shape[0]
    U = np.zeros((n, 2))
    U[:, 0] = 1.0
    mdot = mdot_calculation(mesh, np.ones(n), U)

    _, _, k = _solve(mesh, mdot, np.full(n, 0.01), np.zeros(n))

    assert np.all(k >= 0.0) and np.all(k <= 1.0)
    order = np.argsort(mesh.cell_centers[:, 0], kind="stable")
    row0 = order[mesh.cell_centers[order, 1] < 0.5]
    assert np.all(np.diff(k[row0]) <= 1e-12)


def test_cell_divergence_of_linear_velocity():
    mesh = generate_structured_channel(Lx=1.0, Ly=1.0, nx=5, ny=5, boundary_conditions={
        name: {"velocity": {"bc": "neumann"}} for name in ("bottom", "right", "top", "left")
    })
    n = mesh.cell_volumes.shape[0]
    U = np.zeros((n, 2))
    U[:, 0] = 2.0 * mesh.cell_centers[:, 0]
    mdot = mdot_calculation(mesh, np.ones(n), U)
    div = compute_cell_divergence(mesh, mdot)

    interior = np.ones(n, dtype=bool)
    interior[mesh.owner_cells[mesh.boundary_faces]] = False
    assert_allclose(div[interior], 2.0, rtol=1e-10)
