import numpy as np
import pytest
from numpy.testing import assert_allclose

from turbflow_collocated.discretization.convection.upwind import (
    compute_convective_stencil,
    compute_boundary_convective_flux,
    MUSCL,
    OSPRE,
    H_Cui,
)
from turbflow_collocated.discretization.gradient.leastSquares import compute_cell_gradients
from turbflow_collocated.mesh.bc_types import BC_INLET, BC_OUTLET


def test_upwind_coefficients_follow_flux_direction(channel_mesh):
    mesh = channel_mesh
    phi = mesh.cell_centers[:, 0].copy()
    grad = compute_cell_gradients(mesh, phi)
    f = mesh.internal_faces[0]

    aP, aN, b_corr = compute_convective_stencil(f, mesh, 2.5, grad, phi, "Upwind", "MUSCL")
    assert (aP, aN, b_corr) == (2.5, 0.0, 0.0)

    aP, aN, b_corr = compute_convective_stencil(f, mesh, -1.5, grad, phi, "Upwind", "MUSCL")
    assert (aP, aN, b_corr) == (0.0, -1.5, 0.0)


def test_tvd_correction_vanishes_for_uniform_field(channel_mesh):
    mesh = channel_mesh
    phi = np.full(mesh.cell_volumes.shape[0], 3.0)
    grad = np.zeros((mesh.cell_volumes.shape[0], 2))
    for f in mesh.internal_faces:
        _, _, b_corr = compute_convective_stencil(f, mesh, 1.0, grad, phi, "TVD", "MUSCL")
        assert b_corr == 0.0


def test_tvd_correction_is_central_for_linear_field(channel_mesh):
    """For a linear field r = 1, every limiter gives psi = 1: the face value is the average."""
    mesh = channel_mesh
    phi = 2.0 * mesh.cell_centers[:, 0] + mesh.cell_centers[:, 1]
    grad = np.zeros((mesh.cell_volumes.shape[0], 2))
    grad[:, 0] = 2.0
    grad[:, 1] = 1.0
    for limiter in ("MUSCL", "OSPRE", "H_Cui"):
        for f in mesh.internal_faces:
            P = mesh.owner_cells[f]
            N = mesh.neighbor_cells[f]
            _, _, b_corr = compute_convective_stencil(f, mesh, 1.0, grad, phi, "TVD", limiter)
            assert_allclose(b_corr, 0.5 * (phi[N] - phi[P]), rtol=1e-6)


@pytest.mark.parametrize("limiter", [MUSCL, OSPRE, H_Cui])
def test_limiters_are_tvd(limiter):
    for r in np.linspace(-2.0, 0.0, 5):
        assert limiter(r) == 0.0
    for r in np.linspace(0.01, 10.0, 50):
        psi = limiter(r)
        assert 0.0 <= psi <= 2.0 * r + 1e-9
    assert_allclose(limiter(1.0), 1.0, rtol=1e-9)


def test_boundary_convection(channel_mesh):
    mesh = channel_mesh
    phi = np.arange(mesh.cell_volumes.shape[0], dtype=np.float64)
    f = mesh.boundary_faces[0]
    P = mesh.owner_cells[f]

    assert compute_boundary_convective_flux(f, mesh, 0.7, phi, BC_OUTLET, 0.0) == (0.7, 0.0)
    aP, b = compute_boundary_convective_flux(f, mesh, -0.5, phi, BC_INLET, 4.0)
    assert (aP, b) == (0.0, 2.0)
    aP, b = compute_boundary_convective_flux(f, mesh, -0.5, phi, BC_OUTLET, 4.0)
    assert aP == 0.0
    assert_allclose(b, 0.5 * phi[P])
