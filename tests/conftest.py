# conftest.py

import numpy as np
import pytest

from turbflow_collocated.linear_solvers.scipy_solver import ScipyDirectSolver
from turbflow_collocated.mesh import generate_structured_channel, build_mesh
from turbflow_collocated.mesh.structured_channel import PATCH_NAMES, wall_clustered_coordinates

# every patch zero gradient for k and epsilon, no walls
CLOSED_BOX_BCS = {
    name: {"velocity": {"bc": "neumann"}} for name in ("bottom", "right", "top", "left")
}


def triangle_channel(Lx=1.0, Ly=1.0, nx=6, ny=8, grading=0.0, boundary_conditions=None):
    """Same channel as the structured generator, with every quad split into two triangles."""
    x = np.linspace(0.0, Lx, nx + 1)
    y = wall_clustered_coordinates(Ly, ny, grading)
    X, Y = np.meshgrid(x, y)
    points = np.column_stack([X.ravel(), Y.ravel()])

    def node(i, j):
        return j * (nx + 1) + i

    tris = []
    for j in range(ny):
        for i in range(nx):
            a, b, c, d = node(i, j), node(i + 1, j), node(i + 1, j + 1), node(i, j + 1)
            tris.append([a, b, c])
            tris.append([a, c, d])

    lines, tags = [], []
    for i in range(nx):
        lines += [[node(i, 0), node(i + 1, 0)], [node(i, ny), node(i + 1, ny)]]
        tags += [1, 3]
    for j in range(ny):
        lines += [[node(nx, j), node(nx, j + 1)], [node(0, j), node(0, j + 1)]]
        tags += [2, 4]

    if boundary_conditions is None:
        boundary_conditions = {
            "bottom": {"velocity": {"bc": "wall"}},
            "top": {"velocity": {"bc": "wall"}},
        }
    return build_mesh(
        points,
        np.array(tris, dtype=np.int64),
        np.array(lines, dtype=np.int64),
        np.array(tags, dtype=np.int64),
        physical_id_to_name=PATCH_NAMES,
        boundary_conditions=boundary_conditions,
    )


MESH_BUILDERS = {
    "channel_uniform": lambda: generate_structured_channel(Lx=1.0, Ly=1.0, nx=6, ny=8),
    "channel_graded": lambda: generate_structured_channel(Lx=2.0, Ly=1.0, nx=8, ny=12, grading=1.5),
    "channel_triangles": lambda: triangle_channel(Lx=1.0, Ly=1.0, nx=5, ny=6),
}


@pytest.fixture
def mesh_instance(mesh_label):
    return MESH_BUILDERS[mesh_label]()


def pytest_generate_tests(metafunc):
    if "mesh_label" in metafunc.fixturenames:
        metafunc.parametrize("mesh_label", list(MESH_BUILDERS))


@pytest.fixture
def channel_mesh():
    return generate_structured_channel(Lx=1.0, Ly=1.0, nx=6, ny=8)


@pytest.fixture
def closed_box_mesh():
    return generate_structured_channel(
        Lx=1.0, Ly=1.0, nx=4, ny=4, boundary_conditions=CLOSED_BOX_BCS
    )


class FailingSolver:
    """Linear solver stub that fails on the given call numbers (1-based)."""

    def __init__(self, fail_on=(1,), inner=None):
        self.fail_on = set(fail_on)
        self.inner = inner if inner is not None else ScipyDirectSolver()
        self.calls = 0

    def solve(self, A, b, x0=None):
        self.calls += 1
        if self.calls in self.fail_on:
            raise RuntimeError("solver blew up")
        return self.inner.solve(A, b, x0=x0)


@pytest.fixture
def failing_solver():
    return FailingSolver
