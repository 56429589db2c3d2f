import numpy as np
from numpy.testing import assert_allclose

from turbflow_collocated.mesh import compute_wall_distance, generate_structured_channel
from conftest import CLOSED_BOX_BCS, triangle_channel


def test_channel_wall_distance_is_distance_to_nearest_wall():
    Ly = 2.0
    mesh = generate_structured_channel(Lx=3.0, Ly=Ly, nx=5, ny=10, grading=1.2)
    y = compute_wall_distance(mesh)
    yc = mesh.cell_centers[:, 1]
    assert_allclose(y, np.minimum(yc, Ly - yc), rtol=1e-12)


def test_triangle_wall_distance_positive_and_bounded():
    mesh = triangle_channel(Lx=1.0, Ly=1.0, nx=4, ny=4)
    y = compute_wall_distance(mesh)
    yc = mesh.cell_centers[:, 1]
    assert np.all(y > 0.0)
    assert_allclose(y, np.minimum(yc, 1.0 - yc), rtol=1e-12)


def test_no_walls_gives_unit_distance():
    mesh = generate_structured_channel(nx=3, ny=3, boundary_conditions=CLOSED_BOX_BCS)
    assert mesh.wall_faces.shape[0] == 0
    assert_allclose(compute_wall_distance(mesh), 1.0)
