import numpy as np
from numba import njit, prange

# distance assigned when the mesh carries no wall patch (e.g. fully open domain)
NO_WALL_DISTANCE = 1.0
MIN_WALL_DISTANCE = 1.0e-12


@njit(parallel=True)
def _nearest_wall_kernel(cell_centers, vertices, face_vertices, wall_faces):
    n_cells = cell_centers.shape[0]
    y = np.empty(n_cells, dtype=np.float64)
    for c in prange(n_cells):
        px = cell_centers[c, 0]
        py = cell_centers[c, 1]
        best = np.inf
        for i in range(wall_faces.shape[0]):
            f = wall_faces[i]
            ax = vertices[face_vertices[f, 0], 0]
            ay = vertices[face_vertices[f, 0], 1]
            bx = vertices[face_vertices[f, 1], 0]
            by = vertices[face_vertices[f, 1], 1]
            ex = bx - ax
            ey = by - ay
            len_sq = ex * ex + ey * ey
            t = 0.0
            if len_sq > 0.0:
                t = ((px - ax) * ex + (py - ay) * ey) / len_sq
                t = min(max(t, 0.0), 1.0)
            dx = px - (ax + t * ex)
            dy = py - (ay + t * ey)
            d = (dx * dx + dy * dy) ** 0.5
            if d < best:
                best = d
        y[c] = best
    return y


def compute_wall_distance(mesh):
    """
    Minimum distance from every cell centre to the nearest wall face.

    Wall faces are the boundary faces whose velocity condition is ``wall``.
    Distances are measured to the face segment, not just its centre, so cells
    next to long wall faces get their true normal distance.
    """
    wall_faces = mesh.wall_faces
    if wall_faces.shape[0] == 0:
        return np.full(mesh.cell_centers.shape[0], NO_WALL_DISTANCE)

    y = _nearest_wall_kernel(mesh.cell_centers, mesh.vertices, mesh.face_vertices, wall_faces)
    return np.maximum(y, MIN_WALL_DISTANCE)
