import numpy as np
import meshio
import yaml
from numba import njit

from turbflow_collocated.mesh.mesh_data import MeshData2D
from turbflow_collocated.mesh.bc_types import (
    BC_TYPE_MAP,
    BC_WALL,
    BC_DIRICHLET,
    BC_NEUMANN,
    BC_ZEROGRADIENT,
    U_IDX,
    V_IDX,
    P_IDX,
    K_IDX,
    EPS_IDX,
    N_BC_COLUMNS,
)
from .helpers.mesh_loader_helpers import (
    GEOM_EPS,
    _evaluate_bc_value_at_face,
    parse_physical_names,
    _calculate_cell_volumes,
    _face_geometry_kernel,
    _build_cell_faces,
)


def ensure_contiguous(*arrays):
    return [np.ascontiguousarray(a) for a in arrays]


# boundary rows for outer edges that carry no physical tag
UNTAGGED_BC_TYPES = (BC_NEUMANN, BC_NEUMANN, BC_DIRICHLET, BC_ZEROGRADIENT, BC_ZEROGRADIENT)


@njit
def _extract_faces(cells, n_points):
    """
    Unique edges of a triangle/quad mesh.

    Returns (face_vertices, owner, neighbour); the first cell met along an
    edge owns it, the second one (if any) is the neighbour, -1 otherwise.
    """
    n_cells, n_vert = cells.shape
    n_edges = n_cells * n_vert
    edge_a = np.empty(n_edges, dtype=np.int64)
    edge_b = np.empty(n_edges, dtype=np.int64)
    edge_cell = np.empty(n_edges, dtype=np.int64)
    for c in range(n_cells):
        for i in range(n_vert):
            a = cells[c, i]
            b = cells[c, (i + 1) % n_vert]
            e = c * n_vert + i
            edge_a[e] = min(a, b)
            edge_b[e] = max(a, b)
            edge_cell[e] = c

    order = np.argsort(edge_a * n_points + edge_b, kind="mergesort")

    face_vertices = np.empty((n_edges, 2), dtype=np.int64)
    owner = np.empty(n_edges, dtype=np.int64)
    neighbour = np.full(n_edges, -1, dtype=np.int64)
    n_faces = 0
    for idx in range(n_edges):
        e = order[idx]
        if n_faces > 0 and face_vertices[n_faces - 1, 0] == edge_a[e] \
                and face_vertices[n_faces - 1, 1] == edge_b[e]:
            neighbour[n_faces - 1] = edge_cell[e]
            continue
        face_vertices[n_faces, 0] = edge_a[e]
        face_vertices[n_faces, 1] = edge_b[e]
        owner[n_faces] = edge_cell[e]
        n_faces += 1
    return face_vertices[:n_faces], owner[:n_faces], neighbour[:n_faces]


@njit
def _face_centres_and_normals(face_vertices, owner, neighbour, points, cell_centers):
    """Face centres and area vectors S_f pointing owner -> neighbour (outward on boundaries)."""
    n_faces = face_vertices.shape[0]
    centres = np.empty((n_faces, 2))
    S_f = np.empty((n_faces, 2))
    for f in range(n_faces):
        a = face_vertices[f, 0]
        b = face_vertices[f, 1]
        cx = 0.5 * (points[a, 0] + points[b, 0])
        cy = 0.5 * (points[a, 1] + points[b, 1])
        # edge rotated by -90 degrees has the edge length as magnitude
        sx = points[b, 1] - points[a, 1]
        sy = points[a, 0] - points[b, 0]

        P = owner[f]
        N = neighbour[f]
        if N >= 0:
            dx = cell_centers[N, 0] - cell_centers[P, 0]
            dy = cell_centers[N, 1] - cell_centers[P, 1]
        else:
            dx = cx - cell_centers[P, 0]
            dy = cy - cell_centers[P, 1]
        if sx * dx + sy * dy < 0.0:
            sx = -sx
            sy = -sy

        centres[f, 0] = cx
        centres[f, 1] = cy
        S_f[f, 0] = sx
        S_f[f, 1] = sy
    return centres, S_f


def load_boundary_config(bc_config_file):
    """Read the ``boundaries`` mapping of a YAML boundary-condition file."""
    with open(bc_config_file, "r") as f:
        boundary_config = yaml.safe_load(f) or {}
    return boundary_config.get("boundaries", {})


def load_mesh(filename, bc_config_file=None, boundary_conditions=None):
    """
    Load a 2D mesh (triangles or quads) from a Gmsh .msh file
    and return a MeshData2D object with boundary tagging.

    Boundary conditions come either from a YAML file (``bc_config_file``) or
    directly as the ``boundaries`` mapping (``boundary_conditions``).
    """
    physical_names = parse_physical_names(filename)
    if bc_config_file is not None:
        boundary_conditions = load_boundary_config(bc_config_file)
    boundary_conditions = boundary_conditions or {}

    mesh = meshio.read(filename)
    points = np.asarray(mesh.points[:, :2], dtype=np.float64)

    if "triangle" in mesh.cells_dict:
        cells = np.asarray(mesh.cells_dict["triangle"], dtype=np.int64)
    elif "quad" in mesh.cells_dict:
        cells = np.asarray(mesh.cells_dict["quad"], dtype=np.int64)
    else:
        raise ValueError("Unsupported mesh type: must contain triangle or quad cells")

    boundary_lines = np.asarray(mesh.cells_dict.get("line", np.empty((0, 2))), dtype=np.int64)
    boundary_tags = np.asarray(
        mesh.cell_data_dict.get("gmsh:physical", {}).get("line", []), dtype=np.int64
    )
    return build_mesh(
        points,
        cells,
        boundary_lines,
        boundary_tags,
        physical_id_to_name=physical_names,
        boundary_conditions=boundary_conditions,
    )


def _parse_patch_conditions(bc_config_for_patch, x_f, patch_name):
    """
    Translate one patch entry of the boundary mapping into (types, values)
    rows for the [u, v, p, k, epsilon] columns at face centre ``x_f``.
    """
    types = np.empty(N_BC_COLUMNS, dtype=np.int64)
    values = np.zeros(N_BC_COLUMNS, dtype=np.float64)

    vel_bc_spec = bc_config_for_patch.get("velocity", {})
    vel_type = BC_TYPE_MAP.get(vel_bc_spec.get("bc", "neumann").lower())
    if vel_type is None:
        raise ValueError(f"Unknown velocity BC '{vel_bc_spec.get('bc')}' on patch '{patch_name}'")
    eval_vel = _evaluate_bc_value_at_face(vel_bc_spec.get("value", [0.0, 0.0]), x_f, "velocity", patch_name)
    types[U_IDX] = vel_type
    types[V_IDX] = vel_type
    if isinstance(eval_vel, (list, tuple, np.ndarray)) and len(eval_vel) >= 2:
        values[U_IDX] = eval_vel[0]
        values[V_IDX] = eval_vel[1]
    elif isinstance(eval_vel, (int, float, np.number)):
        values[U_IDX] = eval_vel
    if vel_type == BC_WALL:
        # no-slip unless a moving-wall value is given explicitly
        if "value" not in vel_bc_spec:
            values[U_IDX] = 0.0
            values[V_IDX] = 0.0

    p_bc_spec = bc_config_for_patch.get("pressure", {})
    p_type = BC_TYPE_MAP.get(p_bc_spec.get("bc", "dirichlet").lower())
    if p_type is None:
        raise ValueError(f"Unknown pressure BC '{p_bc_spec.get('bc')}' on patch '{patch_name}'")
    types[P_IDX] = p_type
    values[P_IDX] = _evaluate_bc_value_at_face(p_bc_spec.get("value", 0.0), x_f, "pressure", patch_name)

    # k and epsilon vanish at walls in the low-Re formulation
    turb_default = "wall" if vel_type == BC_WALL else "zerogradient"
    for name, column in (("k", K_IDX), ("epsilon", EPS_IDX)):
        spec = bc_config_for_patch.get(name, {})
        bc_type = BC_TYPE_MAP.get(spec.get("bc", turb_default).lower())
        if bc_type is None:
            raise ValueError(f"Unknown {name} BC '{spec.get('bc')}' on patch '{patch_name}'")
        types[column] = bc_type
        values[column] = _evaluate_bc_value_at_face(spec.get("value", 0.0), x_f, name, patch_name)

    return types, values


def build_mesh(
    points,
    cells,
    boundary_lines,
    boundary_tags,
    physical_id_to_name,
    boundary_conditions,
):
    """
    Build a MeshData2D from raw point/cell arrays.

    Parameters
    ----------
    points : ndarray (n_points, 2)
    cells : ndarray (n_cells, 3 or 4)
        Vertex indices, ordered around each cell.
    boundary_lines : ndarray (n_lines, 2)
        Vertex pairs of the tagged boundary edges.
    boundary_tags : ndarray (n_lines,)
        Physical tag of every boundary line.
    physical_id_to_name : dict
        Physical tag -> patch name.
    boundary_conditions : dict
        Patch name -> {"velocity": {...}, "pressure": {...}, "k": {...}, "epsilon": {...}}
    """
    points = np.ascontiguousarray(points, dtype=np.float64)
    cells = np.ascontiguousarray(cells, dtype=np.int64)

    if cells.ndim != 2 or cells.shape[1] not in (3, 4):
        raise ValueError("Unsupported cell shape: cells must be triangles or quads.")
    n_cells = cells.shape[0]

    # --- cells and faces ---
    cell_centers = points[cells].mean(axis=1)
    cell_volumes = _calculate_cell_volumes(points, cells)
    if np.any(cell_volumes < GEOM_EPS):
        raise ValueError("Degenerate cell with zero area in mesh.")

    face_vertices, owner_cells, neighbor_cells = _extract_faces(cells, points.shape[0])
    face_centers, vector_S_f = _face_centres_and_normals(
        face_vertices, owner_cells, neighbor_cells, points, cell_centers
    )
    face_areas = np.linalg.norm(vector_S_f, axis=1)
    n_faces = face_areas.shape[0]

    vector_d_CE, vector_E_f, vector_T_f, face_interp_factors, d_Cb = _face_geometry_kernel(
        owner_cells, neighbor_cells, cell_centers, face_centers, vector_S_f
    )
    internal_faces = np.flatnonzero(neighbor_cells >= 0).astype(np.int64)
    cell_faces = _build_cell_faces(n_cells, owner_cells, neighbor_cells)

    # --- boundary tagging ---
    edge_to_face = {(int(a), int(b)): f for f, (a, b) in enumerate(face_vertices)}
    boundary_patches = np.full(n_faces, -1, dtype=np.int64)
    boundary_types = np.full((n_faces, N_BC_COLUMNS), -1, dtype=np.int64)
    boundary_values = np.zeros((n_faces, N_BC_COLUMNS), dtype=np.float64)

    for line, tag in zip(np.asarray(boundary_lines, dtype=np.int64), np.asarray(boundary_tags)):
        face_id = edge_to_face.get((int(min(line)), int(max(line))))
        if face_id is None or neighbor_cells[face_id] >= 0:
            continue
        patch_name = physical_id_to_name.get(int(tag), f"UnnamedPatch_{int(tag)}")
        types, values = _parse_patch_conditions(
            boundary_conditions.get(patch_name, {}) or {}, face_centers[face_id], patch_name
        )
        boundary_patches[face_id] = int(tag)
        boundary_types[face_id] = types
        boundary_values[face_id] = values

    boundary_faces = np.flatnonzero(neighbor_cells < 0).astype(np.int64)
    untagged = boundary_faces[boundary_types[boundary_faces, U_IDX] < 0]
    boundary_types[untagged] = UNTAGGED_BC_TYPES
    wall_faces = boundary_faces[boundary_types[boundary_faces, U_IDX] == BC_WALL]

    return MeshData2D(*ensure_contiguous(
        cell_volumes, cell_centers,
        face_areas, face_centers,
        owner_cells, neighbor_cells, cell_faces, face_vertices, points,
        vector_S_f, vector_d_CE, vector_E_f, vector_T_f,
        face_interp_factors,
        internal_faces, boundary_faces, boundary_patches, wall_faces,
        boundary_types, boundary_values, d_Cb,
    ))
