from numba import njit
import numpy as np


@njit
def compute_divergence_from_face_fluxes(mesh, face_fluxes):
    """Net outflow sum_f F_f per cell; F_f is oriented owner -> neighbour."""
    net = np.zeros(mesh.cell_volumes.shape[0])
    for f in range(face_fluxes.shape[0]):
        net[mesh.owner_cells[f]] += face_fluxes[f]
        N = mesh.neighbor_cells[f]
        if N >= 0:
            net[N] -= face_fluxes[f]
    return net


@njit
def compute_cell_divergence(mesh, face_fluxes):
    """div per unit volume, (1/V_C) sum_f F_f."""
    return compute_divergence_from_face_fluxes(mesh, face_fluxes) / mesh.cell_volumes
