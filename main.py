import numpy as np

from turbflow_collocated.mesh import generate_structured_channel, compute_wall_distance
from turbflow_collocated.mesh.mesh_loader import load_boundary_config
from turbflow_collocated.assembly.face_flux import mdot_calculation
from turbflow_collocated.turbulence import LaunderSharmaKEYap, NewtonianTransport

# Channel geometry and flow parameters
bc_file = "shared_configs/domain/boundaries_channel.yaml"
turbulence_file = "shared_configs/turbulence/launderSharmaKEYap.yaml"
Lx, Ly = 4.0, 1.0
nx, ny = 40, 40
grading = 2.0
reynolds_number = 5000
U_bulk = 1.0
max_iter = 200
tolerance = 1e-6

mesh = generate_structured_channel(
    Lx=Lx, Ly=Ly, nx=nx, ny=ny, grading=grading,
    boundary_conditions=load_boundary_config(bc_file),
)
n_cells = mesh.cell_volumes.shape[0]

# Frozen developed velocity profile (1/7th power law) standing in for the momentum solver
y_c = mesh.cell_centers[:, 1]
eta = np.clip(1.0 - np.abs(2.0 * y_c / Ly - 1.0), 0.0, 1.0)
U = np.zeros((n_cells, 2))
U[:, 0] = 8.0 / 7.0 * U_bulk * eta ** (1.0 / 7.0)
rho = np.ones(n_cells)
phi = mdot_calculation(mesh, rho, U)

nu = U_bulk * Ly / reynolds_number
model = LaunderSharmaKEYap(
    mesh, U, phi,
    transport=NewtonianTransport(nu, n_cells),
    wall_distance=compute_wall_distance(mesh),
    config=turbulence_file,
    k0=1.0e-3,
    epsilon0=1.0e-3,
)

print("Running Launder-Sharma k-epsilon (Yap) on a frozen channel profile...")
for i in range(max_iter):
    report = model.correct()
    print(
        f"Iteration {i}: epsilon_residuals = {report['epsilon_residual']:.3e}, "
        f"k_residuals = {report['k_residual']:.3e}, "
        f"max nut/nu = {model.nut().max() / nu:.3e}"
    )
    if report["epsilon_residual"] < tolerance and report["k_residual"] < tolerance:
        print(f"Converged at iteration {i}")
        break

centre = np.argmin(np.abs(mesh.cell_centers[:, 0] - 0.5 * Lx) + np.abs(y_c - 0.5 * Ly))
print(f"Centreline k = {model.k()[centre]:.4e}, epsilon = {model.epsilon()[centre]:.4e}, nut = {model.nut()[centre]:.4e}")
