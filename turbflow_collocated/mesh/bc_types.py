# Boundary condition type identifiers, shared by the mesh loader and every
# face kernel. Numba folds these module globals into compile-time constants.
BC_WALL = 0
BC_DIRICHLET = 1
BC_INLET = 2
BC_OUTLET = 3
BC_NEUMANN = 4
BC_ZEROGRADIENT = 5

# Map from string names to type constants
BC_TYPE_MAP = {
    "wall": BC_WALL,
    "dirichlet": BC_DIRICHLET,
    "fixedvalue": BC_DIRICHLET,
    "inlet": BC_INLET,
    "outlet": BC_OUTLET,
    "neumann": BC_NEUMANN,
    "zerogradient": BC_ZEROGRADIENT,
}

# Columns of mesh.boundary_types / mesh.boundary_values
U_IDX = 0
V_IDX = 1
P_IDX = 2  # pressure, parsed for the flow solver sharing the mesh; no closure kernel reads it
K_IDX = 3
EPS_IDX = 4
N_BC_COLUMNS = 5
