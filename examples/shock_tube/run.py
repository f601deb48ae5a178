#!/usr/bin/env python

"""Solves Sod's shock tube problem with the implicit generalized Roe scheme

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

from argparse import ArgumentParser

import numpy as np
from scipy.sparse import identity
from scipy.sparse.linalg import spsolve

from py_flow_numerics import HEAT_RATIO
from py_flow_numerics import NumericsConfig
from py_flow_numerics import TimeIntegration
from py_flow_numerics import UpwindGeneralRoe
from py_flow_numerics import assemble_edge_residuals
from py_flow_numerics import get_ideal_gas_state

parser = ArgumentParser(
    description="Solves Sod's shock tube problem on a row of 2D cells by backward Euler.")
parser.add_argument(
    "--cells", type=int, default=200,
    help="Number of cells on the unit interval. (default: %(default)s)")
parser.add_argument(
    "--cfl", type=float, default=2.,
    help="Courant number of the time step. (default: %(default)s)")
parser.add_argument(
    "--end-time", type=float, default=0.2,
    help="Time at which to stop. (default: %(default)s)")
parser.add_argument(
    "--output", type=str, default="sod.dat",
    help="File to write the final profile to. (default: %(default)s)")
args = parser.parse_args()

print(f"{'Cells:':<25} {args.cells}")
print(f"{'CFL:':<25} {args.cfl}")
print(f"{'End time:':<25} {args.end_time}")

# Cell size of unit height, i.e. faces have unit area
cell_size = 1. / args.cells
centers = (np.arange(args.cells) + 0.5) * cell_size

# Conserved variables including one ghost cell at each end, which keep their initial state
conservative = np.zeros((args.cells + 2, 4))
left = np.hstack((True, centers < 0.5, False))
conservative[:, 0] = np.where(left, 1., 0.125)
conservative[:, -1] = np.where(left, 1., 0.1) / (HEAT_RATIO - 1.)

# Faces between consecutive cells with normals in positive x-direction
edges = np.column_stack((np.arange(args.cells + 1), np.arange(1, args.cells + 2)))
normals = np.tile([1., 0.], (args.cells + 1, 1))
interior = slice(4, 4 * (args.cells + 1))

numerics = UpwindGeneralRoe(2, NumericsConfig(time_integration=TimeIntegration.EULER_IMPLICIT))

print(f"\nBackward Euler:\n{'it':>6} {'time':>10} {'residual':>15} {'degenerate':>10}")
time = 0.
nt = 0
while time < args.end_time:
    states = [get_ideal_gas_state(u) for u in conservative]

    # Time step from the largest characteristic speed
    max_speed = max(
        np.abs(state.velocity[0]) + np.sqrt(state.sound_speed2) for state in states)
    time_step_size = min(args.cfl * cell_size / max_speed, args.end_time - time)

    # Compute residuals and Jacobian based on the current states
    assembly = assemble_edge_residuals(numerics, states, edges, normals)
    residuals = assembly.residuals[1:-1].ravel()
    print(f"{nt:>6} {time:>10.4f} {np.max(np.abs(residuals)):>15.1e} "
          f"{assembly.num_degenerate:>10}")

    # Solve `(V/Δt + ∂R/∂U)⋅ΔU = -R` for the interior cells
    jacobian = assembly.jacobian[interior, interior]
    shift = identity(residuals.size, format="csr") * (cell_size / time_step_size)
    update = spsolve((shift + jacobian).tocsc(), -residuals)

    # Update the interior cells
    conservative[1:-1] += update.reshape(args.cells, 4)
    time += time_step_size
    nt += 1

# Export the profile with columns 'x ρ u p'
states = [get_ideal_gas_state(u) for u in conservative[1:-1]]
np.savetxt(
    args.output,
    np.column_stack((
        centers,
        [state.density for state in states],
        [state.velocity[0] for state in states],
        [state.pressure for state in states],
    )),
    fmt="%+.5e", header="x density velocity pressure",
)
print(f"\nProfile written to {args.output}")
