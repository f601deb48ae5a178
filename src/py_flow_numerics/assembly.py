"""Edge loop over the faces of a mesh

This module implements the scatter of face residuals into cell residuals and of the face Jacobians
into a block-sparse Jacobian. It is the reference consumer of ``UpwindGeneralRoe`` used to verify
the discrete conservation of the scheme; it does not solve for anything.

Copyright (C) 2025 Simon Ehrmanntraut - All Rights Reserved
"""

import logging
from collections.abc import Sequence
from typing import NamedTuple

import numpy as np
from scipy.sparse import bsr_array
from scipy.sparse import csr_array

from .core import UpwindGeneralRoe
from .exceptions import ConfigurationError
from .state import FaceState

logger = logging.getLogger(__name__)


class EdgeAssembly(NamedTuple):
    """Assembled residuals and Jacobian

    Attributes:
        residuals: Cell residuals in shape ``(num_cells,n_var)``.
        jacobian: Jacobian of the stacked cell residuals wrt the stacked conserved variables as CSR
            matrix in shape ``(num_cells*n_var,num_cells*n_var)``. ``None`` in explicit mode.
        num_degenerate: Number of faces whose Roe state lost hyperbolicity.
    """

    residuals: np.ndarray
    jacobian: csr_array | None
    num_degenerate: int


def _assemble_bsr(
    blocks: dict[tuple[int, int], np.ndarray],
    num_cells: int,
    n_var: int,
) -> csr_array:
    """Assembles summed blocks as sparse CSR matrix

    Args:
        blocks: Blocks in shape ``(n_var,n_var)`` by block row and block column.
        num_cells: Number of block rows and columns.
        n_var: Block size.

    Returns:
        Matrix as CSR matrix.
    """
    keys = sorted(blocks)
    rows = np.array([row for row, _ in keys], dtype=np.intc)
    indices = np.array([col for _, col in keys], dtype=np.intc)
    index_pointers = np.zeros(num_cells + 1, dtype=np.intc)
    np.cumsum(np.bincount(rows, minlength=num_cells), out=index_pointers[1:])
    data = np.array([blocks[key] for key in keys]).reshape(len(keys), n_var, n_var)
    return bsr_array(
        (data, indices, index_pointers), shape=(num_cells * n_var, num_cells * n_var),
    ).tocsr()


def assemble_edge_residuals(
    numerics: UpwindGeneralRoe,
    states: Sequence[FaceState],
    edges: np.ndarray,
    normals: np.ndarray,
) -> EdgeAssembly:
    """Loops over the faces and scatters their contributions to the adjacent cells

    The residual of a face is added to cell i and subtracted from cell j, for the normal pointing
    from i to j.

    Args:
        numerics: Face numerics.
        states: State of each cell.
        edges: Adjacent cells `(i,j)` of each face in shape ``(num_faces,2)``.
        normals: Normal of each face in shape ``(num_faces,n_dim)``.

    Returns:
        Cell residuals, Jacobian (implicit mode only) and number of degenerate faces.

    Raises:
        ConfigurationError: If the shapes of ``edges`` and ``normals`` do not match.
    """
    edges = np.asarray(edges)
    normals = np.asarray(normals)
    num_cells, n_var = len(states), numerics.n_var
    if edges.ndim != 2 or edges.shape[1] != 2 or normals.shape != (len(edges), numerics.n_dim):
        raise ConfigurationError(
            f"Incorrect edge shapes. Got {edges.shape} and {normals.shape}, expected "
            f"(num_faces, 2) and (num_faces, {numerics.n_dim})")
    residuals = np.zeros((num_cells, n_var), dtype=numerics.dtype)
    blocks: dict[tuple[int, int], np.ndarray] = {}
    num_degenerate = 0
    for (i, j), normal in zip(edges, normals):
        face = numerics.compute_residual(states[i], states[j], normal)
        num_degenerate += face.degenerate
        residuals[i] += face.residual
        residuals[j] -= face.residual
        if numerics.implicit:
            for (row, col), block in (
                ((i, i), face.jacobian_i), ((i, j), face.jacobian_j),
                ((j, i), -face.jacobian_i), ((j, j), -face.jacobian_j),
            ):
                blocks[row, col] = blocks[row, col] + block if (row, col) in blocks else block
    if num_degenerate:
        logger.debug("%d of %d faces lost hyperbolicity", num_degenerate, len(edges))
    jacobian = _assemble_bsr(blocks, num_cells, n_var) if numerics.implicit else None
    return EdgeAssembly(residuals, jacobian, num_degenerate)
