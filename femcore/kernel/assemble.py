# femcore/kernel/assemble.py
"""
ASSEMBLY: Dimension-Agnostic Global Matrix Assembly
===================================================

Scatter-add of element contributions into the global K and F. Assembly
does not care about element type; it needs only the total DOF count
and, per element, a DOF map plus a matrix (or vector) of matching size.

    for each element:
        for each (a, b) in ke:
            K[dof_map[a], dof_map[b]] += ke[a, b]

The same rule serves the 8×8 plane quadrilateral and the 12×12 beam.
"""

from typing import List, Sequence, Tuple

import numpy as np


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]],
) -> np.ndarray:
    """
    Assemble the global stiffness matrix.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system
    contributions : List[Tuple[Sequence[int], np.ndarray]]
        (dof_map, ke) per element, ke already in global coordinates and
        of shape (len(dof_map), len(dof_map))

    Returns:
    --------
    np.ndarray
        Global stiffness matrix K, shape (ndof, ndof). Symmetric positive
        semi-definite until boundary conditions are applied.
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        n = len(dof_map)
        if ke.shape != (n, n):
            raise ValueError(f"Element ke shape {ke.shape} doesn't match dof_map length {n}")
        idx = np.asarray(dof_map, dtype=int)
        # np.add.at accumulates repeated indices (degenerate triangles share a node twice)
        np.add.at(K, np.ix_(idx, idx), ke)

    return K


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]],
) -> np.ndarray:
    """
    Assemble a global load vector from (dof_map, fe) pairs, e.g. the
    equivalent nodal loads of distributed element loads.
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        n = len(dof_map)
        if fe.shape != (n,):
            raise ValueError(f"Element fe shape {fe.shape} doesn't match dof_map length {n}")
        np.add.at(F, np.asarray(dof_map, dtype=int), fe)

    return F


def add_nodal_load(
    F: np.ndarray,
    node_dofs: Sequence[int],
    load_vector: Sequence[float],
) -> None:
    """
    Add a point load to the global load vector (in-place).

    Parameters:
    -----------
    F : np.ndarray
        Global load vector (modified in-place)
    node_dofs : Sequence[int]
        Global DOF indices of the loaded node (``DOFManager.node_dofs``)
    load_vector : Sequence[float]
        Components in DOF order: [Fx, Fy] for plane models,
        [Fx, Fy, Fz, Mx, My, Mz] for beam models
    """
    if len(load_vector) != len(node_dofs):
        raise ValueError(f"Load has {len(load_vector)} components for {len(node_dofs)} DOFs")
    for i, val in zip(node_dofs, load_vector):
        F[i] += val
