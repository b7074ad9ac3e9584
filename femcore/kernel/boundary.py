# femcore/kernel/boundary.py
"""
BOUNDARY CONDITIONS: Partitioning, Elimination, Springs
=======================================================

Two ways of imposing supports on K·d = F, both supported:

1. Free/fixed partitioning (beam path)

       [ Kff  Kfs ] [ df ]   [ Ff ]
       [ Ksf  Kss ] [ ds ] = [ Fs ]

   ds is known (zero or prescribed), so only Kff·df = Ff - Kfs·ds is
   solved. See ``kernel.solve.solve_linear``.

2. Elimination by substitution (plane path)

   The full n×n system is kept. For each fixed DOF i with prescribed u0:
       F    -= K[:, i] · u0       (move the known term to the right side)
       K[i, :] = K[:, i] = 0
       K[i, i] = 1,  F[i] = u0
   so the solve returns d[i] = u0 exactly. The load entry at a fixed DOF
   is always overwritten, so a load applied at a support does not leak
   into the solution (it shows up in the reaction instead).

Springs add their stiffness to the diagonal of non-fixed DOFs.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .dof import DOFManager

logger = logging.getLogger(__name__)


@dataclass
class Constraints:
    """Support data translated to global DOF indices."""
    fixed: List[int] = field(default_factory=list)
    values: Dict[int, float] = field(default_factory=dict)
    springs: Dict[int, float] = field(default_factory=dict)

    @property
    def has_prescribed(self) -> bool:
        return any(v != 0.0 for v in self.values.values())


def collect_constraints(supports: Sequence, dof: DOFManager) -> Constraints:
    """
    Translate Support records into fixed DOFs, prescribed values and
    springs. Only the first ``dof.dof_per_node`` entries of each support
    are read. Several supports on one node combine: fixed flags OR
    together, springs add up.
    """
    n = dof.dof_per_node
    fixed = set()
    values: Dict[int, float] = {}
    springs: Dict[int, float] = {}

    for s in supports:
        node_dofs = dof.node_dofs(s.node_id)
        for k in range(n):
            gi = node_dofs[k]
            if s.fixed[k]:
                fixed.add(gi)
                if s.displacements[k] != 0.0 or gi not in values:
                    values[gi] = s.displacements[k]
            elif s.springs[k] > 0.0:
                springs[gi] = springs.get(gi, 0.0) + s.springs[k]

    # A spring on a DOF that another support fixes has no effect
    for gi in fixed:
        springs.pop(gi, None)

    return Constraints(fixed=sorted(fixed), values=values, springs=springs)


def partition_dofs(ndof: int, fixed_dofs: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split 0..ndof-1 into (free, fixed) index arrays, both sorted.
    """
    fixed = np.array(sorted(set(int(i) for i in fixed_dofs)), dtype=int)
    mask = np.ones(ndof, dtype=bool)
    mask[fixed] = False
    free = np.nonzero(mask)[0]
    return free, fixed


def add_spring_stiffness(K: np.ndarray, springs: Dict[int, float]) -> np.ndarray:
    """Return a copy of K with spring stiffness added on the diagonal."""
    K = K.copy()
    for i, k in springs.items():
        K[i, i] += k
    return K


def eliminate_fixed_dofs(
    K: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    values: Optional[Dict[int, float]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Impose fixed DOFs on the full system by row/column elimination.

    Parameters:
    -----------
    K : np.ndarray
        Global stiffness matrix (not modified)
    F : np.ndarray
        Global load vector (not modified)
    fixed_dofs : Sequence[int]
        Constrained global DOF indices
    values : Optional[Dict[int, float]]
        Prescribed displacement per fixed DOF (missing entries are 0)

    Returns:
    --------
    (K_mod, F_mod) : Tuple[np.ndarray, np.ndarray]
        Same size as the input; nonsingular if the supports remove all
        rigid-body modes.
    """
    values = values or {}
    K_mod = K.copy()
    F_mod = F.astype(float).copy()
    fixed = sorted(set(int(i) for i in fixed_dofs))

    for i in fixed:
        u0 = values.get(i, 0.0)
        if u0 != 0.0:
            F_mod -= K[:, i] * u0

    for i in fixed:
        K_mod[i, :] = 0.0
        K_mod[:, i] = 0.0
        K_mod[i, i] = 1.0
        F_mod[i] = values.get(i, 0.0)

    logger.debug("Eliminated %d fixed DOFs from a %d-DOF system", len(fixed), K.shape[0])
    return K_mod, F_mod
