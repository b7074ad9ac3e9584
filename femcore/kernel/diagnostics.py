# femcore/kernel/diagnostics.py
"""
SINGULARITY DIAGNOSIS AND REGULARIZATION
========================================

Before the reduced system is factorized its SVD is inspected:

    K = U · diag(σ) · Vᵀ
    tol  = max(rows, cols) · eps · σ_max
    rank = #{σ > tol}

If rank < size the structure can move without resistance. Each
zero-stiffness direction is a right-singular vector; its largest
components name the DOFs that participate in the mechanism, e.g.

    Mode 1 (sigma=3.1e-13): NodeId=1:DX, NodeId=0:DX, NodeId=2:DX

which is usually enough to spot the missing support.

Regularization (optional) stiffens the free DOFs with a tiny spring
sized from the median member stiffness:

    k_rot   = median(EIyy/L, EIzz/L, GJ/L over all beams) × factor
    k_trans = median(EA/L over all beams) × factor

It is applied to the reduced matrix only.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
from scipy import linalg

from ..sections import section_stiffness

logger = logging.getLogger(__name__)

ROTATIONAL_NAMES = ("RX", "RY", "RZ")
TRANSLATIONAL_NAMES = ("DX", "DY", "DZ")


@dataclass
class RigidBodyMode:
    """One zero-stiffness direction of the reduced system."""
    number: int
    singular_value: float
    components: List[Tuple[str, float]] = field(default_factory=list)

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self.components]

    def describe(self) -> str:
        return f"Mode {self.number} (sigma={self.singular_value:.3e}): " + ", ".join(self.labels)

    def involves_translation(self) -> bool:
        return any(label.rsplit(":", 1)[-1] in TRANSLATIONAL_NAMES for label in self.labels)


@dataclass
class SingularityReport:
    """Outcome of the SVD rank check."""
    size: int
    rank: int
    tolerance: float
    singular_values: np.ndarray
    modes: List[RigidBodyMode] = field(default_factory=list)

    @property
    def deficiency(self) -> int:
        return self.size - self.rank

    @property
    def is_deficient(self) -> bool:
        return self.rank < self.size

    @property
    def diagnostics(self) -> List[str]:
        return [m.describe() for m in self.modes]


def diagnose_singularity(
    K: np.ndarray,
    labels: Sequence[str],
    max_modes: int = 6,
    components_per_mode: int = 5,
) -> SingularityReport:
    """
    Numerical rank of K and a description of its rigid-body modes.

    Parameters:
    -----------
    K : np.ndarray
        Square reduced stiffness matrix
    labels : Sequence[str]
        One label per row/column of K ("NodeId=k:DX" style)
    max_modes : int
        Number of deficient modes to describe, smallest σ first
    components_per_mode : int
        Largest-magnitude DOFs listed per mode

    Returns:
    --------
    SingularityReport
    """
    n = K.shape[0]
    if len(labels) != n:
        raise ValueError(f"{len(labels)} labels for a {n}×{n} matrix")
    if n == 0:
        return SingularityReport(size=0, rank=0, tolerance=0.0, singular_values=np.zeros(0))

    _, s, vt = linalg.svd(K)
    tol = max(K.shape) * np.finfo(float).eps * (s[0] if s.size else 0.0)
    rank = int(np.sum(s > tol))

    modes: List[RigidBodyMode] = []
    # s is descending: the deficient directions are the trailing rows of vt
    for k in range(n - 1, rank - 1, -1):
        if len(modes) >= max_modes:
            break
        v = vt[k]
        top = np.argsort(-np.abs(v), kind="stable")[:components_per_mode]
        modes.append(RigidBodyMode(
            number=len(modes) + 1,
            singular_value=float(s[k]),
            components=[(labels[i], float(v[i])) for i in top],
        ))

    logger.debug("SVD rank check: size=%d rank=%d tol=%.3e", n, rank, tol)
    return SingularityReport(size=n, rank=rank, tolerance=float(tol), singular_values=s, modes=modes)


def reference_stiffness(model) -> Tuple[float, float]:
    """
    (rotational, translational) reference stiffness of a beam model: the
    median of the pooled EIyy/L, EIzz/L, GJ/L values and the median of
    EA/L. Both are 0.0 when the model has no beams.
    """
    nodes = model.node_map()
    rotational: List[float] = []
    axial: List[float] = []
    for beam in model.beams:
        L = nodes[beam.ni].position.distance_to(nodes[beam.nj].position)
        if L <= 1e-12:
            continue
        k = section_stiffness(beam.material, beam.section, L)
        rotational.extend([k["EIyy/L"], k["EIzz/L"], k["GJ/L"]])
        axial.append(k["EA/L"])

    rot = float(np.median(rotational)) if rotational else 0.0
    trans = float(np.median(axial)) if axial else 0.0
    return rot, trans


def regularize(
    Kff: np.ndarray,
    free_labels: Sequence[str],
    rotational: float = 0.0,
    translational: float = 0.0,
) -> np.ndarray:
    """
    Return a copy of the reduced matrix with ``rotational`` added to the
    diagonal of every free rotational DOF and ``translational`` to every
    free translational DOF.
    """
    K = Kff.copy()
    for i, label in enumerate(free_labels):
        name = label.rsplit(":", 1)[-1]
        if name in ROTATIONAL_NAMES:
            K[i, i] += rotational
        elif name in TRANSLATIONAL_NAMES:
            K[i, i] += translational
    return K
