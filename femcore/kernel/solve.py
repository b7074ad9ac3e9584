# femcore/kernel/solve.py
"""Linear system solves with boundary conditions, mechanism detection and a NaN/inf guard."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import MechanismError, NumericalError
from .boundary import eliminate_fixed_dofs, partition_dofs
from .diagnostics import SingularityReport, diagnose_singularity, regularize

logger = logging.getLogger(__name__)


@dataclass
class LinearSolution:
    """Displacements, reactions and the rank report of one solve."""
    d: np.ndarray
    R: np.ndarray
    free: np.ndarray
    report: SingularityReport
    regularized: bool = False
    warnings: List[str] = field(default_factory=list)


def check_finite(d: np.ndarray, labels: Sequence[str]) -> None:
    """
    Raise NumericalError if any displacement is NaN or infinite.

    This catches ill-conditioned systems that pass the rank check but
    still produce garbage.
    """
    bad = np.nonzero(~np.isfinite(d))[0]
    if bad.size:
        bad_labels = [labels[i] for i in bad]
        shown = ", ".join(bad_labels[:10])
        more = f" (+{len(bad_labels) - 10} more)" if len(bad_labels) > 10 else ""
        raise NumericalError(
            f"Solution contains {len(bad_labels)} non-finite displacement(s): {shown}{more}",
            bad_dofs=bad_labels,
        )


def _mechanism(report: SingularityReport) -> MechanismError:
    return MechanismError(
        f"Stiffness matrix is singular (rank {report.rank} of {report.size}, "
        f"{report.deficiency} rigid-body mode(s)). Check supports.",
        rank=report.rank,
        size=report.size,
        modes=report.modes,
    )


def _factor_and_solve(A: np.ndarray, b: np.ndarray, report: SingularityReport) -> np.ndarray:
    """np.linalg.solve, with an exactly singular factorization reported as a MechanismError."""
    try:
        return np.linalg.solve(A, b)
    except np.linalg.LinAlgError as exc:
        raise MechanismError(
            f"Factorization of the {report.size}×{report.size} reduced stiffness failed ({exc}). Check supports.",
            rank=report.rank,
            size=report.size,
            modes=report.modes,
        ) from exc


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    labels: Sequence[str],
    values: Optional[Dict[int, float]] = None,
    springs: Optional[Dict[int, float]] = None,
    regularization: Tuple[float, float] = (0.0, 0.0),
    fallback_regularization: Optional[Tuple[float, float]] = None,
    max_modes: int = 6,
    components_per_mode: int = 5,
) -> LinearSolution:
    """
    Solve K·d = F by free/fixed partitioning.

    Args:
        K: Structural stiffness matrix (ndof x ndof), without springs
        F: Global load vector (ndof,)
        fixed_dofs: Constrained DOF indices
        labels: One "NodeId=k:DX" label per global DOF
        values: Prescribed displacement per fixed DOF (default 0)
        springs: Diagonal spring stiffness per free DOF
        regularization: (rotational, translational) stiffness always added
            to the reduced matrix
        fallback_regularization: (rotational, translational) used instead
            when the rank check fails; None means a failed check aborts
        max_modes, components_per_mode: Diagnostic detail

    Returns:
        LinearSolution with the full displacement vector and the
        reactions R = K·d - F (springs and regularization excluded)

    Raises:
        MechanismError: Reduced matrix is rank deficient and the allowed
            regularization does not restore full rank, or the
            factorization itself breaks down
        NumericalError: Displacements contain NaN/inf
    """
    ndof = K.shape[0]
    values = values or {}
    free, fixed = partition_dofs(ndof, fixed_dofs)

    ds = np.array([values.get(int(i), 0.0) for i in fixed], dtype=float)

    Kff = K[np.ix_(free, free)]
    for i, k in (springs or {}).items():
        pos = np.searchsorted(free, i)
        if pos < free.size and free[pos] == i:
            Kff[pos, pos] += k
    Ff = F[free] - K[np.ix_(free, fixed)] @ ds

    free_labels = [labels[i] for i in free]
    report = diagnose_singularity(Kff, free_labels, max_modes, components_per_mode)
    if report.size:
        s = report.singular_values
        cond = s[0] / s[-1] if s[-1] > 0 else np.inf
        logger.debug("Reduced system %d×%d, condition number %.3e", report.size, report.size, cond)

    warnings: List[str] = []
    rot, trans = regularization
    if report.is_deficient:
        if fallback_regularization is not None:
            rot = max(rot, fallback_regularization[0])
            trans = max(trans, fallback_regularization[1])
        if rot <= 0.0 and trans <= 0.0:
            raise _mechanism(report)
        message = (
            f"Reduced stiffness is rank deficient ({report.deficiency} mode(s)); "
            f"solving with regularization (rotational={rot:.3e}, translational={trans:.3e}). "
            + "; ".join(report.diagnostics)
        )
        logger.warning(message)
        warnings.append(message)

    regularized = rot > 0.0 or trans > 0.0
    if regularized:
        Kff = regularize(Kff, free_labels, rot, trans)
        if report.is_deficient:
            # springs on one DOF kind can leave modes of the other
            remaining = diagnose_singularity(Kff, free_labels, max_modes, components_per_mode)
            if remaining.is_deficient:
                raise _mechanism(remaining)

    d = np.zeros(ndof, dtype=float)
    d[fixed] = ds
    if free.size:
        df = _factor_and_solve(Kff, Ff, report)
        check_finite(df, free_labels)
        d[free] = df

    R = K @ d - F
    return LinearSolution(d=d, R=R, free=free, report=report, regularized=regularized, warnings=warnings)


def solve_eliminated(
    K: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    labels: Sequence[str],
    values: Optional[Dict[int, float]] = None,
    max_modes: int = 6,
    components_per_mode: int = 5,
) -> LinearSolution:
    """
    Solve K·d = F as one n×n system after row/column elimination of the
    fixed DOFs. K must already include any support springs.

    The rank check runs on the eliminated matrix; fixed DOFs have a unit
    diagonal there and never show up as mechanism components.

    Reactions are K·d - F with the K passed in, so the caller should
    subtract spring forces if it wants support reactions only.
    """
    K_mod, F_mod = eliminate_fixed_dofs(K, F, fixed_dofs, values)
    report = diagnose_singularity(K_mod, labels, max_modes, components_per_mode)
    if report.is_deficient:
        raise _mechanism(report)

    d = _factor_and_solve(K_mod, F_mod, report)
    check_finite(d, labels)

    R = K @ d - F
    free, _ = partition_dofs(K.shape[0], fixed_dofs)
    return LinearSolution(d=d, R=R, free=free, report=report)
