# femcore/solver.py
"""
Public entry points.

    solve(model, options)   -> Result            raises on failure
    analyze(model, options) -> AnalysisOutcome   never raises for analysis failures

Both are pure: the Model is read, never modified, so the same model can
be solved repeatedly (or with different options) and gives the same
answer every time.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from .config import DEFAULT_OPTIONS, SolverOptions
from .errors import ANALYSIS_ERRORS, FEMError
from .model import BEAM_KIND, PLANE_KIND, Model, check_model, find_node_at
from .plane.analysis import analyze_plane
from .results import Result
from .v3d.analysis import analyze_beams

logger = logging.getLogger(__name__)


def _resolve_supports(model: Model, tolerance: float) -> Model:
    """Attach node ids to supports that were given by position."""
    if all(s.node_id is not None for s in model.supports):
        return model
    supports = []
    for s in model.supports:
        if s.node_id is None:
            node = find_node_at(model.nodes, s.position, tolerance)
            s = replace(s, node_id=node.id)
        supports.append(s)
    return replace(model, supports=tuple(supports))


def solve(model: Model, options: Optional[SolverOptions] = None) -> Result:
    """
    Run a linear static analysis.

    Raises:
    -------
    ModelValidationError
        Broken references or an inconsistent model
    GeometryError
        Degenerate elements
    MechanismError
        Rank-deficient stiffness (the diagnostics name the free DOFs)
    NumericalError
        Non-finite displacements
    """
    options = options or DEFAULT_OPTIONS
    check_model(model, options.node_tolerance)
    model = _resolve_supports(model, options.node_tolerance)

    if model.kind == BEAM_KIND:
        result = analyze_beams(model, options)
    elif model.kind == PLANE_KIND:
        result = analyze_plane(model, options)
    else:
        raise ValueError(f"Unsupported model kind {model.kind!r}")

    logger.info(
        "Solved %s model: %d nodes, %d elements, max displacement %.4g%s",
        result.kind, len(model.nodes), len(model.elements), result.max_displacement(),
        " (regularized)" if result.regularized else "",
    )
    return result


@dataclass
class AnalysisOutcome:
    """Either a Result (ok) or the analysis error that prevented one."""
    ok: bool
    result: Optional[Result] = None
    error: Optional[FEMError] = None

    @property
    def messages(self) -> List[str]:
        """Error details as plain strings: validation errors, geometry errors or mode diagnostics."""
        if self.error is None:
            return list(self.result.warnings) if self.result is not None else []
        for attr in ("errors", "diagnostics", "bad_dofs"):
            details = getattr(self.error, attr, None)
            if details:
                return list(details)
        return [str(self.error)]


def analyze(model: Model, options: Optional[SolverOptions] = None) -> AnalysisOutcome:
    """Like ``solve`` but returns analysis failures as data instead of raising them."""
    try:
        return AnalysisOutcome(ok=True, result=solve(model, options))
    except ANALYSIS_ERRORS as exc:
        logger.info("Analysis failed: %s", exc)
        return AnalysisOutcome(ok=False, error=exc)
