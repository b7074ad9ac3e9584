# femcore/errors.py
"""
Error taxonomy for the analysis engine.

Every failure the caller can act on carries its details as attributes,
so a UI or script can inspect them without parsing the message:

    ModelValidationError   bad references / inconsistent model (.errors)
    GeometryError          degenerate elements (.element_ids, .errors)
    MechanismError         rank-deficient stiffness (.modes, .diagnostics)
    NumericalError         NaN/inf in the solved displacements (.bad_dofs)

None of these are retriable: the model has to be fixed and re-solved.
"""

from typing import List, Sequence


class FEMError(Exception):
    """Base class for all analysis failures."""
    pass


class ModelValidationError(FEMError, ValueError):
    """Raised when a model references missing nodes/elements or is otherwise inconsistent."""

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        lines = "\n  - ".join(self.errors)
        super().__init__(f"Model validation failed ({len(self.errors)} error(s)):\n  - {lines}")


class GeometryError(FEMError, ValueError):
    """Raised when one or more elements have degenerate geometry."""

    def __init__(self, errors: Sequence[str], element_ids: Sequence[int] = ()):
        self.errors: List[str] = list(errors)
        self.element_ids: List[int] = list(element_ids)
        super().__init__("; ".join(self.errors))


class MechanismError(FEMError, RuntimeError):
    """
    Raised when the reduced stiffness matrix is rank deficient.

    ``modes`` holds the RigidBodyMode records found by the SVD diagnosis;
    ``diagnostics`` holds their one-line descriptions.
    """

    def __init__(self, message: str, rank: int = -1, size: int = -1, modes: Sequence = ()):
        self.rank = rank
        self.size = size
        self.modes = list(modes)
        self.diagnostics: List[str] = [m.describe() for m in self.modes]
        text = message
        if self.diagnostics:
            text += "\n  " + "\n  ".join(self.diagnostics)
        super().__init__(text)


class NumericalError(FEMError, RuntimeError):
    """Raised when the solution contains NaN or infinite values."""

    def __init__(self, message: str, bad_dofs: Sequence[str] = ()):
        self.bad_dofs: List[str] = list(bad_dofs)
        super().__init__(message)


ANALYSIS_ERRORS = (ModelValidationError, GeometryError, MechanismError, NumericalError)
