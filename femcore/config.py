# femcore/config.py
"""
Solver configuration and defaults.
"""

from dataclasses import dataclass
from enum import Enum


class IntegrationScheme(Enum):
    """Gauss rules available for the plane element stiffness."""
    GAUSS_1 = 1    # 1x1, reduced (hourglass modes; no bubble modes possible)
    GAUSS_4 = 4    # 2x2, standard
    GAUSS_9 = 9    # 3x3


@dataclass
class SolverOptions:
    """Options recognised by ``femcore.solver.solve``."""

    # Plane element
    integration: IntegrationScheme = IntegrationScheme.GAUSS_4
    plane_mode: str = "stress"  # 'stress' or 'strain'

    # Regularization of the reduced (free-DOF) beam system
    enable_regularization: bool = False
    rotational_regularization_factor: float = 1e-9
    enable_translational_regularization: bool = False
    translational_regularization_factor: float = 1e-10
    auto_regularize: bool = False  # only when the rank check fails

    # Singularity diagnostics
    max_reported_modes: int = 6
    components_per_mode: int = 5

    # Model building
    node_tolerance: float = 1e-6

    # Cosmetic, used only by Result.displaced_positions()
    deformation_scale: float = 1.0

    def __post_init__(self):
        if isinstance(self.integration, int):
            self.integration = IntegrationScheme(self.integration)
        if self.plane_mode not in ("stress", "strain"):
            raise ValueError(f"plane_mode must be 'stress' or 'strain', got {self.plane_mode!r}")
        if self.rotational_regularization_factor < 0 or self.translational_regularization_factor < 0:
            raise ValueError("Regularization factors must be non-negative.")


# Default options instance
DEFAULT_OPTIONS = SolverOptions()
