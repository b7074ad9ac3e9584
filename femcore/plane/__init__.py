# femcore/plane - Plane stress / plane strain elements
"""
PLANE: 2D MEMBRANE ANALYSIS
===========================

- quad4i: the 4-node quadrilateral with incompatible modes (8×8 stiffness,
  2 DOF/node) and its stress recovery helpers
- analysis: the planar solve pipeline used by ``femcore.solver``
"""

from .quad4i import (
    Quad4IStiffness,
    element_stiffness,
    gauss_points,
    extrapolate_to_corners,
    principal_stresses,
)
from .analysis import analyze_plane

__all__ = [
    'Quad4IStiffness',
    'element_stiffness',
    'gauss_points',
    'extrapolate_to_corners',
    'principal_stresses',
    'analyze_plane',
]
