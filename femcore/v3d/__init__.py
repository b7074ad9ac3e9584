# femcore/v3d - 3D beam elements
"""
V3D: 3D FRAME ANALYSIS
======================

- elements: 12×12 beam stiffness, local axes and transformation,
  equivalent nodal loads, joint condensation, end-force recovery
- analysis: the 3D solve pipeline used by ``femcore.solver``

USAGE:
------
    from femcore.v3d import beam_local_stiffness, local_axes, beam_transform

    ex, ey, ez = local_axes((0, 0, 0), (1000, 0, 0))
    T = beam_transform((ex, ey, ez))
    k = beam_local_stiffness(E, G, A, Iyy, Izz, J, L=1000.0)
    k_global = T.T @ k @ T
"""

from .elements import (
    CondensedBeam,
    beam_local_stiffness,
    local_axes,
    beam_transform,
    beam_global_stiffness,
    equivalent_nodal_loads,
    condense_joint,
    beam_end_forces,
)
from .analysis import analyze_beams

__all__ = [
    'CondensedBeam',
    'beam_local_stiffness',
    'local_axes',
    'beam_transform',
    'beam_global_stiffness',
    'equivalent_nodal_loads',
    'condense_joint',
    'beam_end_forces',
    'analyze_beams',
]
