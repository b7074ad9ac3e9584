# femcore/kernel - Dimension-agnostic analysis core
"""
KERNEL: THE DIMENSION-AGNOSTIC FOUNDATION
=========================================

DOF indexing, assembly, boundary conditions, singularity diagnosis and
the linear solves. None of it knows which element produced a matrix:
the plane path (2 DOF/node) and the beam path (6 DOF/node) share it.
Element formulations live in ``femcore.plane`` and ``femcore.v3d``.
"""

from .dof import DOFManager, DOF_NAMES_2D, DOF_NAMES_3D
from .assemble import assemble_global_K, assemble_global_F, add_nodal_load
from .boundary import (
    Constraints,
    collect_constraints,
    partition_dofs,
    add_spring_stiffness,
    eliminate_fixed_dofs,
)
from .diagnostics import (
    RigidBodyMode,
    SingularityReport,
    diagnose_singularity,
    reference_stiffness,
    regularize,
)
from .solve import LinearSolution, check_finite, solve_linear, solve_eliminated

__all__ = [
    'DOFManager',
    'DOF_NAMES_2D',
    'DOF_NAMES_3D',
    'assemble_global_K',
    'assemble_global_F',
    'add_nodal_load',
    'Constraints',
    'collect_constraints',
    'partition_dofs',
    'add_spring_stiffness',
    'eliminate_fixed_dofs',
    'RigidBodyMode',
    'SingularityReport',
    'diagnose_singularity',
    'reference_stiffness',
    'regularize',
    'LinearSolution',
    'check_finite',
    'solve_linear',
    'solve_eliminated',
]
