# femcore - Linear static finite-element analysis
"""
FEMCORE: Linear Elastic Beam and Membrane Analysis
==================================================

This package provides:
- 3D frame analysis with 2-node Euler-Bernoulli beams (6 DOF/node),
  end releases and semi-rigid joints
- Plane stress / plane strain analysis with the 4-node incompatible-mode
  quadrilateral (2 DOF/node)
- Singularity diagnosis that names the unsupported DOFs
- Results as plain arrays plus pandas tables

ARCHITECTURE:
-------------
    geometry.py     Point3 / Vector3 / Edge3 / Face3 value types
    materials.py    Isotropic and orthotropic materials, D matrices
    sections.py     Box, circle and H cross-sections
    model.py        Nodes, elements, supports, loads, joints; validate / build
    config.py       SolverOptions
    errors.py       Error taxonomy
    kernel/         Dimension-agnostic core (DOFs, assembly, BCs, diagnosis, solve)
    plane/          Q4I element and the planar pipeline
    v3d/            Beam element and the 3D pipeline
    results.py      Result and tables
    solver.py       solve() / analyze()

USAGE:
------
    from femcore import (Material, circle_section, BeamElement, Support,
                         PointLoad, build_model, solve)

    steel = Material.steel()
    sec = circle_section(100.0)
    model = build_model(
        nodes=[(0, 0, 0), (1000, 0, 0)],
        elements=[BeamElement(0, 0, 1, steel, sec)],
        supports=[Support.fixed_at(0)],
        loads=[PointLoad(1, force=(0, 1000, 0))],
    )
    result = solve(model)
    result.displacement(1)
"""

from .config import DEFAULT_OPTIONS, IntegrationScheme, SolverOptions
from .errors import (
    ANALYSIS_ERRORS,
    FEMError,
    GeometryError,
    MechanismError,
    ModelValidationError,
    NumericalError,
)
from .geometry import Edge3, Face3, Point3, Vector3
from .materials import Material
from .model import (
    BeamElement,
    ElementLoad,
    GravityLoad,
    Joint,
    Model,
    Node,
    PlaneElement,
    PointLoad,
    Support,
    build_model,
    check_model,
    validate_model,
)
from .results import NodalStress, ReactionForce, Result, SectionForces
from .sections import CrossSection, box_section, circle_section, h_section, section_stiffness
from .solver import AnalysisOutcome, analyze, solve

__version__ = "0.1.0"

__all__ = [
    'DEFAULT_OPTIONS', 'IntegrationScheme', 'SolverOptions',
    'ANALYSIS_ERRORS', 'FEMError', 'GeometryError', 'MechanismError',
    'ModelValidationError', 'NumericalError',
    'Edge3', 'Face3', 'Point3', 'Vector3',
    'Material',
    'BeamElement', 'ElementLoad', 'GravityLoad', 'Joint', 'Model', 'Node', 'PlaneElement',
    'PointLoad', 'Support', 'build_model', 'check_model', 'validate_model',
    'NodalStress', 'ReactionForce', 'Result', 'SectionForces',
    'CrossSection', 'box_section', 'circle_section', 'h_section', 'section_stiffness',
    'AnalysisOutcome', 'analyze', 'solve',
]
