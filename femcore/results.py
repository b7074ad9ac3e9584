# femcore/results.py
"""
ANALYSIS RESULTS
================

A Result is created by ``femcore.solver.solve`` and owned by the caller;
the Model it came from is never modified.

    displacements     flat vector, node × DOF-per-node, in model node order
    node_stresses     plane models: averaged nodal stress per node id
    section_forces    beam models: 12 local end forces per element id
    reactions         support reactions per supported node id

Plane models store their displacements in the in-plane axes of the
model (identical to global X/Y for models drawn in the XY plane);
``plane_basis`` maps them back to global space.

The ``*_table`` helpers return pandas DataFrames for reporting.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .geometry import Point3, Vector3
from .kernel.diagnostics import SingularityReport
from .kernel.dof import DOF_NAMES_2D, DOF_NAMES_3D

SECTION_FORCE_NAMES = (
    "Fx_i", "Fy_i", "Fz_i", "Mx_i", "My_i", "Mz_i",
    "Fx_j", "Fy_j", "Fz_j", "Mx_j", "My_j", "Mz_j",
)


@dataclass(frozen=True)
class NodalStress:
    """Averaged plane stress at a node with its principal measures."""
    node_id: int
    sxx: float
    syy: float
    txy: float
    p1: float
    p2: float
    von_mises: float
    average: float
    max_shear: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "node_id": self.node_id,
            "sxx": self.sxx,
            "syy": self.syy,
            "txy": self.txy,
            "p1": self.p1,
            "p2": self.p2,
            "von_mises": self.von_mises,
            "average": self.average,
            "max_shear": self.max_shear,
        }


@dataclass
class SectionForces:
    """
    Local end forces of a beam, the forces the nodes exert on the member:
    [Fx, Fy, Fz, Mx, My, Mz] at ni followed by the same at nj.
    Fx is axial (tension negative at ni), Mx is torque.
    """
    element_id: int
    values: np.ndarray

    @property
    def start(self) -> np.ndarray:
        return self.values[:6]

    @property
    def end(self) -> np.ndarray:
        return self.values[6:]

    def __getattr__(self, name):
        # Named access, e.g. forces.My_i
        if name in SECTION_FORCE_NAMES:
            return float(self.values[SECTION_FORCE_NAMES.index(name)])
        raise AttributeError(name)

    def as_dict(self) -> Dict[str, float]:
        row = {"element_id": self.element_id}
        row.update({k: float(v) for k, v in zip(SECTION_FORCE_NAMES, self.values)})
        return row


@dataclass
class ReactionForce:
    """Support reaction at a node in global axes (moments are zero for plane models)."""
    node_id: int
    force: np.ndarray
    moment: np.ndarray

    @property
    def vector(self) -> np.ndarray:
        return np.concatenate([self.force, self.moment])

    def as_dict(self) -> Dict[str, float]:
        fx, fy, fz = self.force
        mx, my, mz = self.moment
        return {"node_id": self.node_id, "Fx": fx, "Fy": fy, "Fz": fz, "Mx": mx, "My": my, "Mz": mz}


@dataclass
class Result:
    """Output of one static analysis."""
    kind: str
    node_ids: List[int]
    positions: Dict[int, Point3]
    dof_per_node: int
    displacements: np.ndarray
    reactions: Dict[int, ReactionForce] = field(default_factory=dict)
    node_stresses: Dict[int, NodalStress] = field(default_factory=dict)
    element_corner_stresses: Dict[int, np.ndarray] = field(default_factory=dict)
    section_forces: Dict[int, SectionForces] = field(default_factory=dict)
    report: Optional[SingularityReport] = None
    regularized: bool = False
    plane_basis: Optional[np.ndarray] = None
    deformation_scale: float = 1.0
    warnings: List[str] = field(default_factory=list)

    @property
    def dof_names(self):
        return DOF_NAMES_3D if self.dof_per_node == 6 else DOF_NAMES_2D

    def displacement(self, node_id: int) -> np.ndarray:
        """DOF values of one node ([DX, DY] or [DX, DY, DZ, RX, RY, RZ])."""
        k = self.node_ids.index(node_id)
        n = self.dof_per_node
        return self.displacements[n * k:n * (k + 1)].copy()

    def translation(self, node_id: int) -> Vector3:
        """Nodal translation in global axes."""
        u = self.displacement(node_id)
        if self.dof_per_node == 6:
            return Vector3(*u[:3])
        basis = self.plane_basis if self.plane_basis is not None else np.eye(3)[:2]
        return Vector3(*(u[:2] @ basis))

    def displaced_positions(self, scale: Optional[float] = None) -> Dict[int, Point3]:
        """
        Node positions plus displacement × scale, for visualization.
        ``scale`` defaults to the configured deformation scale.
        """
        if scale is None:
            scale = self.deformation_scale
        return {
            nid: self.positions[nid] + self.translation(nid) * scale
            for nid in self.node_ids
        }

    def max_displacement(self) -> float:
        """Largest translation magnitude over all nodes."""
        if not self.node_ids:
            return 0.0
        return max(self.translation(nid).norm() for nid in self.node_ids)

    def total_reaction(self) -> np.ndarray:
        """Sum of reaction forces and moments about the origin (6,)."""
        total = np.zeros(6)
        for r in self.reactions.values():
            p = self.positions[r.node_id].to_array()
            total[:3] += r.force
            total[3:] += r.moment + np.cross(p, r.force)
        return total

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def displacement_table(self) -> pd.DataFrame:
        n = self.dof_per_node
        data = self.displacements.reshape(len(self.node_ids), n)
        df = pd.DataFrame(data, columns=list(self.dof_names))
        df.insert(0, "node_id", self.node_ids)
        return df

    def stress_table(self) -> pd.DataFrame:
        rows = [self.node_stresses[nid].as_dict() for nid in self.node_ids if nid in self.node_stresses]
        return pd.DataFrame(rows, columns=[
            "node_id", "sxx", "syy", "txy", "p1", "p2", "von_mises", "average", "max_shear",
        ])

    def section_force_table(self) -> pd.DataFrame:
        rows = [sf.as_dict() for sf in self.section_forces.values()]
        return pd.DataFrame(rows, columns=["element_id", *SECTION_FORCE_NAMES])

    def reaction_table(self) -> pd.DataFrame:
        rows = [r.as_dict() for r in self.reactions.values()]
        return pd.DataFrame(rows, columns=["node_id", "Fx", "Fy", "Fz", "Mx", "My", "Mz"])
