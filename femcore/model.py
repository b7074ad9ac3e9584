# femcore/model.py
"""
MODEL DEFINITIONS: Nodes, Elements, Supports, Loads, Joints
===========================================================

PURPOSE:
--------
The data model handed to the solver. Everything here is an immutable
value; the solver never writes back into a Model.

Two phases keep construction honest:

    validate_model(model) -> List[str]     pure, reports every problem
    build_model(...)      -> Model         repair pass, then validate

build_model merges coincident nodes (spatial hashing within a
tolerance), assigns ids to bare positions, resolves supports given by
position, and stores each beam's local axis triad. If anything is still
inconsistent afterwards it raises ModelValidationError listing every
error, so no half-built model ever reaches the solver.

DOF CONVENTIONS:
----------------
Beam models carry 6 DOF per node:   DX, DY, DZ, RX, RY, RZ
Plane models carry 2 DOF per node:  DX, DY  (in the element plane)

Supports, springs and prescribed displacements are always given as
6-tuples in that order; plane models read the first two entries.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import ModelValidationError
from .geometry import Point3
from .materials import Material
from .sections import CrossSection

Axes = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]

BEAM_KIND = "beam"
PLANE_KIND = "plane"


def _six(values, name: str, cast) -> tuple:
    values = tuple(cast(v) for v in values)
    if len(values) != 6:
        raise ValueError(f"{name} needs 6 entries (DX, DY, DZ, RX, RY, RZ), got {len(values)}")
    return values


@dataclass(frozen=True)
class Node:
    """
    A node in 3D space. Plane models simply leave z at 0 (or place all
    nodes on any common plane).
    """
    id: int
    x: float
    y: float
    z: float = 0.0

    @property
    def position(self) -> Point3:
        return Point3(self.x, self.y, self.z)


@dataclass(frozen=True)
class BeamElement:
    """
    A 2-node 3D Euler-Bernoulli beam.

    Parameters:
    -----------
    id : int
        Unique element id
    ni, nj : int
        Start and end node ids (local x runs from ni to nj)
    material : Material
    section : CrossSection
    beta : float
        Rotation of the local y/z axes about local x, in degrees
    axes : Optional[Axes]
        Local triad (ex, ey, ez) in global coordinates. Filled in by
        build_model; computed on the fly by the solver when absent.
    """
    id: int
    ni: int
    nj: int
    material: Material
    section: CrossSection
    beta: float = 0.0
    axes: Optional[Axes] = None

    kind = BEAM_KIND

    @property
    def node_ids(self) -> Tuple[int, int]:
        return (self.ni, self.nj)


@dataclass(frozen=True)
class PlaneElement:
    """
    A plane quadrilateral (4 node ids, counter-clockwise) or a degenerate
    triangle (3 node ids).
    """
    id: int
    node_ids: Tuple[int, ...]
    material: Material
    thickness: float = 1.0

    kind = PLANE_KIND

    def __post_init__(self):
        object.__setattr__(self, "node_ids", tuple(int(n) for n in self.node_ids))
        if self.thickness <= 0.0:
            raise ValueError(f"PlaneElement {self.id}: thickness must be positive, got {self.thickness}")

    @property
    def corner_ids(self) -> Tuple[int, int, int, int]:
        """The four corners; a triangle repeats its last node."""
        if len(self.node_ids) == 3:
            return self.node_ids + (self.node_ids[2],)
        return self.node_ids


Element = Union[BeamElement, PlaneElement]


@dataclass(frozen=True)
class Support:
    """
    Boundary condition at one node.

    Identify the node by ``node_id`` or by ``position`` (resolved by
    build_model). ``fixed[k]`` restrains DOF k; ``displacements[k]`` is
    its prescribed value (zero for a plain support). ``springs[k]`` adds
    an elastic restraint to a DOF that is not fixed.
    """
    node_id: Optional[int] = None
    position: Optional[Point3] = None
    fixed: Tuple[bool, ...] = (True,) * 6
    displacements: Tuple[float, ...] = (0.0,) * 6
    springs: Tuple[float, ...] = (0.0,) * 6

    def __post_init__(self):
        object.__setattr__(self, "fixed", _six(self.fixed, "fixed", bool))
        object.__setattr__(self, "displacements", _six(self.displacements, "displacements", float))
        object.__setattr__(self, "springs", _six(self.springs, "springs", float))
        if any(k < 0.0 for k in self.springs):
            raise ValueError("Support spring stiffness must be non-negative.")

    @classmethod
    def fixed_at(cls, node_id: int) -> "Support":
        return cls(node_id=node_id)

    @classmethod
    def pinned_at(cls, node_id: int) -> "Support":
        return cls(node_id=node_id, fixed=(True, True, True, False, False, False))

    @classmethod
    def at_position(cls, position, fixed=(True,) * 6, **kwargs) -> "Support":
        if not isinstance(position, Point3):
            position = Point3(*position)
        return cls(position=position, fixed=fixed, **kwargs)

    @classmethod
    def elastic(cls, node_id: int, springs: Sequence[float]) -> "Support":
        return cls(node_id=node_id, fixed=(False,) * 6, springs=tuple(springs))

    @property
    def is_spring(self) -> bool:
        return any(k > 0.0 and not f for k, f in zip(self.springs, self.fixed))


@dataclass(frozen=True)
class PointLoad:
    """Concentrated force and moment at a node, in global axes."""
    node_id: int
    force: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    moment: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    local: bool = False

    def __post_init__(self):
        object.__setattr__(self, "force", tuple(float(v) for v in self.force))
        object.__setattr__(self, "moment", tuple(float(v) for v in self.moment))

    @property
    def vector(self) -> Tuple[float, ...]:
        return self.force + self.moment


@dataclass(frozen=True)
class ElementLoad:
    """
    Uniform distributed load along a beam.

    q = (qx, qy, qz) force per length, m = (mx, my, mz) moment per length.
    Given in the element's local axes unless ``local`` is False.
    """
    element_id: int
    q: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    m: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    local: bool = True

    def __post_init__(self):
        object.__setattr__(self, "q", tuple(float(v) for v in self.q))
        object.__setattr__(self, "m", tuple(float(v) for v in self.m))


@dataclass(frozen=True)
class GravityLoad:
    """
    Self-weight of every element from its material density.

    (gx, gy, gz) is the acceleration in global axes, in length units
    consistent with the density (mm/s² for N, mm, t/mm³).
    """
    gx: float = 0.0
    gy: float = 0.0
    gz: float = -9810.0

    def __post_init__(self):
        for name in ("gx", "gy", "gz"):
            object.__setattr__(self, name, float(getattr(self, name)))

    @property
    def vector(self) -> np.ndarray:
        return np.array([self.gx, self.gy, self.gz])


Load = Union[PointLoad, ElementLoad, GravityLoad]


@dataclass(frozen=True)
class Joint:
    """
    End conditions of one beam.

    ``released`` holds 12 flags in local element axes, start end first:
    [DX, DY, DZ, RX, RY, RZ] at ni then the same at nj. A released DOF is
    disconnected from the node except through ``springs`` (same layout);
    a zero spring makes it a true hinge.
    """
    element_id: int
    released: Tuple[bool, ...] = (False,) * 12
    springs: Tuple[float, ...] = (0.0,) * 12
    name: str = "Rigid-Rigid"

    def __post_init__(self):
        released = tuple(bool(v) for v in self.released)
        springs = tuple(float(v) for v in self.springs)
        if len(released) != 12 or len(springs) != 12:
            raise ValueError("Joint needs 12 release flags and 12 spring values.")
        if any(k < 0.0 for k in springs):
            raise ValueError("Joint spring stiffness must be non-negative.")
        object.__setattr__(self, "released", released)
        object.__setattr__(self, "springs", springs)

    @classmethod
    def rigid(cls, element_id: int) -> "Joint":
        return cls(element_id)

    @classmethod
    def pin(cls, element_id: int) -> "Joint":
        hinge = (False, False, False, True, True, True)
        return cls(element_id, released=hinge + hinge, name="Pin-Pin")

    @classmethod
    def pin_rigid(cls, element_id: int) -> "Joint":
        return cls(element_id, released=(False,) * 3 + (True,) * 3 + (False,) * 6, name="Pin-Rigid")

    @classmethod
    def rigid_pin(cls, element_id: int) -> "Joint":
        return cls(element_id, released=(False,) * 9 + (True,) * 3, name="Rigid-Pin")

    @classmethod
    def semi_rigid(
        cls,
        element_id: int,
        start: Sequence[float],
        end: Sequence[float],
    ) -> "Joint":
        """Rotational springs (krx, kry, krz) at each end."""
        hinge = (False, False, False, True, True, True)
        springs = (0.0,) * 3 + tuple(start) + (0.0,) * 3 + tuple(end)
        return cls(element_id, released=hinge + hinge, springs=springs, name="Semi-Rigid")

    @property
    def is_rigid(self) -> bool:
        return not any(self.released)


@dataclass(frozen=True)
class Model:
    """A complete analysis model. Build with ``build_model`` to get a checked one."""
    nodes: Tuple[Node, ...] = ()
    elements: Tuple[Element, ...] = ()
    supports: Tuple[Support, ...] = ()
    loads: Tuple[Load, ...] = ()
    joints: Tuple[Joint, ...] = ()

    def __post_init__(self):
        for name in ("nodes", "elements", "supports", "loads", "joints"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def node_map(self) -> Dict[int, Node]:
        return {n.id: n for n in self.nodes}

    def element_map(self) -> Dict[int, Element]:
        return {e.id: e for e in self.elements}

    @property
    def beams(self) -> List[BeamElement]:
        return [e for e in self.elements if isinstance(e, BeamElement)]

    @property
    def plane_elements(self) -> List[PlaneElement]:
        return [e for e in self.elements if isinstance(e, PlaneElement)]

    @property
    def kind(self) -> Optional[str]:
        """'beam', 'plane', 'mixed', or None for a model without elements."""
        kinds = {e.kind for e in self.elements}
        if not kinds:
            return None
        if len(kinds) > 1:
            return "mixed"
        return kinds.pop()

    def point_loads(self) -> List[PointLoad]:
        return [ld for ld in self.loads if isinstance(ld, PointLoad)]

    def element_loads(self) -> List[ElementLoad]:
        return [ld for ld in self.loads if isinstance(ld, ElementLoad)]

    def gravity_loads(self) -> List[GravityLoad]:
        return [ld for ld in self.loads if isinstance(ld, GravityLoad)]

    def joint_map(self) -> Dict[int, Joint]:
        return {j.element_id: j for j in self.joints}


# -------------------------------------------------------------------------
# Spatial hashing
# -------------------------------------------------------------------------

class _NodeIndex:
    """Grid buckets of edge ``tolerance``; a lookup scans the 27 neighbours."""

    def __init__(self, tolerance: float):
        self.tolerance = tolerance
        self._cells: Dict[Tuple[int, int, int], List[Node]] = {}

    def _key(self, x: float, y: float, z: float) -> Tuple[int, int, int]:
        t = self.tolerance
        return (math.floor(x / t), math.floor(y / t), math.floor(z / t))

    def find(self, x: float, y: float, z: float) -> Optional[Node]:
        cx, cy, cz = self._key(x, y, z)
        best, best_d = None, self.tolerance
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dz in (-1, 0, 1):
                    for node in self._cells.get((cx + dx, cy + dy, cz + dz), ()):
                        d = math.sqrt((node.x - x) ** 2 + (node.y - y) ** 2 + (node.z - z) ** 2)
                        if d <= best_d:
                            best, best_d = node, d
        return best

    def add(self, node: Node) -> None:
        self._cells.setdefault(self._key(node.x, node.y, node.z), []).append(node)


def find_node_at(nodes: Iterable[Node], position, tolerance: float = 1e-6) -> Optional[Node]:
    """Closest node within ``tolerance`` of ``position``, or None."""
    index = _NodeIndex(tolerance)
    for n in nodes:
        index.add(n)
    x, y, z = tuple(position)
    return index.find(x, y, z)


# -------------------------------------------------------------------------
# Validation (pure)
# -------------------------------------------------------------------------

def validate_model(model: Model, tolerance: float = 1e-6) -> List[str]:
    """
    Check reference integrity and basic consistency of a model.

    Returns:
    --------
    List[str]
        One message per problem; empty when the model is sound.
    """
    errors: List[str] = []
    node_ids = set()
    for n in model.nodes:
        if n.id in node_ids:
            errors.append(f"Duplicate Node ID {n.id}")
        node_ids.add(n.id)

    element_ids = set()
    for e in model.elements:
        if e.id in element_ids:
            errors.append(f"Duplicate Element ID {e.id}")
        element_ids.add(e.id)

        for nid in e.node_ids:
            if nid not in node_ids:
                errors.append(f"Element {e.id} references non-existent Node ID {nid}")

        if isinstance(e, BeamElement):
            if e.ni == e.nj:
                errors.append(f"Element {e.id} needs two distinct nodes, got {e.ni} twice")
        else:
            distinct = len(set(e.node_ids))
            if len(e.node_ids) not in (3, 4) or distinct < 3:
                errors.append(
                    f"Element {e.id} needs 3 or 4 nodes with at least 3 distinct, got {list(e.node_ids)}"
                )

    if not model.elements:
        errors.append("Model has no elements")
    elif model.kind == "mixed":
        errors.append("Model mixes beam and plane elements; solve them as separate models")

    elements = model.element_map()
    for s in model.supports:
        if s.node_id is None:
            if s.position is None:
                errors.append("Support has neither a node id nor a position")
            elif find_node_at(model.nodes, s.position, tolerance) is None:
                p = s.position
                errors.append(
                    f"No existing node found at position ({p.x}, {p.y}, {p.z}). "
                    f"Support must reference an existing node"
                )
        elif s.node_id not in node_ids:
            errors.append(f"Support references non-existent Node ID {s.node_id}")

    for ld in model.loads:
        if isinstance(ld, PointLoad):
            if ld.node_id not in node_ids:
                errors.append(f"PointLoad references non-existent Node ID {ld.node_id}")
            if ld.local:
                errors.append(f"PointLoad at Node ID {ld.node_id}: nodes have no local axes, use global")
        elif isinstance(ld, ElementLoad):
            target = elements.get(ld.element_id)
            if target is None:
                errors.append(f"ElementLoad references non-existent Element ID {ld.element_id}")
            elif not isinstance(target, BeamElement):
                errors.append(f"ElementLoad targets plane Element ID {ld.element_id}; only beams take line loads")
        elif isinstance(ld, GravityLoad):
            if not np.all(np.isfinite(ld.vector)):
                errors.append(f"GravityLoad acceleration must be finite, got {tuple(ld.vector)}")
            elif not any(e.material.density > 0.0 for e in model.elements):
                errors.append("GravityLoad given but no element material has a density")
        else:
            errors.append(f"Unknown load type {type(ld).__name__}")

    seen_joints = set()
    for j in model.joints:
        target = elements.get(j.element_id)
        if target is None:
            errors.append(f"Joint references non-existent Element ID {j.element_id}")
        elif not isinstance(target, BeamElement):
            errors.append(f"Joint targets plane Element ID {j.element_id}; only beams take joints")
        if j.element_id in seen_joints:
            errors.append(f"More than one Joint on Element ID {j.element_id}")
        seen_joints.add(j.element_id)

    return errors


def check_model(model: Model, tolerance: float = 1e-6) -> Model:
    """Raise ModelValidationError if ``validate_model`` finds anything; return the model otherwise."""
    errors = validate_model(model, tolerance)
    if errors:
        raise ModelValidationError(errors)
    return model


# -------------------------------------------------------------------------
# Build / repair
# -------------------------------------------------------------------------

NodeInput = Union[Node, Point3, Sequence[float]]


def build_model(
    nodes: Sequence[NodeInput],
    elements: Sequence[Element],
    supports: Sequence[Support] = (),
    loads: Sequence[Load] = (),
    joints: Sequence[Joint] = (),
    tolerance: float = 1e-6,
) -> Model:
    """
    Assemble a consistent Model from raw parts.

    Steps:
    1. Nodes: Node objects keep their ids; bare positions get the next
       free id. A node within ``tolerance`` of an earlier one is merged
       into it and every reference to its id is redirected.
    2. Supports given by position are resolved to node ids.
    3. Beams get their local axis triad.
    4. validate_model; any error raises ModelValidationError.

    Raises:
    -------
    ModelValidationError
        With every problem found. Nothing partial is returned.
    """
    # Imported here: v3d.elements works on plain arrays and has no model dependency
    from .v3d.elements import local_axes

    explicit_ids = {n.id for n in nodes if isinstance(n, Node)}
    next_id = max(explicit_ids) + 1 if explicit_ids else 0

    index = _NodeIndex(tolerance)
    kept: List[Node] = []
    remap: Dict[int, int] = {}
    for raw in nodes:
        if isinstance(raw, Node):
            candidate = raw
        else:
            x, y, *rest = tuple(raw)
            candidate = Node(next_id, float(x), float(y), float(rest[0]) if rest else 0.0)
            next_id += 1

        existing = index.find(candidate.x, candidate.y, candidate.z)
        if existing is not None:
            remap[candidate.id] = existing.id
            continue
        index.add(candidate)
        kept.append(candidate)

    def node_ref(nid: int) -> int:
        return remap.get(nid, nid)

    positions = {n.id: n.position for n in kept}
    built_elements: List[Element] = []
    for e in elements:
        if isinstance(e, BeamElement):
            e = replace(e, ni=node_ref(e.ni), nj=node_ref(e.nj))
            p1, p2 = positions.get(e.ni), positions.get(e.nj)
            if e.axes is None and p1 is not None and p2 is not None and p1.distance_to(p2) > 1e-12:
                ex, ey, ez = local_axes(p1.to_array(), p2.to_array(), e.beta)
                e = replace(e, axes=(tuple(ex), tuple(ey), tuple(ez)))
        else:
            e = replace(e, node_ids=tuple(node_ref(n) for n in e.node_ids))
        built_elements.append(e)

    built_supports: List[Support] = []
    for s in supports:
        if s.node_id is not None:
            s = replace(s, node_id=node_ref(s.node_id))
        elif s.position is not None:
            hit = index.find(s.position.x, s.position.y, s.position.z)
            if hit is not None:
                s = replace(s, node_id=hit.id)
        built_supports.append(s)

    built_loads = [
        replace(ld, node_id=node_ref(ld.node_id)) if isinstance(ld, PointLoad) else ld
        for ld in loads
    ]

    model = Model(
        nodes=kept,
        elements=built_elements,
        supports=built_supports,
        loads=built_loads,
        joints=joints,
    )
    return check_model(model, tolerance)
