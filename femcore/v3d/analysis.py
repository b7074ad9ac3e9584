# femcore/v3d/analysis.py
"""
3D frame analysis with beam elements.

Pipeline:
    local stiffness + joints + element loads and self-weight (local axes)
    → Tᵀ·k·T into global K, Tᵀ·fe into F, point loads into F
    → free/fixed partition, springs on Kff
    → SVD rank check (abort, or regularize if allowed)
    → dense solve → NaN/inf check
    → section forces f = k·(T·u) - fe per member, reactions R = K·d - F
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ..config import SolverOptions
from ..errors import GeometryError
from ..kernel.assemble import add_nodal_load, assemble_global_F, assemble_global_K
from ..kernel.boundary import collect_constraints
from ..kernel.diagnostics import reference_stiffness
from ..kernel.dof import DOFManager
from ..kernel.solve import solve_linear
from ..model import BeamElement, Model
from ..results import ReactionForce, Result, SectionForces
from .elements import (
    CondensedBeam,
    beam_end_forces,
    beam_global_stiffness,
    beam_local_stiffness,
    beam_transform,
    condense_joint,
    equivalent_nodal_loads,
    local_axes,
    rotation_matrix,
)

logger = logging.getLogger(__name__)


@dataclass
class BeamState:
    """Per-member data kept between assembly and force recovery."""
    beam: BeamElement
    L: float
    T: np.ndarray
    ke_local: np.ndarray
    fe_local: np.ndarray
    condensed: Optional[CondensedBeam] = None


def _member_states(model: Model) -> Dict[int, BeamState]:
    nodes = model.node_map()
    joints = model.joint_map()
    loads_by_element: Dict[int, list] = {}
    for ld in model.element_loads():
        loads_by_element.setdefault(ld.element_id, []).append(ld)
    gravity = sum((ld.vector for ld in model.gravity_loads()), np.zeros(3))

    states: Dict[int, BeamState] = {}
    errors: List[str] = []
    bad: List[int] = []
    for beam in model.beams:
        p1 = nodes[beam.ni].position.to_array()
        p2 = nodes[beam.nj].position.to_array()
        L = float(np.linalg.norm(p2 - p1))
        if L <= 1e-12:
            errors.append(f"Element {beam.id}: zero length (nodes {beam.ni} and {beam.nj} coincide)")
            bad.append(beam.id)
            continue

        axes = beam.axes if beam.axes is not None else local_axes(p1, p2, beam.beta)
        T = beam_transform(axes)
        R = rotation_matrix(axes)

        s, mat = beam.section, beam.material
        ke = beam_local_stiffness(mat.E, mat.G, s.A, s.Iyy, s.Izz, s.J, L)

        fe = np.zeros(12)
        for ld in loads_by_element.get(beam.id, ()):
            q, m = np.asarray(ld.q), np.asarray(ld.m)
            if not ld.local:
                q, m = R @ q, R @ m
            fe += equivalent_nodal_loads(L, q, m)
        if mat.density > 0.0 and np.any(gravity):
            # self-weight per unit length, global → local
            fe += equivalent_nodal_loads(L, R @ (mat.density * s.A * gravity))

        condensed = None
        joint = joints.get(beam.id)
        if joint is not None:
            condensed = condense_joint(ke, fe, joint)

        states[beam.id] = BeamState(beam=beam, L=L, T=T, ke_local=ke, fe_local=fe, condensed=condensed)

    if errors:
        raise GeometryError(errors, element_ids=bad)
    return states


def analyze_beams(model: Model, options: SolverOptions) -> Result:
    """Solve a model made of beam elements. The model must already be validated."""
    node_ids = [n.id for n in model.nodes]
    positions = {n.id: n.position for n in model.nodes}
    dof = DOFManager(dof_per_node=6, node_ids=node_ids)
    ndof = dof.ndof()
    labels = dof.labels()

    states = _member_states(model)

    k_contrib = []
    f_contrib = []
    for st in states.values():
        dof_map = dof.element_dof_map(st.beam.node_ids)
        ke = st.condensed.ke if st.condensed is not None else st.ke_local
        fe = st.condensed.fe if st.condensed is not None else st.fe_local
        k_contrib.append((dof_map, beam_global_stiffness(ke, st.T)))
        if np.any(fe):
            f_contrib.append((dof_map, st.T.T @ fe))

    K = assemble_global_K(ndof, k_contrib)
    F = assemble_global_F(ndof, f_contrib)
    for ld in model.point_loads():
        add_nodal_load(F, dof.node_dofs(ld.node_id), ld.vector)

    constraints = collect_constraints(model.supports, dof)

    rot_ref, trans_ref = reference_stiffness(model)
    rot = rot_ref * options.rotational_regularization_factor
    trans = trans_ref * options.translational_regularization_factor
    explicit = (
        rot if options.enable_regularization else 0.0,
        trans if options.enable_translational_regularization else 0.0,
    )
    fallback = (rot, trans) if options.auto_regularize else None
    if any(explicit):
        logger.warning(
            "Regularizing free DOFs: rotational=%.3e, translational=%.3e", explicit[0], explicit[1]
        )

    solution = solve_linear(
        K, F, constraints.fixed, labels,
        values=constraints.values,
        springs=constraints.springs,
        regularization=explicit,
        fallback_regularization=fallback,
        max_modes=options.max_reported_modes,
        components_per_mode=options.components_per_mode,
    )
    d = solution.d

    section_forces = {}
    for eid, st in states.items():
        u_e = d[dof.element_dof_map(st.beam.node_ids)]
        values = beam_end_forces(st.ke_local, st.T, u_e, st.fe_local, st.condensed)
        section_forces[eid] = SectionForces(element_id=eid, values=values)

    reactions = {}
    for s in model.supports:
        if s.node_id in reactions:
            continue
        r = solution.R[dof.node_dofs(s.node_id)]
        reactions[s.node_id] = ReactionForce(node_id=s.node_id, force=r[:3].copy(), moment=r[3:].copy())

    logger.debug("Beam analysis: %d members, %d DOFs, %d free", len(states), ndof, solution.free.size)
    return Result(
        kind="beam",
        node_ids=node_ids,
        positions=positions,
        dof_per_node=6,
        displacements=d,
        reactions=reactions,
        section_forces=section_forces,
        report=solution.report,
        regularized=solution.regularized,
        deformation_scale=options.deformation_scale,
        warnings=list(solution.warnings),
    )
