# femcore/plane/analysis.py
"""
Planar (membrane) analysis with Q4I elements.

Pipeline:
    project nodes to the model plane
    → element stiffness (Q4I, condensed) → assemble K
    → point loads and lumped self-weight → F
    → springs on the diagonal, fixed DOFs eliminated by substitution
    → SVD rank check → dense solve → NaN/inf check
    → Gauss-point stress → corner extrapolation → nodal averaging
"""

import logging
from typing import Dict, List

import numpy as np

from ..config import IntegrationScheme, SolverOptions
from ..errors import GeometryError
from ..geometry import plane_coordinates
from ..kernel.assemble import add_nodal_load, assemble_global_K
from ..kernel.boundary import add_spring_stiffness, collect_constraints
from ..kernel.dof import DOFManager
from ..kernel.solve import solve_eliminated
from ..model import Model
from ..results import NodalStress, ReactionForce, Result
from .quad4i import Quad4IStiffness, element_stiffness, gauss_points, principal_stresses

logger = logging.getLogger(__name__)


def _signed_area(corners) -> float:
    """Shoelace area; positive for counter-clockwise corners."""
    pts = np.asarray(corners, dtype=float)
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def analyze_plane(model: Model, options: SolverOptions) -> Result:
    """Solve a model made of plane elements. The model must already be validated."""
    warnings: List[str] = []
    node_ids = [n.id for n in model.nodes]
    positions = {n.id: n.position for n in model.nodes}

    try:
        coords2d, basis = plane_coordinates([n.position for n in model.nodes], options.node_tolerance)
    except ValueError as exc:
        raise GeometryError([f"Plane model nodes are not coplanar: {exc}"]) from exc
    xy = {nid: coords2d[k] for k, nid in enumerate(node_ids)}

    # A fitted plane has an arbitrary normal sign; orient it so the first element runs counter-clockwise
    fitted = not np.allclose(basis, np.eye(3)[:2])
    if fitted and model.plane_elements and _signed_area([xy[n] for n in model.plane_elements[0].corner_ids]) < 0:
        basis = basis * np.array([[1.0], [-1.0]])
        coords2d[:, 1] *= -1.0
        xy = {nid: coords2d[k] for k, nid in enumerate(node_ids)}

    dof = DOFManager(dof_per_node=2, node_ids=node_ids)
    ndof = dof.ndof()
    labels = dof.labels()

    points = gauss_points(options.integration)
    if options.integration is IntegrationScheme.GAUSS_1:
        message = "1-point integration: bubble modes disabled, hourglass modes possible"
        logger.warning(message)
        warnings.append(message)

    # Element stiffness, collecting every degenerate element before failing
    stiffness: Dict[int, Quad4IStiffness] = {}
    contributions = []
    geometry_errors: List[str] = []
    bad_elements: List[int] = []
    for e in model.plane_elements:
        corners = e.corner_ids
        coords = np.array([xy[nid] for nid in corners])
        D = e.material.elasticity_matrix(options.plane_mode)
        try:
            st = element_stiffness(coords, D, e.thickness, points, element_id=e.id)
        except GeometryError as exc:
            geometry_errors.extend(exc.errors)
            bad_elements.append(e.id)
            continue
        stiffness[e.id] = st
        contributions.append((dof.element_dof_map(corners), st.ke))

    if geometry_errors:
        raise GeometryError(geometry_errors, element_ids=bad_elements)

    K = assemble_global_K(ndof, contributions)

    F = np.zeros(ndof)
    for ld in model.point_loads():
        in_plane = basis @ np.asarray(ld.force)
        add_nodal_load(F, dof.node_dofs(ld.node_id), in_plane)
        out_of_plane = np.asarray(ld.force) - in_plane @ basis
        if np.linalg.norm(out_of_plane) > 1e-9 * max(np.linalg.norm(ld.force), 1.0) or any(ld.moment):
            message = f"PointLoad at Node ID {ld.node_id}: out-of-plane force and moments ignored"
            logger.warning(message)
            warnings.append(message)

    gravity = sum((ld.vector for ld in model.gravity_loads()), np.zeros(3))
    if np.any(gravity):
        g_plane = basis @ gravity
        if np.linalg.norm(gravity - g_plane @ basis) > 1e-9 * np.linalg.norm(gravity):
            message = "GravityLoad: component normal to the model plane ignored"
            logger.warning(message)
            warnings.append(message)
        for e in model.plane_elements:
            if e.material.density <= 0.0:
                continue
            distinct = list(dict.fromkeys(e.corner_ids))
            area = abs(_signed_area([xy[nid] for nid in distinct]))
            # lumped: the element's weight shared equally by its distinct nodes
            share = e.material.density * e.thickness * area * g_plane / len(distinct)
            for nid in distinct:
                add_nodal_load(F, dof.node_dofs(nid), share)

    constraints = collect_constraints(model.supports, dof)
    K_springs = add_spring_stiffness(K, constraints.springs)

    if options.enable_regularization or options.enable_translational_regularization or options.auto_regularize:
        message = "Regularization applies to beam models only; ignored for plane elements"
        logger.warning(message)
        warnings.append(message)

    solution = solve_eliminated(
        K_springs, F, constraints.fixed, labels,
        values=constraints.values,
        max_modes=options.max_reported_modes,
        components_per_mode=options.components_per_mode,
    )
    d = solution.d

    # Reactions from the structure alone: supports and springs push back with K·d - F
    R = K @ d - F
    supported = []
    for s in model.supports:
        if s.node_id not in supported:
            supported.append(s.node_id)
    reactions = {}
    for nid in supported:
        r2 = R[dof.node_dofs(nid)]
        reactions[nid] = ReactionForce(node_id=nid, force=r2 @ basis, moment=np.zeros(3))

    # Stress recovery: corner values per element, then nodal averages
    sums = {nid: np.zeros(3) for nid in node_ids}
    counts = {nid: 0 for nid in node_ids}
    corner_stresses: Dict[int, np.ndarray] = {}
    for e in model.plane_elements:
        corners = e.corner_ids
        ue = d[dof.element_dof_map(corners)]
        sig = stiffness[e.id].corner_stresses(ue)
        corner_stresses[e.id] = sig
        # a triangle's repeated node counts once, with the mean of its two corners
        per_node: Dict[int, List[np.ndarray]] = {}
        for nid, s in zip(corners, sig):
            per_node.setdefault(nid, []).append(s)
        for nid, values in per_node.items():
            sums[nid] += np.mean(values, axis=0)
            counts[nid] += 1

    node_stresses = {}
    for nid in node_ids:
        if counts[nid] == 0:
            continue
        sxx, syy, txy = sums[nid] / counts[nid]
        p1, p2, vm, avg, tmax = principal_stresses(sxx, syy, txy)
        node_stresses[nid] = NodalStress(nid, sxx, syy, txy, p1, p2, vm, avg, tmax)

    logger.debug("Plane analysis: %d elements, %d DOFs", len(stiffness), ndof)
    return Result(
        kind="plane",
        node_ids=node_ids,
        positions=positions,
        dof_per_node=2,
        displacements=d,
        reactions=reactions,
        node_stresses=node_stresses,
        element_corner_stresses=corner_stresses,
        report=solution.report,
        plane_basis=basis,
        deformation_scale=options.deformation_scale,
        warnings=warnings,
    )
