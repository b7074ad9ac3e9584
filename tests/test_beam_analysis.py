# tests/test_beam_analysis.py
"""
3D FRAME TESTS: Closed-Form Checks and Equilibrium
==================================================

Each test builds a small model, solves it through femcore.solve, and
compares with the textbook answer:

    cantilever tip load      δ = F·L³ / (3·E·I)
    simply supported, P      δ = P·L³ / (48·E·I)
    simply supported, UDL    δ = 5·q·L⁴ / (384·E·I)
    cantilever torsion       θ = M·L / (G·J)
"""

import math

import numpy as np
import pytest

from femcore import (
    BeamElement,
    ElementLoad,
    PointLoad,
    Support,
    build_model,
    circle_section,
    h_section,
    solve,
)

SIMPLE_END = (False, True, True, False, False, False)   # DY, DZ held
PIN_END = (True, True, True, True, False, False)        # DX..DZ and torsion held


def applied_load_resultant(model):
    """Sum of point and element loads as (Fx, Fy, Fz, Mx, My, Mz) about the origin."""
    nodes = model.node_map()
    total = np.zeros(6)
    for ld in model.point_loads():
        p = nodes[ld.node_id].position.to_array()
        f = np.asarray(ld.force)
        total[:3] += f
        total[3:] += np.asarray(ld.moment) + np.cross(p, f)
    elements = model.element_map()
    for ld in model.element_loads():
        beam = elements[ld.element_id]
        p1 = nodes[beam.ni].position.to_array()
        p2 = nodes[beam.nj].position.to_array()
        R = np.vstack(beam.axes)
        q = np.asarray(ld.q) if not ld.local else R.T @ np.asarray(ld.q)
        f = q * np.linalg.norm(p2 - p1)
        total[:3] += f
        total[3:] += np.cross(0.5 * (p1 + p2), f)
    return total


class TestCantilever:

    def test_tip_deflection_solid_circle(self, cantilever):
        """L = 1000 mm, D = 100 mm, Fy = 1000 N at the tip."""
        L, F, E = 1000.0, 1000.0, 210000.0
        I = math.pi * 100.0 ** 4 / 64.0
        result = solve(cantilever(L=L, force=(0.0, F, 0.0)))
        uy = result.displacement(1)[1]
        expected = F * L ** 3 / (3.0 * E * I)
        assert abs(uy - expected) / expected < 1e-6
        assert result.displacement(1)[5] == pytest.approx(F * L ** 2 / (2.0 * E * I), rel=1e-6)

    def test_reaction_and_fixed_end_moment(self, cantilever):
        L, F = 1000.0, 1000.0
        result = solve(cantilever(L=L, force=(0.0, -F, 0.0)))
        r = result.reactions[0]
        assert r.force[1] == pytest.approx(F, rel=1e-9)
        assert abs(r.moment[2]) == pytest.approx(F * L, rel=1e-9)
        sf = result.section_forces[0]
        assert abs(sf.Mz_i) == pytest.approx(F * L, rel=1e-9)
        assert abs(sf.Mz_j) < 1e-6 * F * L

    def test_h_section_weak_axis(self, steel):
        """H 200×100×8×12: a y-load bends about local z and uses Izz."""
        sec = h_section(200.0, 100.0, 8.0, 12.0)
        L, F = 4000.0, 10000.0
        model = build_model(
            nodes=[(0, 0, 0), (L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, sec)],
            supports=[Support.fixed_at(0)],
            loads=[PointLoad(1, force=(0.0, F, 0.0))],
        )
        uy = solve(model).displacement(1)[1]
        assert uy == pytest.approx(F * L ** 3 / (3 * steel.E * sec.Izz), rel=1e-6)

    def test_torsion(self, cantilever, steel, bar100):
        L, M = 1000.0, 5.0e6
        result = solve(cantilever(L=L, moment=(M, 0.0, 0.0)))
        theta = result.displacement(1)[3]
        assert theta == pytest.approx(M * L / (steel.G * bar100.J), rel=1e-9)
        assert abs(result.section_forces[0].Mx_i) == pytest.approx(M, rel=1e-9)

    def test_axial(self, cantilever, steel, bar100):
        L, P = 1000.0, 50000.0
        result = solve(cantilever(L=L, force=(P, 0.0, 0.0)))
        assert result.displacement(1)[0] == pytest.approx(P * L / (steel.E * bar100.A), rel=1e-9)

    def test_beta_rotates_the_section(self, steel):
        """A 90° beta swaps the roles of Iyy and Izz for a y-load."""
        sec = h_section(200.0, 100.0, 8.0, 12.0)
        L, F = 3000.0, 1000.0
        model = build_model(
            nodes=[(0, 0, 0), (L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, sec, beta=90.0)],
            supports=[Support.fixed_at(0)],
            loads=[PointLoad(1, force=(0.0, F, 0.0))],
        )
        uy = solve(model).displacement(1)[1]
        assert uy == pytest.approx(F * L ** 3 / (3 * steel.E * sec.Iyy), rel=1e-6)


def simply_supported(steel, section, L, n_el=2, point=None, udl=None):
    xs = np.linspace(0.0, L, n_el + 1)
    nodes = [(x, 0.0, 0.0) for x in xs]
    elements = [BeamElement(k, k, k + 1, steel, section) for k in range(n_el)]
    supports = [
        Support(node_id=0, fixed=PIN_END),
        Support(node_id=n_el, fixed=SIMPLE_END),
    ]
    loads = []
    if point is not None:
        loads.append(PointLoad(n_el // 2, force=(0.0, 0.0, -point)))
    if udl is not None:
        loads.extend(ElementLoad(k, q=(0.0, 0.0, -udl)) for k in range(n_el))
    return build_model(nodes, elements, supports, loads)


class TestSimplySupported:

    def test_midspan_point_load(self, steel, bar100):
        L, P = 6000.0, 2000.0
        result = solve(simply_supported(steel, bar100, L, point=P))
        uz = result.displacement(1)[2]
        assert uz == pytest.approx(-P * L ** 3 / (48 * steel.E * bar100.Iyy), rel=1e-6)
        assert abs(result.section_forces[0].My_j) == pytest.approx(P * L / 4, rel=1e-6)

    def test_uniform_load(self, steel, bar100):
        L, q = 6000.0, 1.5
        result = solve(simply_supported(steel, bar100, L, n_el=4, udl=q))
        uz = result.displacement(2)[2]
        assert uz == pytest.approx(-5 * q * L ** 4 / (384 * steel.E * bar100.Iyy), rel=1e-6)
        # each support takes half the load
        assert result.reactions[0].force[2] == pytest.approx(q * L / 2, rel=1e-6)
        assert result.reactions[4].force[2] == pytest.approx(q * L / 2, rel=1e-6)

    def test_global_element_load_matches_local(self, steel, bar100):
        """For a member along x, global Z and local z coincide."""
        L, q = 5000.0, 2.0
        local = simply_supported(steel, bar100, L, udl=q)
        glob = build_model(
            nodes=list(local.nodes),
            elements=list(local.elements),
            supports=list(local.supports),
            loads=[ElementLoad(k, q=(0.0, 0.0, -q), local=False) for k in range(2)],
        )
        np.testing.assert_allclose(solve(glob).displacements, solve(local).displacements, rtol=1e-12)

    def test_inclined_member_global_load_equilibrium(self, steel, bar100):
        model = build_model(
            nodes=[(0, 0, 0), (3000, 1000, 2000)],
            elements=[BeamElement(0, 0, 1, steel, bar100)],
            supports=[Support.fixed_at(0)],
            loads=[ElementLoad(0, q=(0.0, 0.0, -1.0), local=False)],
        )
        result = solve(model)
        total = result.total_reaction() + applied_load_resultant(model)
        np.testing.assert_allclose(total, 0.0, atol=1e-6 * np.abs(result.total_reaction()).max())


def portal_frame(steel, section, h=3000.0, span=6000.0):
    return dict(
        nodes=[(0, 0, 0), (0, 0, h), (span, 0, h), (span, 0, 0)],
        elements=[
            BeamElement(0, 0, 1, steel, section),
            BeamElement(1, 1, 2, steel, section),
            BeamElement(2, 3, 2, steel, section),
        ],
        supports=[Support.fixed_at(0), Support.fixed_at(3)],
    )


class TestEquilibrium:

    def test_portal_frame(self, steel):
        sec = h_section(300.0, 150.0, 6.5, 9.0)
        parts = portal_frame(steel, sec)
        model = build_model(
            **parts,
            loads=[
                PointLoad(1, force=(10000.0, 0.0, 0.0)),
                PointLoad(2, force=(0.0, 2000.0, -30000.0), moment=(0.0, 1.0e6, 0.0)),
                ElementLoad(1, q=(0.0, 0.0, -5.0)),
            ],
        )
        result = solve(model)
        total = result.total_reaction() + applied_load_resultant(model)
        scale = np.abs(applied_load_resultant(model)).max()
        np.testing.assert_allclose(total, 0.0, atol=1e-8 * scale)

    def test_lateral_load_splits_between_columns(self, steel, bar100):
        model = build_model(**portal_frame(steel, bar100), loads=[PointLoad(1, force=(10000.0, 0, 0))])
        result = solve(model)
        fx = [result.reactions[n].force[0] for n in (0, 3)]
        assert sum(fx) == pytest.approx(-10000.0, rel=1e-9)
        assert fx[0] < 0 and fx[1] < 0

    def test_solve_is_deterministic(self, steel, bar100):
        model = build_model(**portal_frame(steel, bar100), loads=[PointLoad(2, force=(1.0, 2.0, -3.0))])
        first = solve(model)
        second = solve(model)
        np.testing.assert_array_equal(first.displacements, second.displacements)
        assert model.nodes == build_model(**portal_frame(steel, bar100)).nodes


class TestSupportVariants:

    def test_spring_at_tip(self, steel, bar100):
        L, F, k = 1000.0, 1000.0, 50.0
        I = bar100.Izz
        model = build_model(
            nodes=[(0, 0, 0), (L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, bar100)],
            supports=[Support.fixed_at(0), Support.elastic(1, springs=(0, k, 0, 0, 0, 0))],
            loads=[PointLoad(1, force=(0.0, -F, 0.0))],
        )
        result = solve(model)
        uy = result.displacement(1)[1]
        assert uy == pytest.approx(-F / (k + 3 * steel.E * I / L ** 3), rel=1e-9)
        assert result.reactions[1].force[1] == pytest.approx(-k * uy, rel=1e-9)
        fy = result.reactions[0].force[1] + result.reactions[1].force[1]
        assert fy == pytest.approx(F, rel=1e-9)

    def test_prescribed_settlement(self, steel, bar100):
        """Propped cantilever with the prop settling by δ: R = 3EIδ/L³."""
        L, delta = 2000.0, -5.0
        model = build_model(
            nodes=[(0, 0, 0), (L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, bar100)],
            supports=[
                Support.fixed_at(0),
                Support(node_id=1, fixed=(False, False, True, False, False, False),
                        displacements=(0, 0, delta, 0, 0, 0)),
            ],
        )
        result = solve(model)
        assert result.displacement(1)[2] == pytest.approx(delta)
        expected = 3 * steel.E * bar100.Iyy * abs(delta) / L ** 3
        assert abs(result.reactions[1].force[2]) == pytest.approx(expected, rel=1e-9)

    def test_support_given_by_position(self, steel, bar100):
        model = build_model(
            nodes=[(0, 0, 0), (1000, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, bar100)],
            supports=[Support.at_position((0.0, 0.0, 1e-9))],
            loads=[PointLoad(1, force=(0, 100.0, 0))],
        )
        assert model.supports[0].node_id == 0
        assert solve(model).displacement(1)[1] > 0


class TestResultViews:

    def test_displaced_positions_scale(self, cantilever):
        result = solve(cantilever(force=(0.0, 1000.0, 0.0)))
        uy = result.displacement(1)[1]
        moved = result.displaced_positions(scale=100.0)
        assert moved[1].y == pytest.approx(100.0 * uy)
        assert moved[0].x == 0.0

    def test_tables(self, cantilever):
        result = solve(cantilever(force=(0.0, 1000.0, 0.0)))
        disp = result.displacement_table()
        assert list(disp.columns) == ["node_id", "DX", "DY", "DZ", "RX", "RY", "RZ"]
        assert len(disp) == 2
        forces = result.section_force_table()
        assert forces.loc[0, "element_id"] == 0
        assert "My_j" in forces.columns
        reactions = result.reaction_table()
        assert reactions.loc[0, "Fy"] == pytest.approx(-1000.0)
        assert result.stress_table().empty
