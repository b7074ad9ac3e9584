# tests/test_joints.py
"""
Joint tests: end releases and rotational springs on beams, checked
against frames whose moments are known by hand.
"""

import numpy as np
import pytest

from femcore import (
    BeamElement,
    ElementLoad,
    Joint,
    MechanismError,
    PointLoad,
    SolverOptions,
    Support,
    build_model,
    solve,
)


class TestJointFactories:

    def test_pin_releases_rotations_at_both_ends(self):
        j = Joint.pin(4)
        assert j.released == (False,) * 3 + (True,) * 3 + (False,) * 3 + (True,) * 3
        assert not j.is_rigid
        assert Joint.rigid(4).is_rigid

    def test_one_sided_releases(self):
        assert Joint.pin_rigid(0).released[3:6] == (True, True, True)
        assert not any(Joint.pin_rigid(0).released[6:])
        assert Joint.rigid_pin(0).released[9:] == (True, True, True)
        assert not any(Joint.rigid_pin(0).released[:9])

    def test_semi_rigid_springs_layout(self):
        j = Joint.semi_rigid(2, start=(1.0, 2.0, 3.0), end=(4.0, 5.0, 6.0))
        assert j.springs[3:6] == (1.0, 2.0, 3.0)
        assert j.springs[9:] == (4.0, 5.0, 6.0)
        assert j.name == "Semi-Rigid"

    def test_bad_joint_rejected(self):
        with pytest.raises(ValueError):
            Joint(0, released=(True,) * 6)
        with pytest.raises(ValueError):
            Joint.semi_rigid(0, start=(-1.0, 0.0, 0.0), end=(0.0, 0.0, 0.0))


class TestPortalWithPinnedBeam:
    """
    Fixed-base portal, beam pinned to both column tops, lateral load H at
    the left top. The beam acts as a link: each column is a cantilever
    taking H/2, so the base moment is H·h/2 and the top moment vanishes.
    """

    H, h, span = 10000.0, 3000.0, 6000.0

    @pytest.fixture
    def result(self, steel, bar100):
        model = build_model(
            nodes=[(0, 0, 0), (0, 0, self.h), (self.span, 0, self.h), (self.span, 0, 0)],
            elements=[
                BeamElement(0, 0, 1, steel, bar100),
                BeamElement(1, 1, 2, steel, bar100),
                BeamElement(2, 3, 2, steel, bar100),
            ],
            supports=[Support.fixed_at(0), Support.fixed_at(3)],
            loads=[PointLoad(1, force=(self.H, 0.0, 0.0))],
            joints=[Joint.pin(1)],
        )
        return solve(model)

    def test_column_base_moments(self, result):
        expected = self.H * self.h / 2.0
        for eid in (0, 2):
            assert abs(result.section_forces[eid].My_i) == pytest.approx(expected, rel=0.01)

    def test_column_top_moments_vanish(self, result):
        scale = self.H * self.h
        assert abs(result.section_forces[0].My_j) < 0.01 * scale
        assert abs(result.section_forces[2].My_j) < 0.01 * scale

    def test_beam_carries_no_moment(self, result):
        beam = result.section_forces[1]
        scale = self.H * self.h
        np.testing.assert_allclose(beam.start[3:], 0.0, atol=1e-6 * scale)
        np.testing.assert_allclose(beam.end[3:], 0.0, atol=1e-6 * scale)

    def test_no_regularization_needed(self, result):
        assert not result.regularized
        assert result.warnings == []


class TestFixedFixedBeam:

    def test_central_point_load(self, steel, bar100):
        """Built-in both ends, P at midspan: end and midspan moments PL/8."""
        L, P = 4000.0, 1000.0
        model = build_model(
            nodes=[(0, 0, 0), (L / 2, 0, 0), (L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, bar100), BeamElement(1, 1, 2, steel, bar100)],
            supports=[Support.fixed_at(0), Support.fixed_at(2)],
            loads=[PointLoad(1, force=(0.0, -P, 0.0))],
        )
        result = solve(model)
        assert abs(result.section_forces[0].Mz_i) == pytest.approx(P * L / 8, rel=1e-9)
        assert abs(result.section_forces[0].Mz_j) == pytest.approx(P * L / 8, rel=1e-9)
        assert result.displacement(1)[1] == pytest.approx(
            -P * L ** 3 / (192 * steel.E * bar100.Izz), rel=1e-9
        )


class TestSemiRigidEnds:
    """
    One member built in at both nodes under a UDL, joined through
    rotational springs k. The end moment interpolates between pinned
    and fixed:  M = qL²/12 · 1 / (1 + 2EI/(kL)).
    """

    L, q = 5000.0, 2.0

    def _end_moment(self, steel, section, k):
        model = build_model(
            nodes=[(0, 0, 0), (self.L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, section)],
            supports=[Support.fixed_at(0), Support.fixed_at(1)],
            loads=[ElementLoad(0, q=(0.0, -self.q, 0.0))],
            joints=[Joint.semi_rigid(0, start=(k, k, k), end=(k, k, k))],
        )
        return abs(solve(model).section_forces[0].Mz_i)

    def test_intermediate_stiffness(self, steel, bar100):
        EI = steel.E * bar100.Izz
        k = 2.0 * EI / self.L
        expected = self.q * self.L ** 2 / 12 / 2.0
        assert self._end_moment(steel, bar100, k) == pytest.approx(expected, rel=1e-9)

    def test_stiff_spring_approaches_fixed(self, steel, bar100):
        EI = steel.E * bar100.Izz
        moment = self._end_moment(steel, bar100, 1e6 * EI / self.L)
        assert moment == pytest.approx(self.q * self.L ** 2 / 12, rel=1e-5)

    def test_soft_spring_approaches_pinned(self, steel, bar100):
        EI = steel.E * bar100.Izz
        moment = self._end_moment(steel, bar100, 1e-6 * EI / self.L)
        assert moment < 1e-5 * self.q * self.L ** 2


class TestReleasedTip:
    """
    A cantilever whose tip is released leaves the tip node's rotations
    without stiffness. That is a mechanism unless regularization is on.
    """

    L, P = 1000.0, 500.0

    @pytest.fixture
    def model(self, steel, bar100):
        return build_model(
            nodes=[(0, 0, 0), (self.L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, bar100)],
            supports=[Support.fixed_at(0)],
            loads=[PointLoad(1, force=(0.0, self.P, 0.0))],
            joints=[Joint.rigid_pin(0)],
        )

    def test_mechanism_without_regularization(self, model):
        with pytest.raises(MechanismError) as info:
            solve(model)
        err = info.value
        assert err.size - err.rank == 3
        labels = {label for mode in err.modes for label in mode.labels[:1]}
        assert labels <= {"NodeId=1:RX", "NodeId=1:RY", "NodeId=1:RZ"}

    def test_regularized_solve(self, model, steel, bar100):
        result = solve(model, SolverOptions(enable_regularization=True))
        assert result.regularized
        assert result.warnings
        uy = result.displacement(1)[1]
        assert uy == pytest.approx(self.P * self.L ** 3 / (3 * steel.E * bar100.Izz), rel=1e-6)
        assert abs(result.section_forces[0].Mz_i) == pytest.approx(self.P * self.L, rel=1e-6)

    def test_auto_regularize_only_when_needed(self, model, cantilever):
        options = SolverOptions(auto_regularize=True)
        assert solve(model, options).regularized
        healthy = solve(cantilever(force=(0.0, 1.0, 0.0)), options)
        assert not healthy.regularized
        assert healthy.warnings == []


class TestAxiallyReleasedTip:
    """
    Releasing the axial DOF at the tip end disconnects the tip node's DX:
    a translational mechanism. Rotational regularization cannot cover it;
    translational regularization can, and leaves the bending answer alone.
    """

    L, P = 1000.0, 500.0

    @pytest.fixture
    def model(self, steel, bar100):
        axial_release = (False,) * 6 + (True,) + (False,) * 5
        return build_model(
            nodes=[(0, 0, 0), (self.L, 0, 0)],
            elements=[BeamElement(0, 0, 1, steel, bar100)],
            supports=[Support.fixed_at(0)],
            loads=[PointLoad(1, force=(0.0, self.P, 0.0))],
            joints=[Joint(0, released=axial_release, name="Axial-Release")],
        )

    def test_mechanism_names_tip_dx(self, model):
        with pytest.raises(MechanismError) as info:
            solve(model)
        err = info.value
        assert err.size - err.rank == 1
        assert err.modes[0].labels[0] == "NodeId=1:DX"
        assert err.modes[0].involves_translation()

    def test_rotational_regularization_is_not_enough(self, model):
        with pytest.raises(MechanismError):
            solve(model, SolverOptions(enable_regularization=True))

    def test_translational_regularization(self, model, steel, bar100):
        result = solve(model, SolverOptions(enable_translational_regularization=True))
        assert result.regularized
        assert result.warnings
        uy = result.displacement(1)[1]
        assert uy == pytest.approx(self.P * self.L ** 3 / (3 * steel.E * bar100.Izz), rel=1e-6)
        assert abs(result.displacement(1)[0]) < 1e-12
        assert abs(result.section_forces[0].Mz_i) == pytest.approx(self.P * self.L, rel=1e-6)

    def test_auto_regularize_covers_translation(self, model):
        result = solve(model, SolverOptions(auto_regularize=True))
        assert result.regularized
        assert any("translational=" in w for w in result.warnings)
