# tests/conftest.py
"""Shared fixtures: steel, a solid Ø100 bar and small model builders (N, mm)."""

import pytest

from femcore import (
    BeamElement,
    Material,
    PlaneElement,
    PointLoad,
    Support,
    build_model,
    circle_section,
)


@pytest.fixture
def steel():
    return Material.isotropic("Steel", E=210000.0, nu=0.3, density=7.85e-9)


@pytest.fixture
def bar100():
    """Solid circular bar, D = 100 mm."""
    return circle_section(100.0)


@pytest.fixture
def cantilever(steel, bar100):
    """
    Factory for a single-element cantilever along +x, fixed at node 0.

    Returns a function (L, force, moment) -> Model with the load at node 1.
    """
    def make(L=1000.0, force=(0.0, 0.0, 0.0), moment=(0.0, 0.0, 0.0), section=None):
        return build_model(
            nodes=[(0.0, 0.0, 0.0), (L, 0.0, 0.0)],
            elements=[BeamElement(0, 0, 1, steel, section or bar100)],
            supports=[Support.fixed_at(0)],
            loads=[PointLoad(1, force=force, moment=moment)],
        )
    return make


@pytest.fixture
def tension_plate(steel):
    """
    Factory for one rectangular Q4I element, width w (x) by height h (y),
    left edge restrained, total force F in +x split over the right edge.
    """
    def make(w=2.0, h=1.0, F=1000.0, t=1.0):
        return build_model(
            nodes=[(0.0, 0.0), (w, 0.0), (w, h), (0.0, h)],
            elements=[PlaneElement(0, (0, 1, 2, 3), steel, thickness=t)],
            supports=[
                Support(node_id=0, fixed=(True, True, False, False, False, False)),
                Support(node_id=3, fixed=(True, False, False, False, False, False)),
            ],
            loads=[
                PointLoad(1, force=(F / 2.0, 0.0, 0.0)),
                PointLoad(2, force=(F / 2.0, 0.0, 0.0)),
            ],
        )
    return make
