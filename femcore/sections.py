# femcore/sections.py
"""
BEAM CROSS-SECTIONS: Parametric Shapes -> Section Properties
============================================================

Each factory returns a frozen CrossSection carrying the properties the
beam element needs:

    A      area
    Iyy    second moment about local y (resists bending in the x-z plane)
    Izz    second moment about local z (resists bending in the x-y plane)
    J      torsion constant
    iy, iz radii of gyration sqrt(I/A)

Shapes:
-------
    box_section(B, H, t)      B along local y, H along local z
    circle_section(D, t)      tube, or solid bar when t <= 0
    h_section(H, B, tw, tf)   doubly symmetric I/H, web along local z

Box and circle pick the solid branch when the wall thickness is zero or
negative, or when the walls meet in the middle (2t >= smallest dimension).

Units follow the caller (the tests use mm).
"""

import math
from dataclasses import dataclass
from typing import Dict

from .materials import Material


@dataclass(frozen=True)
class CrossSection:
    """Section properties of a prismatic beam."""
    name: str
    A: float
    Iyy: float
    Izz: float
    J: float

    def __post_init__(self):
        for label in ("A", "Iyy", "Izz", "J"):
            value = getattr(self, label)
            if not value > 0.0:
                raise ValueError(f"Section {self.name!r}: {label} must be positive, got {value}")

    @property
    def iy(self) -> float:
        return math.sqrt(self.Iyy / self.A)

    @property
    def iz(self) -> float:
        return math.sqrt(self.Izz / self.A)


def _rectangle_torsion(a: float, b: float) -> float:
    """Saint-Venant torsion constant of a solid a x b rectangle (approximate series)."""
    a, b = max(a, b), min(a, b)
    beta = 1.0 / 3.0 - 0.21 * (b / a) * (1.0 - b ** 4 / (12.0 * a ** 4))
    return beta * a * b ** 3


def box_section(B: float, H: float, t: float = 0.0, name: str = "") -> CrossSection:
    """
    Rectangular tube (or solid rectangle).

    Hollow: thin-walled Bredt formula J = 4·A0²·t / (2(B + H)) with
    A0 = (B - t)(H - t) the area enclosed by the wall centreline.
    """
    if B <= 0.0 or H <= 0.0:
        raise ValueError(f"Box section needs positive B and H, got B={B}, H={H}")
    name = name or f"Box {B:g}x{H:g}x{t:g}"

    if t <= 0.0 or 2.0 * t >= min(B, H):
        return CrossSection(
            name=name,
            A=B * H,
            Iyy=B * H ** 3 / 12.0,
            Izz=H * B ** 3 / 12.0,
            J=_rectangle_torsion(B, H),
        )

    b_in = B - 2.0 * t
    h_in = H - 2.0 * t
    A0 = (B - t) * (H - t)
    return CrossSection(
        name=name,
        A=B * H - b_in * h_in,
        Iyy=(B * H ** 3 - b_in * h_in ** 3) / 12.0,
        Izz=(H * B ** 3 - h_in * b_in ** 3) / 12.0,
        J=4.0 * A0 * A0 * t / (2.0 * (B + H)),
    )


def circle_section(D: float, t: float = 0.0, name: str = "") -> CrossSection:
    """Circular tube of outer diameter D and wall t; solid bar when t <= 0."""
    if D <= 0.0:
        raise ValueError(f"Circle section needs a positive diameter, got D={D}")
    name = name or (f"Circle {D:g}x{t:g}" if t > 0 else f"Circle {D:g}")

    r_out = D / 2.0
    r_in = 0.0 if (t <= 0.0 or 2.0 * t >= D) else r_out - t
    I = math.pi * (r_out ** 4 - r_in ** 4) / 4.0
    return CrossSection(
        name=name,
        A=math.pi * (r_out ** 2 - r_in ** 2),
        Iyy=I,
        Izz=I,
        J=2.0 * I,
    )


def h_section(H: float, B: float, tw: float, tf: float, name: str = "") -> CrossSection:
    """
    Doubly symmetric H (I) section. H = depth, B = flange width,
    tw = web thickness, tf = flange thickness. J from the open thin-wall
    sum (1/3)·Σ b·t³.
    """
    if min(H, B, tw, tf) <= 0.0:
        raise ValueError("H section dimensions must all be positive.")
    if 2.0 * tf >= H or tw >= B:
        raise ValueError(f"H section {H}x{B}x{tw}x{tf}: plates overlap.")
    name = name or f"H {H:g}x{B:g}x{tw:g}x{tf:g}"

    hw = H - 2.0 * tf
    return CrossSection(
        name=name,
        A=2.0 * B * tf + hw * tw,
        Iyy=B * H ** 3 / 12.0 - (B - tw) * hw ** 3 / 12.0,
        Izz=2.0 * tf * B ** 3 / 12.0 + hw * tw ** 3 / 12.0,
        J=(2.0 * B * tf ** 3 + hw * tw ** 3) / 3.0,
    )


def section_stiffness(material: Material, section: CrossSection, L: float) -> Dict[str, float]:
    """
    Member stiffness coefficients EA/L, EIyy/L, EIzz/L, GJ/L.

    Used for regularization sizing. Always derived from the elastic and
    shear moduli.
    """
    if L <= 0.0:
        raise ValueError(f"Member length must be positive, got {L}")
    E, G = material.E, material.G
    return {
        "EA/L": E * section.A / L,
        "EIyy/L": E * section.Iyy / L,
        "EIzz/L": E * section.Izz / L,
        "GJ/L": G * section.J / L,
    }
