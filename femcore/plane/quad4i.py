# femcore/plane/quad4i.py
"""
Q4I ELEMENT: 4-Node Quadrilateral with Incompatible (Bubble) Modes
==================================================================

PURPOSE:
--------
The plain bilinear quadrilateral locks in bending: a pure moment
produces spurious shear strain and the element comes out far too stiff.
Adding two internal "bubble" displacement modes per direction,

    N5 = 1 - ξ²        N6 = 1 - η²

lets the element bend. The bubble amplitudes belong to one element only,
so they are condensed out before assembly and the element still looks
like an ordinary 8-DOF quad to the rest of the model.

FORMULATION:
------------
At every integration point (ξ, η, w):

    J      = [∂N/∂ξ; ∂N/∂η] · [x y]            2×2 Jacobian
    Bc     compatible strain operator          3×8
    Bi     bubble strain operator              3×4
           (bubble derivatives pushed through the same J⁻¹)

    Kcc += Bcᵀ D Bc · w·detJ·t     Kci += Bcᵀ D Bi · w·detJ·t
    Kii += Biᵀ D Bi · w·detJ·t

Static condensation:

    Ke = Kcc - Kci · Kii⁻¹ · Kic
    Be(ξ, η) = Bc - Bi · Kii⁻¹ · Kic       (stress recovery operator)

Strain vector ordering is [εxx, εyy, γxy]; element DOFs are
[u1, v1, u2, v2, u3, v3, u4, v4] with corners counter-clockwise.

Bubble DOF ordering is [a5x, a6x, a5y, a6y].
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..config import IntegrationScheme
from ..errors import GeometryError

logger = logging.getLogger(__name__)

GP = 1.0 / math.sqrt(3.0)

# 2×2 Gauss points, ordered like the corners they sit next to: (-,-), (+,-), (+,+), (-,+)
GAUSS_2x2: List[Tuple[float, float, float]] = [
    (-GP, -GP, 1.0),
    (GP, -GP, 1.0),
    (GP, GP, 1.0),
    (-GP, GP, 1.0),
]

# Extrapolation from the 2×2 Gauss points to the corners (bilinear fit evaluated at ξ, η = ±√3)
_A = 1.0 + math.sqrt(3.0) / 2.0
_B = -0.5
_C = 1.0 - math.sqrt(3.0) / 2.0
EXTRAPOLATION = np.array([
    [_A, _B, _C, _B],
    [_B, _A, _B, _C],
    [_C, _B, _A, _B],
    [_B, _C, _B, _A],
])


def gauss_points(scheme: IntegrationScheme) -> List[Tuple[float, float, float]]:
    """
    Integration points (ξ, η, wξ·wη) for a scheme.

    GAUSS_1: centre, weight 4
    GAUSS_4: 2×2 at ±1/√3, weight 1
    GAUSS_9: 3×3 at 0, ±√(3/5), weights 8/9 and 5/9
    """
    scheme = IntegrationScheme(scheme)
    if scheme is IntegrationScheme.GAUSS_1:
        return [(0.0, 0.0, 4.0)]
    if scheme is IntegrationScheme.GAUSS_4:
        return list(GAUSS_2x2)

    a = math.sqrt(3.0 / 5.0)
    line = [(-a, 5.0 / 9.0), (0.0, 8.0 / 9.0), (a, 5.0 / 9.0)]
    return [(xi, eta, wx * wy) for eta, wy in line for xi, wx in line]


def shape_derivatives(xi: float, eta: float) -> Tuple[np.ndarray, np.ndarray]:
    """∂N/∂ξ and ∂N/∂η of the four bilinear shape functions."""
    dN_dxi = 0.25 * np.array([-(1.0 - eta), (1.0 - eta), (1.0 + eta), -(1.0 + eta)])
    dN_deta = 0.25 * np.array([-(1.0 - xi), -(1.0 + xi), (1.0 + xi), (1.0 - xi)])
    return dN_dxi, dN_deta


def jacobian(coords: np.ndarray, xi: float, eta: float) -> np.ndarray:
    """
    J = [[∂x/∂ξ, ∂y/∂ξ], [∂x/∂η, ∂y/∂η]] for corner coordinates ``coords`` (4×2).
    """
    dN_dxi, dN_deta = shape_derivatives(xi, eta)
    return np.vstack([dN_dxi, dN_deta]) @ coords


def compatible_b(coords: np.ndarray, xi: float, eta: float) -> np.ndarray:
    """Compatible strain operator Bc (3×8) at (ξ, η)."""
    invJ = np.linalg.inv(jacobian(coords, xi, eta))
    dN_dxi, dN_deta = shape_derivatives(xi, eta)
    dN = invJ @ np.vstack([dN_dxi, dN_deta])  # rows: ∂N/∂x, ∂N/∂y

    Bc = np.zeros((3, 8))
    Bc[0, 0::2] = dN[0]
    Bc[1, 1::2] = dN[1]
    Bc[2, 0::2] = dN[1]
    Bc[2, 1::2] = dN[0]
    return Bc


def incompatible_b(coords: np.ndarray, xi: float, eta: float) -> np.ndarray:
    """Bubble strain operator Bi (3×4) at (ξ, η)."""
    invJ = np.linalg.inv(jacobian(coords, xi, eta))
    d5x = -2.0 * xi * invJ[0, 0]
    d6x = -2.0 * eta * invJ[0, 1]
    d5y = -2.0 * xi * invJ[1, 0]
    d6y = -2.0 * eta * invJ[1, 1]
    return np.array([
        [d5x, d6x, 0.0, 0.0],
        [0.0, 0.0, d5y, d6y],
        [d5y, d6y, d5x, d6x],
    ])


@dataclass
class Quad4IStiffness:
    """
    Condensed stiffness of one element plus what stress recovery needs.

    ``kii_inv_kic`` is Kii⁻¹·Kic (4×8), or None when the bubble modes are
    not active (1-point integration).
    """
    ke: np.ndarray
    kcc: np.ndarray
    kci: np.ndarray
    kii: np.ndarray
    coords: np.ndarray
    D: np.ndarray
    kii_inv_kic: Optional[np.ndarray] = None

    @property
    def kic(self) -> np.ndarray:
        return self.kci.T

    @property
    def condensed(self) -> bool:
        return self.kii_inv_kic is not None

    def recovery_operator(self, xi: float, eta: float) -> np.ndarray:
        """Be(ξ, η) = Bc - Bi·Kii⁻¹·Kic (Bc alone when not condensed)."""
        Bc = compatible_b(self.coords, xi, eta)
        if not self.condensed:
            return Bc
        return Bc - incompatible_b(self.coords, xi, eta) @ self.kii_inv_kic

    def stress_at(self, ue: np.ndarray, xi: float, eta: float) -> np.ndarray:
        """[σxx, σyy, τxy] at (ξ, η) for element displacements ``ue`` (8,)."""
        return self.D @ (self.recovery_operator(xi, eta) @ ue)

    def corner_stresses(self, ue: np.ndarray) -> np.ndarray:
        """
        Stresses at the four corners (4×3).

        Sampled at the 2×2 Gauss points and extrapolated. Without bubble
        modes the centre value is used at every corner.
        """
        if not self.condensed:
            centre = self.stress_at(ue, 0.0, 0.0)
            return np.tile(centre, (4, 1))
        gp = np.array([self.stress_at(ue, xi, eta) for xi, eta, _ in GAUSS_2x2])
        return extrapolate_to_corners(gp)


def element_stiffness(
    coords: np.ndarray,
    D: np.ndarray,
    t: float,
    points: List[Tuple[float, float, float]],
    element_id: int = -1,
) -> Quad4IStiffness:
    """
    Condensed 8×8 stiffness of a Q4I element.

    Parameters:
    -----------
    coords : np.ndarray
        Corner coordinates (4×2), counter-clockwise
    D : np.ndarray
        Elasticity matrix (3×3)
    t : float
        Thickness
    points : List[Tuple[float, float, float]]
        (ξ, η, weight) from ``gauss_points``
    element_id : int
        Used only in error messages

    Raises:
    -------
    GeometryError
        If detJ is not positive at some integration point (collapsed,
        self-intersecting or clockwise element).
    """
    coords = np.asarray(coords, dtype=float)
    span = np.ptp(coords, axis=0)
    det_tol = 1e-12 * max(float(span @ span), 1e-300)

    kcc = np.zeros((8, 8))
    kci = np.zeros((8, 4))
    kii = np.zeros((4, 4))

    for xi, eta, w in points:
        detJ = float(np.linalg.det(jacobian(coords, xi, eta)))
        if not detJ > det_tol:
            raise GeometryError(
                [f"Element {element_id}: non-positive Jacobian determinant {detJ:.3e} at "
                 f"(xi={xi:.3f}, eta={eta:.3f}); check for collapsed corners or clockwise node order"],
                element_ids=[element_id],
            )
        Bc = compatible_b(coords, xi, eta)
        Bi = incompatible_b(coords, xi, eta)
        factor = w * detJ * t
        kcc += Bc.T @ D @ Bc * factor
        kci += Bc.T @ D @ Bi * factor
        kii += Bi.T @ D @ Bi * factor

    if len(points) == 1:
        # Bi vanishes at the centre: no bubble stiffness to condense
        logger.warning("Element %s: 1-point integration, bubble modes disabled", element_id)
        ke = 0.5 * (kcc + kcc.T)
        return Quad4IStiffness(ke=ke, kcc=kcc, kci=kci, kii=kii, coords=coords, D=D)

    kii_inv_kic = np.linalg.solve(kii, kci.T)
    ke = kcc - kci @ kii_inv_kic
    ke = 0.5 * (ke + ke.T)
    return Quad4IStiffness(
        ke=ke, kcc=kcc, kci=kci, kii=kii, coords=coords, D=D, kii_inv_kic=kii_inv_kic
    )


def extrapolate_to_corners(gp_stress: np.ndarray) -> np.ndarray:
    """
    Map values at the 2×2 Gauss points (4×k, ordered as GAUSS_2x2) to the
    four corners. Exact for fields that vary bilinearly over the element.
    """
    return EXTRAPOLATION @ np.asarray(gp_stress, dtype=float)


def principal_stresses(sxx, syy, txy) -> Tuple[float, float, float, float, float]:
    """
    In-plane principal stress measures.

    Returns:
    --------
    (p1, p2, von_mises, average, max_shear)
        p1 ≥ p2; von Mises = √(p1² + p2² - p1·p2)
    """
    centre = 0.5 * (sxx + syy)
    radius = math.sqrt((0.5 * (sxx - syy)) ** 2 + txy ** 2)
    p1 = centre + radius
    p2 = centre - radius
    von_mises = math.sqrt(max(p1 * p1 + p2 * p2 - p1 * p2, 0.0))
    return p1, p2, von_mises, 0.5 * (p1 + p2), 0.5 * abs(p1 - p2)
