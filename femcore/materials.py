# femcore/materials.py
"""
MATERIALS: Isotropic and Orthotropic Linear Elasticity
======================================================

A Material is a frozen value. Isotropic materials need E and nu; the
shear modulus follows as G = E / (2(1 + nu)). Orthotropic materials carry
nine independent engineering constants (Ex, Ey, Ez, Gxy, Gyz, Gzx,
nu_xy, nu_yz, nu_zx).

For 2D analysis the 3x3 elasticity matrix D relates
[sigma_xx, sigma_yy, tau_xy] to [eps_xx, eps_yy, gamma_xy].

Plane stress (isotropic):

    D = E / (1 - nu²) × [ 1   nu      0      ]
                        [ nu  1       0      ]
                        [ 0   0   (1 - nu)/2 ]

Plane strain (isotropic):

    D = E / ((1 + nu)(1 - 2nu)) × [ 1-nu   nu       0       ]
                                  [ nu     1-nu     0       ]
                                  [ 0      0    (1-2nu)/2   ]

UNITS:
------
The engine is unit-agnostic; keep them consistent. The examples and
tests use N and mm, so E for steel is 210000 N/mm².
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class Material:
    """
    Linear elastic material.

    Parameters:
    -----------
    name : str
        Display name
    E : float
        Young's modulus (the axial modulus Ex for orthotropic materials)
    nu : float
        Poisson ratio (nu_xy for orthotropic materials)
    density : float
        Mass density, turned into self-weight by a GravityLoad
    orthotropic : Optional[tuple]
        (Ex, Ey, Ez, Gxy, Gyz, Gzx, nu_xy, nu_yz, nu_zx), or None for isotropic
    """
    name: str
    E: float
    nu: float = 0.3
    density: float = 0.0
    orthotropic: Optional[tuple] = None

    def __post_init__(self):
        if self.E <= 0.0:
            raise ValueError(f"Material {self.name!r}: E must be positive, got {self.E}")
        if not (-1.0 < self.nu < 0.5):
            raise ValueError(f"Material {self.name!r}: nu must lie in (-1, 0.5), got {self.nu}")
        if self.orthotropic is not None and len(self.orthotropic) != 9:
            raise ValueError(f"Material {self.name!r}: orthotropic needs 9 constants")

    @classmethod
    def isotropic(cls, name: str, E: float, nu: float, density: float = 0.0) -> "Material":
        return cls(name=name, E=E, nu=nu, density=density)

    @classmethod
    def orthotropic_from(
        cls, name: str, density: float,
        Ex: float, Ey: float, Ez: float,
        Gxy: float, Gyz: float, Gzx: float,
        nu_xy: float, nu_yz: float, nu_zx: float,
    ) -> "Material":
        return cls(
            name=name, E=Ex, nu=nu_xy, density=density,
            orthotropic=(Ex, Ey, Ez, Gxy, Gyz, Gzx, nu_xy, nu_yz, nu_zx),
        )

    @classmethod
    def steel(cls) -> "Material":
        """Structural steel in N/mm² and t/mm³."""
        return cls(name="Steel", E=210000.0, nu=0.3, density=7.85e-9)

    @property
    def is_orthotropic(self) -> bool:
        return self.orthotropic is not None

    @property
    def G(self) -> float:
        """Shear modulus. Orthotropic materials use Gxy."""
        if self.orthotropic is not None:
            return self.orthotropic[3]
        return self.E / (2.0 * (1.0 + self.nu))

    def plane_stress_matrix(self) -> np.ndarray:
        if self.orthotropic is not None:
            Ex, Ey, _, Gxy, _, _, nu_xy, _, _ = self.orthotropic
            nu_yx = nu_xy * Ey / Ex
            c = 1.0 / (1.0 - nu_xy * nu_yx)
            return np.array([
                [c * Ex,         c * nu_yx * Ex, 0.0],
                [c * nu_xy * Ey, c * Ey,         0.0],
                [0.0,            0.0,            Gxy],
            ], dtype=float)

        E, nu = self.E, self.nu
        c = E / (1.0 - nu * nu)
        return c * np.array([
            [1.0, nu,  0.0],
            [nu,  1.0, 0.0],
            [0.0, 0.0, (1.0 - nu) / 2.0],
        ], dtype=float)

    def plane_strain_matrix(self) -> np.ndarray:
        if self.orthotropic is not None:
            # Full 3D compliance, then condense out sigma_zz (eps_zz = 0)
            Ex, Ey, Ez, Gxy, _, _, nu_xy, nu_yz, nu_zx = self.orthotropic
            nu_xz = nu_zx * Ex / Ez
            S = np.array([
                [1.0 / Ex,      -nu_xy / Ex, -nu_xz / Ex],
                [-nu_xy / Ex,   1.0 / Ey,    -nu_yz / Ey],
                [-nu_xz / Ex,   -nu_yz / Ey, 1.0 / Ez],
            ], dtype=float)
            C = np.linalg.inv(S)
            D = np.zeros((3, 3))
            D[:2, :2] = C[:2, :2]
            D[2, 2] = Gxy
            return D

        E, nu = self.E, self.nu
        c = E / ((1.0 + nu) * (1.0 - 2.0 * nu))
        return c * np.array([
            [1.0 - nu, nu,       0.0],
            [nu,       1.0 - nu, 0.0],
            [0.0,      0.0,      (1.0 - 2.0 * nu) / 2.0],
        ], dtype=float)

    def elasticity_matrix(self, mode: str = "stress") -> np.ndarray:
        if mode == "stress":
            return self.plane_stress_matrix()
        if mode == "strain":
            return self.plane_strain_matrix()
        raise ValueError(f"Unknown plane mode {mode!r}")
