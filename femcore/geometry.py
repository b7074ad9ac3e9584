# femcore/geometry.py
"""
GEOMETRY PRIMITIVES: Point3, Vector3, Edge3, Face3
==================================================

Pure value types used by the data model. They carry no analysis logic,
only the arithmetic the element routines need (differences, norms,
cross products) plus one helper that maps a set of coplanar points onto
2-D in-plane coordinates for the planar solver.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Vector3:
    """A free vector in 3D space."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, s: float) -> "Vector3":
        return Vector3(self.x * s, self.y * s, self.z * s)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def unit(self) -> "Vector3":
        n = self.norm()
        if n <= 0.0:
            raise ValueError("Cannot normalize a zero-length vector.")
        return self * (1.0 / n)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class Point3:
    """A position in 3D space."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, v: Vector3) -> "Point3":
        return Point3(self.x + v.x, self.y + v.y, self.z + v.z)

    def __sub__(self, other: "Point3") -> Vector3:
        # point - point is a vector
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def distance_to(self, other: "Point3") -> float:
        return (other - self).norm()

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class Edge3:
    """Index pair into a point list (a line between two vertices)."""
    i: int
    j: int

    def __post_init__(self):
        if self.i == self.j:
            raise ValueError(f"Edge3 needs two distinct indices, got ({self.i}, {self.j}).")

    def reversed(self) -> "Edge3":
        return Edge3(self.j, self.i)

    def key(self) -> Tuple[int, int]:
        """Orientation-independent key, useful for shared-edge lookups."""
        return (min(self.i, self.j), max(self.i, self.j))


@dataclass(frozen=True)
class Face3:
    """
    Index triple or quadruple into a point list.

    A triangle is stored with ``l == -1``; ``indices`` hides that
    sentinel from callers.
    """
    i: int
    j: int
    k: int
    l: int = -1

    @property
    def is_quad(self) -> bool:
        return self.l >= 0

    @property
    def indices(self) -> Tuple[int, ...]:
        if self.is_quad:
            return (self.i, self.j, self.k, self.l)
        return (self.i, self.j, self.k)

    def edges(self) -> List[Edge3]:
        idx = self.indices
        return [Edge3(idx[n], idx[(n + 1) % len(idx)]) for n in range(len(idx))]


def plane_coordinates(
    points: Sequence[Point3],
    tolerance: float = 1e-6,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Map coplanar 3D points onto 2D coordinates of their common plane.

    Points already lying in a plane z = const map to their own (x, y), so
    the usual XY-plane model is untouched. Any other plane is fitted with
    an SVD of the centred coordinates and the two leading singular
    directions become the in-plane axes.

    Parameters:
    -----------
    points : Sequence[Point3]
        The points to project (at least 3).
    tolerance : float
        Maximum allowed out-of-plane distance.

    Returns:
    --------
    (coords_2d, basis) : Tuple[np.ndarray, np.ndarray]
        coords_2d has shape (n, 2); basis has shape (2, 3), rows are the
        in-plane unit axes expressed in global coordinates.

    Raises:
    -------
    ValueError
        If the points are not coplanar within ``tolerance``.
    """
    P = np.array([p.to_array() for p in points], dtype=float)
    z_span = float(P[:, 2].max() - P[:, 2].min()) if len(P) else 0.0
    if z_span <= tolerance:
        basis = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        return P[:, :2].copy(), basis

    centroid = P.mean(axis=0)
    _, _, vt = np.linalg.svd(P - centroid)
    normal = vt[2]
    offsets = np.abs((P - centroid) @ normal)
    if offsets.max() > tolerance:
        raise ValueError(
            f"Points are not coplanar (max out-of-plane distance {offsets.max():.3e})."
        )
    basis = vt[:2]
    return (P - centroid) @ basis.T, basis
