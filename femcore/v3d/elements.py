# femcore/v3d/elements.py
"""
3D BEAM ELEMENT: Local Stiffness, Axes, Transform, Loads, Joints
================================================================

PURPOSE:
--------
A 2-node Euler-Bernoulli beam with 6 DOF per node:

    [ux, uy, uz, rx, ry, rz]_i  [ux, uy, uz, rx, ry, rz]_j

ENGINEERING DERIVATION:
-----------------------
With L the length and

    ka = EA/L    kt = GJ/L    kby = EIyy/L³    kbz = EIzz/L³

the local 12×12 stiffness is built from four 6×6 blocks

    Ke = [ k11  k12 ]
         [ k21  k22 ]       k21 = k12ᵀ

where bending in the x-y plane (uy, rz) uses kbz and bending in the
x-z plane (uz, ry) uses kby. The sign of the uz/ry coupling is opposite
to uy/rz because a positive ry rotates +x towards -z.

LOCAL AXES:
-----------
    ex = (Pj - Pi) / L
    ez = global Z made perpendicular to ex, then rotated by beta about ex
    ey = ez × ex
A near-vertical member (|ex·Z| ≥ 0.999) has no usable Z reference; its ez
starts from global X made perpendicular to ex instead.

TRANSFORMATION:
---------------
T (12×12) is block-diagonal with R = [ex; ey; ez] four times, so
u_local = T · u_global and

    ke_global = Tᵀ · ke_local · T
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import linalg

# |ex·Z| at or above this uses global X as the reference instead of Z
VERTICAL_THRESHOLD = 0.999


def beam_local_stiffness(
    E: float, G: float, A: float, Iyy: float, Izz: float, J: float, L: float,
) -> np.ndarray:
    """
    12×12 local stiffness matrix of a prismatic 3D beam.

    Parameters:
    -----------
    E, G : float
        Young's and shear modulus
    A, Iyy, Izz, J : float
        Section area, second moments about local y and z, torsion constant
    L : float
        Member length (> 0)

    Returns:
    --------
    np.ndarray
        Symmetric 12×12 matrix with six zero-energy rigid-body modes.
    """
    if L <= 0.0:
        raise ValueError(f"Beam length must be positive, got {L}")

    ka = E * A / L
    kt = G * J / L
    kby = E * Iyy / L ** 3
    kbz = E * Izz / L ** 3

    k11 = np.zeros((6, 6))
    k11[0, 0] = ka
    k11[1, 1] = 12.0 * kbz
    k11[1, 5] = k11[5, 1] = 6.0 * kbz * L
    k11[2, 2] = 12.0 * kby
    k11[2, 4] = k11[4, 2] = -6.0 * kby * L
    k11[3, 3] = kt
    k11[4, 4] = 4.0 * kby * L * L
    k11[5, 5] = 4.0 * kbz * L * L

    k22 = k11.copy()
    k22[1, 5] = k22[5, 1] = -6.0 * kbz * L
    k22[2, 4] = k22[4, 2] = 6.0 * kby * L

    k12 = np.zeros((6, 6))
    k12[0, 0] = -ka
    k12[1, 1] = -12.0 * kbz
    k12[1, 5] = 6.0 * kbz * L
    k12[5, 1] = -6.0 * kbz * L
    k12[2, 2] = -12.0 * kby
    k12[2, 4] = -6.0 * kby * L
    k12[4, 2] = 6.0 * kby * L
    k12[3, 3] = -kt
    k12[4, 4] = 2.0 * kby * L * L
    k12[5, 5] = 2.0 * kbz * L * L

    return np.block([[k11, k12], [k12.T, k22]])


def local_axes(
    p1: Sequence[float], p2: Sequence[float], beta: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Local triad (ex, ey, ez) of a member from Pi to Pj.

    Parameters:
    -----------
    p1, p2 : Sequence[float]
        End coordinates
    beta : float
        Rotation about ex in degrees

    Raises:
    -------
    ValueError
        If the two points coincide.
    """
    p1 = np.asarray(p1, dtype=float)
    p2 = np.asarray(p2, dtype=float)
    dx = p2 - p1
    L = float(np.linalg.norm(dx))
    if L <= 1e-12:
        raise ValueError(f"Zero-length member between {tuple(p1)} and {tuple(p2)}")
    ex = dx / L

    if abs(ex[2]) >= VERTICAL_THRESHOLD:
        ref = np.array([1.0, 0.0, 0.0])
    else:
        ref = np.array([0.0, 0.0, 1.0])
    v = ref - np.dot(ref, ex) * ex
    v /= np.linalg.norm(v)
    n = np.cross(ex, v)

    b = math.radians(beta)
    ez = v * math.cos(b) + n * math.sin(b)

    ey = np.cross(ez, ex)
    return ex, ey, ez


def rotation_matrix(axes) -> np.ndarray:
    """3×3 global-to-local rotation with rows ex, ey, ez."""
    return np.vstack([np.asarray(a, dtype=float) for a in axes])


def beam_transform(axes) -> np.ndarray:
    """12×12 global-to-local transformation T, so that u_local = T · u_global."""
    R = rotation_matrix(axes)
    T = np.zeros((12, 12))
    for k in range(4):
        T[3 * k:3 * k + 3, 3 * k:3 * k + 3] = R
    return T


def beam_global_stiffness(ke_local: np.ndarray, T: np.ndarray) -> np.ndarray:
    """ke_global = Tᵀ · ke_local · T."""
    return T.T @ ke_local @ T


def equivalent_nodal_loads(L: float, q: Sequence[float], m: Sequence[float] = (0.0, 0.0, 0.0)) -> np.ndarray:
    """
    Fixed-end (work-equivalent) nodal loads of a uniform line load, local axes.

    q = (qx, qy, qz) force per length, m = (mx, my, mz) moment per length.

        qx: qx·L/2 axial at each end
        qy: qy·L/2 at each end, Mz = +qy·L²/12 at i and -qy·L²/12 at j
        qz: qz·L/2 at each end, My = -qz·L²/12 at i and +qz·L²/12 at j
        mx: mx·L/2 torque at each end
        my: Fz = +my at i, -my at j
        mz: Fy = -mz at i, +mz at j

    Returns:
    --------
    np.ndarray
        12-vector in local DOF order
    """
    qx, qy, qz = q
    mx, my, mz = m
    fe = np.zeros(12)

    fe[0] = fe[6] = qx * L / 2.0

    fe[1] = fe[7] = qy * L / 2.0
    fe[5] = qy * L * L / 12.0
    fe[11] = -qy * L * L / 12.0

    fe[2] = fe[8] = qz * L / 2.0
    fe[4] = -qz * L * L / 12.0
    fe[10] = qz * L * L / 12.0

    fe[3] = fe[9] = mx * L / 2.0

    fe[2] += my
    fe[8] -= my
    fe[1] -= mz
    fe[7] += mz
    return fe


@dataclass
class CondensedBeam:
    """
    A beam whose released end DOFs are condensed out.

    The released local DOFs ``r`` get private internal DOFs connected to
    the node only through their springs. ``kint_pinv`` is the
    pseudo-inverse of the internal block (an internal mechanism, such as
    torsion released at both ends, has no stiffness and is left at zero).
    """
    ke: np.ndarray
    fe: np.ndarray
    ke_element: np.ndarray
    fe_element: np.ndarray
    released: np.ndarray
    k_in: np.ndarray
    kint_pinv: np.ndarray

    def internal_displacements(self, u_local: np.ndarray) -> np.ndarray:
        f_i = self.fe_element[self.released]
        return self.kint_pinv @ (f_i - self.k_in @ u_local)

    def element_displacements(self, u_local: np.ndarray) -> np.ndarray:
        """Element end displacements: node values, released entries replaced by internal ones."""
        e = np.array(u_local, dtype=float)
        e[self.released] = self.internal_displacements(u_local)
        return e

    def end_forces(self, u_local: np.ndarray) -> np.ndarray:
        return self.ke_element @ self.element_displacements(u_local) - self.fe_element


def condense_joint(ke: np.ndarray, fe: np.ndarray, joint) -> Optional[CondensedBeam]:
    """
    Apply a Joint's end releases to a local beam stiffness and load vector.

    For released DOFs r (internal) and node DOFs n:

        K_cond = K_nn - K_ni · K_ii⁺ · K_in
        f_cond = f_n  - K_ni · K_ii⁺ · f_i

    with K_ii = Ke[r, r] + diag(k_spring) and the springs coupling each
    internal DOF to its node DOF. Returns None for a rigid joint.
    """
    released = np.array(joint.released, dtype=bool)
    if not released.any():
        return None
    springs = np.array(joint.springs, dtype=float)[released]
    r = np.nonzero(released)[0]
    c = np.nonzero(~released)[0]
    nr = r.size

    K_nn = np.zeros((12, 12))
    K_nn[np.ix_(c, c)] = ke[np.ix_(c, c)]
    K_nn[r, r] += springs

    K_ni = np.zeros((12, nr))
    K_ni[c, :] = ke[np.ix_(c, r)]
    K_ni[r, np.arange(nr)] = -springs

    K_ii = ke[np.ix_(r, r)] + np.diag(springs)
    K_ii_pinv = linalg.pinv(K_ii)

    f_n = np.zeros(12)
    f_n[c] = fe[c]
    f_i = fe[r]

    K_cond = K_nn - K_ni @ K_ii_pinv @ K_ni.T
    f_cond = f_n - K_ni @ K_ii_pinv @ f_i
    return CondensedBeam(
        ke=0.5 * (K_cond + K_cond.T),
        fe=f_cond,
        ke_element=ke,
        fe_element=fe,
        released=released,
        k_in=K_ni.T,
        kint_pinv=K_ii_pinv,
    )


def beam_end_forces(
    ke_local: np.ndarray,
    T: np.ndarray,
    u_global: np.ndarray,
    fe_local: np.ndarray,
    condensed: Optional[CondensedBeam] = None,
) -> np.ndarray:
    """
    Local end forces f = Ke · (T · u) - fe of one member.

    ``u_global`` is the member's 12 global nodal displacements. With a
    joint the released DOFs are recovered first.
    """
    u_local = T @ u_global
    if condensed is not None:
        return condensed.end_forces(u_local)
    return ke_local @ u_local - fe_local
