# tests/test_materials.py
"""Material constants and the plane elasticity matrices."""

import numpy as np
import pytest

from femcore import Material


def _orthotropic_copy(m):
    G = m.E / (2 * (1 + m.nu))
    return Material.orthotropic_from(
        "ortho", m.density, m.E, m.E, m.E, G, G, G, m.nu, m.nu, m.nu,
    )


class TestIsotropic:

    def test_shear_modulus(self):
        m = Material.isotropic("Steel", E=210000.0, nu=0.3)
        assert m.G == pytest.approx(210000.0 / 2.6)

    def test_plane_stress(self):
        m = Material.isotropic("m", E=1.0, nu=0.25)
        D = m.plane_stress_matrix()
        c = 1.0 / (1 - 0.25 ** 2)
        np.testing.assert_allclose(D, c * np.array([[1, 0.25, 0], [0.25, 1, 0], [0, 0, 0.375]]))

    def test_plane_strain_is_stiffer(self):
        m = Material.steel()
        assert m.plane_strain_matrix()[0, 0] > m.plane_stress_matrix()[0, 0]
        np.testing.assert_allclose(m.plane_strain_matrix()[2, 2], m.G)

    def test_elasticity_matrix_mode(self):
        m = Material.steel()
        np.testing.assert_array_equal(m.elasticity_matrix("strain"), m.plane_strain_matrix())
        with pytest.raises(ValueError):
            m.elasticity_matrix("shell")

    @pytest.mark.parametrize("E, nu", [(0.0, 0.3), (-5.0, 0.3), (1.0, 0.5), (1.0, -1.0)])
    def test_invalid_constants(self, E, nu):
        with pytest.raises(ValueError):
            Material("bad", E=E, nu=nu)


class TestOrthotropic:

    def test_equal_constants_match_isotropic(self, steel):
        ortho = _orthotropic_copy(steel)
        assert ortho.is_orthotropic
        np.testing.assert_allclose(ortho.plane_stress_matrix(), steel.plane_stress_matrix(), rtol=1e-12)
        np.testing.assert_allclose(ortho.plane_strain_matrix(), steel.plane_strain_matrix(), rtol=1e-10)
        assert ortho.G == pytest.approx(steel.G)

    def test_directional_stiffness(self):
        wood = Material.orthotropic_from(
            "C24", 4.2e-10, 11000.0, 370.0, 370.0, 690.0, 50.0, 690.0, 0.35, 0.3, 0.02,
        )
        D = wood.plane_stress_matrix()
        assert D[0, 0] > 20 * D[1, 1]
        np.testing.assert_allclose(D, D.T, rtol=1e-12)
        assert wood.G == 690.0
