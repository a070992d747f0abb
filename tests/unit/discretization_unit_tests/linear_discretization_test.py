# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Unit Tests for Linear State-Space Discretization

Tests cover:
- discretize_a against independent matrix exponentials
- discretize_ab against the closed-form double integrator
- discretize_aq and discretize_aq_taylor against the RK4 integral of
  e^(Aτ) Q e^(A'τ) over one period, for slow and stiff models
- Symmetry and positive semi-definiteness of Qd
- discretize_r scaling
- Backend conversion (NumPy, PyTorch, JAX)
- Error handling and edge cases

Test Structure:
- TestDiscretizeA
- TestDiscretizeAB
- TestDiscretizeAQ
- TestDiscretizeAQTaylor
- TestDiscretizeR
- TestBackendConversion
- TestErrorHandling
"""

import unittest
import warnings

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy.linalg import expm

# Optional backends for testing
try:
    import torch

    HAS_TORCH = True
except ImportError:
    HAS_TORCH = False

try:
    import jax.numpy as jnp

    HAS_JAX = True
except ImportError:
    HAS_JAX = False

from sampledctrl.discretization import (
    discretize_a,
    discretize_ab,
    discretize_aq,
    discretize_aq_taylor,
    discretize_r,
)
from sampledctrl.numerical_integration import rk4_time_varying

# ============================================================================
# Test Fixtures and Utilities
# ============================================================================


def integrated_process_noise(A: np.ndarray, Q: np.ndarray, dt: float) -> np.ndarray:
    """Reference Qd = ∫₀^dt e^(Aτ) Q e^(A'τ) dτ from one RK4 step."""
    return rk4_time_varying(
        lambda t, P: expm(A * t) @ Q @ expm(A.T * t),
        0.0,
        np.zeros_like(Q),
        dt,
    )


class DiscretizationTestCase(unittest.TestCase):
    """Base class with common test systems."""

    def setUp(self):
        # Double integrator (slow, nilpotent A)
        self.A_double_int = np.array([[0.0, 1.0], [0.0, 0.0]])
        self.B_double_int = np.array([[0.0], [1.0]])

        # Stiff velocity loop (fast eigenvalue)
        self.A_fast = np.array([[0.0, 1.0], [0.0, -1406.29]])
        self.Q_fast = np.array([[0.0025, 0.0], [0.0, 1.0]])

        # Stable, well-conditioned
        self.A_stable = np.array([[0.0, 1.0], [-2.0, -3.0]])
        self.B_stable = np.array([[0.0], [1.0]])

        self.Q_identity = np.eye(2)

    def assert_symmetric(self, M: np.ndarray, name: str = "Matrix"):
        """Assert matrix is symmetric."""
        assert_allclose(M, M.T, rtol=0.0, atol=1e-15, err_msg=f"{name} is not symmetric")

    def assert_positive_semidefinite(self, M: np.ndarray, name: str = "Matrix"):
        """Assert all eigenvalues are non-negative within tolerance."""
        eigenvalues = np.linalg.eigvalsh(M)
        self.assertTrue(
            np.all(eigenvalues >= -1e-12),
            f"{name} is not positive semi-definite. Min eigenvalue: {np.min(eigenvalues)}",
        )


# ============================================================================
# discretize_a
# ============================================================================


class TestDiscretizeA(DiscretizationTestCase):
    """Test discretize_a()."""

    def test_double_integrator(self):
        """Nilpotent A gives Ad = I + A dt exactly."""
        Ad = discretize_a(self.A_double_int, 1.0)

        assert_allclose(Ad, [[1.0, 1.0], [0.0, 1.0]], atol=1e-15)

        # pos = vel = 1 propagates to pos = 2, vel = 1
        x1 = Ad @ np.array([1.0, 1.0])
        assert_allclose(x1, [2.0, 1.0], atol=1e-15)

    def test_matches_independent_expm(self):
        """Ad = expm(A dt)."""
        dt = 0.02
        Ad = discretize_a(self.A_stable, dt)
        assert_allclose(Ad, expm(self.A_stable * dt), rtol=1e-14)

    def test_scalar_system(self):
        """1×1 A gives e^(a dt)."""
        Ad = discretize_a(np.array([[-3.0]]), 0.1)
        assert_allclose(Ad, [[np.exp(-0.3)]], rtol=1e-14)

    def test_does_not_modify_input(self):
        A = self.A_stable.copy()
        discretize_a(A, 0.1)
        assert_allclose(A, self.A_stable)

    def test_accepts_nested_lists(self):
        Ad = discretize_a([[0.0, 1.0], [0.0, 0.0]], 2.0)
        assert_allclose(Ad, [[1.0, 2.0], [0.0, 1.0]], atol=1e-15)


# ============================================================================
# discretize_ab
# ============================================================================


class TestDiscretizeAB(DiscretizationTestCase):
    """Test discretize_ab()."""

    def test_double_integrator(self):
        """Closed form: Ad = [[1, dt], [0, 1]], Bd = [[dt²/2], [dt]]."""
        Ad, Bd = discretize_ab(self.A_double_int, self.B_double_int, 1.0)

        assert_allclose(Ad, [[1.0, 1.0], [0.0, 1.0]], atol=1e-15)
        assert_allclose(Bd, [[0.5], [1.0]], atol=1e-15)

        # pos = vel = accel = 1
        x1 = Ad @ np.array([1.0, 1.0]) + Bd @ np.array([1.0])
        assert_allclose(x1, [2.5, 2.0], atol=1e-15)

    def test_shapes(self):
        """Multi-input B keeps its shape."""
        B = np.array([[1.0, 0.0, 2.0], [0.0, 1.0, 0.0]])
        Ad, Bd = discretize_ab(self.A_stable, B, 0.01)

        self.assertEqual(Ad.shape, (2, 2))
        self.assertEqual(Bd.shape, (2, 3))

    def test_ad_consistent_with_discretize_a(self):
        dt = 0.05
        Ad, _ = discretize_ab(self.A_stable, self.B_stable, dt)
        assert_allclose(Ad, discretize_a(self.A_stable, dt), rtol=1e-12)

    def test_bd_matches_integral(self):
        """Bd = ∫₀^dt e^(Aτ) dτ B, which equals A⁻¹(Ad - I)B for invertible A."""
        dt = 0.1
        Ad, Bd = discretize_ab(self.A_stable, self.B_stable, dt)

        expected = np.linalg.solve(self.A_stable, (Ad - np.eye(2)) @ self.B_stable)
        assert_allclose(Bd, expected, rtol=1e-10)

    def test_bd_matches_rk4_simulation(self):
        """One zero-order-hold step matches fine RK4 integration of the ODE."""
        dt = 0.1
        Ad, Bd = discretize_ab(self.A_stable, self.B_stable, dt)

        x = np.array([1.0, -0.5])
        u = np.array([2.0])
        x_next = x.copy()
        n_sub = 100
        for k in range(n_sub):
            x_next = rk4_time_varying(
                lambda t, y: self.A_stable @ y + self.B_stable @ u, k * dt / n_sub, x_next, dt / n_sub
            )

        assert_allclose(Ad @ x + Bd @ u, x_next, rtol=1e-10)


# ============================================================================
# discretize_aq
# ============================================================================


class TestDiscretizeAQ(DiscretizationTestCase):
    """Test discretize_aq() (Van Loan)."""

    def test_slow_model_matches_integral(self):
        """Double integrator with Q = I over 1 s."""
        dt = 1.0
        Ad, Qd = discretize_aq(self.A_double_int, self.Q_identity, dt)

        reference = integrated_process_noise(self.A_double_int, self.Q_identity, dt)

        self.assertLess(np.linalg.norm(reference - Qd), 1e-10)
        assert_allclose(Ad, [[1.0, 1.0], [0.0, 1.0]], atol=1e-12)

    def test_fast_model_matches_integral(self):
        """Stiff model: agreement within 1e-3."""
        dt = 0.005
        _, Qd = discretize_aq(self.A_fast, self.Q_fast, dt)

        reference = integrated_process_noise(self.A_fast, self.Q_fast, dt)

        self.assertLess(np.linalg.norm(reference - Qd), 1e-3)

    def test_closed_form_double_integrator(self):
        """Qd = [[q dt³/3 + dt, dt²/2], [dt²/2, dt]] for Q = I."""
        dt = 0.3
        _, Qd = discretize_aq(self.A_double_int, self.Q_identity, dt)

        expected = np.array([[dt + dt**3 / 3.0, dt**2 / 2.0], [dt**2 / 2.0, dt]])
        assert_allclose(Qd, expected, rtol=1e-12)

    def test_ad_matches_discretize_a(self):
        dt = 0.02
        Ad, _ = discretize_aq(self.A_stable, self.Q_identity, dt)
        assert_allclose(Ad, discretize_a(self.A_stable, dt), rtol=1e-10)

    def test_symmetric_positive_semidefinite(self):
        """Qd stays symmetric PSD for several PSD Q."""
        rng = np.random.default_rng(0)
        for _ in range(5):
            L = rng.standard_normal((3, 2))
            Q = L @ L.T  # rank-deficient PSD
            A = rng.standard_normal((3, 3))

            _, Qd = discretize_aq(A, Q, 0.05)

            self.assert_symmetric(Qd, "Qd")
            self.assert_positive_semidefinite(Qd, "Qd")

    def test_fast_model_psd(self):
        _, Qd = discretize_aq(self.A_fast, self.Q_fast, 0.005)
        self.assert_symmetric(Qd, "Qd")
        self.assert_positive_semidefinite(Qd, "Qd")

    def test_zero_q_gives_zero_qd(self):
        _, Qd = discretize_aq(self.A_stable, np.zeros((2, 2)), 0.1)
        assert_allclose(Qd, np.zeros((2, 2)), atol=1e-15)

    def test_asymmetric_q_is_symmetrized(self):
        """Only the symmetric part of Q contributes."""
        Q_asym = np.array([[1.0, 0.4], [0.0, 1.0]])
        Q_sym = 0.5 * (Q_asym + Q_asym.T)

        _, Qd_asym = discretize_aq(self.A_stable, Q_asym, 0.1)
        _, Qd_sym = discretize_aq(self.A_stable, Q_sym, 0.1)

        assert_allclose(Qd_asym, Qd_sym, rtol=1e-14)


# ============================================================================
# discretize_aq_taylor
# ============================================================================


class TestDiscretizeAQTaylor(DiscretizationTestCase):
    """Test discretize_aq_taylor()."""

    def test_continuous_q_is_psd(self):
        """Sanity check on the fixtures."""
        self.assert_positive_semidefinite(self.Q_identity, "Q")
        self.assert_positive_semidefinite(self.Q_fast, "Q")

    def test_slow_model_matches_integral(self):
        dt = 1.0
        Ad, Qd = discretize_aq_taylor(self.A_double_int, self.Q_identity, dt)

        reference = integrated_process_noise(self.A_double_int, self.Q_identity, dt)

        self.assertLess(np.linalg.norm(reference - Qd), 1e-10)
        self.assertLess(np.linalg.norm(discretize_a(self.A_double_int, dt) - Ad), 1e-10)
        self.assert_positive_semidefinite(Qd, "Qd")

    def test_fast_model_matches_integral(self):
        A = np.array([[0.0, 1.0], [0.0, -1500.0]])
        dt = 0.005
        Ad, Qd = discretize_aq_taylor(A, self.Q_fast, dt)

        reference = integrated_process_noise(A, self.Q_fast, dt)

        self.assertLess(np.linalg.norm(reference - Qd), 1e-3)
        self.assertLess(np.linalg.norm(discretize_a(A, dt) - Ad), 1e-10)
        self.assert_symmetric(Qd, "Qd")
        self.assert_positive_semidefinite(Qd, "Qd")

    def test_agrees_with_van_loan(self):
        """Well-conditioned model at a control-loop period."""
        dt = 0.005
        Ad_vl, Qd_vl = discretize_aq(self.A_stable, self.Q_identity, dt)
        Ad_t, Qd_t = discretize_aq_taylor(self.A_stable, self.Q_identity, dt)

        assert_allclose(Ad_t, Ad_vl, rtol=1e-12)
        assert_allclose(Qd_t, Qd_vl, rtol=1e-10, atol=1e-13)

    def test_agrees_with_van_loan_diagonal_model(self):
        """A Q = Q A' makes every even series term zero."""
        A = np.diag([-1.0, -2.0])
        dt = 0.02
        _, Qd_vl = discretize_aq(A, self.Q_identity, dt)
        _, Qd_t = discretize_aq_taylor(A, self.Q_identity, dt)

        assert_allclose(Qd_t, Qd_vl, rtol=1e-10, atol=1e-13)

    def test_agrees_with_van_loan_commuting_nonidentity_q(self):
        """Diagonal Q with diagonal A, and a full Q with scalar-multiple A."""
        dt = 0.01
        cases = [
            (np.diag([-1.0, -2.0]), np.diag([0.5, 3.0])),
            (-3.0 * np.eye(2), np.array([[2.0, 0.5], [0.5, 1.0]])),
        ]
        for A, Q in cases:
            _, Qd_vl = discretize_aq(A, Q, dt)
            _, Qd_t = discretize_aq_taylor(A, Q, dt)

            assert_allclose(Qd_t, Qd_vl, rtol=1e-10, atol=1e-13)
            self.assert_positive_semidefinite(Qd_t, "Qd")

    def test_scalar_decay_closed_form(self):
        """A = -I, Q = I gives Qd = (1 - e⁻²ᵈᵗ)/2 · I."""
        A = -np.eye(2)
        dt = 1.0
        _, Qd = discretize_aq_taylor(A, self.Q_identity, dt, order=20)

        assert_allclose(Qd, 0.5 * (1.0 - np.exp(-2.0)) * np.eye(2), rtol=1e-12, atol=1e-15)

    def test_higher_order_improves_long_period(self):
        """More terms reduce error when dt is long relative to the dynamics."""
        dt = 0.5
        _, Qd_vl = discretize_aq(self.A_stable, self.Q_identity, dt)

        _, Qd_low = discretize_aq_taylor(self.A_stable, self.Q_identity, dt, order=2)
        _, Qd_high = discretize_aq_taylor(self.A_stable, self.Q_identity, dt, order=20)

        self.assertLess(np.linalg.norm(Qd_high - Qd_vl), np.linalg.norm(Qd_low - Qd_vl))
        assert_allclose(Qd_high, Qd_vl, rtol=1e-10, atol=1e-14)

    def test_order_one(self):
        """First-order truncation is Qd ≈ Ad Q dt."""
        dt = 0.01
        Ad, Qd = discretize_aq_taylor(self.A_stable, self.Q_identity, dt, order=1)

        expected = Ad @ self.Q_identity * dt
        assert_allclose(Qd, 0.5 * (expected + expected.T), rtol=1e-13)

    def test_invalid_order(self):
        with pytest.raises(ValueError, match="order"):
            discretize_aq_taylor(self.A_stable, self.Q_identity, 0.01, order=0)


# ============================================================================
# discretize_r
# ============================================================================


class TestDiscretizeR(DiscretizationTestCase):
    """Test discretize_r()."""

    def test_diagonal(self):
        Rd = discretize_r(np.diag([2.0, 1.0]), 0.5)
        self.assertLess(np.linalg.norm(np.diag([4.0, 2.0]) - Rd), 1e-10)

    def test_full_matrix_elementwise(self):
        R = np.array([[1.0, 0.2], [0.2, 3.0]])
        assert_allclose(discretize_r(R, 0.01), R * 100.0, rtol=1e-14)

    def test_longer_period_smaller_variance(self):
        R = np.array([[1.0]])
        self.assertLess(discretize_r(R, 0.1)[0, 0], discretize_r(R, 0.01)[0, 0])


# ============================================================================
# Backend Conversion
# ============================================================================


class TestBackendConversion(DiscretizationTestCase):
    """Test backend round-trips."""

    @unittest.skipIf(not HAS_TORCH, "PyTorch not installed")
    def test_torch_backend(self):
        A = torch.tensor(self.A_double_int, dtype=torch.float64)
        B = torch.tensor(self.B_double_int, dtype=torch.float64)

        Ad, Bd = discretize_ab(A, B, 1.0, backend="torch")

        self.assertIsInstance(Ad, torch.Tensor)
        self.assertIsInstance(Bd, torch.Tensor)
        assert_allclose(Bd.numpy(), [[0.5], [1.0]], atol=1e-15)

    @unittest.skipIf(not HAS_JAX, "JAX not installed")
    def test_jax_backend(self):
        R = jnp.array([[2.0, 0.0], [0.0, 1.0]])

        Rd = discretize_r(R, 0.5, backend="jax")

        self.assertIsInstance(Rd, type(jnp.zeros(1)))
        assert_allclose(np.asarray(Rd), [[4.0, 0.0], [0.0, 2.0]], rtol=1e-6)

    def test_invalid_backend(self):
        with pytest.raises(ValueError, match="Invalid backend"):
            discretize_a(self.A_stable, 0.1, backend="tensorflow")


# ============================================================================
# Error Handling
# ============================================================================


class TestErrorHandling(DiscretizationTestCase):
    """Test invalid arguments."""

    def test_nonpositive_dt(self):
        for dt in (0.0, -0.01):
            with pytest.raises(ValueError, match="dt must be positive"):
                discretize_a(self.A_stable, dt)
            with pytest.raises(ValueError, match="dt must be positive"):
                discretize_ab(self.A_stable, self.B_stable, dt)
            with pytest.raises(ValueError, match="dt must be positive"):
                discretize_aq(self.A_stable, self.Q_identity, dt)
            with pytest.raises(ValueError, match="dt must be positive"):
                discretize_aq_taylor(self.A_stable, self.Q_identity, dt)
            with pytest.raises(ValueError, match="dt must be positive"):
                discretize_r(self.Q_identity, dt)

    def test_non_finite_dt(self):
        with pytest.raises(ValueError, match="dt must be positive"):
            discretize_a(self.A_stable, np.inf)

    def test_non_square_a(self):
        A = np.ones((2, 3))
        with pytest.raises(ValueError, match="A must be square"):
            discretize_a(A, 0.1)
        with pytest.raises(ValueError, match="A must be square"):
            discretize_aq(A, self.Q_identity, 0.1)

    def test_b_row_mismatch(self):
        with pytest.raises(ValueError, match="B must have 2 rows"):
            discretize_ab(self.A_stable, np.ones((3, 1)), 0.1)

    def test_b_not_matrix(self):
        with pytest.raises(ValueError, match="B must have 2 rows"):
            discretize_ab(self.A_stable, np.ones(2), 0.1)

    def test_q_dimension_mismatch(self):
        with pytest.raises(ValueError, match=r"Q must be \(2, 2\)"):
            discretize_aq(self.A_stable, np.eye(3), 0.1)
        with pytest.raises(ValueError, match=r"Q must be \(2, 2\)"):
            discretize_aq_taylor(self.A_stable, np.eye(3), 0.1)

    def test_non_square_r(self):
        with pytest.raises(ValueError, match="R must be square"):
            discretize_r(np.ones((2, 1)), 0.1)

    def test_overflow_warns(self):
        """Non-finite exponential is reported with a RuntimeWarning."""
        A = np.array([[1.0e4]])
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            with pytest.warns(RuntimeWarning, match="non-finite"):
                discretize_a(A, 1.0)


if __name__ == "__main__":
    unittest.main()
