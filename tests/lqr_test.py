# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for infinite-horizon LQR synthesis."""

from unittest import mock

from absl.testing import absltest
from absl.testing import parameterized

import jax.numpy as jnp
from jax import config
import numpy as np

from lqrax.config import LQRConfig
from lqrax.core import (
    InvalidDimensionError,
    LinearSystem,
    NonPositiveWeightingError,
    is_stable,
)
from lqrax.lqr import care_scipy, check_weights, lqr, lqr_solve, riccati_problem
from lqrax.lqr import synthesis
from lqrax.utils import pinv

config.update('jax_enable_x64', True)


def _double_integrator():
    return LinearSystem(
        F=jnp.array([[0.0, 1.0], [0.0, 0.0]]),
        G=jnp.array([[0.0], [1.0]]),
    )


class LQRTest(parameterized.TestCase):
    """Tests for lqr gain synthesis."""

    def test_double_integrator(self):
        """Known gain K = [1, sqrt(3)] and a Hurwitz closed loop."""
        sys = _double_integrator()
        K = lqr(sys, jnp.eye(2), jnp.array([[1.0]]), jnp.zeros((2, 1)))

        self.assertEqual(K.shape, (1, 2))
        np.testing.assert_allclose(K, jnp.array([[1.0, np.sqrt(3.0)]]), atol=1e-4)
        self.assertTrue(is_stable(sys.closed_loop(K)))

    def test_default_cross_weight(self):
        """Omitting M is the same as passing zeros."""
        sys = _double_integrator()
        K1 = lqr(sys, jnp.eye(2), jnp.array([[1.0]]))
        K2 = lqr(sys, jnp.eye(2), jnp.array([[1.0]]), jnp.zeros((2, 1)))
        np.testing.assert_allclose(K1, K2)

    def test_check_passes(self):
        sys = _double_integrator()
        K = lqr(sys, jnp.eye(2), jnp.array([[1.0]]), check=True)
        self.assertTrue(is_stable(sys.closed_loop(K)))

    @parameterized.parameters((3, 1, 0), (4, 2, 1))
    def test_matches_scipy(self, n, m, seed):
        """Gain agrees with SciPy's CARE for M = 0."""
        rng = np.random.RandomState(seed)
        sys = LinearSystem(F=jnp.array(rng.randn(n, n)), G=jnp.array(rng.randn(n, m)))
        Q = jnp.eye(n)
        R = 2.0 * jnp.eye(m)

        cfg = LQRConfig(care={'tol': 1e-10, 'maxiter': 50})
        sol = lqr_solve(sys, Q, R, config=cfg)
        P, K = care_scipy(Q, R, sys.F, sys.G)

        self.assertTrue(sol.converged)
        np.testing.assert_allclose(sol.X, P, atol=1e-6)
        np.testing.assert_allclose(sol.K, K, atol=1e-6)
        self.assertTrue(is_stable(sys.closed_loop(sol.K)))

    def test_lqr_solve_contents(self):
        sys = _double_integrator()
        sol = lqr_solve(sys, jnp.eye(2), jnp.array([[1.0]]))
        self.assertTrue(sol.converged)
        np.testing.assert_allclose(sol.X, sol.X.T, atol=1e-8)
        np.testing.assert_allclose(
            sol.X, jnp.array([[np.sqrt(3.0), 1.0], [1.0, np.sqrt(3.0)]]), atol=1e-4)
        self.assertIsNotNone(sol.problem)

    def test_input_weight_inverted_once(self):
        """R is pseudo-inverted once and shared by the check, problem and gain."""
        sys = LinearSystem(F=-jnp.eye(2), G=jnp.eye(2))
        Q = 2.0 * jnp.eye(2)
        R = jnp.diag(jnp.array([2.0, 4.0]))
        M = jnp.array([[0.0, 0.5], [0.0, 0.0]])

        with mock.patch.object(synthesis, 'pinv', wraps=pinv) as spy:
            sol = lqr_solve(sys, Q, R, M, check=True)
        self.assertEqual(spy.call_count, 1)

        A, B, C = riccati_problem(sys, Q, R, M)
        np.testing.assert_allclose(sol.problem.A, A)
        np.testing.assert_allclose(sol.problem.B, B)
        np.testing.assert_allclose(sol.problem.C, C)

        invR = jnp.diag(jnp.array([0.5, 0.25]))
        np.testing.assert_allclose(
            sol.K, invR @ (sys.G.T @ sol.X + M.T), atol=1e-12)

    def test_non_positive_weighting(self):
        """Indefinite Q fails the positivity check."""
        sys = _double_integrator()
        Q = jnp.diag(jnp.array([1.0, -1.0]))
        with self.assertRaises(NonPositiveWeightingError):
            lqr(sys, Q, jnp.array([[1.0]]), check=True)

    def test_non_positive_weighting_cross_term(self):
        """A large cross weight makes Q - M R^+ M' indefinite."""
        sys = _double_integrator()
        M = jnp.array([[2.0], [0.0]])
        with self.assertRaises(NonPositiveWeightingError):
            lqr(sys, jnp.eye(2), jnp.array([[1.0]]), M, check=True)

    def test_weight_dimension_mismatch(self):
        sys = _double_integrator()
        with self.assertRaises(InvalidDimensionError):
            lqr(sys, jnp.eye(3), jnp.array([[1.0]]))
        with self.assertRaises(InvalidDimensionError):
            lqr(sys, jnp.eye(2), jnp.eye(2))
        with self.assertRaises(InvalidDimensionError):
            lqr(sys, jnp.eye(2), jnp.array([[1.0]]), jnp.zeros((1, 2)))


class RiccatiProblemTest(absltest.TestCase):
    """Tests for the mapping from LQR weights to CARE coefficients."""

    def test_zero_cross_weight(self):
        sys = _double_integrator()
        A, B, C = riccati_problem(sys, jnp.eye(2), jnp.array([[2.0]]))
        np.testing.assert_allclose(A, sys.F)
        np.testing.assert_allclose(B, jnp.array([[0.0, 0.0], [0.0, 0.5]]))
        np.testing.assert_allclose(C, jnp.eye(2))

    def test_square_cross_weight_literal(self):
        """Square M enters as F - M R^+ G' and M R^+ M + Q."""
        sys = LinearSystem(F=-jnp.eye(2), G=jnp.eye(2))
        M = jnp.array([[0.0, 1.0], [0.0, 0.0]])
        R = jnp.eye(2)
        A, B, C = riccati_problem(sys, jnp.eye(2), R, M)
        np.testing.assert_allclose(A, -jnp.eye(2) - M)
        np.testing.assert_allclose(B, jnp.eye(2))
        # M @ M is zero for this nilpotent M, unlike M @ M'
        np.testing.assert_allclose(C, jnp.eye(2))

    def test_transposed_cross_weight(self):
        sys = LinearSystem(F=-jnp.eye(2), G=jnp.eye(2))
        M = jnp.array([[0.0, 1.0], [0.0, 0.0]])
        cfg = LQRConfig(transpose_cross_term=True)
        _, _, C = riccati_problem(sys, jnp.eye(2), jnp.eye(2), M, cfg)
        np.testing.assert_allclose(C, jnp.array([[2.0, 0.0], [0.0, 1.0]]))

    def test_rectangular_cross_weight_literal_raises(self):
        sys = _double_integrator()
        with self.assertRaises(InvalidDimensionError):
            riccati_problem(sys, jnp.eye(2), jnp.array([[1.0]]),
                            jnp.array([[0.5], [0.0]]))

    def test_check_weights(self):
        self.assertTrue(check_weights(jnp.eye(2), jnp.eye(1), jnp.zeros((2, 1))))
        self.assertFalse(
            check_weights(jnp.eye(2), jnp.eye(1), jnp.array([[2.0], [0.0]])))


if __name__ == '__main__':
    absltest.main()
