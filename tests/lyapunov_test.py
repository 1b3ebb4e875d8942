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

"""Tests for the Bartels-Stewart Lyapunov solver."""

from absl.testing import absltest
from absl.testing import parameterized

import jax.numpy as jnp
from jax import config
import numpy as np

from lqrax.core import InvalidDimensionError
from lqrax.lqr import lyapunov, lyapunov_residual, solve_quasi_triangular

config.update('jax_enable_x64', True)


def _stable_matrix(n, seed):
    """Random matrix shifted so that every eigenvalue has real part <= -1."""
    rng = np.random.RandomState(seed)
    A = rng.randn(n, n)
    shift = np.max(np.linalg.eigvals(A).real) + 1.0
    return jnp.array(A - shift * np.eye(n))


class LyapunovTest(parameterized.TestCase):
    """Tests for lyapunov(A, Q) solving A' X + X A = -Q."""

    def test_diagonal(self):
        """Diagonal A has a closed-form solution."""
        A = jnp.diag(jnp.array([-1.0, -2.0]))
        X = lyapunov(A, jnp.eye(2))
        np.testing.assert_allclose(X, jnp.diag(jnp.array([0.5, 0.25])), atol=1e-12)

    def test_complex_eigenvalues(self):
        """2x2 Schur blocks are solved exactly."""
        A = jnp.array([
            [-1.0, 2.0, 0.5],
            [-2.0, -1.0, 0.3],
            [0.0, 0.0, -3.0],
        ])
        Q = jnp.eye(3)
        X = lyapunov(A, Q)
        np.testing.assert_allclose(lyapunov_residual(A, X, Q), jnp.zeros((3, 3)),
                                   atol=1e-10)
        np.testing.assert_allclose(X, X.T, atol=1e-10)

    @parameterized.parameters((1,), (2,), (3,), (5,), (8,))
    def test_random_stable(self, n):
        """Residual vanishes and X is symmetric PSD for stable A, PSD Q."""
        A = _stable_matrix(n, seed=n)
        rng = np.random.RandomState(100 + n)
        L = rng.randn(n, n)
        Q = jnp.array(L @ L.T)

        X = lyapunov(A, Q)
        residual = lyapunov_residual(A, X, Q)
        self.assertLess(float(jnp.linalg.norm(residual)), 1e-8)
        np.testing.assert_allclose(X, X.T, atol=1e-8)
        self.assertGreaterEqual(float(jnp.min(jnp.linalg.eigvalsh(X))), -1e-8)

    def test_unstable_but_regular(self):
        """Anti-stable A still gives a solution of the linear equation."""
        A = jnp.array([[1.0, 1.0], [0.0, 2.0]])
        Q = jnp.eye(2)
        X = lyapunov(A, Q)
        np.testing.assert_allclose(lyapunov_residual(A, X, Q), jnp.zeros((2, 2)),
                                   atol=1e-10)

    def test_nonsymmetric_rhs(self):
        """The solve is linear and does not assume a symmetric Q."""
        A = _stable_matrix(3, seed=7)
        Q = jnp.array([[1.0, 2.0, 0.0], [0.0, 1.0, -1.0], [3.0, 0.0, 1.0]])
        X = lyapunov(A, Q)
        np.testing.assert_allclose(lyapunov_residual(A, X, Q), jnp.zeros((3, 3)),
                                   atol=1e-10)

    def test_non_square_raises(self):
        with self.assertRaises(InvalidDimensionError):
            lyapunov(jnp.zeros((2, 3)), jnp.eye(2))

    def test_mismatched_rhs_raises(self):
        with self.assertRaises(InvalidDimensionError):
            lyapunov(-jnp.eye(2), jnp.eye(3))


class QuasiTriangularTest(absltest.TestCase):
    """Tests for the back substitution on T Y + Y T' = Q."""

    def test_upper_triangular(self):
        T = jnp.array([[-1.0, 2.0, 1.0], [0.0, -2.0, 0.5], [0.0, 0.0, -3.0]])
        Q = jnp.array([[1.0, 0.0, 2.0], [0.0, 3.0, 1.0], [2.0, 1.0, 1.0]])
        Y = solve_quasi_triangular(T, Q)
        np.testing.assert_allclose(T @ Y + Y @ T.T, Q, atol=1e-12)

    def test_two_by_two_block(self):
        T = jnp.array([[-1.0, 3.0, 1.0], [-2.0, -1.0, 0.5], [0.0, 0.0, -2.0]])
        Q = jnp.eye(3)
        Y = solve_quasi_triangular(T, Q)
        np.testing.assert_allclose(T @ Y + Y @ T.T, Q, atol=1e-12)


if __name__ == '__main__':
    absltest.main()
