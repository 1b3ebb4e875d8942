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

"""Continuous Lyapunov equation solver (Bartels-Stewart, real Schur form).

Solves A' X + X A = -Q. The routine neither requires nor checks that A is
stable: the solve is well posed whenever no two eigenvalues of A sum to
zero, and becomes ill-conditioned as eigenvalues approach the imaginary
axis. Checking stability is the caller's responsibility.
"""

import jax.numpy as jnp
import jax.scipy as jsp
from jax import Array

from lqrax.core.errors import check_shape, check_square
from lqrax.utils.precision import as_float64, float64


def solve_quasi_triangular(T: Array, Q: Array) -> Array:
    """Solves T Y + Y T' = Q for quasi-upper-triangular T.

    Columns of Y are back-substituted from last to first. A 1x1 diagonal
    block of T gives the linear system

        (T + T[i, i] I) y_i = q_i - Y[:, i+1:] T[i, i+1:]'

    A 2x2 diagonal block (complex conjugate eigenvalue pair) couples two
    columns, which are solved together as one (2n, 2n) system.

    Args:
        T: Quasi-upper-triangular matrix (n, n), e.g. a real Schur factor.
        Q: Right-hand side (n, n).

    Returns:
        Y: Solution of shape (n, n).
    """
    n = T.shape[0]
    eye = jnp.eye(n, dtype=T.dtype)
    Y = jnp.zeros((n, n), dtype=jnp.result_type(T, Q))

    # Columns not yet solved are zero, so Y @ T[i] only sums solved columns.
    i = n - 1
    while i >= 0:
        if i > 0 and T[i, i - 1] != 0:
            j = i - 1
            rhs = jnp.concatenate([Q[:, j] - Y @ T[j], Q[:, i] - Y @ T[i]])
            lhs = jnp.block([
                [T + T[j, j] * eye, T[j, i] * eye],
                [T[i, j] * eye, T + T[i, i] * eye],
            ])
            y = jnp.linalg.solve(lhs, rhs)
            Y = Y.at[:, j].set(y[:n]).at[:, i].set(y[n:])
            i -= 2
        else:
            y = jnp.linalg.solve(T + T[i, i] * eye, Q[:, i] - Y @ T[i])
            Y = Y.at[:, i].set(y)
            i -= 1

    return Y


@float64
def lyapunov(A: Array, Q: Array) -> Array:
    """Solves the continuous Lyapunov equation A' X + X A = -Q.

    Uses the real Schur decomposition A' = U T U', transforms the right-hand
    side to Q1 = -U' Q U, solves T Y + Y T' = Q1 by back substitution and
    maps back with X = U Y U'.

    Args:
        A: Real square matrix (n, n).
        Q: Right-hand side (n, n). X is symmetric whenever Q is.

    Returns:
        X: Solution of shape (n, n).

    Raises:
        InvalidDimensionError: If A is not square or Q does not match A.

    Example:
        >>> A = jnp.array([[-1.0, 0.0], [0.0, -2.0]])
        >>> X = lyapunov(A, jnp.eye(2))  # diag(1/2, 1/4)
    """
    A = as_float64(A)
    Q = as_float64(Q)
    n = check_square("A", A.shape)
    check_shape("Q", Q.shape, (n, n))

    T, U = jsp.linalg.schur(A.T, output='real')
    Q1 = -(U.T @ Q @ U)
    Y = solve_quasi_triangular(T, Q1)
    return U @ Y @ U.T


def lyapunov_residual(A: Array, X: Array, Q: Array) -> Array:
    """Residual A' X + X A + Q of a Lyapunov solution."""
    return A.T @ X + X @ A + Q
