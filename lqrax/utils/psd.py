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

"""Matrix utilities: pseudo-inversion and positive semi-definiteness.

This module provides the Moore-Penrose pseudo-inverse used to invert input
weights and Lyapunov solutions, together with the small PSD helpers used
by the Riccati and LQR solvers.
"""

import jax.numpy as jnp
from jax import Array, jit

from lqrax.utils.precision import as_float64, float64


@jit
def _pinv(M: Array, rtol: float) -> Array:
    U, s, Vt = jnp.linalg.svd(M, full_matrices=False)
    cutoff = rtol * jnp.max(s, initial=0.0)
    keep = s > cutoff
    s_inv = jnp.where(keep, 1.0 / jnp.where(keep, s, 1.0), 0.0)
    return (Vt.T * s_inv) @ U.T


@float64
def pinv(M: Array, rtol: float = 1e-6) -> Array:
    """Moore-Penrose pseudo-inverse via truncated SVD.

    Computes M = U S V' and inverts every singular value larger than
    rtol * max(S); the others are set to zero. The result is the exact
    inverse for square full-rank M, and the minimum-norm least-squares
    inverse for singular or rectangular M.

    Args:
        M: Matrix of shape (p, q).
        rtol: Relative singular value cutoff.

    Returns:
        M_pinv: Pseudo-inverse of shape (q, p).

    Example:
        >>> M = jnp.array([[1.0, 0.0], [0.0, 0.0]])
        >>> pinv(M)  # [[1, 0], [0, 0]]
    """
    return _pinv(as_float64(M), rtol)


@float64
def is_psd(Q: Array, tol: float = 1e-8) -> bool:
    """Check if a symmetric matrix is positive semi-definite.

    Args:
        Q: Matrix to check, shape (n, n).
        tol: Tolerance for eigenvalue comparison.

    Returns:
        True if all eigenvalues are >= -tol.
    """
    eigvals = jnp.linalg.eigvalsh(symmetrize(as_float64(Q)))
    return bool(jnp.all(eigvals >= -tol))


def symmetrize(Q: Array) -> Array:
    """Symmetrize a matrix.

    Args:
        Q: Matrix of shape (n, n).

    Returns:
        Symmetric matrix (Q + Q') / 2.
    """
    return 0.5 * (Q + Q.T)


def asymmetry(Q: Array) -> float:
    """Frobenius norm of Q - Q'."""
    return float(jnp.linalg.norm(Q - Q.T))
