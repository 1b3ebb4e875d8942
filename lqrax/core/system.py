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

"""Continuous-time linear time-invariant system specification."""

from dataclasses import dataclass
from typing import Optional

import jax.numpy as jnp
from jax import Array

from lqrax.core.errors import InvalidDimensionError, check_square
from lqrax.utils.precision import as_float64, float64


def controllability_matrix(F: Array, G: Array) -> Array:
    """Builds the controllability matrix [G, FG, F^2 G, ..., F^(n-1) G].

    Args:
        F: State matrix (n, n).
        G: Input matrix (n, m).

    Returns:
        Controllability matrix of shape (n, n * m).
    """
    n = F.shape[0]
    blocks = [jnp.linalg.matrix_power(F, k) @ G for k in range(n)]
    return jnp.hstack(blocks)


@float64
def is_controllable(F: Array, G: Array, tol: Optional[float] = None) -> bool:
    """Checks whether the pair (F, G) is controllable.

    Args:
        F: State matrix (n, n).
        G: Input matrix (n, m).
        tol: Absolute singular value threshold for the rank computation.
            Defaults to max(S) * max(n, n * m) * eps.

    Returns:
        True if the controllability matrix has full row rank n.
    """
    ctrb = controllability_matrix(as_float64(F), as_float64(G))
    s = jnp.linalg.svd(ctrb, compute_uv=False)
    if tol is None:
        tol = jnp.max(s, initial=0.0) * max(ctrb.shape) * jnp.finfo(s.dtype).eps
    rank = jnp.sum(s > tol)
    return int(rank) == F.shape[0]


@float64
def is_stable(A: Array) -> bool:
    """Return True if every eigenvalue of A has negative real part."""
    return bool(jnp.all(jnp.real(jnp.linalg.eigvals(as_float64(A))) < 0))


@dataclass(frozen=True)
class LinearSystem:
    """Continuous LTI system  x' = F x + G u.

    Attributes:
        F: State matrix of shape (n, n).
        G: Input matrix of shape (n, m).

    Example:
        >>> sys = LinearSystem(
        ...     F=jnp.array([[0.0, 1.0], [0.0, 0.0]]),
        ...     G=jnp.array([[0.0], [1.0]]),
        ... )
        >>> sys.is_controllable()
        True
    """

    F: Array
    G: Array

    @float64
    def __post_init__(self):
        """Validate system matrices and store them in double precision."""
        F = as_float64(self.F)
        G = as_float64(self.G)
        n = check_square("F", F.shape)
        if G.ndim != 2:
            raise InvalidDimensionError(f"G must be a matrix, got shape {G.shape}")
        if G.shape[0] != n:
            raise InvalidDimensionError(
                f"G must have {n} rows to match F, got shape {G.shape}"
            )
        if G.shape[1] < 1:
            raise InvalidDimensionError(f"control_dim must be >= 1, got {G.shape[1]}")
        object.__setattr__(self, 'F', F)
        object.__setattr__(self, 'G', G)

    @property
    def state_dim(self) -> int:
        """Return the state dimension n."""
        return self.F.shape[0]

    @property
    def control_dim(self) -> int:
        """Return the control dimension m."""
        return self.G.shape[1]

    @float64
    def controllability_matrix(self) -> Array:
        """Return [G, FG, ..., F^(n-1) G] of shape (n, n * m)."""
        return controllability_matrix(self.F, self.G)

    def is_controllable(self, tol: Optional[float] = None) -> bool:
        """Return True if the controllability matrix has full row rank."""
        return is_controllable(self.F, self.G, tol)

    @float64
    def closed_loop(self, K: Array) -> Array:
        """Closed-loop state matrix F - G K for the feedback u = -K x."""
        K = as_float64(K)
        if K.shape != (self.control_dim, self.state_dim):
            raise InvalidDimensionError(
                f"K must have shape {(self.control_dim, self.state_dim)}, got {K.shape}"
            )
        return self.F - self.G @ K
