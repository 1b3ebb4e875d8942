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

"""Infinite-horizon LQR gain synthesis for continuous LTI systems.

For x' = F x + G u and the cost

    J = int x' Q x + 2 x' M u + u' R u dt,

the LQR weights are mapped to a Riccati problem (A, B, C), the CARE is
solved with the Newton-Kleinman solver and the gain K of u = -K x is
formed from its solution. (F, G) is assumed stabilizable; use
``LinearSystem.is_controllable`` as a separate diagnostic.
"""

from typing import Optional

from absl import logging
import jax.numpy as jnp
from jax import Array

from lqrax.config import LQRConfig
from lqrax.core.errors import (
    InvalidDimensionError,
    NonPositiveWeightingError,
    check_shape,
)
from lqrax.core.system import LinearSystem
from lqrax.core.types import LQRSolution, RiccatiProblem
from lqrax.lqr.care import care_residual, care_solve
from lqrax.utils.precision import as_float64, float64
from lqrax.utils.psd import is_psd, pinv


def _weights(
    system: LinearSystem,
    Q: Array,
    R: Array,
    M: Optional[Array],
) -> tuple[Array, Array, Array]:
    """Validates weight shapes against the system; M defaults to zeros."""
    n, m = system.state_dim, system.control_dim
    Q = as_float64(Q)
    R = as_float64(R)
    M = jnp.zeros((n, m), dtype=jnp.float64) if M is None else as_float64(M)
    check_shape("Q", Q.shape, (n, n))
    check_shape("R", R.shape, (m, m))
    check_shape("M", M.shape, (n, m))
    return Q, R, M


def _cross_term(M: Array, invR: Array, transpose: bool) -> Array:
    """Cross-weight contribution to the constant term of the CARE.

    Computes M R^+ M by default, or M R^+ M' when ``transpose`` is set.
    The untransposed product only exists for square M; a zero M
    contributes nothing in either form.
    """
    if transpose:
        return M @ invR @ M.T
    n, m = M.shape
    if n != m:
        if not bool(jnp.any(M != 0)):
            return jnp.zeros((n, n), dtype=M.dtype)
        raise InvalidDimensionError(
            f"M R^+ M is undefined for M of shape {(n, m)}; set "
            "transpose_cross_term=True to use M R^+ M'"
        )
    return M @ invR @ M


def _positive_weighting(Q: Array, M: Array, invR: Array, tol: float) -> bool:
    return is_psd(Q - M @ invR @ M.T, tol)


def _riccati_problem(
    system: LinearSystem,
    Q: Array,
    M: Array,
    invR: Array,
    transpose_cross_term: bool,
) -> RiccatiProblem:
    F, G = system.F, system.G
    A = F - M @ invR @ G.T
    B = G @ invR @ G.T
    C = _cross_term(M, invR, transpose_cross_term) + Q
    return RiccatiProblem(A=A, B=B, C=C)


@float64
def check_weights(
    Q: Array,
    R: Array,
    M: Array,
    rtol: float = 1e-6,
    tol: float = 1e-10,
) -> bool:
    """Return True if Q - M R^+ M' has no negative eigenvalues."""
    Q, R, M = as_float64(Q), as_float64(R), as_float64(M)
    return _positive_weighting(Q, M, pinv(R, rtol), tol)


@float64
def riccati_problem(
    system: LinearSystem,
    Q: Array,
    R: Array,
    M: Optional[Array] = None,
    config: Optional[LQRConfig] = None,
) -> RiccatiProblem:
    """Forms the CARE coefficients of an LQR problem.

        A = F - M R^+ G'
        B = G R^+ G'
        C = M R^+ M + Q

    Args:
        system: Linear system (F, G).
        Q: State cost (n, n).
        R: Input cost (m, m).
        M: Cross weight (n, m), defaults to zeros.
        config: LQR configuration.

    Returns:
        RiccatiProblem(A, B, C).

    Raises:
        InvalidDimensionError: If a weight does not match the system.
    """
    config = config or LQRConfig()
    Q, R, M = _weights(system, Q, R, M)
    invR = pinv(R, config.pinv_rtol)
    return _riccati_problem(system, Q, M, invR, config.transpose_cross_term)


@float64
def lqr_solve(
    system: LinearSystem,
    Q: Array,
    R: Array,
    M: Optional[Array] = None,
    check: bool = False,
    config: Optional[LQRConfig] = None,
) -> LQRSolution:
    """Synthesizes an LQR gain and returns it with the Riccati solution.

    Args:
        system: Linear system (F, G), assumed stabilizable.
        Q: State cost (n, n), symmetric.
        R: Input cost (m, m), symmetric positive definite.
        M: Cross weight (n, m), defaults to zeros.
        check: Verify that Q - M R^+ M' is positive semi-definite first.
        config: LQR configuration.

    Returns:
        LQRSolution with K = R^+ (G' X + M') for the control law u = -K x.

    Raises:
        InvalidDimensionError: If a weight does not match the system.
        NonPositiveWeightingError: If ``check`` is set and the positivity
            check fails.
    """
    config = config or LQRConfig()
    Q, R, M = _weights(system, Q, R, M)
    invR = pinv(R, config.pinv_rtol)

    if check and not _positive_weighting(Q, M, invR, config.psd_tol):
        logging.warning('Weight matrices did not pass positivity check')
        raise NonPositiveWeightingError(
            "Q - M R^+ M' has negative eigenvalues"
        )

    problem = _riccati_problem(
        system, Q, M, invR, config.transpose_cross_term)
    logging.vlog(2, 'Riccati problem:\nA:\n%s\nB:\n%s\nC:\n%s', *problem)

    sol = care_solve(*problem, config=config.care)
    X = sol.X
    if logging.vlog_is_on(2):
        logging.vlog(2, 'CARE solution:\n%s\nresidual:\n%s',
                     X, care_residual(*problem, X))

    K = invR @ (system.G.T @ X + M.T)
    return LQRSolution(K=K, X=X, care=sol, problem=problem)


def lqr(
    system: LinearSystem,
    Q: Array,
    R: Array,
    M: Optional[Array] = None,
    check: bool = False,
    config: Optional[LQRConfig] = None,
) -> Array:
    """Infinite-horizon LQR gain K for the control law u = -K x.

    Example:
        >>> sys = LinearSystem(F=jnp.array([[0.0, 1.0], [0.0, 0.0]]),
        ...                    G=jnp.array([[0.0], [1.0]]))
        >>> K = lqr(sys, jnp.eye(2), jnp.eye(1))  # [[1, sqrt(3)]]
    """
    return lqr_solve(system, Q, R, M, check, config).K
