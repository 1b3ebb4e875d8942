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

"""Continuous-time algebraic Riccati equation (CARE) solvers.

Solves

    X A + A' X - X B X + C = 0,    B, C symmetric PSD,

with a Newton-Kleinman iteration and exact line search. Each Newton step
solves one Lyapunov equation for the direction H and one scalar quartic
minimization for the step size.
"""

from typing import Optional

from absl import logging
import jax.numpy as jnp
import jax.scipy as jsp
from jax import Array

from lqrax.config import CareConfig
from lqrax.core.errors import check_shape, check_square
from lqrax.core.types import CareSolution, SolverStatus
from lqrax.lqr.line_search import line_search_care
from lqrax.lqr.lyapunov import lyapunov
from lqrax.utils.precision import as_float64, float64
from lqrax.utils.psd import asymmetry, pinv

# Weight of the identity in the corrective Lyapunov solve of the initial guess.
_CORRECTION_WEIGHT = 0.5


@float64
def care_residual(A: Array, B: Array, C: Array, X: Array) -> Array:
    """Riccati residual C + X A + A' X - X B X."""
    return C + X @ A + A.T @ X - X @ B @ X


@float64
def care_initial_guess(
    A: Array,
    B: Array,
    config: Optional[CareConfig] = None,
) -> Array:
    """Stabilizing initial guess for the Newton-Kleinman iteration.

    With the real Schur form A = U TA U' and TD = U' B, the spectrum of TA
    is shifted by beta = max(0, -min Re(eig(TA))) + shift so that all of
    TA + beta I lies in the right half plane. Then

        (TA + beta I) Z + Z (TA + beta I)' = 2 TD TD'
        X0 = TD' Z^+ U'

    If X0 is not symmetric to within ``config.symmetry_tol`` it is replaced
    by the solution of

        (A - B X0)' X + X (A - B X0) = -(X0' B X0 + 0.5 I).

    Args:
        A: Riccati state matrix (n, n).
        B: Riccati quadratic term (n, n).
        config: Solver configuration.

    Returns:
        X0: Initial guess of shape (n, n).
    """
    config = config or CareConfig()
    A = as_float64(A)
    B = as_float64(B)
    n = A.shape[0]
    eye = jnp.eye(n, dtype=A.dtype)

    TA, U = jsp.linalg.schur(A, output='real')
    TD = U.T @ B

    min_real = float(jnp.min(jnp.real(jnp.linalg.eigvals(TA))))
    beta = max(-min_real, 0.0) + config.shift
    logging.debug('CARE initial guess: eigenvalue shift %g', beta)

    Z = lyapunov((TA + beta * eye).T, -2.0 * TD @ TD.T)
    X = TD.T @ pinv(Z, config.pinv_rtol) @ U.T

    if asymmetry(X) > config.symmetry_tol:
        W = X.T @ B @ X + _CORRECTION_WEIGHT * eye
        X = lyapunov(A - B @ X, W)

    return X


@float64
def care_solve(
    A: Array,
    B: Array,
    C: Array,
    X0: Optional[Array] = None,
    config: Optional[CareConfig] = None,
) -> CareSolution:
    """Solve the continuous-time algebraic Riccati equation (CARE).

    Newton-Kleinman iteration with exact line search:

        R_k = C + X_k A + A' X_k - X_k B X_k
        (A - B X_k)' H_k + H_k (A - B X_k) = -R_k
        t_k = argmin ||R(X_k + t H_k)||,  t in [t_min, t_max]
        X_{k+1} = X_k + t_k H_k

    until ||R_k|| <= tol or maxiter steps have been taken. Exhausting the
    iteration budget is not an error: the last iterate is returned with
    status MAX_ITERATIONS and the caller decides whether to accept it.

    Args:
        A: State matrix (n, n).
        B: Quadratic term (n, n), symmetric PSD.
        C: Constant term (n, n), symmetric PSD.
        X0: Initial guess (n, n). Defaults to ``care_initial_guess``.
        config: Solver configuration.

    Returns:
        CareSolution with the solution, its residual norm and status.

    Raises:
        InvalidDimensionError: If the matrices are not all (n, n).

    Example:
        >>> sol = care_solve(A, B, C)
        >>> assert sol.converged
        >>> X = sol.X
    """
    config = config or CareConfig()
    A = as_float64(A)
    B = as_float64(B)
    C = as_float64(C)
    n = check_square("A", A.shape)
    check_shape("B", B.shape, (n, n))
    check_shape("C", C.shape, (n, n))

    if X0 is None:
        X = care_initial_guess(A, B, config)
    else:
        X = as_float64(X0)
        check_shape("X0", X.shape, (n, n))
    X_init = X

    if logging.vlog_is_on(1):
        logging.vlog(1, 'CARE initial closed-loop eigenvalues: %s',
                     jnp.linalg.eigvals(A - B @ X))

    ls = config.line_search
    residuals = []
    steps = []
    k = 0

    RX = care_residual(A, B, C, X)
    err = float(jnp.linalg.norm(RX))
    while err > config.tol and k < config.maxiter:
        residuals.append(err)

        # Newton direction
        H = lyapunov(A - B @ X, RX)

        # Exact line search
        V = H @ B @ H
        a = jnp.trace(RX.T @ RX)
        b = jnp.trace(RX.T @ V)
        c = jnp.trace(V.T @ V)
        tk = line_search_care(a, b, c, ls.t_min, ls.t_max)
        steps.append(tk)

        X = X + tk * H
        k += 1

        RX = care_residual(A, B, C, X)
        logging.debug('CARE iteration %d: residual %g, step %g', k, err, tk)
        err = float(jnp.linalg.norm(RX))

    if err <= config.tol:
        status = SolverStatus.SOLVED
        logging.debug('CARE solve took %d iterations, residual %g', k, err)
    else:
        status = SolverStatus.MAX_ITERATIONS
        logging.warning(
            'CARE cannot be solved to specified precision: residual %g after '
            '%d iterations (tol %g)', err, k, config.tol)

    residuals.append(err)
    return CareSolution(
        X=X,
        residual=err,
        iterations=k,
        status=status,
        info={'residuals': residuals, 'steps': steps, 'X0': X_init},
    )


def care(
    A: Array,
    B: Array,
    C: Array,
    config: Optional[CareConfig] = None,
) -> Array:
    """Solve the CARE from the default initial guess and return X only."""
    return care_solve(A, B, C, config=config).X


@float64
def care_scipy(
    Q: Array,
    R: Array,
    A: Array,
    B: Array,
    M: Optional[Array] = None,
) -> tuple[Array, Array]:
    """Solve the LQR CARE with SciPy for reference.

    Uses SciPy's implementation wrapped for JAX. Note: This is NOT
    JIT-compatible and is meant for cross-checking the Newton solver.

    Solves: A^T P + P A - (P B + M) R^{-1} (B^T P + M^T) + Q = 0

    Args:
        Q: State cost matrix (n, n).
        R: Control cost matrix (m, m).
        A: Dynamics matrix (n, n).
        B: Control matrix (n, m).
        M: Cross term matrix (n, m).

    Returns:
        Tuple of:
            - P: Solution to CARE (n, n)
            - K: Optimal gain (m, n) for u = -K x
    """
    import numpy as np
    import scipy.linalg

    Q_np = np.asarray(Q)
    R_np = np.asarray(R)
    A_np = np.asarray(A)
    B_np = np.asarray(B)

    if M is not None:
        S_np = np.asarray(M)
        P_np = scipy.linalg.solve_continuous_are(A_np, B_np, Q_np, R_np, s=S_np)
    else:
        S_np = np.zeros_like(B_np)
        P_np = scipy.linalg.solve_continuous_are(A_np, B_np, Q_np, R_np)

    K_np = np.linalg.solve(R_np, B_np.T @ P_np + S_np.T)
    return jnp.array(P_np), jnp.array(K_np)
