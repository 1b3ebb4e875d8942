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

"""Type definitions and result containers for Riccati and LQR solvers."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, NamedTuple, Optional

from jax import Array


class SolverStatus(Enum):
    """Status codes for iterative matrix-equation solvers."""
    SOLVED = auto()           # Residual met the tolerance
    MAX_ITERATIONS = auto()   # Iteration budget exhausted
    UNKNOWN = auto()          # Not solved yet


class RiccatiProblem(NamedTuple):
    """Coefficients of the CARE  X A + A' X - X B X + C = 0."""
    A: Array  # (n, n)
    B: Array  # (n, n), symmetric PSD
    C: Array  # (n, n), symmetric PSD


@dataclass
class CareSolution:
    """Container for continuous-time algebraic Riccati equation results.

    The status tags the result: ``SOLVED`` means the residual norm of ``X``
    is within tolerance, ``MAX_ITERATIONS`` means the Newton iteration ran
    out of budget and ``X`` is the last (best-effort) iterate.

    Attributes:
        X: Riccati solution of shape (n, n).
        residual: Frobenius norm of C + X A + A' X - X B X at ``X``.
        iterations: Number of Newton steps taken.
        status: Solver status.
        info: Dictionary containing solver-specific information such as:
            - 'residuals': residual norm before each Newton step
            - 'steps': line-search step size of each Newton step
            - 'X0': the initial guess

    Example:
        >>> sol = care_solve(A, B, C)
        >>> if not sol.converged:
        ...     print(f"Residual {sol.residual} after {sol.iterations} steps")
    """

    X: Array
    residual: float
    iterations: int
    status: SolverStatus = SolverStatus.UNKNOWN
    info: Dict[str, Any] = field(default_factory=dict)

    @property
    def converged(self) -> bool:
        """Return True if the residual met the tolerance."""
        return self.status == SolverStatus.SOLVED

    @property
    def state_dim(self) -> int:
        """Return the dimension n of the solution."""
        return self.X.shape[0]


@dataclass
class LQRSolution:
    """Container for infinite-horizon LQR synthesis results.

    Attributes:
        K: Feedback gain of shape (m, n); the control law is u = -K x.
        X: Riccati solution of shape (n, n).
        care: Full CARE result the gain was computed from.
        problem: The Riccati problem that was solved.
    """

    K: Array
    X: Array
    care: CareSolution
    problem: Optional[RiccatiProblem] = None

    @property
    def converged(self) -> bool:
        """Return True if the underlying CARE solve converged."""
        return self.care.converged
