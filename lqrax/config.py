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

"""Configuration classes for Riccati and LQR solvers.

Provides nested dataclass configuration. The defaults are pseudo-inverse
tolerance 1e-6, CARE tolerance 1e-5, 20 Newton steps and step sizes in
[1e-5, 2].
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict


@dataclass
class LineSearchConfig:
    """Configuration for the exact CARE line search.

    Attributes:
        t_min: Smallest admissible Newton step size.
        t_max: Largest admissible Newton step size.
    """
    t_min: float = 1e-5
    t_max: float = 2.0

    def __post_init__(self):
        if not 0.0 < self.t_min < self.t_max:
            raise ValueError(
                f"Need 0 < t_min < t_max, got t_min={self.t_min}, t_max={self.t_max}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CareConfig:
    """Configuration for the Newton-Kleinman CARE solver.

    Attributes:
        tol: Convergence threshold on the Frobenius norm of the residual.
        maxiter: Maximum number of Newton steps.
        symmetry_tol: Asymmetry ||X - X'|| above which the initial guess is
            re-symmetrized by a corrective Lyapunov solve.
        shift: Margin added to the eigenvalue shift of the initial guess.
        pinv_rtol: Relative singular value cutoff of the pseudo-inverse.
        line_search: Line search configuration.
    """
    tol: float = 1e-5
    maxiter: int = 20
    symmetry_tol: float = 1e-12
    shift: float = 0.5
    pinv_rtol: float = 1e-6
    line_search: LineSearchConfig = field(default_factory=LineSearchConfig)

    def __post_init__(self):
        """Convert line search dict to LineSearchConfig if needed."""
        if isinstance(self.line_search, dict):
            self.line_search = LineSearchConfig(**self.line_search)
        if self.maxiter < 0:
            raise ValueError(f"maxiter must be >= 0, got {self.maxiter}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LQRConfig:
    """Configuration for LQR gain synthesis.

    Attributes:
        pinv_rtol: Relative singular value cutoff used to invert R.
        psd_tol: Eigenvalues of Q - M R^+ M' above -psd_tol pass the
            positivity check.
        transpose_cross_term: Use M R^+ M' instead of M R^+ M in the
            constant term of the Riccati equation.
        care: CARE solver configuration.
    """
    pinv_rtol: float = 1e-6
    psd_tol: float = 1e-10
    transpose_cross_term: bool = False
    care: CareConfig = field(default_factory=CareConfig)

    def __post_init__(self):
        if isinstance(self.care, dict):
            self.care = CareConfig(**self.care)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
