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

"""Linear Quadratic Regulator (LQR) and Riccati equation solvers.

This module provides:
- Continuous Lyapunov equation solver (Bartels-Stewart)
- Exact line search for Newton steps on the CARE
- Newton-Kleinman CARE solver
- Infinite-horizon LQR gain synthesis

Example:
    >>> from lqrax.lqr import lqr
    >>>
    >>> # Gain for u = -K x
    >>> K = lqr(system, Q, R)
"""

# Lyapunov equations
from lqrax.lqr.lyapunov import (
    lyapunov,
    lyapunov_residual,
    solve_quasi_triangular,
)

# Line search
from lqrax.lqr.line_search import (
    line_search_care,
    care_merit,
    care_merit_coefficients,
)

# Riccati solvers
from lqrax.lqr.care import (
    care,
    care_solve,
    care_initial_guess,
    care_residual,
    care_scipy,
)

# LQR synthesis
from lqrax.lqr.synthesis import (
    lqr,
    lqr_solve,
    riccati_problem,
    check_weights,
)

__all__ = [
    # Lyapunov
    'lyapunov',
    'lyapunov_residual',
    'solve_quasi_triangular',
    # Line search
    'line_search_care',
    'care_merit',
    'care_merit_coefficients',
    # Riccati solvers
    'care',
    'care_solve',
    'care_initial_guess',
    'care_residual',
    'care_scipy',
    # LQR
    'lqr',
    'lqr_solve',
    'riccati_problem',
    'check_weights',
]
