"""lqrax: Riccati equations and LQR synthesis in JAX.

Numerical solution of the continuous-time algebraic Riccati equation with a
Newton-Kleinman iteration and exact line search, and its use for
infinite-horizon LQR gain synthesis.

Main modules:
- lqrax.core: System, result and error types
- lqrax.lqr: Lyapunov, line search, CARE and LQR solvers
- lqrax.utils: Pseudo-inverse and PSD utilities
- lqrax.config: Solver configuration
"""

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

from . import config
from . import core
from . import lqr
from . import utils

from lqrax.config import CareConfig, LineSearchConfig, LQRConfig
from lqrax.core import (
    CareSolution,
    InvalidDimensionError,
    LinearSystem,
    LQRSolution,
    NonPositiveWeightingError,
    SolverStatus,
)
from lqrax.lqr import care, care_solve, lqr_solve, lyapunov
from lqrax.utils import pinv
