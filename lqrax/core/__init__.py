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

"""Core abstractions for Riccati and LQR solvers.

- LinearSystem: Continuous LTI system (F, G) and controllability
- CareSolution, LQRSolution: Solver result containers
- SolverStatus: Convergence status of iterative solvers
- Exceptions for invalid dimensions and weights
"""

from lqrax.core.types import (
    SolverStatus,
    RiccatiProblem,
    CareSolution,
    LQRSolution,
)

from lqrax.core.errors import (
    LqraxError,
    InvalidDimensionError,
    NonPositiveWeightingError,
)

from lqrax.core.system import (
    LinearSystem,
    controllability_matrix,
    is_controllable,
    is_stable,
)

__all__ = [
    # Types
    'SolverStatus',
    'RiccatiProblem',
    'CareSolution',
    'LQRSolution',
    # Errors
    'LqraxError',
    'InvalidDimensionError',
    'NonPositiveWeightingError',
    # Systems
    'LinearSystem',
    'controllability_matrix',
    'is_controllable',
    'is_stable',
]
