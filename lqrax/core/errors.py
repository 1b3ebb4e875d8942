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

"""Exceptions raised by lqrax.

Convergence shortfalls are not exceptions: they are reported through
``CareSolution.status``.
"""

from typing import Tuple


class LqraxError(Exception):
    """Base class for lqrax errors."""


class InvalidDimensionError(LqraxError, ValueError):
    """Matrix shapes are inconsistent with each other."""


class NonPositiveWeightingError(LqraxError, ValueError):
    """LQR weights fail the positivity check on Q - M R^+ M'."""


def check_square(name: str, shape: Tuple[int, ...]) -> int:
    """Checks that ``shape`` is a non-empty square matrix shape.

    Returns:
        The matrix dimension.

    Raises:
        InvalidDimensionError: If the shape is not (n, n) with n >= 1.
    """
    if len(shape) != 2 or shape[0] != shape[1]:
        raise InvalidDimensionError(
            f"{name} must be a square matrix, got shape {tuple(shape)}"
        )
    if shape[0] < 1:
        raise InvalidDimensionError(f"{name} must have dimension >= 1, got 0")
    return shape[0]


def check_shape(name: str, shape: Tuple[int, ...], expected: Tuple[int, ...]):
    """Checks that ``shape`` equals ``expected``."""
    if tuple(shape) != tuple(expected):
        raise InvalidDimensionError(
            f"{name} must have shape {tuple(expected)}, got {tuple(shape)}"
        )
