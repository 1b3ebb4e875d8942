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

"""Double precision for the Riccati and LQR solvers.

JAX computes in float32 unless ``jax_enable_x64`` is set, which is too
coarse for the Newton-Kleinman iteration to reach its default tolerance.
Public solver entry points are decorated with ``float64`` so they run in
double precision regardless of the global JAX setting.
"""

import functools

import jax
import jax.numpy as jnp
from jax import Array


def float64(fn):
    """Runs ``fn`` with 64-bit JAX types enabled."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        with jax.enable_x64(True):
            return fn(*args, **kwargs)

    return wrapper


def as_float64(x) -> Array:
    """Converts x to a float64 array; call under ``float64``."""
    return jnp.asarray(x, dtype=jnp.float64)
