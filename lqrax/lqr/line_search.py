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

"""Exact line search for Newton steps on the CARE.

Along a Newton direction H the Riccati residual is a quadratic polynomial
in the step size t,

    R(X + t H) = (1 - t) R(X) - t^2 V,    V = H B H,

so its squared Frobenius norm is the quartic

    phi(t) = a - 2 a t + (a - 2 b) t^2 + 2 b t^3 + c t^4

with a = tr(R'R), b = tr(R'V), c = tr(V'V). The step minimizing phi over a
bounded interval is found in closed form from the roots of phi'.
"""

import jax.numpy as jnp
from jax import Array

from lqrax.utils.precision import float64

# Roots with a larger relative imaginary part are treated as complex.
_IMAG_TOL = 1e-8


def care_merit_coefficients(a: float, b: float, c: float) -> Array:
    """Coefficients of phi, highest degree first, normalized by c if c > 0."""
    coeffs = jnp.array([c, 2.0 * b, a - 2.0 * b, -2.0 * a, a])
    if c > 0:
        coeffs = coeffs / c
    return coeffs


@float64
def care_merit(t, a: float, b: float, c: float):
    """Evaluates the (normalized) merit phi at step size(s) t."""
    return jnp.polyval(care_merit_coefficients(a, b, c), t)


def _critical_points(coeffs: Array) -> Array:
    """Real roots of the derivative of the quartic with the given coefficients."""
    dcoeffs = jnp.polyder(coeffs)
    if not bool(jnp.any(dcoeffs != 0)):
        return jnp.zeros((0,))
    roots = jnp.roots(dcoeffs, strip_zeros=True)
    is_real = jnp.abs(roots.imag) <= _IMAG_TOL * jnp.maximum(1.0, jnp.abs(roots))
    return roots.real[is_real]


@float64
def line_search_care(
    a: float,
    b: float,
    c: float,
    t_min: float = 1e-5,
    t_max: float = 2.0,
) -> float:
    """Step size minimizing the CARE residual norm along a Newton direction.

    Candidates are the two interval endpoints and the real critical points
    of phi inside [t_min, t_max]. The lower endpoint is preferred over the
    upper one on ties, and a critical point replaces the current best only
    when it is strictly better; critical points are visited in the order
    jnp.roots returns them.

    Args:
        a: tr(R'R) for the current residual R.
        b: tr(R'V) with V = H B H.
        c: tr(V'V).
        t_min: Lower bound of the step size.
        t_max: Upper bound of the step size.

    Returns:
        t: Minimizing step size in [t_min, t_max].

    Example:
        >>> # Linear residual (V = 0): the full Newton step zeroes it
        >>> line_search_care(1.0, 0.0, 0.0)  # 1.0
    """
    a, b, c = float(a), float(b), float(c)
    coeffs = care_merit_coefficients(a, b, c)

    lb_value = float(jnp.polyval(coeffs, t_min))
    ub_value = float(jnp.polyval(coeffs, t_max))
    if lb_value <= ub_value:
        argmin, minimum = t_min, lb_value
    else:
        argmin, minimum = t_max, ub_value

    for root in _critical_points(coeffs).tolist():
        if t_min <= root <= t_max:
            candidate = float(jnp.polyval(coeffs, root))
            if candidate < minimum:
                argmin, minimum = root, candidate

    return argmin
