# Copyright 2019 Xanadu Quantum Technologies Inc.

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
r"""
Probability density of homodyne measurement outcomes.

For a local oscillator phase :math:`\theta` the homodyne detector measures the
rotated quadrature :math:`\x_\theta = \x\cos\theta + \p\sin\theta`, whose
eigenstates are :math:`e^{i\theta\hat{n}}\ket{x}`. The probability density of
the outcome :math:`x` is therefore

.. math::

    p(\theta, x) = \sum_{m,n} \rho_{mn} e^{-i(m-n)\theta} \phi_m(x) \phi_n(x),

where :math:`\phi_n` are the harmonic oscillator eigenfunctions computed by
:func:`~.ops.hermite_functions`. For a state vector this reduces to
:math:`|\sum_n c_n e^{-in\theta}\phi_n(x)|^2`.

States carrying the Gaussian tag skip the Fock sum altogether: the quadrature
distribution is the normal distribution with the mean and variance of
:math:`\x_\theta`.
"""
import numpy as np
from scipy.stats import norm

from . import ops
from .states import StateError


PDF_TOLERANCE = 1e-8
"""float: densities below ``-PDF_TOLERANCE`` and imaginary parts above it are reported as errors"""


class NumericalError(Exception):
    """Exception raised when a density evaluation is negative or not finite."""


def _check_density(density, tol=PDF_TOLERANCE):
    """Raises if ``density`` is not a finite, non-negative real array."""
    if not np.all(np.isfinite(density)):
        raise NumericalError(
            "Non-finite quadrature density encountered; the state may be unnormalized "
            "or the Fock cutoff too small."
        )

    if np.any(density < -tol):
        raise NumericalError(
            "Negative quadrature density {} encountered; the state may be unphysical "
            "or the Fock cutoff too small.".format(np.min(density))
        )


def _gaussian_density(moments, theta, x):
    mean, var = moments.quad_mean_var(theta)
    return norm.pdf(x, loc=mean, scale=np.sqrt(var))


def _fock_density(state, theta, x):
    # columns of b are e^{-in theta_j} phi_n(x_j)
    n = np.arange(state.dim)
    b = np.exp(-1j * np.outer(n, theta)) * ops.hermite_functions(x, state.dim, state.hbar)

    if state.is_pure:
        return np.abs(state.ket() @ b) ** 2

    density = np.sum(b * (state.dm() @ b.conj()), axis=0)

    if np.max(np.abs(density.imag), initial=0) > PDF_TOLERANCE:
        raise StateError("Quadrature density is complex; the density matrix is not Hermitian.")

    return density.real


def pdf_function(state, gaussian_path=True):
    r"""Returns the pointwise quadrature density of a state.

    The returned function maps equally shaped arrays of phases and quadrature
    values to the densities :math:`p(\theta_j, x_j)`; unlike :func:`q_pdf` it
    does not build an outer grid.

    Args:
        state (BaseState): the state
        gaussian_path (bool): whether to use the analytic density for Gaussian-tagged states

    Returns:
        callable: function ``(theta, x) -> array`` evaluating the density
    """
    moments = state.gaussian if gaussian_path else None

    def density_fn(theta, x):
        theta = np.asarray(theta, dtype=np.float64)
        x = np.asarray(x, dtype=np.float64)

        if theta.shape != x.shape:
            raise ValueError("Phases and quadrature values must have the same shape.")

        if moments is not None:
            density = _gaussian_density(moments, theta, x)
        else:
            density = _fock_density(state, theta.ravel(), x.ravel()).reshape(theta.shape)

        _check_density(density)
        return density

    return density_fn


def q_pdf(state, theta, x, gaussian_path=True):
    r"""Quadrature probability density of a state.

    Sequences of phases and quadrature values are broadcast into an outer
    grid, so that ``q_pdf(state, thetas, xs)[i, j]`` is the density at
    ``(thetas[i], xs[j])``. Scalars yield a float, and a scalar mixed with a
    sequence yields a one-dimensional array along the sequence.

    **Example:**

    >>> state = squeezed_thermal_state(1.0, np.pi / 4, 0.5)
    >>> q_pdf(state, np.linspace(0, 2 * np.pi, 10), np.linspace(-10, 10, 10)).shape
    (10, 10)

    Args:
        state (BaseState): the state
        theta (float or Sequence[float]): local oscillator phase(s) in radians
        x (float or Sequence[float]): quadrature value(s)
        gaussian_path (bool): Whether to evaluate Gaussian-tagged states with
            the analytic normal density. If ``False``, the Hermite expansion is
            used for every state.

    Returns:
        float or array: the quadrature density

    Raises:
        NumericalError: if a density is negative beyond tolerance or not finite
        StateError: if the density matrix is not Hermitian
    """
    theta_arr = np.asarray(theta, dtype=np.float64)
    x_arr = np.asarray(x, dtype=np.float64)

    if theta_arr.ndim > 1 or x_arr.ndim > 1:
        raise ValueError("Phases and quadrature values must be scalars or one-dimensional.")

    thetas, xs = np.meshgrid(np.atleast_1d(theta_arr), np.atleast_1d(x_arr), indexing="ij")
    density = pdf_function(state, gaussian_path)(thetas, xs)

    if theta_arr.ndim == 0 and x_arr.ndim == 0:
        return float(density[0, 0])

    if theta_arr.ndim == 0:
        return density[0]

    if x_arr.ndim == 0:
        return density[:, 0]

    return density
