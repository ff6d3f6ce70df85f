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
"""Truncated Fock-space operators, state vectors and special functions"""
# pylint: disable=too-many-arguments

import functools

import numpy as np
from numpy import sinh, cosh, tanh
from numpy.polynomial.hermite import hermval as H

from scipy.special import factorial as fac, gammaln

from thewalrus.fock_gradients import (
    displacement as displacement_tw,
    squeezing as squeezing_tw,
)

def_type = np.complex128


def dagger(mat):
    r"""
    Given :math:`U` returns :math:`U^\dagger`.
    """
    return mat.conj().T


def mix(state):
    """
    Transforms a pure state into a mixed state. Does not do any checks on the
    shape of the input state.
    """
    return np.outer(state, state.conj())


def apply(op, state, pure):
    r"""Applies the matrix ``op`` to a state vector (:math:`U\ket{\psi}`) or
    conjugates a density matrix with it (:math:`U\rho U^\dagger`).

    Args:
        op (array): square operator matrix
        state (array): state vector or density matrix
        pure (bool): whether ``state`` is a state vector

    Returns:
        array: the transformed state data
    """
    if pure:
        return op @ state

    return op @ state @ dagger(op)


# ============================================
#
# Gates
#
# ============================================


@functools.lru_cache()
def a(trunc):
    r"""
    The annihilation operator :math:`a`.
    """
    return np.diag(np.sqrt(np.arange(1, trunc)), k=1).astype(def_type)


@functools.lru_cache()
def adagger(trunc):
    r"""
    The creation operator :math:`a^\dagger`.
    """
    return dagger(a(trunc))


@functools.lru_cache()
def displacement(r, phi, trunc):
    r"""Matrix of the displacement operator :math:`D(re^{i\phi})` from
    :func:`thewalrus.fock_gradients.displacement`.

    Args:
        r (float): displacement magnitude
        phi (float): displacement phase
        trunc (int): Fock cutoff
    """
    return displacement_tw(r, phi, cutoff=trunc)


@functools.lru_cache()
def squeezing(r, theta, trunc):
    r"""Matrix of the squeezing operator :math:`S(re^{i\theta})` from
    :func:`thewalrus.fock_gradients.squeezing`.

    Args:
        r (float): squeezing magnitude
        theta (float): squeezing phase
        trunc (int): Fock cutoff
    """
    return squeezing_tw(r, theta, cutoff=trunc)


# ============================================
#
# State vectors
#
# ============================================


@functools.lru_cache()
def fockState(n, trunc):
    r"""
    The Fock state :math:`\ket{n}`.
    """
    state = np.zeros(trunc, dtype=def_type)
    state[n] = 1.0
    return state


@functools.lru_cache()
def coherentState(r, phi, trunc):
    r"""
    The coherent state :math:`D(\alpha)\ket{0}` where `alpha = r * np.exp(1j * phi)`.

    The amplitudes are built in log space, so that cutoffs beyond the range of
    the factorial stay finite.
    """
    if r == 0:
        return fockState(0, trunc)

    n = np.arange(trunc)
    log_mag = -(r ** 2) / 2 + n * np.log(r) - gammaln(n + 1) / 2
    return np.exp(log_mag + 1j * n * phi)


@functools.lru_cache()
def squeezedState(r, theta, trunc):
    r"""
    The squeezed state :math:`S(re^{i\theta})\ket{0}`.

    Only the even Fock components are populated, with

    .. math::

        c_{2m} = \frac{1}{\sqrt{\cosh r}} \frac{\sqrt{(2m)!}}{2^m m!}
            \left(-e^{i\theta}\tanh r\right)^m.
    """
    if r == 0:
        return fockState(0, trunc)

    m = np.arange((trunc + 1) // 2)
    log_mag = (
        gammaln(2 * m + 1) / 2 - m * np.log(2) - gammaln(m + 1) + m * np.log(tanh(r))
        - np.log(cosh(r)) / 2
    )
    state = np.zeros(trunc, dtype=def_type)
    state[::2] = np.exp(log_mag) * (-np.exp(1j * theta)) ** m
    return state


@functools.lru_cache()
def displacedSqueezed(r_d, phi_d, r_s, phi_s, trunc):
    r"""
    The displaced squeezed state :math:`\ket{\alpha,\zeta} = D(\alpha)S(r\exp{(i\phi)})\ket{0}`  where `alpha = r_d * np.exp(1j * phi_d)` and `zeta = r_s * np.exp(1j * phi_s)`.
    """
    if np.allclose(r_s, 0.0):
        return coherentState(r_d, phi_d, trunc)

    if np.allclose(r_d, 0.0):
        return squeezedState(r_s, phi_s, trunc)

    ph = np.exp(1j * phi_s)
    ch = cosh(r_s)
    sh = sinh(r_s)
    th = tanh(r_s)
    alpha = r_d * np.exp(1j * phi_d)

    gamma = alpha * ch + np.conj(alpha) * ph * sh
    hermite_arg = gamma / np.sqrt(ph * np.sinh(2 * r_s) + 1e-10)

    # normalization constant
    N = np.exp(-0.5 * np.abs(alpha) ** 2 - 0.5 * np.conj(alpha) ** 2 * ph * th)

    coeff = np.array([(0.5 * ph * th) ** (n / 2) / np.sqrt(fac(n) * ch) for n in range(trunc)])
    vec = np.array([H(hermite_arg, row) for row in np.diag(coeff)])
    state = N * vec

    return state


@functools.lru_cache()
def thermalState(nbar, trunc):
    r"""
    The thermal state :math:`\rho(\overline{nbar})`.
    """
    n = np.arange(trunc)
    return np.diag((nbar / (nbar + 1)) ** n / (nbar + 1)).astype(def_type)


# ============================================
#
# Special functions
#
# ============================================


def hermite_functions(x, trunc, hbar=2):
    r"""Normalized eigenfunctions of the quantum harmonic oscillator.

    Returns :math:`\phi_n(x) = \braketD{x}{n}` for :math:`n=0,\dots,D-1`, where
    :math:`\x` is the position quadrature satisfying :math:`[\x,\p]=i\hbar`:

    .. math::

        \phi_n(x) = \frac{1}{\sqrt{2^n n!}}\left(\frac{1}{\pi\hbar}\right)^{1/4}
            H_n\left(\frac{x}{\sqrt{\hbar}}\right) e^{-x^2/2\hbar}.

    The functions are built directly with the normalized three-term recurrence

    .. math::

        \phi_n(x) = \sqrt{\frac{2}{n}}\frac{x}{\sqrt{\hbar}}\phi_{n-1}(x)
            - \sqrt{\frac{n-1}{n}}\phi_{n-2}(x),

    which never forms the Hermite polynomials or the factorials themselves and
    therefore stays finite for cutoffs in the hundreds.

    Args:
        x (float or array): quadrature values
        trunc (int): the Fock cutoff :math:`D`
        hbar (float): the value of :math:`\hbar` in the commutation relation

    Returns:
        array: real array of shape ``(trunc, len(x))``
    """
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    y = x / np.sqrt(hbar)

    phi = np.empty((trunc, x.shape[0]), dtype=np.float64)
    phi[0] = (np.pi * hbar) ** -0.25 * np.exp(-(y ** 2) / 2)

    if trunc > 1:
        phi[1] = np.sqrt(2) * y * phi[0]

    for n in range(2, trunc):
        phi[n] = np.sqrt(2 / n) * y * phi[n - 1] - np.sqrt((n - 1) / n) * phi[n - 2]

    return phi
