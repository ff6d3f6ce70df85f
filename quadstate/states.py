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
This module provides the single-mode quantum states used throughout QuadState.

A state is represented in the Fock basis truncated to the first :math:`D`
number states, either as a state vector (:class:`VectorState`) or as a density
matrix (:class:`MatrixState`). Both share the interface of :class:`BaseState`.

States are values: the operator methods :meth:`~.BaseState.create`,
:meth:`~.BaseState.annihilate`, :meth:`~.BaseState.displace` and
:meth:`~.BaseState.squeeze` return a new state and leave the original untouched.

States prepared by a Gaussian constructor carry a :class:`GaussianMoments`
tag holding the exact vector of means and covariance matrix of the state. The
tag is carried through displacement and squeezing and dropped by photon
addition or subtraction. It is never inferred from the Fock data.

Displacement and squeezing are parametrized by a magnitude :math:`r` and a
phase :math:`\phi` with the complex parameter :math:`re^{-i\phi}`, i.e.
:math:`D(\alpha) = \exp(\alpha a^\dagger - \alpha^* a)` with
:math:`\alpha = re^{-i\phi}` and
:math:`S(z) = \exp((z^* a^2 - z a^{\dagger 2})/2)` with :math:`z = re^{-i\phi}`.
A displacement along :math:`\phi = \pi/2` therefore moves the mean of
:math:`\p` to negative values.

.. code-block:: python

    >>> state = single_photon_state(dim=100, rep="matrix").squeeze(0.5, np.pi / 2)
    >>> state.is_gaussian
    False
    >>> coherent_state(2, np.pi / 4).is_gaussian
    True
"""
import abc

import numpy as np

from thewalrus.symplectic import squeezing as squeezing_symplectic

from . import ops


DEFAULT_DIM = 70
"""int: Fock cutoff used by the state constructors unless one is given"""

DEFAULT_HBAR = 2
r"""float: value of :math:`\hbar` used by the state constructors unless one is given"""


class StateError(Exception):
    """Exception raised when a state is not a valid quantum state."""


class GaussianMoments:
    r"""The Gaussian tag of a single-mode state.

    Holds the first and second moments of the quadratures in the
    :math:`(\x, \p)` ordering. The vacuum has zero means and covariance
    :math:`\frac{\hbar}{2}I`.

    Args:
        means (array): length-2 vector of means
        cov (array): :math:`2\times 2` covariance matrix
        hbar (float): the value of :math:`\hbar` in the commutation relation
    """

    def __init__(self, means, cov, hbar=DEFAULT_HBAR):
        self._means = np.asarray(means, dtype=np.float64).reshape(2)
        self._cov = np.asarray(cov, dtype=np.float64).reshape(2, 2)
        self._hbar = hbar

    def __repr__(self):
        return "<GaussianMoments: means={}, cov={}, hbar={}>".format(
            self._means.tolist(), self._cov.tolist(), self._hbar
        )

    @property
    def means(self):
        """array: the vector of means"""
        return self._means

    @property
    def cov(self):
        """array: the covariance matrix"""
        return self._cov

    @property
    def hbar(self):
        r"""float: the value of :math:`\hbar`"""
        return self._hbar

    @classmethod
    def vacuum(cls, hbar=DEFAULT_HBAR):
        """Moments of the vacuum state."""
        return cls(np.zeros(2), np.identity(2) * hbar / 2, hbar)

    @classmethod
    def thermal(cls, nbar, hbar=DEFAULT_HBAR):
        """Moments of the thermal state with mean photon number ``nbar``."""
        return cls(np.zeros(2), np.identity(2) * (2 * nbar + 1) * hbar / 2, hbar)

    def displace(self, r, phi):
        r"""Moments after the displacement :math:`D(re^{-i\phi})`."""
        alpha = r * np.exp(-1j * phi)
        shift = np.array([alpha.real, alpha.imag]) * np.sqrt(2 * self._hbar)
        return GaussianMoments(self._means + shift, self._cov, self._hbar)

    def squeeze(self, r, phi):
        r"""Moments after the squeezing :math:`S(re^{-i\phi})`."""
        S = squeezing_symplectic(r, -phi)
        return GaussianMoments(S @ self._means, S @ self._cov @ S.T, self._hbar)

    def quad_mean_var(self, theta):
        r"""Mean and variance of the rotated quadrature
        :math:`\x_\theta = \x\cos\theta + \p\sin\theta`.

        Args:
            theta (float or array): local oscillator phase(s)

        Returns:
            tuple[array, array]: the means and the variances, with the shape of ``theta``
        """
        c = np.cos(theta)
        s = np.sin(theta)
        mean = c * self._means[0] + s * self._means[1]
        var = c ** 2 * self._cov[0, 0] + 2 * c * s * self._cov[0, 1] + s ** 2 * self._cov[1, 1]
        return mean, var


class BaseState(abc.ABC):
    r"""Abstract base class for single-mode states in the truncated Fock basis.

    Args:
        data (array): the state representation in the Fock basis
        hbar (float): the value of :math:`\hbar` in the commutation relation
        gaussian (GaussianMoments): the Gaussian tag, if the state is known to be Gaussian
    """
    EQ_TOLERANCE = 1e-10

    def __init__(self, data, hbar=DEFAULT_HBAR, gaussian=None):
        self._data = np.asarray(data)
        self._hbar = hbar
        self._gaussian = gaussian
        self._pure = None

        if gaussian is not None and gaussian.hbar != hbar:
            raise ValueError("The Gaussian tag and the state use different values of hbar.")

    def __str__(self):
        return "<{}: dim={}, gaussian={}, hbar={}>".format(
            type(self).__name__, self.dim, self.is_gaussian, self._hbar
        )

    def __repr__(self):
        return self.__str__()

    def __eq__(self, other):
        """Equality operator for states.

        Returns True if the density matrices of both states agree within
        ``EQ_TOLERANCE``.

        Args:
            other (BaseState): state to compare against.
        """
        if not isinstance(other, BaseState):
            return False

        if self.dim != other.dim:
            return False

        return np.allclose(self.dm(), other.dm(), atol=self.EQ_TOLERANCE, rtol=0)

    __hash__ = None

    @property
    def data(self):
        r"""Returns the underlying numerical representation of the state."""
        return self._data

    @property
    def dim(self):
        r"""The numerical truncation of the Fock space used by the state.
        Note that a cutoff of D corresponds to the Fock states :math:`\{|0\rangle,\dots,|D-1\rangle\}`

        Returns:
            int: the cutoff dimension
        """
        return self._data.shape[0]

    cutoff_dim = dim

    @property
    def dtype(self):
        """numpy.dtype: element type of the state data"""
        return self._data.dtype

    @property
    def hbar(self):
        r"""Returns the value of :math:`\hbar` used in the generation of the state.

        Returns:
            float: :math:`\hbar` value.
        """
        return self._hbar

    @property
    def is_pure(self):
        r"""Checks whether the state is represented as a state vector.

        Returns:
            bool: True if and only if the state is a state vector.
        """
        return self._pure

    @property
    def gaussian(self):
        """GaussianMoments: the Gaussian tag of the state, or ``None``"""
        return self._gaussian

    @property
    def is_gaussian(self):
        """bool: whether the state carries the Gaussian tag"""
        return self._gaussian is not None

    @abc.abstractmethod
    def ket(self):
        r"""The state vector :math:`\ket{\psi}`, or ``None`` for a density matrix."""

    @abc.abstractmethod
    def dm(self):
        r"""The density matrix :math:`\rho` of the state."""

    @abc.abstractmethod
    def trace(self):
        r"""Trace of the density operator corresponding to the state.

        For state vectors the trace corresponds to the squared norm of the ket vector.
        """

    @abc.abstractmethod
    def validate(self, tol=1e-6):
        """Checks that the state is a physical quantum state.

        Raises:
            StateError: if the state violates one of the constraints
        """

    @abc.abstractmethod
    def _new(self, data, gaussian):
        """A state of the same representation holding ``data``."""

    @abc.abstractmethod
    def _normalized(self, data):
        """``data`` rescaled to unit norm or trace."""

    def to_matrix(self):
        """The same state in the density matrix representation.

        Returns:
            MatrixState: the converted state
        """
        return MatrixState(self.dm(), hbar=self._hbar, gaussian=self._gaussian)

    def purity(self):
        r"""The purity :math:`\text{Tr}(\rho^2)` of the state."""
        rho = self.dm()
        return np.real(np.trace(rho @ rho))

    def all_fock_probs(self):
        r"""Probabilities of all Fock basis states :math:`\ket{0},\dots,\ket{D-1}`.

        Returns:
            array: length :math:`D` array of Fock state probabilities
        """
        return np.real(np.diagonal(self.dm())).copy()

    def fock_prob(self, n):
        r"""Probability of the Fock state :math:`\ket{n}`."""
        if n >= self.dim:
            raise ValueError("Can't get distribution beyond truncation level")

        return self.all_fock_probs()[n]

    def mean_photon(self):
        """Mean and variance of the photon number.

        Returns:
            tuple[float, float]: the mean and the variance
        """
        n = np.arange(self.dim)
        probs = self.all_fock_probs()
        mean = np.sum(n * probs)
        var = np.sum(n ** 2 * probs) - mean ** 2
        return mean, var

    def quad_expectation(self, phi=0):
        r"""Mean and variance of the rotated quadrature
        :math:`\x_\phi = \x \cos\phi + \p\sin\phi`, computed from the Fock data.

        Args:
            phi (float): rotation angle for the quadrature operator

        Returns:
            tuple[float, float]: the mean and the variance
        """
        cutoff = self.dim
        a = np.diag(np.sqrt(np.arange(1, cutoff + 5)), 1)
        x = np.sqrt(self._hbar / 2) * (a + a.T)
        p = -1j * np.sqrt(self._hbar / 2) * (a - a.T)

        xphi = np.cos(phi) * x + np.sin(phi) * p
        xphisq = np.dot(xphi, xphi)

        # truncate down
        xphi = xphi[:cutoff, :cutoff]
        xphisq = xphisq[:cutoff, :cutoff]

        rho = self.dm()

        mean = np.trace(np.dot(xphi, rho)).real
        var = np.trace(np.dot(xphisq, rho)).real - mean ** 2

        return mean, var

    def quad_moments(self):
        r"""Vector of means and covariance matrix of :math:`(\x, \p)`, computed from the Fock data.

        The off-diagonal covariance is obtained from the variance of
        :math:`\x_{\pi/4} = (\x + \p)/\sqrt{2}`.

        Returns:
            tuple[array, array]: the means vector and the covariance matrix
        """
        mean_x, var_x = self.quad_expectation(0)
        mean_p, var_p = self.quad_expectation(np.pi / 2)
        _, var_diag = self.quad_expectation(np.pi / 4)
        cov_xp = var_diag - (var_x + var_p) / 2

        return np.array([mean_x, mean_p]), np.array([[var_x, cov_xp], [cov_xp, var_p]])

    # ============================================
    # operators

    def _transform(self, op, gaussian):
        data = ops.apply(op, self._data, self._pure)
        return self._new(data.astype(np.result_type(self.dtype, np.complex64)), gaussian)

    def _ladder(self, op):
        data = self._normalized(ops.apply(op, self._data, self._pure))

        if not np.iscomplexobj(self._data):
            data = data.real

        return self._new(data.astype(self.dtype, copy=False), None)

    def create(self):
        r"""Applies the creation operator :math:`a^\dagger` and renormalizes.

        Returns:
            BaseState: the photon-added state

        Raises:
            StateError: if the result has zero norm
        """
        return self._ladder(ops.adagger(self.dim))

    def annihilate(self):
        r"""Applies the annihilation operator :math:`a` and renormalizes.

        Returns:
            BaseState: the photon-subtracted state

        Raises:
            StateError: if the result has zero norm, e.g. for the vacuum
        """
        return self._ladder(ops.a(self.dim))

    def displace(self, r, phi):
        r"""Applies the displacement operator :math:`D(re^{-i\phi})`.

        Args:
            r (float): displacement magnitude
            phi (float): displacement phase

        Returns:
            BaseState: the displaced state
        """
        gaussian = None if self._gaussian is None else self._gaussian.displace(r, phi)
        return self._transform(ops.displacement(r, -phi, self.dim), gaussian)

    def squeeze(self, r, phi):
        r"""Applies the squeezing operator :math:`S(re^{-i\phi})`.

        Args:
            r (float): squeezing magnitude
            phi (float): squeezing phase

        Returns:
            BaseState: the squeezed state
        """
        gaussian = None if self._gaussian is None else self._gaussian.squeeze(r, phi)
        return self._transform(ops.squeezing(r, -phi, self.dim), gaussian)


class VectorState(BaseState):
    r"""A pure state given by its amplitudes :math:`c_n = \braketD{n}{\psi}`.

    Args:
        data (array): length :math:`D` vector of amplitudes
        hbar (float): the value of :math:`\hbar` in the commutation relation
        gaussian (GaussianMoments): the Gaussian tag, if the state is known to be Gaussian
    """

    def __init__(self, data, hbar=DEFAULT_HBAR, gaussian=None):
        super().__init__(data, hbar, gaussian)
        self._pure = True

        if self._data.ndim != 1 or self._data.shape[0] < 1:
            raise ValueError("A state vector must be a non-empty one-dimensional array.")

    def ket(self):
        return self._data

    def dm(self):
        return ops.mix(self._data)

    def trace(self):
        return np.vdot(self._data, self._data).real

    def validate(self, tol=1e-6):
        norm = self.trace()

        if not np.isfinite(norm) or abs(norm - 1) > tol:
            raise StateError("State vector has squared norm {}, expected 1.".format(norm))

    def _new(self, data, gaussian):
        return VectorState(data, hbar=self._hbar, gaussian=gaussian)

    def _normalized(self, data):
        norm = np.linalg.norm(data)

        if norm == 0:
            raise StateError("The operator maps the state to the zero vector.")

        return data / norm


class MatrixState(BaseState):
    r"""A possibly mixed state given by its density matrix :math:`\rho_{mn} = \bra{m}\rho\ket{n}`.

    Args:
        data (array): :math:`D\times D` density matrix
        hbar (float): the value of :math:`\hbar` in the commutation relation
        gaussian (GaussianMoments): the Gaussian tag, if the state is known to be Gaussian
    """

    def __init__(self, data, hbar=DEFAULT_HBAR, gaussian=None):
        super().__init__(data, hbar, gaussian)
        self._pure = False

        if self._data.ndim != 2 or self._data.shape[0] != self._data.shape[1]:
            raise ValueError("A density matrix must be a square two-dimensional array.")

    def ket(self):
        return None

    def dm(self):
        return self._data

    def trace(self):
        return np.trace(self._data).real

    def validate(self, tol=1e-6):
        rho = self._data

        if not np.all(np.isfinite(rho)):
            raise StateError("Density matrix contains non-finite entries.")

        if not np.allclose(rho, ops.dagger(rho), atol=tol, rtol=0):
            raise StateError("Density matrix is not Hermitian.")

        tr = self.trace()
        if abs(tr - 1) > tol:
            raise StateError("Density matrix has trace {}, expected 1.".format(tr))

        min_eig = np.min(np.linalg.eigvalsh((rho + ops.dagger(rho)) / 2))
        if min_eig < -tol:
            raise StateError(
                "Density matrix has negative eigenvalue {}.".format(min_eig)
            )

    def _new(self, data, gaussian):
        return MatrixState(data, hbar=self._hbar, gaussian=gaussian)

    def _normalized(self, data):
        tr = np.trace(data).real

        if tr == 0:
            raise StateError("The operator maps the state to the zero matrix.")

        return data / tr


# ============================================
#
# State constructors
#
# ============================================


def _build(vec, rep, hbar, gaussian, dtype):
    """Wraps a state vector in the requested representation."""
    vec = np.asarray(vec)

    if not np.issubdtype(dtype, np.complexfloating):
        vec = vec.real

    vec = vec.astype(dtype)

    if rep == "vector":
        return VectorState(vec, hbar=hbar, gaussian=gaussian)

    if rep == "matrix":
        return MatrixState(ops.mix(vec), hbar=hbar, gaussian=gaussian)

    raise ValueError("Unknown state representation '{}', expected 'vector' or 'matrix'.".format(rep))


def fock_state(n, dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, rep="vector", dtype=np.complex128):
    r"""The Fock state :math:`\ket{n}`.

    Only the vacuum (:math:`n=0`) carries the Gaussian tag.

    Args:
        n (int): photon number, smaller than ``dim``
        dim (int): Fock cutoff
        hbar (float): the value of :math:`\hbar` in the commutation relation
        rep (str): ``"vector"`` or ``"matrix"``
        dtype (numpy.dtype): element type of the state data

    Returns:
        BaseState: the Fock state
    """
    if not 0 <= n < dim:
        raise ValueError("Photon number {} outside of the truncation 0..{}".format(n, dim - 1))

    gaussian = GaussianMoments.vacuum(hbar) if n == 0 else None
    return _build(ops.fockState(n, dim), rep, hbar, gaussian, dtype)


def vacuum_state(dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, rep="vector", dtype=np.complex128):
    r"""The vacuum state :math:`\ket{0}`."""
    return fock_state(0, dim=dim, hbar=hbar, rep=rep, dtype=dtype)


def single_photon_state(dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, rep="vector", dtype=np.complex128):
    r"""The single photon state :math:`\ket{1}`."""
    return fock_state(1, dim=dim, hbar=hbar, rep=rep, dtype=dtype)


def coherent_state(r, phi, dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, rep="vector", dtype=np.complex128):
    r"""The coherent state :math:`\ket{\alpha}`, :math:`\alpha = re^{-i\phi}`.

    Args:
        r (float): displacement magnitude
        phi (float): displacement phase
        dim (int): Fock cutoff
        hbar (float): the value of :math:`\hbar` in the commutation relation
        rep (str): ``"vector"`` or ``"matrix"``
        dtype (numpy.dtype): element type of the state data
    """
    gaussian = GaussianMoments.vacuum(hbar).displace(r, phi)
    return _build(ops.coherentState(r, -phi, dim), rep, hbar, gaussian, dtype)


def squeezed_state(r, phi, dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, rep="vector", dtype=np.complex128):
    r"""The squeezed vacuum :math:`S(re^{-i\phi})\ket{0}`.

    Args:
        r (float): squeezing magnitude
        phi (float): squeezing phase
        dim (int): Fock cutoff
        hbar (float): the value of :math:`\hbar` in the commutation relation
        rep (str): ``"vector"`` or ``"matrix"``
        dtype (numpy.dtype): element type of the state data
    """
    gaussian = GaussianMoments.vacuum(hbar).squeeze(r, phi)
    return _build(ops.squeezedState(r, -phi, dim), rep, hbar, gaussian, dtype)


def displaced_squeezed_state(
    r_d, phi_d, r_s, phi_s, dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, rep="vector", dtype=np.complex128
):
    r"""The displaced squeezed state :math:`D(r_d e^{-i\phi_d})S(r_s e^{-i\phi_s})\ket{0}`."""
    # pylint: disable=too-many-arguments
    gaussian = GaussianMoments.vacuum(hbar).squeeze(r_s, phi_s).displace(r_d, phi_d)
    return _build(ops.displacedSqueezed(r_d, -phi_d, r_s, -phi_s, dim), rep, hbar, gaussian, dtype)


def thermal_state(nbar, dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, dtype=np.complex128):
    r"""The thermal state with mean photon number ``nbar``.

    Always represented as a density matrix.
    """
    rho = np.array(ops.thermalState(nbar, dim), dtype=dtype)
    return MatrixState(rho, hbar=hbar, gaussian=GaussianMoments.thermal(nbar, hbar))


def squeezed_thermal_state(r, phi, nbar, dim=DEFAULT_DIM, hbar=DEFAULT_HBAR, dtype=np.complex128):
    r"""The squeezed thermal state :math:`S(re^{-i\phi})\rho(\bar{n})S^\dagger(re^{-i\phi})`.

    Always represented as a density matrix.

    Args:
        r (float): squeezing magnitude
        phi (float): squeezing phase
        nbar (float): mean photon number of the thermal state before squeezing
        dim (int): Fock cutoff
        hbar (float): the value of :math:`\hbar` in the commutation relation
        dtype (numpy.dtype): element type of the state data
    """
    return thermal_state(nbar, dim=dim, hbar=hbar, dtype=dtype).squeeze(r, phi)
