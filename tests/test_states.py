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
r"""Unit tests for the states.py submodule"""
import pytest

import numpy as np
from scipy.special import factorial as fac

from quadstate import states
from quadstate.states import GaussianMoments, MatrixState, StateError, VectorState


r = 0.3
phi = 0.123
r_s = 0.2
phi_s = 0.7
nbar = 0.5

REPS = ["vector", "matrix"]


class TestGaussianMoments:
    """Tests for the Gaussian tag"""

    def test_vacuum(self, hbar):
        """Test the vacuum moments"""
        moments = GaussianMoments.vacuum(hbar)
        assert np.array_equal(moments.means, np.zeros(2))
        assert np.allclose(moments.cov, np.identity(2) * hbar / 2)

    def test_displace(self, hbar, tol):
        """Test that displacement shifts the means"""
        moments = GaussianMoments.vacuum(hbar).displace(r, phi)
        expected = np.sqrt(2 * hbar) * r * np.array([np.cos(phi), -np.sin(phi)])
        assert np.allclose(moments.means, expected, atol=tol, rtol=0)
        assert np.allclose(moments.cov, np.identity(2) * hbar / 2, atol=tol, rtol=0)

    def test_squeeze_real(self, hbar, tol):
        """Test that real squeezing contracts x and stretches p"""
        moments = GaussianMoments.vacuum(hbar).squeeze(r_s, 0)
        expected = hbar / 2 * np.diag([np.exp(-2 * r_s), np.exp(2 * r_s)])
        assert np.allclose(moments.cov, expected, atol=tol, rtol=0)

    def test_thermal(self, hbar, tol):
        """Test the thermal state covariance"""
        moments = GaussianMoments.thermal(nbar, hbar)
        assert np.allclose(moments.cov, (2 * nbar + 1) * hbar / 2 * np.identity(2), atol=tol, rtol=0)

    def test_quad_mean_var(self, hbar, tol):
        """Test the mean and variance of rotated quadratures"""
        moments = GaussianMoments.vacuum(hbar).squeeze(r_s, 0).displace(r, 0)
        thetas = np.array([0, np.pi / 2])
        mean, var = moments.quad_mean_var(thetas)

        assert np.allclose(mean, [np.sqrt(2 * hbar) * r, 0], atol=tol, rtol=0)
        assert np.allclose(
            var, [hbar / 2 * np.exp(-2 * r_s), hbar / 2 * np.exp(2 * r_s)], atol=tol, rtol=0
        )


@pytest.mark.parametrize("rep", REPS)
class TestConstructors:
    """Tests for the named state constructors"""

    def test_vacuum(self, rep, dim, hbar):
        """Test the vacuum state"""
        state = states.vacuum_state(dim=dim, hbar=hbar, rep=rep)

        assert state.dim == dim
        assert state.cutoff_dim == dim
        assert state.hbar == hbar
        assert state.is_pure == (rep == "vector")
        assert state.is_gaussian
        assert np.allclose(state.fock_prob(0), 1)

    def test_single_photon(self, rep, dim):
        """Test the single photon state is not tagged as Gaussian"""
        state = states.single_photon_state(dim=dim, rep=rep)

        assert not state.is_gaussian
        assert state.gaussian is None
        assert np.allclose(state.fock_prob(1), 1)

    def test_fock_state_out_of_range(self, rep):
        """Test that a photon number beyond the truncation raises"""
        with pytest.raises(ValueError, match="outside of the truncation"):
            states.fock_state(5, dim=5, rep=rep)

    def test_coherent_mean_photon(self, rep, tol):
        """Test the mean and variance of the photon number of a coherent state"""
        state = states.coherent_state(r, phi, rep=rep)
        mean, var = state.mean_photon()

        assert np.allclose(mean, r ** 2, atol=tol, rtol=0)
        assert np.allclose(var, r ** 2, atol=tol, rtol=0)

    def test_displaced_vacuum_is_coherent(self, rep, dim, hbar, tol):
        """Test that displacing the vacuum gives the coherent state"""
        state = states.vacuum_state(dim=dim, hbar=hbar, rep=rep).displace(r, phi)
        expected = states.coherent_state(r, phi, dim=dim, hbar=hbar, rep=rep)

        assert np.allclose(state.dm(), expected.dm(), atol=tol, rtol=0)
        assert np.allclose(state.gaussian.means, expected.gaussian.means, atol=tol, rtol=0)
        assert np.allclose(state.gaussian.cov, expected.gaussian.cov, atol=tol, rtol=0)

    def test_squeezed_vacuum(self, rep, dim, tol):
        """Test that squeezing the vacuum gives the squeezed state"""
        state = states.vacuum_state(dim=dim, rep=rep).squeeze(r_s, phi_s)
        expected = states.squeezed_state(r_s, phi_s, dim=dim, rep=rep)

        assert np.allclose(state.dm(), expected.dm(), atol=tol, rtol=0)
        assert np.allclose(state.gaussian.cov, expected.gaussian.cov, atol=tol, rtol=0)

    def test_displaced_squeezed(self, rep, dim, tol):
        """Test the displaced squeezed state against the operator product"""
        state = states.displaced_squeezed_state(r, phi, r_s, phi_s, dim=dim, rep=rep)
        expected = states.vacuum_state(dim=dim, rep=rep).squeeze(r_s, phi_s).displace(r, phi)

        assert np.allclose(state.dm(), expected.dm(), atol=tol, rtol=0)
        assert np.allclose(state.gaussian.means, expected.gaussian.means, atol=tol, rtol=0)
        assert np.allclose(state.gaussian.cov, expected.gaussian.cov, atol=tol, rtol=0)

    def test_real_dtype(self, rep):
        """Test that a state can hold real data"""
        state = states.fock_state(2, rep=rep, dtype=np.float64)
        assert state.dtype == np.float64


class TestMixedConstructors:
    """Tests for the constructors that always return density matrices"""

    def test_thermal(self, tol):
        """Test the purity and mean photon number of a thermal state"""
        state = states.thermal_state(nbar, dim=100)

        assert isinstance(state, MatrixState)
        assert state.is_gaussian
        assert np.allclose(state.purity(), 1 / (2 * nbar + 1), atol=tol, rtol=0)
        assert np.allclose(state.mean_photon()[0], nbar, atol=tol, rtol=0)

    def test_squeezed_thermal_tag(self, hbar, tol):
        """Test the tag of a squeezed thermal state"""
        state = states.squeezed_thermal_state(r_s, phi_s, nbar, hbar=hbar)
        expected = GaussianMoments.thermal(nbar, hbar).squeeze(r_s, phi_s)

        assert isinstance(state, MatrixState)
        assert np.allclose(state.gaussian.cov, expected.cov, atol=tol, rtol=0)

    def test_unknown_representation(self):
        """Test that an unknown representation raises"""
        with pytest.raises(ValueError, match="Unknown state representation"):
            states.vacuum_state(rep="tensor")


class TestLadder:
    """Tests for photon addition and subtraction"""

    @pytest.mark.parametrize("rep", REPS)
    def test_create_vacuum(self, rep, dim):
        """Test that adding a photon to the vacuum gives the single photon state"""
        state = states.vacuum_state(dim=dim, rep=rep).create()
        assert state == states.single_photon_state(dim=dim, rep=rep)

    @pytest.mark.parametrize("rep", REPS)
    def test_annihilate_create_vacuum(self, rep, dim):
        """Test that removing the added photon gives back the vacuum"""
        vacuum = states.vacuum_state(dim=dim, rep=rep)
        assert vacuum.create().annihilate() == vacuum

    @pytest.mark.parametrize("rep", REPS)
    def test_annihilate_vacuum(self, rep):
        """Test that subtracting a photon from the vacuum raises"""
        with pytest.raises(StateError, match="zero"):
            states.vacuum_state(rep=rep).annihilate()

    def test_photon_added_coherent_normalized(self, tol):
        """Test that photon addition renormalizes"""
        state = states.coherent_state(r, phi).create()
        assert np.allclose(state.trace(), 1, atol=tol, rtol=0)

    def test_ladder_clears_tag(self):
        """Test that photon addition and subtraction drop the Gaussian tag"""
        state = states.coherent_state(r, phi)

        assert state.is_gaussian
        assert not state.create().is_gaussian
        assert not state.annihilate().is_gaussian

    def test_real_dtype_kept(self):
        """Test that photon addition keeps a real element type"""
        state = states.fock_state(0, dtype=np.float64).create()
        assert state.dtype == np.float64
        assert np.allclose(state.fock_prob(1), 1)

    def test_displace_real_dtype_promoted(self):
        """Test that displacement promotes real data to complex"""
        state = states.fock_state(0, dtype=np.float64).displace(r, phi)
        assert np.iscomplexobj(state.data)


class TestImmutability:
    """Tests that the operators return new states"""

    @pytest.mark.parametrize("rep", REPS)
    @pytest.mark.parametrize(
        "apply_op",
        [
            lambda s: s.create(),
            lambda s: s.annihilate(),
            lambda s: s.displace(r, phi),
            lambda s: s.squeeze(r_s, phi_s),
        ],
    )
    def test_original_unchanged(self, rep, apply_op):
        """Test that the original state data and tag are untouched"""
        state = states.coherent_state(r, phi, rep=rep)
        data = state.data.copy()
        means = state.gaussian.means.copy()

        new_state = apply_op(state)

        assert new_state is not state
        assert np.array_equal(state.data, data)
        assert np.array_equal(state.gaussian.means, means)


class TestStateProperties:
    """Tests for the shared state interface"""

    def test_vector_matrix_equality(self):
        """Test that equality compares the density matrices"""
        vec = states.coherent_state(r, phi, rep="vector")
        mat = states.coherent_state(r, phi, rep="matrix")

        assert vec == mat
        assert vec.to_matrix() == mat
        assert vec.to_matrix().is_gaussian

    def test_inequality(self):
        """Test that different states or objects are not equal"""
        state = states.vacuum_state()

        assert state != states.single_photon_state()
        assert state != states.vacuum_state(dim=10)
        assert state != "vacuum"

    def test_ket(self):
        """Test that only state vectors return a ket"""
        assert states.vacuum_state(rep="vector").ket() is not None
        assert states.vacuum_state(rep="matrix").ket() is None

    def test_fock_prob_beyond_truncation(self):
        """Test that requesting a probability beyond the truncation raises"""
        with pytest.raises(ValueError, match="beyond truncation"):
            states.vacuum_state(dim=5).fock_prob(5)

    def test_all_fock_probs(self, tol):
        """Test that the Fock probabilities sum to one"""
        probs = states.squeezed_state(r_s, phi_s).all_fock_probs()
        assert np.allclose(np.sum(probs), 1, atol=tol, rtol=0)

    def test_str(self):
        """Test the string representation"""
        assert str(states.vacuum_state(dim=5)) == "<VectorState: dim=5, gaussian=True, hbar=2>"

    def test_quad_expectation_coherent(self, hbar, tol):
        """Test the quadrature mean and variance of a coherent state"""
        state = states.coherent_state(r, phi, hbar=hbar)
        mean, var = state.quad_expectation(0)

        assert np.allclose(mean, np.sqrt(2 * hbar) * r * np.cos(phi), atol=tol, rtol=0)
        assert np.allclose(var, hbar / 2, atol=tol, rtol=0)

    @pytest.mark.parametrize(
        "state",
        [
            states.displaced_squeezed_state(r, phi, r_s, phi_s),
            states.squeezed_thermal_state(r_s, phi_s, nbar),
        ],
    )
    def test_quad_moments_match_tag(self, state):
        """Test that the moments computed from the Fock data agree with the tag"""
        means, cov = state.quad_moments()

        assert np.allclose(means, state.gaussian.means, atol=1e-4, rtol=0)
        assert np.allclose(cov, state.gaussian.cov, atol=1e-4, rtol=0)

    def test_hbar_mismatch(self):
        """Test that a tag with a different hbar is rejected"""
        with pytest.raises(ValueError, match="different values of hbar"):
            VectorState(np.array([1, 0]), hbar=1, gaussian=GaussianMoments.vacuum(2))


class TestValidation:
    """Tests for the validity checks"""

    def test_vector_shape(self):
        """Test that a state vector must be one-dimensional"""
        with pytest.raises(ValueError, match="one-dimensional"):
            VectorState(np.identity(2))

    def test_matrix_shape(self):
        """Test that a density matrix must be square"""
        with pytest.raises(ValueError, match="square"):
            MatrixState(np.zeros((2, 3)))

    def test_unnormalized_vector(self):
        """Test that an unnormalized state vector fails validation"""
        with pytest.raises(StateError, match="squared norm"):
            VectorState(np.array([1, 1])).validate()

    def test_non_hermitian_matrix(self):
        """Test that a non-Hermitian matrix fails validation"""
        rho = np.array([[0.5, 0.5], [0, 0.5]])
        with pytest.raises(StateError, match="not Hermitian"):
            MatrixState(rho).validate()

    def test_trace(self):
        """Test that a matrix with the wrong trace fails validation"""
        with pytest.raises(StateError, match="trace"):
            MatrixState(np.identity(2)).validate()

    def test_negative_eigenvalue(self):
        """Test that a matrix with a negative eigenvalue fails validation"""
        with pytest.raises(StateError, match="negative eigenvalue"):
            MatrixState(np.diag([1.5, -0.5])).validate()

    @pytest.mark.parametrize("rep", REPS)
    def test_valid_states(self, rep):
        """Test that the named states pass validation"""
        states.displaced_squeezed_state(r, phi, r_s, phi_s, rep=rep).validate()
        states.single_photon_state(rep=rep).create().validate()
        states.squeezed_thermal_state(r_s, phi_s, nbar).validate()


class TestPhaseConvention:
    """Tests that displacement and squeezing use the parameter r exp(-i phi)"""

    @pytest.mark.parametrize("rep", REPS)
    def test_displacement_direction(self, rep, hbar, tol):
        """Test that a displacement with phase pi/4 gives a negative p mean"""
        state = states.vacuum_state(hbar=hbar, rep=rep).displace(2, np.pi / 4)
        expected = -np.sqrt(2 * hbar) * 2 * np.sin(np.pi / 4)

        assert np.allclose(state.quad_expectation(np.pi / 2)[0], expected, atol=tol, rtol=0)
        assert np.allclose(state.gaussian.means[1], expected, atol=tol, rtol=0)

    def test_coherent_amplitudes(self, tol):
        """Test the coherent state amplitudes for alpha = r exp(-i phi)"""
        D = 10
        alpha = r * np.exp(-1j * phi)
        n = np.arange(D)
        expected = np.exp(-0.5 * np.abs(alpha) ** 2) * alpha ** n / np.sqrt(fac(n))

        assert np.allclose(states.coherent_state(r, phi, dim=D).ket(), expected, atol=tol, rtol=0)

    def test_squeezed_amplitudes(self, tol):
        """Test the leading squeezed vacuum amplitudes for z = r exp(-i phi)"""
        ket = states.squeezed_state(r_s, phi_s).ket()
        c0 = 1 / np.sqrt(np.cosh(r_s))
        c2 = c0 * np.sqrt(2) / 2 * (-np.exp(-1j * phi_s) * np.tanh(r_s))

        assert np.allclose(ket[:3], [c0, 0, c2], atol=tol, rtol=0)

    def test_squeezing_direction(self, hbar):
        """Test that squeezing with phase pi/2 correlates x and p positively"""
        state = states.squeezed_state(r_s, np.pi / 2, hbar=hbar)
        expected = hbar / 2 * np.array(
            [[np.cosh(2 * r_s), np.sinh(2 * r_s)], [np.sinh(2 * r_s), np.cosh(2 * r_s)]]
        )

        assert np.allclose(state.gaussian.cov, expected, atol=1e-10, rtol=0)
        assert np.allclose(state.quad_moments()[1], expected, atol=1e-6, rtol=0)


class TestThermalCache:
    """Tests that thermal states do not share data between calls"""

    @pytest.mark.parametrize("nbar", [0, 0.5])
    def test_independent_data(self, nbar):
        """Test that writing to a thermal state leaves later thermal states intact"""
        state = states.thermal_state(nbar, dim=10)
        state.data[0, 0] = 5

        assert states.thermal_state(nbar, dim=10).data[0, 0] != 5
