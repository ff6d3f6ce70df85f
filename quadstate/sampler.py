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
Samplers of homodyne measurement outcomes.

All samplers return a ``(2, n)`` array whose first row holds local oscillator
phases :math:`\theta` and whose second row holds the measured quadrature values
:math:`x`. The phases are uniformly distributed, so that the joint density of a
column is :math:`p(\theta, x)/2\pi` with :math:`p` given by :func:`~.q_pdf`.

* :func:`gaussian_state_sampler` draws exact, independent samples from states
  carrying the Gaussian tag.

* :func:`state_sampler` works for any state. It runs random-walk Metropolis
  chains targeting :func:`~.q_pdf`; every chain is started afresh, thermalized
  for ``warm_up_n`` steps and then recorded for ``batch_size`` steps. Columns
  are ordered chain by chain, so neighbouring columns of one batch are
  correlated.

* :func:`sample` chooses between the two depending on the Gaussian tag.
"""
import math

import numpy as np

from .configuration import SESSION_CONFIG
from .logger import create_logger
from .quadrature import pdf_function
from .states import GaussianMoments, StateError


def _num_samples(n):
    if n is None:
        return 1

    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise TypeError("The number of samples must be an integer.")

    if n < 0:
        raise ValueError("The number of samples must be non-negative.")

    return int(n)


def _option(value, key):
    """Returns ``value``, or the ``[sampler]`` configuration default if it is ``None``."""
    if value is None:
        return SESSION_CONFIG["sampler"][key]

    return value


def gaussian_state_sampler(state, n=None, bias_phase=0.0, rng=None):
    r"""Draws independent homodyne samples from a Gaussian state.

    The phases are drawn uniformly from :math:`[\theta_b, \theta_b + 2\pi)`,
    :math:`\theta_b` being ``bias_phase``. A phase space point
    :math:`(x, p)` is drawn from the normal distribution with the means and
    covariance of the Gaussian tag, :math:`(x, p) = \mu + Lz` with
    :math:`LL^T = \Sigma` and :math:`z` a vector of unit normal variates, and
    projected onto :math:`x_\theta = x\cos\theta + p\sin\theta`.

    Args:
        state (BaseState): a state carrying the Gaussian tag
        n (int): number of samples; a single sample is returned if not provided
        bias_phase (float): offset of the sampled phases
        rng (int or numpy.random.Generator): seed or generator for the random stream

    Returns:
        array: the ``(2, n)`` array of phases and quadrature values

    Raises:
        StateError: if the state does not carry the Gaussian tag
    """
    n = _num_samples(n)

    if not state.is_gaussian:
        raise StateError("The state is not tagged as Gaussian; use state_sampler instead.")

    rng = np.random.default_rng(rng)
    moments = state.gaussian

    thetas = bias_phase + 2 * np.pi * rng.random(n)
    L = np.linalg.cholesky(moments.cov)
    xp = moments.means[:, None] + L @ rng.standard_normal((2, n))
    xs = np.cos(thetas) * xp[0] + np.sin(thetas) * xp[1]

    return np.vstack([thetas, xs])


def _reference_moments(state):
    """Gaussian approximation of a state, used to start and scale the chains."""
    if state.is_gaussian:
        return state.gaussian

    means, cov = state.quad_moments()
    return GaussianMoments(means, cov, state.hbar)


def _proposal_widths(moments):
    """Standard deviations of the random-walk proposal in ``theta`` and ``x``.

    The quadrature step is the root mean quadrature variance. The phase step
    moves the mean of a displaced state by about one quadrature step.
    """
    x_step = np.sqrt(np.trace(moments.cov) / 2)
    amplitude = np.linalg.norm(moments.means)
    theta_step = min(np.pi, x_step / max(amplitude, x_step))
    return theta_step, x_step


def _run_chains(density_fn, moments, generators, warm_up_n, batch_size):
    """Runs one Metropolis chain per generator, side by side.

    Every chain draws all of its variates from its own generator before the
    steps are taken, so a chain does not depend on the chains it is grouped with.

    Returns:
        tuple[array, array]: phases and quadrature values of shape
        ``(len(generators), batch_size)``, one row per chain
    """
    # pylint: disable=too-many-locals
    theta_step, x_step = _proposal_widths(moments)
    num_steps = warm_up_n + batch_size

    start = np.empty((len(generators), 2))
    normals = np.empty((len(generators), num_steps, 2))
    uniforms = np.empty((len(generators), num_steps))

    for i, gen in enumerate(generators):
        start[i] = gen.random(), gen.standard_normal()
        normals[i] = gen.standard_normal((num_steps, 2))
        uniforms[i] = gen.random(num_steps)

    # restart from the Gaussian approximation of the state
    theta = 2 * np.pi * start[:, 0]
    mean, var = moments.quad_mean_var(theta)
    x = mean + np.sqrt(np.maximum(var, 0)) * start[:, 1]
    p = density_fn(theta, x)

    thetas = np.empty((len(generators), batch_size))
    xs = np.empty((len(generators), batch_size))

    for step in range(num_steps):
        theta_new = np.mod(theta + theta_step * normals[:, step, 0], 2 * np.pi)
        x_new = x + x_step * normals[:, step, 1]
        p_new = density_fn(theta_new, x_new)

        accept = uniforms[:, step] * p < p_new
        theta = np.where(accept, theta_new, theta)
        x = np.where(accept, x_new, x)
        p = np.where(accept, p_new, p)

        if step >= warm_up_n:
            thetas[:, step - warm_up_n] = theta
            xs[:, step - warm_up_n] = x

    return thetas, xs


def state_sampler(
    state,
    n=None,
    warm_up_n=None,
    batch_size=None,
    show_log=None,
    rng=None,
    callback=None,
    parallel_chains=None,
):
    r"""Draws homodyne samples from an arbitrary state.

    The samples are produced by random-walk Metropolis chains with target
    density :func:`~.q_pdf` and a symmetric normal proposal in
    :math:`(\theta, x)`. The ``n`` samples are split into
    :math:`\lceil n/\text{batch\_size}\rceil` batches. Every batch comes from
    a fresh chain started at a draw of the Gaussian approximation of the
    state, which first discards ``warm_up_n`` steps and then records
    ``batch_size`` steps. The batches are concatenated in order and cut to
    exactly ``n`` columns.

    Chains are run side by side in groups of at most ``parallel_chains``.
    Every batch draws from its own child stream of ``rng``, so the result
    depends on the arguments and the random stream but not on
    ``parallel_chains``.

    **Example:**

    >>> state = single_photon_state(rep="matrix").squeeze(0.5, np.pi / 2).displace(3.0, np.pi / 2)
    >>> state_sampler(state, 4100, warm_up_n=100, batch_size=97, show_log=False).shape
    (2, 4100)

    Args:
        state (BaseState): the state to sample from
        n (int): number of samples; a single sample is returned if not provided
        warm_up_n (int): number of discarded steps after every chain restart
        batch_size (int): number of recorded steps per chain
        show_log (bool): whether to log the progress
        rng (int or numpy.random.Generator): seed or generator for the random stream
        callback (callable): called as ``callback(completed_batches, num_batches)``
            after every group of chains; it cannot alter the samples
        parallel_chains (int): number of chains advanced together

    Keyword arguments left as ``None`` take their value from the ``[sampler]``
    section of the configuration.

    Returns:
        array: the ``(2, n)`` array of phases and quadrature values

    Raises:
        ValueError: for a negative ``warm_up_n`` or a ``batch_size`` or
            ``parallel_chains`` smaller than one
        NumericalError: if the density is not finite at a proposed point
    """
    # pylint: disable=too-many-arguments,too-many-locals
    n = _num_samples(n)
    warm_up_n = _option(warm_up_n, "warm_up_n")
    batch_size = _option(batch_size, "batch_size")
    show_log = _option(show_log, "show_log")
    parallel_chains = _option(parallel_chains, "parallel_chains")

    if warm_up_n < 0:
        raise ValueError("warm_up_n must be non-negative, got {}.".format(warm_up_n))

    if batch_size < 1:
        raise ValueError("batch_size must be at least 1, got {}.".format(batch_size))

    if parallel_chains < 1:
        raise ValueError("parallel_chains must be at least 1, got {}.".format(parallel_chains))

    if n == 0:
        return np.empty((2, 0))

    rng = np.random.default_rng(rng)
    log = create_logger(__name__) if show_log else None

    density_fn = pdf_function(state)
    moments = _reference_moments(state)

    num_batches = math.ceil(n / batch_size)
    samples = np.empty((2, num_batches * batch_size))

    seeds = np.random.SeedSequence(rng.integers(2 ** 32, size=4).tolist()).spawn(num_batches)
    generators = [np.random.default_rng(s) for s in seeds]

    if log is not None:
        log.info(
            "Sampling %d points in %d batches (warm_up_n=%d, batch_size=%d).",
            n,
            num_batches,
            warm_up_n,
            batch_size,
        )

    completed = 0
    while completed < num_batches:
        num_chains = min(parallel_chains, num_batches - completed)
        thetas, xs = _run_chains(
            density_fn, moments, generators[completed : completed + num_chains], warm_up_n, batch_size
        )

        start = completed * batch_size
        stop = start + num_chains * batch_size
        samples[0, start:stop] = thetas.ravel()
        samples[1, start:stop] = xs.ravel()
        completed += num_chains

        if log is not None:
            log.info("Completed %d of %d batches.", completed, num_batches)

        if callback is not None:
            _notify(callback, completed, num_batches, log)

    return samples[:, :n]


def _notify(callback, completed, num_batches, log):
    """Invokes the progress callback; a failing callback does not stop the sampling."""
    try:
        callback(completed, num_batches)
    except Exception as e:  # pylint: disable=broad-except
        (log or create_logger(__name__)).warning("Progress callback failed: %s", e)


def sample(state, n=None, **kwargs):
    """Draws homodyne samples from a state.

    States carrying the Gaussian tag are sampled exactly with
    :func:`gaussian_state_sampler`; all other states with :func:`state_sampler`.

    **Example:**

    >>> sample(vacuum_state(), 4100, bias_phase=np.pi / 4).shape
    (2, 4100)
    >>> sample(single_photon_state(), 4100, warm_up_n=97, show_log=False).shape
    (2, 4100)

    Args:
        state (BaseState): the state to sample from
        n (int): number of samples; a single sample is returned if not provided

    Keyword Args:
        Passed on to the selected sampler.

    Returns:
        array: the ``(2, n)`` array of phases and quadrature values
    """
    if state.is_gaussian:
        return gaussian_state_sampler(state, n, **kwargs)

    return state_sampler(state, n, **kwargs)
