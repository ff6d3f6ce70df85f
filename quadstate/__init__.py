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
"""
QuadState represents single-mode quantum optical states in a truncated Fock
basis, evaluates their homodyne quadrature distribution and samples
measurement outcomes from it.

The codebase is separated into the operator layer (:mod:`quadstate.ops`),
the state representations (:mod:`quadstate.states`), the quadrature density
(:mod:`quadstate.quadrature`) and the samplers (:mod:`quadstate.sampler`).
"""
from ._version import __version__
from .quadrature import NumericalError, pdf_function, q_pdf
from .sampler import gaussian_state_sampler, sample, state_sampler
from .states import (
    BaseState,
    GaussianMoments,
    MatrixState,
    StateError,
    VectorState,
    coherent_state,
    displaced_squeezed_state,
    fock_state,
    single_photon_state,
    squeezed_state,
    squeezed_thermal_state,
    thermal_state,
    vacuum_state,
)

__all__ = [
    "BaseState",
    "VectorState",
    "MatrixState",
    "GaussianMoments",
    "StateError",
    "NumericalError",
    "fock_state",
    "vacuum_state",
    "single_photon_state",
    "coherent_state",
    "squeezed_state",
    "displaced_squeezed_state",
    "thermal_state",
    "squeezed_thermal_state",
    "q_pdf",
    "pdf_function",
    "gaussian_state_sampler",
    "state_sampler",
    "sample",
    "version",
    "about",
]


def version():
    r"""
    Version number of QuadState.

    Returns:
      str: package version number
    """
    return __version__


def about():
    """QuadState information.

    Prints the installed version numbers for QuadState and its dependencies,
    and some system info. Please include this information in bug reports.
    """
    # pylint: disable=import-outside-toplevel
    import sys
    import platform
    import os
    import numpy
    import scipy
    import thewalrus

    print("\nQuadState: quadrature distributions and homodyne sampling of quantum optical states.\n")

    print("Python version:            {}.{}.{}".format(*sys.version_info[0:3]))
    print("Platform info:             {}".format(platform.platform()))
    print("Installation path:         {}".format(os.path.dirname(__file__)))
    print("QuadState version:         {}".format(__version__))
    print("Numpy version:             {}".format(numpy.__version__))
    print("Scipy version:             {}".format(scipy.__version__))
    print("The Walrus version:        {}".format(thewalrus.__version__))
