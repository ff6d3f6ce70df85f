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
Default parameters, environment variables, fixtures, and common routines for the unit tests.
"""
# pylint: disable=redefined-outer-name
import os
import pytest

import numpy as np


# defaults
TOL = 1e-6
DIM = 70
HBAR = 2.0
SEED = 42


@pytest.fixture(scope="session")
def tol():
    """Numerical tolerance for equality tests."""
    return float(os.environ.get("TOL", TOL))


@pytest.fixture(scope="session")
def dim():
    """Fock state cutoff"""
    return int(os.environ.get("DIM", DIM))


@pytest.fixture(scope="session")
def hbar():
    """The value of hbar"""
    return float(os.environ.get("HBAR", HBAR))


@pytest.fixture
def rng():
    """Seeded random number generator"""
    return np.random.default_rng(int(os.environ.get("SEED", SEED)))


@pytest.fixture(scope="session")
def print_fixtures(dim, hbar):
    """Print the test configuration at the beginning of the session"""
    print("FIXTURE VALUES: dim={}, hbar={}".format(dim, hbar))
