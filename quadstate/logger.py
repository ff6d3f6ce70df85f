# Copyright 2010 Pallets

# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:

# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
# 3. Neither the name of the copyright holder nor the names of its contributors
#    may be used to endorse or promote products derived from this software
#    without specific prior written permission.

# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

# Copyright 2020 Xanadu Quantum Technologies Inc.

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
Module loggers of QuadState.

A QuadState logger gets a default stderr handler and the level of the
``[logging]`` configuration section, unless the application has already set
up logging for it. The approach follows the logging setup of the Flask web
framework: https://github.com/pallets/flask/blob/master/src/flask/logging.py
"""

import logging
import sys


def logging_handler_defined(logger):
    """Whether a handler is attached to ``logger`` or to an ancestor that
    receives its records through propagation.

    Args:
        logger (logging.Logger): the logger to inspect

    Returns:
        bool: whether a handler was found
    """
    while logger:
        if logger.handlers:
            return True

        if not logger.propagate:
            return False

        logger = logger.parent

    return False


default_handler = logging.StreamHandler(sys.stderr)
default_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))


def configured_level():
    """The level named in the ``[logging]`` section of the session
    configuration; ``INFO`` if the name is not a :mod:`logging` level.

    Returns:
        int: the level
    """
    # pylint: disable=import-outside-toplevel
    from quadstate.configuration import SESSION_CONFIG

    level = logging.getLevelName(SESSION_CONFIG["logging"]["level"].upper())
    return level if isinstance(level, int) else logging.INFO


def create_logger(name, level=None):
    """Returns the logger ``name``, set up for QuadState if the application left it alone.

    The logger counts as untouched when its own level is unset, its
    effective level is the default ``WARNING`` and no handler would receive
    its records. Only then are the level and :data:`default_handler` set.

    Args:
        name (str): the logger name, usually the module ``__name__``
        level (int): the level to set; :func:`configured_level` if not given

    Returns:
        logging.Logger: the logger
    """
    logger = logging.getLogger(name)

    untouched = (
        not logger.level
        and logger.getEffectiveLevel() == logging.WARNING
        and not logging_handler_defined(logger)
    )

    if untouched:
        logger.setLevel(configured_level() if level is None else level)
        logger.addHandler(default_handler)

    return logger
