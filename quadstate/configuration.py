# Copyright 2019-2020 Xanadu Quantum Technologies Inc.

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
Loading and lookup of the QuadState configuration.

Options are grouped in sections and read from a TOML file called
``config.toml``:

.. code-block:: toml

    [sampler]
    warm_up_n = 128
    batch_size = 64
    show_log = true
    parallel_chains = 64

    [logging]
    level = "info"

An option can be overridden by the environment variable
``QS_<SECTION>_<OPTION>``, e.g. ``QS_SAMPLER_BATCH_SIZE=97``, and both are
overridden by keyword arguments of :func:`load_config`.
"""
import collections.abc
import os

import toml
from appdirs import user_config_dir


DEFAULT_CONFIG_SPEC = {
    "sampler": {
        "warm_up_n": (int, 128),
        "batch_size": (int, 64),
        "show_log": (bool, True),
        "parallel_chains": (int, 64),
    },
    "logging": {"level": (str, "info")},
}
"""dict: The recognised sections and options. Every option maps to a pair
``(type, default)``."""


class ConfigurationError(Exception):
    """Exception used for configuration errors"""


def _deep_update(source, overrides):
    """Merges ``overrides`` into the nested dictionary ``source`` and returns it.

    Empty dictionaries in ``overrides`` leave ``source`` untouched.
    """
    for key, value in overrides.items():
        if isinstance(value, collections.abc.Mapping):
            if value:
                source[key] = _deep_update(source.get(key, {}), value)
        else:
            source[key] = value

    return source


def _generate_config(config_spec, **kwargs):
    """Builds a configuration from a specification and type-checked overrides.

    **Example**

    >>> _generate_config(DEFAULT_CONFIG_SPEC, sampler={"batch_size": 97})["sampler"]
    {'warm_up_n': 128, 'batch_size': 97, 'show_log': True, 'parallel_chains': 64}

    Args:
        config_spec (dict): nested specification in the format of :attr:`~.DEFAULT_CONFIG_SPEC`

    Keyword Args:
        Overrides for the options of the specification, nested like it.

    Returns:
        dict: the configuration

    Raises:
        ConfigurationError: if an override does not have the type of its option
    """
    res = {}
    for key, spec in config_spec.items():
        if isinstance(spec, dict):
            res[key] = _generate_config(spec, **kwargs.get(key, {}))
            continue

        option_type, default = spec

        if key not in kwargs:
            res[key] = default
        elif isinstance(kwargs[key], option_type):
            res[key] = kwargs[key]
        else:
            raise ConfigurationError(
                "Expected type {} for option {}, received {}".format(
                    option_type, key, type(kwargs[key])
                )
            )

    return res


def load_config(filename="config.toml", verbose=True, **kwargs):
    """Loads the configuration.

    Sources are merged from lowest to highest precedence:

    1. the first configuration file found by :func:`find_config_file`
    2. environment variables
    3. keyword arguments, one dictionary per section

    Options that no source sets take their defaults.

    Args:
        filename (str): the name of the configuration file to look for
        verbose (bool): whether to log the loading

    Keyword Args:
        Section overrides, e.g. ``sampler={"batch_size": 97}`` or
        ``logging={"level": "debug"}``.

    Returns:
        dict[str, dict[str, Union[str, bool, int]]]: the configuration
    """
    log = None
    if verbose:
        # pylint: disable=import-outside-toplevel
        from quadstate.logger import create_logger

        log = create_logger(__name__)

    filepath = find_config_file(filename=filename)
    config = {}

    if filepath is not None:
        with open(filepath, "r") as f:
            config = toml.load(f)

    if log is not None:
        if filepath is None:
            log.info("No QuadState configuration file found.")
        else:
            log.debug("Configuration file %s loaded", filepath)

    update_from_environment_variables(config)
    _deep_update(config, kwargs)
    config = _generate_config(DEFAULT_CONFIG_SPEC, **config)

    if log is not None:
        log.debug("Loaded configuration: %s", config)

    return config


def directories_to_check():
    """Directories searched for a configuration file, in order: the current
    working directory, ``$QS_CONF`` if set, and the user configuration directory.

    Returns:
        list[str]: the directories
    """
    directories = [os.getcwd()]

    env_dir = os.environ.get("QS_CONF", "")
    if env_dir:
        directories.append(env_dir)

    directories.append(user_config_dir("quadstate"))
    return directories


def get_available_config_paths(filename="config.toml"):
    """Paths of all existing configuration files, in the order of :func:`directories_to_check`.

    Args:
        filename (str): the name of the configuration file

    Returns:
        list[str]: the existing file paths
    """
    paths = (os.path.join(directory, filename) for directory in directories_to_check())
    return [path for path in paths if os.path.exists(path)]


def find_config_file(filename="config.toml"):
    """The first existing configuration file, or ``None``.

    Args:
        filename (str): the name of the configuration file

    Returns:
        Union[str, None]: the file path
    """
    paths = get_available_config_paths(filename=filename)
    return paths[0] if paths else None


def update_from_environment_variables(config):
    """Adds the options set through ``QS_<SECTION>_<OPTION>`` environment
    variables to ``config``, replacing values already present.

    Args:
        config (dict): the configuration to update in place

    Returns:
        dict: the updated configuration
    """
    for section, options in DEFAULT_CONFIG_SPEC.items():
        for key in options:
            name = "QS_{}_{}".format(section, key).upper()
            if name in os.environ:
                value = _parse_environment_variable(section, key, os.environ[name])
                config.setdefault(section, {})[key] = value

    return config


_TRUE_STRINGS = ("true", "True", "TRUE", "1")
_FALSE_STRINGS = ("false", "False", "FALSE", "0")


def _parse_environment_variable(section, key, value):
    """Converts the string ``value`` to the type of option ``key`` of ``section``.

    Raises:
        ValueError: if a boolean option is not one of the recognised spellings
    """
    option_type = DEFAULT_CONFIG_SPEC[section][key][0]

    if option_type is bool:
        if value in _TRUE_STRINGS:
            return True

        if value in _FALSE_STRINGS:
            return False

        raise ValueError("Boolean could not be parsed")

    return option_type(value)


DEFAULT_CONFIG = _generate_config(DEFAULT_CONFIG_SPEC)
SESSION_CONFIG = load_config(verbose=False)
