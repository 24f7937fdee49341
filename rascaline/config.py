"""
Runtime settings, read from a JSON file.

The first `config.json` found in `PATHS` is used, e.g.

    {"parallel": {"num_threads": 4}, "timing": {"enabled": true}}

Settings missing from the file keep their default value.

"""

import copy
import json
import os
import warnings
from typing import List, Union

__author__ = "The rascaline developers"
__date__ = "2021-03-02"

DEFAULT = {
    "parallel": {
        "num_threads": None,
    },
    "timing": {
        "enabled": False,
    },
}

PATHS = [
    '.',
    os.path.join(os.path.expanduser("~"), ".config", "rascaline")
]


def config_file_path():
    """
    Path of the first configuration file found in `PATHS`, or None.

    """
    for p in PATHS:
        path = os.path.join(p, "config.json")
        if os.path.exists(path):
            return path
    return None


def read_config(config_file=None):
    """
    Settings from `config_file` (searched in `PATHS` if None) merged one
    level deep into the defaults.  Unknown sections are ignored with a
    warning.

    """
    settings = copy.deepcopy(DEFAULT)
    if config_file is None:
        config_file = config_file_path()
    if config_file is None:
        return settings

    with open(config_file) as fp:
        user = json.load(fp)
    for section, values in user.items():
        if section not in settings:
            warnings.warn("unknown setting '{}' in {} ignored".format(
                section, config_file))
        elif isinstance(values, dict):
            settings[section].update(values)
        else:
            warnings.warn("setting '{}' in {} should be an object, "
                          "ignored".format(section, config_file))
    return settings


def read(settings: Union[str, List[str]], config_file: os.PathLike = None):
    """
    Args:
      settings: one or more settings to read
      config_file: path to the config file

    Returns:
      If `settings` is a string, return only the result for this setting.
      If `settings` is a list, return list of results.

    """
    if hasattr(settings, 'lower'):
        settings = [settings]
        return_single = True
    else:
        return_single = False

    config_dict = read_config(config_file)

    result = []
    for setting in settings:
        if setting not in config_dict:
            raise KeyError('Not a valid setting: {}'.format(setting))
        result.append(config_dict[setting])

    if return_single:
        return result[0]
    else:
        return result


def num_threads(config_file: os.PathLike = None) -> int:
    """
    Number of worker threads used by parallel operations, from the
    `parallel.num_threads` setting or the number of CPUs if unset.

    """
    n = read("parallel", config_file)["num_threads"]
    if n is None:
        n = os.cpu_count() or 1
    return max(1, int(n))


def timing_enabled(config_file: os.PathLike = None) -> bool:
    return bool(read("timing", config_file)["enabled"])
