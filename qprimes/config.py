"""
Run configuration.

Responsibility: defaults plus an optional YAML override file. Command-line
options are applied on top by the caller.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .page_planner import DEFAULT_PAGE_EXP


DEFAULTS: Dict[str, Any] = {
    'max_page_exp': DEFAULT_PAGE_EXP,
    'verbose': True,
    'hexout': False,
    'strict_range': False,
}


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration, merging the YAML file at `path` over DEFAULTS.

    Parameters
    ----------
    path : Path, optional
        YAML file. None returns the defaults.

    Returns
    -------
    dict
        Complete configuration.
    """
    config = dict(DEFAULTS)
    if path is None:
        return config

    with open(path) as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(loaded).__name__}")

    unknown = sorted(set(loaded) - set(DEFAULTS))
    if unknown:
        raise ValueError(f"{path}: unknown config keys {unknown}")

    for key, value in loaded.items():
        expected = type(DEFAULTS[key])
        # bool is an int subclass; neither may stand in for the other.
        if type(value) is not expected:
            raise ValueError(f"{path}: {key} must be {expected.__name__}, "
                             f"got {type(value).__name__} {value!r}")

    config.update(loaded)
    return config
