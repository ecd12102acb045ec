"""
Configuration for a trim-and-normalize run.

All settings live in one validated structure with documented defaults.
Values may come from a YAML or JSON file; CLI arguments that are set
explicitly override file values.

Example config (YAML):

    norm_function: mixedSigmoid
    filter_options: [0.7, 1.0]
    class_var_filter: false
    class_column: Group
    keep_calc_time: false
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from featurenorm.core.errors import InvalidThreshold

__all__ = [
    'NormalizeConfig',
    'load_config',
    'DEFAULT_NORM_FUNCTION',
    'DEFAULT_FILTER_OPTIONS',
]

DEFAULT_NORM_FUNCTION = "mixedSigmoid"

# Drop observations with less than 70% good values, then features with any bad value.
DEFAULT_FILTER_OPTIONS = (0.70, 1.0)


def _as_threshold_pair(values: Any) -> Tuple[float, ...]:
    if isinstance(values, (str, bytes)) or not hasattr(values, '__iter__'):
        raise InvalidThreshold(
            f"filter_options must be a length-2 sequence, got {values!r}"
        )
    try:
        return tuple(float(v) for v in values)
    except (TypeError, ValueError) as e:
        raise InvalidThreshold(f"filter_options must hold numbers, got {list(values)}") from e


@dataclass(frozen=True)
class NormalizeConfig:
    """
    Settings for one trim-and-normalize run.

    Attributes:
        norm_function: Name of the normalizing transform ("none"/"nothing" for identity)
        filter_options: (observation threshold, feature threshold), minimum good-value
            proportions in [0, 1]. A threshold of 1 leaves no bad values on that axis.
        class_var_filter: Also drop features that are near-constant within any class
        class_column: Observation metadata column holding class labels
        keep_calc_time: Carry calculation times through to the result
    """
    norm_function: str = DEFAULT_NORM_FUNCTION
    filter_options: Tuple[float, float] = DEFAULT_FILTER_OPTIONS
    class_var_filter: bool = False
    class_column: str = "Group"
    keep_calc_time: bool = False

    @property
    def observation_threshold(self) -> float:
        return float(self.filter_options[0])

    @property
    def feature_threshold(self) -> float:
        return float(self.filter_options[1])

    def validate(self) -> None:
        """
        Check thresholds and the transform name.

        Raises:
            InvalidThreshold: If filter_options is not a pair in the unit interval
            ValueError: If norm_function is empty
        """
        if len(self.filter_options) != 2:
            raise InvalidThreshold(
                f"filter_options must be a length-2 sequence, got {list(self.filter_options)}"
            )
        for value in self.filter_options:
            if value > 1 or value < 0:
                raise InvalidThreshold(
                    "Set filter_options as a length-2 vector with elements in the unit interval, "
                    f"got {list(self.filter_options)}"
                )
        if not self.norm_function:
            raise ValueError("norm_function must be a non-empty string")

    def with_overrides(self, **overrides: Any) -> NormalizeConfig:
        """
        Return a copy with every non-None override applied.

        Raises:
            InvalidThreshold: If filter_options is not a sequence of numbers
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        if 'filter_options' in changes:
            changes['filter_options'] = _as_threshold_pair(changes['filter_options'])
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> NormalizeConfig:
        """
        Build a config from a mapping (e.g. a parsed config file).

        Raises:
            ValueError: If the mapping contains unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}. Valid keys: {sorted(known)}")
        return cls().with_overrides(**dict(values))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'norm_function': self.norm_function,
            'filter_options': list(self.filter_options),
            'class_var_filter': self.class_var_filter,
            'class_column': self.class_column,
            'keep_calc_time': self.keep_calc_time,
        }


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    try:
        with open(config_path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            elif suffix == '.json':
                config = json.load(f)
            else:
                raise ValueError(
                    f"Unsupported config format: {suffix}. "
                    f"Use .yaml, .yml, or .json"
                )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config
