"""
Parameter file loader.

Loads DSP parameter sets from YAML or JSON files with caching. A file is
either a flat mapping of parameter keys, or a mapping with an optional
``preset`` base and a ``params`` section of overrides:

    preset: rock
    params:
      intensity: 75
      reverbEnabled: true

Explicit values override the preset; everything then goes through
``validate_params`` so out-of-range values are clamped, never rejected.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

import yaml

from .parameters import DSPParameters, normalize_keys, validate_params
from .presets import get_preset

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}


class ConfigLoadError(Exception):
    """Raised when a parameter file cannot be loaded."""
    pass


class ConfigLoader:
    """
    Loads parameter files with per-path caching.

    Attributes:
        config_dir: Base directory for relative file names
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the loader.

        Args:
            config_dir: Base directory for relative paths.
                        Defaults to the current working directory.
        """
        self.config_dir = Path(config_dir) if config_dir is not None else None
        self._cache: Dict[Path, Dict[str, Any]] = {}

    def _resolve(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if self.config_dir is not None and not path.is_absolute():
            path = self.config_dir / path
        return path

    def _load_file(self, path: Path) -> Dict[str, Any]:
        """
        Parse a YAML or JSON file into a mapping.

        Raises:
            ConfigLoadError: If the file is missing, unparseable or not a mapping
        """
        if not path.exists():
            raise ConfigLoadError(f"Parameter file not found: {path}")

        suffix = path.suffix.lower()
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if suffix in JSON_SUFFIXES:
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML file {path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Failed to parse JSON file {path}: {e}")
        except OSError as e:
            raise ConfigLoadError(f"Failed to read parameter file {path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Parameter file {path} must contain a mapping, got {type(data).__name__}"
            )
        return data

    def load_raw(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load the merged (preset + overrides) parameter mapping, unvalidated.

        Args:
            path: YAML (.yaml/.yml) or JSON (.json) file

        Returns:
            Parameter mapping keyed by field name (camelCase keys are mapped)

        Raises:
            ConfigLoadError: If the file cannot be loaded or names an unknown preset
        """
        resolved = self._resolve(path)
        if resolved in self._cache:
            return dict(self._cache[resolved])

        data = self._load_file(resolved)
        merged: Dict[str, Any] = {}

        preset_name = data.get("preset")
        if preset_name is not None:
            try:
                merged.update(get_preset(str(preset_name)).params.to_dict())
            except ValueError as e:
                raise ConfigLoadError(f"Invalid preset in {resolved}: {e}")

        overrides = data.get("params", None)
        if overrides is None:
            overrides = {k: v for k, v in data.items() if k != "preset"}
        if not isinstance(overrides, dict):
            raise ConfigLoadError(f"'params' in {resolved} must be a mapping")

        merged.update(normalize_keys(overrides))
        self._cache[resolved] = merged
        logger.debug(f"Loaded parameters from {resolved}")
        return dict(merged)

    def load_params(self, path: Union[str, Path]) -> DSPParameters:
        """Load and validate a parameter file."""
        return validate_params(self.load_raw(path))

    def reload(self) -> None:
        """
        Clear the cache.

        Call this when parameter files have been modified on disk.
        """
        self._cache.clear()
        logger.info("Parameter file cache cleared")


# Module-level singleton for convenience
_default_loader: Optional[ConfigLoader] = None


def get_config_loader(config_dir: Optional[Union[str, Path]] = None) -> ConfigLoader:
    """
    Get the default ConfigLoader instance.

    A custom ``config_dir`` returns a fresh loader rooted there.
    """
    global _default_loader

    if config_dir is not None:
        return ConfigLoader(config_dir)

    if _default_loader is None:
        _default_loader = ConfigLoader()

    return _default_loader
