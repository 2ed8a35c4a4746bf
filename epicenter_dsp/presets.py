"""
Genre Presets - Curated starting points for bass restoration.

Presets are a fixed, read-only catalogue. Each maps a genre identifier to
concrete DSPParameters and a human-readable description. Only the
restoration controls (sweep, width, intensity) differ between genres; the
mix, volume and reverb controls keep their defaults.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from .parameters import DSPParameters, validate_params


@dataclass(frozen=True)
class GenrePreset:
    """A named, described parameter set."""
    name: str
    description: str
    params: DSPParameters

    def to_dict(self, camel_case: bool = False) -> Dict[str, Any]:
        """Flatten to a dictionary (parameters plus description)."""
        data = self.params.to_dict(camel_case=camel_case)
        data["description"] = self.description
        return data


def _preset(name: str, sweep_freq: float, width: float, intensity: float,
            description: str) -> GenrePreset:
    params = validate_params({
        "sweep_freq": sweep_freq,
        "width": width,
        "intensity": intensity,
    })
    return GenrePreset(name=name, description=description, params=params)


GENRE_PRESETS: Mapping[str, GenrePreset] = MappingProxyType({
    "regional": _preset(
        "regional", 42, 70, 80,
        "Regional Mexican / Banda / Corridos - aggressive boost for genres "
        "with little natural bass",
    ),
    "rock": _preset(
        "rock", 47, 55, 68,
        "Rock / Metal - moderate intensity to avoid saturation",
    ),
    "pop": _preset(
        "pop", 44, 45, 58,
        "Pop / Ballads - moderate focus, preserves vocal clarity",
    ),
    "classical": _preset(
        "classical", 37, 35, 48,
        "Classical - subtle restoration that respects the original mix",
    ),
    "custom": _preset(
        "custom", 45, 50, 50,
        "Custom configuration",
    ),
})

DEFAULT_PRESET = "custom"


def get_preset(name: str) -> GenrePreset:
    """
    Look up a preset by genre identifier (case-insensitive).

    Raises:
        ValueError: If the preset does not exist
    """
    key = name.strip().lower()
    if key not in GENRE_PRESETS:
        raise ValueError(
            f"Preset '{name}' not found. Available: {', '.join(GENRE_PRESETS)}"
        )
    return GENRE_PRESETS[key]


def list_presets() -> List[GenrePreset]:
    """All presets in catalogue order."""
    return list(GENRE_PRESETS.values())


def preset_to_dict(camel_case: bool = False) -> Dict[str, Dict[str, Any]]:
    """The whole catalogue as nested dictionaries, keyed by genre."""
    return {
        name: preset.to_dict(camel_case=camel_case)
        for name, preset in GENRE_PRESETS.items()
    }
