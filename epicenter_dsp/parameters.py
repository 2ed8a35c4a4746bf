"""
DSP parameter record and validation.

All tone-shaping controls pass through ``validate_params`` before they reach
the pipeline: numeric fields are clamped to their ranges, missing fields get
defaults. Validation is pure, total and idempotent; it never raises.

Keys are accepted in snake_case (``sweep_freq``) or in the camelCase used by
the web front end (``sweepFreq``).
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping, Optional, Tuple, Union


# =============================================================================
# RANGES AND DEFAULTS
# =============================================================================

PARAM_RANGES: Dict[str, Tuple[float, float]] = {
    "sweep_freq": (27.0, 63.0),        # Hz, restoration center frequency
    "width": (0.0, 100.0),             # %, bandwidth / blend shape
    "intensity": (0.0, 100.0),         # %, bass gain
    "balance": (0.0, 100.0),           # %, 0 = voice, 100 = bass
    "volume": (0.0, 150.0),            # %, output gain
    "reverb_intensity": (0.0, 100.0),  # %
}

PARAM_DEFAULTS: Dict[str, Any] = {
    "sweep_freq": 45.0,
    "width": 50.0,
    "intensity": 50.0,
    "balance": 50.0,
    "volume": 100.0,
    "reverb_enabled": False,
    "reverb_intensity": 30.0,
}

CAMEL_CASE_KEYS: Dict[str, str] = {
    "sweepFreq": "sweep_freq",
    "reverbEnabled": "reverb_enabled",
    "reverbIntensity": "reverb_intensity",
}

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class DSPParameters:
    """
    Validated tone-shaping parameters.

    Construct through ``validate_params`` (or ``DSPParameters.from_dict``)
    to guarantee every field is in range.
    """
    sweep_freq: float = 45.0
    width: float = 50.0
    intensity: float = 50.0
    balance: float = 50.0
    volume: float = 100.0
    reverb_enabled: bool = False
    reverb_intensity: float = 30.0

    def to_dict(self, camel_case: bool = False) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        data = asdict(self)
        if not camel_case:
            return data
        snake_to_camel = {v: k for k, v in CAMEL_CASE_KEYS.items()}
        return {snake_to_camel.get(k, k): v for k, v in data.items()}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DSPParameters":
        """Build validated parameters from a (partial) mapping."""
        return validate_params(data)

    def replace(self, **changes: Any) -> "DSPParameters":
        """Return a validated copy with some fields changed."""
        merged = self.to_dict()
        merged.update(normalize_keys(changes))
        return validate_params(merged)


# =============================================================================
# VALIDATION
# =============================================================================

def normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map camelCase keys to field names and drop unknown keys."""
    known = {f.name for f in fields(DSPParameters)}
    result = {}
    for key, value in data.items():
        key = CAMEL_CASE_KEYS.get(key, key)
        if key in known:
            result[key] = value
    return result


def _coerce_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return float(default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(default)
    if number != number:  # NaN
        return float(default)
    return number


def _coerce_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return default
    return bool(value)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def validate_params(
    params: Union[None, Mapping[str, Any], DSPParameters] = None
) -> DSPParameters:
    """
    Clamp and default a partial parameter set.

    Args:
        params: Mapping with any subset of the parameter keys, an existing
                DSPParameters, or None for all defaults. Unknown keys are
                ignored.

    Returns:
        DSPParameters with every numeric field inside its range

    Example:
        >>> validate_params({"sweepFreq": 100}).sweep_freq
        63.0
    """
    if params is None:
        data: Dict[str, Any] = {}
    elif isinstance(params, DSPParameters):
        data = params.to_dict()
    else:
        data = normalize_keys(params)

    values: Dict[str, Any] = {}
    for name, (low, high) in PARAM_RANGES.items():
        number = _coerce_float(data.get(name), PARAM_DEFAULTS[name])
        values[name] = clamp(number, low, high)

    values["reverb_enabled"] = _coerce_bool(
        data.get("reverb_enabled"), PARAM_DEFAULTS["reverb_enabled"]
    )
    return DSPParameters(**values)
