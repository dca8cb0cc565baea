"""Engine profile loading and saving."""

from .loader import (
    PRESETS_DIR,
    load_profile,
    resolve_profile,
    save_profile,
    validate_profile_yaml,
)

__all__ = [
    "PRESETS_DIR",
    "load_profile",
    "resolve_profile",
    "save_profile",
    "validate_profile_yaml",
]
