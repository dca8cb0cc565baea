"""Engine profiles stored as YAML.

Presets shipped in ``polyclip/presets`` are read-only and addressed by
name. Any other profile is a YAML file addressed by path, so user
profiles live wherever the caller keeps them.
"""

import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from ..models.options import EngineProfile

logger = logging.getLogger(__name__)

PRESETS_DIR = Path(__file__).parent.parent / "presets"

YAML_SUFFIXES = (".yaml", ".yml")

ProfileSource = Union[str, Path]


def _is_file_reference(source: ProfileSource) -> bool:
    path = Path(source)
    return isinstance(source, Path) or path.suffix in YAML_SUFFIXES or len(path.parts) > 1


def resolve_profile(source: ProfileSource = "default") -> Path:
    """Locate the YAML file behind a profile source.

    Args:
        source: Preset name (``"strict"``) or path to a YAML file

    Returns:
        Path to an existing profile file

    Raises:
        FileNotFoundError: If the file or preset does not exist
    """
    if _is_file_reference(source):
        path = Path(source)
        if not path.is_file():
            raise FileNotFoundError(f"No profile file at {path}")
        return path

    path = PRESETS_DIR / f"{source}.yaml"
    if not path.is_file():
        known = ", ".join(sorted(p.stem for p in PRESETS_DIR.glob("*.yaml")))
        raise FileNotFoundError(f"Unknown preset '{source}' (known presets: {known})")
    return path


def load_profile(
    source: ProfileSource = "default",
    override: dict | None = None,
) -> EngineProfile:
    """Load a preset or profile file, optionally patched.

    Args:
        source: Preset name or path to a YAML file
        override: JSON merge patch applied after loading

    Returns:
        Validated EngineProfile
    """
    path = resolve_profile(source)
    profile = EngineProfile.from_yaml(path.read_text())
    logger.debug(f"Loaded profile '{profile.name}' from {path}")

    if override:
        profile = profile.merge_override(override)
        logger.debug(f"Patched profile '{profile.name}' keys: {sorted(override)}")
    return profile


def save_profile(profile: EngineProfile, target: ProfileSource) -> Path:
    """Write a profile as YAML.

    Args:
        profile: Profile to write
        target: YAML file path, or a directory that receives
            ``<profile.name>.yaml``

    Returns:
        Path written

    Raises:
        ValueError: If the target is inside the shipped presets directory
    """
    path = Path(target)
    if path.suffix not in YAML_SUFFIXES:
        path = path / f"{profile.name}.yaml"

    if path.resolve().parent == PRESETS_DIR.resolve():
        raise ValueError(f"Shipped presets are read-only: {PRESETS_DIR}")

    path.parent.mkdir(parents=True, exist_ok=True)
    data = profile.model_dump(mode="json", exclude_none=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    logger.info(f"Saved profile '{profile.name}' to {path}")
    return path


def validate_profile_yaml(yaml_content: str) -> tuple[bool, str | None]:
    """Check YAML text against the profile schema without raising.

    Returns:
        (True, None) when valid, else (False, reason). Field errors are
        reported as ``section.field: message`` joined by ``; ``.
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        return False, f"Malformed YAML: {e}"

    if data is not None and not isinstance(data, dict):
        return False, f"Profile must be a mapping, not {type(data).__name__}"

    try:
        EngineProfile.model_validate(data or {})
    except ValidationError as e:
        reasons = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        return False, "; ".join(reasons)
    return True, None
