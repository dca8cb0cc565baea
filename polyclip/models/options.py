"""Configuration models for clipping, offsetting and coordinate scaling."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..engine.offset import EndType, JoinType
from ..engine.types import PolyFillType


class EngineOptions(BaseModel):
    """Output shaping flags for the Boolean engine."""

    model_config = ConfigDict(extra="forbid")

    reverse_solution: bool = Field(
        default=False, description="Emit outers clockwise and holes counter-clockwise"
    )
    strictly_simple: bool = Field(
        default=False, description="Split output rings wherever vertices touch"
    )
    preserve_collinear: bool = Field(
        default=False, description="Keep collinear vertices instead of merging edges"
    )
    fill_type: PolyFillType = Field(
        default=PolyFillType.EVEN_ODD, description="Default fill rule for subject and clip paths"
    )


class OffsetOptions(BaseModel):
    """Join, end and tolerance settings for offsetting."""

    model_config = ConfigDict(extra="forbid")

    join_type: JoinType = Field(default=JoinType.MITER, description="Corner join style")
    end_type: EndType = Field(default=EndType.CLOSED_POLYGON, description="Path end treatment")
    # the engine squares off any miter shorter than twice the offset
    miter_limit: float = Field(
        default=2.0, ge=2.0, description="Maximum miter length as a multiple of the offset distance"
    )
    arc_tolerance: float = Field(
        default=0.25, gt=0, description="Maximum deviation of round joins from a true arc (integer units)"
    )


class ScaleOptions(BaseModel):
    """Conversion between float coordinates and the integer engine."""

    model_config = ConfigDict(extra="forbid")

    scale: float = Field(default=1000.0, gt=0, description="Multiplier applied before rounding to integers")


class EngineProfile(BaseModel):
    """Named bundle of engine, offset and scale settings.

    Profiles can be overridden at call time via JSON merge patch.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="default", description="Profile name")
    description: Optional[str] = Field(default=None, description="One-line summary")
    engine: EngineOptions = Field(default_factory=EngineOptions, description="Boolean engine flags")
    offset: OffsetOptions = Field(default_factory=OffsetOptions, description="Offsetting settings")
    scale: ScaleOptions = Field(default_factory=ScaleOptions, description="Float/integer scaling")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Profile name must not be blank")
        return v

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "EngineProfile":
        """Load profile from YAML string."""
        import yaml
        data = yaml.safe_load(yaml_content) or {}
        return cls.model_validate(data)

    def merge_override(self, override: Dict) -> "EngineProfile":
        """Merge override dict into this profile (JSON merge patch semantics)."""
        import json
        base = json.loads(self.model_dump_json())
        _deep_merge(base, override)
        return EngineProfile(**base)


def _deep_merge(base: Dict, override: Dict) -> None:
    """Deep merge override into base dict (modifies base in place)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
