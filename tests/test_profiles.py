"""Tests for engine option models and YAML profiles."""

import pytest
from pydantic import ValidationError

from polyclip.engine import EndType, JoinType, PolyFillType
from polyclip.models import EngineOptions, EngineProfile, OffsetOptions, ScaleOptions
from polyclip.profiles import (
    PRESETS_DIR,
    load_profile,
    resolve_profile,
    save_profile,
    validate_profile_yaml,
)


class TestModels:
    """Test defaults and field validation."""

    def test_defaults(self):
        """An empty profile carries the engine defaults."""
        profile = EngineProfile()
        assert profile.name == "default"
        assert profile.engine == EngineOptions()
        assert profile.offset.join_type == JoinType.MITER
        assert profile.offset.end_type == EndType.CLOSED_POLYGON
        assert profile.scale.scale == 1000.0

    def test_miter_limit_below_two_rejected(self):
        """The engine never mitres shorter than twice the offset."""
        with pytest.raises(ValidationError):
            OffsetOptions(miter_limit=1.5)
        assert OffsetOptions(miter_limit=2.0).miter_limit == 2.0

    def test_arc_tolerance_must_be_positive(self):
        """Zero arc tolerance is refused."""
        with pytest.raises(ValidationError):
            OffsetOptions(arc_tolerance=0)

    def test_scale_must_be_positive(self):
        """Zero scale is refused."""
        with pytest.raises(ValidationError):
            ScaleOptions(scale=0)

    def test_blank_name_rejected(self):
        """Profiles need a name."""
        with pytest.raises(ValidationError):
            EngineProfile(name="  ")

    def test_unknown_key_rejected(self):
        """Misspelt settings are errors, not silently ignored."""
        with pytest.raises(ValidationError):
            EngineProfile.from_yaml("offset:\n  join: round\n")

    def test_enum_values_from_strings(self):
        """Enum fields accept their lowercase names."""
        profile = EngineProfile.from_yaml(
            "engine:\n  fill_type: positive\noffset:\n  join_type: round\n  end_type: open_square\n"
        )
        assert profile.engine.fill_type == PolyFillType.POSITIVE
        assert profile.offset.join_type == JoinType.ROUND
        assert profile.offset.end_type == EndType.OPEN_SQUARE

    def test_empty_yaml_gives_defaults(self):
        """An empty document is the default profile."""
        assert EngineProfile.from_yaml("") == EngineProfile()

    def test_merge_override_is_deep(self):
        """Overrides replace single fields inside a section."""
        profile = EngineProfile(offset=OffsetOptions(miter_limit=3.0, arc_tolerance=0.5))
        merged = profile.merge_override({"offset": {"miter_limit": 4.0}})
        assert merged.offset.miter_limit == 4.0
        assert merged.offset.arc_tolerance == 0.5
        assert profile.offset.miter_limit == 3.0


class TestLoadProfile:
    """Test loading presets by name and profiles by path."""

    def test_load_default(self):
        """The default preset is general purpose even-odd clipping."""
        profile = load_profile("default")
        assert profile.name == "default"
        assert not profile.engine.strictly_simple
        assert profile.engine.fill_type == PolyFillType.EVEN_ODD

    def test_load_strict(self):
        """The strict preset enables simple output and non-zero filling."""
        profile = load_profile("strict")
        assert profile.engine.strictly_simple
        assert profile.engine.preserve_collinear
        assert profile.engine.fill_type == PolyFillType.NON_ZERO
        assert profile.offset.miter_limit == 3.0

    def test_load_with_override(self):
        """Overrides are applied on top of the preset."""
        profile = load_profile("default", override={"engine": {"reverse_solution": True}})
        assert profile.engine.reverse_solution
        assert not profile.engine.strictly_simple

    def test_override_is_validated(self):
        """An override with an out-of-range value is refused."""
        with pytest.raises(ValidationError):
            load_profile("default", override={"offset": {"arc_tolerance": -1}})

    def test_unknown_preset(self):
        """Unknown preset names list what is available."""
        with pytest.raises(FileNotFoundError, match="strict"):
            resolve_profile("does-not-exist")

    def test_preset_resolves_inside_package(self):
        """Preset names map to the shipped YAML files."""
        assert resolve_profile("strict") == PRESETS_DIR / "strict.yaml"

    def test_load_from_path(self, tmp_path):
        """A path to a YAML file is loaded directly."""
        path = tmp_path / "coarse.yaml"
        path.write_text("name: coarse\nscale:\n  scale: 10.0\n")
        profile = load_profile(path)
        assert profile.name == "coarse"
        assert profile.scale.scale == 10.0
        assert load_profile(str(path)) == profile

    def test_missing_file(self, tmp_path):
        """A path that does not exist is reported as missing."""
        with pytest.raises(FileNotFoundError):
            load_profile(tmp_path / "missing.yaml")


class TestSaveProfile:
    """Test writing profiles to disk."""

    def test_round_trip_to_file(self, tmp_path):
        """A saved profile loads back unchanged."""
        profile = EngineProfile(
            name="rendering",
            description="Round joins for rendering",
            offset=OffsetOptions(join_type=JoinType.ROUND, arc_tolerance=0.1),
        )
        path = save_profile(profile, tmp_path / "render.yaml")
        assert path == tmp_path / "render.yaml"
        assert load_profile(path) == profile

    def test_directory_target_uses_profile_name(self, tmp_path):
        """Saving into a directory names the file after the profile."""
        path = save_profile(EngineProfile(name="bare"), tmp_path / "profiles")
        assert path == tmp_path / "profiles" / "bare.yaml"
        assert path.is_file()
        assert load_profile(path).name == "bare"

    def test_presets_are_read_only(self):
        """Shipped presets cannot be overwritten."""
        with pytest.raises(ValueError, match="read-only"):
            save_profile(EngineProfile(name="default"), PRESETS_DIR)
        with pytest.raises(ValueError, match="read-only"):
            save_profile(EngineProfile(name="x"), PRESETS_DIR / "x.yaml")


class TestValidateProfileYaml:
    """Test YAML validation without loading."""

    def test_valid(self):
        """A well-formed profile passes."""
        ok, error = validate_profile_yaml("name: test\noffset:\n  miter_limit: 2.5\n")
        assert ok
        assert error is None

    def test_malformed_yaml(self):
        """Broken YAML syntax is reported."""
        ok, error = validate_profile_yaml("engine: [1, 2")
        assert not ok
        assert error.startswith("Malformed YAML")

    def test_out_of_range_value(self):
        """Field errors name the offending setting."""
        ok, error = validate_profile_yaml("offset:\n  miter_limit: 0.5\n")
        assert not ok
        assert error.startswith("offset.miter_limit:")

    def test_unknown_fill_type(self):
        """Fill rules must be one the engine knows."""
        ok, error = validate_profile_yaml("engine:\n  fill_type: sometimes\n")
        assert not ok
        assert "engine.fill_type" in error

    def test_unknown_section(self):
        """Unknown sections are reported."""
        ok, error = validate_profile_yaml("clipping:\n  fast: true\n")
        assert not ok
        assert "clipping" in error

    def test_non_mapping_document(self):
        """A list is not a profile."""
        ok, error = validate_profile_yaml("- just\n- a list\n")
        assert not ok
        assert error == "Profile must be a mapping, not list"
