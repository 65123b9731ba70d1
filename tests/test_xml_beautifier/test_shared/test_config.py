"""Tests for the configuration system."""

import json
import tempfile
from pathlib import Path

import pytest

from xml_beautifier.shared.config import (
    BeautifierConfig,
    BuilderConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    OutputConfig,
    ParserConfig,
)


class TestComponentConfigs:
    """Test validation of the individual configuration sections."""

    def test_builder_defaults(self):
        """Test default builder configuration values."""
        config = BuilderConfig()
        assert config.strict_mode is False
        assert config.keep_text is True
        assert config.max_depth == 1000

    def test_builder_rejects_non_positive_depth(self):
        """Test that max_depth must be positive."""
        with pytest.raises(ValueError, match="max_depth"):
            BuilderConfig(max_depth=0)

    def test_parser_defaults(self):
        """Test default parser configuration values."""
        config = ParserConfig()
        assert config.encoding == "UTF-8"
        assert config.forbid_dtd is False
        assert config.forbid_entities is True
        assert config.forbid_external is True

    def test_parser_rejects_unknown_encoding(self):
        """Test that the encoding must be known to the codecs registry."""
        with pytest.raises(ValueError, match="Unknown encoding"):
            ParserConfig(encoding="no-such-encoding")

    def test_output_indent_validation(self):
        """Test that indentation may only contain spaces and tabs."""
        assert OutputConfig(indent="\t").indent == "\t"
        with pytest.raises(ValueError, match="indent"):
            OutputConfig(indent="--")

    def test_output_with_indent_width(self):
        """Test building output configuration from an indent width."""
        config = OutputConfig.with_indent_width(4, xml_declaration=False)
        assert config.indent == "    "
        assert config.xml_declaration is False

        with pytest.raises(ValueError):
            OutputConfig.with_indent_width(-1)

    def test_global_logging_level_validation(self):
        """Test that only standard logging levels are accepted."""
        assert GlobalConfig(logging_level="DEBUG").logging_level == "DEBUG"
        with pytest.raises(ValueError, match="logging_level"):
            GlobalConfig(logging_level="LOUD")


class TestBeautifierConfig:
    """Test the composite, immutable configuration."""

    def test_default_config(self):
        """Test default composite configuration."""
        config = BeautifierConfig()
        assert config.builder == BuilderConfig()
        assert config.output.indent == "  "
        assert config.global_.logging_level == "WARNING"
        assert config.name is None

    def test_config_is_frozen(self):
        """Test that the composite configuration cannot be mutated."""
        config = BeautifierConfig()
        with pytest.raises(AttributeError):
            config.name = "changed"

    def test_strict_mode_requires_forbidden_external(self):
        """Test the cross-section validation rule."""
        with pytest.raises(ConfigValidationError) as exc_info:
            BeautifierConfig(
                builder=BuilderConfig(strict_mode=True),
                parser=ParserConfig(forbid_external=False),
            )
        assert exc_info.value.field_name == "parser.forbid_external"
        assert exc_info.value.suggestions

    def test_override_nested_fields(self):
        """Test overriding nested fields with double-underscore keys."""
        base = BeautifierConfig()
        config = base.override(
            builder__strict_mode=True,
            output__indent="    ",
            global__logging_level="DEBUG",
            name="custom",
        )

        assert config.builder.strict_mode is True
        assert config.output.indent == "    "
        assert config.global_.logging_level == "DEBUG"
        assert config.name == "custom"
        # Original is unchanged
        assert base.builder.strict_mode is False

    def test_override_unknown_component(self):
        """Test that overriding an unknown section fails."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration component"):
            BeautifierConfig().override(formatter__indent="  ")

    def test_override_invalid_value(self):
        """Test that overrides are validated."""
        with pytest.raises(ConfigValidationError):
            BeautifierConfig().override(builder__max_depth=-5)

    def test_override_unknown_field(self):
        """Test that overriding an unknown field fails."""
        with pytest.raises(ConfigValidationError):
            BeautifierConfig().override(builder__no_such_option=True)

    def test_presets(self):
        """Test the preset factory methods."""
        assert BeautifierConfig.default().name == "default"

        strict = BeautifierConfig.strict()
        assert strict.name == "strict"
        assert strict.builder.strict_mode is True
        assert strict.parser.forbid_dtd is True

        lenient = BeautifierConfig.lenient()
        assert lenient.name == "lenient"
        assert lenient.parser.forbid_entities is False


class TestConfigSerialization:
    """Test dictionary, JSON and file round trips."""

    def test_to_dict(self):
        """Test converting configuration to a dictionary."""
        data = BeautifierConfig.strict().to_dict()
        assert data["builder"]["strict_mode"] is True
        assert data["output"]["indent"] == "  "
        assert data["global_"]["enable_correlation_tracking"] is True
        assert data["name"] == "strict"

    def test_from_dict_accepts_global_alias(self):
        """Test that 'global' is accepted for the global section."""
        config = BeautifierConfig.from_dict({
            "output": {"indent": "\t", "xml_declaration": False},
            "global": {"logging_level": "INFO"},
        })
        assert config.output.indent == "\t"
        assert config.output.xml_declaration is False
        assert config.global_.logging_level == "INFO"

    def test_from_dict_rejects_unknown_section(self):
        """Test that unknown sections are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration section"):
            BeautifierConfig.from_dict({"tokenizer": {}})

    def test_from_dict_rejects_unknown_option(self):
        """Test that typos in option names are reported."""
        with pytest.raises(ConfigValidationError) as exc_info:
            BeautifierConfig.from_dict({"output": {"indnet": "  "}})
        assert exc_info.value.field_name == "output"
        assert "indent" in exc_info.value.suggestions

    def test_from_dict_rejects_non_object_section(self):
        """Test that a section must be an object."""
        with pytest.raises(ConfigValidationError, match="must be an object"):
            BeautifierConfig.from_dict({"builder": True})

    def test_json_round_trip(self):
        """Test that JSON serialization preserves the configuration."""
        original = BeautifierConfig().override(output__indent="    ", name="wide")
        restored = BeautifierConfig.from_json(original.to_json())
        assert restored == original

    def test_from_json_invalid(self):
        """Test that malformed JSON raises a validation error."""
        with pytest.raises(ConfigValidationError, match="Invalid configuration JSON"):
            BeautifierConfig.from_json("{not json")
        with pytest.raises(ConfigValidationError, match="must be an object"):
            BeautifierConfig.from_json("[1, 2]")

    def test_from_file(self):
        """Test loading configuration from a file."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({"builder": {"strict_mode": True}}, f)
            config_path = Path(f.name)

        try:
            config = BeautifierConfig.from_file(config_path)
            assert config.builder.strict_mode is True
        finally:
            config_path.unlink()

    def test_from_missing_file(self):
        """Test that an unreadable configuration file raises ConfigError."""
        with pytest.raises(ConfigError, match="Could not read config file"):
            BeautifierConfig.from_file(Path("nonexistent-config.json"))
