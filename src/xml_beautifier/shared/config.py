"""Configuration classes for the XML beautifier.

This module provides validated configuration objects for the tree builder, the
streaming SAX parser, the output formatter and the global logging settings,
composed into a single immutable ``BeautifierConfig``.
"""

import codecs
import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

_COMPONENTS = ("builder", "parser", "output", "global_")


@dataclass
class BuilderConfig:
    """Configuration for rebuilding the document tree from parse events."""

    # Raise StructuralInconsistencyError instead of tolerating unmatched events
    strict_mode: bool = False
    # Keep non-whitespace character data as element text
    keep_text: bool = True
    max_depth: int = 1000

    def __post_init__(self) -> None:
        """Validate builder configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")


@dataclass
class ParserConfig:
    """Configuration for the streaming SAX parser feeding the builder."""

    encoding: str = "UTF-8"
    forbid_dtd: bool = False
    forbid_entities: bool = True
    forbid_external: bool = True

    def __post_init__(self) -> None:
        """Validate parser configuration."""
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {self.encoding}") from e


@dataclass
class OutputConfig:
    """Configuration for pretty-printing the finished document."""

    indent: str = "  "
    xml_declaration: bool = True
    xml_encoding: str = "UTF-8"
    no_output_text: str = "<No Output>"

    def __post_init__(self) -> None:
        """Validate output configuration."""
        if self.indent.strip(" \t"):
            raise ValueError("indent may only contain spaces and tabs")
        if not self.xml_encoding:
            raise ValueError("xml_encoding cannot be empty")

    @classmethod
    def with_indent_width(cls, width: int, **kwargs: Any) -> "OutputConfig":
        if width < 0:
            raise ValueError("indent width must be >= 0")
        return cls(indent=" " * width, **kwargs)


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "WARNING"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class BeautifierConfig:
    """Complete configuration for one beautifier run.

    Immutable; use ``override`` to derive a modified copy.
    """

    builder: BuilderConfig = field(default_factory=BuilderConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.builder.__post_init__()
            self.parser.__post_init__()
            self.output.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.builder.strict_mode and not self.parser.forbid_external:
            raise ConfigValidationError(
                "Strict mode requires external references to be forbidden",
                field_name="parser.forbid_external",
                suggestions=["Set parser.forbid_external=True",
                             "Disable builder.strict_mode"]
            )

    def override(self, **kwargs: Any) -> "BeautifierConfig":
        """Create a new configuration with specific overrides.

        Nested fields use double-underscore notation:

            >>> config = BeautifierConfig().override(
            ...     builder__strict_mode=True,
            ...     output__indent="    "
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component == "global":
                    component = "global_"
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component, values in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **values)
            new_fields.update(top_level)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BeautifierConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        pass silently.
        """
        component_types = {
            "builder": BuilderConfig,
            "parser": ParserConfig,
            "output": OutputConfig,
            "global_": GlobalConfig,
        }
        if "global" in data and "global_" not in data:
            data = {**data, "global_": data["global"]}
            del data["global"]

        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Section '{key}' must be an object", field_name=key
                    )
                known = component_types[key].__dataclass_fields__
                unknown = sorted(set(value) - set(known))
                if unknown:
                    raise ConfigValidationError(
                        f"Unknown option(s) in '{key}': {', '.join(unknown)}",
                        field_name=key,
                        suggestions=sorted(known)
                    )
                try:
                    field_values[key] = component_types[key](**value)
                except ValueError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key == "name":
                field_values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration section: {key}", field_name=key
                )

        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "BeautifierConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "BeautifierConfig":
        """Load configuration from a JSON file."""
        path = Path(config_path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read config file {path}: {e}") from e
        return cls.from_json(text)

    # Preset factory methods
    @classmethod
    def default(cls) -> "BeautifierConfig":
        """Tolerant building, two-space indentation, XML declaration on."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "BeautifierConfig":
        """Create preset that reports structural inconsistencies as errors."""
        return cls(
            builder=BuilderConfig(strict_mode=True),
            parser=ParserConfig(forbid_dtd=True),
            name="strict"
        )

    @classmethod
    def lenient(cls) -> "BeautifierConfig":
        """Create preset that lets the parser expand internal entities."""
        return cls(
            builder=BuilderConfig(strict_mode=False),
            parser=ParserConfig(forbid_entities=False),
            name="lenient"
        )
