"""Formatting preferences for XML document formatting.

This module provides the immutable preferences object that controls how a
document is re-emitted, together with the well-formedness policy enum and
the configuration error types.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

# Limits for numeric preferences
MIN_TAB_WIDTH = 1
MAX_TAB_WIDTH = 16
DEFAULT_MAX_LINE_LENGTH = 120
DEFAULT_TAB_WIDTH = 4


class ConfigError(ValueError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


class WellFormedValidation(Enum):
    """Policy applied to well-formedness diagnostics."""

    FAIL = "FAIL"       # First diagnostic aborts the call
    WARN = "WARN"       # Diagnostics are collected and logged, formatting continues
    IGNORE = "IGNORE"   # Diagnostics are discarded

    @classmethod
    def parse(cls, value: Union["WellFormedValidation", str]) -> "WellFormedValidation":
        """Resolve a policy from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ConfigValidationError(
            f"Unknown well-formed validation policy: {value!r}",
            field_name="well_formed_validation",
            suggestions=[member.value for member in cls],
        )


@dataclass(frozen=True)
class FormattingPreferences:
    """Options controlling indentation, attribute layout and line wrapping.

    Instances are immutable once created, so a single preferences object can
    be shared between formatter instances and threads.

    Examples:
        >>> prefs = FormattingPreferences(split_multi_attrs=True)
        >>> prefs.wrap_long_lines
        True
        >>> prefs.override(tab_instead_of_spaces=False).canonical_indent
        '    '
    """

    delete_blank_lines: bool = False
    split_multi_attrs: bool = False
    wrap_long_lines: bool = True
    well_formed_validation: WellFormedValidation = WellFormedValidation.WARN

    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    tab_instead_of_spaces: bool = True
    tab_width: int = DEFAULT_TAB_WIDTH

    # None follows the policy: root checks are only on under FAIL
    strict_root_element: Optional[bool] = None

    def __post_init__(self) -> None:
        """Validate preference values."""
        if not isinstance(self.well_formed_validation, WellFormedValidation):
            # Frozen dataclass: normalise string policies through object.__setattr__
            object.__setattr__(
                self,
                "well_formed_validation",
                WellFormedValidation.parse(self.well_formed_validation),
            )

        for name in ("delete_blank_lines", "split_multi_attrs",
                     "wrap_long_lines", "tab_instead_of_spaces"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigValidationError(
                    f"{name} must be a boolean", field_name=name
                )

        if self.strict_root_element is not None and not isinstance(
            self.strict_root_element, bool
        ):
            raise ConfigValidationError(
                "strict_root_element must be a boolean or None",
                field_name="strict_root_element",
            )

        if isinstance(self.max_line_length, bool) or not isinstance(self.max_line_length, int):
            raise ConfigValidationError(
                "max_line_length must be an integer", field_name="max_line_length"
            )
        if self.max_line_length <= 0:
            raise ConfigValidationError(
                "max_line_length must be > 0",
                field_name="max_line_length",
                suggestions=[f"Use the default of {DEFAULT_MAX_LINE_LENGTH}"],
            )

        if isinstance(self.tab_width, bool) or not isinstance(self.tab_width, int):
            raise ConfigValidationError(
                "tab_width must be an integer", field_name="tab_width"
            )
        if not (MIN_TAB_WIDTH <= self.tab_width <= MAX_TAB_WIDTH):
            raise ConfigValidationError(
                f"tab_width must be between {MIN_TAB_WIDTH} and {MAX_TAB_WIDTH}",
                field_name="tab_width",
                suggestions=[f"Use the default of {DEFAULT_TAB_WIDTH}"],
            )

    @property
    def canonical_indent(self) -> str:
        """One level of indentation."""
        if self.tab_instead_of_spaces:
            return "\t"
        return " " * self.tab_width

    @property
    def check_root_element(self) -> bool:
        """Whether a single root element is required for the document."""
        if self.strict_root_element is None:
            return self.well_formed_validation is WellFormedValidation.FAIL
        return self.strict_root_element

    def override(self, **kwargs: Any) -> "FormattingPreferences":
        """Create a new preferences object with specific overrides.

        Args:
            **kwargs: Preference fields to replace

        Returns:
            New FormattingPreferences instance with overrides applied

        Raises:
            ConfigValidationError: If a field is unknown or a value is invalid
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown preference field(s): {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert preferences to dictionary format."""
        result = asdict(self)
        result["well_formed_validation"] = self.well_formed_validation.value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert preferences to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormattingPreferences":
        """Create preferences from dictionary.

        Unknown keys are rejected rather than silently dropped.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Preferences data must be a JSON object")
        return cls().override(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "FormattingPreferences":
        """Create preferences from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid preferences JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "FormattingPreferences":
        """Load preferences from a JSON file."""
        path = Path(config_path)
        return cls.from_json(path.read_text(encoding="utf-8"))
