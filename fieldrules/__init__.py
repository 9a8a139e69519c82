"""Declarative Field Validation

Fields declare rule tags; one call evaluates every rule on every field of a
structure and reports all failures together, keyed by field path.

Key Features:
- Rule tags on pydantic models and dataclasses ("required,min=3,email")
- Collect-all error aggregation with a JSON wire format
- Domain rules: phone, timezone, coordinates
- Frozen rule registry, built once per process
- Startup-time detection of unregistered rule names

Usage:
    from fieldrules import rules, validate_struct

    class Venue(BaseModel):
        name: str = rules("required,max=80")
        phone: str = rules("omitempty,phone")
        timezone: str = rules("required,timezone", name="tz")
        location: str = rules("coordinates")

    if (errors := validate_struct(venue)) is not None:
        return JSONResponse(errors.to_dict(), status_code=errors.http_status)
"""

from .config import Settings, get_settings
from .errors import ConfigurationError, ErrorCode, ValidationErrors
from .logging import configure_logging, get_logger
from .predicates import validates_coordinates, validates_phone, validates_timezone
from .registry import (
    BoundRule,
    RegistryConfig,
    RuleRegistry,
    build_default_registry,
    get_registry,
    register_baseline,
)
from .rules import Rule, RuleCall, RuleGroup, parse_tag
from .validate import check_struct_rules, ensure_valid, validate_struct
from .walker import FieldFailure, StructWalker, dataclass_rules, rules

__all__ = [
    # Operations
    "validate_struct",
    "ensure_valid",
    "check_struct_rules",
    # Declaring rules
    "rules",
    "dataclass_rules",
    # Registry
    "RegistryConfig",
    "RuleRegistry",
    "BoundRule",
    "build_default_registry",
    "get_registry",
    "register_baseline",
    "Rule",
    "RuleCall",
    "RuleGroup",
    "parse_tag",
    # Walker
    "StructWalker",
    "FieldFailure",
    # Errors
    "ValidationErrors",
    "ConfigurationError",
    "ErrorCode",
    # Predicates
    "validates_phone",
    "validates_timezone",
    "validates_coordinates",
    # Ambient
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
]
