"""Top-level validation operations."""
from __future__ import annotations

from typing import Any

from fieldrules.errors import ValidationErrors
from fieldrules.logging import get_logger
from fieldrules.registry import RuleRegistry, get_registry
from fieldrules.walker import StructWalker, check_struct_type

log = get_logger(__name__)


def validate_struct(instance: Any, *, registry: RuleRegistry | None = None) -> ValidationErrors | None:
    """Validate every tagged field of instance.

    Returns a ValidationErrors aggregate when any rule fails, otherwise None.
    ConfigurationError propagates for unknown rules or malformed parameters.
    """
    registry = get_registry() if registry is None else registry
    failures = StructWalker(registry).walk(instance)
    if not failures:
        return None
    errors = ValidationErrors.from_failures(failures)
    log.debug("validation_failed", model=type(instance).__name__, fields=errors.fields)
    return errors


def ensure_valid(instance: Any, *, registry: RuleRegistry | None = None) -> None:
    """Like validate_struct, but raises the aggregate instead of returning it."""
    if (errors := validate_struct(instance, registry=registry)) is not None:
        raise errors


def check_struct_rules(model_cls: type, *, registry: RuleRegistry | None = None) -> None:
    """Verify at startup that every rule named by model_cls (and the structs it nests) is registered."""
    check_struct_type(model_cls, get_registry() if registry is None else registry)
