"""Validation Error Aggregate

One ValidationErrors instance collects every failure of a single validation
call, keyed by field path. Reasons are the names of the rules that failed.

Wire Format:
{
    "email": ["required"],
    "address.zip": ["len", "numeric"]
}

ConfigurationError is kept apart from ValidationErrors: it signals a
programmer mistake (unknown rule, malformed parameter, late registration)
and is raised, never aggregated.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping

if TYPE_CHECKING:
    from fieldrules.walker import FieldFailure


class ErrorCode(Enum):
    """Error code taxonomy.

    E2xxx: Validation errors
    E9xxx: Internal/Configuration errors
    """
    E2000_VALIDATION_GENERIC = 2000

    E9000_INTERNAL_GENERIC = 9000
    E9010_UNKNOWN_RULE = 9010
    E9011_INVALID_RULE_PARAM = 9011
    E9012_REGISTRY_FROZEN = 9012
    E9013_DUPLICATE_RULE = 9013

    @property
    def http_status(self) -> int:
        """Map error code to appropriate HTTP status."""
        if 2000 <= self.value < 3000:
            return 400
        return 500

    @property
    def category(self) -> str:
        return "validation" if 2000 <= self.value < 3000 else "internal"


class ConfigurationError(Exception):
    """A rule tag or registry is misconfigured.

    Raised for unknown rule names, unparseable rule parameters, and
    registrations against a frozen registry.
    """

    def __init__(self, message: str, *, code: ErrorCode = ErrorCode.E9000_INTERNAL_GENERIC,
                 rule: str | None = None, field: str | None = None, model: str | None = None):
        super().__init__(message)
        self.message, self.code, self.rule, self.field, self.model = message, code, rule, field, model

    @classmethod
    def unknown_rule(cls, rule: str, *, field: str | None = None, model: str | None = None) -> ConfigurationError:
        where = f" on {model}.{field}" if model and field else ""
        return cls(f"Undefined validation rule '{rule}'{where}", code=ErrorCode.E9010_UNKNOWN_RULE,
                   rule=rule, field=field, model=model)

    @classmethod
    def invalid_param(cls, rule: str, param: str, *, field: str | None = None,
                      model: str | None = None) -> ConfigurationError:
        return cls(f"Invalid parameter {param!r} for rule '{rule}'", code=ErrorCode.E9011_INVALID_RULE_PARAM,
                   rule=rule, field=field, model=model)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"type": "configuration_error", "code": self.code.name, "message": self.message,
                          "rule": self.rule, "field": self.field, "model": self.model}}


class ValidationErrors(Exception):
    """Every field failure of one validation call.

    Maps field path to the ordered list of rule names that failed for it.
    A path appears at most once and its list is never empty. Iteration
    follows discovery order, which callers should not rely on.
    """

    code = ErrorCode.E2000_VALIDATION_GENERIC

    def __init__(self, errors: Mapping[str, Iterable[str]] | None = None):
        super().__init__()
        self._errors: dict[str, list[str]] = {}
        if errors is None:
            return
        if not isinstance(errors, Mapping):
            raise TypeError(f"Expected a mapping of field to reasons, got {type(errors).__name__}")
        for field, reasons in errors.items():
            if isinstance(reasons, (str, bytes)) or not isinstance(reasons, Iterable):
                raise TypeError(f"Reasons for {field!r} must be a list of rule names, got {type(reasons).__name__}")
            for reason in reasons:
                if not isinstance(reason, str):
                    raise TypeError(f"Reason for {field!r} must be a string, got {type(reason).__name__}")
                self.add_error(field, reason)

    def add_error(self, field: str, reason: str) -> None:
        """Append reason to the field's list, creating it if absent."""
        self._errors.setdefault(field, []).append(reason)

    def has_errors(self) -> bool:
        return len(self) > 0

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return self.has_errors()

    def __contains__(self, field: object) -> bool:
        return field in self._errors

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationErrors):
            return NotImplemented
        return self._errors == other._errors

    __hash__ = None  # type: ignore[assignment]

    @property
    def fields(self) -> list[str]:
        return list(self._errors)

    def reasons(self, field: str) -> list[str]:
        return list(self._errors.get(field, ()))

    @property
    def message(self) -> str:
        if not self.has_errors():
            return ""
        return "Validation error on fields: " + ", ".join(self._errors)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ValidationErrors({self._errors!r})"

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize to the wire mapping of field path to reason codes."""
        return {field: list(reasons) for field, reasons in self._errors.items()}

    def to_json(self) -> str:
        return json.dumps(self._errors)

    def to_response(self) -> dict[str, Any]:
        """Error envelope for HTTP-style responses."""
        return {"error": {"type": "validation_error", "code": self.code.name, "message": self.message,
                          "fields": self.to_dict()}}

    @property
    def http_status(self) -> int:
        return self.code.http_status

    @classmethod
    def from_dict(cls, data: Mapping[str, Iterable[str]]) -> ValidationErrors:
        return cls(data)

    @classmethod
    def from_json(cls, payload: str | bytes) -> ValidationErrors:
        """Parse the wire mapping. Raises ValueError for malformed JSON, TypeError for a wrong shape."""
        return cls(json.loads(payload))

    @classmethod
    def from_failures(cls, failures: Iterable[FieldFailure] | None) -> ValidationErrors:
        """Build the aggregate from walker output.

        The leading segment of each namespace names the root structure and
        is stripped so paths are relative to the validated instance. Every
        failed rule is kept; a rule repeated for one path is recorded once.
        """
        errors = cls()
        for failure in failures or ():
            path = failure.namespace.split(".", 1)[1] if "." in failure.namespace else failure.namespace
            if failure.tag not in errors._errors.get(path, ()):
                errors.add_error(path, failure.tag)
        return errors
