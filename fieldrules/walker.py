"""Struct Walker

Visits every field of a pydantic model or dataclass instance, evaluates the
rules declared in the field's tag, and collects one FieldFailure per failed
rule group. Nested structures are always descended into, as are structures
held in lists, tuples, sets and mapping values. A struct that is already
on the current path (a reference cycle) is not walked again.

Declaring rules:
    class Address(BaseModel):
        zip_code: str = rules("required,len=5,numeric", name="zip")

    @dataclass
    class Contact:
        phone: str = dataclass_rules("omitempty,phone")
        tags: list[str] = dataclass_rules("max=5,dive,alpha", default_factory=list)

Namespaces are rooted at the class name of the walked instance
("Signup.address.zip"); ValidationErrors.from_failures strips that root.
"""
from __future__ import annotations

import dataclasses
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator

from pydantic import BaseModel, Field

from fieldrules.errors import ConfigurationError
from fieldrules.predicates import is_empty
from fieldrules.registry import RegistryConfig, RuleRegistry
from fieldrules.rules import DIVE, OMIT_EMPTY, SKIP, parse_tag
from fieldrules.logging import get_logger

log = get_logger(__name__)

_COLLECTIONS = (list, tuple, set, frozenset)


@dataclass(frozen=True, slots=True)
class FieldFailure:
    """One failed rule group for one field."""
    namespace: str
    field: str
    tag: str
    param: str | None = None
    value: Any = None


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """What the walker needs to know about a declared field."""
    attr: str
    name: str
    tag: str | None
    annotation: Any = None

    @property
    def skipped(self) -> bool:
        return self.tag is not None and self.tag.strip() == SKIP


# ============================================================================
# Declaring Rules
# ============================================================================

def rules(tag: str, *, name: str | None = None, **field_kwargs: Any) -> Any:
    """pydantic Field carrying a rule tag and, optionally, an external name."""
    config = RegistryConfig.from_settings()
    extra = dict(field_kwargs.pop("json_schema_extra", None) or {})
    extra[config.tag_name] = tag
    if name is not None:
        extra[config.field_name_tag] = name
    return Field(json_schema_extra=extra, **field_kwargs)


def dataclass_rules(tag: str, *, name: str | None = None, **field_kwargs: Any) -> Any:
    """dataclasses.field carrying a rule tag and, optionally, an external name."""
    config = RegistryConfig.from_settings()
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[config.tag_name] = tag
    if name is not None:
        metadata[config.field_name_tag] = name
    return dataclasses.field(metadata=metadata, **field_kwargs)


# ============================================================================
# Field Discovery
# ============================================================================

def is_struct(value: Any) -> bool:
    """A pydantic model or dataclass instance."""
    return isinstance(value, BaseModel) or (dataclasses.is_dataclass(value) and not isinstance(value, type))


def is_struct_type(tp: Any) -> bool:
    return isinstance(tp, type) and (issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp))


def _external_name(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    name = raw.split(",", 1)[0].strip()
    return name if name and name != SKIP else None


@lru_cache(maxsize=512)
def describe_fields(cls: type, config: RegistryConfig) -> tuple[FieldSpec, ...]:
    """Field specs for a struct class, in declaration order."""
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        specs = []
        for attr, info in cls.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            name = (_external_name(extra.get(config.field_name_tag))
                    or info.serialization_alias or info.alias or attr)
            tag = extra.get(config.tag_name)
            specs.append(FieldSpec(attr=attr, name=name, tag=tag if isinstance(tag, str) else None,
                                   annotation=info.annotation))
        return tuple(specs)

    if dataclasses.is_dataclass(cls):
        try:
            hints = typing.get_type_hints(cls)
        except (NameError, TypeError):
            hints = {}
        return tuple(
            FieldSpec(attr=f.name, name=_external_name(f.metadata.get(config.field_name_tag)) or f.name,
                      tag=f.metadata.get(config.tag_name), annotation=hints.get(f.name, f.type))
            for f in dataclasses.fields(cls)
        )

    raise TypeError(f"Expected a pydantic model or dataclass, got {cls!r}")


def _elements(value: Any) -> Iterator[tuple[Any, Any]]:
    """(key, element) pairs of a collection."""
    if isinstance(value, Mapping):
        yield from value.items()
    elif isinstance(value, _COLLECTIONS):
        yield from enumerate(value)


def is_collection(value: Any) -> bool:
    return isinstance(value, (Mapping, *_COLLECTIONS))


# ============================================================================
# Walking
# ============================================================================

class StructWalker:
    """Evaluates field rules over a struct instance, collecting all failures."""

    def __init__(self, registry: RuleRegistry):
        self.registry = registry

    def walk(self, instance: Any) -> list[FieldFailure]:
        if not is_struct(instance):
            raise TypeError(f"Expected a pydantic model or dataclass instance, got {type(instance).__name__}")
        failures: list[FieldFailure] = []
        self._walk_struct(instance, type(instance).__name__, failures, set())
        log.debug("struct_walked", model=type(instance).__name__, failures=len(failures))
        return failures

    def _walk_struct(self, obj: Any, namespace: str, failures: list[FieldFailure], active: set[int]) -> None:
        # Structs already on the current path are not re-entered
        if id(obj) in active:
            return
        active.add(id(obj))
        model = type(obj).__name__
        for spec in describe_fields(type(obj), self.registry.config):
            if spec.skipped:
                continue
            steps = self.registry.compile(spec.tag, field=spec.attr, model=model) if spec.tag else ()
            self._check(getattr(obj, spec.attr, None), steps, f"{namespace}.{spec.name}", spec.name,
                        failures, active)
        active.discard(id(obj))

    def _check(self, value: Any, steps: tuple, path: str, name: str, failures: list[FieldFailure],
               active: set[int]) -> None:
        for index, step in enumerate(steps):
            if step == OMIT_EMPTY:
                if is_empty(value):
                    return
                continue
            if step == DIVE:
                if value is None:
                    return
                if not is_collection(value):
                    raise ConfigurationError(f"Cannot dive into non-collection field '{name}' "
                                             f"({type(value).__name__})", field=name)
                for key, item in _elements(value):
                    self._check(item, steps[index + 1:], f"{path}[{key}]", name, failures, active)
                return
            group, bound = step
            if not any(rule.check(value) for rule in bound):
                param = group.calls[0].param if len(group.calls) == 1 else None
                failures.append(FieldFailure(namespace=path, field=name, tag=group.reason, param=param, value=value))
        self._descend(value, path, failures, active)

    def _descend(self, value: Any, path: str, failures: list[FieldFailure], active: set[int]) -> None:
        if is_struct(value):
            self._walk_struct(value, path, failures, active)
        elif is_collection(value):
            for key, item in _elements(value):
                if is_struct(item):
                    self._walk_struct(item, f"{path}[{key}]", failures, active)


# ============================================================================
# Startup Checks
# ============================================================================

def iter_struct_types(annotation: Any) -> Iterator[type]:
    """Struct classes referenced by a type annotation (list[X], X | None, dict[str, X], ...)."""
    if is_struct_type(annotation):
        yield annotation
        return
    for arg in typing.get_args(annotation):
        yield from iter_struct_types(arg)


def check_struct_type(cls: type, registry: RuleRegistry) -> None:
    """Compile every rule tag reachable from cls, raising ConfigurationError on the first bad one."""
    seen: set[type] = set()
    pending = [cls]
    while pending:
        current = pending.pop()
        if current in seen:
            continue
        seen.add(current)
        for spec in describe_fields(current, registry.config):
            if spec.skipped:
                continue
            if spec.tag:
                registry.compile(spec.tag, field=spec.attr, model=current.__name__)
            pending.extend(iter_struct_types(spec.annotation))
    log.debug("struct_rules_checked", model=cls.__name__, structs=len(seen))
