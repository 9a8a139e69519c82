"""Rule Registry

Maps rule names found in field tags to predicates, and records which field
metadata keys carry rule tags and external field names.

Usage:
    registry = RuleRegistry(RegistryConfig())
    registry.register("even", lambda v: isinstance(v, int) and v % 2 == 0)
    registry.freeze()

Most callers use get_registry(), the process-wide default built once with
the baseline vocabulary plus the phone, timezone and coordinates rules.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from fieldrules import predicates
from fieldrules.config import get_settings
from fieldrules.errors import ConfigurationError, ErrorCode
from fieldrules.logging import get_logger
from fieldrules.rules import MODIFIERS, SKIP, Rule, RuleGroup, parse_tag

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Where rule tags and external field names are read from."""
    tag_name: str = "validate"
    field_name_tag: str = "json"

    @classmethod
    def from_settings(cls) -> RegistryConfig:
        settings = get_settings()
        return cls(tag_name=settings.TAG_NAME, field_name_tag=settings.FIELD_NAME_TAG)


@dataclass(frozen=True, slots=True)
class BoundRule:
    """A registered rule together with its parsed tag parameter."""
    rule: Rule
    param: Any = None

    def check(self, value: Any) -> bool:
        return self.rule.check(value, self.param)


class RuleRegistry:
    """Name -> Rule mapping, writable until frozen."""

    def __init__(self, config: RegistryConfig | None = None):
        self.config = config or RegistryConfig()
        self._rules: dict[str, Rule] = {}
        self._frozen = False
        self._compiled: dict[str, tuple] = {}

    def register(self, name: str, predicate: Callable[..., bool], *,
                 parse_param: Callable[[str], Any] | None = None) -> Rule:
        """Register a predicate under name.

        Predicates without parse_param are called as predicate(value);
        parameterized ones as predicate(value, parse_param(tag_param)).
        """
        if self._frozen:
            raise ConfigurationError(f"Cannot register rule '{name}': registry is frozen",
                                     code=ErrorCode.E9012_REGISTRY_FROZEN, rule=name)
        if not name or name in MODIFIERS or any(c in name for c in ",|="):
            raise ConfigurationError(f"Invalid rule name {name!r}", rule=name)
        if name in self._rules:
            raise ConfigurationError(f"Rule '{name}' is already registered",
                                     code=ErrorCode.E9013_DUPLICATE_RULE, rule=name)
        rule = self._rules[name] = Rule(name=name, predicate=predicate, parse_param=parse_param)
        return rule

    def freeze(self) -> RuleRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Rule:
        try:
            return self._rules[name]
        except KeyError:
            raise ConfigurationError.unknown_rule(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def names(self) -> list[str]:
        return sorted(self._rules)

    def resolve(self, group: RuleGroup, *, field: str | None = None,
                model: str | None = None) -> tuple[BoundRule, ...]:
        """Look up and bind every alternative of a group."""
        bound = []
        for call in group.calls:
            if (rule := self._rules.get(call.name)) is None:
                raise ConfigurationError.unknown_rule(call.name, field=field, model=model)
            try:
                bound.append(BoundRule(rule, rule.bind(call.param)))
            except ConfigurationError as exc:
                raise ConfigurationError.invalid_param(call.name, call.param or "", field=field,
                                                       model=model) from exc
        return tuple(bound)

    def compile(self, tag: str, *, field: str | None = None,
                model: str | None = None) -> tuple[str | tuple[RuleGroup, tuple[BoundRule, ...]], ...]:
        """Resolve a whole tag into walker steps.

        Modifiers stay as their names; rule groups become (group, bound rules).
        Every rule name is resolved up front, so an unknown rule is reported
        even when omitempty would skip it at runtime. Results for a frozen
        registry are cached per tag.
        """
        if self._frozen and (steps := self._compiled.get(tag)) is not None:
            return steps
        steps = []
        for group in parse_tag(tag):
            if (modifier := group.modifier) is not None:
                if modifier == SKIP:
                    raise ConfigurationError(f"'-' must be the whole tag, got {tag!r}", rule=SKIP,
                                             field=field, model=model)
                steps.append(modifier)
            else:
                steps.append((group, self.resolve(group, field=field, model=model)))
        steps = tuple(steps)
        if self._frozen:
            self._compiled[tag] = steps
        return steps


def register_baseline(registry: RuleRegistry) -> RuleRegistry:
    """Register the general-purpose rule vocabulary."""
    number = predicates.parse_number
    for name, predicate, parse_param in (
        ("required", predicates.required, None),
        ("len", predicates.length, number),
        ("min", predicates.minimum, number),
        ("max", predicates.maximum, number),
        ("eq", predicates.equals, str),
        ("ne", predicates.not_equals, str),
        ("gt", predicates.greater_than, number),
        ("gte", predicates.minimum, number),
        ("lt", predicates.less_than, number),
        ("lte", predicates.maximum, number),
        ("oneof", predicates.one_of, predicates.parse_options),
        ("alpha", predicates.alpha, None),
        ("alphanum", predicates.alphanumeric, None),
        ("numeric", predicates.numeric, None),
        ("email", predicates.email, None),
        ("url", predicates.url, None),
        ("uuid", predicates.uuid, None),
        ("ip", predicates.ip, None),
        ("ipv4", predicates.ipv4, None),
        ("ipv6", predicates.ipv6, None),
        ("latitude", predicates.latitude, None),
        ("longitude", predicates.longitude, None),
    ):
        registry.register(name, predicate, parse_param=parse_param)
    return registry


def build_default_registry(config: RegistryConfig | None = None) -> RuleRegistry:
    """Baseline vocabulary plus the phone, timezone and coordinates rules, frozen."""
    registry = register_baseline(RuleRegistry(config or RegistryConfig.from_settings()))
    registry.register("phone", predicates.validates_phone)
    registry.register("timezone", predicates.validates_timezone)
    registry.register("coordinates", predicates.validates_coordinates)
    log.debug("rule_registry_built", rules=len(registry), tag_name=registry.config.tag_name,
              field_name_tag=registry.config.field_name_tag)
    return registry.freeze()


_default_registry: RuleRegistry | None = None
_default_lock = threading.Lock()


def get_registry() -> RuleRegistry:
    """Process-wide default registry, built exactly once on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = build_default_registry()
    return _default_registry
