"""Rule Tags

A rule tag is the string declared on a field, e.g. "required,min=3,email|phone".

- "," separates rule groups; every group is evaluated
- "|" separates alternatives inside a group; the group passes if any passes
- "=" separates a rule name from its parameter
- 0x2C and 0x7C stand for literal "," and "|" inside parameters

The modifiers omitempty, dive and "-" are parsed like rules but are
interpreted by the walker rather than looked up in the registry.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable

from fieldrules.errors import ConfigurationError

SKIP = "-"
OMIT_EMPTY = "omitempty"
DIVE = "dive"
MODIFIERS = frozenset({SKIP, OMIT_EMPTY, DIVE})

_ESCAPES = {"0x2C": ",", "0x7C": "|"}


@dataclass(frozen=True, slots=True)
class Rule:
    """A named predicate. Rules with a parse_param take a parameter."""
    name: str
    predicate: Callable[..., bool]
    parse_param: Callable[[str], Any] | None = None

    @property
    def takes_param(self) -> bool:
        return self.parse_param is not None

    def bind(self, param: str | None) -> Any:
        """Parse the tag parameter for this rule, raising ConfigurationError if unusable."""
        if not self.takes_param:
            if param is not None:
                raise ConfigurationError.invalid_param(self.name, param)
            return None
        if param is None:
            raise ConfigurationError.invalid_param(self.name, "")
        try:
            return self.parse_param(param)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError.invalid_param(self.name, param) from exc

    def check(self, value: Any, bound: Any = None) -> bool:
        if self.takes_param:
            return self.predicate(value, bound)
        return self.predicate(value)


@dataclass(frozen=True, slots=True)
class RuleCall:
    """One rule reference inside a tag."""
    name: str
    param: str | None = None


@dataclass(frozen=True, slots=True)
class RuleGroup:
    """Alternatives joined by "|"; a single call in the common case."""
    calls: tuple[RuleCall, ...] = field(default_factory=tuple)

    @property
    def reason(self) -> str:
        """Reason code reported when the group fails."""
        return "|".join(call.name for call in self.calls)

    @property
    def modifier(self) -> str | None:
        if len(self.calls) == 1 and self.calls[0].name in MODIFIERS:
            return self.calls[0].name
        return None


def _unescape(text: str) -> str:
    for escaped, literal in _ESCAPES.items():
        text = text.replace(escaped, literal)
    return text


def _parse_call(text: str) -> RuleCall:
    name, sep, param = text.partition("=")
    name = name.strip()
    if not name:
        raise ConfigurationError(f"Empty rule name in tag segment {text!r}")
    return RuleCall(name=name, param=_unescape(param) if sep else None)


@lru_cache(maxsize=1024)
def parse_tag(tag: str) -> tuple[RuleGroup, ...]:
    """Split a rule tag into groups. Blank tags yield no groups."""
    if not tag or not tag.strip():
        return ()
    groups = []
    for segment in tag.split(","):
        calls = tuple(_parse_call(alt) for alt in segment.split("|"))
        if len(calls) > 1 and any(call.name in MODIFIERS for call in calls):
            raise ConfigurationError(f"Modifier cannot be used as an alternative in {segment!r}")
        groups.append(RuleGroup(calls))
    return tuple(groups)
