"""Tests for rule tag parsing."""

from __future__ import annotations

import pytest

from fieldrules import ConfigurationError, Rule, RuleCall, RuleGroup, parse_tag


class TestParseTag:
    def test_single_rule(self) -> None:
        assert parse_tag("required") == (RuleGroup((RuleCall("required"),)),)

    def test_params_and_order(self) -> None:
        groups = parse_tag("required,min=3,max=10")
        assert [g.calls[0] for g in groups] == [
            RuleCall("required"),
            RuleCall("min", "3"),
            RuleCall("max", "10"),
        ]

    def test_alternatives(self) -> None:
        (group,) = parse_tag("email|phone")
        assert group.calls == (RuleCall("email"), RuleCall("phone"))
        assert group.reason == "email|phone"

    def test_reason_drops_param(self) -> None:
        (group,) = parse_tag("len=5")
        assert group.reason == "len"

    def test_escaped_separators(self) -> None:
        (group,) = parse_tag("eq=a0x2Cb0x7Cc")
        assert group.calls[0].param == "a,b|c"

    def test_blank_tag(self) -> None:
        assert parse_tag("") == ()
        assert parse_tag("   ") == ()

    def test_modifiers(self) -> None:
        groups = parse_tag("omitempty,dive,alpha")
        assert [g.modifier for g in groups] == ["omitempty", "dive", None]

    def test_empty_segment_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_tag("required,,email")

    def test_modifier_alternative_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_tag("omitempty|email")


class TestRule:
    def test_plain_rule_rejects_param(self) -> None:
        rule = Rule("phone", lambda v: True)
        assert not rule.takes_param
        with pytest.raises(ConfigurationError):
            rule.bind("x")

    def test_param_rule_requires_param(self) -> None:
        rule = Rule("min", lambda v, p: v >= p, parse_param=int)
        with pytest.raises(ConfigurationError):
            rule.bind(None)

    def test_bad_param(self) -> None:
        rule = Rule("min", lambda v, p: v >= p, parse_param=int)
        with pytest.raises(ConfigurationError) as exc_info:
            rule.bind("abc")
        assert exc_info.value.rule == "min"

    def test_check_passes_bound_param(self) -> None:
        rule = Rule("min", lambda v, p: v >= p, parse_param=int)
        assert rule.check(5, rule.bind("3"))
        assert not rule.check(2, rule.bind("3"))
