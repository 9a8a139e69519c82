"""Tests for the validation error aggregate."""

from __future__ import annotations

import json

import pytest

from fieldrules import ErrorCode, FieldFailure, ValidationErrors


class TestAddError:
    def test_empty(self) -> None:
        errors = ValidationErrors()
        assert not errors.has_errors()
        assert len(errors) == 0
        assert str(errors) == ""
        assert errors.to_dict() == {}

    def test_creates_then_appends(self) -> None:
        errors = ValidationErrors()
        errors.add_error("email", "required")
        errors.add_error("email", "email")
        errors.add_error("phone", "phone")
        assert errors.to_dict() == {"email": ["required", "email"], "phone": ["phone"]}

    def test_len_counts_fields_not_reasons(self) -> None:
        errors = ValidationErrors({"email": ["required", "email"], "phone": ["phone"]})
        assert len(errors) == 2
        assert errors.has_errors()

    def test_message_lists_fields(self) -> None:
        errors = ValidationErrors({"email": ["required"], "phone": ["phone"]})
        assert errors.message.startswith("Validation error on fields: ")
        listed = errors.message.removeprefix("Validation error on fields: ").split(", ")
        assert sorted(listed) == ["email", "phone"]

    def test_accessors(self) -> None:
        errors = ValidationErrors({"address.zip": ["len"]})
        assert "address.zip" in errors
        assert list(errors) == ["address.zip"]
        assert errors.fields == ["address.zip"]
        assert errors.reasons("address.zip") == ["len"]
        assert errors.reasons("missing") == []

    def test_reasons_returns_copy(self) -> None:
        errors = ValidationErrors({"email": ["required"]})
        errors.reasons("email").append("tampered")
        assert errors.reasons("email") == ["required"]


class TestEquality:
    def test_equal_mappings(self) -> None:
        assert ValidationErrors({"a": ["x"]}) == ValidationErrors({"a": ["x"]})

    def test_different_reasons(self) -> None:
        assert ValidationErrors({"a": ["x"]}) != ValidationErrors({"a": ["y"]})

    def test_not_equal_to_plain_dict(self) -> None:
        assert ValidationErrors({"a": ["x"]}) != {"a": ["x"]}

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(ValidationErrors())


class TestSerialization:
    def test_wire_format(self) -> None:
        errors = ValidationErrors({"email": ["required"], "phone": ["phone"]})
        assert json.loads(errors.to_json()) == {"email": ["required"], "phone": ["phone"]}

    def test_json_round_trip(self) -> None:
        errors = ValidationErrors({"email": ["required", "email"], "address.zip": ["len"]})
        assert ValidationErrors.from_json(errors.to_json()) == errors

    def test_string_reasons_rejected(self) -> None:
        with pytest.raises(TypeError):
            ValidationErrors.from_json('{"a": "required"}')

    def test_non_object_payload_rejected(self) -> None:
        with pytest.raises(TypeError):
            ValidationErrors.from_json('["a"]')

    def test_non_string_reason_rejected(self) -> None:
        with pytest.raises(TypeError):
            ValidationErrors.from_json('{"a": [1]}')

    def test_malformed_json_rejected(self) -> None:
        with pytest.raises(ValueError):
            ValidationErrors.from_json("{not json")

    def test_dict_round_trip(self) -> None:
        data = {"tags[1]": ["alpha"]}
        assert ValidationErrors.from_dict(data).to_dict() == data

    def test_response_envelope(self) -> None:
        errors = ValidationErrors({"email": ["required"]})
        body = errors.to_response()["error"]
        assert body["type"] == "validation_error"
        assert body["code"] == ErrorCode.E2000_VALIDATION_GENERIC.name
        assert body["fields"] == {"email": ["required"]}
        assert errors.http_status == 400


class TestFromFailures:
    def test_none_gives_empty(self) -> None:
        assert not ValidationErrors.from_failures(None).has_errors()

    def test_strips_root_segment(self) -> None:
        errors = ValidationErrors.from_failures([
            FieldFailure(namespace="Signup.address.zip", field="zip", tag="len"),
            FieldFailure(namespace="Signup.email", field="email", tag="required"),
        ])
        assert errors.to_dict() == {"address.zip": ["len"], "email": ["required"]}

    def test_accumulates_every_failed_rule(self) -> None:
        """All failing rules for a path are kept, not just the last one."""
        errors = ValidationErrors.from_failures([
            FieldFailure(namespace="Signup.zip", field="zip", tag="len"),
            FieldFailure(namespace="Signup.zip", field="zip", tag="numeric"),
        ])
        assert errors.reasons("zip") == ["len", "numeric"]

    def test_repeated_reason_recorded_once(self) -> None:
        errors = ValidationErrors.from_failures([
            FieldFailure(namespace="Signup.zip", field="zip", tag="len"),
            FieldFailure(namespace="Signup.zip", field="zip", tag="len"),
        ])
        assert errors.reasons("zip") == ["len"]

    def test_is_raisable(self) -> None:
        errors = ValidationErrors({"email": ["required"]})
        try:
            raise errors
        except ValidationErrors as caught:
            assert caught.to_dict() == {"email": ["required"]}
