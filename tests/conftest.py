"""Shared pytest fixtures and sample structures for fieldrules tests."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

from fieldrules import RegistryConfig, RuleRegistry, build_default_registry, dataclass_rules, rules


class Address(BaseModel):
    street: str = rules("required")
    zip_code: str = rules("required,len=5,numeric", name="zip")
    location: str = rules("omitempty,coordinates", default="")


class Signup(BaseModel):
    email: str = rules("required,email")
    phone: str = rules("phone")
    timezone: str = rules("timezone", alias="tz")
    age: int = rules("gte=13,lte=130")
    address: Address
    tags: list[str] = rules("max=3,dive,alpha", default_factory=list)
    notes: str = ""


@dataclass
class Contact:
    name: str = dataclass_rules("required", name="full_name")
    phone: str = dataclass_rules("omitempty,phone", default="")


@dataclass
class Phonebook:
    owner: str = dataclass_rules("required")
    contacts: list[Contact] = field(default_factory=list)
    by_label: dict[str, Contact] = field(default_factory=dict)


@dataclass
class Peer:
    label: str = dataclass_rules("required")
    peer: Peer | None = None
    others: list[Peer] = field(default_factory=list)


@pytest.fixture
def registry() -> RuleRegistry:
    """Fresh frozen default registry, independent of the process-wide one."""
    return build_default_registry(RegistryConfig())


@pytest.fixture
def valid_signup() -> Signup:
    return Signup(
        email="ada@example.com",
        phone="(555) 123-4567",
        tz="America/New_York",
        age=36,
        address=Address(street="1 Main St", zip_code="12345", location="40.7128,-74.0060"),
        tags=["math", "poetry"],
    )
