# src/core/categories.py — v1
"""Closed vocabulary of entity categories produced by the NLP service.

Declaration order is significant: it is the canonical ordering used to
orient relationship edges between two categories.
"""

from __future__ import annotations

from enum import Enum


class EntityCategory(str, Enum):
    """Entity categories recognised by the entity-extraction service."""

    PERSON = "Person"
    PERSON_TYPE = "PersonType"
    ORGANIZATION = "Organization"
    EVENT = "Event"
    PRODUCT = "Product"
    SKILL = "Skill"
    LOCATION = "Location"
    ADDRESS = "Address"
    PHONE_NUMBER = "PhoneNumber"
    EMAIL = "Email"
    URL = "URL"
    IP = "IP"
    DATE_TIME = "DateTime"
    QUANTITY = "Quantity"

    @classmethod
    def parse(cls, value: str) -> EntityCategory | None:
        """Map a raw category string to a member, or None if outside the vocabulary."""
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS: dict[EntityCategory, int] = {c: i for i, c in enumerate(EntityCategory)}
