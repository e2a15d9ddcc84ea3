# src/graph/relationships.py — v1
"""Relationship inference policy between two co-occurring entities.

The category-pair table is the only place relationship semantics live.
It is a closed mapping keyed by EntityCategory pairs and is validated
when this module is imported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol

from podgraph.core.categories import EntityCategory
from podgraph.graph.identity import entity_vertex_id

SAME_CATEGORY = "same_category"
CO_OCCURS = "co_occurs"
APPEARS_IN = "appears_in"

RESERVED_LABELS = frozenset({SAME_CATEGORY, CO_OCCURS, APPEARS_IN})

_LABEL_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

C = EntityCategory

# (from, to, label): the edge reads "from <label> to".
_CATEGORY_PAIR_RELATIONSHIPS: list[tuple[EntityCategory, EntityCategory, str]] = [
    # Person
    (C.PERSON, C.PERSON_TYPE, "has_title"),
    (C.PERSON, C.ORGANIZATION, "works_for"),
    (C.PERSON, C.EVENT, "organized_event"),
    (C.PERSON, C.PRODUCT, "uses_product"),
    (C.PERSON, C.SKILL, "has_skill"),
    (C.PERSON, C.LOCATION, "resides_in"),
    (C.PERSON, C.ADDRESS, "lives_at"),
    (C.PERSON, C.PHONE_NUMBER, "has_phone_number"),
    (C.PERSON, C.EMAIL, "has_email"),
    (C.PERSON, C.URL, "has_website"),
    (C.PERSON, C.IP, "last_seen_at_ip"),
    (C.PERSON, C.DATE_TIME, "born_on"),
    (C.PERSON, C.QUANTITY, "has_age"),
    # PersonType
    (C.PERSON_TYPE, C.ORGANIZATION, "role_within_organization"),
    # Organization
    (C.ORGANIZATION, C.PERSON, "employs"),
    (C.ORGANIZATION, C.EVENT, "sponsors"),
    (C.ORGANIZATION, C.PRODUCT, "produces"),
    (C.ORGANIZATION, C.SKILL, "requires_skill"),
    (C.ORGANIZATION, C.LOCATION, "based_in"),
    (C.ORGANIZATION, C.ADDRESS, "headquartered_at"),
    (C.ORGANIZATION, C.PHONE_NUMBER, "has_contact_number"),
    (C.ORGANIZATION, C.EMAIL, "has_contact_email"),
    (C.ORGANIZATION, C.URL, "official_website"),
    (C.ORGANIZATION, C.IP, "owns_ip_range"),
    (C.ORGANIZATION, C.DATE_TIME, "founded_on"),
    (C.ORGANIZATION, C.QUANTITY, "has_employee_count"),
    # Event
    (C.EVENT, C.PERSON, "attended_by"),
    (C.EVENT, C.ORGANIZATION, "hosted_by"),
    (C.EVENT, C.PRODUCT, "featured_product"),
    (C.EVENT, C.LOCATION, "occurs_in"),
    (C.EVENT, C.ADDRESS, "held_at_address"),
    (C.EVENT, C.URL, "has_event_page"),
    (C.EVENT, C.DATE_TIME, "scheduled_for"),
    (C.EVENT, C.QUANTITY, "expected_attendees"),
    # Product
    (C.PRODUCT, C.ORGANIZATION, "manufactured_by"),
    (C.PRODUCT, C.SKILL, "requires_skill_to_operate"),
    (C.PRODUCT, C.LOCATION, "sold_in"),
    (C.PRODUCT, C.URL, "has_product_page"),
    (C.PRODUCT, C.DATE_TIME, "released_on"),
    (C.PRODUCT, C.QUANTITY, "has_price"),
    # Skill, Address
    (C.SKILL, C.PERSON_TYPE, "skill_for_role"),
    (C.ADDRESS, C.LOCATION, "is_in_city_or_country"),
]


def build_relationship_table(
    entries: Iterable[tuple[EntityCategory, EntityCategory, str]],
) -> Mapping[tuple[EntityCategory, EntityCategory], str]:
    """Validate (from, to, label) entries and freeze them into a lookup table.

    Raises:
        ValueError: On a non-enum category, a same-category key, a
            malformed or reserved label, or a duplicated key.
    """
    table: dict[tuple[EntityCategory, EntityCategory], str] = {}
    for source, target, label in entries:
        if not isinstance(source, EntityCategory) or not isinstance(target, EntityCategory):
            raise ValueError(f"Categories must be EntityCategory members: {source!r}, {target!r}")
        if source is target:
            raise ValueError(f"Same-category pair {source.value} is always {SAME_CATEGORY}")
        if not _LABEL_PATTERN.match(label):
            raise ValueError(f"Relationship label must be lower snake case: {label!r}")
        if label in RESERVED_LABELS:
            raise ValueError(f"Relationship label {label!r} is reserved")
        key = (source, target)
        if key in table:
            raise ValueError(f"Duplicate relationship for {source.value}-{target.value}")
        table[key] = label
    return MappingProxyType(table)


RELATIONSHIP_TABLE = build_relationship_table(_CATEGORY_PAIR_RELATIONSHIPS)


class Categorized(Protocol):
    text: str
    category: str


@dataclass(frozen=True)
class InferredRelationship:
    """Label plus the oriented endpoints of the edge to write."""

    label: str
    source: Categorized
    target: Categorized

    @property
    def is_generic(self) -> bool:
        return self.label == CO_OCCURS


def _symmetric(label: str, a: Categorized, b: Categorized) -> InferredRelationship:
    """Orient a symmetric relationship by canonical vertex id."""
    if entity_vertex_id(a.text) <= entity_vertex_id(b.text):
        return InferredRelationship(label, a, b)
    return InferredRelationship(label, b, a)


def resolve_relationship(a: Categorized, b: Categorized) -> InferredRelationship:
    """Pick the relationship label and edge direction for a co-occurring pair.

    The result does not depend on argument order. The pair is first put
    in canonical order (category declaration order), then the table is
    consulted in that direction and, failing that, in reverse. Categories
    outside the vocabulary fall back to ``co_occurs``.
    """
    if a.category == b.category:
        return _symmetric(SAME_CATEGORY, a, b)

    cat_a = EntityCategory.parse(a.category)
    cat_b = EntityCategory.parse(b.category)
    if cat_a is None or cat_b is None:
        return _symmetric(CO_OCCURS, a, b)

    first, second = (a, b) if cat_a.rank < cat_b.rank else (b, a)
    first_cat, second_cat = (cat_a, cat_b) if first is a else (cat_b, cat_a)

    label = RELATIONSHIP_TABLE.get((first_cat, second_cat))
    if label is not None:
        return InferredRelationship(label, first, second)

    label = RELATIONSHIP_TABLE.get((second_cat, first_cat))
    if label is not None:
        return InferredRelationship(label, second, first)

    return _symmetric(CO_OCCURS, a, b)


def determine_relationship_type(a: Categorized, b: Categorized) -> str:
    """Relationship label for two entities observed together. Pure and total."""
    return resolve_relationship(a, b).label


def relationship_labels() -> list[str]:
    """All labels a semantic edge can carry, including the fallbacks."""
    return sorted(set(RELATIONSHIP_TABLE.values()) | {SAME_CATEGORY, CO_OCCURS})
