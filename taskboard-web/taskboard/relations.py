"""Reference-or-embedded relation handling.

The API returns relation fields (``managerId``, ``teamMembers[i]``,
``assignedTo``, ``createdBy``, ``projectId``, ``dependencies[i]``) either as
a bare id string or as the populated object, depending on the endpoint.
Everything downstream works on the two variants below and compares by id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union


@dataclass(frozen=True)
class Reference:
    """Relation given as a bare identifier."""

    id: str


@dataclass(frozen=True)
class Embedded:
    """Relation given as a populated object."""

    id: Optional[str]
    fields: Dict[str, Any] = field(default_factory=dict, compare=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def first_name(self) -> Optional[str]:
        return _text_or_none(self.fields.get("firstName"))

    @property
    def last_name(self) -> Optional[str]:
        return _text_or_none(self.fields.get("lastName"))

    @property
    def title(self) -> Optional[str]:
        return _text_or_none(self.fields.get("title"))


Relation = Union[Reference, Embedded, None]


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_relation(value: Any) -> Relation:
    """Turn a raw relation value into ``Reference``, ``Embedded`` or ``None``."""
    if isinstance(value, (Reference, Embedded)):
        return value
    if isinstance(value, str):
        return Reference(value) if value else None
    if isinstance(value, Mapping):
        raw_id = value.get("_id")
        return Embedded(id=str(raw_id) if raw_id not in (None, "") else None, fields=dict(value))
    return None


def parse_relations(values: Any) -> List[Relation]:
    if not isinstance(values, (list, tuple)):
        return []
    parsed = (parse_relation(v) for v in values)
    return [rel for rel in parsed if rel is not None]


def extract_id(value: Any) -> Optional[str]:
    """Identifier of a relation; ``None`` when absent."""
    rel = parse_relation(value)
    if isinstance(rel, Reference):
        return rel.id
    if isinstance(rel, Embedded):
        return rel.id
    return None


def extract_label(value: Any, missing: str = "Unassigned", unresolved: Optional[str] = "Unknown") -> str:
    """Human readable label for a relation.

    ``missing`` is returned when the relation is absent, ``unresolved`` when
    only an id is known. ``unresolved=None`` falls back to the id itself.
    """
    rel = parse_relation(value)
    if rel is None:
        return missing
    if isinstance(rel, Embedded):
        if rel.first_name or rel.last_name:
            return " ".join(p for p in (rel.first_name, rel.last_name) if p)
        if rel.title:
            return rel.title
    if unresolved is not None:
        return unresolved
    return rel.id or missing


def user_label(value: Any) -> str:
    return extract_label(value, missing="Unassigned", unresolved="Unknown")


def creator_label(value: Any) -> str:
    return extract_label(value, missing="Unknown", unresolved="Unknown")


def project_label(value: Any) -> str:
    return extract_label(value, missing="Unknown Project", unresolved=None)


def relation_ids(values: Any) -> List[str]:
    """Ids of a relation collection, in order and without duplicates."""
    if not isinstance(values, (list, tuple)):
        return []
    seen = set()
    ids: List[str] = []
    for value in values:
        rel_id = extract_id(value)
        if rel_id is None or rel_id in seen:
            continue
        seen.add(rel_id)
        ids.append(rel_id)
    return ids


def merge_relations(values: Any) -> List[Relation]:
    """De-duplicate relations by id, keeping the populated form when both appear."""
    merged: Dict[str, Relation] = {}
    for rel in parse_relations(values):
        if rel.id is None:
            continue
        current = merged.get(rel.id)
        if current is None or (isinstance(rel, Embedded) and isinstance(current, Reference)):
            merged[rel.id] = rel
    return list(merged.values())


def index_by_id(entities: Iterable[Any]) -> Dict[str, Any]:
    """Map entity id -> entity. The first entity with a given id wins."""
    index: Dict[str, Any] = {}
    for entity in entities or []:
        if isinstance(entity, Mapping):
            entity_id = entity.get("_id")
        else:
            entity_id = getattr(entity, "id", None)
        if entity_id in (None, ""):
            continue
        index.setdefault(str(entity_id), entity)
    return index
