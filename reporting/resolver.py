"""
Cross-reference resolution between entity kinds.

Source records reference each other by informal identifier equality
(member.union_id -> union.id, executive.member_id -> member.id) with no
integrity guarantee. Indices are built once per report generation and
shared by every report in it; a dangling reference resolves to the
"Unknown" placeholder instead of failing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar

from .config import UNKNOWN
from .schemas import Member, Union, normalize_id

T = TypeVar("T")


def build_index(records: Iterable[T], key_field: str = "id") -> Dict[str, T]:
    """
    Map identifier -> record. Records without a key are left out; when a key
    repeats, the first record seen wins.
    """
    index: Dict[str, T] = {}
    for record in records:
        key = normalize_id(getattr(record, key_field, None))
        if key is None or key in index:
            continue
        index[key] = record
    return index


def union_display_name(union: Optional[Union]) -> str:
    if union is None:
        return UNKNOWN
    if union.name or union.union_code:
        return union.name or union.union_code
    return f"Union #{union.id}" if union.id is not None else UNKNOWN


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Read-only identifier index with a defined miss."""
    index: Dict[str, T] = field(default_factory=dict)

    def get(self, key: Any) -> Optional[T]:
        normalized = normalize_id(key)
        if normalized is None:
            return None
        return self.index.get(normalized)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self.index)


@dataclass(frozen=True)
class CrossReference:
    """
    Joins used by the reports: union attributes for members, CBAs and
    executives; member name/sex for executives.
    """
    unions: Lookup[Union]
    members: Lookup[Member]

    @classmethod
    def build(cls, unions: Iterable[Union], members: Iterable[Member]) -> "CrossReference":
        return cls(unions=Lookup(build_index(unions)), members=Lookup(build_index(members)))

    def union_name(self, union_id: Any) -> str:
        return union_display_name(self.unions.get(union_id))

    def union_sector(self, union_id: Any) -> str:
        union = self.unions.get(union_id)
        return (union.sector if union else None) or UNKNOWN

    def union_organization(self, union_id: Any) -> str:
        union = self.unions.get(union_id)
        return (union.organization if union else None) or UNKNOWN

    def member_name(self, member_id: Any) -> str:
        member = self.members.get(member_id)
        return (member.full_name if member else None) or UNKNOWN

    def member_sex(self, member_id: Any) -> str:
        member = self.members.get(member_id)
        return member.sex if member else UNKNOWN
