"""
Label Group Lookup Table.

An immutable snapshot of every label group returned by one collection call.
The href is the only canonical key. Name and (key, name) lookups are
secondary indexes that keep every group sharing a name, so two groups with
the same name never overwrite each other.

A new table is built for each collection fetch and swapped in with a single
assignment; a reader holding a table always sees a consistent snapshot.
"""

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from pceclient.policy.schemas import LabelGroup


class LabelGroupTable(Mapping[str, LabelGroup]):
    """Read-only mapping of href → LabelGroup with a name index."""

    def __init__(self, groups: Iterable[LabelGroup] = ()) -> None:
        by_href: dict[str, LabelGroup] = {}
        by_name: dict[str, list[LabelGroup]] = {}
        by_key_name: dict[tuple[str, str], list[LabelGroup]] = {}

        for group in groups:
            # Groups without an href cannot be referenced and are not indexed
            if not group.href:
                continue
            by_href[group.href] = group

        for group in by_href.values():
            if group.name is None:
                continue
            by_name.setdefault(group.name, []).append(group)
            by_key_name.setdefault((group.key or "", group.name), []).append(group)

        self._by_href = MappingProxyType(by_href)
        self._by_name = MappingProxyType({name: tuple(found) for name, found in by_name.items()})
        self._by_key_name = MappingProxyType(
            {key: tuple(found) for key, found in by_key_name.items()}
        )

    def __getitem__(self, href: str) -> LabelGroup:
        return self._by_href[href]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_href)

    def __len__(self) -> int:
        return len(self._by_href)

    def __repr__(self) -> str:
        return f"LabelGroupTable({len(self)} groups)"

    def find_by_name(self, name: str) -> tuple[LabelGroup, ...]:
        """All groups with the given name (empty when none)."""
        return self._by_name.get(name, ())

    def find_by_key_and_name(self, key: str, name: str) -> tuple[LabelGroup, ...]:
        """All groups with the given label dimension and name."""
        return self._by_key_name.get((key, name), ())
