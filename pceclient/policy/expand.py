"""
Label Group Expansion.

Resolves a label group into the flat set of label hrefs it covers, following
subgroups at any depth. Subgroups are processed from an explicit FIFO queue
and each group is visited once, so reference cycles (A → B → A, or a group
listing itself) terminate and the work is bounded by the table size.
"""

from collections import deque
from collections.abc import Mapping

from pceclient.policy.schemas import LabelGroup


def expand_label_group(table: Mapping[str, LabelGroup], root: str) -> set[str]:
    """
    Return every label href reachable from a label group.

    Args:
        table: Snapshot of label groups keyed by href
        root: Href of the group to expand

    Returns:
        Set of label hrefs. Empty when the root is not in the table.
        Subgroups missing from the table contribute nothing.
    """
    labels: set[str] = set()
    visited: set[str] = set()
    pending: deque[str] = deque([root])

    while pending:
        href = pending.popleft()
        if href in visited:
            continue
        visited.add(href)

        group = table.get(href)
        if group is None:
            continue

        labels.update(group.label_hrefs())
        pending.extend(sub for sub in group.sub_group_hrefs() if sub not in visited)

    return labels
