# ganttly/hierarchy.py
from __future__ import annotations

from typing import Dict, List, Sequence

from .model import NO_GROUP, Task
from .util.console import eprint, obs_enabled


def group_tasks(tasks: Sequence[Task]) -> Dict[str, List[Task]]:
    """Bucket tasks by group label, children placed right after their parent.

    Root tasks keep arrival order within their bucket. Each child is spliced
    after its parent and after any sibling placed before it, in whichever
    bucket holds the parent. A child whose parent is in no bucket is appended
    to the end of its own group's bucket.
    """
    groups: Dict[str, List[Task]] = {}
    children: List[Task] = []

    for t in tasks:
        if t.parent_id:
            children.append(t)
            continue
        groups.setdefault(t.group or NO_GROUP, []).append(t)

    orphans: List[Task] = []
    for child in children:
        placed = False
        for bucket in groups.values():
            idx = next((i for i, t in enumerate(bucket) if t.id == child.parent_id), -1)
            if idx < 0:
                continue
            pos = idx + 1
            while pos < len(bucket) and bucket[pos].parent_id == child.parent_id:
                pos += 1
            bucket.insert(pos, child)
            placed = True
            break
        if not placed:
            orphans.append(child)

    for child in orphans:
        if obs_enabled():
            eprint(f"[ganttly.hierarchy] orphan task={child.id!r} parent={child.parent_id!r}")
        groups.setdefault(child.group or NO_GROUP, []).append(child)

    return groups


def flatten_groups(groups: Dict[str, List[Task]]) -> List[Task]:
    out: List[Task] = []
    for bucket in groups.values():
        out.extend(bucket)
    return out
