"""Owner priority table shared by attachment and edge simplification.

When a resource has several incoming edges, the source whose kind comes
first in ``OWNER_PRIORITY`` is treated as its owner. Candidates whose kind
is absent from the table only win when nothing in the table matches, in
which case the first candidate is used.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from astrolabe.core.schema import Kind, Resource

OWNER_PRIORITY: tuple[Kind, ...] = (
    Kind.DEPLOYMENT,
    Kind.STATEFUL_SET,
    Kind.DAEMON_SET,
    Kind.CRON_JOB,
    Kind.SERVICE,
    Kind.JOB,
    Kind.REPLICA_SET,
    Kind.POD,
)

_RANK: dict[Kind, int] = {kind: rank for rank, kind in enumerate(OWNER_PRIORITY)}

R = TypeVar("R", bound=Resource)


def owner_rank(kind: Kind) -> int | None:
    """Position of ``kind`` in the priority table (0 is highest), or None."""
    return _RANK.get(kind)


def find_highest_owner(candidates: Sequence[R]) -> R | None:
    """Pick the highest-priority candidate.

    Ties within a kind go to the candidate listed first.
    """
    for kind in OWNER_PRIORITY:
        for candidate in candidates:
            if candidate.kind == kind:
                return candidate
    return candidates[0] if candidates else None
