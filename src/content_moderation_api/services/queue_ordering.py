"""Ordering strategies for moderation queue listings."""

from typing import Protocol

from content_moderation_api.database.models.base import ModerationPriority

_PRIORITY_RANK = " ".join(
    f"WHEN '{priority.value}' THEN {rank}"
    for rank, priority in enumerate(ModerationPriority)
)


class QueueOrdering(Protocol):
    """Produces the ORDER BY clause for queue listings."""

    name: str

    def order_by(self) -> str: ...


class PriorityOrdering:
    """Highest priority first, newest first within a priority."""

    name = "priority"

    def order_by(self) -> str:
        return f"CASE priority {_PRIORITY_RANK} ELSE 0 END DESC, created_at DESC"


class RecencyOrdering:
    """Newest first, ignoring priority."""

    name = "recency"

    def order_by(self) -> str:
        return "created_at DESC"


class OldestFirstOrdering:
    """Oldest first, for working the backlog in arrival order."""

    name = "oldest"

    def order_by(self) -> str:
        return "created_at ASC"


QUEUE_ORDERINGS: dict[str, QueueOrdering] = {
    ordering.name: ordering
    for ordering in (PriorityOrdering(), RecencyOrdering(), OldestFirstOrdering())
}


def get_queue_ordering(name: str) -> QueueOrdering:
    """Look up an ordering by name."""
    try:
        return QUEUE_ORDERINGS[name]
    except KeyError:
        raise ValueError(
            f"Unknown queue ordering '{name}', expected one of {sorted(QUEUE_ORDERINGS)}"
        ) from None
