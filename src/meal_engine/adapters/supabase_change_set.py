"""Atomic commit of change sets through a Postgres function."""

import logging

from postgrest.exceptions import APIError
from supabase import Client

from meal_engine.adapters.rows import change_set_payload
from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.errors import ConcurrencyConflict

logger = logging.getLogger(__name__)

# unique_violation and serialization_failure; the function raises the latter
# for stale versions
CONFLICT_CODES = {"23505", "40001"}


def apply_change_set(client: Client, changes: ChangeSet) -> None:
    """Commit every write of ``changes`` in one database transaction."""
    if changes.is_empty():
        return
    try:
        payload = change_set_payload(changes)
        client.rpc("apply_change_set", {"payload": payload}).execute()
    except APIError as exc:
        if exc.code in CONFLICT_CODES:
            raise ConcurrencyConflict(exc.message or str(exc)) from exc
        logger.error("apply_change_set failed: %s", exc.message)
        raise
