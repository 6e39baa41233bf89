"""Diff a freshly fetched make list against the persisted snapshot.

The reconciler is pure: it reads both sides and returns a plan. Applying
the plan is the orchestrator's job.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from vehicle_makes_db.exceptions import ReconciliationError
from vehicle_makes_db.schemas import Make, MakeUpsert


@dataclass
class ReconcilePlan:
    """Writes needed to bring the store in line with the remote make list."""

    to_upsert: list[MakeUpsert] = field(default_factory=list)
    """One write per remote make, in remote order."""

    to_delete: set[str] = field(default_factory=set)
    """Ids of stored makes the remote source no longer lists."""

    @property
    def upsert_ids(self) -> set[str]:
        return {write.make_id for write in self.to_upsert}


def reconcile(remote_makes: Iterable[Make], store_snapshot: Iterable[Make]) -> ReconcilePlan:
    """Compute the upserts and deletes for one sync run.

    Every remote make is upserted. When the stored copy already has vehicle
    types and the remote copy has none (shells always have none), the write
    leaves the stored types untouched. Remote makes repeating an id collapse
    into the last occurrence.

    Raises:
        ReconciliationError: If a make has a blank id, or an id would be
            both upserted and deleted
    """
    remote: dict[str, Make] = {}
    for make in remote_makes:
        if not make.make_id.strip():
            raise ReconciliationError(f"Remote make {make.make_name!r} has a blank id")
        remote[make.make_id] = make

    stored: dict[str, Make] = {}
    for make in store_snapshot:
        if not make.make_id.strip():
            raise ReconciliationError(f"Stored make {make.make_name!r} has a blank id")
        stored[make.make_id] = make

    plan = ReconcilePlan(to_delete=set(stored) - set(remote))

    for make_id, make in remote.items():
        existing = stored.get(make_id)
        keep_stored_types = (
            existing is not None and bool(existing.vehicle_types) and not make.vehicle_types
        )
        plan.to_upsert.append(MakeUpsert.from_make(make, keep_stored_types=keep_stored_types))

    overlap = plan.upsert_ids & plan.to_delete
    if overlap:
        raise ReconciliationError(f"Makes scheduled for upsert and delete: {sorted(overlap)}")

    return plan
