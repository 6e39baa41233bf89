"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vehicle_makes_db.schemas import Make


@dataclass
class MakeTypeLoad:
    """Result of loading the vehicle types of a single make.

    Produced independently by each concurrent task and merged by the
    type loader once its group has drained.
    """

    make: Make
    """The make with its loaded types, or the input make on failure."""

    error: Exception | None = None
    """Exception if fetching or persisting failed."""

    @property
    def success(self) -> bool:
        """Check if the load completed without errors."""
        return self.error is None

    @classmethod
    def from_error(cls, make: Make, error: Exception) -> MakeTypeLoad:
        """Create a result representing a failed load."""
        return cls(make=make, error=error)


@dataclass
class TypeLoadResult:
    """Aggregated result of a type-loading pass."""

    attempted: int = 0
    """Makes whose types were requested."""

    succeeded: int = 0
    """Makes whose types were fetched and persisted."""

    failed: int = 0
    """Makes that failed to load; retried on the next run."""

    failed_makes: list[tuple[str, str]] = field(default_factory=list)
    """List of (make_id, error_message) for failed makes."""

    not_started: int = 0
    """Makes left unprocessed because a stop was requested."""

    duration_seconds: float = 0.0
    """Total time taken for the pass."""

    @property
    def stopped(self) -> bool:
        """True when the pass ended early on a stop request."""
        return self.not_started > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failed_makes": [
                {"make_id": make_id, "error": message}
                for make_id, message in self.failed_makes
            ],
            "not_started": self.not_started,
            "duration_seconds": round(self.duration_seconds, 2),
        }


@dataclass
class SelfCheckResult:
    """Outcome of comparing the remote make count with the stored row count."""

    remote_count: int | None = None
    stored_count: int | None = None
    error: str | None = None

    @property
    def passed(self) -> bool:
        """True when both counts were read and are equal."""
        return (
            self.error is None
            and self.remote_count is not None
            and self.remote_count == self.stored_count
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "passed": self.passed,
            "remote_count": self.remote_count,
            "stored_count": self.stored_count,
            "error": self.error,
        }


@dataclass
class SyncRunResult:
    """Result of one complete sync run."""

    makes_fetched: int = 0
    """Makes reported by the all-makes fetch (after de-duplication)."""

    created: int = 0
    """Makes inserted while persisting shells."""

    upserted: int = 0
    """Makes written while persisting shells (created + updated)."""

    deleted: int = 0
    """Makes removed because the remote source no longer lists them."""

    type_load: TypeLoadResult = field(default_factory=TypeLoadResult)
    """Outcome of the type-loading pass."""

    self_check: SelfCheckResult | None = None
    """Outcome of the self-check, None when it was skipped."""

    duration_seconds: float = 0.0
    """Total time taken for the run."""

    makes: dict[str, Make] = field(default_factory=dict, repr=False)
    """Final in-memory map of makes by id (not serialized)."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "makes_fetched": self.makes_fetched,
            "created": self.created,
            "upserted": self.upserted,
            "deleted": self.deleted,
            "type_load": self.type_load.to_dict(),
            "self_check": self.self_check.to_dict() if self.self_check else None,
            "duration_seconds": round(self.duration_seconds, 2),
        }
