# /mm2plex/reconcile/_results.py
from __future__ import annotations

from ._types import CollectionRecord, Match, MatchOutcome, RunResult, Unresolved
from ..errors import SyncError


class ResultAggregator:
    def __init__(self, *, kind: str, direction: str, dry_run: bool = False):
        self.kind = kind
        self.direction = direction
        self.dry_run = bool(dry_run)
        self.applied = 0
        self._unresolved: list[Unresolved] = []
        self.hard_error: SyncError | None = None
        self.unresolved_aliases: list[str] = []

    @property
    def unresolved(self) -> list[Unresolved]:
        return list(self._unresolved)

    def add(self, record: CollectionRecord, match: Match, applied: bool = False) -> None:
        if not match.ok:
            self._unresolved.append(Unresolved(record, match.outcome, match.detail))
        elif applied:
            self.applied += 1
        else:
            self._unresolved.append(Unresolved(record, MatchOutcome.MUTATION_FAILED, f"#{match.remote_id}"))

    def fail(self, error: SyncError) -> None:
        self.hard_error = error

    def counts(self) -> dict[str, int]:
        out: dict[str, int] = {"applied": self.applied}
        for u in self._unresolved:
            out[u.outcome.value] = out.get(u.outcome.value, 0) + 1
        return out

    def result(self) -> RunResult:
        return RunResult(
            kind=self.kind,
            direction=self.direction,
            dry_run=self.dry_run,
            unresolved=list(self._unresolved),
            applied=self.applied,
            hard_error=self.hard_error,
            unresolved_aliases=list(self.unresolved_aliases),
        )
