"""Snapshot epoch state machine.

A well-formed feed sends a burst of snapshot entries first, then deltas only.
The first delta moves the book to Live. A snapshot entry seen while Live means
the exchange restarted its snapshot mid-stream: the local book now mixes two
epochs and cannot be repaired in place, so the tracker parks in Desynced until
an explicit reset().
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import EpochState


@dataclass
class EpochTracker:
    state: EpochState = EpochState.AWAITING_INITIAL_SNAPSHOT

    def transition(self, is_snapshot_entry: bool) -> EpochState:
        if self.state is EpochState.AWAITING_INITIAL_SNAPSHOT:
            if not is_snapshot_entry:
                self.state = EpochState.LIVE
        elif self.state is EpochState.LIVE:
            if is_snapshot_entry:
                self.state = EpochState.DESYNCED
        # Desynced is absorbing
        return self.state

    def is_bootstrapping(self) -> bool:
        return self.state is EpochState.AWAITING_INITIAL_SNAPSHOT

    def is_desynced(self) -> bool:
        return self.state is EpochState.DESYNCED

    def reset(self) -> None:
        self.state = EpochState.AWAITING_INITIAL_SNAPSHOT
