"""Snapshot epoch transitions."""

from __future__ import annotations

import pytest

from coinbook.core.epoch import EpochTracker
from coinbook.core.types import EpochState

A = EpochState.AWAITING_INITIAL_SNAPSHOT
L = EpochState.LIVE
D = EpochState.DESYNCED


@pytest.mark.unit
@pytest.mark.parametrize(
    "start, snapshot, expected",
    [
        (A, True, A),
        (A, False, L),
        (L, True, D),
        (L, False, L),
        (D, True, D),
        (D, False, D),
    ],
)
def test_transition_table(start: EpochState, snapshot: bool, expected: EpochState) -> None:
    tracker = EpochTracker(state=start)
    assert tracker.transition(snapshot) is expected
    assert tracker.state is expected


@pytest.mark.unit
def test_desynced_is_absorbing() -> None:
    tracker = EpochTracker()
    tracker.transition(False)
    tracker.transition(True)
    for flag in [True, False, False, True, False]:
        assert tracker.transition(flag) is D
    assert tracker.is_desynced()
    assert not tracker.is_bootstrapping()


@pytest.mark.unit
def test_bootstrapping_until_first_delta_and_reset() -> None:
    tracker = EpochTracker()
    for _ in range(50):
        tracker.transition(True)
    assert tracker.is_bootstrapping()
    tracker.transition(False)
    assert not tracker.is_bootstrapping()
    tracker.transition(True)
    tracker.reset()
    assert tracker.state is A
