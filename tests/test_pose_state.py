"""Tests for the pose selection reducer."""

from virtual_tryon.session.pose_state import (
    Committed,
    Idle,
    Pending,
    PoseFailed,
    PoseRequested,
    PoseReset,
    PoseResolved,
    RolledBack,
    displayed_index,
    reduce,
)


class TestReduce:
    """Tests for pose state transitions."""

    def test_cached_request_commits_immediately(self):
        assert reduce(Idle(0), PoseRequested(target=3, cached=True)) == Committed(3)

    def test_uncached_request_goes_pending(self):
        state = reduce(Committed(1), PoseRequested(target=4, cached=False))

        assert state == Pending(target=4, previous=1)
        assert displayed_index(state) == 4

    def test_resolved_commits_target(self):
        assert reduce(Pending(target=4, previous=1), PoseResolved()) == Committed(4)

    def test_failure_rolls_back_to_previous(self):
        state = reduce(Pending(target=4, previous=1), PoseFailed("network down"))

        assert state == RolledBack(1, "network down")
        assert displayed_index(state) == 1

    def test_request_while_pending_is_ignored(self):
        pending = Pending(target=2, previous=0)

        assert reduce(pending, PoseRequested(target=5, cached=True)) is pending
        assert reduce(pending, PoseRequested(target=5, cached=False)) is pending

    def test_request_after_rollback_uses_displayed_index(self):
        state = reduce(RolledBack(2, "error"), PoseRequested(target=3, cached=False))
        assert state == Pending(target=3, previous=2)

    def test_outcomes_outside_pending_are_ignored(self):
        """Late resolutions do not move a settled state."""
        assert reduce(Committed(2), PoseResolved()) == Committed(2)
        assert reduce(Idle(0), PoseFailed("late")) == Idle(0)

    def test_reset_from_any_state(self):
        for state in [Idle(3), Pending(target=4, previous=1), Committed(5), RolledBack(2, "x")]:
            assert reduce(state, PoseReset()) == Idle(0)


def test_displayed_index_for_settled_states():
    assert displayed_index(Idle()) == 0
    assert displayed_index(Committed(5)) == 5
