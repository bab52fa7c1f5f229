"""
Tests for lockout state machine dan attempt counter.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.constants import LockoutStatus
from app.schemas.state import AttemptState, AuthPolicyState
from app.services.lockout_state import LockoutStateMachine


START_TIME = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.mark.unit
class TestAttemptState:
    """Test attempt counter."""

    def test_increment_and_reset(self):
        attempts = AttemptState()

        assert attempts.increment() == 1
        assert attempts.increment() == 2
        assert attempts.current_count == 2

        attempts.served_penalty = True
        attempts.reset()

        assert attempts.current_count == 0
        assert attempts.served_penalty is False

    def test_reset_is_idempotent(self):
        attempts = AttemptState(consecutive_failures=3)

        attempts.reset()
        attempts.reset()

        assert attempts.current_count == 0

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            AttemptState(consecutive_failures=-1)


@pytest.mark.unit
class TestLockoutStateMachine:
    """Test lockout transitions."""

    def test_initial_state_unlocked(self):
        machine = LockoutStateMachine(AuthPolicyState())

        assert machine.status(START_TIME) == LockoutStatus.UNLOCKED
        assert machine.locked_until is None
        assert not machine.is_locked(START_TIME)

    def test_lock_sets_expiry(self):
        state = AuthPolicyState()
        state.attempts.served_penalty = True
        machine = LockoutStateMachine(state)

        until = machine.lock(30, START_TIME)

        assert until == START_TIME + timedelta(seconds=30)
        assert machine.status(START_TIME) == LockoutStatus.LOCKED
        assert machine.is_locked(START_TIME + timedelta(seconds=29))
        assert state.attempts.served_penalty is False

    def test_expire_before_due_is_noop(self):
        state = AuthPolicyState()
        machine = LockoutStateMachine(state)
        machine.lock(30, START_TIME)

        assert machine.expire_if_due(START_TIME + timedelta(seconds=10)) is False
        assert state.lockout.active is True

    def test_expire_when_due_marks_served(self):
        state = AuthPolicyState()
        machine = LockoutStateMachine(state)
        machine.lock(30, START_TIME)

        expired = machine.expire_if_due(START_TIME + timedelta(seconds=30))

        assert expired is True
        assert state.lockout.active is False
        assert state.lockout.until is None
        assert state.attempts.served_penalty is True
        assert machine.status(START_TIME + timedelta(seconds=30)) == LockoutStatus.UNLOCKED

    def test_notification_pending(self):
        state = AuthPolicyState()
        machine = LockoutStateMachine(state)

        machine.mark_notification_pending()

        assert machine.status(START_TIME) == LockoutStatus.PENDING_NOTIFICATION

    def test_locked_takes_precedence_over_notification(self):
        state = AuthPolicyState()
        machine = LockoutStateMachine(state)
        machine.mark_notification_pending()
        machine.lock(30, START_TIME)

        assert machine.status(START_TIME) == LockoutStatus.LOCKED

    def test_begin_entry_after_served_penalty(self):
        state = AuthPolicyState()
        machine = LockoutStateMachine(state)
        machine.lock(30, START_TIME)
        machine.expire_if_due(START_TIME + timedelta(seconds=31))
        machine.mark_notification_pending()

        assert machine.begin_entry() is True
        assert state.attempts.served_penalty is False
        assert state.lockout.display_notification is False

    def test_begin_entry_without_served_penalty_keeps_notification(self):
        state = AuthPolicyState()
        machine = LockoutStateMachine(state)
        machine.mark_notification_pending()

        assert machine.begin_entry() is False
        assert state.lockout.display_notification is True

    def test_clear(self):
        state = AuthPolicyState()
        machine = LockoutStateMachine(state)
        machine.lock(30, START_TIME)
        machine.mark_notification_pending()

        machine.clear()

        assert machine.status(START_TIME) == LockoutStatus.UNLOCKED
        assert state.lockout.display_notification is False
