"""
Tests for the reorder transition table
"""

import pytest

from biztrack.core.exceptions import ConflictError
from biztrack.schemas.reorder import ReorderStatus
from biztrack.services.reorder.state_machine import can_transition, ensure_transition, is_terminal


class TestReorderStateMachine:

    @pytest.mark.parametrize("current,target", [
        ("pending", "approved"),
        ("pending", "ordered"),
        ("pending", "cancelled"),
        ("pending", "received"),
        ("approved", "ordered"),
        ("approved", "cancelled"),
        ("ordered", "received"),
        ("ordered", "cancelled"),
    ])
    def test_allowed(self, current, target):
        assert ensure_transition(current, target) == ReorderStatus(target)

    @pytest.mark.parametrize("current,target", [
        ("approved", "approved"),
        ("ordered", "approved"),
        ("received", "cancelled"),
        ("received", "ordered"),
        ("cancelled", "pending"),
        ("cancelled", "approved"),
    ])
    def test_rejected(self, current, target):
        with pytest.raises(ConflictError) as exc_info:
            ensure_transition(current, target)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"current": current, "target": target}

    def test_terminal_states(self):
        assert is_terminal(ReorderStatus.RECEIVED)
        assert is_terminal("cancelled")
        assert not is_terminal("ordered")

    def test_can_transition_accepts_enums(self):
        assert can_transition(ReorderStatus.PENDING, ReorderStatus.APPROVED)
        assert not can_transition(ReorderStatus.RECEIVED, ReorderStatus.CANCELLED)
