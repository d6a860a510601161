"""State machines for domain workflows.

Deterministic state machine for the product edit session. The machine
enforces which operations are valid in each state.
"""

from enum import Enum

from storeadmin.domain.exceptions import InvalidStateTransitionError


# ============================================================================
# Edit Session State Machine
# ============================================================================


class EditState(str, Enum):
    """Product edit session lifecycle states.

    State diagram:
        IDLE ◄──────────────────────────┐
          │                             │
          │ begin_edit / begin_create   │ cancel
          ▼                             │
        EDITING ────────────────────────┤
          │       ▲                     │
          │ commit│ remote failure      │
          ▼       │                     │
        COMMITTING ─────────────────────┘
                          saved
    """

    IDLE = "idle"
    EDITING = "editing"
    COMMITTING = "committing"

    def can_transition_to(self, target: "EditState") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _EDIT_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["EditState"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return list(_EDIT_TRANSITIONS.get(self, set()))

    def is_editable(self) -> bool:
        """Check if draft fields and the pending image may be changed.

        Returns:
            True if the session is open for editing.
        """
        return self is EditState.EDITING


class EditMode(str, Enum):
    """Whether the session edits an existing entry or creates a new one."""

    NEW = "new"
    EXISTING = "existing"


# Edit session transitions (defined outside enum to avoid Enum restrictions)
_EDIT_TRANSITIONS: dict[EditState, set[EditState]] = {
    EditState.IDLE: {EditState.EDITING},
    EditState.EDITING: {EditState.COMMITTING, EditState.IDLE},
    EditState.COMMITTING: {EditState.IDLE, EditState.EDITING},
}


def validate_edit_transition(
    session_id: str,
    current_state: EditState,
    target_state: EditState,
) -> None:
    """Validate and raise if an edit session transition is invalid.

    Args:
        session_id: Session identifier for error message.
        current_state: Current session state.
        target_state: Target session state.

    Raises:
        InvalidStateTransitionError: If transition is not valid.
    """
    if not current_state.can_transition_to(target_state):
        raise InvalidStateTransitionError(
            entity_type="EditSession",
            entity_id=session_id,
            current_state=current_state.value,
            target_state=target_state.value,
            allowed_transitions=[s.value for s in current_state.allowed_transitions()],
        )
