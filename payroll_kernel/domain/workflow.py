"""
Canonical workflow types (``payroll_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for lifecycle state machines, plus the single lookup
that resolves ``(current_state, action)`` to a transition.  The payroll
approval lifecycle is declared with these types in
``payroll_modules.payroll.workflows``.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Each (state, action) pair resolves to at most one transition.
* An action not declared for the current state raises
  ``InvalidTransitionError``; nothing is inferred.
"""

from __future__ import annotations

from dataclasses import dataclass

from payroll_kernel.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Descriptive only; the service evaluates the condition.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow.

    ``stamps_approval=True`` marks transitions that set approved_at and
    approved_by; ``clears_approval=True`` marks those that clear them.
    """
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    stamps_approval: bool = False
    clears_approval: bool = False

    def __post_init__(self) -> None:
        if self.stamps_approval and self.clears_approval:
            raise ValueError(
                f"Transition '{self.action}' cannot both stamp and clear approval"
            )


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    ``terminal_states`` are states with no outgoing transitions (optional).
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow '{self.name}': initial_state '{self.initial_state}' "
                f"is not one of {self.states}"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow '{self.name}': transition {t.from_state} -> "
                    f"{t.to_state} references an unknown state"
                )
        seen: set[tuple[str, str]] = set()
        for t in self.transitions:
            key = (t.from_state, t.action)
            if key in seen:
                raise ValueError(
                    f"Workflow '{self.name}': action '{t.action}' is declared twice "
                    f"from state '{t.from_state}'"
                )
            seen.add(key)
        for state in self.terminal_states:
            if self.actions_from(state):
                raise ValueError(
                    f"Workflow '{self.name}': terminal state '{state}' has outgoing actions"
                )

    def actions_from(self, state: str) -> tuple[str, ...]:
        """Actions available from ``state``, in declaration order."""
        return tuple(t.action for t in self.transitions if t.from_state == state)

    def resolve(self, current_state: str, action: str) -> Transition:
        """Return the transition for ``action`` from ``current_state``.

        Raises:
            InvalidTransitionError: if the workflow declares no such transition.
        """
        for t in self.transitions:
            if t.from_state == current_state and t.action == action:
                return t
        raise InvalidTransitionError(current_state=current_state, action=action)
