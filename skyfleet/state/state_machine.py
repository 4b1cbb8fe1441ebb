"""State machine implementation for managing validated state transitions.

This module provides a finite state machine that enforces transition rules and
executes the action attached to a transition when it happens. The ride-offer
lifecycle of the simulated driver is built on it.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

State = TypeVar("State", bound=Enum)
"""Type variable for state enumerations that extend Enum."""

ActionFn = Callable[..., Any]
"""Type alias for action effect functions."""

StateGraph = Mapping[Enum, Iterable["Action"]]
"""Mapping from each state to the actions allowed out of it."""


@dataclass(frozen=True)
class Action:
    """A transition to ``state`` with an optional effect.

    Attributes:
        state: The target state this action transitions to.
        effect: Optional function to execute when this action is performed.
    """

    state: Enum
    effect: ActionFn | None = None

    def __call__(self, *args, **kwargs) -> Any:
        """Execute the action's effect function if it exists.

        Returns:
            The result of the effect function, or None if no effect is defined.
        """
        if self.effect:
            return self.effect(*args, **kwargs)
        return None


class StateMachine:
    """A finite state machine that validates transitions against a graph.

    The current state is updated before the transition's effect runs, so effects
    observe the state they are entering.

    Attributes:
        _state: The current state of the state machine.
        _allowed: Mapping of states to their allowed transitions.
    """

    _allowed: StateGraph
    _state: Enum

    def __init__(self, initial_state: Enum, nodes_graph: StateGraph):
        """Initialize the state machine with an initial state and transition rules.

        Args:
            initial_state: The starting state for the state machine.
            nodes_graph: Mapping from each state to its allowed actions.
        """
        self._state = initial_state
        self._allowed = nodes_graph

    def request_transition(self, next_state: Enum, *args, **kwargs) -> Any:
        """Request a state transition to the specified next state.

        Returns:
            The result of executing the transition action's effect function,
            or None if the action has no effect.

        Raises:
            ValueError: If the transition from the current state to next_state
                       is not allowed by the state machine rules.
        """
        next_action = self._validate_transition(self._state, next_state)
        self._state = next_action.state
        return next_action(*args, **kwargs)

    def can_transition(self, next_state: Enum) -> bool:
        """Return True if ``next_state`` is reachable from the current state."""
        return any(action.state == next_state for action in self._allowed.get(self._state, ()))

    @property
    def current(self) -> Enum:
        """Get the current state of the state machine."""
        return self._state

    def get_state_list(self) -> list[Enum]:
        """Return every state that appears in the transition graph."""
        states: list[Enum] = []
        for frm, actions in self._allowed.items():
            for state in (frm, *(action.state for action in actions)):
                if state not in states:
                    states.append(state)
        return states

    def _validate_transition(self, frm: Enum, to: Enum) -> Action:
        """Find the action that moves ``frm`` to ``to``.

        Raises:
            ValueError: If no valid transition exists from frm to to.
        """
        for action in self._allowed.get(frm, ()):
            if action.state == to:
                return action

        msg = f"Illegal transition {frm.name} -> {to.name}"
        raise ValueError(msg)
