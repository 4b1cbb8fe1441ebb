"""
Tests for the validated state machine.
"""

import unittest
from enum import Enum, auto

from skyfleet.state import Action, StateMachine


class Light(Enum):
    RED = auto()
    GREEN = auto()
    YELLOW = auto()


class TestStateMachine(unittest.TestCase):
    """Test transition validation and effects."""

    def setUp(self):
        self.entered = []
        self.machine = StateMachine(
            Light.RED,
            {
                Light.RED: [Action(Light.GREEN, lambda: self.entered.append(self.machine.current))],
                Light.GREEN: [Action(Light.YELLOW)],
                Light.YELLOW: [Action(Light.RED)],
            },
        )

    def test_allowed_transition_runs_effect(self):
        """Test the effect runs after the state is updated."""
        self.machine.request_transition(Light.GREEN)
        self.assertEqual(self.machine.current, Light.GREEN)
        self.assertEqual(self.entered, [Light.GREEN])

    def test_illegal_transition(self):
        """Test an illegal transition raises and keeps the state."""
        with self.assertRaises(ValueError):
            self.machine.request_transition(Light.YELLOW)
        self.assertEqual(self.machine.current, Light.RED)

    def test_can_transition(self):
        """Test reachability checks against the graph."""
        self.assertTrue(self.machine.can_transition(Light.GREEN))
        self.assertFalse(self.machine.can_transition(Light.YELLOW))

    def test_effect_result_returned(self):
        """Test the action's effect result is returned."""
        action = Action(Light.GREEN, lambda x: x * 2)
        self.assertEqual(action(21), 42)
        self.assertIsNone(Action(Light.GREEN)())

    def test_state_list(self):
        """Test every state of the graph is listed once."""
        self.assertEqual(self.machine.get_state_list(), [Light.RED, Light.GREEN, Light.YELLOW])


if __name__ == "__main__":
    unittest.main()
