"""
Robolang Standard Library
Built-in actions and condition atoms, bound to the World Engine
"""

from typing import Callable, Dict

from ..ast_nodes import Atom, And, Condition, Not, Or
from ..world import (
    SimulationState,
    beepers_here,
    has_beepers_in_bag,
    is_front_clear,
    is_left_clear,
    is_right_clear,
    move_forward,
    pick_beeper,
    put_beeper,
    turn_left,
    turn_right,
    win_reachable,
)

def robo_obstacle_ahead(state: SimulationState) -> bool:
    """Wall or grid edge directly ahead"""
    return not is_front_clear(state)

def robo_obstacle_left(state: SimulationState) -> bool:
    return not is_left_clear(state)

def robo_obstacle_right(state: SimulationState) -> bool:
    return not is_right_clear(state)

def robo_not_at_line8(state: SimulationState) -> bool:
    """Legacy name for "not won yet"; the win row was the eighth line of the board"""
    return not state.won

def robo_won(state: SimulationState) -> bool:
    return state.won

def get_builtin_actions() -> Dict[str, Callable[[SimulationState], None]]:
    """Get all built-in actions"""
    return {
        'forward': move_forward,
        'turnLeft': turn_left,
        'turnRight': turn_right,
        'pick': pick_beeper,
        'put': put_beeper,
    }

def get_builtin_atoms() -> Dict[str, Callable[[SimulationState], bool]]:
    """Get all built-in condition atoms"""
    return {
        'obstacleAhead': robo_obstacle_ahead,
        'obstacleLeft': robo_obstacle_left,
        'obstacleRight': robo_obstacle_right,
        'notAtLine8': robo_not_at_line8,
        'beepersHere': beepers_here,
        'beeperInBag': has_beepers_in_bag,
        'won': robo_won,
        'winReachable': win_reachable,
    }

ACTIONS = get_builtin_actions()
ATOMS = get_builtin_atoms()

def is_action(name: str) -> bool:
    return name in ACTIONS

def is_atom(name: str) -> bool:
    return name in ATOMS

def apply_action(name: str, state: SimulationState) -> None:
    # Names are validated at parse time; a KeyError here is a programming error.
    ACTIONS[name](state)

def evaluate_condition(cond: Condition, state: SimulationState) -> bool:
    """Evaluate a condition tree against the current state, short-circuiting AND/OR"""
    if isinstance(cond, Atom):
        return ATOMS[cond.name](state)
    if isinstance(cond, Not):
        return not evaluate_condition(cond.inner, state)
    if isinstance(cond, And):
        return evaluate_condition(cond.left, state) and evaluate_condition(cond.right, state)
    if isinstance(cond, Or):
        return evaluate_condition(cond.left, state) or evaluate_condition(cond.right, state)
    raise TypeError(f"Not a condition: {cond!r}")
