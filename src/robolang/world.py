"""
Robolang World Engine
Grid geometry, walls, beepers, robot pose and the actions that mutate them
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set, Tuple

from .errors import RuntimeActionError, RuntimeLimitError

logger = logging.getLogger(__name__)

WIN_MARKER = "WIN"

Cell = Tuple[int, int]


class Direction(Enum):
    N = "N"
    E = "E"
    S = "S"
    W = "W"

    def left(self) -> 'Direction':
        return _LEFT[self]

    def right(self) -> 'Direction':
        return _RIGHT[self]

    def opposite(self) -> 'Direction':
        return _OPPOSITE[self]

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTA[self]


_LEFT = {Direction.N: Direction.W, Direction.W: Direction.S, Direction.S: Direction.E, Direction.E: Direction.N}
_RIGHT = {Direction.N: Direction.E, Direction.E: Direction.S, Direction.S: Direction.W, Direction.W: Direction.N}
_OPPOSITE = {Direction.N: Direction.S, Direction.S: Direction.N, Direction.E: Direction.W, Direction.W: Direction.E}
# Row 0 is the top of the grid, so north decreases y.
_DELTA = {Direction.N: (0, -1), Direction.E: (1, 0), Direction.S: (0, 1), Direction.W: (-1, 0)}


@dataclass
class World:
    width: int
    height: int
    walls: Set[Tuple[int, int, Direction]] = field(default_factory=set)
    beepers: Dict[Cell, int] = field(default_factory=dict)
    win_row: int = 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def beepers_at(self, x: int, y: int) -> int:
        return self.beepers.get((x, y), 0)

    def is_blocked(self, x: int, y: int, direction: Direction) -> bool:
        """True when leaving (x, y) towards `direction` hits a wall or the grid edge."""
        dx, dy = direction.delta
        nx, ny = x + dx, y + dy
        if not self.in_bounds(nx, ny):
            return True
        if (x, y, direction) in self.walls:
            return True
        # Walls may be recorded on one side only.
        return (nx, ny, direction.opposite()) in self.walls


@dataclass
class Robot:
    x: int
    y: int
    direction: Direction = Direction.N
    bag: int = 0


@dataclass
class SimulationState:
    world: World
    robot: Robot
    step_count: int = 0
    max_steps: int = 2000
    log: List[str] = field(default_factory=list)
    won: bool = False

    def clone(self) -> 'SimulationState':
        return clone_state(self)


def clone_state(state: SimulationState) -> SimulationState:
    """Independent copy: no wall set, beeper map, log or robot is shared."""
    world = state.world
    return SimulationState(
        world=World(
            width=world.width,
            height=world.height,
            walls=set(world.walls),
            beepers=dict(world.beepers),
            win_row=world.win_row,
        ),
        robot=Robot(state.robot.x, state.robot.y, state.robot.direction, state.robot.bag),
        step_count=state.step_count,
        max_steps=state.max_steps,
        log=list(state.log),
        won=state.won,
    )


# Sensors

def is_dir_clear(state: SimulationState, direction: Direction) -> bool:
    robot = state.robot
    return not state.world.is_blocked(robot.x, robot.y, direction)


def is_front_clear(state: SimulationState) -> bool:
    return is_dir_clear(state, state.robot.direction)


def is_left_clear(state: SimulationState) -> bool:
    return is_dir_clear(state, state.robot.direction.left())


def is_right_clear(state: SimulationState) -> bool:
    return is_dir_clear(state, state.robot.direction.right())


def beepers_here(state: SimulationState) -> bool:
    return state.world.beepers_at(state.robot.x, state.robot.y) > 0


def has_beepers_in_bag(state: SimulationState) -> bool:
    return state.robot.bag > 0


def win_reachable(state: SimulationState) -> bool:
    """Breadth-first search from the robot's cell to any cell of the win row.

    Recomputed on every call; the robot may have moved since the last query.
    """
    world = state.world
    start = (state.robot.x, state.robot.y)
    visited = {start}
    queue = deque([start])

    while queue:
        x, y = queue.popleft()
        if y == world.win_row:
            return True
        for direction in Direction:
            if world.is_blocked(x, y, direction):
                continue
            dx, dy = direction.delta
            nxt = (x + dx, y + dy)
            if nxt not in visited:
                visited.add(nxt)
                queue.append(nxt)

    return False


# Actions

def _step_guard(state: SimulationState):
    # The counter stays frozen at the limit once it is reached.
    if state.step_count >= state.max_steps:
        raise RuntimeLimitError(f"Step limit of {state.max_steps} reached", 'STEP_LIMIT')
    state.step_count += 1


def _check_win(state: SimulationState):
    if not state.won and state.robot.y == state.world.win_row:
        state.won = True
        state.log.append(WIN_MARKER)
        logger.info("Win row reached at (%d, %d) after %d steps",
                    state.robot.x, state.robot.y, state.step_count)


def move_forward(state: SimulationState):
    _step_guard(state)
    if not is_front_clear(state):
        raise RuntimeActionError("Move blocked", 'MOVE_BLOCKED')
    dx, dy = state.robot.direction.delta
    state.robot.x += dx
    state.robot.y += dy
    _check_win(state)


def turn_left(state: SimulationState):
    _step_guard(state)
    state.robot.direction = state.robot.direction.left()


def turn_right(state: SimulationState):
    _step_guard(state)
    state.robot.direction = state.robot.direction.right()


def pick_beeper(state: SimulationState):
    _step_guard(state)
    cell = (state.robot.x, state.robot.y)
    count = state.world.beepers.get(cell, 0)
    if count <= 0:
        raise RuntimeActionError("No beeper here", 'NO_BEEPER_HERE')
    state.world.beepers[cell] = count - 1
    state.robot.bag += 1


def put_beeper(state: SimulationState):
    _step_guard(state)
    if state.robot.bag <= 0:
        raise RuntimeActionError("No beeper in bag", 'NO_BEEPER_IN_BAG')
    cell = (state.robot.x, state.robot.y)
    state.world.beepers[cell] = state.world.beepers.get(cell, 0) + 1
    state.robot.bag -= 1
