"""
Robolang levels
Builds initial simulation states: border walls plus randomly placed blocked cells
"""

import logging
import random
from typing import Iterable, Optional, Set, Tuple

from .world import Cell, Direction, Robot, SimulationState, World, clone_state

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 8
DEFAULT_HEIGHT = 8
DEFAULT_OBSTACLES = 8
DEFAULT_MAX_STEPS = 2000


def add_border_walls(world: World):
    for x in range(world.width):
        world.walls.add((x, 0, Direction.N))
        world.walls.add((x, world.height - 1, Direction.S))
    for y in range(world.height):
        world.walls.add((0, y, Direction.W))
        world.walls.add((world.width - 1, y, Direction.E))


def add_edge_wall(world: World, x: int, y: int, direction: Direction):
    """Block the edge on both sides, when the neighbour is on the grid"""
    world.walls.add((x, y, direction))
    dx, dy = direction.delta
    nx, ny = x + dx, y + dy
    if world.in_bounds(nx, ny):
        world.walls.add((nx, ny, direction.opposite()))


def add_blocked_cell(world: World, x: int, y: int):
    """A blocked cell is enclosed by four walls, so nothing can move into it"""
    for direction in Direction:
        add_edge_wall(world, x, y, direction)


def random_blocked_cells(width: int, height: int, count: int,
                         exclude: Iterable[Cell] = (),
                         forbid_row: Optional[int] = 0,
                         rng: Optional[random.Random] = None) -> Set[Cell]:
    rng = rng or random.Random()
    excluded = set(exclude)
    candidates = [
        (x, y)
        for y in range(height) if y != forbid_row
        for x in range(width) if (x, y) not in excluded
    ]
    rng.shuffle(candidates)
    return set(candidates[:min(count, len(candidates))])


def _build_walls(world: World, blocked: Iterable[Cell]):
    add_border_walls(world)
    for x, y in sorted(blocked):
        add_blocked_cell(world, x, y)


def make_level(width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT,
               obstacles: int = DEFAULT_OBSTACLES, max_steps: int = DEFAULT_MAX_STEPS,
               start: Optional[Tuple[int, int]] = None, direction: Direction = Direction.N,
               seed: Optional[int] = None) -> SimulationState:
    """Start in the bottom-left corner facing north; the win row is row 0"""
    if width <= 0 or height <= 0:
        raise ValueError(f"Grid size must be positive, got {width}x{height}")
    start = start if start is not None else (0, height - 1)
    world = World(width, height)
    rng = random.Random(seed)
    blocked = random_blocked_cells(width, height, obstacles, exclude=[start],
                                   forbid_row=world.win_row, rng=rng)
    _build_walls(world, blocked)
    logger.debug("Built %dx%d level with %d blocked cell(s)", width, height, len(blocked))

    return SimulationState(
        world=world,
        robot=Robot(start[0], start[1], direction, 0),
        max_steps=max_steps,
    )


def make_default_level(seed: Optional[int] = None) -> SimulationState:
    return make_level(seed=seed)


def reroll_obstacles(old: SimulationState, count: int = DEFAULT_OBSTACLES,
                     seed: Optional[int] = None) -> SimulationState:
    """New blocked cells; robot, beepers and step limit are kept, progress is reset"""
    state = clone_state(old)
    world = state.world
    start = (state.robot.x, state.robot.y)
    blocked = random_blocked_cells(world.width, world.height, count, exclude=[start],
                                   forbid_row=world.win_row, rng=random.Random(seed))
    world.walls = set()
    _build_walls(world, blocked)

    state.step_count = 0
    state.log = []
    state.won = False
    return state
