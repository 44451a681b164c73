#!/usr/bin/env python3
"""
Robolang Tests
World engine, compiler, stepping VM and the reference interpreter
"""

import unittest
import sys
from pathlib import Path

# Add src directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from robolang.ast_nodes import Atom
from robolang.compiler import Act, BranchIfFalse, Jump, compile_program, disassemble
from robolang.errors import RuntimeActionError, RuntimeLimitError
from robolang.interpreter import Interpreter
from robolang.levels import add_blocked_cell, add_border_walls, add_edge_wall
from robolang.parser import parse_program
from robolang.stdlib import evaluate_condition
from robolang.vm import VM, run_to_completion
from robolang.world import (
    WIN_MARKER,
    Direction,
    Robot,
    SimulationState,
    World,
    move_forward,
    pick_beeper,
    put_beeper,
    turn_left,
    turn_right,
    win_reachable,
)


def open_grid(width=8, height=8, x=0, y=7, direction=Direction.N, max_steps=2000) -> SimulationState:
    world = World(width, height)
    add_border_walls(world)
    return SimulationState(world=world, robot=Robot(x, y, direction), max_steps=max_steps)


def wrap(body: str) -> str:
    return f"program main {{\n{body}\n}}\nactive = main."


def run_text(body: str, state: SimulationState):
    vm = VM(compile_program(parse_program(wrap(body))))
    return run_to_completion(vm, state)


class TestWorld(unittest.TestCase):

    def test_walk_to_win_row(self):
        state = open_grid()
        for _ in range(4):
            move_forward(state)
        self.assertEqual((state.robot.x, state.robot.y), (0, 3))
        self.assertFalse(state.won)

        for expected_row in (2, 1):
            move_forward(state)
            self.assertEqual(state.robot.y, expected_row)
            self.assertFalse(state.won)

        move_forward(state)
        self.assertEqual(state.robot.y, 0)
        self.assertTrue(state.won)
        self.assertEqual(state.log, [WIN_MARKER])

        turn_right(state)
        move_forward(state)
        self.assertEqual(state.log, [WIN_MARKER])
        self.assertEqual(state.step_count, 9)

    def test_move_into_enclosed_cell(self):
        world = World(3, 3)
        add_border_walls(world)
        add_blocked_cell(world, 1, 0)
        state = SimulationState(world=world, robot=Robot(1, 1, Direction.N))

        with self.assertRaises(RuntimeActionError) as cm:
            move_forward(state)
        self.assertEqual(cm.exception.code, 'MOVE_BLOCKED')
        self.assertEqual(state.step_count, 1)
        self.assertEqual((state.robot.x, state.robot.y), (1, 1))

    def test_move_off_grid(self):
        world = World(2, 2)
        state = SimulationState(world=world, robot=Robot(0, 1, Direction.W))
        with self.assertRaises(RuntimeActionError):
            move_forward(state)

    def test_one_sided_wall_blocks_both_ways(self):
        world = World(3, 3)
        world.walls.add((1, 1, Direction.E))
        self.assertTrue(world.is_blocked(1, 1, Direction.E))
        self.assertTrue(world.is_blocked(2, 1, Direction.W))
        self.assertFalse(world.is_blocked(1, 1, Direction.W))

    def test_beepers(self):
        state = open_grid()
        state.world.beepers[(0, 7)] = 1
        pick_beeper(state)
        self.assertEqual(state.robot.bag, 1)
        self.assertEqual(state.world.beepers_at(0, 7), 0)

        with self.assertRaises(RuntimeActionError) as cm:
            pick_beeper(state)
        self.assertEqual(cm.exception.code, 'NO_BEEPER_HERE')

        put_beeper(state)
        with self.assertRaises(RuntimeActionError) as cm:
            put_beeper(state)
        self.assertEqual(cm.exception.code, 'NO_BEEPER_IN_BAG')
        self.assertEqual(state.step_count, 4)

    def test_step_limit_freezes_counter(self):
        state = open_grid(max_steps=3)
        for _ in range(3):
            turn_left(state)
        with self.assertRaises(RuntimeLimitError) as cm:
            turn_left(state)
        self.assertEqual(cm.exception.code, 'STEP_LIMIT')
        self.assertEqual(state.step_count, 3)
        self.assertEqual(state.robot.direction, Direction.E)

    def test_win_reachable_around_obstacles(self):
        state = open_grid()
        add_blocked_cell(state.world, 0, 6)
        add_blocked_cell(state.world, 1, 6)
        self.assertTrue(win_reachable(state))
        self.assertTrue(evaluate_condition(Atom('winReachable'), state))

    def test_win_unreachable_from_pocket(self):
        state = open_grid()
        for x in range(state.world.width):
            add_edge_wall(state.world, x, 4, Direction.N)
        self.assertFalse(win_reachable(state))

        state.robot.y = 3
        self.assertTrue(win_reachable(state))

    def test_win_unreachable_when_enclosed(self):
        state = open_grid(x=3, y=5)
        add_blocked_cell(state.world, 3, 5)
        self.assertFalse(win_reachable(state))

    def test_clone_shares_nothing(self):
        state = open_grid()
        state.world.beepers[(1, 1)] = 2
        copy = state.clone()

        move_forward(copy)
        copy.world.walls.add((4, 4, Direction.N))
        copy.world.beepers[(1, 1)] = 0
        copy.log.append('x')

        self.assertEqual((state.robot.x, state.robot.y), (0, 7))
        self.assertEqual(state.step_count, 0)
        self.assertNotIn((4, 4, Direction.N), state.world.walls)
        self.assertEqual(state.world.beepers[(1, 1)], 2)
        self.assertEqual(state.log, [])


class TestCompiler(unittest.TestCase):

    def test_if_else_layout(self):
        statements = parse_program(wrap("if (obstacleAhead) { turnRight } else { forward }"))
        ops = compile_program(statements)
        self.assertEqual(ops, [
            BranchIfFalse(Atom('obstacleAhead'), 3, 2),
            Act('turnRight', 2),
            Jump(4, 2),
            Act('forward', 2),
        ])
        self.assertEqual(sum(isinstance(op, BranchIfFalse) for op in ops), 1)

    def test_if_without_else(self):
        ops = compile_program(parse_program(wrap("if won { pick }\nforward")))
        self.assertEqual(ops[0].target, 3)
        self.assertEqual(ops[2], Jump(3, 2))
        self.assertEqual(ops[3], Act('forward', 3))

    def test_while_layout(self):
        ops = compile_program(parse_program(wrap("turnLeft\nwhile !obstacleAhead { forward }")))
        self.assertEqual(ops[1].target, 4)
        self.assertEqual(ops[2], Act('forward', 3))
        self.assertEqual(ops[3], Jump(1, 3))

    def test_disassemble(self):
        text = disassemble(compile_program(parse_program(wrap("if obstacleAhead { turnRight } else { forward }"))))
        self.assertIn('JUMP_IF_FALSE obstacleAhead -> 3', text)
        self.assertIn('ACT turnRight', text)
        self.assertIn('JUMP 4', text)


class TestVM(unittest.TestCase):

    def test_empty_program_is_done(self):
        vm = VM([])
        self.assertTrue(vm.done)
        result = vm.step(open_grid())
        self.assertIsNone(result.line)
        self.assertIsNone(vm.current_line)

    def test_step_results(self):
        state = open_grid()
        vm = VM(compile_program(parse_program(wrap("if obstacleAhead {\n  turnRight\n} else {\n  forward\n}"))))
        self.assertEqual(vm.current_line, 2)

        first = vm.step(state)
        self.assertEqual(first.line, 2)
        self.assertFalse(first.branch_taken)
        self.assertEqual(vm.pc, 3)

        second = vm.step(state)
        self.assertEqual(second.line, 5)
        self.assertEqual(second.instruction, Act('forward', 5))
        self.assertTrue(vm.done)
        self.assertEqual(state.robot.y, 6)

    def test_copy_is_independent(self):
        vm = VM(compile_program(parse_program(wrap("forward\nforward"))))
        other = vm.copy()
        vm.step(open_grid())
        self.assertEqual(vm.pc, 1)
        self.assertEqual(other.pc, 0)

    def test_run_until_win(self):
        state = open_grid()
        trace = run_text("while notAtLine8 {\n  forward\n}\nturnLeft", state)
        self.assertTrue(state.won)
        self.assertEqual(state.step_count, 7)
        self.assertEqual([e.detail for e in trace if e.kind == 'act'], ['forward'] * 7)
        self.assertEqual(state.log, [WIN_MARKER])

    def test_blocked_move_keeps_pc(self):
        world = World(3, 3)
        add_border_walls(world)
        add_blocked_cell(world, 1, 0)
        state = SimulationState(world=world, robot=Robot(1, 1, Direction.N))
        vm = VM(compile_program(parse_program(wrap("forward"))))

        with self.assertRaises(RuntimeActionError) as cm:
            vm.step(state)
        self.assertEqual(cm.exception.code, 'MOVE_BLOCKED')
        self.assertEqual(state.step_count, 1)
        self.assertEqual(vm.pc, 0)
        self.assertEqual(vm.current_line, 2)

    def test_endless_turning_hits_step_limit(self):
        state = open_grid(max_steps=50)
        with self.assertRaises(RuntimeLimitError) as cm:
            run_text("while !won {\n  turnLeft\n}", state)
        self.assertEqual(cm.exception.code, 'STEP_LIMIT')
        self.assertEqual(state.step_count, 50)

    def test_loop_without_actions_hits_instruction_limit(self):
        vm = VM(compile_program(parse_program(wrap("while !won {\n  if won { forward }\n}"))))
        with self.assertRaises(RuntimeLimitError) as cm:
            run_to_completion(vm, open_grid(), max_instructions=100)
        self.assertEqual(cm.exception.code, 'INSTRUCTION_LIMIT')

    def test_won_state_does_not_run(self):
        state = open_grid()
        state.won = True
        vm = VM(compile_program(parse_program(wrap("forward"))))
        self.assertEqual(run_to_completion(vm, state), [])
        self.assertEqual(state.step_count, 0)


class TestInterpreter(unittest.TestCase):

    WALL_FOLLOWER = (
        "while !won {\n"
        "  if !obstacleLeft {\n"
        "    turnLeft\n"
        "    forward\n"
        "  } else if !obstacleAhead {\n"
        "    forward\n"
        "  } else {\n"
        "    turnRight\n"
        "  }\n"
        "}"
    )

    def maze(self) -> SimulationState:
        state = open_grid()
        add_blocked_cell(state.world, 0, 3)
        return state

    def test_matches_vm_trace(self):
        statements = parse_program(wrap(self.WALL_FOLLOWER))

        vm_state = self.maze()
        vm_trace = run_to_completion(VM(compile_program(statements)), vm_state)

        walk_state = self.maze()
        walk_trace = Interpreter().interpret(statements, walk_state)

        self.assertTrue(vm_state.won)
        self.assertEqual(vm_trace, walk_trace)
        self.assertEqual(vm_state.robot, walk_state.robot)
        self.assertEqual(vm_state.step_count, walk_state.step_count)

    def test_runtime_errors_propagate(self):
        statements = parse_program(wrap("pick"))
        with self.assertRaises(RuntimeActionError):
            Interpreter().interpret(statements, open_grid())

    def test_instruction_limit(self):
        statements = parse_program(wrap("while !won {\n  if won { forward }\n}"))
        with self.assertRaises(RuntimeLimitError) as cm:
            Interpreter(max_evaluations=100).interpret(statements, open_grid())
        self.assertEqual(cm.exception.code, 'INSTRUCTION_LIMIT')


if __name__ == '__main__':
    unittest.main()
