"""
Robolang command line
Main entry point: run, check, tokens and dump subcommands
"""

import argparse
import logging
import sys
from typing import List, Optional

from .ast_nodes import pretty_print_program
from .compiler import compile_program, disassemble
from .config import load_config
from .errors import RoboError, format_error
from .lexer import Lexer
from .levels import make_level
from .parser import parse_program
from .session import Session
from .world import Direction, SimulationState

logger = logging.getLogger(__name__)

_ROBOT_GLYPHS = {Direction.N: '^', Direction.E: '>', Direction.S: 'v', Direction.W: '<'}


def format_world(state: SimulationState) -> str:
    """Plain-text grid: robot arrow, beeper counts, '#' for enclosed cells"""
    world = state.world
    rows = []
    for y in range(world.height):
        row = []
        for x in range(world.width):
            if (x, y) == (state.robot.x, state.robot.y):
                row.append(_ROBOT_GLYPHS[state.robot.direction])
            elif all(world.is_blocked(x, y, d) for d in Direction):
                row.append('#')
            elif world.beepers_at(x, y):
                row.append(str(min(world.beepers_at(x, y), 9)))
            else:
                row.append('.')
        marker = ' <- win' if y == world.win_row else ''
        rows.append(' '.join(row) + marker)
    return '\n'.join(rows)


def read_source(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def cmd_tokens(args, source: str) -> int:
    for token in Lexer(source).tokenize():
        print(f"{token.line:4d}:{token.column:<3d} {token.type.name:<12} {token.value!r}")
    return 0


def cmd_check(args, source: str) -> int:
    statements = parse_program(source)
    print(pretty_print_program(statements))
    return 0


def cmd_dump(args, source: str) -> int:
    print(disassemble(compile_program(parse_program(source))))
    return 0


def cmd_run(args, source: str) -> int:
    config = load_config(args.config).merged(
        width=args.width,
        height=args.height,
        obstacles=args.obstacles,
        max_steps=args.max_steps,
        seed=args.seed,
        trace=True if args.trace else None,
    )
    state = make_level(config.width, config.height, config.obstacles, config.max_steps, seed=config.seed)
    session = Session(state, max_instructions=config.max_instructions)
    session.load(source)

    if config.trace:
        print(format_world(session.state))
        while not session.done:
            result = session.step()
            robot = session.state.robot
            print(f"line {result.line}: robot at ({robot.x}, {robot.y}) facing {robot.direction.value}, "
                  f"steps {session.state.step_count}")
    else:
        session.run()

    print(format_world(session.state))
    if session.state.won:
        print(f"Won after {session.state.step_count} step(s)")
    else:
        print(f"Program finished without reaching the win row ({session.state.step_count} step(s))")
    return 0


COMMANDS = {
    'run': cmd_run,
    'check': cmd_check,
    'tokens': cmd_tokens,
    'dump': cmd_dump,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='robolang', description='Grid robot language toolchain')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='cmd', help='subcommands')

    p_run = sub.add_parser('run', help='Run a program on a generated level')
    p_run.add_argument('file', help='Program file (text or JSON)')
    p_run.add_argument('--config', help='Config file (json/toml)')
    p_run.add_argument('--width', type=int, help='Grid width')
    p_run.add_argument('--height', type=int, help='Grid height')
    p_run.add_argument('--obstacles', type=int, help='Number of blocked cells')
    p_run.add_argument('--max-steps', type=int, help='Step limit for actions')
    p_run.add_argument('--seed', type=int, help='Seed for obstacle placement')
    p_run.add_argument('--trace', action='store_true', help='Print every executed step')

    for name, help_text in (('check', 'Parse a program and print its statement tree'),
                            ('tokens', 'Print the token stream of a program'),
                            ('dump', 'Print the compiled instructions')):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('file', help='Program file')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    if not args.cmd:
        parser.print_usage()
        return 1

    try:
        source = read_source(args.file)
    except FileNotFoundError:
        print(f"Error: File '{args.file}' not found", file=sys.stderr)
        return 1

    try:
        return COMMANDS[args.cmd](args, source)
    except RoboError as e:
        print(format_error(e, source), file=sys.stderr)
        return 1
    except ValueError as e:
        # bad grid size or config contents
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
