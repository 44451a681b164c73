"""
Robolang
A small language for steering a robot across a grid towards the win row.
"""

from .ast_nodes import (
    ActionStatement,
    And,
    Atom,
    IfStatement,
    Not,
    Or,
    WhileLoop,
    ast_to_dict,
    condition_to_text,
    pretty_print_program,
)
from .compiler import Act, BranchIfFalse, Jump, compile_program, disassemble
from .config import RunConfig, load_config
from .document import load_document, parse_condition_expression, parse_document
from .errors import (
    LexicalError,
    ParseError,
    RoboError,
    RuntimeActionError,
    RuntimeLimitError,
    SchemaError,
    SemanticError,
    format_error,
)
from .interpreter import Interpreter
from .levels import make_default_level, make_level, reroll_obstacles
from .parser import parse_file, parse_program
from .session import Session
from .vm import VM, StepResult, TraceEvent, run_to_completion
from .world import Direction, Robot, SimulationState, World, clone_state

__version__ = "0.1.0"

__all__ = [
    'Act',
    'ActionStatement',
    'And',
    'Atom',
    'BranchIfFalse',
    'Direction',
    'IfStatement',
    'Interpreter',
    'Jump',
    'LexicalError',
    'Not',
    'Or',
    'ParseError',
    'RoboError',
    'Robot',
    'RunConfig',
    'RuntimeActionError',
    'RuntimeLimitError',
    'SchemaError',
    'SemanticError',
    'Session',
    'SimulationState',
    'StepResult',
    'TraceEvent',
    'VM',
    'WhileLoop',
    'World',
    'ast_to_dict',
    'clone_state',
    'compile_program',
    'condition_to_text',
    'disassemble',
    'format_error',
    'load_config',
    'load_document',
    'make_default_level',
    'make_level',
    'parse_condition_expression',
    'parse_document',
    'parse_file',
    'parse_program',
    'pretty_print_program',
    'reroll_obstacles',
    'run_to_completion',
]
