from .builtin_functions import (
    ACTIONS,
    ATOMS,
    apply_action,
    evaluate_condition,
    get_builtin_actions,
    get_builtin_atoms,
    is_action,
    is_atom,
)

__all__ = [
    'ACTIONS',
    'ATOMS',
    'apply_action',
    'evaluate_condition',
    'get_builtin_actions',
    'get_builtin_atoms',
    'is_action',
    'is_atom',
]
