"""
treelox runtime - Tree-walking interpreter and object model.

This module provides:
- Interpreter: Executes resolved programs
- Environment: Lexical scope chain
- LoxFunction, LoxClass, LoxInstance: Runtime objects
- NativeRegistry: Host-provided functions
- Session: Runs successive programs against persistent globals
"""

from .environment import (
    Environment,
)

from .values import (
    LoxCallable,
    LoxFunction,
    LoxClass,
    LoxInstance,
    Return,
    is_truthy,
    is_equal,
    is_number,
    stringify,
    type_name,
)

from .builtins import (
    NativeFunction,
    NativeRegistry,
    get_native_registry,
)

from .interpreter import (
    Interpreter,
    ExecutionResult,
    Session,
    execute,
)

__all__ = [
    # Environment
    'Environment',

    # Values
    'LoxCallable',
    'LoxFunction',
    'LoxClass',
    'LoxInstance',
    'Return',
    'is_truthy',
    'is_equal',
    'is_number',
    'stringify',
    'type_name',

    # Natives
    'NativeFunction',
    'NativeRegistry',
    'get_native_registry',

    # Interpreter
    'Interpreter',
    'ExecutionResult',
    'Session',
    'execute',
]
