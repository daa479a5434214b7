"""
treelox - a tree-walking interpreter core for a small scripting language.

This package provides:
- Syntax tree: Immutable expression and statement nodes
- Resolver: Static pass mapping variable references to scope distances
- Interpreter: Executes resolved programs against an environment chain
- Runtime objects: Functions with closures, classes and instances

Scanning and parsing happen outside this package; programs arrive as
syntax trees.

Usage:
    from treelox import resolve, Interpreter

    result = resolve(program)
    if result.has_errors:
        for diag in result.diagnostics:
            print(diag.format())
    else:
        Interpreter().interpret(program, result.locals)
"""

from importlib.metadata import PackageNotFoundError, version

from .tokens import (
    Token,
    TokenType,
    KEYWORDS,
)

from .ast import (
    # Base
    AstNode,
    AstVisitor,
    Expression,
    Statement,
    # Expressions
    Literal,
    Variable,
    Assign,
    BinaryOp,
    LogicalOp,
    UnaryOp,
    Grouping,
    Call,
    GetProperty,
    SetProperty,
    This,
    Super,
    # Statements
    Block,
    ExpressionStatement,
    PrintStatement,
    VarDecl,
    IfStatement,
    WhileStatement,
    FunctionDef,
    ReturnStatement,
    ClassDef,
    # Helpers
    AstPrinter,
    format_ast,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    LoxError,
    ResolveError,
    LoxRuntimeError,
    InternalError,
)

from .config import (
    InterpreterConfig,
)

from .resolver import (
    Resolver,
    ResolveResult,
    resolve,
)

from .runtime import (
    Environment,
    Interpreter,
    ExecutionResult,
    Session,
    execute,
    LoxCallable,
    LoxFunction,
    LoxClass,
    LoxInstance,
    NativeFunction,
    stringify,
)

try:
    __version__ = version("treelox")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'KEYWORDS',

    # Syntax tree
    'AstNode',
    'AstVisitor',
    'Expression',
    'Statement',
    'Literal',
    'Variable',
    'Assign',
    'BinaryOp',
    'LogicalOp',
    'UnaryOp',
    'Grouping',
    'Call',
    'GetProperty',
    'SetProperty',
    'This',
    'Super',
    'Block',
    'ExpressionStatement',
    'PrintStatement',
    'VarDecl',
    'IfStatement',
    'WhileStatement',
    'FunctionDef',
    'ReturnStatement',
    'ClassDef',
    'AstPrinter',
    'format_ast',

    # Errors
    'ErrorSeverity',
    'Diagnostic',
    'DiagnosticCollector',
    'LoxError',
    'ResolveError',
    'LoxRuntimeError',
    'InternalError',

    # Config
    'InterpreterConfig',

    # Resolver
    'Resolver',
    'ResolveResult',
    'resolve',

    # Runtime
    'Environment',
    'Interpreter',
    'ExecutionResult',
    'Session',
    'execute',
    'LoxCallable',
    'LoxFunction',
    'LoxClass',
    'LoxInstance',
    'NativeFunction',
    'stringify',
]
