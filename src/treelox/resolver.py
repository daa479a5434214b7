"""
Static name resolution for treelox programs.

Walks the syntax tree once, before execution, and records for every local
variable reference how many scopes separate it from its declaration. The
Interpreter uses that table to read and write locals without searching.
References never found in a local scope are left out of the table and are
looked up as globals at run time.

Static errors are collected rather than raised, so one pass can report all
of them.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Sequence

from .ast import (
    Expression, Statement,
    Literal, Variable, Assign, BinaryOp, LogicalOp, UnaryOp, Grouping,
    Call, GetProperty, SetProperty, This, Super,
    Block, ExpressionStatement, PrintStatement, VarDecl, IfStatement,
    WhileStatement, FunctionDef, ReturnStatement, ClassDef,
)
from .errors import (
    Diagnostic, DiagnosticCollector, ResolveError,
    error_self_initializer, error_duplicate_declaration,
    error_top_level_return, error_this_outside_class,
    error_super_outside_class, error_super_without_superclass,
    error_invalid_assignment_target, error_self_inheritance,
)
from .tokens import Token

logger = logging.getLogger(__name__)


class FunctionKind(Enum):
    """What kind of function body the resolver is inside."""
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassKind(Enum):
    """What kind of class body the resolver is inside."""
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


ResolutionTable = Dict[Expression, int]


@dataclass
class ResolveResult:
    """Result of resolving a program."""
    locals: ResolutionTable = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.diagnostics) > 0


class Resolver:
    """
    Resolves variable references to lexical distances.

    Tracks:
    - A stack of local scopes (innermost last) mapping name -> ready flag
    - The enclosing function and class kinds, for context checks
    """

    def __init__(self):
        self.scopes: List[Dict[str, bool]] = []
        self.locals: ResolutionTable = {}
        self.diagnostics = DiagnosticCollector()
        self._current_function = FunctionKind.NONE
        self._current_class = ClassKind.NONE

    def resolve(self, statements: Sequence[Statement]) -> ResolveResult:
        """Resolve a complete program."""
        self._reset()
        for stmt in statements:
            self._resolve_statement(stmt)

        logger.debug("resolved %d local reference(s), %d error(s)",
                     len(self.locals), self.diagnostics.error_count)
        return ResolveResult(
            locals=dict(self.locals),
            diagnostics=list(self.diagnostics.diagnostics),
        )

    def _reset(self) -> None:
        self.scopes = []
        self.locals = {}
        self.diagnostics.clear()
        self._current_function = FunctionKind.NONE
        self._current_class = ClassKind.NONE

    def _error(self, error: ResolveError) -> None:
        self.diagnostics.add_error(error)

    # =========================================================================
    # Scope Management
    # =========================================================================

    def _begin_scope(self) -> None:
        self.scopes.append({})

    def _end_scope(self) -> None:
        self.scopes.pop()

    def _declare(self, name: Token) -> None:
        """Add a name to the innermost scope, not yet ready for reading."""
        if not self.scopes:
            return  # Globals may be redeclared

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self._error(error_duplicate_declaration(name))
        scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        """Mark a declared name as initialized."""
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def _resolve_local(self, expr: Expression, name: Token) -> None:
        """Record the distance to the innermost scope declaring `name`."""
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = depth
                return
        # Not found: assumed global

    def _resolve_function(self, function: FunctionDef, kind: FunctionKind) -> None:
        enclosing_function = self._current_function
        self._current_function = kind

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        for stmt in function.body:
            self._resolve_statement(stmt)
        self._end_scope()

        self._current_function = enclosing_function

    # =========================================================================
    # Statements
    # =========================================================================

    def _resolve_statement(self, stmt: Statement) -> None:
        if isinstance(stmt, Block):
            self._begin_scope()
            for inner in stmt.statements:
                self._resolve_statement(inner)
            self._end_scope()
        elif isinstance(stmt, VarDecl):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expression(stmt.initializer)
            self._define(stmt.name)
        elif isinstance(stmt, FunctionDef):
            # Defined before the body so the function can call itself
            self._declare(stmt.name)
            self._define(stmt.name)
            self._resolve_function(stmt, FunctionKind.FUNCTION)
        elif isinstance(stmt, ClassDef):
            self._resolve_class(stmt)
        elif isinstance(stmt, ExpressionStatement):
            self._resolve_expression(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            self._resolve_expression(stmt.expression)
        elif isinstance(stmt, IfStatement):
            self._resolve_expression(stmt.condition)
            self._resolve_statement(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_statement(stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            self._resolve_expression(stmt.condition)
            self._resolve_statement(stmt.body)
        elif isinstance(stmt, ReturnStatement):
            if self._current_function == FunctionKind.NONE:
                self._error(error_top_level_return(stmt.keyword))
            if stmt.value is not None:
                self._resolve_expression(stmt.value)
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")

    def _resolve_class(self, stmt: ClassDef) -> None:
        enclosing_class = self._current_class
        self._current_class = ClassKind.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._error(error_self_inheritance(stmt.superclass.name))
            self._current_class = ClassKind.SUBCLASS
            self._resolve_expression(stmt.superclass)

            # Methods of a subclass close over a scope holding `super`
            self._begin_scope()
            self.scopes[-1]["super"] = True

        self._begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionKind.METHOD
            if method.name.lexeme == "init":
                kind = FunctionKind.INITIALIZER
            self._resolve_function(method, kind)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self._current_class = enclosing_class

    # =========================================================================
    # Expressions
    # =========================================================================

    def _resolve_expression(self, expr: Expression) -> None:
        if isinstance(expr, Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self._error(error_self_initializer(expr.name))
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, Assign):
            self._resolve_expression(expr.value)
            if isinstance(expr.target, Variable):
                self._resolve_local(expr, expr.target.name)
            else:
                self._error(error_invalid_assignment_target(expr.equals))
                self._resolve_expression(expr.target)
        elif isinstance(expr, (BinaryOp, LogicalOp)):
            self._resolve_expression(expr.left)
            self._resolve_expression(expr.right)
        elif isinstance(expr, UnaryOp):
            self._resolve_expression(expr.operand)
        elif isinstance(expr, Grouping):
            self._resolve_expression(expr.expression)
        elif isinstance(expr, Call):
            self._resolve_expression(expr.callee)
            for argument in expr.arguments:
                self._resolve_expression(argument)
        elif isinstance(expr, GetProperty):
            # Property names are dynamic; only the object is resolved
            self._resolve_expression(expr.object)
        elif isinstance(expr, SetProperty):
            self._resolve_expression(expr.value)
            self._resolve_expression(expr.object)
        elif isinstance(expr, This):
            if self._current_class == ClassKind.NONE:
                self._error(error_this_outside_class(expr.keyword))
                return
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, Super):
            if self._current_class == ClassKind.NONE:
                self._error(error_super_outside_class(expr.keyword))
            elif self._current_class != ClassKind.SUBCLASS:
                self._error(error_super_without_superclass(expr.keyword))
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, Literal):
            pass
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")


def resolve(statements: Sequence[Statement]) -> ResolveResult:
    """
    Resolve a program with a fresh Resolver.

    This is a convenience wrapper around Resolver.resolve().
    """
    return Resolver().resolve(statements)
