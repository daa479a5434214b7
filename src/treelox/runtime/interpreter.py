"""
Tree-walking interpreter for treelox programs.

Executes statements and evaluates expressions against the current
environment, using the Resolver's table to reach local variables.
"""

from __future__ import annotations

import logging
import math
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TextIO

from .builtins import get_native_registry
from .environment import Environment
from .values import (
    LoxCallable, LoxClass, LoxFunction, LoxInstance, Return,
    is_equal, is_number, is_truthy, stringify, type_name,
)

from ..ast import (
    Expression, Statement,
    Literal, Variable, Assign, BinaryOp, LogicalOp, UnaryOp, Grouping,
    Call, GetProperty, SetProperty, This, Super,
    Block, ExpressionStatement, PrintStatement, VarDecl, IfStatement,
    WhileStatement, FunctionDef, ReturnStatement, ClassDef,
)
from ..config import InterpreterConfig
from ..errors import (
    Diagnostic, LoxRuntimeError,
    error_number_operand, error_number_operands, error_plus_operands,
    error_not_callable, error_arity, error_superclass_not_class,
    error_property_on_non_instance, error_field_on_non_instance,
    error_stack_overflow, error_undefined_property,
)
from ..resolver import ResolutionTable, Resolver
from ..tokens import Token, TokenType

logger = logging.getLogger(__name__)

# Host stack frames consumed per nested call, with headroom for deep expressions
_FRAMES_PER_CALL = 32


def _print_to_stdout(text: str) -> None:
    print(text)


@contextmanager
def _recursion_headroom(frames: int) -> Iterator[None]:
    """Temporarily raise the host recursion limit to at least `frames`."""
    previous = sys.getrecursionlimit()
    if frames > previous:
        sys.setrecursionlimit(frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Interpreter:
    """
    Tree-walking interpreter.

    Mutable state is the current environment, the globals, and the
    resolution entries accumulated from every program it has been given.
    """

    def __init__(
        self,
        output: Optional[Callable[[str], None]] = None,
        error_reporter: Optional[Callable[[LoxRuntimeError], None]] = None,
        config: Optional[InterpreterConfig] = None,
    ):
        """
        Initialize the interpreter.

        Args:
            output: Sink receiving one string per `print` statement
            error_reporter: Callback receiving each runtime error
            config: Interpreter settings; defaults apply when omitted
        """
        self.config = config or InterpreterConfig()
        self.output = output or _print_to_stdout
        self.error_reporter = error_reporter or self._report_to_stderr

        self.globals = Environment()
        self.environment = self.globals
        self.locals: ResolutionTable = {}
        self._call_depth = 0

        get_native_registry().install(self.globals, self.config.natives)

    def _report_to_stderr(self, error: LoxRuntimeError) -> None:
        print(error.diagnostic.format(self.config.show_source_in_errors), file=sys.stderr)

    # =========================================================================
    # Entry Points
    # =========================================================================

    def interpret(self, statements: Sequence[Statement], resolution: Optional[ResolutionTable] = None) -> bool:
        """
        Execute a program.

        Resolution entries are merged into the table kept from earlier runs,
        since functions defined by an earlier program may still be called.
        A runtime error stops this program, is reported once, and leaves the
        interpreter ready for the next call.

        Returns:
            True if the program ran to completion
        """
        if resolution:
            self.locals.update(resolution)

        logger.debug("interpreting %d statement(s)", len(statements))
        limit = self.config.max_call_depth * _FRAMES_PER_CALL + sys.getrecursionlimit()
        try:
            with _recursion_headroom(limit):
                for stmt in statements:
                    self._execute(stmt)
        except LoxRuntimeError as error:
            logger.debug("runtime error on line %d: %s", error.token.line, error)
            self.error_reporter(error)
            return False
        finally:
            self.environment = self.globals
            self._call_depth = 0
        return True

    def execute_block(self, statements: Sequence[Statement], environment: Environment) -> Optional[Return]:
        """Run statements in the given environment, restoring the previous one after."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                completion = self._execute(stmt)
                if completion is not None:
                    return completion
            return None
        finally:
            self.environment = previous

    # =========================================================================
    # Statements
    # =========================================================================

    def _execute(self, stmt: Statement) -> Optional[Return]:
        """Execute a statement; a Return means a `return` is unwinding."""
        if isinstance(stmt, ExpressionStatement):
            self._evaluate(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            value = self._evaluate(stmt.expression)
            self.output(stringify(value))
        elif isinstance(stmt, VarDecl):
            value = None
            if stmt.initializer is not None:
                value = self._evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
        elif isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(enclosing=self.environment))
        elif isinstance(stmt, IfStatement):
            if is_truthy(self._evaluate(stmt.condition)):
                return self._execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                return self._execute(stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            while is_truthy(self._evaluate(stmt.condition)):
                completion = self._execute(stmt.body)
                if completion is not None:
                    return completion
        elif isinstance(stmt, FunctionDef):
            function = LoxFunction(stmt, self.environment, is_initializer=False)
            self.environment.define(stmt.name.lexeme, function)
        elif isinstance(stmt, ReturnStatement):
            value = None
            if stmt.value is not None:
                value = self._evaluate(stmt.value)
            return Return(value)
        elif isinstance(stmt, ClassDef):
            self._execute_class(stmt)
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")
        return None

    def _execute_class(self, stmt: ClassDef) -> None:
        superclass = None
        if stmt.superclass is not None:
            superclass = self._evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise error_superclass_not_class(stmt.superclass.name)

        # Reserve the name first so methods can refer to the class
        self.environment.define(stmt.name.lexeme, None)

        method_env = self.environment
        if superclass is not None:
            method_env = Environment(enclosing=self.environment)
            method_env.define("super", superclass)

        methods: Dict[str, LoxFunction] = {}
        for method in stmt.methods:
            methods[method.name.lexeme] = LoxFunction(
                method, method_env, is_initializer=method.name.lexeme == "init")

        klass = LoxClass(stmt.name.lexeme, superclass, MappingProxyType(methods))
        self.environment.assign(stmt.name, klass)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _evaluate(self, expr: Expression) -> Any:
        """Evaluate an expression to produce a runtime value."""
        if isinstance(expr, Literal):
            value = expr.value
            if isinstance(value, int) and not isinstance(value, bool):
                return float(value)
            return value
        elif isinstance(expr, Grouping):
            return self._evaluate(expr.expression)
        elif isinstance(expr, Variable):
            return self._look_up_variable(expr.name, expr)
        elif isinstance(expr, Assign):
            value = self._evaluate(expr.value)
            distance = self.locals.get(expr)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        elif isinstance(expr, UnaryOp):
            return self._eval_unary_op(expr)
        elif isinstance(expr, BinaryOp):
            return self._eval_binary_op(expr)
        elif isinstance(expr, LogicalOp):
            left = self._evaluate(expr.left)
            if expr.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self._evaluate(expr.right)
        elif isinstance(expr, Call):
            return self._eval_call(expr)
        elif isinstance(expr, GetProperty):
            obj = self._evaluate(expr.object)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise error_property_on_non_instance(expr.name)
        elif isinstance(expr, SetProperty):
            obj = self._evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise error_field_on_non_instance(expr.name)
            value = self._evaluate(expr.value)
            obj.set(expr.name, value)
            return value
        elif isinstance(expr, This):
            return self._look_up_variable(expr.keyword, expr)
        elif isinstance(expr, Super):
            return self._eval_super(expr)
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def _look_up_variable(self, name: Token, expr: Expression) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _eval_unary_op(self, op: UnaryOp) -> Any:
        operand = self._evaluate(op.operand)

        if op.operator.type == TokenType.BANG:
            return not is_truthy(operand)
        elif op.operator.type == TokenType.MINUS:
            if not is_number(operand):
                raise error_number_operand(op.operator)
            return -operand
        else:
            raise TypeError(f"Unknown unary operator: {op.operator.lexeme}")

    def _eval_binary_op(self, op: BinaryOp) -> Any:
        left = self._evaluate(op.left)
        right = self._evaluate(op.right)
        kind = op.operator.type

        if kind == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        elif kind == TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if kind == TokenType.PLUS:
            if is_number(left) and is_number(right):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise error_plus_operands(op.operator)

        if not (is_number(left) and is_number(right)):
            raise error_number_operands(op.operator)

        if kind == TokenType.MINUS:
            return left - right
        elif kind == TokenType.STAR:
            return left * right
        elif kind == TokenType.SLASH:
            return _divide(left, right)
        elif kind == TokenType.GREATER:
            return left > right
        elif kind == TokenType.GREATER_EQUAL:
            return left >= right
        elif kind == TokenType.LESS:
            return left < right
        elif kind == TokenType.LESS_EQUAL:
            return left <= right
        else:
            raise TypeError(f"Unknown binary operator: {op.operator.lexeme}")

    def _eval_call(self, call: Call) -> Any:
        callee = self._evaluate(call.callee)
        arguments = [self._evaluate(arg) for arg in call.arguments]

        if not isinstance(callee, LoxCallable):
            logger.debug("attempted to call a %s", type_name(callee))
            raise error_not_callable(call.paren)
        if len(arguments) != callee.arity():
            raise error_arity(call.paren, callee.arity(), len(arguments))
        if self._call_depth >= self.config.max_call_depth:
            raise error_stack_overflow(call.paren, self.config.max_call_depth)

        self._call_depth += 1
        try:
            return callee.call(self, arguments)
        finally:
            self._call_depth -= 1

    def _eval_super(self, expr: Super) -> Any:
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        # `this` lives in the scope just inside the one binding `super`
        instance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise error_undefined_property(expr.method)
        return method.bind(instance)


def _divide(left: float, right: float) -> float:
    """IEEE-754 division: a zero divisor yields an infinity or NaN."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


# =============================================================================
# Host Conveniences
# =============================================================================

@dataclass
class ExecutionResult:
    """Result of resolving and running one program."""
    success: bool
    output: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    static_errors: bool = False
    runtime_error: bool = False

    @property
    def error_message(self) -> Optional[str]:
        """Formatted diagnostics, or None when there are none."""
        if not self.diagnostics:
            return None
        return "\n".join(d.format() for d in self.diagnostics)


class Session:
    """
    Runs successive programs against one persistent set of globals.

    Each run gets a fresh Resolver, so no scope state carries over; static
    errors skip execution and a runtime error aborts only its own run.
    """

    def __init__(self, config: Optional[InterpreterConfig] = None, output: Optional[TextIO] = None):
        self._stream = output
        self._lines: List[str] = []
        self._runtime_errors: List[LoxRuntimeError] = []
        self.interpreter = Interpreter(
            output=self._write,
            error_reporter=self._runtime_errors.append,
            config=config,
        )

    def _write(self, text: str) -> None:
        self._lines.append(text)
        if self._stream is not None:
            self._stream.write(text + "\n")

    def run(self, statements: Sequence[Statement]) -> ExecutionResult:
        self._lines = []
        self._runtime_errors.clear()

        resolved = Resolver().resolve(statements)
        if resolved.has_errors:
            return ExecutionResult(
                success=False,
                diagnostics=resolved.diagnostics,
                static_errors=True,
            )

        completed = self.interpreter.interpret(statements, resolved.locals)
        return ExecutionResult(
            success=completed,
            output=list(self._lines),
            diagnostics=[e.diagnostic for e in self._runtime_errors],
            runtime_error=not completed,
        )


def execute(
    statements: Sequence[Statement],
    config: Optional[InterpreterConfig] = None,
) -> ExecutionResult:
    """
    Resolve and run one program in a fresh session.

    This is a convenience wrapper around Session.run().
    """
    return Session(config=config).run(statements)
