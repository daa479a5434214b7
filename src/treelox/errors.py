"""
treelox exceptions and diagnostics.

Error code ranges:
- E3xx: Static (resolution) errors, collected by the Resolver
- E4xx: Runtime errors, raised by the Interpreter
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import Token, TokenType


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E301, E401, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    line: int
    lexeme: Optional[str] = None    # Offending token text; None at end of input
    hints: List[str] = field(default_factory=list)

    @property
    def location(self) -> str:
        if self.lexeme is None:
            return "at end"
        return f"at '{self.lexeme}'"

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        header = f"[line {self.line}] {self.severity.value}[{self.code}]"
        if show_source:
            header += f" {self.location}"
        parts = [f"{header}: {self.message}"]
        for hint in self.hints:
            parts.append(f"    = hint: {hint}")
        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "line": self.line,
            "lexeme": self.lexeme,
            "hints": self.hints,
        }


class LoxError(Exception):
    """Base exception for treelox errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class ResolveError(LoxError):
    """Static error found while resolving (E3xx)."""
    pass


class LoxRuntimeError(LoxError):
    """Error during evaluation (E4xx). Carries the offending token."""

    def __init__(self, token: Token, diagnostic: Diagnostic):
        self.token = token
        super().__init__(diagnostic)


class InternalError(Exception):
    """The resolution table disagrees with the shape of the environment chain."""
    pass


def _diagnostic(code: str, token: Token, message: str, hints: List[str] = None) -> Diagnostic:
    return Diagnostic(
        code=code,
        message=message,
        severity=ErrorSeverity.ERROR,
        line=token.line,
        lexeme=None if token.type == TokenType.EOF else token.lexeme,
        hints=hints or [],
    )


# --- Static error codes ---

def error_self_initializer(name: Token) -> ResolveError:
    """E301: Local variable read in its own initializer."""
    return ResolveError(_diagnostic(
        "E301", name, "Can't read local variable in its own initializer."))


def error_duplicate_declaration(name: Token) -> ResolveError:
    """E302: Name already declared in the same local scope."""
    return ResolveError(_diagnostic(
        "E302", name, "Already a variable with this name in this scope."))


def error_top_level_return(keyword: Token) -> ResolveError:
    """E303: Return outside any function."""
    return ResolveError(_diagnostic(
        "E303", keyword, "Can't return from top-level code."))


def error_this_outside_class(keyword: Token) -> ResolveError:
    """E304: `this` outside a method."""
    return ResolveError(_diagnostic(
        "E304", keyword, "Can't use 'this' outside of a class."))


def error_super_outside_class(keyword: Token) -> ResolveError:
    """E305: `super` outside a method."""
    return ResolveError(_diagnostic(
        "E305", keyword, "Can't use 'super' outside of a class."))


def error_super_without_superclass(keyword: Token) -> ResolveError:
    """E306: `super` in a class that does not inherit."""
    return ResolveError(_diagnostic(
        "E306", keyword, "Can't use 'super' in a class with no superclass."))


def error_invalid_assignment_target(equals: Token) -> ResolveError:
    """E307: Left side of `=` is not a variable."""
    return ResolveError(_diagnostic(
        "E307", equals, "Invalid assignment target.",
        hints=["only variables and instance properties can be assigned"]))


def error_self_inheritance(name: Token) -> ResolveError:
    """E308: Class names itself as its superclass."""
    return ResolveError(_diagnostic(
        "E308", name, "A class can't inherit from itself."))


# --- Runtime error codes ---

def error_number_operand(operator: Token) -> LoxRuntimeError:
    """E401: Unary operand must be a number."""
    return LoxRuntimeError(operator, _diagnostic(
        "E401", operator, "Operand must be a number."))


def error_number_operands(operator: Token) -> LoxRuntimeError:
    """E401: Binary operands must be numbers."""
    return LoxRuntimeError(operator, _diagnostic(
        "E401", operator, "Operands must be numbers."))


def error_plus_operands(operator: Token) -> LoxRuntimeError:
    """E401: `+` needs two numbers or two strings."""
    return LoxRuntimeError(operator, _diagnostic(
        "E401", operator, "Operands must be two numbers or two strings."))


def error_undefined_variable(name: Token) -> LoxRuntimeError:
    """E402: Variable not bound anywhere in the chain."""
    return LoxRuntimeError(name, _diagnostic(
        "E402", name, f"Undefined variable '{name.lexeme}'.",
        hints=["declare it with 'var' before use"]))


def error_undefined_property(name: Token) -> LoxRuntimeError:
    """E403: No field or method with this name."""
    return LoxRuntimeError(name, _diagnostic(
        "E403", name, f"Undefined property '{name.lexeme}'."))


def error_not_callable(paren: Token) -> LoxRuntimeError:
    """E404: Call on something that is neither a function nor a class."""
    return LoxRuntimeError(paren, _diagnostic(
        "E404", paren, "Can only call functions and classes."))


def error_arity(paren: Token, expected: int, actual: int) -> LoxRuntimeError:
    """E405: Wrong number of arguments."""
    return LoxRuntimeError(paren, _diagnostic(
        "E405", paren, f"Expected {expected} arguments but got {actual}."))


def error_superclass_not_class(name: Token) -> LoxRuntimeError:
    """E406: Superclass expression evaluated to a non-class."""
    return LoxRuntimeError(name, _diagnostic(
        "E406", name, "Superclass must be a class."))


def error_property_on_non_instance(name: Token) -> LoxRuntimeError:
    """E407: Property read on a value that is not an instance."""
    return LoxRuntimeError(name, _diagnostic(
        "E407", name, "Only instances have properties."))


def error_field_on_non_instance(name: Token) -> LoxRuntimeError:
    """E407: Property write on a value that is not an instance."""
    return LoxRuntimeError(name, _diagnostic(
        "E407", name, "Only instances have fields."))


def error_stack_overflow(paren: Token, limit: int) -> LoxRuntimeError:
    """E408: Call depth exceeded the configured limit."""
    return LoxRuntimeError(paren, _diagnostic(
        "E408", paren, "Stack overflow.",
        hints=[f"call depth is limited to {limit}; see InterpreterConfig.max_call_depth"]))


class DiagnosticCollector:
    """Collects diagnostics during resolution and execution."""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    def add_error(self, error: LoxError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    def clear(self) -> None:
        self.diagnostics.clear()
        self._error_count = 0

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    def format_all(self, show_source: bool = True) -> str:
        """Format all diagnostics for display."""
        parts = [d.format(show_source) for d in self.diagnostics]
        if self._error_count > 0:
            parts.append(f"{self._error_count} error(s), {self.warning_count} warning(s)")
        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
            "warning_count": self.warning_count,
        }
