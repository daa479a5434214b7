"""
Runtime object model for the treelox interpreter.

Runtime values are plain Python objects:

    nil     -> None
    boolean -> bool
    number  -> float
    string  -> str

plus the object types defined here: user functions, classes and instances.
Native functions live in `builtins.py`.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from .environment import Environment
from ..ast import FunctionDef
from ..errors import error_undefined_property
from ..tokens import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter


class LoxCallable(ABC):
    """Anything that can appear as the callee of a call expression."""

    @abstractmethod
    def arity(self) -> int:
        """Number of arguments the callable expects."""

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        """Invoke with arguments already checked against `arity()`."""


@dataclass(frozen=True)
class Return:
    """
    Completion of a statement that executed `return`.

    Statement execution yields None on normal completion and a Return when
    a function body must stop; blocks and loops hand it upward unchanged
    until the enclosing call consumes it.
    """
    value: Any = None


@dataclass(eq=False)
class LoxFunction(LoxCallable):
    """A user-defined function or method with its captured closure."""
    declaration: FunctionDef
    closure: Environment
    is_initializer: bool = False

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        environment = Environment(enclosing=self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)

        # Initializers always hand back the instance, whatever they return
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if completion is not None:
            return completion.value
        return None

    def bind(self, instance: "LoxInstance") -> "LoxFunction":
        """Return a copy whose closure defines `this` as the given instance."""
        environment = Environment(enclosing=self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def __str__(self) -> str:
        return f"<fn {self.name}>"


@dataclass(frozen=True, eq=False)
class LoxClass(LoxCallable):
    """A class: name, optional superclass and its own method table."""
    name: str
    superclass: Optional["LoxClass"] = None
    methods: Mapping[str, LoxFunction] = field(default_factory=dict)

    def find_method(self, name: str) -> Optional[LoxFunction]:
        """Search this class, then each superclass in turn."""
        klass: Optional[LoxClass] = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name


@dataclass(eq=False)
class LoxInstance:
    """An instance of a class. Fields are created on first write."""
    klass: LoxClass
    fields: Optional[Dict[str, Any]] = None

    def get(self, name: Token) -> Any:
        # Fields shadow methods of the same name
        if self.fields is not None and name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise error_undefined_property(name)

    def set(self, name: Token, value: Any) -> None:
        if self.fields is None:
            self.fields = {}
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"{self.klass.name} instance"


# Value utilities

def is_truthy(value: Any) -> bool:
    """Only nil and false are falsey."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    """Equality without coercion; values of different kinds are never equal."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # bool is an int subclass in Python, so compare kinds first
    if type(a) is not type(b):
        return False
    return a == b


def is_number(value: Any) -> bool:
    return isinstance(value, float)


def stringify(value: Any) -> str:
    """Format a runtime value the way `print` shows it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        text = repr(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)


def type_name(value: Any) -> str:
    """Name of a value's runtime kind, for debugging output."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, LoxClass):
        return "class"
    if isinstance(value, LoxInstance):
        return "instance"
    if isinstance(value, LoxCallable):
        return "function"
    return type(value).__name__
