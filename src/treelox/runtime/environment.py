"""
Environment chain for the treelox interpreter.

Environments map names to values and link to an enclosing Environment.
Closures share enclosing environments, so the chain forms a tree.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import InternalError, error_undefined_variable
from ..tokens import Token


@dataclass(eq=False)
class Environment:
    """
    A single scope containing variable bindings.

    Environments form a chain via the `enclosing` field for lexical scoping.
    """
    enclosing: Optional["Environment"] = None
    values: Dict[str, Any] = field(default_factory=dict)

    def define(self, name: str, value: Any) -> None:
        """Bind a name in this scope, shadowing or overwriting as needed."""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        """Look up a name in this scope or any enclosing scope."""
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise error_undefined_variable(name)

    def assign(self, name: Token, value: Any) -> None:
        """
        Update an existing binding.

        Mutates the nearest scope that defines the name; never creates one.
        """
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise error_undefined_variable(name)

    def ancestor(self, distance: int) -> "Environment":
        """Walk exactly `distance` enclosing links."""
        env = self
        for _ in range(distance):
            env = env.enclosing
            if env is None:
                raise InternalError(
                    f"resolved distance {distance} walks past the global environment")
        return env

    def get_at(self, distance: int, name: str) -> Any:
        """Read a resolved local `distance` scopes out."""
        scope = self.ancestor(distance)
        if name not in scope.values:
            raise InternalError(f"'{name}' is not bound {distance} scope(s) out")
        return scope.values[name]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        """Update a resolved local `distance` scopes out."""
        self.ancestor(distance).values[name.lexeme] = value

    def __contains__(self, name: str) -> bool:
        env = self
        while env is not None:
            if name in env.values:
                return True
            env = env.enclosing
        return False

    def __repr__(self) -> str:
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"Environment(depth={depth}, names={sorted(self.values)})"
