"""
Native function registry for the treelox interpreter.

Natives are host-provided callables installed into the global environment.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional
import logging
import time

from .environment import Environment
from .values import LoxCallable

if TYPE_CHECKING:
    from .interpreter import Interpreter

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class NativeFunction(LoxCallable):
    """
    A built-in function with a fixed arity and a Python implementation.
    """
    name: str
    param_count: int
    implementation: Callable[..., Any]
    doc: str = ""

    def arity(self) -> int:
        return self.param_count

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        return self.implementation(*arguments)

    def __str__(self) -> str:
        return "<native fn>"


class NativeRegistry:
    """
    Registry of native functions, looked up by name.
    """

    def __init__(self):
        self._functions: Dict[str, NativeFunction] = {}
        self._register_all()

    def get(self, name: str) -> Optional[NativeFunction]:
        """Look up a native by name."""
        return self._functions.get(name)

    def register(self, func: NativeFunction) -> None:
        """Register a native, replacing any previous one of the same name."""
        if func.name in self._functions:
            logger.debug("Overwriting native %s", func.name)
        self._functions[func.name] = func

    def names(self) -> List[str]:
        return sorted(self._functions)

    def install(self, environment: Environment, names: Iterable[str]) -> None:
        """Define the named natives in an environment (normally the globals)."""
        for name in names:
            func = self.get(name)
            if func is None:
                raise KeyError(f"Unknown native function: {name}")
            environment.define(name, func)

    def _register_all(self) -> None:
        self.register(NativeFunction(
            name="clock",
            param_count=0,
            implementation=time.time,
            doc="Seconds since the epoch, as a number.",
        ))


# Global registry instance
_registry: Optional[NativeRegistry] = None


def get_native_registry() -> NativeRegistry:
    """Get the global native registry."""
    global _registry
    if _registry is None:
        _registry = NativeRegistry()
    return _registry
