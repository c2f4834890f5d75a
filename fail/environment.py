"""Runtime scope chain.

Environments are shared, not copied: closures and nested scopes hold a
reference to their enclosing environment, so a captured variable is seen
and mutated by reference.

A name declared without a value (``var x;``) is bound but unassigned until
its first write; reading it before then is a runtime error.
"""

from __future__ import annotations

from typing import Any

from .errors import FailRuntimeError, ScopeMismatchError
from .tokens import Token


class Environment:
    def __init__(self, enclosing: Environment | None = None):
        self.enclosing = enclosing
        self.values: dict[str, Any] = {}
        self.unassigned: set[str] = set()

    @property
    def is_global(self) -> bool:
        return self.enclosing is None

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def names(self) -> list[str]:
        return list(self.values)

    def _read(self, name: Token) -> Any:
        if name.lexeme in self.unassigned:
            raise FailRuntimeError(
                name, f"Unassigned variable '{name.lexeme}' accessed."
            )
        return self.values[name.lexeme]

    def _write(self, name: str, value: Any):
        self.values[name] = value
        self.unassigned.discard(name)

    # ── by-name access (globals and unresolved lookups) ──────────

    def declare(self, name: str):
        """Bind *name* with no value yet."""
        self.values[name] = None
        self.unassigned.add(name)

    def define(self, name: str, value: Any):
        self._write(name, value)

    def get(self, name: Token) -> Any:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env._read(name)
            env = env.enclosing
        raise FailRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any):
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env._write(name.lexeme, value)
                return
            env = env.enclosing
        raise FailRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    # ── distance-addressed access ────────────────────────────────

    def ancestor(self, distance: int, name: str = "?") -> Environment:
        env = self
        for hop in range(distance):
            if env.enclosing is None:
                raise ScopeMismatchError(
                    name, distance, f"chain ends after {hop} hops"
                )
            env = env.enclosing
        return env

    def _bound_ancestor(self, distance: int, name: str) -> Environment:
        env = self.ancestor(distance, name)
        if name not in env.values:
            raise ScopeMismatchError(name, distance, "name not bound in that scope")
        return env

    def get_at(self, distance: int, name: str) -> Any:
        return self._bound_ancestor(distance, name).values[name]

    def read_at(self, distance: int, name: Token) -> Any:
        """Like :meth:`get_at`, but an unassigned slot is a runtime error."""
        return self._bound_ancestor(distance, name.lexeme)._read(name)

    def assign_at(self, distance: int, name: str, value: Any):
        self._bound_ancestor(distance, name)._write(name, value)

    def __repr__(self) -> str:
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"Environment(depth={depth}, names={self.names()})"
