"""Runtime object model and the control-flow completion type."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from . import constants
from .ast_nodes import FunctionLiteral
from .environment import Environment
from .errors import FailRuntimeError
from .tokens import Token

if TYPE_CHECKING:
    from .executor import Interpreter


# ── Completion: how a statement finished ─────────────────────────


class CompletionKind(Enum):
    NORMAL = "normal"
    BREAK = "break"
    CONTINUE = "continue"
    RETURN = "return"


@dataclass(frozen=True)
class Completion:
    """Result of executing a statement.

    Loops consume BREAK and CONTINUE, calls consume RETURN; every other
    statement executor hands a non-NORMAL completion straight back up.
    """

    kind: CompletionKind = CompletionKind.NORMAL
    value: Any = None

    @property
    def is_normal(self) -> bool:
        return self.kind == CompletionKind.NORMAL

    @classmethod
    def returning(cls, value: Any) -> Completion:
        return cls(CompletionKind.RETURN, value)


NORMAL = Completion()
BREAK = Completion(CompletionKind.BREAK)
CONTINUE = Completion(CompletionKind.CONTINUE)


# ── Callables ────────────────────────────────────────────────────


class FailCallable(ABC):
    """Anything a script can call with an argument list of fixed arity."""

    @abstractmethod
    def arity(self) -> int: ...

    @abstractmethod
    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any: ...


class NativeFunction(FailCallable):
    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self._fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        return self._fn(*arguments)

    def __str__(self) -> str:
        return constants.NATIVE_FUNCTION_TEXT_TEMPLATE.format(name=self.name)


class FailFunction(FailCallable):
    """A closure: a function literal paired with its defining environment."""

    def __init__(
        self,
        name: str | None,
        declaration: FunctionLiteral,
        closure: Environment,
        is_initializer: bool = False,
    ):
        self.name = name
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, constants.THIS_KEYWORD)
        if completion.kind == CompletionKind.RETURN:
            return completion.value
        return None

    def bind(self, instance: FailInstance) -> FailFunction:
        """Return a copy whose closure binds ``this`` to *instance*."""
        environment = Environment(self.closure)
        environment.define(constants.THIS_KEYWORD, instance)
        return FailFunction(
            self.name, self.declaration, environment, self.is_initializer
        )

    def __str__(self) -> str:
        if self.name is None:
            return constants.ANONYMOUS_FUNCTION_TEXT
        return constants.FUNCTION_TEXT_TEMPLATE.format(name=self.name)


# ── Objects ──────────────────────────────────────────────────────


class FailInstance:
    def __init__(self, klass: FailClass | None):
        self.klass = klass
        self.fields: dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme) if self.klass else None
        if method is not None:
            return method.bind(self)

        raise FailRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any):
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return constants.INSTANCE_TEXT_TEMPLATE.format(name=self.klass.name)


class FailClass(FailInstance, FailCallable):
    """A class value.

    A class is itself an instance of its metaclass, whose method table holds
    the class-level methods; reading a property off the class therefore
    binds ``this`` to the class.
    """

    def __init__(
        self,
        name: str,
        superclass: FailClass | None,
        methods: dict[str, FailFunction],
        metaclass: FailClass | None = None,
    ):
        super().__init__(metaclass)
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> FailFunction | None:
        klass: FailClass | None = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method(constants.INITIALIZER_NAME)
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        instance = FailInstance(self)
        initializer = self.find_method(constants.INITIALIZER_NAME)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name
