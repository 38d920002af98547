"""Name-to-value bindings for top-level sessions and function call scopes."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping

from .errors import UndefinedFunction, UndefinedVariable
from .values import FunctionValue, Value, validate_value


class Environment(MutableMapping[str, Value]):
    """Flat mapping from identifiers to runtime values.

    There is no parent chain: a function call runs in :meth:`call_scope`, a full
    copy of the caller's bindings taken at call time. Values are immutable, so a
    shallow copy of the mapping is enough to keep the two scopes independent.
    """

    def __init__(self, data: Mapping[str, Value] | None = None) -> None:
        self._bindings: dict[str, Value] = {}
        if data is not None:
            for name, value in data.items():
                validate_value(value, where=f"env[{name!r}]")
                self._bindings[name] = value

    def __getitem__(self, key: str) -> Value:
        return self._bindings[key]

    def __setitem__(self, key: str, value: Value) -> None:
        validate_value(value, where=f"name {key!r}")
        self._bindings[key] = value

    def __delitem__(self, key: str) -> None:
        del self._bindings[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"Environment({sorted(self._bindings)!r})"

    @property
    def bindings(self) -> dict[str, Value]:
        return dict(self._bindings)

    def lookup(self, name: str) -> Value:
        try:
            return self._bindings[name]
        except KeyError:
            raise UndefinedVariable(name) from None

    def lookup_function(self, name: str) -> FunctionValue:
        value = self._bindings.get(name)
        if not isinstance(value, FunctionValue):
            raise UndefinedFunction(name)
        return value

    def call_scope(self) -> "Environment":
        scope = Environment()
        scope._bindings = dict(self._bindings)
        return scope
