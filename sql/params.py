"""
Parameter sink shared across one render pass.

Placeholders generated by the condition tree are named ``param_<N>`` where N
is the sink size at the moment of binding, so names stay unique for the
whole statement as long as every node renders into the same sink. Builders
that need fixed names (INSERT's ``:<column>``, UPDATE's ``:set_<column>``)
add them explicitly; those names may not use the generated prefix.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterator

from core.exceptions import InvalidArgumentError

GENERATED_PREFIX = 'param_'


class ParameterSink(Mapping):
    """Append-only ordered mapping of placeholder name to bound value."""

    __slots__ = ('_params',)

    def __init__(self):
        self._params: Dict[str, Any] = {}

    def bind(self, value: Any) -> str:
        """Bind a value under the next generated placeholder and return its name."""
        name = f"{GENERATED_PREFIX}{len(self._params)}"
        self._params[name] = value
        return name

    def add(self, name: str, value: Any) -> str:
        """Bind a value under an explicit placeholder name.

        Raises:
            InvalidArgumentError: If the name is already bound or uses the
                generated ``param_`` prefix
        """
        if name.startswith(GENERATED_PREFIX):
            raise InvalidArgumentError(
                f"Placeholder '{name}' uses the reserved '{GENERATED_PREFIX}' prefix"
            )
        if name in self._params:
            raise InvalidArgumentError(f"Placeholder '{name}' is already bound")
        self._params[name] = value
        return name

    def merge(self, other: 'ParameterSink') -> None:
        """Append every entry of another sink, keeping its order."""
        for name, value in other.items():
            if name in self._params:
                raise InvalidArgumentError(f"Placeholder '{name}' is already bound")
            self._params[name] = value

    def as_dict(self) -> Dict[str, Any]:
        """Plain dict copy suitable for handing to an executor."""
        return dict(self._params)

    def __getitem__(self, name: str) -> Any:
        return self._params[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"<ParameterSink {self._params!r}>"
