"""Execution context shared by the steps of one workflow run."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, TypeVar

from .contracts import INPUT_KEY
from .errors import FrozenContextError
from .utils.awaitables import maybe_await

T = TypeVar("T")

_MISSING = object()


class ExecutionContext(MutableMapping[str, Any]):
    """Ordered mapping of step outputs accumulated during one run.

    Always contains ``input``. Writes follow a last-write-wins policy:
    merging a mapping whose keys already exist replaces the stored values
    unless ``overwrite=False`` is passed.
    """

    def __init__(
        self,
        input: Any = None,
        *,
        run_id: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
        frozen: bool = False,
    ) -> None:
        self._data: Dict[str, Any] = {INPUT_KEY: input}
        if data is not None:
            self._data.update(data)
        self.run_id = run_id
        self._frozen = frozen

    # ------------------------------------------------------------------
    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._check_writable(key)
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        self._check_writable(key)
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        flag = ", frozen" if self._frozen else ""
        return f"ExecutionContext({self._data!r}{flag})"

    def _check_writable(self, key: str) -> None:
        if self._frozen:
            raise FrozenContextError(
                f"Cannot write '{key}': context snapshot is read-only"
            )

    # ------------------------------------------------------------------
    @property
    def input(self) -> Any:
        return self._data[INPUT_KEY]

    @property
    def frozen(self) -> bool:
        return self._frozen

    def require(self, key: str, expected_type: Optional[type[T]] = None) -> T:
        """Return ``context[key]``, raising ``KeyError`` when absent.

        When ``expected_type`` is given the value must be an instance of it.
        """
        if key not in self._data:
            raise KeyError(f"Context has no value for '{key}'")
        value = self._data[key]
        if expected_type is not None and not isinstance(value, expected_type):
            raise TypeError(
                f"Context value '{key}' is {type(value).__name__}, "
                f"expected {expected_type.__name__}"
            )
        return value

    def get_as(self, key: str, expected_type: type[T], default: Any = None) -> T:
        """Return ``context[key]`` if it is an ``expected_type``, else ``default``."""
        value = self._data.get(key, _MISSING)
        if value is _MISSING or not isinstance(value, expected_type):
            return default
        return value

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def snapshot(self) -> "ExecutionContext":
        """Return a read-only copy of the current values."""
        return ExecutionContext(
            self.input,
            run_id=self.run_id,
            data=self._data,
            frozen=True,
        )

    def merge(self, values: Mapping[str, Any], *, overwrite: bool = True) -> None:
        """Copy ``values`` into this context.

        Existing keys are replaced unless ``overwrite`` is false.
        """
        for key, value in values.items():
            if not overwrite and key in self._data:
                continue
            self[key] = value

    async def resolve_input(
        self, key: str, resolver: Optional[Callable[["ExecutionContext"], Any]] = None
    ) -> Any:
        """Work out the input for the step stored under ``key``.

        An explicit resolver wins; otherwise a value already stored under
        ``key`` is used, falling back to the workflow input.
        """
        if resolver is not None:
            return await maybe_await(resolver(self))
        if key in self._data:
            return self._data[key]
        return self.input

