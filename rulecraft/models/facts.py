"""Facts: the named values rules are evaluated against."""

from collections.abc import Iterator, MutableMapping
from typing import Any


class Facts(MutableMapping[str, Any]):
    """An ordered, mutable set of named facts.

    Facts keep insertion order. Putting a fact under an existing name replaces
    its value in place.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._facts: dict[str, Any] = {}
        for name, value in (initial or {}).items():
            self.put(name, value)

    def put(self, name: str, value: Any) -> None:
        """Add a fact, replacing any fact with the same name."""
        if not isinstance(name, str) or not name:
            raise ValueError("Fact name must be a non-empty string")
        if value is None:
            raise ValueError(f"Fact '{name}' must not be None")
        self._facts[name] = value

    def remove(self, name: str) -> None:
        """Remove a fact by name. Unknown names are ignored."""
        self._facts.pop(name, None)

    def as_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the facts as a plain dict."""
        return dict(self._facts)

    def __getitem__(self, name: str) -> Any:
        return self._facts[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.put(name, value)

    def __delitem__(self, name: str) -> None:
        del self._facts[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._facts)

    def __len__(self) -> int:
        return len(self._facts)

    def __repr__(self) -> str:
        return f"Facts({self._facts!r})"
