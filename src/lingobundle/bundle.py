"""Resource-bundle contract and the compiled bundle implementation.

A bundle maps composite message keys to values:

    - ``str`` for a translated (or template) scalar message
    - ``tuple`` of ``str | None`` for a plural message, indexed by
      ``plural_index(n)``
    - ``None`` for a message that is defined but untranslated

``lookup`` returns None for unknown keys as well; use ``key in bundle`` to
tell an undefined key from an untranslated one. The parent slot exists for
the host's fallback traversal and is never read by the bundle itself.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Callable, Iterator, Mapping, Union

from lingobundle.arith import to_int32
from lingobundle.exceptions import InvalidParentError, ParentAlreadySetError

BundleValue = Union[str, tuple[Union[str, None], ...], None]


class ResourceBundle(ABC):
    """Lookup contract implemented by every compiled bundle."""

    def __init__(self) -> None:
        self._parent: ResourceBundle | None = None
        self._parent_lock = threading.Lock()

    @abstractmethod
    def lookup(self, key: str) -> BundleValue:
        """Return the value stored under ``key``, None if absent or untranslated."""
        pass

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over a snapshot of all keys, in catalog order."""
        pass

    @abstractmethod
    def plural_index(self, n: int) -> int:
        """Return the plural-form index (a signed 32-bit value) for count ``n``."""
        pass

    # -- parent slot ---------------------------------------------------------

    @property
    def parent(self) -> "ResourceBundle | None":
        return self._parent

    def get_parent(self) -> "ResourceBundle | None":
        return self._parent

    def set_parent(self, parent: "ResourceBundle") -> None:
        """Set the fallback parent.

        The slot is write-once and must be filled before the bundle is
        shared with other threads.

        Raises:
            ParentAlreadySetError: If a parent was already set.
            InvalidParentError: If ``parent`` is this bundle.
            TypeError: If ``parent`` is not a ResourceBundle.
        """
        if not isinstance(parent, ResourceBundle):
            raise TypeError(f"Parent must be a ResourceBundle, got {type(parent).__name__}")
        if parent is self:
            raise InvalidParentError("A bundle cannot be its own parent")
        with self._parent_lock:
            if self._parent is not None:
                raise ParentAlreadySetError("Bundle parent has already been set")
            self._parent = parent

    # -- conveniences --------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return any(k == key for k in self.keys())

    def get_string(self, key: str) -> str | None:
        """Return a scalar value, or the first form of a plural value."""
        value = self.lookup(key)
        if isinstance(value, tuple):
            return value[0] if value else None
        return value

    def get_plural(self, key: str, n: int) -> str | None:
        """Return the form of a plural value selected for count ``n``.

        Returns None when the key is unknown, the selected form is
        untranslated, or the index falls outside the stored forms.
        Scalar values are returned unchanged.
        """
        value = self.lookup(key)
        if not isinstance(value, tuple):
            return value
        index = self.plural_index(n)
        if 0 <= index < len(value):
            return value[index]
        return None


class CompiledBundle(ResourceBundle):
    """Immutable bundle produced by the compiler.

    Safe for concurrent reads once constructed (and once the parent slot,
    if used, has been set).

    Args:
        messages: Key to value mapping; copied and frozen.
        evaluator: Plural evaluator, None for the constant-zero rule.
        nplurals: Number of plural forms of the rule.
        plural_forms: Source Plural-Forms header, informational.
    """

    def __init__(
        self,
        messages: Mapping[str, BundleValue],
        evaluator: Callable[[int], int] | None = None,
        nplurals: int = 1,
        plural_forms: str | None = None,
    ) -> None:
        super().__init__()
        self._messages: Mapping[str, BundleValue] = MappingProxyType(dict(messages))
        self._evaluator = evaluator
        self._nplurals = nplurals
        self._plural_forms = plural_forms

    def lookup(self, key: str) -> BundleValue:
        return self._messages.get(key)

    def keys(self) -> Iterator[str]:
        return iter(tuple(self._messages))

    def plural_index(self, n: int) -> int:
        if self._evaluator is None:
            return 0
        return to_int32(self._evaluator(n))

    @property
    def messages(self) -> Mapping[str, BundleValue]:
        """Read-only view of the key to value table."""
        return self._messages

    @property
    def nplurals(self) -> int:
        return self._nplurals

    @property
    def plural_forms(self) -> str | None:
        return self._plural_forms

    def __contains__(self, key: object) -> bool:
        return key in self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(keys={len(self._messages)}, "
            f"nplurals={self._nplurals}, plural_forms={self._plural_forms!r})"
        )
