"""In-memory model of a gettext translation catalog.

A Catalog is the input of the bundle compiler. It is built by the caller
(directly, through CatalogBuilder, or by one of the loaders) and is never
mutated by lingobundle.

Example:
    catalog = (
        Catalog.builder(locale="fr")
        .with_plural_forms("nplurals=2; plural=(n > 1);")
        .add("hello", "bonjour")
        .add("file", "fichier", context="noun")
        .add_plural("apple", "apples", ["pomme", "pommes"])
        .build()
    )
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping

from lingobundle.exceptions import CatalogError

# gettext joins msgctxt and msgid with EOT; it never occurs in message text.
CONTEXT_GLUE = "\x04"


class CatalogMode(Enum):
    """How entries are turned into bundle values."""

    TRANSLATED = "translated"
    TEMPLATE = "template"

    @classmethod
    def from_string(cls, value: str) -> "CatalogMode":
        """Convert a string (case-insensitive) to a CatalogMode.

        Raises:
            CatalogError: If the value names no mode.
        """
        mapping = {
            "translated": cls.TRANSLATED,
            "po": cls.TRANSLATED,
            "template": cls.TEMPLATE,
            "pot": cls.TEMPLATE,
        }
        try:
            return mapping[value.strip().lower()]
        except KeyError:
            raise CatalogError(f"Unknown catalog mode: {value!r}") from None


def composite_key(msgid: str, context: str | None = None) -> str:
    """Build the lookup key of a message.

    ``context + CONTEXT_GLUE + msgid`` when a context is given, else ``msgid``.
    """
    if context is None:
        return msgid
    return f"{context}{CONTEXT_GLUE}{msgid}"


@dataclass(frozen=True)
class MessageEntry:
    """One translatable message.

    A scalar entry carries at most ``translation``; a plural entry (one with
    ``plural_id``) carries ``plural_translations`` indexed by plural form.

    Attributes:
        id: Source text (msgid).
        context: Disambiguating context (msgctxt), if any.
        plural_id: Source plural text (msgid_plural), if plural-sensitive.
        translation: Translated text of a scalar entry, None if untranslated.
        plural_translations: Translated forms of a plural entry.
        flags: gettext flags such as ``fuzzy``.
        locations: Source references (``file:line``).
    """

    id: str
    context: str | None = None
    plural_id: str | None = None
    translation: str | None = None
    plural_translations: tuple[str | None, ...] = ()
    flags: frozenset[str] = frozenset()
    locations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            raise CatalogError(f"Message id must be a string, got {type(self.id).__name__}")
        object.__setattr__(self, "plural_translations", tuple(self.plural_translations))
        object.__setattr__(self, "flags", frozenset(self.flags))
        object.__setattr__(self, "locations", tuple(self.locations))

        if self.plural_id is None and self.plural_translations:
            raise CatalogError(
                f"Message {self.id!r} has plural translations but no plural id"
            )
        if self.plural_id is not None and self.translation is not None:
            raise CatalogError(
                f"Plural message {self.id!r} cannot carry a scalar translation"
            )

    @property
    def key(self) -> str:
        """Composite lookup key."""
        return composite_key(self.id, self.context)

    @property
    def is_plural(self) -> bool:
        return self.plural_id is not None

    @property
    def fuzzy(self) -> bool:
        return "fuzzy" in self.flags

    @property
    def is_translated(self) -> bool:
        """True if at least one non-empty translation is present."""
        if self.is_plural:
            return any(self.plural_translations)
        return bool(self.translation)


@dataclass(frozen=True)
class Catalog:
    """An ordered collection of messages plus the locale's plural rule.

    Attributes:
        entries: Messages in catalog order.
        plural_forms: Plural-Forms header value, None if the catalog has none.
        mode: TRANSLATED for .po catalogs, TEMPLATE for .pot scaffolding.
        locale: Locale code, informational.
        metadata: Free-form header fields.
    """

    entries: tuple[MessageEntry, ...] = ()
    plural_forms: str | None = None
    mode: CatalogMode = CatalogMode.TRANSLATED
    locale: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))
        if isinstance(self.mode, str):
            object.__setattr__(self, "mode", CatalogMode.from_string(self.mode))

    def __iter__(self) -> Iterator[MessageEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_template(self) -> bool:
        return self.mode is CatalogMode.TEMPLATE

    def keys(self) -> list[str]:
        """Composite keys in catalog order (duplicates included)."""
        return [entry.key for entry in self.entries]

    def get(self, msgid: str, context: str | None = None) -> MessageEntry | None:
        """Return the last entry with the given id and context."""
        key = composite_key(msgid, context)
        found = None
        for entry in self.entries:
            if entry.key == key:
                found = entry
        return found

    def duplicate_keys(self) -> list[str]:
        """Composite keys that occur more than once."""
        counts = Counter(entry.key for entry in self.entries)
        return [key for key, count in counts.items() if count > 1]

    def with_mode(self, mode: CatalogMode | str) -> "Catalog":
        """Return a copy compiled in another mode."""
        if isinstance(mode, str):
            mode = CatalogMode.from_string(mode)
        return Catalog(
            entries=self.entries,
            plural_forms=self.plural_forms,
            mode=mode,
            locale=self.locale,
            metadata=dict(self.metadata),
        )

    @classmethod
    def builder(
        cls,
        locale: str | None = None,
        mode: CatalogMode = CatalogMode.TRANSLATED,
    ) -> "CatalogBuilder":
        """Create a catalog builder."""
        return CatalogBuilder(locale, mode)


class CatalogBuilder:
    """Fluent builder for Catalog."""

    def __init__(
        self,
        locale: str | None = None,
        mode: CatalogMode = CatalogMode.TRANSLATED,
    ) -> None:
        self._locale = locale
        self._mode = mode
        self._plural_forms: str | None = None
        self._entries: list[MessageEntry] = []
        self._metadata: dict[str, Any] = {}

    def with_plural_forms(self, plural_forms: str | None) -> "CatalogBuilder":
        self._plural_forms = plural_forms
        return self

    def template(self) -> "CatalogBuilder":
        """Switch to template mode."""
        self._mode = CatalogMode.TEMPLATE
        return self

    def add(
        self,
        msgid: str,
        translation: str | None = None,
        context: str | None = None,
        flags: Iterable[str] = (),
    ) -> "CatalogBuilder":
        """Add a scalar message."""
        self._entries.append(
            MessageEntry(
                id=msgid,
                context=context,
                translation=translation,
                flags=frozenset(flags),
            )
        )
        return self

    def add_plural(
        self,
        msgid: str,
        plural_id: str,
        translations: Iterable[str | None] = (),
        context: str | None = None,
        flags: Iterable[str] = (),
    ) -> "CatalogBuilder":
        """Add a plural message."""
        self._entries.append(
            MessageEntry(
                id=msgid,
                context=context,
                plural_id=plural_id,
                plural_translations=tuple(translations),
                flags=frozenset(flags),
            )
        )
        return self

    def add_entry(self, entry: MessageEntry) -> "CatalogBuilder":
        self._entries.append(entry)
        return self

    def add_metadata(self, key: str, value: Any) -> "CatalogBuilder":
        self._metadata[key] = value
        return self

    def build(self) -> Catalog:
        return Catalog(
            entries=tuple(self._entries),
            plural_forms=self._plural_forms,
            mode=self._mode,
            locale=self._locale,
            metadata=dict(self._metadata),
        )


def plural_forms_from_header(header: str) -> str | None:
    """Extract the Plural-Forms value from a gettext header block.

    Args:
        header: The msgstr of the ``msgid ""`` entry, one ``Name: value``
            field per line.

    Returns:
        The value, or None if the field is absent or empty.

    Example:
        >>> plural_forms_from_header(
        ...     "Content-Type: text/plain; charset=UTF-8\\n"
        ...     "Plural-Forms: nplurals=2; plural=(n != 1);\\n"
        ... )
        'nplurals=2; plural=(n != 1);'
    """
    for line in header.splitlines():
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "plural-forms":
            return value.strip() or None
    return None
