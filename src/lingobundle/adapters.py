"""Adapters from Babel message catalogs.

Babel does the ``.po``/``.pot`` parsing; these helpers only translate its
``babel.messages.catalog.Catalog`` into a lingobundle Catalog.

Example:
    >>> catalog = load_po("locale/fr/LC_MESSAGES/messages.po")
    >>> bundle = compile_catalog(catalog)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from babel.messages.catalog import Catalog as BabelCatalog
from babel.messages.catalog import Message
from babel.messages.pofile import read_po

from lingobundle.catalog import Catalog, CatalogMode, MessageEntry

logger = logging.getLogger(__name__)


def entry_from_message(message: Message) -> MessageEntry:
    """Convert one Babel message."""
    locations = tuple(
        f"{filename}:{lineno}" if lineno is not None else str(filename)
        for filename, lineno in message.locations
    )
    flags = frozenset(message.flags)

    if isinstance(message.id, (list, tuple)):
        msgid, plural_id = message.id[0], message.id[1]
        strings = message.string
        if isinstance(strings, str):
            strings = (strings,) if strings else ()
        return MessageEntry(
            id=msgid,
            context=message.context,
            plural_id=plural_id,
            plural_translations=tuple(s or None for s in strings or ()),
            flags=flags,
            locations=locations,
        )

    string = message.string
    if isinstance(string, (list, tuple)):
        string = string[0] if string else None
    return MessageEntry(
        id=message.id,
        context=message.context,
        translation=string or None,
        flags=flags,
        locations=locations,
    )


def catalog_from_babel(
    babel_catalog: BabelCatalog,
    mode: CatalogMode | str = CatalogMode.TRANSLATED,
) -> Catalog:
    """Convert a Babel catalog.

    The header entry (``msgid ""``) is skipped and obsolete messages are
    ignored. The plural rule comes from the catalog's Plural-Forms header
    (or Babel's default for its locale).
    """
    if isinstance(mode, str):
        mode = CatalogMode.from_string(mode)

    entries = [entry_from_message(message) for message in babel_catalog if message.id]
    metadata: dict[str, Any] = {
        name: value for name, value in babel_catalog.mime_headers
    }
    locale = str(babel_catalog.locale) if babel_catalog.locale is not None else None

    logger.debug("Adapted %d Babel messages (locale=%s)", len(entries), locale)
    return Catalog(
        entries=tuple(entries),
        plural_forms=babel_catalog.plural_forms,
        mode=mode,
        locale=locale,
        metadata=metadata,
    )


def load_po(
    path: str | Path,
    mode: CatalogMode | str | None = None,
    locale: str | None = None,
) -> Catalog:
    """Read a ``.po`` or ``.pot`` file with Babel and adapt it.

    ``.pot`` files default to template mode, everything else to translated.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")
    if mode is None:
        mode = CatalogMode.TEMPLATE if path.suffix.lower() == ".pot" else CatalogMode.TRANSLATED

    with open(path, "rb") as f:
        babel_catalog = read_po(f, locale=locale)
    return catalog_from_babel(babel_catalog, mode)
