"""Load catalogs from JSON and YAML documents.

Document shape::

    {
        "locale": "fr",
        "mode": "translated",
        "plural_forms": "nplurals=2; plural=(n > 1);",
        "metadata": {"Project-Id-Version": "demo 1.0"},
        "messages": [
            {"id": "hello", "translation": "bonjour"},
            {"id": "file", "context": "noun", "translation": "fichier"},
            {"id": "apple", "plural_id": "apples",
             "plural_translations": ["pomme", "pommes"]},
            {"id": "draft", "translation": "brouillon", "flags": ["fuzzy"]}
        ]
    }

``messages`` may also be a flat ``{msgid: translation}`` mapping for
catalogs without contexts or plurals.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from lingobundle.catalog import Catalog, CatalogMode, MessageEntry
from lingobundle.exceptions import CatalogError

logger = logging.getLogger(__name__)

_ENTRY_FIELDS = frozenset({
    "id",
    "context",
    "plural_id",
    "translation",
    "plural_translations",
    "flags",
    "locations",
})


def load_catalog(path: str | Path, mode: CatalogMode | str | None = None) -> Catalog:
    """Load a catalog document from a file.

    Args:
        path: Path to a ``.json``, ``.yaml`` or ``.yml`` file.
        mode: Overrides the document's mode when given.

    Raises:
        FileNotFoundError: If the file does not exist.
        CatalogError: If the format is unsupported or the document invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, "r", encoding="utf-8") as f:
        try:
            if suffix == ".json":
                data = json.load(f)
            elif suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                raise CatalogError(f"Unsupported catalog file format: {suffix}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise CatalogError(f"Failed to parse catalog {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"Catalog document {path} must be a mapping")
    data.setdefault("locale", path.stem)

    catalog = catalog_from_dict(data, mode)
    logger.debug("Loaded %d messages from %s", len(catalog), path)
    return catalog


def catalog_from_dict(
    data: dict[str, Any],
    mode: CatalogMode | str | None = None,
) -> Catalog:
    """Build a Catalog from an in-memory document.

    Raises:
        CatalogError: If the document is invalid.
    """
    raw_messages = data.get("messages", [])
    if isinstance(raw_messages, dict):
        entries = [
            MessageEntry(id=msgid, translation=_optional_str(value, msgid))
            for msgid, value in raw_messages.items()
        ]
    elif isinstance(raw_messages, list):
        entries = [_parse_entry(item, index) for index, item in enumerate(raw_messages)]
    else:
        raise CatalogError("'messages' must be a list or a mapping")

    if mode is None:
        mode = data.get("mode", CatalogMode.TRANSLATED.value)
    if isinstance(mode, str):
        mode = CatalogMode.from_string(mode)

    plural_forms = data.get("plural_forms")
    if plural_forms is not None and not isinstance(plural_forms, str):
        raise CatalogError("'plural_forms' must be a string")

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise CatalogError("'metadata' must be a mapping")

    return Catalog(
        entries=tuple(entries),
        plural_forms=plural_forms,
        mode=mode,
        locale=data.get("locale"),
        metadata=metadata,
    )


def _parse_entry(item: Any, index: int) -> MessageEntry:
    if not isinstance(item, dict):
        raise CatalogError(f"Message #{index} must be a mapping")
    unknown = set(item) - _ENTRY_FIELDS
    if unknown:
        raise CatalogError(f"Message #{index} has unknown fields: {', '.join(sorted(unknown))}")
    if "id" not in item:
        raise CatalogError(f"Message #{index} has no 'id'")

    msgid = item["id"]
    plural_translations = item.get("plural_translations") or ()
    if not isinstance(plural_translations, (list, tuple)):
        raise CatalogError(f"Message {msgid!r}: 'plural_translations' must be a list")

    return MessageEntry(
        id=msgid,
        context=item.get("context"),
        plural_id=item.get("plural_id"),
        translation=_optional_str(item.get("translation"), msgid),
        plural_translations=tuple(_optional_str(v, msgid) for v in plural_translations),
        flags=frozenset(item.get("flags") or ()),
        locations=tuple(item.get("locations") or ()),
    )


def _optional_str(value: Any, msgid: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise CatalogError(f"Message {msgid!r}: translations must be strings or null")
