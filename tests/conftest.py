"""Shared fixtures for lingobundle tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from lingobundle.catalog import Catalog

ENGLISH_RULE = "nplurals=2; plural=(n != 1);"
FRENCH_RULE = "nplurals=2; plural=(n > 1);"
RUSSIAN_RULE = (
    "nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : "
    "n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);"
)


@pytest.fixture
def french_catalog() -> Catalog:
    """Translated French catalog with contexts, plurals and gaps."""
    return (
        Catalog.builder(locale="fr")
        .with_plural_forms(FRENCH_RULE)
        .add("hello", "bonjour")
        .add("file", "fichier", context="noun")
        .add("file", "Fichier", context="menu")
        .add("untranslated")
        .add_plural("apple", "apples", ["pomme", "pommes"])
        .add_plural("pear", "pears", ["poire", ""])
        .build()
    )


@pytest.fixture
def catalog_document() -> dict:
    """JSON-compatible catalog document."""
    return {
        "locale": "ru",
        "plural_forms": RUSSIAN_RULE,
        "messages": [
            {"id": "hello", "translation": "привет"},
            {"id": "file", "context": "noun", "translation": "файл"},
            {
                "id": "%d file",
                "plural_id": "%d files",
                "plural_translations": ["%d файл", "%d файла", "%d файлов"],
            },
            {"id": "draft", "translation": "черновик", "flags": ["fuzzy"]},
            {"id": "missing"},
        ],
    }


@pytest.fixture
def catalog_json(tmp_path: Path, catalog_document: dict) -> Path:
    """Catalog document written to a JSON file."""
    path = tmp_path / "ru.json"
    path.write_text(json.dumps(catalog_document, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging so caplog sees records in every test."""
    yield
    logger = logging.getLogger("lingobundle")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
