"""Tests for the catalog model."""

from dataclasses import FrozenInstanceError

import pytest

from lingobundle.catalog import (
    CONTEXT_GLUE,
    Catalog,
    CatalogMode,
    MessageEntry,
    composite_key,
    plural_forms_from_header,
)
from lingobundle.exceptions import CatalogError


class TestCompositeKey:
    """Tests for composite_key."""

    def test_without_context(self):
        assert composite_key("hello") == "hello"

    def test_with_context(self):
        assert composite_key("file", "menu") == "menu\x04file"
        assert CONTEXT_GLUE == "\x04"

    def test_empty_context_is_kept(self):
        """Test that an empty context differs from no context."""
        assert composite_key("file", "") == "\x04file"
        assert composite_key("file", "") != composite_key("file")


class TestCatalogMode:
    """Tests for CatalogMode."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("translated", CatalogMode.TRANSLATED),
            ("PO", CatalogMode.TRANSLATED),
            (" template ", CatalogMode.TEMPLATE),
            ("pot", CatalogMode.TEMPLATE),
        ],
    )
    def test_from_string(self, value, expected):
        assert CatalogMode.from_string(value) is expected

    def test_unknown_mode(self):
        with pytest.raises(CatalogError, match="Unknown catalog mode"):
            CatalogMode.from_string("compiled")


# =============================================================================
# MessageEntry Tests
# =============================================================================


class TestMessageEntry:
    """Tests for MessageEntry."""

    def test_scalar_entry(self):
        entry = MessageEntry(id="hello", translation="bonjour")
        assert entry.key == "hello"
        assert not entry.is_plural
        assert entry.is_translated
        assert not entry.fuzzy

    def test_plural_entry(self):
        entry = MessageEntry(
            id="apple",
            plural_id="apples",
            plural_translations=["pomme", "pommes"],
        )
        assert entry.is_plural
        assert entry.plural_translations == ("pomme", "pommes")
        assert entry.is_translated

    def test_untranslated(self):
        assert not MessageEntry(id="hello").is_translated
        assert not MessageEntry(id="hello", translation="").is_translated
        assert not MessageEntry(id="a", plural_id="b", plural_translations=("", None)).is_translated

    def test_context_key(self):
        entry = MessageEntry(id="file", context="noun", translation="fichier")
        assert entry.key == "noun\x04file"

    def test_fuzzy_flag(self):
        entry = MessageEntry(id="draft", translation="brouillon", flags=["fuzzy", "python-format"])
        assert entry.fuzzy
        assert entry.flags == frozenset({"fuzzy", "python-format"})

    def test_plural_translations_without_plural_id(self):
        with pytest.raises(CatalogError, match="no plural id"):
            MessageEntry(id="apple", plural_translations=("pomme",))

    def test_plural_entry_with_scalar_translation(self):
        with pytest.raises(CatalogError, match="scalar translation"):
            MessageEntry(id="apple", plural_id="apples", translation="pomme")

    def test_non_string_id(self):
        with pytest.raises(CatalogError):
            MessageEntry(id=42)

    def test_frozen(self):
        entry = MessageEntry(id="hello")
        with pytest.raises(FrozenInstanceError):
            entry.translation = "hi"


# =============================================================================
# Catalog Tests
# =============================================================================


class TestCatalog:
    """Tests for Catalog and CatalogBuilder."""

    def test_builder(self, french_catalog):
        assert len(french_catalog) == 6
        assert french_catalog.locale == "fr"
        assert french_catalog.plural_forms == "nplurals=2; plural=(n > 1);"
        assert french_catalog.mode is CatalogMode.TRANSLATED
        assert not french_catalog.is_template

    def test_keys_in_order(self, french_catalog):
        assert french_catalog.keys() == [
            "hello",
            "noun\x04file",
            "menu\x04file",
            "untranslated",
            "apple",
            "pear",
        ]

    def test_iteration(self, french_catalog):
        assert [entry.id for entry in french_catalog][:2] == ["hello", "file"]

    def test_get(self, french_catalog):
        assert french_catalog.get("file", "menu").translation == "Fichier"
        assert french_catalog.get("file") is None
        assert french_catalog.get("nothing") is None

    def test_get_returns_last_duplicate(self):
        catalog = Catalog.builder().add("a", "first").add("a", "second").build()
        assert catalog.get("a").translation == "second"
        assert catalog.duplicate_keys() == ["a"]

    def test_no_duplicates(self, french_catalog):
        assert french_catalog.duplicate_keys() == []

    def test_template_builder(self):
        catalog = Catalog.builder().template().add("hello").build()
        assert catalog.is_template

    def test_mode_from_string(self):
        catalog = Catalog(entries=[MessageEntry(id="a")], mode="pot")
        assert catalog.mode is CatalogMode.TEMPLATE
        assert isinstance(catalog.entries, tuple)

    def test_with_mode(self, french_catalog):
        template = french_catalog.with_mode("template")
        assert template.is_template
        assert template.entries == french_catalog.entries
        assert not french_catalog.is_template

    def test_metadata(self):
        catalog = Catalog.builder().add_metadata("Project-Id-Version", "demo 1.0").build()
        assert catalog.metadata == {"Project-Id-Version": "demo 1.0"}

    def test_add_entry(self):
        entry = MessageEntry(id="x", translation="y")
        assert Catalog.builder().add_entry(entry).build().entries == (entry,)


class TestPluralFormsFromHeader:
    """Tests for plural_forms_from_header."""

    def test_present(self):
        header = (
            "Project-Id-Version: demo\n"
            "Content-Type: text/plain; charset=UTF-8\n"
            "Plural-Forms: nplurals=2; plural=(n != 1);\n"
        )
        assert plural_forms_from_header(header) == "nplurals=2; plural=(n != 1);"

    def test_case_insensitive(self):
        assert plural_forms_from_header("plural-forms: nplurals=1; plural=0;") == "nplurals=1; plural=0;"

    def test_absent_or_empty(self):
        assert plural_forms_from_header("Language: fr\n") is None
        assert plural_forms_from_header("Plural-Forms:   \n") is None
