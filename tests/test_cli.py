"""Tests for the lingobundle command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from lingobundle.cli import app, format_value, plural_samples
from lingobundle.compiler import compile_plural_forms
from lingobundle.cli.errors import CLIError, ErrorCode, classify
from lingobundle.exceptions import (
    CatalogError,
    CompileError,
    ConfigError,
    DivideByZeroError,
    EmitError,
    PluralSyntaxError,
)

runner = CliRunner()


def write_catalog(path, **document):
    document.setdefault("messages", [{"id": "hello", "translation": "bonjour"}])
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


# =============================================================================
# compile
# =============================================================================


class TestCompileCommand:
    """Tests for `lingobundle compile`."""

    def test_json_catalog(self, tmp_path, catalog_json):
        out = tmp_path / "out"
        result = runner.invoke(app, ["compile", str(catalog_json), "myapp.locale.ru", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "Bundle written to" in result.output
        assert "Messages: 5" in result.output
        assert "Mode: translated" in result.output
        assert (out / "myapp" / "locale" / "ru.py").exists()

    def test_po_catalog(self, tmp_path):
        po = tmp_path / "fr.po"
        po.write_text(
            'msgid ""\nmsgstr ""\n"Language: fr\\n"\n'
            '"Plural-Forms: nplurals=2; plural=(n > 1);\\n"\n\n'
            'msgid "hello"\nmsgstr "bonjour"\n',
            encoding="utf-8",
        )
        result = runner.invoke(app, ["compile", str(po), "fr", "-o", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "bonjour" in (tmp_path / "fr.py").read_text(encoding="utf-8")

    def test_template_flag(self, tmp_path, catalog_json):
        result = runner.invoke(
            app, ["compile", str(catalog_json), "ru", "-o", str(tmp_path), "--template"]
        )
        assert result.exit_code == 0, result.output
        assert "Mode: template" in result.output

    def test_output_dir_from_config(self, tmp_path, catalog_json):
        config = tmp_path / "lingobundle.yaml"
        config.write_text(f"output_dir: {tmp_path / 'configured'}\n", encoding="utf-8")
        result = runner.invoke(app, ["compile", str(catalog_json), "ru", "--config", str(config)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "configured" / "ru.py").exists()

    def test_missing_catalog(self, tmp_path):
        result = runner.invoke(app, ["compile", str(tmp_path / "nope.po"), "fr", "-o", str(tmp_path)])
        assert result.exit_code == ErrorCode.FILE_NOT_FOUND.value

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "fr.txt"
        path.write_text("hello", encoding="utf-8")
        result = runner.invoke(app, ["compile", str(path), "fr", "-o", str(tmp_path)])
        assert result.exit_code == ErrorCode.INVALID_FILE_FORMAT.value

    def test_invalid_plural_rule(self, tmp_path):
        path = write_catalog(tmp_path / "xx.json", plural_forms="nplurals=2; plural=(n / 0);")
        out = tmp_path / "out"
        result = runner.invoke(app, ["compile", str(path), "xx", "-o", str(out)])
        assert result.exit_code == ErrorCode.COMPILE_FAILED.value
        assert not out.exists()

    def test_invalid_name(self, tmp_path):
        path = write_catalog(tmp_path / "fr.json")
        result = runner.invoke(app, ["compile", str(path), "fr-FR", "-o", str(tmp_path)])
        assert result.exit_code == ErrorCode.INVALID_FILE_FORMAT.value

    def test_invalid_base(self, tmp_path):
        path = write_catalog(tmp_path / "fr.json")
        result = runner.invoke(
            app, ["compile", str(path), "fr", "-o", str(tmp_path), "--base", "lingobundle.catalog.Catalog"]
        )
        assert result.exit_code == ErrorCode.COMPILE_FAILED.value

    def test_invalid_config(self, tmp_path):
        path = write_catalog(tmp_path / "fr.json")
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
        result = runner.invoke(app, ["compile", str(path), "fr", "--config", str(config)])
        assert result.exit_code == ErrorCode.CONFIG_INVALID.value

    def test_invalid_catalog_document(self, tmp_path):
        path = tmp_path / "fr.json"
        path.write_text(json.dumps({"messages": [{"msgid": "x"}]}), encoding="utf-8")
        result = runner.invoke(app, ["compile", str(path), "fr", "-o", str(tmp_path)])
        assert result.exit_code == ErrorCode.INVALID_FILE_FORMAT.value


# =============================================================================
# check-plural
# =============================================================================


class TestCheckPluralCommand:
    """Tests for `lingobundle check-plural`."""

    def test_valid_header(self):
        result = runner.invoke(app, ["check-plural", "nplurals=2; plural=(n != 1);", "-n", "1", "-n", "2"])
        assert result.exit_code == 0, result.output
        assert "nplurals: 2" in result.output
        assert "plural: (n != 1)" in result.output
        assert "stack depth: 2" in result.output

    def test_default_samples(self):
        result = runner.invoke(app, ["check-plural", "nplurals=2; plural=(n > 1);"])
        assert result.exit_code == 0, result.output
        assert "102" in result.output

    def test_index_out_of_range_warns(self):
        result = runner.invoke(app, ["check-plural", "nplurals=2; plural=n;", "-n", "5"])
        assert result.exit_code == 0

    def test_index_truncated_like_bundle(self):
        result = runner.invoke(
            app, ["check-plural", "nplurals=2; plural=n;", "-n", "4294967296", "-n", "4294967297"]
        )
        assert result.exit_code == 0, result.output
        assert "Warning" not in result.output

    @pytest.mark.parametrize(
        "header",
        [
            "nplurals=2; plural=(n != );",
            "nplurals=2; plural=(k != 1);",
            "plural=(n != 1);",
            "nplurals=2; plural=(n % 0);",
        ],
    )
    def test_invalid_header(self, header):
        result = runner.invoke(app, ["check-plural", header])
        assert result.exit_code == ErrorCode.COMPILE_FAILED.value

    def test_runtime_division_by_zero(self):
        result = runner.invoke(app, ["check-plural", "nplurals=2; plural=(10 / n);", "-n", "0"])
        assert result.exit_code == ErrorCode.GENERAL_ERROR.value


# =============================================================================
# inspect
# =============================================================================


class TestInspectCommand:
    """Tests for `lingobundle inspect`."""

    def test_summary(self, catalog_json):
        result = runner.invoke(app, ["inspect", str(catalog_json)])
        assert result.exit_code == 0, result.output
        assert "5 keys, nplurals=3" in result.output

    def test_verbose(self, catalog_json):
        result = runner.invoke(app, ["-v", "inspect", str(catalog_json)])
        assert result.exit_code == 0, result.output

    def test_template(self, tmp_path):
        path = write_catalog(tmp_path / "fr.json")
        result = runner.invoke(app, ["inspect", str(path), "--template"])
        assert result.exit_code == 0, result.output
        assert "1 keys, nplurals=1" in result.output

    def test_missing_catalog(self, tmp_path):
        result = runner.invoke(app, ["inspect", str(tmp_path / "missing.yaml")])
        assert result.exit_code == ErrorCode.FILE_NOT_FOUND.value


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Tests for CLI helper functions."""

    @pytest.mark.parametrize(
        "error,code",
        [
            (FileNotFoundError("x"), ErrorCode.FILE_NOT_FOUND),
            (ConfigError("x"), ErrorCode.CONFIG_INVALID),
            (CompileError("x"), ErrorCode.COMPILE_FAILED),
            (PluralSyntaxError("x"), ErrorCode.COMPILE_FAILED),
            (CatalogError("x"), ErrorCode.INVALID_FILE_FORMAT),
            (EmitError("x"), ErrorCode.INVALID_FILE_FORMAT),
            (PermissionError("x"), ErrorCode.FILE_NOT_WRITABLE),
            (DivideByZeroError("x"), ErrorCode.GENERAL_ERROR),
        ],
    )
    def test_classify(self, error, code):
        assert classify(error) is code

    def test_cli_error(self):
        error = CLIError("boom", ErrorCode.USAGE_ERROR, hint="try again")
        assert str(error) == "boom"
        assert error.code.value == 2

    def test_plural_samples_match_bundle_index(self):
        _, evaluator = compile_plural_forms("nplurals=2; plural=n;")
        counts = [1, 4294967296, 4294967297, 2147483648, -1]
        assert plural_samples(evaluator, counts) == [
            (1, 1),
            (4294967296, 0),
            (4294967297, 1),
            (2147483648, -2147483648),
            (-1, -1),
        ]

    def test_format_value(self):
        assert format_value("bonjour") == "bonjour"
        assert "untranslated" in format_value(None)
        assert format_value(("a", None)).startswith("a | ")
        assert format_value("[bold]x") == "\\[bold]x"
