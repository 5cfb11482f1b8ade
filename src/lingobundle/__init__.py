"""lingobundle - compile gettext catalogs into fast resource bundles.

Catalogs are compiled once, at build time, into bundles with a plain
key/value table and a compiled plural selector derived from the
catalog's ``Plural-Forms`` header.

Example:
    from lingobundle import Catalog, compile_catalog

    catalog = (
        Catalog.builder(locale="fr")
        .with_plural_forms("nplurals=2; plural=(n > 1);")
        .add("hello", "bonjour")
        .add_plural("apple", "apples", ["pomme", "pommes"])
        .build()
    )
    bundle = compile_catalog(catalog)

    bundle.lookup("hello")           # "bonjour"
    bundle.get_plural("apple", 3)    # "pommes"
"""

from lingobundle.bundle import BundleValue, CompiledBundle, ResourceBundle
from lingobundle.catalog import (
    CONTEXT_GLUE,
    Catalog,
    CatalogBuilder,
    CatalogMode,
    MessageEntry,
    composite_key,
    plural_forms_from_header,
)
from lingobundle.compiler import (
    BundleCompiler,
    compile_catalog,
    compile_plural_forms,
    resolve_base,
)
from lingobundle.config import CompilerConfig
from lingobundle.emitter import emit_bundle, module_path, render_module
from lingobundle.exceptions import (
    BundleError,
    CatalogError,
    CompileError,
    ConfigError,
    DivideByZeroError,
    EmitError,
    InvalidParentError,
    MalformedHeaderError,
    ParentAlreadySetError,
    PluralFormsError,
    PluralSyntaxError,
    UnknownIdentifierError,
)
from lingobundle.loader import catalog_from_dict, load_catalog
from lingobundle.plurals import (
    CompiledExpression,
    PluralRule,
    compile_expression,
    parse_expression,
    parse_plural_forms,
)

__version__ = "0.1.0"

__all__ = [
    # Bundles
    "BundleValue",
    "CompiledBundle",
    "ResourceBundle",
    # Catalog
    "CONTEXT_GLUE",
    "Catalog",
    "CatalogBuilder",
    "CatalogMode",
    "MessageEntry",
    "composite_key",
    "plural_forms_from_header",
    # Compiler
    "BundleCompiler",
    "compile_catalog",
    "compile_plural_forms",
    "resolve_base",
    "CompilerConfig",
    # Emission
    "emit_bundle",
    "module_path",
    "render_module",
    # Loaders
    "catalog_from_dict",
    "load_catalog",
    # Plural rules
    "CompiledExpression",
    "PluralRule",
    "compile_expression",
    "parse_expression",
    "parse_plural_forms",
    # Errors
    "BundleError",
    "CatalogError",
    "CompileError",
    "ConfigError",
    "DivideByZeroError",
    "EmitError",
    "InvalidParentError",
    "MalformedHeaderError",
    "ParentAlreadySetError",
    "PluralFormsError",
    "PluralSyntaxError",
    "UnknownIdentifierError",
    "__version__",
]
