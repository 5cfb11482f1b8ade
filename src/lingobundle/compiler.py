"""Compile catalogs into resource bundles.

The pipeline is straight-line and all-or-nothing:

    Catalog
       |
       +---> Plural-Forms header ---> PluralRule ---> CompiledExpression
       |
       +---> entries ---> key/value table
       |
       v
    CompiledBundle

Nothing is constructed until both the table and the plural evaluator are
ready, so a failing compilation never yields a half-built bundle.

Example:
    >>> catalog = Catalog.builder().add("hello", "bonjour").build()
    >>> bundle = compile_catalog(catalog)
    >>> bundle.lookup("hello")
    'bonjour'
"""

from __future__ import annotations

import importlib
import logging
from typing import Union

from lingobundle.bundle import BundleValue, CompiledBundle
from lingobundle.catalog import Catalog, MessageEntry
from lingobundle.config import CompilerConfig
from lingobundle.exceptions import CatalogError, CompileError, PluralFormsError
from lingobundle.plurals.compiler import CompiledExpression, compile_expression
from lingobundle.plurals.parser import PluralRule, parse_plural_forms

logger = logging.getLogger(__name__)

BaseSpec = Union[type[CompiledBundle], str, None]


def resolve_base(base: BaseSpec, default: str = "lingobundle.bundle.CompiledBundle") -> type[CompiledBundle]:
    """Resolve the class a compiled bundle is instantiated from.

    Args:
        base: A CompiledBundle subclass, its dotted import path, or None.
        default: Dotted path used when ``base`` is None.

    Raises:
        CompileError: If the path cannot be imported or the class is not a
            CompiledBundle subclass.
    """
    if base is None:
        base = default
    if isinstance(base, str):
        module_path, _, class_name = base.rpartition(".")
        if not module_path:
            raise CompileError(f"Base bundle class must be a dotted path, got {base!r}")
        try:
            module = importlib.import_module(module_path)
            base = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise CompileError(f"Cannot resolve base bundle class {base!r}: {e}") from e
    if not isinstance(base, type) or not issubclass(base, CompiledBundle):
        raise CompileError(f"Base bundle class must subclass CompiledBundle, got {base!r}")
    return base


class BundleCompiler:
    """Turns Catalog objects into CompiledBundle instances.

    A compiler holds only its configuration; one instance may compile any
    number of catalogs, from any number of threads.
    """

    def __init__(self, config: CompilerConfig | None = None) -> None:
        self._config = config or CompilerConfig()

    @property
    def config(self) -> CompilerConfig:
        return self._config

    def compile_rule(self, plural_forms: str) -> tuple[PluralRule, CompiledExpression]:
        """Parse and compile a Plural-Forms header.

        Raises:
            CompileError: Wrapping any grammar error or compile failure.
                ``header`` holds the offending text.
        """
        try:
            rule = parse_plural_forms(
                plural_forms,
                max_length=self._config.max_expression_length,
                max_depth=self._config.max_nesting_depth,
            )
            evaluator = compile_expression(rule.expression)
        except PluralFormsError as e:
            raise CompileError(f"Invalid plural rule: {e}", header=plural_forms) from e
        except CompileError as e:
            raise CompileError(str(e), header=plural_forms) from e
        except RecursionError as e:
            raise CompileError("Plural rule is too deeply nested to compile", header=plural_forms) from e
        return rule, evaluator

    def build_messages(self, catalog: Catalog) -> dict[str, BundleValue]:
        """Build the key to value table in catalog order.

        Raises:
            CatalogError: On duplicate keys when ``strict_duplicates`` is set.
        """
        messages: dict[str, BundleValue] = {}
        for entry in catalog:
            key = entry.key
            if key in messages:
                if self._config.strict_duplicates:
                    raise CatalogError(f"Duplicate message key: {key!r}")
                logger.warning("Duplicate message key %r; the later entry wins", key)
            messages[key] = self._entry_value(entry, catalog.is_template)
        return messages

    def _entry_value(self, entry: MessageEntry, template: bool) -> BundleValue:
        if template:
            if entry.is_plural:
                return (entry.id, entry.plural_id)
            return entry.id

        drop = entry.fuzzy and not self._config.include_fuzzy
        if drop:
            logger.debug("Treating fuzzy message %r as untranslated", entry.key)

        if entry.is_plural:
            if drop:
                return (None,) * len(entry.plural_translations)
            return tuple(form or None for form in entry.plural_translations)
        if drop:
            return None
        return entry.translation or None

    def compile(self, catalog: Catalog, base: BaseSpec = None) -> CompiledBundle:
        """Compile a catalog.

        Args:
            catalog: Catalog to compile; not modified.
            base: Bundle class (or dotted path) to instantiate; defaults to
                the configured base.

        Returns:
            A new, fully built bundle.

        Raises:
            CompileError: If the plural rule or base class is invalid.
            CatalogError: On duplicate keys in strict mode.
        """
        bundle_class = resolve_base(base, self._config.base)

        if catalog.plural_forms is not None:
            rule, evaluator = self.compile_rule(catalog.plural_forms)
            nplurals = rule.nplurals
        else:
            evaluator = None
            nplurals = 1

        messages = self.build_messages(catalog)
        logger.debug(
            "Compiled %d messages (%s mode, nplurals=%d)",
            len(messages),
            catalog.mode.value,
            nplurals,
        )
        return bundle_class(
            messages,
            evaluator=evaluator,
            nplurals=nplurals,
            plural_forms=catalog.plural_forms,
        )


def compile_catalog(
    catalog: Catalog,
    base: BaseSpec = None,
    config: CompilerConfig | None = None,
) -> CompiledBundle:
    """Compile a catalog with a one-off BundleCompiler."""
    return BundleCompiler(config).compile(catalog, base)


def compile_plural_forms(
    plural_forms: str,
    config: CompilerConfig | None = None,
) -> tuple[PluralRule, CompiledExpression]:
    """Parse and compile a Plural-Forms header, raising CompileError on failure."""
    return BundleCompiler(config).compile_rule(plural_forms)
