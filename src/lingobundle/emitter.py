"""Write compiled bundles to disk as importable Python modules.

One module is written per bundle. Its location is derived from a dotted
name: ``myapp.locale.messages_fr`` under ``build/`` becomes
``build/myapp/locale/messages_fr.py``. The module defines:

    LOCALE        locale of the source catalog (or None)
    PLURAL_FORMS  source Plural-Forms header (or None)
    NPLURALS      number of plural forms
    MESSAGES      key to value table in catalog order
    plural_eval   generated plural selector
    Bundle        bundle class, a subclass of the configured base

The catalog is fully compiled before the file system is touched, and the
file is written through a temporary sibling that is renamed into place.
"""

from __future__ import annotations

import keyword
import logging
import os
import tempfile
from pathlib import Path

from lingobundle.catalog import Catalog
from lingobundle.compiler import BaseSpec, BundleCompiler, resolve_base
from lingobundle.config import CompilerConfig
from lingobundle.exceptions import CompileError, EmitError
from lingobundle.plurals.codegen import generate_function

logger = logging.getLogger(__name__)

_MODULE_TEMPLATE = '''\
"""Compiled message bundle {name}.

Generated by lingobundle from a {mode} catalog. Do not edit.
"""

from lingobundle.arith import div64, mod64, wrap64
from {base_module} import {base_class} as _Base

LOCALE = {locale!r}
PLURAL_FORMS = {plural_forms!r}
NPLURALS = {nplurals!r}

MESSAGES = {{
{messages}}}


{plural_eval}

class Bundle(_Base):
    def __init__(self):
        super().__init__(
            MESSAGES,
            evaluator={evaluator},
            nplurals=NPLURALS,
            plural_forms=PLURAL_FORMS,
        )
'''


def split_name(name: str) -> list[str]:
    """Split and validate a dotted bundle name.

    Raises:
        EmitError: If any segment is not a Python identifier or is a keyword.
    """
    parts = name.split(".")
    for part in parts:
        if not part.isidentifier():
            raise EmitError(f"Invalid bundle name {name!r}: {part!r} is not an identifier")
        if keyword.iskeyword(part):
            raise EmitError(f"Invalid bundle name {name!r}: {part!r} is a keyword")
    return parts


def module_path(name: str, output_dir: str | Path) -> Path:
    """Path of the module emitted for ``name`` under ``output_dir``."""
    parts = split_name(name)
    return Path(output_dir).joinpath(*parts[:-1], f"{parts[-1]}.py")


def check_importable(base_class: type) -> None:
    """Ensure an emitted module can import ``base_class`` by name.

    Raises:
        CompileError: If the class is nested in another scope or lives in
            ``__main__``.
    """
    if base_class.__module__ == "__main__" or "." in base_class.__qualname__:
        raise CompileError(
            f"Base bundle class {base_class.__module__}.{base_class.__qualname__} "
            "cannot be imported from an emitted module; define it at the top "
            "level of an importable module"
        )


def render_module(
    catalog: Catalog,
    name: str,
    base: BaseSpec = None,
    config: CompilerConfig | None = None,
) -> str:
    """Render the Python source of the bundle module for ``catalog``.

    Raises:
        EmitError: If ``name`` is invalid.
        CompileError: If the catalog cannot be compiled.
    """
    split_name(name)
    compiler = BundleCompiler(config)
    base_class = resolve_base(base, compiler.config.base)
    check_importable(base_class)

    if catalog.plural_forms is not None:
        rule, _ = compiler.compile_rule(catalog.plural_forms)
        plural_eval = generate_function(rule.expression)
        evaluator = "plural_eval"
        nplurals = rule.nplurals
    else:
        plural_eval = generate_function(None)
        evaluator = "None"
        nplurals = 1

    messages = "".join(
        f"    {key!r}: {value!r},\n"
        for key, value in compiler.build_messages(catalog).items()
    )
    source = _MODULE_TEMPLATE.format(
        name=name,
        mode=catalog.mode.value,
        base_module=base_class.__module__,
        base_class=base_class.__qualname__,
        locale=catalog.locale,
        plural_forms=catalog.plural_forms,
        nplurals=nplurals,
        messages=messages,
        plural_eval=plural_eval,
        evaluator=evaluator,
    )
    try:
        compile(source, f"{name}.py", "exec")
    except (SyntaxError, RecursionError) as e:
        raise CompileError(
            f"Generated module for {name!r} does not compile: {e}",
            header=catalog.plural_forms,
        ) from e
    return source


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a temporary file and rename.

    Missing parent directories are created. OS errors propagate unchanged;
    no partial file is left behind.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(temp_path, path)
    except BaseException:
        Path(temp_path).unlink(missing_ok=True)
        raise


def emit_bundle(
    catalog: Catalog,
    name: str,
    output_dir: str | Path | None = None,
    base: BaseSpec = None,
    config: CompilerConfig | None = None,
) -> Path:
    """Compile ``catalog`` and write it as module ``name``.

    Args:
        catalog: Catalog to compile.
        name: Fully-qualified dotted module name.
        output_dir: Root directory; defaults to ``config.output_dir``.
        base: Bundle base class or dotted path.
        config: Compiler configuration.

    Returns:
        Path of the written module.

    Raises:
        EmitError: If ``name`` is invalid.
        CompileError: If the catalog cannot be compiled.
        OSError: If the target cannot be written.
    """
    config = config or CompilerConfig()
    root = Path(output_dir) if output_dir is not None else config.output_dir
    path = module_path(name, root)

    source = render_module(catalog, name, base, config)
    write_atomic(path, source)
    logger.debug("Wrote bundle %s to %s (%d bytes)", name, path, len(source.encode("utf-8")))
    return path
