"""Turn Python source files into documentable entities."""

from __future__ import annotations

import ast
import glob
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from docgauge.docstring import parse_docstring
from docgauge.document import Document, EntityKind, Location, Signature, Visibility
from docgauge.errors import ExtractionError

logger = logging.getLogger(__name__)

IMPLICIT_RECEIVERS = {"self", "cls"}


class Extractor(Protocol):
    """Supplies documents for a set of path globs."""

    def extract(self, patterns: list[str]) -> list[Document]:
        """Return documents in a stable order."""


class PythonExtractor:
    """Extracts modules, classes, functions, attributes and constants with ``ast``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or Path.cwd()).resolve()

    def extract(self, patterns: list[str]) -> list[Document]:
        documents: list[Document] = []
        for path in self.expand(patterns):
            documents.extend(self.extract_file(path))
        logger.debug("Extracted %d documents from %s", len(documents), patterns)
        return documents

    def expand(self, patterns: list[str]) -> list[Path]:
        """Resolve globs relative to the root into a sorted, de-duplicated file list."""
        found: set[Path] = set()
        for pattern in patterns:
            candidate = Path(pattern)
            if not candidate.is_absolute():
                candidate = self.root / candidate
            if candidate.is_dir():
                found.update(path for path in candidate.rglob("*.py") if path.is_file())
                continue
            for match in glob.glob(str(candidate), recursive=True):
                path = Path(match)
                if path.is_file() and path.suffix == ".py":
                    found.add(path)
        return sorted(found)

    def extract_file(self, path: Path) -> list[Document]:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise ExtractionError(f"Cannot read {path}: {exc}") from exc
        return extract_source(source, path=self._display_path(path), module=_module_name(path))

    def _display_path(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()


def extract_source(source: str | bytes, *, path: str, module: str) -> list[Document]:
    """Parse source and return its documents in definition order.

    Bytes are decoded by the parser, which honours a PEP 263 coding cookie
    and otherwise expects UTF-8.
    """
    try:
        tree = ast.parse(source, filename=path)
    except (SyntaxError, ValueError) as exc:
        raise ExtractionError(f"Cannot parse {path}: {exc}") from exc

    documents = [
        _build_document(
            identifier=module,
            kind=EntityKind.MODULE,
            visibility=_visibility(module.rsplit(".", 1)[-1]),
            raw=ast.get_docstring(tree),
            location=Location(path, 1),
        )
    ]
    documents.extend(_walk_body(tree.body, prefix=module, path=path, in_class=False))
    return documents


def _walk_body(
    body: list[ast.stmt], *, prefix: str, path: str, in_class: bool
) -> Iterator[Document]:
    for index, node in enumerate(body):
        if isinstance(node, ast.ClassDef):
            identifier = f"{prefix}.{node.name}"
            yield _build_document(
                identifier=identifier,
                kind=EntityKind.CLASS,
                visibility=_visibility(node.name),
                raw=ast.get_docstring(node),
                location=Location(path, node.lineno),
            )
            yield from _walk_body(node.body, prefix=identifier, path=path, in_class=True)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            yield _build_document(
                identifier=f"{prefix}.{node.name}",
                kind=EntityKind.METHOD,
                visibility=_visibility(node.name),
                raw=ast.get_docstring(node),
                location=Location(path, node.lineno),
                signature=_signature(node, in_class=in_class),
            )
        elif isinstance(node, (ast.Assign, ast.AnnAssign)):
            for name in _assigned_names(node):
                kind = _assignment_kind(name, in_class=in_class)
                if kind is None:
                    continue
                yield _build_document(
                    identifier=f"{prefix}.{name}",
                    kind=kind,
                    visibility=_visibility(name),
                    raw=_trailing_docstring(body, index),
                    location=Location(path, node.lineno),
                )


def _build_document(
    *,
    identifier: str,
    kind: EntityKind,
    visibility: Visibility,
    raw: str | None,
    location: Location,
    signature: Signature | None = None,
) -> Document:
    parsed = parse_docstring(raw)
    return Document(
        identifier=identifier,
        kind=kind,
        visibility=visibility,
        docstring=parsed.text,
        tags=parsed.tags,
        location=location,
        signature=signature,
    )


def _signature(node: ast.FunctionDef | ast.AsyncFunctionDef, *, in_class: bool) -> Signature:
    args = node.args
    positional = [arg.arg for arg in [*args.posonlyargs, *args.args]]
    if in_class and positional and positional[0] in IMPLICIT_RECEIVERS:
        if not _is_staticmethod(node):
            positional = positional[1:]
    names = list(positional)
    if args.vararg is not None:
        names.append(args.vararg.arg)
    names.extend(arg.arg for arg in args.kwonlyargs)
    if args.kwarg is not None:
        names.append(args.kwarg.arg)
    return Signature(parameters=tuple(names), returns_value=_returns_value(node))


def _is_staticmethod(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    return any(
        isinstance(decorator, ast.Name) and decorator.id == "staticmethod"
        for decorator in node.decorator_list
    )


def _returns_value(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    if node.returns is not None:
        return not _is_none(node.returns)
    if node.name == "__init__":
        return False
    return any(
        isinstance(child, ast.Return) and child.value is not None and not _is_none(child.value)
        for child in _own_statements(node)
    )


def _is_none(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and node.value is None


def _own_statements(node: ast.AST) -> Iterator[ast.AST]:
    # Nested functions and classes have their own return statements.
    for child in ast.iter_child_nodes(node):
        if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)):
            continue
        yield child
        yield from _own_statements(child)


def _assigned_names(node: ast.Assign | ast.AnnAssign) -> list[str]:
    targets: Iterable[ast.expr] = node.targets if isinstance(node, ast.Assign) else [node.target]
    return [target.id for target in targets if isinstance(target, ast.Name)]


def _assignment_kind(name: str, *, in_class: bool) -> EntityKind | None:
    if name.startswith("__") and name.endswith("__"):
        return None
    if in_class:
        return EntityKind.ATTRIBUTE
    if name.lstrip("_").isupper():
        return EntityKind.CONSTANT
    return None


def _trailing_docstring(body: list[ast.stmt], index: int) -> str | None:
    if index + 1 >= len(body):
        return None
    following = body[index + 1]
    if (
        isinstance(following, ast.Expr)
        and isinstance(following.value, ast.Constant)
        and isinstance(following.value.value, str)
    ):
        return ast.get_docstring(ast.Module(body=[following], type_ignores=[]))
    return None


def _visibility(name: str) -> Visibility:
    if name.startswith("__") and not name.endswith("__"):
        return Visibility.PRIVATE
    if name.startswith("_") and not name.startswith("__"):
        return Visibility.PROTECTED
    return Visibility.PUBLIC


def _module_name(path: Path) -> str:
    parts = [path.stem] if path.stem != "__init__" else []
    parent = path.parent
    while (parent / "__init__.py").exists():
        parts.insert(0, parent.name)
        parent = parent.parent
    return ".".join(parts) or path.parent.name
