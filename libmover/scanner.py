"""
Locate module references in JavaScript and TypeScript source.

Files are parsed with tree-sitter and three kinds of sites are collected:

* ``import ... from 'x'`` declarations,
* dynamic ``import('x')`` expressions,
* ``require('x')`` calls on the plain identifier ``require``.

Only string literal specifiers count.  Template literals, computed
arguments, ``module.require('x')`` and ``import x = require('x')`` are not
reported, which leaves such references unmodified.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

__all__ = [
    "ReferenceSite",
    "ModuleReferenceScanner",
    "find_nodes",
    "LANGUAGE_CONFIG",
]

logger = logging.getLogger(__name__)

# extension -> tree_sitter_typescript language getter
LANGUAGE_CONFIG: Dict[str, str] = {
    ".ts": "language_typescript",
    ".mts": "language_typescript",
    ".cts": "language_typescript",
    ".tsx": "language_tsx",
    ".js": "language_tsx",
    ".jsx": "language_tsx",
    ".mjs": "language_tsx",
    ".cjs": "language_tsx",
}

IMPORT = "import"
DYNAMIC_IMPORT = "dynamic-import"
REQUIRE = "require"


@dataclass(frozen=True)
class ReferenceSite:
    """A string literal naming a module.

    ``specifier`` is the literal's text without its quotes and ``start`` the
    character offset of its first character inside the source.
    """

    specifier: str
    start: int
    kind: str


def find_nodes(node: Node, kind: str) -> Iterator[Node]:
    """Yield every node of type ``kind`` under ``node`` in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == kind:
            yield current
        stack.extend(reversed(current.children))


def _first_argument(call: Node) -> Optional[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return None
    for child in arguments.named_children:
        if child.type != "comment":
            return child
    return None


class ModuleReferenceScanner:
    """Find module reference sites in source files.

    One parser per grammar is created up front and reused for every file, so
    a single scanner should be built once and shared.
    """

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}
        for getter in sorted(set(LANGUAGE_CONFIG.values())):
            language = Language(getattr(tree_sitter_typescript, getter)())
            self._parsers[getter] = Parser(language)

    def supports(self, path: str) -> bool:
        return posixpath.splitext(path)[1].lower() in LANGUAGE_CONFIG

    def parse(self, path: str, source: bytes) -> Tree:
        extension = posixpath.splitext(path)[1].lower()
        if extension not in LANGUAGE_CONFIG:
            raise ValueError(f"No parser for {path}")
        return self._parsers[LANGUAGE_CONFIG[extension]].parse(source)

    def find_reference_sites(self, path: str, contents: str) -> List[ReferenceSite]:
        """Return every module reference site in ``contents``.

        Static imports are listed first, then dynamic imports and require
        calls in document order.
        """
        source = contents.encode("utf-8")
        tree = self.parse(path, source)
        if tree.root_node.has_error:
            logger.debug("%s has syntax errors; scanning the recoverable parts", path)

        def site(literal: Node, kind: str) -> ReferenceSite:
            # tree-sitter reports byte offsets, edits work on characters
            start = len(source[: literal.start_byte + 1].decode("utf-8"))
            text = source[literal.start_byte + 1 : literal.end_byte - 1].decode("utf-8")
            return ReferenceSite(specifier=text, start=start, kind=kind)

        sites: List[ReferenceSite] = []
        for declaration in find_nodes(tree.root_node, "import_statement"):
            literal = declaration.child_by_field_name("source")
            if literal is not None and literal.type == "string":
                sites.append(site(literal, IMPORT))

        for call in find_nodes(tree.root_node, "call_expression"):
            callee = call.child_by_field_name("function")
            literal = _first_argument(call)
            if callee is None or literal is None or literal.type != "string":
                continue
            if callee.type == "import":
                sites.append(site(literal, DYNAMIC_IMPORT))
            elif callee.type == "identifier" and callee.text == b"require":
                sites.append(site(literal, REQUIRE))
        return sites
