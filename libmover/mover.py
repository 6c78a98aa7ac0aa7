"""
Core routines for updating imports when a library is moved or renamed.

This module implements the functionality behind the CLI exposed in
``libmover.cli``.  When a library gets a new import alias, every other
project in the workspace is searched for ``import``/``require`` sites that
use the old alias and those specifiers are rewritten.  The path mapping in
the root tsconfig is then moved to the library's new location, and renamed
when the alias changes.

Rewriting is intentionally conservative: only string literal specifiers of
import declarations, dynamic imports and ``require`` calls are touched, and
each change replaces exactly the characters of the specifier, so the rest
of the file keeps its formatting byte for byte.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Any, Dict, List, Optional

from .changes import StringChange, apply_changes_to_string
from .errors import ConfigurationError
from .options import MoveOptions, normalize_options
from .resolver import AliasPair, get_path_mapping, resolve_aliases
from .rewriter import SpecifierRewriter
from .scanner import ModuleReferenceScanner
from .workspace import (
    ProjectConfiguration,
    Tree,
    get_projects,
    join_path_fragments,
    visit_not_ignored_files,
    write_json,
)

__all__ = [
    "update_imports",
    "update_file_imports",
    "update_path_mapping",
]

logger = logging.getLogger(__name__)


def update_imports(
    tree: Tree,
    options: MoveOptions,
    project: ProjectConfiguration,
    scanner: Optional[ModuleReferenceScanner] = None,
    replace_all: bool = False,
) -> None:
    """Rewrite references to a moved library and update its path mapping.

    Applications are never imported by other projects, so moving one leaves
    every file untouched.

    Parameters
    ----------
    tree: Tree
        The workspace.  Changes are written to the tree, not to disk.
    options: MoveOptions
        Move options.  Missing defaults are filled in with
        :func:`libmover.options.normalize_options`.
    project: ProjectConfiguration
        The library being moved, as configured before the move.
    scanner: ModuleReferenceScanner, optional
        Scanner to reuse.  A new one is built when omitted.
    replace_all: bool
        Replace every occurrence of the old alias inside a matching
        specifier instead of only its leading alias.

    Raises
    ------
    ConfigurationError
        If the root tsconfig has no ``compilerOptions.paths`` or no entry for
        the library's alias.
    """
    if project.project_type == "application":
        logger.info("%s is an application; no imports to update", project.name)
        return

    options = normalize_options(tree, options, project)
    resolved = resolve_aliases(tree, project, options.import_path)
    aliases = resolved.aliases
    if resolved.tsconfig is not None:
        _mapped_candidates(resolved.tsconfig, resolved.tsconfig_path, aliases.old)

    if options.update_import_path:
        scanner = scanner or ModuleReferenceScanner()
        rewriter = SpecifierRewriter(aliases, replace_all=replace_all)
        references = re.compile(re.escape(aliases.old))

        def visit(path: str) -> None:
            if not scanner.supports(path):
                return
            try:
                contents = tree.read(path, "utf-8")
            except UnicodeDecodeError:
                logger.warning("Skipping %s: not valid UTF-8", path)
                return
            if not references.search(contents):
                return
            update_file_imports(tree, path, rewriter, scanner)

        for name, definition in get_projects(tree).items():
            if name == options.project_name:
                continue
            visit_not_ignored_files(tree, definition.root, visit)

    if resolved.tsconfig is not None:
        update_path_mapping(
            resolved.tsconfig,
            resolved.tsconfig_path,
            aliases,
            old_root=project.root,
            new_root=options.relative_to_root_destination,
            rename=options.update_import_path,
        )
        write_json(tree, resolved.tsconfig_path, resolved.tsconfig)


def update_file_imports(
    tree: Tree,
    path: str,
    rewriter: SpecifierRewriter,
    scanner: ModuleReferenceScanner,
) -> int:
    """Rewrite the module specifiers of one file.

    Every change is computed against the file's current contents and then
    applied in one pass.  The file is written only when at least one site
    changed.

    Returns
    -------
    int
        The number of rewritten sites.
    """
    contents = tree.read(path, "utf-8")
    changes: List[StringChange] = []
    for site in scanner.find_reference_sites(path, contents):
        changes.extend(rewriter.changes_for(site))
    if not changes:
        return 0
    tree.write(path, apply_changes_to_string(contents, changes))
    rewritten = len(changes) // 2
    logger.debug("Rewrote %d import(s) in %s", rewritten, path)
    return rewritten


def _mapped_candidates(tsconfig: Dict[str, Any], tsconfig_path: str, alias: str) -> List[str]:
    candidates = get_path_mapping(tsconfig, tsconfig_path).get(alias)
    if candidates is None:
        raise ConfigurationError(
            f'unable to find "{alias}" in {tsconfig_path} compilerOptions.paths'
        )
    return candidates


def update_path_mapping(
    tsconfig: Dict[str, Any],
    tsconfig_path: str,
    aliases: AliasPair,
    old_root: str,
    new_root: str,
    rename: bool,
) -> List[str]:
    """Move the path mapping of ``aliases.old`` under ``new_root``.

    Each candidate path is made relative to ``old_root`` and joined onto
    ``new_root``.  When ``rename`` is set the entry is stored under
    ``aliases.new`` and the old key is removed, otherwise the old key keeps
    the re-based paths.  ``tsconfig`` is modified in place.

    Returns
    -------
    list[str]
        The re-based candidate paths.
    """
    paths = get_path_mapping(tsconfig, tsconfig_path)
    candidates = _mapped_candidates(tsconfig, tsconfig_path, aliases.old)
    updated = [
        join_path_fragments(new_root, posixpath.relpath(candidate, old_root))
        for candidate in candidates
    ]
    if rename:
        del paths[aliases.old]
        paths[aliases.new] = updated
    else:
        paths[aliases.old] = updated
    logger.info("Mapped %s to %s", aliases.new if rename else aliases.old, ", ".join(updated))
    return updated
