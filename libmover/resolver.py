"""
Work out which alias a library is currently imported by.

Most libraries are mapped in ``compilerOptions.paths`` of the root tsconfig,
and the key whose paths point into the library's source root is the alias in
use, even when the library was generated with a custom import path.  Without
such an entry the alias is derived from the library's directory and the
workspace scope, e.g. ``libs/shared/ui`` in scope ``acme`` is
``@acme/shared/ui``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ConfigurationError
from .workspace import ProjectConfiguration, Tree, WorkspaceLayout, get_workspace_layout, read_json

__all__ = [
    "AliasPair",
    "ResolvedAliases",
    "get_root_tsconfig_path",
    "get_import_path",
    "normalize_slashes",
    "get_path_mapping",
    "find_mapped_alias",
    "compute_alias",
    "resolve_aliases",
]

logger = logging.getLogger(__name__)

ROOT_TSCONFIG_CANDIDATES = ("tsconfig.base.json", "tsconfig.json")


@dataclass(frozen=True)
class AliasPair:
    old: str
    new: Optional[str]


@dataclass
class ResolvedAliases:
    aliases: AliasPair
    tsconfig_path: str
    tsconfig: Optional[Dict[str, Any]] = None


def get_root_tsconfig_path(tree: Tree) -> str:
    for path in ROOT_TSCONFIG_CANDIDATES:
        if tree.exists(path):
            return path
    return ROOT_TSCONFIG_CANDIDATES[0]


def normalize_slashes(value: str) -> str:
    return "/".join(part for part in value.split("/") if part)


def get_import_path(npm_scope: Optional[str], project_directory: str) -> str:
    if not npm_scope:
        return project_directory
    scope = npm_scope if npm_scope.startswith("@") else "@" + npm_scope
    return f"{scope}/{project_directory}"


def get_path_mapping(tsconfig: Dict[str, Any], tsconfig_path: str) -> Dict[str, list]:
    """Return ``compilerOptions.paths`` of a tsconfig document.

    Raises
    ------
    ConfigurationError
        If the document has no ``compilerOptions.paths`` table.
    """
    paths = (tsconfig.get("compilerOptions") or {}).get("paths")
    if not isinstance(paths, dict):
        raise ConfigurationError(f"unable to find compilerOptions.paths in {tsconfig_path}")
    return paths


def find_mapped_alias(
    tsconfig: Dict[str, Any], tsconfig_path: str, source_root: str
) -> Optional[str]:
    """Return the first path alias with a candidate inside ``source_root``."""
    for alias, candidates in get_path_mapping(tsconfig, tsconfig_path).items():
        if any(candidate.startswith(source_root) for candidate in candidates):
            return alias
    return None


def compute_alias(layout: WorkspaceLayout, project_root: str) -> str:
    directory = project_root
    if layout.libs_dir not in ("", ".") and directory.startswith(layout.libs_dir):
        directory = directory[len(layout.libs_dir):]
    if directory[:1] in ("/", "\\"):
        directory = directory[1:]
    return normalize_slashes(get_import_path(layout.npm_scope, directory).replace("\\", "/"))


def resolve_aliases(
    tree: Tree, project: ProjectConfiguration, import_path: Optional[str]
) -> ResolvedAliases:
    """Resolve the alias pair for moving ``project`` to ``import_path``.

    The root tsconfig, when present, is read once and returned alongside the
    aliases so the caller can update its path mapping.
    """
    tsconfig_path = get_root_tsconfig_path(tree)
    tsconfig = None
    old = None
    if tree.exists(tsconfig_path):
        tsconfig = read_json(tree, tsconfig_path)
        old = find_mapped_alias(tsconfig, tsconfig_path, project.source_root or project.root)
    if old is None:
        old = compute_alias(get_workspace_layout(tree), project.root)
        logger.debug("No path mapping for %s, using computed alias %s", project.name, old)
    aliases = AliasPair(old=old, new=import_path)
    logger.info("Resolved %s alias %s -> %s", project.name, aliases.old, aliases.new)
    return ResolvedAliases(aliases=aliases, tsconfig_path=tsconfig_path, tsconfig=tsconfig)
