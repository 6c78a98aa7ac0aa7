"""
Access to a JavaScript/TypeScript monorepo on disk.

:class:`Tree` is a virtual view of the workspace directory.  Reads fall
through to disk, writes and deletions are kept in memory until
:meth:`Tree.commit` is called, so an operation that fails half way leaves
the workspace untouched.  The helpers in this module read the workspace
configuration (``nx.json``, ``workspace.json``, ``project.json`` and
``package.json``) through a tree.
"""

from __future__ import annotations

import enum
import fnmatch
import json
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .errors import ConfigurationError

__all__ = [
    "Tree",
    "FileChange",
    "ChangeKind",
    "ProjectConfiguration",
    "WorkspaceLayout",
    "join_path_fragments",
    "visit_not_ignored_files",
    "parse_json",
    "read_json",
    "write_json",
    "get_projects",
    "get_workspace_layout",
]

logger = logging.getLogger(__name__)

ALWAYS_IGNORED = {"node_modules", ".git"}
IGNORE_FILES = (".gitignore", ".nxignore")


def _normalize(path: str) -> str:
    path = posixpath.normpath(str(path).replace("\\", "/")).lstrip("/")
    return "" if path == "." else path


def join_path_fragments(*fragments: str) -> str:
    """Join workspace-relative path fragments with forward slashes.

    ``join_path_fragments('libs/new', 'src/index.ts')`` gives
    ``'libs/new/src/index.ts'``; ``.`` and ``..`` segments are collapsed.
    """
    parts = [f.replace("\\", "/") for f in fragments if f]
    if not parts:
        return ""
    joined = posixpath.normpath(posixpath.join(*parts))
    return "" if joined == "." else joined


class ChangeKind(enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class FileChange:
    path: str
    kind: ChangeKind


class Tree:
    """Buffered file tree rooted at a workspace directory.

    Paths are workspace-relative and use forward slashes.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).resolve()
        # path -> new content, ``None`` marks a deletion
        self._changes: Dict[str, Optional[bytes]] = {}

    def _disk_path(self, path: str) -> Path:
        return self.root / path if path else self.root

    def exists(self, path: str) -> bool:
        path = _normalize(path)
        if path in self._changes:
            return self._changes[path] is not None
        if self._disk_path(path).exists():
            return True
        prefix = path + "/"
        return any(p.startswith(prefix) and c is not None for p, c in self._changes.items())

    def is_file(self, path: str) -> bool:
        path = _normalize(path)
        if path in self._changes:
            return self._changes[path] is not None
        return self._disk_path(path).is_file()

    def read(self, path: str, encoding: Optional[str] = None) -> Union[bytes, str]:
        """Return the content of ``path``, decoded when ``encoding`` is given."""
        path = _normalize(path)
        if path in self._changes:
            content = self._changes[path]
            if content is None:
                raise FileNotFoundError(path)
        else:
            disk_path = self._disk_path(path)
            if not disk_path.is_file():
                raise FileNotFoundError(path)
            content = disk_path.read_bytes()
        return content.decode(encoding) if encoding else content

    def write(self, path: str, content: Union[str, bytes]) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._changes[_normalize(path)] = content

    def delete(self, path: str) -> None:
        path = _normalize(path)
        if self._disk_path(path).is_file():
            self._changes[path] = None
        else:
            self._changes.pop(path, None)

    def children(self, path: str) -> List[str]:
        """Return the sorted names of the entries directly under ``path``."""
        path = _normalize(path)
        names = set()
        disk_path = self._disk_path(path)
        if disk_path.is_dir():
            names.update(child.name for child in disk_path.iterdir())
        prefix = path + "/" if path else ""
        for changed, content in self._changes.items():
            if not changed.startswith(prefix):
                continue
            name = changed[len(prefix):].split("/", 1)[0]
            if content is None and changed == prefix + name:
                names.discard(name)
            elif content is not None:
                names.add(name)
        return sorted(names)

    def list_changes(self) -> List[FileChange]:
        changes = []
        for path, content in self._changes.items():
            on_disk = self._disk_path(path).is_file()
            if content is None:
                kind = ChangeKind.DELETE
            elif on_disk:
                if self._disk_path(path).read_bytes() == content:
                    continue
                kind = ChangeKind.UPDATE
            else:
                kind = ChangeKind.CREATE
            changes.append(FileChange(path, kind))
        return changes

    def commit(self) -> List[FileChange]:
        """Write all pending changes to disk and return what was written."""
        changes = self.list_changes()
        for change in changes:
            disk_path = self._disk_path(change.path)
            if change.kind is ChangeKind.DELETE:
                disk_path.unlink()
            else:
                disk_path.parent.mkdir(parents=True, exist_ok=True)
                disk_path.write_bytes(self._changes[change.path])
            logger.debug("%s %s", change.kind.value, change.path)
        self._changes.clear()
        return changes


def _ignore_patterns(tree: Tree) -> List[str]:
    patterns: List[str] = []
    for name in IGNORE_FILES:
        if not tree.is_file(name):
            continue
        for line in tree.read(name, "utf-8").splitlines():
            line = line.strip()
            # negated patterns are not supported and are skipped
            if line and not line.startswith(("#", "!")):
                patterns.append(line)
    return patterns


def _is_ignored(tree: Tree, path: str, patterns: List[str]) -> bool:
    name = posixpath.basename(path)
    if name in ALWAYS_IGNORED:
        return True
    for pattern in patterns:
        dir_only = pattern.endswith("/")
        pattern = pattern.rstrip("/")
        if dir_only and tree.is_file(path):
            continue
        if "/" in pattern:
            if fnmatch.fnmatchcase(path, pattern.lstrip("/")):
                return True
        elif fnmatch.fnmatchcase(name, pattern):
            return True
    return False


def visit_not_ignored_files(
    tree: Tree, dir_path: str, visitor: Callable[[str], None]
) -> None:
    """Call ``visitor`` with every file under ``dir_path`` that is not ignored.

    ``node_modules`` and ``.git`` are always skipped, as is anything matched
    by the root ``.gitignore`` or ``.nxignore``.
    """
    patterns = _ignore_patterns(tree)

    def visit(path: str) -> None:
        if path and _is_ignored(tree, path, patterns):
            return
        if tree.is_file(path):
            visitor(path)
            return
        for child in tree.children(path):
            visit(join_path_fragments(path, child))

    visit(_normalize(dir_path))


def _strip_comments(text: str) -> str:
    out: List[str] = []
    i, size = 0, len(text)
    in_string = False
    while i < size:
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < size:
                out.append(text[i + 1])
                i += 1
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
            out.append(char)
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = size if end == -1 else end
            continue
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = size if end == -1 else end + 2
            out.append(" ")
            continue
        else:
            out.append(char)
        i += 1
    return "".join(out)


def _strip_trailing_commas(text: str) -> str:
    out: List[str] = []
    in_string = False
    escaped = False
    for i, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == ",":
            rest = text[i + 1:].lstrip()
            if rest[:1] in ("}", "]"):
                continue
        out.append(char)
    return "".join(out)


def parse_json(text: str) -> Any:
    """Parse JSON that may carry ``//``/``/* */`` comments and trailing commas.

    tsconfig files are commonly written that way.
    """
    return json.loads(_strip_trailing_commas(_strip_comments(text)))


def read_json(tree: Tree, path: str) -> Any:
    try:
        return parse_json(tree.read(path, "utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Cannot parse {path}: {exc}") from exc


def write_json(tree: Tree, path: str, value: Any) -> None:
    tree.write(path, json.dumps(value, indent=2, ensure_ascii=False) + "\n")


@dataclass
class ProjectConfiguration:
    name: str
    root: str
    source_root: Optional[str] = None
    project_type: Optional[str] = None

    @classmethod
    def from_json(cls, name: str, root: str, data: Dict[str, Any]) -> "ProjectConfiguration":
        return cls(
            name=name,
            root=_normalize(data.get("root", root)),
            source_root=data.get("sourceRoot"),
            project_type=data.get("projectType"),
        )


@dataclass(frozen=True)
class WorkspaceLayout:
    apps_dir: str
    libs_dir: str
    npm_scope: Optional[str] = None


def get_projects(tree: Tree) -> Dict[str, ProjectConfiguration]:
    """Return the workspace projects keyed by name.

    Projects are listed by ``workspace.json`` when it exists (either inline
    or as the directory holding a ``project.json``); otherwise every
    ``project.json`` in the workspace defines one project.
    """
    projects: Dict[str, ProjectConfiguration] = {}
    if tree.exists("workspace.json"):
        workspace = read_json(tree, "workspace.json")
        for name, entry in (workspace.get("projects") or {}).items():
            if isinstance(entry, str):
                data = read_json(tree, join_path_fragments(entry, "project.json"))
                projects[name] = ProjectConfiguration.from_json(name, entry, data)
            else:
                projects[name] = ProjectConfiguration.from_json(name, entry.get("root", ""), entry)
        return projects

    project_files: List[str] = []
    visit_not_ignored_files(
        tree,
        "",
        lambda path: project_files.append(path)
        if posixpath.basename(path) == "project.json"
        else None,
    )
    for path in project_files:
        root = posixpath.dirname(path)
        data = read_json(tree, path)
        name = data.get("name") or posixpath.basename(root)
        projects[name] = ProjectConfiguration.from_json(name, root, data)
    return projects


def _in_order_of_preference(tree: Tree, candidates: List[str], default: str) -> str:
    for candidate in candidates:
        if tree.exists(candidate):
            return candidate
    return default


def _scope_from_package_json(tree: Tree) -> Optional[str]:
    if not tree.exists("package.json"):
        return None
    name = read_json(tree, "package.json").get("name") or ""
    if name.startswith("@") and "/" in name:
        return name[1:].split("/", 1)[0]
    return None


def get_workspace_layout(tree: Tree) -> WorkspaceLayout:
    nx_json = read_json(tree, "nx.json") if tree.exists("nx.json") else {}
    layout = nx_json.get("workspaceLayout") or {}
    return WorkspaceLayout(
        apps_dir=layout.get("appsDir") or _in_order_of_preference(tree, ["apps", "packages"], "."),
        libs_dir=layout.get("libsDir") or _in_order_of_preference(tree, ["libs", "packages"], "."),
        npm_scope=nx_json.get("npmScope") or _scope_from_package_json(tree),
    )
