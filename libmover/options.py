"""Options describing where a project is being moved."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .resolver import get_import_path, normalize_slashes
from .workspace import ProjectConfiguration, Tree, get_workspace_layout, join_path_fragments

__all__ = ["MoveOptions", "normalize_options"]


@dataclass(frozen=True)
class MoveOptions:
    """A request to relocate ``project_name``.

    ``destination`` is relative to the workspace's library (or application)
    directory; ``relative_to_root_destination`` is the same location relative
    to the workspace root and is filled in by :func:`normalize_options`.
    """

    project_name: str
    destination: str
    import_path: Optional[str] = None
    update_import_path: bool = True
    relative_to_root_destination: Optional[str] = None


def normalize_options(
    tree: Tree, options: MoveOptions, project: ProjectConfiguration
) -> MoveOptions:
    layout = get_workspace_layout(tree)
    destination = normalize_slashes(options.destination.replace("\\", "/"))
    base_dir = layout.apps_dir if project.project_type == "application" else layout.libs_dir
    return replace(
        options,
        destination=destination,
        import_path=options.import_path
        or normalize_slashes(get_import_path(layout.npm_scope, destination)),
        relative_to_root_destination=options.relative_to_root_destination
        or join_path_fragments(base_dir, destination),
    )
