"""
Command‑line interface for the libmover package.

This module exposes one command using :mod:`click`:

* ``update‑imports`` – point every import of a library at its new alias and
  move its ``compilerOptions.paths`` entry to the library's new location.

The ``--workspace‑root`` option defaults to the current working directory.
``DESTINATION`` is relative to the workspace's library directory (``libs``
by default), so moving ``libs/shared/ui`` to ``DESTINATION=ui/core`` maps the
library to ``libs/ui/core``.  Every option can also be set through a
``LIBMOVER_UPDATE_IMPORTS_<OPTION>`` environment variable.
"""

from __future__ import annotations

import logging
import pathlib
import sys

import click

from .errors import LibmoverError, ProjectNotFoundError
from .mover import update_imports
from .options import MoveOptions, normalize_options
from .scanner import ModuleReferenceScanner
from .workspace import Tree, get_projects


def resolve_root(workspace_root: str | None) -> pathlib.Path:
    """Return the absolute workspace root, defaulting to ``Path.cwd()``."""
    root = pathlib.Path(workspace_root) if workspace_root else pathlib.Path.cwd()
    if not root.is_dir():
        raise click.UsageError(f"Workspace root {root!s} does not exist or is not a directory")
    return root.resolve()


@click.group()
@click.version_option(package_name="libmover")
@click.option("-v", "--verbose", is_flag=True, help="Log every rewritten file.")
def cli(verbose: bool) -> None:
    """Rename or relocate workspace libraries and update their imports."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("update-imports", help="Rewrite imports of a library for its new location.")
@click.argument("project")
@click.argument("destination")
@click.option(
    "--import-path", default=None,
    help="New import alias (defaults to the workspace scope plus DESTINATION).",
)
@click.option(
    "--update-import-path/--no-update-import-path", default=True, show_default=True,
    help="Rename the alias and rewrite imports, or only move its path mapping.",
)
@click.option(
    "--replace-all-occurrences", is_flag=True,
    help="Replace the old alias everywhere inside a matching specifier, not just its prefix.",
)
@click.option(
    "--workspace-root", "workspace_root", type=click.Path(file_okay=False), default=None,
    help="Root directory of the workspace (defaults to current working directory).",
)
@click.option("--dry-run", is_flag=True, help="List the files that would change without writing.")
def update_imports_cmd(
    project: str,
    destination: str,
    import_path: str | None,
    update_import_path: bool,
    replace_all_occurrences: bool,
    workspace_root: str | None,
    dry_run: bool,
) -> None:
    """Update imports of PROJECT for a move to DESTINATION.

    All ``import``, ``import()`` and ``require()`` specifiers in other
    projects that use the library's current alias are rewritten to the new
    alias, and the root tsconfig path mapping is re-based under the new
    directory.  Nothing is written when an error occurs.
    """
    root = resolve_root(workspace_root)
    tree = Tree(root)
    try:
        projects = get_projects(tree)
        if project not in projects:
            raise ProjectNotFoundError(f"Cannot find project '{project}' in {root}")
        configuration = projects[project]
        options = normalize_options(
            tree,
            MoveOptions(
                project_name=project,
                destination=destination,
                import_path=import_path,
                update_import_path=update_import_path,
            ),
            configuration,
        )
        click.echo(f"Updating imports of {project} for {options.relative_to_root_destination}…")
        update_imports(
            tree,
            options,
            configuration,
            scanner=ModuleReferenceScanner(),
            replace_all=replace_all_occurrences,
        )
    except LibmoverError as exc:
        raise click.ClickException(str(exc)) from exc

    if dry_run:
        for change in tree.list_changes():
            click.echo(f"{change.kind.value} {change.path}")
        click.echo("Dry run, nothing written.")
        return
    changes = tree.commit()
    click.echo(f"Done, {len(changes)} file(s) changed.")


def main(argv: list[str] | None = None) -> None:
    """Entrypoint for console_scripts."""
    cli.main(args=argv, auto_envvar_prefix="LIBMOVER")


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
