"""
Rename or relocate libraries of a JavaScript/TypeScript monorepo.

When a library moves to a new directory, or gets a new import alias, every
``import``, dynamic ``import()`` and ``require()`` in the other workspace
projects that refers to its old alias is rewritten, and the library's entry
in ``compilerOptions.paths`` of the root tsconfig is re-based under the new
directory.  Only the specifier text changes; everything else in a file is
left exactly as it was.

Example::

    # Give libs/shared/ui the alias @acme/ui and map it to libs/ui
    libmover update-imports shared-ui ui --import-path @acme/ui

The CLI is built on top of :mod:`click`.  See ``libmover.cli`` for details.
"""

__all__ = [
    "update_imports",
    "ConfigurationError",
    "LibmoverError",
    "MoveOptions",
    "ModuleReferenceScanner",
    "Tree",
]

from .errors import ConfigurationError, LibmoverError  # noqa: F401
from .mover import update_imports  # noqa: F401
from .options import MoveOptions  # noqa: F401
from .scanner import ModuleReferenceScanner  # noqa: F401
from .workspace import Tree  # noqa: F401
