"""Exceptions raised by :mod:`libmover`."""

from __future__ import annotations


class LibmoverError(Exception):
    """Base class for errors that abort an import update."""


class ConfigurationError(LibmoverError):
    """The workspace configuration does not match the project being moved.

    Raised when the root tsconfig lacks ``compilerOptions.paths`` or has no
    entry under the alias resolved for the project.
    """


class ProjectNotFoundError(LibmoverError):
    """The requested project is not part of the workspace."""
