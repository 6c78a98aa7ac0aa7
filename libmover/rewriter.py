"""Rewrite module specifiers that refer to a renamed alias."""

from __future__ import annotations

from typing import List

from .changes import StringChange, StringDeletion, StringInsertion
from .resolver import AliasPair
from .scanner import ReferenceSite

__all__ = ["SpecifierRewriter"]


class SpecifierRewriter:
    """Turn reference sites that use ``aliases.old`` into text changes.

    A specifier refers to the alias when it is the alias itself or a deep
    import below it (``@scope/lib`` or ``@scope/lib/sub``); ``@scope/lib-ui``
    does not.  By default only that leading alias is replaced.  With
    ``replace_all`` every occurrence of the old alias inside the specifier is
    replaced, so ``foo/sub/foo-helpers`` renamed from ``foo`` to ``bar``
    becomes ``bar/sub/bar-helpers``.
    """

    def __init__(self, aliases: AliasPair, replace_all: bool = False) -> None:
        self.aliases = aliases
        self.replace_all = replace_all

    def matches(self, specifier: str) -> bool:
        old = self.aliases.old
        return specifier == old or specifier.startswith(old + "/")

    def rewrite(self, specifier: str) -> str:
        old, new = self.aliases.old, self.aliases.new
        if self.replace_all:
            return specifier.replace(old, new)
        return new + specifier[len(old):]

    def changes_for(self, site: ReferenceSite) -> List[StringChange]:
        if not self.matches(site.specifier):
            return []
        return [
            StringDeletion(start=site.start, length=len(site.specifier)),
            StringInsertion(index=site.start, text=self.rewrite(site.specifier)),
        ]
