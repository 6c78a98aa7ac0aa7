import pytest

from conftest import TSCONFIG, write_files
from libmover.errors import ConfigurationError
from libmover.resolver import (
    compute_alias,
    find_mapped_alias,
    get_import_path,
    get_root_tsconfig_path,
    normalize_slashes,
    resolve_aliases,
)
from libmover.workspace import ProjectConfiguration, Tree, WorkspaceLayout


def test_get_import_path():
    assert get_import_path("proj", "shared/ui") == "@proj/shared/ui"
    assert get_import_path("@proj", "shared/ui") == "@proj/shared/ui"
    assert get_import_path(None, "shared/ui") == "shared/ui"


def test_normalize_slashes():
    assert normalize_slashes("//a//b/c/") == "a/b/c"


def test_find_mapped_alias_uses_source_root():
    assert find_mapped_alias(TSCONFIG, "tsconfig.base.json", "libs/other/src") == "@proj/other"
    assert find_mapped_alias(TSCONFIG, "tsconfig.base.json", "libs/missing/src") is None


def test_find_mapped_alias_without_paths_table_fails():
    with pytest.raises(ConfigurationError, match="tsconfig.json"):
        find_mapped_alias({"compilerOptions": {}}, "tsconfig.json", "libs/a/src")


def test_compute_alias_strips_libs_dir():
    layout = WorkspaceLayout(apps_dir="apps", libs_dir="libs", npm_scope="proj")
    assert compute_alias(layout, "libs/shared/ui") == "@proj/shared/ui"


def test_compute_alias_without_scope_or_libs_dir():
    layout = WorkspaceLayout(apps_dir=".", libs_dir=".", npm_scope=None)
    assert compute_alias(layout, "shared/ui") == "shared/ui"


def test_root_tsconfig_path_preference(tmp_path):
    tree = Tree(tmp_path)
    assert get_root_tsconfig_path(tree) == "tsconfig.base.json"
    tree.write("tsconfig.json", "{}")
    assert get_root_tsconfig_path(tree) == "tsconfig.json"
    tree.write("tsconfig.base.json", "{}")
    assert get_root_tsconfig_path(tree) == "tsconfig.base.json"


def test_resolve_aliases_prefers_path_mapping(tmp_path):
    tsconfig = {"compilerOptions": {"paths": {"custom-name": ["libs/my-lib/src/index.ts"]}}}
    write_files(tmp_path, {"nx.json": {"npmScope": "proj"}, "tsconfig.base.json": tsconfig})
    project = ProjectConfiguration("my-lib", "libs/my-lib", "libs/my-lib/src", "library")

    resolved = resolve_aliases(Tree(tmp_path), project, "@proj/new")

    assert resolved.aliases.old == "custom-name"
    assert resolved.aliases.new == "@proj/new"
    assert resolved.tsconfig == tsconfig


def test_resolve_aliases_falls_back_without_tsconfig(tmp_path):
    write_files(tmp_path, {"nx.json": {"npmScope": "proj"}, "libs/.gitkeep": ""})
    project = ProjectConfiguration("my-lib", "libs/my-lib", "libs/my-lib/src", "library")

    resolved = resolve_aliases(Tree(tmp_path), project, "@proj/new")

    assert resolved.aliases.old == "@proj/my-lib"
    assert resolved.tsconfig is None
