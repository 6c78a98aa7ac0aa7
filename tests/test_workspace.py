import json

from conftest import write_files
from libmover.workspace import (
    ChangeKind,
    Tree,
    get_projects,
    get_workspace_layout,
    join_path_fragments,
    parse_json,
    read_json,
    visit_not_ignored_files,
    write_json,
)


def test_join_path_fragments():
    assert join_path_fragments("libs/new", "src/index.ts") == "libs/new/src/index.ts"
    assert join_path_fragments("libs", "./a/../b") == "libs/b"
    assert join_path_fragments(".", "b") == "b"
    assert join_path_fragments("libs\\x", "y") == "libs/x/y"


def test_tree_buffers_writes_until_commit(tmp_path):
    write_files(tmp_path, {"a.ts": "old", "gone.ts": "bye"})
    tree = Tree(tmp_path)

    tree.write("a.ts", "new")
    tree.write("dir/b.ts", "created")
    tree.delete("gone.ts")

    assert tree.read("a.ts", "utf-8") == "new"
    assert (tmp_path / "a.ts").read_text() == "old"
    assert tree.exists("dir")
    assert not tree.exists("gone.ts")
    assert tree.children("") == ["a.ts", "dir"]
    assert {(c.path, c.kind) for c in tree.list_changes()} == {
        ("a.ts", ChangeKind.UPDATE),
        ("dir/b.ts", ChangeKind.CREATE),
        ("gone.ts", ChangeKind.DELETE),
    }

    tree.commit()

    assert (tmp_path / "a.ts").read_text() == "new"
    assert (tmp_path / "dir/b.ts").read_text() == "created"
    assert not (tmp_path / "gone.ts").exists()
    assert tree.list_changes() == []


def test_unchanged_write_is_not_a_change(tmp_path):
    write_files(tmp_path, {"a.ts": "same"})
    tree = Tree(tmp_path)
    tree.write("a.ts", "same")
    assert tree.list_changes() == []


def test_visit_skips_ignored_files(tmp_path):
    write_files(tmp_path, {
        ".gitignore": "# build output\ndist/\n*.log\n/tmp/cache\n",
        "libs/a/src/index.ts": "",
        "libs/a/node_modules/dep/index.js": "",
        "libs/a/dist/index.js": "",
        "libs/a/debug.log": "",
        "tmp/cache/x.ts": "",
        "tmp/keep.ts": "",
    })
    visited = []
    visit_not_ignored_files(Tree(tmp_path), "", visited.append)
    assert sorted(visited) == [".gitignore", "libs/a/src/index.ts", "tmp/keep.ts"]


def test_json_round_trip_keeps_key_order(tmp_path):
    document = {"z": 1, "a": {"ü": "ö"}, "m": [1, 2]}
    tree = Tree(tmp_path)
    write_json(tree, "config.json", document)
    text = tree.read("config.json", "utf-8")
    assert text == json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    assert list(read_json(tree, "config.json")) == ["z", "a", "m"]


def test_get_projects_from_project_json(tree):
    projects = get_projects(tree)
    assert list(projects) == ["my-app", "my-source", "other"]
    assert projects["my-app"].project_type == "application"
    assert projects["other"].source_root == "libs/other/src"


def test_get_projects_from_workspace_json(tmp_path):
    write_files(tmp_path, {
        "workspace.json": {
            "version": 2,
            "projects": {
                "inline": {"root": "libs/inline", "projectType": "library"},
                "linked": "libs/linked",
            },
        },
        "libs/linked/project.json": {"sourceRoot": "libs/linked/src", "projectType": "library"},
    })
    projects = get_projects(Tree(tmp_path))
    assert projects["inline"].root == "libs/inline"
    assert projects["linked"].root == "libs/linked"
    assert projects["linked"].source_root == "libs/linked/src"


def test_workspace_layout(tree):
    layout = get_workspace_layout(tree)
    assert (layout.apps_dir, layout.libs_dir, layout.npm_scope) == ("apps", "libs", "proj")


def test_workspace_layout_from_nx_json_and_package_json(tmp_path):
    write_files(tmp_path, {
        "nx.json": {"workspaceLayout": {"appsDir": "e2e", "libsDir": "packages"}},
        "package.json": {"name": "@acme/source"},
    })
    layout = get_workspace_layout(Tree(tmp_path))
    assert (layout.apps_dir, layout.libs_dir, layout.npm_scope) == ("e2e", "packages", "acme")


def test_parse_json_accepts_comments_and_trailing_commas():
    text = (
        "// generated\n"
        "{\n"
        "  /* options */\n"
        '  "compileOnSave": false, // keep\n'
        '  "paths": {"@x/a": ["libs/a/src/index.ts",],},\n'
        '  "url": "http://example.com/*not-a-comment*/",\n'
        '  "quote": "say \\"hi\\", ]",\n'
        "}\n"
    )
    assert parse_json(text) == {
        "compileOnSave": False,
        "paths": {"@x/a": ["libs/a/src/index.ts"]},
        "url": "http://example.com/*not-a-comment*/",
        "quote": 'say "hi", ]',
    }
