import json
from pathlib import Path

import pytest

from libmover.scanner import ModuleReferenceScanner
from libmover.workspace import Tree


def write_files(root: Path, files: dict) -> None:
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if not isinstance(content, str):
            content = json.dumps(content, indent=2) + "\n"
        path.write_text(content, encoding="utf-8")


TSCONFIG = {
    "compileOnSave": False,
    "compilerOptions": {
        "rootDir": ".",
        "baseUrl": ".",
        "paths": {
            "@proj/my-source": ["libs/my-source/src/index.ts"],
            "@proj/other": ["libs/other/src/index.ts"],
        },
    },
    "exclude": ["node_modules", "tmp"],
}


@pytest.fixture(scope="session")
def scanner():
    return ModuleReferenceScanner()


@pytest.fixture
def workspace(tmp_path):
    """A small workspace with two libraries and an application."""
    write_files(tmp_path, {
        "nx.json": {"npmScope": "proj"},
        "tsconfig.base.json": TSCONFIG,
        "libs/my-source/project.json": {
            "name": "my-source",
            "root": "libs/my-source",
            "sourceRoot": "libs/my-source/src",
            "projectType": "library",
        },
        "libs/my-source/src/index.ts": "export const source = 1;\n",
        "libs/my-source/src/lib/self.ts": "import { source } from '@proj/my-source';\n",
        "libs/other/project.json": {
            "name": "other",
            "root": "libs/other",
            "sourceRoot": "libs/other/src",
            "projectType": "library",
        },
        "libs/other/src/index.ts": (
            "import { source } from '@proj/my-source';\n"
            "import { deep } from '@proj/my-source/deep/file';\n"
            "import { extra } from '@proj/my-source-extra';\n"
            "\n"
            "export const value = source + deep + extra;\n"
        ),
        "libs/other/src/untouched.ts": "export const nothing = 'here';\n",
        "apps/my-app/project.json": {
            "name": "my-app",
            "root": "apps/my-app",
            "sourceRoot": "apps/my-app/src",
            "projectType": "application",
        },
        "apps/my-app/src/main.tsx": (
            "const lazy = import('@proj/my-source');\n"
            "const { source } = require('@proj/my-source');\n"
            "export const App = () => <div title=\"@proj/my-source\">{source}</div>;\n"
        ),
        "apps/my-app/src/notes.md": "See @proj/my-source for details.\n",
    })
    return tmp_path


@pytest.fixture
def tree(workspace):
    return Tree(workspace)
