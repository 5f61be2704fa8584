from __future__ import annotations

"""
Unit tests for the Project Tree Discovery Service.

Uses a real temporary directory to verify noise pruning, .gitignore
handling, extension whitelists, depth limits and deterministic ordering.
"""

from pathlib import Path
from typing import List

import pytest

from filescope.core.services.scanner import build_project_tree
from filescope.domain.errors import SetupError
from filescope.domain.tree_models import TreeNode


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Create:
    /root
      .gitignore      (generated/)
      README.md
      app.log
      src/main.py
      src/b.ts
      src/a.ts
      generated/out.js
      node_modules/lib/index.js
      deep/l1/l2/leaf.py
    """
    root = tmp_path / "root"
    (root / "src").mkdir(parents=True)
    (root / "generated").mkdir()
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "deep" / "l1" / "l2").mkdir(parents=True)

    (root / ".gitignore").write_text("# build output\ngenerated/\n!keep.js\n", encoding="utf-8")
    (root / "README.md").write_text("# Title\n", encoding="utf-8")
    (root / "app.log").write_text("noise", encoding="utf-8")
    (root / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "src" / "b.ts").write_text("export const b = 1;\n", encoding="utf-8")
    (root / "src" / "a.ts").write_text("export const a = 1;\n", encoding="utf-8")
    (root / "generated" / "out.js").write_text("x", encoding="utf-8")
    (root / "node_modules" / "lib" / "index.js").write_text("x", encoding="utf-8")
    (root / "deep" / "l1" / "l2" / "leaf.py").write_text("x = 1\n", encoding="utf-8")
    return root


def _names(tree: TreeNode) -> List[str]:
    return [node.name for node in tree.iter_files()]


def test_default_noise_and_gitignore_are_pruned(project: Path) -> None:
    tree = build_project_tree(str(project))
    names = _names(tree)

    assert "index.js" not in names
    assert "app.log" not in names
    assert "out.js" not in names
    assert {"main.py", "a.ts", "b.ts", "README.md", "leaf.py"} <= set(names)


def test_gitignore_can_be_disabled(project: Path) -> None:
    names = _names(build_project_tree(str(project), respect_gitignore=False))
    assert "out.js" in names


def test_children_sorted_and_sizes_recorded(project: Path) -> None:
    tree = build_project_tree(str(project))
    src = next(c for c in tree.children if c.name == "src")

    assert [c.name for c in src.children] == ["a.ts", "b.ts", "main.py"]
    main = src.children[2]
    assert main.is_file
    assert main.extension == ".py"
    assert main.size == len("print('hi')\n")


def test_extension_whitelist_accepts_bare_names(project: Path) -> None:
    names = _names(build_project_tree(str(project), extensions=["py", ".TS"]))
    assert sorted(names) == ["a.ts", "b.ts", "leaf.py", "main.py"]


def test_depth_limit(project: Path) -> None:
    names = _names(build_project_tree(str(project), max_depth=1))
    assert "leaf.py" not in names
    assert "main.py" in names


def test_custom_excludes_replace_defaults(project: Path) -> None:
    names = _names(build_project_tree(str(project), exclude_patterns=[r"^src$"], respect_gitignore=False))
    assert "main.py" not in names
    assert "index.js" in names


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(SetupError, match="Invalid input directory"):
        build_project_tree(str(tmp_path / "nope"))
