"""Pytest configuration and shared fixtures."""

from dataclasses import dataclass
from pathlib import Path

import pytest

from arcsigns.adapters.arc_cmd.command import ArcCommandRunner
from tests.helpers.fake_invoker import FakeInvoker


@dataclass
class ArcTree:
    """A fake arc working tree registered with a FakeInvoker."""

    invoker: FakeInvoker
    runner: ArcCommandRunner
    root: Path
    file: Path
    relpath: str
    content_hash: str

    def set_hash(self, content_hash: str, path: Path | None = None) -> None:
        """Make sha1sum report ``content_hash`` for ``path``."""
        path = path or self.file
        self.invoker.add("sha1sum", [str(path)], f"{content_hash}  {path}\n")


@pytest.fixture
def invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def runner(invoker: FakeInvoker) -> ArcCommandRunner:
    return ArcCommandRunner(invoker)


@pytest.fixture
def arc_tree(tmp_path: Path, invoker: FakeInvoker, runner: ArcCommandRunner) -> ArcTree:
    """Working tree at tmp_path/repo on branch 'trunk' with src/main.py tracked."""
    root = tmp_path / "repo"
    (root / "src").mkdir(parents=True)
    file = root / "src" / "main.py"
    file.write_text("print('hello')\n")

    invoker.add(
        "arc",
        ["rev-parse", "--show-toplevel", "--arc-dir"],
        f"{root}\n{root}/.arc\n",
    )
    invoker.add("arc", ["info"], "summary: fake\nbranch: trunk\nhash: abc\n")
    invoker.add("id", ["-un"], "alice\n")
    invoker.add("arc", ["dump", "entry", str(file)], "src/main.py\n")

    tree = ArcTree(
        invoker=invoker,
        runner=runner,
        root=root,
        file=file,
        relpath="src/main.py",
        content_hash="3f786850e387550fdab836ed7e6dc881de23001b",
    )
    tree.set_hash(tree.content_hash)
    return tree
