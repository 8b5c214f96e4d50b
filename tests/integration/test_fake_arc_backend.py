"""End-to-end tests against a scripted stand-in for the arc binary.

The script answers the handful of commands the layer issues, so the real
asyncio invoker, dispatcher, repository and file handles are exercised
together without an arc installation.
"""

import asyncio
import json
import shutil
import stat
import sys
from pathlib import Path

import pytest

from arcsigns.adapters.factory import ArcsignsFactory
from arcsigns.domain.config import ArcsignsConfig, BackendConfig

pytestmark = [
    pytest.mark.slow,
    pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell"),
    pytest.mark.skipif(
        shutil.which("sha1sum") is None or shutil.which("id") is None,
        reason="requires coreutils",
    ),
]

BLAME_REPORT = {
    "annotation": [
        {"commit": "aaaabbbbccccdddd", "line": 1, "author": "carol", "date": "2023-05-01T10:00:00+02:00"},
        {"commit": "", "line": 2, "author": "", "date": "", "label": "unstaged"},
    ],
    "commits": [
        {
            "commit": "aaaabbbbccccdddd",
            "path": "docs/readme.txt",
            "parents": ["1111222233334444"],
            "revision": 42,
            "message": "Write readme\n",
        }
    ],
}


@pytest.fixture
def fake_arc(tmp_path: Path) -> tuple[Path, Path]:
    """Create a working tree and an 'arc' script that serves it.

    Returns:
        Tuple of (script path, working tree root).
    """
    root = tmp_path / "tree"
    (root / ".arc").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "docs" / "readme.txt").write_text("hello\nworld\n")

    blame_file = tmp_path / "blame.json"
    blame_file.write_text(json.dumps(BLAME_REPORT))

    script = tmp_path / "bin" / "arc"
    script.parent.mkdir()
    script.write_text(
        f"""#!/bin/sh
ROOT='{root}'
case "$1" in
  rev-parse)
    case "$(pwd -P)" in
      "$ROOT"*) echo "$ROOT"; echo "$ROOT/.arc" ;;
      *) echo "Not a mounted arc repository" >&2; exit 1 ;;
    esac ;;
  info) echo "summary: scripted"; echo "branch: trunk" ;;
  dump) echo "docs/readme.txt" ;;
  show)
    if [ "$3" = "--name-only" ]; then
      printf 'Write readme\\n\\ndocs/readme.txt\\n'
    else
      printf 'hello\\n'
    fi ;;
  blame) cat '{blame_file}' ;;
  status) echo " M docs/readme.txt" ;;
  diff) printf 'R100\\tdocs/readme.txt\\tdocs/README.txt\\n' ;;
  --version) echo "arc version 9" ;;
  *) echo "unknown command: $1" >&2; exit 2 ;;
esac
"""
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return script, root


@pytest.fixture
def factory(fake_arc: tuple[Path, Path]) -> ArcsignsFactory:
    script, _ = fake_arc
    config = ArcsignsConfig(backend=BackendConfig(binary=str(script), command_timeout=10))
    return ArcsignsFactory(config)


def test_open_file_and_read_history(factory: ArcsignsFactory, fake_arc: tuple[Path, Path]):
    _, root = fake_arc

    async def scenario():
        file = await factory.open_file(root / "docs" / "readme.txt")
        assert file is not None
        shown = await file.get_show_text("HEAD")
        changed = await file.update_info()
        return file, shown, changed

    file, (lines, stderr), changed = asyncio.run(scenario())

    assert file.relpath == "docs/readme.txt"
    assert file.repo.branch == "trunk"
    assert file.repo.detached is False
    assert isinstance(file.repo.username, str)
    assert len(file.content_hash) == 40
    assert lines == ["hello"]
    assert stderr is None
    assert changed is False


def test_blame(factory: ArcsignsFactory, fake_arc: tuple[Path, Path]):
    _, root = fake_arc

    async def scenario():
        file = await factory.open_file(root / "docs" / "readme.txt")
        return await file.run_blame(1), await file.run_blame(2)

    first, second = asyncio.run(scenario())

    assert first.commit_id == "aaaabbbbccccdddd"
    assert first.author == "carol"
    assert first.author_time == 1682928000
    assert first.previous_commit_id == "1111222233334444"
    assert not second.is_committed


def test_changed_moved_and_body(factory: ArcsignsFactory, fake_arc: tuple[Path, Path]):
    _, root = fake_arc

    async def scenario():
        file = await factory.open_file(root / "docs" / "readme.txt")
        changed = await file.repo.files_changed()
        body = await file.get_commit_body("aaaabbbbccccdddd")
        moved = await file.has_moved()
        return file, changed, body, moved

    file, changed, body, moved = asyncio.run(scenario())

    assert changed == ["docs/readme.txt"]
    assert body == ["Write readme", ""]
    assert moved == "docs/README.txt"
    assert file.path == root / "docs" / "README.txt"


def test_outside_tree(factory: ArcsignsFactory, tmp_path: Path):
    outside = tmp_path / "elsewhere"
    outside.mkdir()
    loose = outside / "x.txt"
    loose.write_text("x\n")

    assert asyncio.run(factory.open_file(loose)) is None


def test_version(factory: ArcsignsFactory):
    assert asyncio.run(factory.detect_version()).major == 9
