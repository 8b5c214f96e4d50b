"""Unit tests for the arc repository handle."""

import asyncio
import logging
from pathlib import Path

import pytest

from arcsigns.adapters.arc_cmd.repository import (
    ArcRepository,
    RepositoryCache,
    find_username,
    parse_branch,
    resolve_repo_info,
)
from tests.conftest import ArcTree
from tests.helpers.fake_invoker import FakeInvoker


class TestParseBranch:
    """Tests for parse_branch."""

    def test_branch_line(self):
        assert parse_branch(["summary: x", "branch: users/alice/feature"]) == "users/alice/feature"

    def test_detached_wins_when_first(self):
        assert parse_branch(["detached: true", "branch: trunk"]) == "HEAD"

    def test_empty_branch_means_no_commits(self):
        assert parse_branch(["branch:"]) == ""

    def test_unmatched_logs_and_returns_none(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING):
            assert parse_branch(["summary: x"]) is None
        assert "Can't find branch or detached" in caplog.text


class TestResolveRepoInfo:
    """Tests for resolve_repo_info."""

    def test_resolves_tree(self, arc_tree: ArcTree):
        info = asyncio.run(resolve_repo_info(arc_tree.runner, arc_tree.root))

        assert info is not None
        assert info.root_path == arc_tree.root
        assert info.metadata_path == arc_tree.root / ".arc"
        assert info.detached is False
        assert info.branch == "trunk"

    def test_outside_tree_is_absent(self, invoker: FakeInvoker, runner, tmp_path: Path):
        invoker.add(
            "arc",
            ["rev-parse", "--show-toplevel", "--arc-dir"],
            "",
            "Not a mounted arc repository\n",
            1,
        )

        info = asyncio.run(resolve_repo_info(runner, tmp_path))

        assert info is None
        # No branch lookup when there is no tree
        assert invoker.count("arc", "info") == 0

    def test_metadata_elsewhere_is_detached(self, invoker: FakeInvoker, runner):
        invoker.add(
            "arc",
            ["rev-parse", "--show-toplevel", "--arc-dir"],
            "/work/tree\n/store/.arc/worktrees/1\n",
        )
        invoker.add("arc", ["info"], "detached: true\n")

        info = asyncio.run(resolve_repo_info(runner, Path("/work/tree")))

        assert info is not None
        assert info.detached is True
        assert info.branch == "HEAD"

    def test_unresolved_branch_still_resolves(self, invoker: FakeInvoker, runner):
        invoker.add(
            "arc",
            ["rev-parse", "--show-toplevel", "--arc-dir"],
            "/work/tree\n/work/tree/.arc\n",
        )
        invoker.add("arc", ["info"], "unexpected\n")

        info = asyncio.run(resolve_repo_info(runner, Path("/work/tree")))

        assert info is not None
        assert info.branch is None


class TestFindUsername:
    """Tests for find_username."""

    def test_returns_login(self, arc_tree: ArcTree):
        assert asyncio.run(find_username(arc_tree.runner, arc_tree.root)) == "alice"

    def test_empty_lookup(self, runner, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING):
            assert asyncio.run(find_username(runner, Path("/"))) == ""
        assert "Can't find login" in caplog.text


class TestArcRepository:
    """Tests for ArcRepository."""

    def test_open(self, arc_tree: ArcTree):
        repo = asyncio.run(ArcRepository.open(arc_tree.runner, arc_tree.root / "src"))

        assert repo is not None
        assert repo.root_path == arc_tree.root
        assert repo.branch == "trunk"
        assert repo.username == "alice"

    def test_commands_run_at_root(self, arc_tree: ArcTree):
        repo = asyncio.run(ArcRepository.open(arc_tree.runner, arc_tree.root / "src"))
        arc_tree.invoker.calls.clear()

        asyncio.run(repo.command_lines(["status"]))

        assert arc_tree.invoker.calls == [("arc", ["status"], arc_tree.root)]

    def test_files_changed(self, arc_tree: ArcTree):
        arc_tree.invoker.add(
            "arc",
            ["status", "--short"],
            " M src/main.py\nM  staged.py\n?? new.txt\nMM both.txt\n D gone.txt\n",
        )
        repo = asyncio.run(ArcRepository.open(arc_tree.runner, arc_tree.root))

        assert asyncio.run(repo.files_changed()) == ["src/main.py", "both.txt"]

    def test_get_show_text_transcodes(self, arc_tree: ArcTree):
        arc_tree.invoker.add(
            "arc",
            ["show", "--git", "HEAD:latin.txt"],
            b"\xef\xbb\xbfcaf\xe9\nna\xefve\n",
        )
        repo = asyncio.run(ArcRepository.open(arc_tree.runner, arc_tree.root))

        lines, stderr = asyncio.run(repo.get_show_text("HEAD:latin.txt", "latin-1"))

        # latin-1 has no BOM entry, so the utf-8 BOM bytes decode as text
        assert lines == ["ï»¿café", "naïve"]
        assert stderr is None

    def test_refresh_rereads_branch_and_user(self, arc_tree: ArcTree):
        repo = asyncio.run(ArcRepository.open(arc_tree.runner, arc_tree.root))
        arc_tree.invoker.add("arc", ["info"], "branch: releases/1.0\n")
        arc_tree.invoker.add("id", ["-un"], "bob\n")

        asyncio.run(repo.refresh())

        assert repo.branch == "releases/1.0"
        assert repo.username == "bob"


class TestRepositoryCache:
    """Tests for RepositoryCache."""

    def test_same_tree_shares_handle(self, arc_tree: ArcTree):
        cache = RepositoryCache(arc_tree.runner)

        async def both():
            first = await cache.get(arc_tree.root / "src")
            second = await cache.get(arc_tree.root)
            return first, second

        first, second = asyncio.run(both())

        assert first is second
        assert len(cache) == 1
        assert arc_tree.invoker.count("id", "-un") == 1

    def test_known_root_skips_resolution(self, arc_tree: ArcTree):
        cache = RepositoryCache(arc_tree.runner)
        repo = asyncio.run(cache.get(arc_tree.root))
        arc_tree.invoker.calls.clear()

        again = asyncio.run(cache.get(arc_tree.root / "src", root_path=arc_tree.root))

        assert again is repo
        assert arc_tree.invoker.calls == []

    def test_outside_tree(self, runner, tmp_path: Path):
        cache = RepositoryCache(runner)

        assert asyncio.run(cache.get(tmp_path)) is None
        assert len(cache) == 0
