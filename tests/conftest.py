"""Shared test fixtures for trackview.

Provides an in-memory fake of the git collaborator and temporary git
repositories with a configured upstream.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import git
import pytest

from trackview.config import ViewConfig
from trackview.errors import FetchFailed
from trackview.models import (
    BranchTrackingStatus,
    GitBranch,
    GitCommit,
    GitFileChange,
    GitLog,
    TrackingState,
)
from trackview.view import View

REPO_PATH = "/work/repo"
BASE_DATE = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_commit(
    sha: str,
    date: Optional[datetime] = None,
    parents=("0" * 40,),
    summary: Optional[str] = None,
) -> GitCommit:
    return GitCommit(
        sha=sha,
        repo_path=REPO_PATH,
        summary=summary or f"Commit {sha}",
        message=summary or f"Commit {sha}",
        author_name="Test User",
        author_email="test@example.com",
        date=date or BASE_DATE,
        parents=parents,
    )


def make_commits(n: int, start: datetime = BASE_DATE) -> List[GitCommit]:
    """n commits, newest first, one hour apart."""
    return [make_commit(f"c{i}", start - timedelta(hours=i)) for i in range(n)]


class FakeGitProvider:
    """In-memory stand-in for GitProvider.

    Serves pages of `commits` for any range, records every call, and can
    be told to fail or to block until `gate` is set.
    """

    def __init__(
        self,
        commits: Optional[List[GitCommit]] = None,
        files: Optional[List[GitFileChange]] = None,
        references: Optional[Dict[str, str]] = None,
    ):
        self.commits = commits if commits is not None else make_commits(3)
        self.files = files if files is not None else [
            GitFileChange(path="README.md", status="M"),
            GitFileChange(path="src/app.py", status="A"),
        ]
        self.references = references or {}
        self.anchored: Dict[str, List[GitCommit]] = {}

        self.log_calls: List[dict] = []
        self.more_calls: List[Optional[int]] = []
        self.resolve_calls: List[str] = []
        self.diff_calls: List[tuple] = []

        self.fail_log = False
        self.fail_more = False
        self.fail_anchored = False
        self.gate: Optional[asyncio.Event] = None
        self.more_gate: Optional[asyncio.Event] = None

    async def get_log(self, repo_path, *, limit=None, ref=None):
        self.log_calls.append({"repo_path": repo_path, "limit": limit, "ref": ref})
        if ref in self.anchored:
            if self.fail_anchored:
                raise FetchFailed(f"cannot read {ref}")
            commits = self.anchored[ref][: limit or None]
            return GitLog(repo_path=repo_path, range=ref, commits=commits, limit=limit)

        if self.gate is not None:
            await self.gate.wait()
        if self.fail_log:
            raise FetchFailed(f"cannot read {ref}")
        if not self.commits:
            return None
        count = min(limit, len(self.commits)) if limit else len(self.commits)
        return self._create_log(repo_path, ref, count)

    def _create_log(self, repo_path, ref, count) -> GitLog:
        page = GitLog(
            repo_path=repo_path,
            range=ref,
            commits=list(self.commits[:count]),
            limit=count,
            has_more=count < len(self.commits),
        )

        async def more(limit=None):
            self.more_calls.append(limit)
            if self.more_gate is not None:
                await self.more_gate.wait()
            if self.fail_more:
                raise FetchFailed("cannot read next page")
            if not page.has_more:
                return page
            new_count = page.count + limit if limit else len(self.commits)
            return self._create_log(repo_path, ref, min(new_count, len(self.commits)))

        page.more = more
        return page

    async def resolve_reference(self, repo_path, expr):
        self.resolve_calls.append(expr)
        return self.references.get(expr)

    async def get_diff_status(self, repo_path, base, tip):
        self.diff_calls.append((base, tip))
        return list(self.files)


@pytest.fixture
def provider() -> FakeGitProvider:
    return FakeGitProvider()


@pytest.fixture
def view(provider) -> View:
    return View(provider, ViewConfig(default_item_limit=3, page_item_limit=2))


@pytest.fixture
def branch() -> GitBranch:
    return GitBranch(name="main", repo_path=REPO_PATH, sha="c0", upstream="origin/main")


def make_status(ahead: int = 0, behind: int = 0, upstream: Optional[str] = "origin/main"):
    return BranchTrackingStatus(
        ref="main",
        repo_path=REPO_PATH,
        state=TrackingState(ahead=ahead, behind=behind),
        upstream=upstream,
    )


# ------------------------------------------------------------------
# Real repositories
# ------------------------------------------------------------------


def commit_file(repo: git.Repo, name: str, content: str, message: str, days_ago: int = 0) -> git.Commit:
    path = Path(repo.working_tree_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([name])
    date = (BASE_DATE - timedelta(days=days_ago)).strftime("%Y-%m-%dT%H:%M:%S")
    return repo.index.commit(message, author_date=date, commit_date=date)


def set_upstream(repo: git.Repo, branch: str, upstream_sha: Optional[str]) -> None:
    """Make `branch` track origin/<branch>, pointing it at `upstream_sha`.

    With `upstream_sha` None the tracking config is written but the remote
    ref is not created (a missing upstream).
    """
    with repo.config_writer() as cw:
        cw.set_value(f'branch "{branch}"', "remote", "origin")
        cw.set_value(f'branch "{branch}"', "merge", f"refs/heads/{branch}")
    if upstream_sha is not None:
        repo.git.update_ref(f"refs/remotes/origin/{branch}", upstream_sha)


@pytest.fixture
def repo(tmp_path) -> git.Repo:
    """Repository on branch main with three commits on separate days."""
    r = git.Repo.init(tmp_path / "repo", initial_branch="main")
    with r.config_writer() as cw:
        cw.set_value("user", "name", "Test User")
        cw.set_value("user", "email", "test@example.com")
    commit_file(r, "README.md", "hello\n", "Initial commit", days_ago=2)
    commit_file(r, "src/app.py", "print('a')\n", "Add app", days_ago=1)
    commit_file(r, "src/app.py", "print('b')\n", "Update app", days_ago=0)
    return r
