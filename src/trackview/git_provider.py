"""Asynchronous git collaborator used by the tracking-status nodes.

GitProvider wraps GitPython. Every blocking git call runs in a worker
thread via asyncio.to_thread, so the nodes and the log cache only ever
touch their own state from the event loop. All git failures are raised
as FetchFailed.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

import git
from git.exc import BadName, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from . import git_utils
from .errors import FetchFailed, Unresolvable
from .models import BranchTrackingStatus, GitBranch, GitCommit, GitFileChange, GitLog

log = logging.getLogger(__name__)

GIT_ERRORS = (GitCommandError, BadName, ValueError)


class GitProvider:
    def __init__(self):
        self._repos: Dict[str, git.Repo] = {}

    def get_repo(self, repo_path: str) -> git.Repo:
        repo = self._repos.get(repo_path)
        if repo is None:
            try:
                repo = git.Repo(repo_path)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise FetchFailed(f"Not a git repository: {repo_path} ({e})") from e
            self._repos[repo_path] = repo
        return repo

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    async def get_log(
        self, repo_path: str, *, limit: Optional[int] = None, ref: Optional[str] = None
    ) -> Optional[GitLog]:
        """Load the first page of a log.

        Args:
            repo_path: Repository path.
            limit: Maximum number of commits; None or 0 loads everything.
            ref: Revision or range expression (defaults to HEAD).

        Returns:
            GitLog, or None when the range holds no commits.

        Raises:
            FetchFailed: If git cannot read the range.
        """
        rev = ref or "HEAD"
        log.debug(f"get_log: {repo_path} {rev} limit={limit}")
        commits, has_more = await asyncio.to_thread(
            self._read_commits, repo_path, rev, limit, 0
        )
        if not commits:
            return None
        return self._create_log(repo_path, rev, commits, has_more)

    def _read_commits(
        self, repo_path: str, rev: str, limit: Optional[int], skip: int
    ) -> Tuple[List[GitCommit], bool]:
        repo = self.get_repo(repo_path)

        kwargs = {}
        if skip:
            kwargs["skip"] = skip
        if limit:
            # One extra commit tells whether another page exists
            kwargs["max_count"] = limit + 1

        try:
            raw = list(repo.iter_commits(rev, **kwargs))
        except GIT_ERRORS as e:
            raise FetchFailed(f"Failed to read log '{rev}': {e}") from e

        has_more = bool(limit) and len(raw) > limit
        if has_more:
            raw = raw[:limit]
        return [self._to_commit(repo_path, c) for c in raw], has_more

    def _create_log(
        self, repo_path: str, rev: str, commits: List[GitCommit], has_more: bool
    ) -> GitLog:
        page = GitLog(
            repo_path=repo_path,
            range=rev,
            commits=commits,
            limit=len(commits),
            has_more=has_more,
        )

        async def more(limit: Optional[int] = None) -> GitLog:
            if not page.has_more:
                return page

            new_commits, more_available = await asyncio.to_thread(
                self._read_commits, repo_path, rev, limit, page.count
            )
            if not new_commits:
                return page
            return self._create_log(
                repo_path, rev, page.commits + new_commits, more_available
            )

        page.more = more
        return page

    @staticmethod
    def _to_commit(repo_path: str, commit: git.Commit) -> GitCommit:
        return GitCommit(
            sha=commit.hexsha,
            repo_path=repo_path,
            summary=str(commit.summary),
            message=str(commit.message),
            author_name=commit.author.name or "",
            author_email=commit.author.email or "",
            date=commit.committed_datetime,
            parents=tuple(p.hexsha for p in commit.parents),
        )

    # ------------------------------------------------------------------
    # References and diffs
    # ------------------------------------------------------------------

    async def resolve_reference(
        self, repo_path: str, expr: str, strict: bool = False
    ) -> Optional[str]:
        """Resolve a revision expression (e.g. "<sha>^") to a full SHA.

        Returns None when the expression does not name a commit, such as
        the parent of a root commit.

        Raises:
            Unresolvable: If `strict` is set and the expression does not
                name a commit.
        """
        repo = self.get_repo(repo_path)
        resolved = await asyncio.to_thread(git_utils.rev_parse, repo, expr)
        log.debug(f"resolve_reference: {expr} -> {resolved}")
        if resolved is None and strict:
            raise Unresolvable(f"'{expr}' does not name a commit in {repo_path}")
        return resolved

    async def get_diff_status(
        self, repo_path: str, base: str, tip: str
    ) -> List[GitFileChange]:
        repo = self.get_repo(repo_path)
        try:
            return await asyncio.to_thread(git_utils.get_diff_status, repo, base, tip)
        except GIT_ERRORS as e:
            raise FetchFailed(f"Failed to diff {base}...{tip}: {e}") from e

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    async def get_branch(
        self, repo_path: str, branch_name: Optional[str] = None
    ) -> GitBranch:
        repo = self.get_repo(repo_path)
        try:
            return await asyncio.to_thread(git_utils.get_branch, repo, branch_name)
        except GIT_ERRORS as e:
            raise FetchFailed(f"Failed to load branch: {e}") from e

    async def get_tracking_status(self, branch: GitBranch) -> BranchTrackingStatus:
        repo = self.get_repo(branch.repo_path)
        try:
            return await asyncio.to_thread(git_utils.get_tracking_status, repo, branch)
        except GIT_ERRORS as e:
            raise FetchFailed(f"Failed to compute tracking status of {branch.name}: {e}") from e

    async def get_unpublished_commits(self, status: BranchTrackingStatus) -> List[str]:
        repo = self.get_repo(status.repo_path)
        try:
            return await asyncio.to_thread(git_utils.get_unpublished_commits, repo, status)
        except GIT_ERRORS as e:
            raise FetchFailed(f"Failed to list unpublished commits of {status.ref}: {e}") from e
