from git import Repo, Head
from git.exc import BadName, GitCommandError
from typing import List, Optional
import logging

from .models import (
    BranchTrackingStatus,
    GitBranch,
    GitFileChange,
    TrackingState,
    UpstreamType,
)

log = logging.getLogger(__name__)


def short_sha(sha: str) -> str:
    return sha[:11]


def pluralize(word: str, count: int, infix: str = " ", plural: Optional[str] = None) -> str:
    if count == 1:
        return f"{count}{infix}{word}"
    return f"{count}{infix}{plural or word + 's'}"


def create_revision_range(left: str, right: str, notation: str = "..") -> str:
    """Build a revision range expression understood by `git log`.

    `left..right` selects commits reachable from `right` but not from `left`.

    Raises:
        ValueError: If either endpoint is empty.
    """
    if not left or not right:
        raise ValueError(
            f"Both ends of a revision range are required (got {left!r}, {right!r})"
        )
    return f"{left}{notation}{right}"


def delta_range(
    upstream_type: UpstreamType, status: BranchTrackingStatus
) -> Optional[str]:
    """Return the log range that holds the delta for a classification.

    Only AHEAD and BEHIND have a delta. AHEAD lists the commits of the
    local branch that the upstream lacks, BEHIND the reverse.
    """
    if upstream_type == UpstreamType.AHEAD:
        return create_revision_range(status.upstream, status.ref)
    if upstream_type == UpstreamType.BEHIND:
        return create_revision_range(status.ref, status.upstream)
    return None


def get_remote_name_from_branch_name(name: str) -> str:
    return name.split("/", 1)[0]


def classify_upstream_types(
    status: BranchTrackingStatus, upstream_missing: bool = False
) -> List[UpstreamType]:
    """Classify the tracking status of a branch.

    A diverged branch yields two classifications (BEHIND first, then
    AHEAD), one for each tracking node shown under the branch.
    """
    if not status.upstream:
        return [UpstreamType.NONE]
    if upstream_missing:
        return [UpstreamType.MISSING]

    types = []
    if status.state.behind > 0:
        types.append(UpstreamType.BEHIND)
    if status.state.ahead > 0:
        types.append(UpstreamType.AHEAD)
    return types or [UpstreamType.SAME]


def _get_head(repo: Repo, branch_name: Optional[str]) -> Head:
    if branch_name is None:
        try:
            return repo.active_branch
        except TypeError:
            raise ValueError("HEAD is detached; specify a branch name")
    try:
        return repo.heads[branch_name]
    except IndexError:
        raise ValueError(f"Branch '{branch_name}' not found")


def get_branch(repo: Repo, branch_name: Optional[str] = None) -> GitBranch:
    """Load a local branch and its upstream configuration.

    Args:
        repo: GitPython Repo instance.
        branch_name: Local branch name, or None for the current branch.

    Returns:
        GitBranch with `upstream` set when the branch tracks a remote branch
        and `upstream_missing` set when that remote branch no longer exists.

    Raises:
        ValueError: If the branch does not exist or HEAD is detached.
    """
    head = _get_head(repo, branch_name)
    tracking = head.tracking_branch()

    upstream = None
    upstream_missing = False
    if tracking is not None:
        upstream = tracking.name
        upstream_missing = not tracking.is_valid()

    return GitBranch(
        name=head.name,
        repo_path=repo.working_tree_dir,
        sha=head.commit.hexsha,
        upstream=upstream,
        upstream_missing=upstream_missing,
    )


def get_tracking_status(repo: Repo, branch: GitBranch) -> BranchTrackingStatus:
    """Count the commits a branch is ahead of / behind its upstream.

    Uses `git rev-list --left-right --count branch...upstream`, whose output
    is "<ahead>\t<behind>".
    """
    state = TrackingState()
    if branch.upstream and not branch.upstream_missing:
        counts = repo.git.rev_list(
            "--left-right", "--count", f"{branch.name}...{branch.upstream}"
        ).split()
        state = TrackingState(ahead=int(counts[0]), behind=int(counts[1]))

    return BranchTrackingStatus(
        ref=branch.name,
        repo_path=branch.repo_path,
        state=state,
        upstream=branch.upstream,
    )


def get_unpublished_commits(repo: Repo, status: BranchTrackingStatus) -> List[str]:
    """List the SHAs of commits not yet pushed, oldest first.

    Returns an empty list when the branch has no upstream.

    Raises:
        GitCommandError: If the upstream cannot be read.
    """
    if not status.upstream:
        return []
    output = repo.git.rev_list(
        "--reverse", create_revision_range(status.upstream, status.ref)
    ).strip()
    return [sha for sha in output.split("\n") if sha]


def rev_parse(repo: Repo, expr: str) -> Optional[str]:
    """Resolve an expression like `<sha>^` to a full SHA, or None."""
    try:
        return repo.git.rev_parse("--verify", "--quiet", f"{expr}^{{commit}}").strip() or None
    except (GitCommandError, BadName):
        return None


def parse_name_status(output: str) -> List[GitFileChange]:
    """Parse `git diff --name-status` output.

    Each line is "<status>\t<path>" or, for renames and copies,
    "<status><score>\t<old path>\t<new path>".
    """
    files = []
    for line in output.split("\n"):
        if not line.strip():
            continue
        parts = line.split("\t")
        status = parts[0]
        if status[:1] in ("R", "C") and len(parts) >= 3:
            files.append(GitFileChange(path=parts[2], status=status, original_path=parts[1]))
        elif len(parts) >= 2:
            files.append(GitFileChange(path=parts[1], status=status))
    return files


def get_diff_status(repo: Repo, base: str, tip: str) -> List[GitFileChange]:
    output = repo.git.diff("--name-status", "-M", f"{base}...{tip}")
    return sorted(parse_name_status(output), key=lambda f: f.path)


