"""trackview version string.

Installed builds report the distribution version. A source checkout that
was never installed reports `git describe` of the checkout it runs from.
"""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import git
from git.exc import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError

DIST_NAME = "trackview"
UNKNOWN_VERSION = "unknown"


def describe_checkout(path: Path) -> str:
    """Return `git describe --tags --dirty --always` for the repo holding `path`."""
    try:
        repo = git.Repo(path, search_parent_directories=True)
        return repo.git.describe("--tags", "--dirty", "--always")
    except (InvalidGitRepositoryError, NoSuchPathError, GitCommandError, GitCommandNotFound):
        return UNKNOWN_VERSION


def get_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return describe_checkout(Path(__file__).resolve().parent)


__version__ = get_version()
