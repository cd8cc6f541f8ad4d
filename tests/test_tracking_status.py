"""Tests for BranchTrackingStatusNode against an in-memory git collaborator."""

import asyncio

import pytest

from trackview.config import ViewConfig
from trackview.errors import FetchFailed
from trackview.models import UpstreamType
from trackview.nodes import (
    BranchTrackingStatusFilesNode,
    BranchTrackingStatusNode,
    TrackingStatusOptions,
)
from trackview.view import View

from conftest import make_commit, make_commits, make_status


def make_node(view, branch, upstream_type, status=None, **options):
    if status is None:
        status = make_status(
            ahead=3 if upstream_type == UpstreamType.AHEAD else 0,
            behind=3 if upstream_type == UpstreamType.BEHIND else 0,
        )
    return BranchTrackingStatusNode(
        view, None, branch, status, upstream_type, root=True,
        options=TrackingStatusOptions(**options),
    )


class TestChildren:
    @pytest.mark.parametrize(
        "upstream_type", [UpstreamType.SAME, UpstreamType.MISSING, UpstreamType.NONE]
    )
    def test_no_children_and_no_fetch_without_delta(self, view, branch, provider, upstream_type):
        node = make_node(view, branch, upstream_type)

        assert asyncio.run(node.get_children()) == []
        assert provider.log_calls == []
        assert provider.diff_calls == []

    def test_behind_lists_commits_under_the_files_summary(self, view, branch, provider):
        provider.commits = make_commits(5)
        node = make_node(view, branch, UpstreamType.BEHIND, status=make_status(behind=5))

        children = asyncio.run(node.get_children())

        assert [c.type for c in children] == [
            "tracking-status-files",
            "date-marker",
            "commit", "commit", "commit",
            "load-more",
        ]
        assert provider.log_calls == [
            {"repo_path": "/work/repo", "limit": 3, "ref": "main..origin/main"}
        ]
        load_more = children[-1]
        assert load_more.previous is children[-2]
        assert load_more.parent is node
        assert not any(c.unpublished for c in children if c.type == "commit")

    def test_ahead_commits_are_unpublished(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.AHEAD)

        children = asyncio.run(node.get_children())

        commits = [c for c in children if c.type == "commit"]
        assert [c.commit.sha for c in commits] == ["c0", "c1", "c2"]
        assert all(c.unpublished for c in commits)
        assert provider.log_calls[0]["ref"] == "origin/main..main"
        assert children[0].is_type("tracking-status-files")
        assert children[0].ref1 == "main"
        assert children[0].ref2 == "origin/main"

    def test_no_continuation_when_all_commits_are_loaded(self, view, branch):
        node = make_node(view, branch, UpstreamType.BEHIND)

        children = asyncio.run(node.get_children())

        assert "load-more" not in [c.type for c in children]
        assert not node.has_more

    def test_date_markers_can_be_disabled(self, provider, branch):
        view = View(provider, ViewConfig(default_item_limit=3, show_date_markers=False))
        node = make_node(view, branch, UpstreamType.BEHIND)

        children = asyncio.run(node.get_children())

        assert [c.type for c in children] == [
            "tracking-status-files", "commit", "commit", "commit"
        ]

    def test_empty_log_yields_no_children(self, view, branch, provider):
        provider.commits = []
        node = make_node(view, branch, UpstreamType.BEHIND)

        assert asyncio.run(node.get_children()) == []

    def test_fetch_failure_propagates_and_can_be_retried(self, view, branch, provider):
        provider.fail_log = True
        node = make_node(view, branch, UpstreamType.BEHIND)

        with pytest.raises(FetchFailed):
            asyncio.run(node.get_children())

        provider.fail_log = False
        assert len(asyncio.run(node.get_children())) == 5
        assert len(provider.log_calls) == 2


class TestSuppressedAheadCommits:
    def test_files_are_listed_directly(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.AHEAD, show_ahead_commits=False)

        async def run():
            children = await node.get_children()
            files_node = BranchTrackingStatusFilesNode(
                view, node, branch, node.status, UpstreamType.AHEAD
            )
            return children, await files_node.get_children()

        children, expected = asyncio.run(run())

        assert [c.type for c in children] == ["file", "file"]
        assert [c.label for c in children] == [c.label for c in expected]
        assert [c.label for c in children] == ["README.md", "src/app.py"]
        # The log is still loaded and cached
        assert len(provider.log_calls) == 1
        assert node._cache.current is not None

    def test_view_config_default(self, provider, branch):
        view = View(provider, ViewConfig(show_ahead_commits=False))
        node = make_node(view, branch, UpstreamType.AHEAD)

        children = asyncio.run(node.get_children())

        assert all(c.type == "file" for c in children)

    def test_behind_is_never_suppressed(self, view, branch):
        node = make_node(view, branch, UpstreamType.BEHIND, show_ahead_commits=False)

        children = asyncio.run(node.get_children())

        assert "commit" in [c.type for c in children]

    def test_no_continuation_entry(self, view, branch, provider):
        provider.commits = make_commits(10)
        node = make_node(
            view, branch, UpstreamType.AHEAD,
            status=make_status(ahead=10), show_ahead_commits=False,
        )

        children = asyncio.run(node.get_children())

        assert node.has_more
        assert "load-more" not in [c.type for c in children]


class TestOldestCommitSubstitution:
    def test_root_commit_is_reloaded_for_display(self, view, branch, provider):
        provider.commits = [make_commit("c0"), make_commit("c1", parents=())]
        reloaded = make_commit("c1", parents=("p",), summary="reloaded")
        provider.anchored["c1"] = [reloaded, make_commit("p")]
        node = make_node(view, branch, UpstreamType.AHEAD, status=make_status(ahead=2))

        children = asyncio.run(node.get_children())

        commits = [c.commit for c in children if c.type == "commit"]
        assert commits[-1] is reloaded
        assert provider.log_calls[-1] == {"repo_path": "/work/repo", "limit": 2, "ref": "c1"}
        # The cached log keeps the original commit
        assert node._cache.current.commits[-1].parents == ()

    def test_lookup_failure_keeps_the_original(self, view, branch, provider):
        provider.commits = [make_commit("c0", parents=())]
        provider.anchored["c0"] = []
        provider.fail_anchored = True
        node = make_node(view, branch, UpstreamType.AHEAD, status=make_status(ahead=1))

        children = asyncio.run(node.get_children())

        assert [c.commit.sha for c in children if c.type == "commit"] == ["c0"]

    def test_behind_commits_are_left_alone(self, view, branch, provider):
        provider.commits = [make_commit("c0", parents=())]
        provider.anchored["c0"] = [make_commit("c0", summary="reloaded")]
        node = make_node(view, branch, UpstreamType.BEHIND, status=make_status(behind=1))

        children = asyncio.run(node.get_children())

        assert [c.label for c in children if c.type == "commit"] == ["Commit c0"]
        assert len(provider.log_calls) == 1


class TestLoadMore:
    def test_extends_children_and_notifies_once(self, view, branch, provider):
        provider.commits = make_commits(5)
        node = make_node(view, branch, UpstreamType.BEHIND, status=make_status(behind=5))
        changed = []
        view.on_did_change_node(changed.append)

        async def run():
            await node.get_children()
            await node.load_more()
            return await node.get_children()

        children = asyncio.run(run())

        assert [c.commit.sha for c in children if c.type == "commit"] == [
            "c0", "c1", "c2", "c3", "c4"
        ]
        assert "load-more" not in [c.type for c in children]
        assert provider.more_calls == [2]
        assert changed == [node]
        assert node.limit == 5
        assert view.get_node_last_known_limit(node) == 5

    def test_continuation_entry_moves_after_new_page(self, view, branch, provider):
        provider.commits = make_commits(8)
        node = make_node(view, branch, UpstreamType.BEHIND, status=make_status(behind=8))

        async def run():
            await node.get_children()
            await node.load_more()
            return await node.get_children()

        children = asyncio.run(run())

        assert len([c for c in children if c.type == "commit"]) == 5
        assert children[-1].type == "load-more"
        assert children[-1].previous.commit.sha == "c4"

    def test_load_more_node_uses_its_page_size(self, view, branch, provider):
        provider.commits = make_commits(8)
        node = make_node(view, branch, UpstreamType.BEHIND, status=make_status(behind=8))

        async def run():
            children = await node.get_children()
            load_more = children[-1]
            load_more.page_size = 4
            await load_more.load_more()

        asyncio.run(run())

        assert provider.more_calls == [4]
        assert node.limit == 7

    def test_recreated_node_resumes_at_last_known_limit(self, view, branch, provider):
        provider.commits = make_commits(8)
        status = make_status(behind=8)
        node = make_node(view, branch, UpstreamType.BEHIND, status=status)

        async def run():
            await node.get_children()
            await node.load_more()
            again = make_node(view, branch, UpstreamType.BEHIND, status=status)
            return again, await again.get_children()

        again, children = asyncio.run(run())

        assert again.limit == 5
        assert provider.log_calls[-1]["limit"] == 5
        assert len([c for c in children if c.type == "commit"]) == 5

    def test_noop_when_everything_is_loaded(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.BEHIND)
        changed = []
        view.on_did_change_node(changed.append)

        async def run():
            await node.get_children()
            await node.load_more()

        asyncio.run(run())

        assert provider.more_calls == []
        assert changed == []
        assert view.get_node_last_known_limit(node) is None

    def test_noop_without_delta(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.SAME)

        asyncio.run(node.load_more())

        assert provider.log_calls == []


class TestRefresh:
    def test_refresh_keeps_the_cache(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.BEHIND)

        async def run():
            await node.get_children()
            await node.refresh()
            await node.get_children()

        asyncio.run(run())

        assert len(provider.log_calls) == 1

    def test_reset_refetches(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.BEHIND)

        async def run():
            await node.get_children()
            await node.refresh(reset=True)
            await node.get_children()

        asyncio.run(run())

        assert len(provider.log_calls) == 2


class TestFilesComparison:
    def test_behind_uses_the_files_summary(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.BEHIND)

        comparison = asyncio.run(node.get_files_comparison())

        assert comparison.ref1 == "origin/main"
        assert comparison.ref2 == "main"
        assert comparison.title is None
        assert [f.path for f in comparison.files] == ["README.md", "src/app.py"]
        assert provider.diff_calls == [("main", "origin/main")]

    def test_ahead_starts_before_oldest_unpublished_commit(self, view, branch, provider):
        provider.references = {"u1^": "base-sha"}
        node = make_node(
            view, branch, UpstreamType.AHEAD, unpublished_commits=["u1", "u2", "u3"]
        )

        comparison = asyncio.run(node.get_files_comparison())

        assert provider.resolve_calls == ["u1^"]
        assert comparison.ref1 == "base-sha"
        assert comparison.ref2 == "main"
        assert "main" in comparison.title
        assert [f.path for f in comparison.files] == ["README.md", "src/app.py"]

    def test_ahead_without_unpublished_commits(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.AHEAD, unpublished_commits=[])

        assert asyncio.run(node.get_files_comparison()) is None
        assert provider.resolve_calls == []

    def test_ahead_with_unresolvable_parent(self, view, branch, provider):
        node = make_node(view, branch, UpstreamType.AHEAD, unpublished_commits=["root"])

        assert asyncio.run(node.get_files_comparison()) is None

    @pytest.mark.parametrize(
        "upstream_type", [UpstreamType.SAME, UpstreamType.MISSING, UpstreamType.NONE]
    )
    def test_no_comparison_without_delta(self, view, branch, provider, upstream_type):
        node = make_node(view, branch, upstream_type)

        assert asyncio.run(node.get_files_comparison()) is None
        assert provider.diff_calls == []


class TestPresentation:
    def test_ahead(self, view, branch):
        node = make_node(view, branch, UpstreamType.AHEAD)
        assert node.label == "Changes to push to origin"
        assert node.description == "3 commits"

    def test_behind(self, view, branch):
        node = make_node(view, branch, UpstreamType.BEHIND, status=make_status(behind=1))
        assert node.label == "Changes to pull from origin"
        assert node.description == "1 commit"

    def test_same(self, view, branch):
        node = make_node(view, branch, UpstreamType.SAME)
        assert node.label == "Up to date with origin"
        assert node.description is None

    def test_missing(self, view, branch):
        node = make_node(view, branch, UpstreamType.MISSING)
        assert node.label == "Missing upstream branch"
        assert node.description == "origin/main"

    def test_none(self, view, branch):
        node = make_node(view, branch, UpstreamType.NONE, status=make_status(upstream=None))
        assert node.label == "Publish main to a remote"

    def test_ids_differ_per_classification(self, view, branch):
        status = make_status(ahead=1, behind=1)
        behind = make_node(view, branch, UpstreamType.BEHIND, status=status)
        ahead = make_node(view, branch, UpstreamType.AHEAD, status=status)
        assert behind.id != ahead.id
        assert "status=ahead" in ahead.id
