"""Tests for git hosting provider support."""

import pytest

from rsworktree.provider import GitProvider


class TestGitProviderParsing:
    """Tests for GitProvider.from_string."""

    @pytest.mark.parametrize("value,expected", [
        ("github", GitProvider.GITHUB),
        ("GitHub", GitProvider.GITHUB),
        ("gh", GitProvider.GITHUB),
        ("gitlab", GitProvider.GITLAB),
        ("GLAB", GitProvider.GITLAB),
    ])
    def test_known_names(self, value, expected):
        assert GitProvider.from_string(value) == expected

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="unknown provider 'gitea'"):
            GitProvider.from_string("gitea")


class TestGitProviderProperties:
    """Tests for provider display properties."""

    def test_github(self):
        provider = GitProvider.GITHUB

        assert provider.cli_program == "gh"
        assert str(provider) == "GitHub"
        assert provider.merge_request_term == "pull request"
        assert provider.merge_request_short == "PR"

    def test_gitlab(self):
        provider = GitProvider.GITLAB

        assert provider.cli_program == "glab"
        assert str(provider) == "GitLab"
        assert provider.merge_request_term == "merge request"
        assert provider.merge_request_short == "MR"


class TestGitProviderArguments:
    """Tests for the gh/glab argument builders."""

    def test_github_create(self):
        args = GitProvider.GITHUB.build_create_args(
            "feature/x", draft=True, fill=True, reviewers=("alice", "bob"), extra_args=("--label", "wip")
        )

        assert args == [
            "pr", "create", "--head", "feature/x",
            "--draft", "--fill",
            "--reviewer", "alice", "--reviewer", "bob",
            "--label", "wip",
        ]

    def test_gitlab_create(self):
        args = GitProvider.GITLAB.build_create_args("feature/x", web=True)

        assert args == ["mr", "create", "--source-branch", "feature/x", "--web"]

    def test_github_list(self):
        assert GitProvider.GITHUB.build_list_args("b") == [
            "pr", "list", "--head", "b", "--state", "open", "--json", "number", "--limit", "1",
        ]

    def test_gitlab_list(self):
        assert GitProvider.GITLAB.build_list_args("b") == [
            "mr", "list", "--source-branch", "b", "--state", "opened", "--output", "json",
        ]

    def test_github_merge(self):
        assert GitProvider.GITHUB.build_merge_args(42, delete_branch=True) == [
            "pr", "merge", "42", "--merge", "--delete-branch",
        ]
        assert GitProvider.GITHUB.build_merge_args(42, delete_branch=False) == [
            "pr", "merge", "42", "--merge",
        ]

    def test_gitlab_merge(self):
        assert GitProvider.GITLAB.build_merge_args(7, delete_branch=True) == [
            "mr", "merge", "7", "--remove-source-branch",
        ]

    def test_branch_delete_failure(self):
        """Test recognising a merge that only failed to delete the branch."""
        assert GitProvider.GITHUB.is_branch_delete_failure("failed to delete local branch x")
        assert GitProvider.GITLAB.is_branch_delete_failure("Could not remove source branch")
        assert not GitProvider.GITHUB.is_branch_delete_failure("merge conflict")
