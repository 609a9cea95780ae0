"""Git hosting provider support for pull/merge request commands."""

from enum import Enum


class GitProvider(str, Enum):
    """Git hosting provider for merge/pull request operations."""

    GITHUB = "github"
    GITLAB = "gitlab"

    @classmethod
    def from_string(cls, value: str) -> "GitProvider":
        """
        Parse a provider name, accepting CLI program names as aliases.

        Args:
            value: Provider name such as "github", "GitLab", "gh" or "glab".

        Returns:
            The matching GitProvider.

        Raises:
            ValueError: If the name is not a known provider.
        """
        aliases = {
            "github": cls.GITHUB,
            "gh": cls.GITHUB,
            "gitlab": cls.GITLAB,
            "glab": cls.GITLAB,
        }
        provider = aliases.get(value.lower())
        if provider is None:
            raise ValueError(
                f"unknown provider '{value}', expected 'github' or 'gitlab'"
            )
        return provider

    @property
    def cli_program(self) -> str:
        """CLI program used to talk to this provider."""
        return "gh" if self == GitProvider.GITHUB else "glab"

    @property
    def display_name(self) -> str:
        return "GitHub" if self == GitProvider.GITHUB else "GitLab"

    @property
    def merge_request_term(self) -> str:
        return "pull request" if self == GitProvider.GITHUB else "merge request"

    @property
    def merge_request_short(self) -> str:
        return "PR" if self == GitProvider.GITHUB else "MR"

    def __str__(self) -> str:
        return self.display_name

    def build_create_args(
        self,
        branch: str,
        draft: bool = False,
        fill: bool = False,
        web: bool = False,
        reviewers: tuple[str, ...] | list[str] = (),
        extra_args: tuple[str, ...] | list[str] = (),
    ) -> list[str]:
        """
        Build arguments for creating a pull/merge request.

        Args:
            branch: Source branch of the request.
            draft: Open the request as a draft.
            fill: Fill title and body from commits.
            web: Continue in the browser.
            reviewers: Reviewers to request.
            extra_args: Arguments passed through to the provider CLI unchanged.

        Returns:
            Argument list for `cli_program`.
        """
        if self == GitProvider.GITHUB:
            args = ["pr", "create", "--head", branch]
        else:
            args = ["mr", "create", "--source-branch", branch]

        if draft:
            args.append("--draft")
        if fill:
            args.append("--fill")
        if web:
            args.append("--web")

        for reviewer in reviewers:
            args.extend(["--reviewer", reviewer])

        args.extend(extra_args)
        return args

    def build_list_args(self, branch: str) -> list[str]:
        """Build arguments listing the open request for `branch` as JSON."""
        if self == GitProvider.GITHUB:
            return [
                "pr", "list",
                "--head", branch,
                "--state", "open",
                "--json", "number",
                "--limit", "1",
            ]
        return [
            "mr", "list",
            "--source-branch", branch,
            "--state", "opened",
            "--output", "json",
        ]

    def build_merge_args(self, number: int, delete_branch: bool) -> list[str]:
        """Build arguments for merging request `number`."""
        if self == GitProvider.GITHUB:
            args = ["pr", "merge", str(number), "--merge"]
            if delete_branch:
                args.append("--delete-branch")
            return args

        args = ["mr", "merge", str(number)]
        if delete_branch:
            args.append("--remove-source-branch")
        return args

    def is_branch_delete_failure(self, stderr: str) -> bool:
        """Check if the provider output indicates only the branch deletion failed."""
        stderr_lower = stderr.lower()
        if self == GitProvider.GITHUB:
            return (
                "failed to delete local branch" in stderr_lower
                or "cannot delete branch" in stderr_lower
            )
        return "failed to delete" in stderr_lower or "could not remove" in stderr_lower
