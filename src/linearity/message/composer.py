"""Build merge commit messages from pull request metadata."""

from __future__ import annotations

from linearity.gateway.github import PullRequestInfo
from linearity.git.repository import Repository
from linearity.message.markdown import normalize_markdown, split_trailers


def split_message(message: str) -> tuple[str, str]:
    """Split a commit message into its title and the rest."""
    title, _, body = message.partition("\n\n")
    return title.strip(), body.strip("\n")


class MessageComposer:
    """Deterministic merge commit messages.

    Layout::

        <prefix><title> (#<number>)

        <normalized body>

        This merges the following commits:
        * <subject, newest first>

            <diff stat>

        <trailers from the body>
        Pull-request: <url>

    The commit list and diff stat are left out for squash merges.
    """

    def __init__(
        self,
        repository: Repository,
        title_prefix: str = "",
        diffstat_width: int = 72,
    ):
        self.repository = repository
        self.title_prefix = title_prefix
        self.diffstat_width = diffstat_width

    def title(self, pr: PullRequestInfo) -> str:
        return f"{self.title_prefix}{pr.title} (#{pr.number})"

    def compose(
        self,
        pr: PullRequestInfo,
        from_branch: str,
        to_branch: str,
        squashing: bool = False,
    ) -> str:
        """Compose the message for merging from_branch into to_branch."""
        body, trailers = split_trailers(normalize_markdown(pr.body))

        sections = [self.title(pr)]
        if body:
            sections.append(body)

        if not squashing:
            subjects = self.repository.log_subjects(
                f"{to_branch}..{from_branch}"
            )
            if subjects:
                sections.append(
                    "This merges the following commits:\n"
                    + "\n".join(f"* {subject}" for subject in subjects)
                )
            stat = self.repository.diff_stat(
                f"{to_branch}...{from_branch}", self.diffstat_width
            )
            if stat:
                sections.append("\n".join(
                    f"    {line}" if line.strip() else ""
                    for line in stat.splitlines()
                ))

        sections.append("\n".join([*trailers, f"Pull-request: {pr.url}"]))
        return "\n\n".join(sections) + "\n"
