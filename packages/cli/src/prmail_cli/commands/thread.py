"""thread command — build and print the archive thread of a pull request."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

from prmail_core.archive import ArchiveMessage, ArchiveThread
from prmail_core.builder import build_archive
from prmail_core.composer import MessageComposer
from prmail_core.config import load_pushes
from prmail_core.events import PullRequestInfo
from prmail_core.factory import MessageFactory
from prmail_core.gh.pull_request import collect_events, get_pull, get_repo, pull_request_info
from prmail_core.webrev.base import Notifier
from prmail_core.webrev.git import GitDiffRenderer, GitRebaser, GitRepository

console = Console()


class ConsoleNotifier(Notifier):
    """Reports every rendered webrev on the terminal."""

    def notify(self, revision_index: int, full: str, incremental: str | None) -> None:
        line = f"[cyan]Webrev {revision_index:02d}[/cyan] full: {escape(full)}"
        if incremental:
            line += f"  incremental: {escape(incremental)}"
        console.print(line)


def _build_factory(config: dict, pr: PullRequestInfo) -> MessageFactory:
    """Wire the git collaborators from the configuration."""
    repo = GitRepository(config["repo_path"])
    return MessageFactory(
        pr,
        rebaser=GitRebaser(repo, config["committer_name"], config["committer_email"]),
        renderer=GitDiffRenderer(repo, config["webrev_dir"], config.get("webrev_url")),
        notifier=ConsoleNotifier(),
        composer=MessageComposer(config.get("subject_prefix") or ""),
        history=repo,
    )


def _label(message: ArchiveMessage) -> str:
    when = message.created_at.strftime("%Y-%m-%d %H:%M")
    return (
        f"[bold]{escape(message.id[:14])}[/bold]  {escape(message.subject)}  "
        f"[dim]{escape(message.author.username)} · {when}[/dim]"
    )


def build_tree(archive: ArchiveThread) -> Tree:
    def add(node: Tree, message: ArchiveMessage) -> None:
        for child in archive.children_of(message):
            add(node.add(_label(child)), child)

    tree = Tree(_label(archive.root))
    add(tree, archive.root)
    return tree


def _print_message(message: ArchiveMessage) -> None:
    parts = [part for part in (message.header, message.body, message.footer) if part]
    console.print(Panel(escape("\n\n".join(parts)), title=escape(message.subject), subtitle=message.id[:14]))


@click.command("thread")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option(
    "--pushes",
    "pushes_path",
    default=None,
    help="YAML push log of the pull request. Overrides config file.",
)
@click.option(
    "--render",
    is_flag=True,
    help="Also print every message's text. Renders webrevs through the local git checkout.",
)
@click.pass_context
def thread_cmd(ctx, repo: str, pr_number: int, pushes_path: str | None, render: bool):
    """Print the mailing-list thread a pull request's activity forms.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
    """
    config = ctx.obj["config"]

    token = config.get("github_token")
    if not token:
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    pushes_path = pushes_path or config.get("pushes_file")
    pushes = None
    if pushes_path:
        try:
            pushes = load_pushes(pushes_path)
        except FileNotFoundError as e:
            raise click.UsageError(str(e))

    try:
        this_repo = get_repo(repo, token=token)
        this_pr = get_pull(this_repo, pr_number)
        events = collect_events(this_repo, this_pr, pushes)
    except GithubException as e:
        raise click.ClickException(f"Could not load PR #{pr_number} from {repo}: {e}")

    archive = build_archive(events, _build_factory(config, pull_request_info(this_pr)))
    console.print(build_tree(archive))
    console.print(f"\n[bold]{len(archive)}[/bold] message(s) in thread.")

    if render:
        for message in archive:
            _print_message(message)
