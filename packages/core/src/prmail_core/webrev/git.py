"""Local git implementations of the Rebaser and DiffRenderer collaborators.

Both shell out to the ``git`` CLI. The repository at ``path`` must already
contain the commits of the pull request (the caller fetches them); nothing here
talks to the network. Rebases happen in a throw-away detached worktree so the
caller's checkout is never touched.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path

from prmail_core.webrev.base import CommitHistory, DiffRenderer, Rebaser

logger = logging.getLogger(__name__)

_GIT_TIMEOUT = 300


class GitError(OSError):
    """A git command could not be run or exited non-zero."""


class RebaseError(GitError):
    """The previous head could not be rebased onto the new base."""


class GitRepository(CommitHistory):
    def __init__(self, path: str | Path = ".", timeout: int = _GIT_TIMEOUT):
        self.path = Path(path)
        self._timeout = timeout

    def _run(self, args: tuple[str, ...], cwd: Path | None, env: dict | None) -> subprocess.CompletedProcess:
        cmd = ["git", "-C", str(cwd or self.path), *args]
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout, env=env)
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            raise GitError(f"git {args[0]} could not be run: {e}") from e

    def run(self, *args: str, cwd: Path | None = None, env: dict | None = None) -> str:
        """Run a git command and return its stdout, raising GitError on failure."""
        result = self._run(args, cwd, env)
        if result.returncode != 0:
            raise GitError(f"git {' '.join(args)} exited with {result.returncode}: {result.stderr.strip()}")
        return result.stdout

    def run_unchecked(self, *args: str, cwd: Path | None = None) -> int:
        """Run a cleanup command whose failure only matters for debugging."""
        result = self._run(args, cwd, None)
        if result.returncode != 0:
            logger.debug("git %s exited with %d: %s", " ".join(args), result.returncode, result.stderr.strip())
        return result.returncode

    def resolve(self, rev: str) -> str:
        return self.run("rev-parse", "--verify", f"{rev}^{{commit}}").strip()

    def diff(self, from_hash: str, to_hash: str) -> str:
        return self.run("diff", "--no-color", "--find-renames", f"{from_hash}..{to_hash}")

    def stats(self, base: str, head: str) -> str:
        """Summarize ``base..head``; a line both removed and added counts as modified."""
        output = self.run("diff", "--numstat", "--find-renames", f"{base}..{head}")
        inserted = deleted = modified = files = 0
        for line in output.splitlines():
            if not line:
                continue
            added, removed, _path = line.split("\t", 2)
            files += 1
            if added == "-" or removed == "-":  # binary
                continue
            changed = min(int(added), int(removed))
            modified += changed
            inserted += int(added) - changed
            deleted += int(removed) - changed

        lines = inserted + deleted + modified
        line_word = "line" if lines == 1 else "lines"
        file_word = "file" if files == 1 else "files"
        return f"{lines} {line_word} in {files} {file_word} changed: {inserted} ins; {deleted} del; {modified} mod"

    def commit_messages(self, first: str, last: str) -> list[str]:
        output = self.run("log", "--reverse", "--format=%h: %s", f"{first}..{last}")
        return [line for line in output.splitlines() if line]


class GitRebaser(Rebaser):
    def __init__(self, repo: GitRepository, committer_name: str, committer_email: str):
        self._repo = repo
        self._committer_name = committer_name
        self._committer_email = committer_email

    def rebase(self, previous_head: str, new_base: str) -> str:
        env = {
            **os.environ,
            "GIT_COMMITTER_NAME": self._committer_name,
            "GIT_COMMITTER_EMAIL": self._committer_email,
        }
        with tempfile.TemporaryDirectory(prefix="prmail-rebase-") as tmp:
            worktree = Path(tmp) / "worktree"
            try:
                self._repo.run("worktree", "add", "--detach", str(worktree), previous_head)
            except GitError as e:
                raise RebaseError(f"Cannot check out {previous_head[:12]}: {e}") from e
            try:
                self._repo.run("rebase", "--quiet", new_base, cwd=worktree, env=env)
                rebased = self._repo.run("rev-parse", "HEAD", cwd=worktree).strip()
            except GitError as e:
                self._repo.run_unchecked("rebase", "--abort", cwd=worktree)
                raise RebaseError(f"Cannot rebase {previous_head[:12]} onto {new_base[:12]}: {e}") from e
            finally:
                self._repo.run_unchecked("worktree", "remove", "--force", str(worktree))

        logger.debug("Rebased %s onto %s as %s", previous_head[:12], new_base[:12], rebased[:12])
        return rebased


class GitDiffRenderer(DiffRenderer):
    """Writes ``git diff`` output to content-addressed files under ``output_dir``.

    The file name is derived from the label and both hashes, so an artifact
    that already exists is returned as-is instead of being rendered again.
    """

    def __init__(self, repo: GitRepository, output_dir: str | Path, base_url: str | None = None):
        self._repo = repo
        self._output_dir = Path(output_dir)
        self._base_url = base_url

    @staticmethod
    def artifact_name(from_hash: str, to_hash: str, label: str) -> str:
        return f"{label}_{from_hash[:12]}_{to_hash[:12]}.diff"

    def render(self, from_hash: str, to_hash: str, label: str) -> str:
        name = self.artifact_name(from_hash, to_hash, label)
        path = self._output_dir / name
        if path.exists():
            logger.debug("Reusing webrev %s", path)
        else:
            content = self._repo.diff(from_hash, to_hash)
            path.parent.mkdir(parents=True, exist_ok=True)
            partial = path.with_name(name + ".partial")
            partial.write_text(content, encoding="utf-8")
            partial.replace(path)
            logger.info("Rendered webrev %s (%s..%s)", label, from_hash[:12], to_hash[:12])

        if self._base_url:
            return f"{self._base_url.rstrip('/')}/{name}"
        return str(path)
