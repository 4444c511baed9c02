"""GitHub token resolution.

Sources, first match wins:
  1. GITHUB_TOKEN environment variable
  2. `gh auth token` (an existing GitHub CLI login)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def _token_from_gh_cli() -> str | None:
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        logger.debug("gh CLI unavailable; no token from a gh session.")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when no source provides one."""
    return os.environ.get("GITHUB_TOKEN") or _token_from_gh_cli()
