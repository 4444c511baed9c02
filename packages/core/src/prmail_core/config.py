import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

from prmail_core.events import PushRecord

DEFAULT_CONFIG: dict = {
    "subject_prefix": "",  # e.g. "[jdk] " -- prepended to every subject
    "repo_path": ".",  # local git checkout that holds the pull request's commits
    "webrev_dir": ".prmail/webrevs",
    "webrev_url": None,  # None = reference webrevs by file path
    "committer_name": "prmail",
    "committer_email": "prmail@localhost",
    "pushes_file": None,  # YAML push log; None = only the current head is known
}


def load_config(config_path: str = ".prmail.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prmail.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def load_pushes(pushes_path: str) -> list[PushRecord]:
    """
    Load the recorded push log of a pull request.

    The file is a YAML list of mappings with ``base``, ``head`` and
    ``pushed_at`` (an ISO-8601 timestamp), oldest first. Timestamps without an
    offset are taken as UTC.
    """
    p = Path(pushes_path)
    if not p.exists():
        raise FileNotFoundError(f"Push log not found: {pushes_path}")

    with open(p) as f:
        entries = yaml.safe_load(f) or []

    pushes = []
    for entry in entries:
        pushed_at = entry["pushed_at"]
        if isinstance(pushed_at, str):
            pushed_at = datetime.fromisoformat(pushed_at)
        if pushed_at.tzinfo is None:
            pushed_at = pushed_at.replace(tzinfo=timezone.utc)
        pushes.append(PushRecord(base=str(entry["base"]), head=str(entry["head"]), pushed_at=pushed_at))
    return pushes
