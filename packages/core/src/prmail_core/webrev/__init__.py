"""Collaborators that rebase, render and announce revision diffs."""
