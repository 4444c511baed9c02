"""Thread pull-request activity into mailing-list style archive messages."""
