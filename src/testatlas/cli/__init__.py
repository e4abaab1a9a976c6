"""Command-line interface for testatlas."""
