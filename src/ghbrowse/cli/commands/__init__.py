"""CLI commands for ghbrowse."""
