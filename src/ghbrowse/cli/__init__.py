"""Command-line interface for ghbrowse."""

from __future__ import annotations

from ghbrowse.cli.app import ExitCode, app, run_app

__all__ = ["app", "run_app", "ExitCode"]
