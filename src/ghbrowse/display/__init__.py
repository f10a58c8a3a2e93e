"""Output formatting for the ghbrowse CLI."""

from ghbrowse.display.json import (
    from_ghbrowse_error,
    output_json,
    output_json_error,
    output_json_pretty,
    resource_to_dict,
)

__all__ = [
    "from_ghbrowse_error",
    "output_json",
    "output_json_error",
    "output_json_pretty",
    "resource_to_dict",
]
