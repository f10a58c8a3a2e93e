"""Storage for the GitHub access token."""

from __future__ import annotations

import logging
from pathlib import Path

import msgspec

from ghbrowse.config.credentials import (
    delete_credential,
    read_credential,
    write_credential,
)
from ghbrowse.config.paths import token_file
from ghbrowse.models import AccessToken

logger = logging.getLogger(__name__)


class AccessTokenRepository:
    """Keeps a single access token in a private credential file.

    Args:
        path: Token file; defaults to ``<config dir>/credentials/token.json``
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or token_file()

    def save(self, token: AccessToken) -> None:
        if not token.value:
            raise ValueError("access token must not be empty")
        write_credential(self.path, msgspec.json.encode(token))

    def load(self) -> AccessToken | None:
        """Stored token, or None if there is none or the file is unusable."""
        content = read_credential(self.path)
        if content is None:
            if self.path.exists():
                logger.warning(
                    "ignoring %s: file is readable by other users", self.path
                )
            return None
        try:
            return msgspec.json.decode(content, type=AccessToken)
        except (msgspec.DecodeError, msgspec.ValidationError):
            logger.warning("ignoring %s: not a valid token file", self.path)
            return None

    def clear(self) -> bool:
        """Forget the token; False if none was stored."""
        return delete_credential(self.path)
