"""Static store of per-user session cookies for the puzzle service."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel, Field, ValidationError

from puzzleboard.models import Credential

logger = logging.getLogger(__name__)


class CredentialNotFound(LookupError):
    def __init__(self, user_id: str | None):
        self.user_id = user_id
        if user_id is None:
            super().__init__("No credentials configured")
        else:
            super().__init__(f"No credential for user '{user_id}'")


class CredentialFileError(Exception):
    pass


class CookieRecord(BaseModel):
    user_id: str = Field(alias="userId")
    cookie: str
    date_added: date = Field(alias="dateAdded")


class CookiesFile(BaseModel):
    cookies: list[CookieRecord] = []


class CredentialStore:
    """Read-only snapshot of the configured credentials.

    Records keep the order they have in the source file; the leaderboard
    numbers its entries by that order.
    """

    def __init__(self, credentials: Sequence[Credential] = ()):
        self._credentials = tuple(credentials)

    @classmethod
    def from_file(cls, path: str | Path) -> "CredentialStore":
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            parsed = CookiesFile.model_validate(raw)
        except FileNotFoundError as e:
            raise CredentialFileError(f"Credentials file not found: {path}") from e
        except (json.JSONDecodeError, ValidationError) as e:
            raise CredentialFileError(f"Invalid credentials file {path}: {e}") from e

        store = cls(
            Credential(
                user_id=record.user_id,
                session_token=record.cookie,
                date_added=record.date_added,
            )
            for record in parsed.cookies
        )
        logger.info(f"Loaded {len(store)} credentials from {path}")
        return store

    def __len__(self) -> int:
        return len(self._credentials)

    def list_credentials(self) -> tuple[Credential, ...]:
        return self._credentials

    def credential_for(self, user_id: str) -> Credential:
        for credential in self._credentials:
            if credential.user_id == user_id:
                return credential
        raise CredentialNotFound(user_id)

    def default_credential(self) -> Credential:
        """First configured credential, used for single-user lookups."""
        if not self._credentials:
            raise CredentialNotFound(None)
        return self._credentials[0]
