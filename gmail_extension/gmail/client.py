"""Authenticated Gmail API service factory."""

from __future__ import annotations

import logging
import os
import threading
from datetime import datetime
from typing import Any

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import Resource, build

from gmail_extension.auth.storage import TokenStorage, token_storage
from gmail_extension.utils.errors import GmailAPIError, MustAuthorizeError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# Scopes needed by the send/reply/forward/move/mark/fetch operations
GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.compose",
    "https://www.googleapis.com/auth/gmail.labels",
]


def default_user_id() -> str:
    """Token store key of the mailbox this process serves."""
    return os.getenv("GMAIL_USER_ID", "default")


class GmailClient:
    """Factory for authenticated Gmail API services.

    Loads tokens from storage, refreshes expired ones, and caches one service
    object per user. Any state that requires the owner to grant access again
    surfaces as MustAuthorizeError.
    """

    def __init__(self, storage: TokenStorage | None = None) -> None:
        self._storage = storage or token_storage
        self._services: dict[str, Resource] = {}
        self._credentials: dict[str, Credentials] = {}
        self._lock = threading.Lock()
        self._user_locks: dict[str, threading.Lock] = {}

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._lock:
            return self._user_locks.setdefault(user_id, threading.Lock())

    def _cached(self, user_id: str) -> Resource | None:
        with self._lock:
            creds = self._credentials.get(user_id)
            if creds and creds.valid:
                return self._services.get(user_id)
        return None

    def get_service(self, user_id: str | None = None) -> Resource:
        """Get authenticated Gmail API service for user.

        Args:
            user_id: Token store key; defaults to GMAIL_USER_ID.

        Returns:
            Gmail API Resource object.

        Raises:
            MustAuthorizeError: If no token is stored, the token is invalid,
                or Google refuses to refresh it.
        """
        user_id = user_id or default_user_id()

        service = self._cached(user_id)
        if service is not None:
            return service

        with self._user_lock(user_id):
            # Another thread may have refreshed while we waited
            service = self._cached(user_id)
            if service is not None:
                return service

            token_data = self._storage.load(user_id)
            if not token_data:
                raise MustAuthorizeError(
                    f"User {user_id} has not authorized Gmail access.",
                    user_id=user_id,
                )

            creds = self._build_credentials(token_data)
            if creds.expired and creds.refresh_token:
                self._refresh(user_id, creds)

            if not creds.valid:
                raise MustAuthorizeError(
                    f"Invalid credentials for {user_id}. Please re-authorize.",
                    user_id=user_id,
                )

            service = build("gmail", "v1", credentials=creds, cache_discovery=False)
            with self._lock:
                self._services[user_id] = service
                self._credentials[user_id] = creds

            logger.debug("Created Gmail service for user %s", user_id)
            return service

    def _build_credentials(self, token_data: dict[str, Any]) -> Credentials:
        """Build Credentials object from stored token fields."""
        expiry = None
        if token_data.get("expiry"):
            try:
                # google-auth compares against naive UTC datetimes
                expiry = datetime.fromisoformat(token_data["expiry"]).replace(tzinfo=None)
            except (ValueError, TypeError) as e:
                logger.warning("Failed to parse token expiry: %s", e)

        # client_secret is not stored; it is read from the environment
        return Credentials(  # type: ignore[no-untyped-call]
            token=token_data.get("access_token"),
            refresh_token=token_data.get("refresh_token"),
            token_uri=token_data.get("token_uri", GOOGLE_TOKEN_URI),
            client_id=token_data.get("client_id") or os.getenv("GOOGLE_CLIENT_ID"),
            client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
            scopes=token_data.get("scopes", GMAIL_SCOPES),
            expiry=expiry,
        )

    def _refresh(self, user_id: str, creds: Credentials) -> None:
        """Refresh credentials in place and persist the new access token."""
        try:
            creds.refresh(Request())
        except RefreshError as e:
            logger.warning("Token refresh refused for %s: %s", user_id, e)
            raise MustAuthorizeError(
                f"Token refresh failed for {user_id}. Please re-authorize.",
                user_id=user_id,
            ) from e

        token_data: dict[str, Any] = {
            "access_token": creds.token,
            "refresh_token": creds.refresh_token,
            "token_uri": creds.token_uri,
            "client_id": creds.client_id,
            "scopes": list(creds.scopes) if creds.scopes else GMAIL_SCOPES,
        }
        if creds.expiry:
            token_data["expiry"] = creds.expiry.isoformat()
        self._storage.save(user_id, token_data)
        logger.debug("Refreshed token for %s", user_id)

    def invalidate(self, user_id: str | None = None) -> None:
        """Drop the cached service so the next call reloads credentials."""
        user_id = user_id or default_user_id()
        with self._lock:
            self._services.pop(user_id, None)
            self._credentials.pop(user_id, None)
        logger.debug("Invalidated cache for user %s", user_id)


# Global singleton
gmail_client = GmailClient()


def to_api_error(
    error: Exception, action: str, user_id: str | None = None
) -> MustAuthorizeError | GmailAPIError:
    """Translate a Gmail client failure into the extension's error types.

    A 401 means the stored grant is no longer accepted and maps to
    MustAuthorizeError; everything else becomes GmailAPIError.

    Returns:
        The exception to raise (callers chain it with `from`).
    """
    status = getattr(getattr(error, "resp", None), "status", None)
    if status is not None:
        status = int(status)
    if status == 401:
        return MustAuthorizeError(
            f"Gmail rejected the stored credentials while trying to {action}.",
            user_id=user_id or default_user_id(),
        )
    return GmailAPIError(f"Failed to {action}: {error}", status_code=status)
