import asyncio
import logging
import threading
from pathlib import Path
from typing import Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from goal_agent.errors import CollaboratorError

SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/calendar.events",
]

logger = logging.getLogger("goal_agent.google_auth")


class GoogleCredentials:
    """Loads, refreshes and persists the OAuth token shared by Gmail and Calendar."""

    def __init__(self, client_secrets_file: str, token_file: str):
        self.client_secrets_file = Path(client_secrets_file)
        self.token_file = Path(token_file)
        self._credentials: Optional[Credentials] = None
        self._lock = threading.Lock()

    async def get(self) -> Credentials:
        return await asyncio.to_thread(self._load)

    def _load(self) -> Credentials:
        with self._lock:
            creds = self._credentials
            if creds is None and self.token_file.exists():
                creds = Credentials.from_authorized_user_file(str(self.token_file), SCOPES)

            if creds and creds.valid:
                self._credentials = creds
                return creds

            if creds and creds.expired and creds.refresh_token:
                logger.info("Refreshing Google OAuth token")
                try:
                    creds.refresh(Request())
                except RefreshError as exc:
                    raise CollaboratorError(f"Google token refresh failed: {exc}") from exc
            else:
                creds = self._run_flow()

            self._persist(creds)
            self._credentials = creds
            return creds

    def _run_flow(self) -> Credentials:
        if not self.client_secrets_file.exists():
            raise CollaboratorError(f"{self.client_secrets_file} missing")
        logger.info("Starting interactive Google OAuth flow")
        flow = InstalledAppFlow.from_client_secrets_file(str(self.client_secrets_file), SCOPES)
        return flow.run_local_server(port=0)

    def _persist(self, creds: Credentials) -> None:
        self.token_file.write_text(creds.to_json(), encoding="utf-8")
