import asyncio
import base64
import binascii
from datetime import datetime
from email.mime.text import MIMEText
from typing import Any, Dict, List

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from goal_agent.collaborators import MessageSender, Reply, ReplySource
from goal_agent.errors import ReplySourceError, SendError
from goal_agent.integrations.google_auth import GoogleCredentials


def _decode_base64(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _decode_text(data: str) -> str:
    try:
        return _decode_base64(data).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return ""


def extract_body(message: Dict[str, Any]) -> str:
    """Return the plain-text body of a ``format=full`` message, or its snippet."""
    payload = message.get("payload") or {}
    data = (payload.get("body") or {}).get("data")
    if not data:
        for part in payload.get("parts") or []:
            if (part.get("mimeType") or "").startswith("text/plain"):
                data = (part.get("body") or {}).get("data")
                if data:
                    break
    text = _decode_text(data) if data else ""
    return text or message.get("snippet", "")


def build_query(address: str, after: datetime) -> str:
    return f"from:{address} after:{after.strftime('%Y/%m/%d')}"


class GmailReplySource(ReplySource):
    def __init__(self, credentials: GoogleCredentials):
        self.credentials = credentials

    async def fetch(self, address: str, after: datetime, limit: int) -> List[Reply]:
        credentials = await self.credentials.get()
        query = build_query(address, after)

        def _fetch():
            service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
            try:
                listing = (
                    service.users()
                    .messages()
                    .list(userId="me", q=query, maxResults=limit)
                    .execute()
                )
                replies = []
                for meta in listing.get("messages", []):
                    message_id = meta.get("id")
                    if not message_id:
                        continue
                    message = (
                        service.users()
                        .messages()
                        .get(userId="me", id=message_id, format="full")
                        .execute()
                    )
                    replies.append(Reply(body=extract_body(message), message_id=message_id))
            except HttpError as exc:
                raise ReplySourceError(f"Gmail fetch failed: {exc}") from exc
            return replies

        return await asyncio.to_thread(_fetch)


class GmailSender(MessageSender):
    def __init__(self, credentials: GoogleCredentials, subject: str = "Quick chat?"):
        self.credentials = credentials
        self.subject = subject

    async def send(self, address: str, body: str) -> None:
        credentials = await self.credentials.get()

        def _send():
            service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
            message = MIMEText(body, "plain", "utf-8")
            message["to"] = address
            message["subject"] = self.subject
            raw = base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")
            try:
                service.users().messages().send(userId="me", body={"raw": raw}).execute()
            except HttpError as exc:
                raise SendError(f"Gmail send failed: {exc}") from exc

        await asyncio.to_thread(_send)
