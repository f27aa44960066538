"""Interfaces for the external services a goal depends on."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from goal_agent.contact import ContactRecord


class Category(str, Enum):
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    NOT_NOW = "NOT_NOW"
    BOUNCE = "BOUNCE"
    OTHER = "OTHER"


@dataclass(frozen=True)
class Reply:
    body: str
    message_id: Optional[str] = None


class ReplySource:
    async def fetch(self, address: str, after: datetime, limit: int) -> List[Reply]:  # pragma: no cover - override
        raise NotImplementedError


class MessageSender:
    async def send(self, address: str, body: str) -> None:  # pragma: no cover - override
        raise NotImplementedError


class ReplyClassifier:
    async def classify(self, text: str) -> Category:  # pragma: no cover - override
        raise NotImplementedError


class MeetingScheduler:
    async def create_invite(self, contact: ContactRecord) -> None:  # pragma: no cover - override
        raise NotImplementedError


class NudgeComposer:
    async def compose(self, contact: ContactRecord) -> str:  # pragma: no cover - override
        raise NotImplementedError


@dataclass
class Collaborators:
    replies: ReplySource
    sender: MessageSender
    classifier: ReplyClassifier
    meetings: MeetingScheduler
    composer: NudgeComposer
    reply_fetch_limit: int = 5
