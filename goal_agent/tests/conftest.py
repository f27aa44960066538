from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from goal_agent.collaborators import (
    Category,
    Collaborators,
    MeetingScheduler,
    MessageSender,
    NudgeComposer,
    Reply,
    ReplyClassifier,
    ReplySource,
)
from goal_agent.contact import ContactRecord
from goal_agent.errors import InviteError, SendError

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeReplySource(ReplySource):
    def __init__(self):
        self.queued: List[List[Reply]] = []
        self.calls = []

    def queue(self, *bodies: str, ids: Optional[List[str]] = None) -> None:
        ids = ids or [None] * len(bodies)
        self.queued.append([Reply(body=body, message_id=mid) for body, mid in zip(bodies, ids)])

    async def fetch(self, address, after, limit):
        self.calls.append((address, after, limit))
        if self.queued:
            return self.queued.pop(0)
        return []


class FakeSender(MessageSender):
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, address, body):
        if self.fail:
            raise SendError("smtp down")
        self.sent.append((address, body))


class FakeClassifier(ReplyClassifier):
    def __init__(self, answers: Optional[Dict[str, Category]] = None):
        self.answers = answers or {}

    async def classify(self, text):
        return self.answers.get(text, Category.OTHER)


class FakeMeetings(MeetingScheduler):
    def __init__(self):
        self.invites = []
        self.fail = False

    async def create_invite(self, contact):
        if self.fail:
            raise InviteError("calendar quota exceeded")
        self.invites.append(contact.email)


class FakeComposer(NudgeComposer):
    async def compose(self, contact):
        return f"nudge {contact.follow_up_count + 1} for {contact.name}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def collaborators():
    return Collaborators(
        replies=FakeReplySource(),
        sender=FakeSender(),
        classifier=FakeClassifier(),
        meetings=FakeMeetings(),
        composer=FakeComposer(),
        reply_fetch_limit=5,
    )


@pytest.fixture
def contact():
    return ContactRecord(name="Ada", email="ada@example.com", company="Analytical", role="CTO")
