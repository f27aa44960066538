from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Set


class Status(str, Enum):
    NEW = "new"
    WAITING = "waiting"
    INVITE_ACCEPTED = "invite_accepted"
    DECLINED = "declined"
    BOUNCE = "bounce"
    NOT_NOW = "not_now"


@dataclass
class ContactRecord:
    """Mutable state one follow-up goal works on.

    ``last_stamp`` does double duty: after a send it holds the send time,
    after a "not now" reply it holds the earliest moment to re-engage. Both
    readings gate the same elapsed-time check, so the accessors below are the
    only places that write it.
    """

    name: str
    email: str
    company: str
    role: str

    last_message: Optional[str] = None
    last_stamp: Optional[datetime] = None
    replies: List[str] = field(default_factory=list)
    status: Status = Status.WAITING
    follow_up_count: int = 0
    seen_reply_ids: Set[str] = field(default_factory=set)

    def elapsed_since_stamp(self, now: datetime, fallback: timedelta) -> timedelta:
        last = self.last_stamp if self.last_stamp is not None else now - fallback
        return now - last

    def record_reply(self, body: str, reply_id: Optional[str] = None) -> None:
        self.replies.append(body)
        if reply_id:
            self.seen_reply_ids.add(reply_id)

    def has_seen(self, reply_id: Optional[str]) -> bool:
        return bool(reply_id) and reply_id in self.seen_reply_ids

    def defer_until(self, when: datetime) -> None:
        self.last_stamp = when

    def record_nudge(self, body: str, sent_at: datetime) -> None:
        self.last_message = body
        self.last_stamp = sent_at
        self.follow_up_count += 1
