import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from goal_agent.collaborators import MeetingScheduler
from goal_agent.contact import ContactRecord
from goal_agent.errors import InviteError
from goal_agent.integrations.google_auth import GoogleCredentials

LEAD_TIME = timedelta(days=2)
DURATION = timedelta(minutes=15)


def build_event(contact: ContactRecord, now: datetime) -> Dict[str, Any]:
    start = (now + LEAD_TIME).replace(second=0, microsecond=0)
    end = start + DURATION
    return {
        "summary": "15-min intro chat",
        "attendees": [{"email": contact.email}],
        "start": {"dateTime": start.isoformat(), "timeZone": "UTC"},
        "end": {"dateTime": end.isoformat(), "timeZone": "UTC"},
    }


class CalendarMeetingScheduler(MeetingScheduler):
    def __init__(self, credentials: GoogleCredentials, clock: Optional[Callable[[], datetime]] = None):
        self.credentials = credentials
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def create_invite(self, contact: ContactRecord) -> None:
        credentials = await self.credentials.get()
        event = build_event(contact, self.clock())

        def _insert():
            service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
            try:
                service.events().insert(calendarId="primary", body=event, sendUpdates="all").execute()
            except HttpError as exc:
                raise InviteError(f"Calendar invite failed: {exc}") from exc

        await asyncio.to_thread(_insert)
