"""The built-in email follow-up goal: harvest replies, react, nudge on a backoff."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from goal_agent import monitoring
from goal_agent.agents.classifier import parse_category, status_for
from goal_agent.collaborators import Collaborators
from goal_agent.contact import ContactRecord, Status
from goal_agent.engine import Action, TerminationCondition

logger = logging.getLogger("goal_agent.followup")

# Lower bound for reply harvesting before anything has been sent.
REPLY_LOOKBACK = timedelta(days=30)
# Minimum quiet period between nudges.
NUDGE_AFTER = timedelta(hours=48)
# Elapsed time assumed when no stamp exists yet; equals NUDGE_AFTER so the first tick nudges.
UNSTAMPED_ELAPSED = timedelta(days=2)
# Re-engagement deferral after a "not now" reply.
NOT_NOW_DEFERRAL = timedelta(weeks=2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FollowUpAction(Action):
    def __init__(self, collaborators: Collaborators, *, clock: Callable[[], datetime] = utcnow):
        self.collaborators = collaborators
        self.clock = clock

    async def run(self, contact: ContactRecord) -> None:
        await self._harvest(contact)
        await self._nudge(contact)

    async def _harvest(self, contact: ContactRecord) -> None:
        after = contact.last_stamp or (self.clock() - REPLY_LOOKBACK)
        replies = await self.collaborators.replies.fetch(
            contact.email, after, self.collaborators.reply_fetch_limit
        )
        for reply in replies:
            if contact.has_seen(reply.message_id):
                continue
            raw = await self.collaborators.classifier.classify(reply.body)
            category = parse_category(getattr(raw, "value", raw))
            contact.record_reply(reply.body, reply.message_id)
            contact.status = status_for(category)
            logger.info("Reply from %s classified as %s", contact.email, category.value)

            if contact.status == Status.INVITE_ACCEPTED:
                try:
                    await self.collaborators.meetings.create_invite(contact)
                except Exception as exc:
                    logger.error("Invite for %s failed: %s", contact.email, exc)
                    monitoring.capture_exception(exc)
            elif contact.status == Status.NOT_NOW:
                contact.defer_until(self.clock() + NOT_NOW_DEFERRAL)

    async def _nudge(self, contact: ContactRecord) -> None:
        now = self.clock()
        elapsed = contact.elapsed_since_stamp(now, UNSTAMPED_ELAPSED)
        if contact.status != Status.WAITING or elapsed < NUDGE_AFTER:
            return

        body = await self.collaborators.composer.compose(contact)
        await self.collaborators.sender.send(contact.email, body)
        contact.record_nudge(body, now)
        logger.info("Sent follow-up #%d to %s", contact.follow_up_count, contact.email)


class InviteAccepted(TerminationCondition):
    def met(self, contact: ContactRecord) -> bool:
        return contact.status == Status.INVITE_ACCEPTED
