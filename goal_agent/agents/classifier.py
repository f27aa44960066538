"""Reply intent classification and the contact status it implies."""

import asyncio
import logging
from typing import Dict, Optional

from openai import OpenAI, OpenAIError

from goal_agent.collaborators import Category, ReplyClassifier
from goal_agent.contact import Status
from goal_agent.errors import ClassifierError

logger = logging.getLogger("goal_agent.classifier")

STATUS_FOR_CATEGORY: Dict[Category, Status] = {
    Category.ACCEPTED: Status.INVITE_ACCEPTED,
    Category.DECLINED: Status.DECLINED,
    Category.BOUNCE: Status.BOUNCE,
    Category.NOT_NOW: Status.NOT_NOW,
    Category.OTHER: Status.WAITING,
}

_LABELS: Dict[str, Category] = {
    "ACCEPTED": Category.ACCEPTED,
    "YES": Category.ACCEPTED,
    "SURE": Category.ACCEPTED,
    "DECLINED": Category.DECLINED,
    "NO": Category.DECLINED,
    "BOUNCE": Category.BOUNCE,
    "NOT_NOW": Category.NOT_NOW,
    "OTHER": Category.OTHER,
}

_BOUNCE_MARKERS = (
    "delivery status notification",
    "undeliverable",
    "address not found",
    "mailbox unavailable",
    "delivery has failed",
)
_NOT_NOW_MARKERS = ("not now", "not right now", "next quarter", "later this year", "circle back", "out of office")
_DECLINE_MARKERS = ("not interested", "no thanks", "no thank you", "unsubscribe", "remove me", "please stop")
_ACCEPT_MARKERS = ("sounds good", "happy to chat", "let's talk", "lets talk", "works for me", "send an invite", "send me an invite")


def status_for(category: Optional[Category]) -> Status:
    """Map a classified reply to the contact status it implies; anything unknown keeps waiting."""
    if category is None:
        return Status.WAITING
    return STATUS_FOR_CATEGORY.get(category, Status.WAITING)


def parse_category(raw: Optional[str]) -> Category:
    label = (raw or "").strip().strip(".\"'").upper().replace(" ", "_").replace("-", "_")
    return _LABELS.get(label, Category.OTHER)


def fallback_category(text: str) -> Category:
    """Keyword heuristic used when no language model is configured."""
    lowered = (text or "").lower()
    if any(marker in lowered for marker in _BOUNCE_MARKERS):
        return Category.BOUNCE
    if any(marker in lowered for marker in _NOT_NOW_MARKERS):
        return Category.NOT_NOW
    if any(marker in lowered for marker in _DECLINE_MARKERS):
        return Category.DECLINED
    if any(marker in lowered for marker in _ACCEPT_MARKERS):
        return Category.ACCEPTED
    return Category.OTHER


class OpenAIClassifier(ReplyClassifier):
    def __init__(self, client: Optional[OpenAI], model: str = "gpt-4o-mini"):
        self.client = client
        self.model = model

    async def classify(self, text: str) -> Category:
        if self.client is None:
            return fallback_category(text)

        prompt = (
            "Classify this email strictly as one of "
            "ACCEPTED, DECLINED, NOT_NOW, BOUNCE, OTHER. "
            "Answer with the label only.\n\n"
            f"{text}"
        )
        try:
            response = await asyncio.to_thread(
                self.client.responses.create, model=self.model, input=prompt
            )
        except OpenAIError as exc:
            raise ClassifierError(f"Reply classification failed: {exc}") from exc

        category = parse_category(response.output_text)
        logger.debug("Classified reply as %s", category.value)
        return category
