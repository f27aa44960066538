"""Follow-up (nudge) email drafting."""

import asyncio
from typing import Optional

from openai import OpenAI

from goal_agent import monitoring
from goal_agent.collaborators import NudgeComposer
from goal_agent.contact import ContactRecord


def _snippet(text: Optional[str], limit: int = 280) -> str:
    text = (text or "").strip().replace("\n", " ")
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _fallback(contact: ContactRecord, signature: str) -> str:
    if contact.follow_up_count == 0:
        opener = (
            f"I'm reaching out because I think a short conversation could be useful "
            f"for {contact.company or 'your team'}."
        )
    else:
        opener = "Just bumping my earlier note in case it got buried."
    previous = _snippet(contact.last_message)
    reply = _snippet(contact.replies[-1]) if contact.replies else ""

    lines = [f"Hi {contact.name or 'there'},", "", opener]
    if previous:
        lines += ["", f"Previously I wrote: \"{previous}\""]
    if reply:
        lines += ["", f"You mentioned: \"{reply}\""]
    lines += [
        "",
        "Would you be open to a quick 15-minute chat this week?",
        "",
        f"- {signature}",
    ]
    return "\n".join(lines)


class OpenAINudgeComposer(NudgeComposer):
    def __init__(self, client: Optional[OpenAI], model: str = "gpt-4o-mini", signature: str = "Goal Agent"):
        self.client = client
        self.model = model
        self.signature = signature

    async def compose(self, contact: ContactRecord) -> str:
        """Draft the next nudge for a contact, referencing the conversation so far.

        Args:
            contact: The contact being followed up with.

        Returns:
            str: Plain-text email body.
        """
        if self.client is None:
            return _fallback(contact, self.signature)

        prompt = (
            "Draft a short, friendly follow-up email asking for a 15-minute intro chat. "
            "Reference the earlier conversation and keep it under 120 words. "
            f"Sign it as {self.signature}.\n\n"
            f"Recipient: {contact.name} ({contact.role} at {contact.company})\n"
            f"Follow-ups sent so far: {contact.follow_up_count}\n"
            f"Our last message:\n{contact.last_message or 'None yet.'}\n"
        )
        if contact.replies:
            prompt += f"Their latest reply:\n{contact.replies[-1]}\n"

        try:
            response = await asyncio.to_thread(
                self.client.responses.create, model=self.model, input=prompt
            )
            text = response.output_text.strip()
            if text:
                return text
        except Exception as exc:
            monitoring.capture_exception(exc)

        return _fallback(contact, self.signature)
