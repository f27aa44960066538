import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from goal_agent import monitoring
from goal_agent.contact import ContactRecord

logger = logging.getLogger("goal_agent.engine")

Sleep = Callable[[float], Awaitable[Any]]


class Action:
    """One unit of work a goal performs per tick."""

    async def run(self, contact: ContactRecord) -> None:  # pragma: no cover - override
        raise NotImplementedError


class TerminationCondition:
    def met(self, contact: ContactRecord) -> bool:  # pragma: no cover - override
        raise NotImplementedError


def _log(name: str, status: str, tick: int, extra: Optional[Dict[str, Any]] = None) -> None:
    payload = {"goal": name, "status": status, "tick": tick}
    if extra:
        payload.update(extra)
    logger.info("goal", extra={"goal": payload})


async def run_goal(
    name: str,
    interval: float,
    contact: ContactRecord,
    action: Action,
    condition: TerminationCondition,
    *,
    sleep: Sleep = asyncio.sleep,
) -> int:
    """Drive ``action`` over ``contact`` until ``condition`` is met.

    The condition is checked before every tick; action failures are logged and
    the loop carries on after the normal interval. Returns the number of
    action invocations made.
    """
    tick = 0
    while True:
        if condition.met(contact):
            _log(name, "completed", tick, {"follow_ups": contact.follow_up_count})
            logger.info("%s completed", name)
            return tick
        tick += 1
        try:
            await action.run(contact)
        except Exception as exc:
            _log(name, "error", tick, {"error": str(exc)})
            monitoring.capture_exception(exc)
        else:
            _log(name, "ran", tick, {"contact_status": contact.status.value})
        await sleep(interval)
