import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from goal_agent.agents.registry import GoalTypeRegistry, goal_types as default_goal_types
from goal_agent.collaborators import Collaborators
from goal_agent.contact import ContactRecord, Status
from goal_agent.engine import Sleep, run_goal
from goal_agent.schemas import GoalIn

logger = logging.getLogger("goal_agent.goals")


class GoalRegistry:
    """Append-only list of submitted goal names, safe to share between tasks."""

    def __init__(self):
        self._names: List[str] = []
        self._lock = asyncio.Lock()

    async def register(self, name: str) -> None:
        async with self._lock:
            self._names.append(name)

    async def snapshot(self) -> List[str]:
        async with self._lock:
            return list(self._names)


@dataclass(eq=False)
class Goal:
    name: str
    interval: int
    contact: ContactRecord
    task: asyncio.Task


class GoalSupervisor:
    """Accepts goal submissions and runs each one as its own asyncio task."""

    def __init__(
        self,
        collaborators: Collaborators,
        *,
        registry: Optional[GoalRegistry] = None,
        goal_types: Optional[GoalTypeRegistry] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.collaborators = collaborators
        self.registry = registry or GoalRegistry()
        self.goal_types = goal_types or default_goal_types
        self.sleep = sleep or asyncio.sleep
        self.goals: List[Goal] = []
        self._tasks: Set[asyncio.Task] = set()

    async def submit(self, payload: GoalIn) -> Optional[Goal]:
        """Register a goal and start it if its type is known.

        Unknown goal types are still registered and reported as accepted; they
        simply never get scheduled.
        """
        await self.registry.register(payload.name)

        goal_type = self.goal_types.get(payload.name)
        if goal_type is None:
            logger.warning("unknown goal %s", payload.name)
            return None

        contact = ContactRecord(
            name=payload.prospect.name,
            email=payload.prospect.email,
            company=payload.prospect.company,
            role=payload.prospect.role,
            status=Status.WAITING,
        )
        task = asyncio.create_task(
            run_goal(
                payload.name,
                payload.interval,
                contact,
                goal_type.action_factory(self.collaborators),
                goal_type.condition_factory(),
                sleep=self.sleep,
            ),
            name=f"goal:{payload.name}",
        )
        goal = Goal(name=payload.name, interval=payload.interval, contact=contact, task=task)
        self.goals.append(goal)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda _: self._forget(goal))
        logger.info("Started goal %s for %s", payload.name, contact.email)
        return goal

    def _forget(self, goal: Goal) -> None:
        if goal in self.goals:
            self.goals.remove(goal)

    async def list(self) -> List[str]:
        return await self.registry.snapshot()

    @property
    def running(self) -> int:
        return len(self._tasks)

    async def shutdown(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
