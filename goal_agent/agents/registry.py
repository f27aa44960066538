import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from goal_agent.agents.email_followup import FollowUpAction, InviteAccepted
from goal_agent.collaborators import Collaborators
from goal_agent.engine import Action, TerminationCondition

logger = logging.getLogger("goal_agent.registry")


@dataclass(frozen=True)
class GoalType:
    name: str
    action_factory: Callable[[Collaborators], Action]
    condition_factory: Callable[[], TerminationCondition]


class GoalTypeRegistry:
    """Maps a submitted goal name to the action/condition pair that pursues it."""

    def __init__(self):
        self.goal_types: Dict[str, GoalType] = {}

    def register(self, goal_type: GoalType) -> None:
        if goal_type.name in self.goal_types:
            logger.warning("Replacing goal type %s", goal_type.name)
        self.goal_types[goal_type.name] = goal_type

    def get(self, name: str) -> Optional[GoalType]:
        return self.goal_types.get(name)

    def names(self) -> List[str]:
        return sorted(self.goal_types)


def default_goal_types() -> GoalTypeRegistry:
    registry = GoalTypeRegistry()
    registry.register(GoalType("email_followup", FollowUpAction, InviteAccepted))
    return registry


goal_types = default_goal_types()
