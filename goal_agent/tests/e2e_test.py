import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from goal_agent.agents.email_followup import FollowUpAction, InviteAccepted
from goal_agent.agents.registry import GoalType, GoalTypeRegistry
from goal_agent.collaborators import Category
from goal_agent.contact import Status
from goal_agent.goals import GoalSupervisor
from goal_agent.main import create_app
from goal_agent.schemas import GoalIn

pytestmark = pytest.mark.asyncio

GOAL = {
    "name": "email_followup",
    "interval": 1,
    "prospect": {"name": "Ada", "email": "ada@example.com", "company": "Analytical", "role": "CTO"},
}


class SteppedSleep:
    """Advances the fake clock by the interval and parks the goal after ``limit`` ticks."""

    def __init__(self, clock, limit):
        self.clock = clock
        self.limit = limit
        self.ticks = 0
        self.parked = asyncio.Event()

    async def __call__(self, seconds):
        self.ticks += 1
        self.clock.advance(seconds=seconds)
        if self.ticks >= self.limit:
            self.parked.set()
            await asyncio.Event().wait()
        await asyncio.sleep(0)


@pytest_asyncio.fixture
async def app_context(collaborators, clock):
    goal_types = GoalTypeRegistry()
    goal_types.register(
        GoalType("email_followup", lambda c: FollowUpAction(c, clock=clock), InviteAccepted)
    )
    sleeper = SteppedSleep(clock, limit=2)
    supervisor = GoalSupervisor(collaborators, goal_types=goal_types, sleep=sleeper)
    app = create_app(supervisor=supervisor)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client, supervisor, sleeper

    await supervisor.shutdown()


async def test_healthz(app_context):
    client, _, _ = app_context
    response = await client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_backoff_across_two_ticks(app_context, collaborators):
    client, supervisor, sleeper = app_context

    response = await client.post("/goal", json=GOAL)
    assert response.status_code == 200
    assert response.content == b""

    await asyncio.wait_for(sleeper.parked.wait(), timeout=2)

    contact = supervisor.goals[0].contact
    assert contact.status == Status.WAITING
    assert contact.follow_up_count == 1
    assert len(collaborators.sender.sent) == 1
    assert len(collaborators.replies.calls) == 2
    # the nudge was stamped on the first tick, one interval before the second harvest
    assert collaborators.replies.calls[1][1] == contact.last_stamp
    assert sleeper.clock.now - contact.last_stamp == timedelta(seconds=2)


async def test_goal_completes_once_reply_is_accepted(app_context, collaborators):
    client, supervisor, sleeper = app_context
    collaborators.classifier.answers["let's do it"] = Category.ACCEPTED
    collaborators.replies.queue("let's do it")
    collaborators.meetings.fail = True

    goal = await supervisor.submit(GoalIn(**GOAL))
    await asyncio.wait_for(goal.task, timeout=2)

    assert goal.task.result() == 1
    assert goal.contact.status == Status.INVITE_ACCEPTED
    assert collaborators.sender.sent == []
    assert supervisor.running == 0
    assert supervisor.goals == []


async def test_status_lists_goals_in_submission_order(app_context):
    client, supervisor, _ = app_context

    for name in ["email_followup", "cold_call", "email_followup"]:
        response = await client.post("/goal", json=dict(GOAL, name=name))
        assert response.status_code == 200

    response = await client.get("/status")
    assert response.json() == ["email_followup", "cold_call", "email_followup"]
    assert supervisor.running == 2


async def test_unknown_goal_is_accepted_without_scheduling(app_context):
    client, supervisor, _ = app_context

    response = await client.post("/goal", json=dict(GOAL, name="cold_call"))

    assert response.status_code == 200
    assert supervisor.goals == []
    assert (await client.get("/status")).json() == ["cold_call"]


async def test_missing_prospect_fields_are_rejected(app_context):
    client, _, _ = app_context

    response = await client.post("/goal", json={"name": "email_followup", "interval": 1})

    assert response.status_code == 422
    assert (await client.get("/status")).json() == []


async def test_finished_goals_are_released(app_context, collaborators):
    _, supervisor, sleeper = app_context
    sleeper.limit = 100
    collaborators.classifier.answers["yes"] = Category.ACCEPTED
    goals = []
    for _ in range(3):
        collaborators.replies.queue("yes")
        goals.append(await supervisor.submit(GoalIn(**GOAL)))

    await asyncio.wait_for(asyncio.gather(*(goal.task for goal in goals)), timeout=2)

    assert supervisor.running == 0
    assert supervisor.goals == []
    assert await supervisor.list() == ["email_followup"] * 3
