"""FastAPI control surface: submit follow-up goals and list what is registered."""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request, Response
from openai import OpenAI

from goal_agent import monitoring
from goal_agent.agents.classifier import OpenAIClassifier
from goal_agent.agents.followups import OpenAINudgeComposer
from goal_agent.collaborators import Collaborators
from goal_agent.config import Settings
from goal_agent.goals import GoalSupervisor
from goal_agent.integrations.gmail import GmailReplySource, GmailSender
from goal_agent.integrations.google_auth import GoogleCredentials
from goal_agent.integrations.google_calendar import CalendarMeetingScheduler
from goal_agent.schemas import GoalIn

logger = logging.getLogger("goal_agent.api")


def build_collaborators(settings: Settings) -> Collaborators:
    credentials = GoogleCredentials(settings.google_client_secrets_file, settings.google_token_file)
    client = OpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None
    if client is None:
        logger.info("OPENAI_API_KEY not set; using heuristic classifier and template nudges")
    return Collaborators(
        replies=GmailReplySource(credentials),
        sender=GmailSender(credentials, subject=settings.follow_up_subject),
        classifier=OpenAIClassifier(client, model=settings.openai_model),
        meetings=CalendarMeetingScheduler(credentials),
        composer=OpenAINudgeComposer(client, model=settings.openai_model, signature=settings.sender_signature),
        reply_fetch_limit=settings.reply_fetch_limit,
    )


def create_app(supervisor: Optional[GoalSupervisor] = None, settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(title="Goal Agent API")
    app.state.supervisor = supervisor

    @app.on_event("startup")
    async def on_startup():
        if app.state.supervisor is None:
            app_settings = settings or Settings.from_env()
            app.state.supervisor = GoalSupervisor(build_collaborators(app_settings))
        logger.info("Goal types available: %s", ", ".join(app.state.supervisor.goal_types.names()))

    @app.on_event("shutdown")
    async def on_shutdown():
        if app.state.supervisor is not None:
            await app.state.supervisor.shutdown()

    @app.get("/healthz")
    async def health_check():
        return {"status": "ok"}

    @app.post("/goal")
    async def post_goal(payload: GoalIn, request: Request):
        """Register a goal and start it in the background.

        Always answers 200 with an empty body, including for goal names that
        have no registered type.
        """
        await request.app.state.supervisor.submit(payload)
        return Response(status_code=200)

    @app.get("/status", response_model=List[str])
    async def get_status(request: Request):
        return await request.app.state.supervisor.list()

    return app


settings = Settings.from_env()
monitoring.init_monitoring(settings)
app = create_app(settings=settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
