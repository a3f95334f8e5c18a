"""Summary: FastAPI application for TimeSherpa.

Importance: Exposes calendar analysis and scheduling over HTTP for UI clients.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from timesherpa.app import AppServices, build_services
from timesherpa.config import AppConfig
from timesherpa.models import ActionableSuggestion, ScheduleResult, TimeSlot


logger = logging.getLogger(__name__)


class TimeSlotPayload(BaseModel):
    """Summary: Request payload for a chosen time slot.

    Importance: Mirrors the slot shape returned inside each analysis.
    Alternatives: Accept a single ISO start and end instead.
    """

    startTime: str
    endTime: str
    date: str
    reasoning: str = ""


class SuggestionPayload(BaseModel):
    """Summary: Request payload for an actionable suggestion.

    Importance: Lets clients post back a suggestion exactly as the analysis returned it.
    Alternatives: Post only the suggestion id and look it up server-side.
    """

    id: str
    text: str
    type: str
    actionable: bool = True
    actionLabel: str | None = None
    actionDescription: str | None = None


class ScheduleSuggestionRequest(BaseModel):
    """Summary: Request payload for scheduling a suggestion.

    Importance: Pairs the suggestion with the slot the user accepted.
    Alternatives: Schedule the first suggested slot automatically.
    """

    suggestion: SuggestionPayload
    timeSlot: TimeSlotPayload


class ClassifyRequest(BaseModel):
    """Summary: Request payload for suggestion classification.

    Importance: Lets clients classify free-text ideas outside an analysis.
    Alternatives: Classify only suggestions produced by the analysis.
    """

    text: str = Field(min_length=1)


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def create_app(config: AppConfig, services: AppServices | None = None) -> FastAPI:
    """Summary: Create a FastAPI app wired to TimeSherpa services.

    Importance: Ensures the API layer shares the same configuration and providers.
    Alternatives: Instantiate services globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = FastAPI(title="TimeSherpa API", version="0.1.0")
    services = services or build_services(config)

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal security layer for local and private deployments.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    def calendar_token(authorization: str | None = Header(default=None)) -> str | None:
        """Summary: Extract the calendar access token from the Authorization header.

        Importance: The token is passed through to the calendar provider and never stored.
        Alternatives: Keep provider tokens in a server-side session.
        """

        return _bearer_token(authorization)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Summary: Health check endpoint.

        Importance: Supports uptime checks in local and cloud deployments.
        Alternatives: Use a metrics endpoint only.
        """

        return {"status": "ok"}

    @app.get("/calendar/analysis", dependencies=[Depends(require_api_key)])
    def calendar_analysis(
        user_id: str | None = None, token: str | None = Depends(calendar_token)
    ) -> dict[str, Any]:
        """Summary: Analyze the last month of calendar events.

        Importance: Main dashboard payload with categories, insights, and actionable suggestions.
        Alternatives: Split categories and suggestions into separate endpoints.
        """

        return services.analysis.analyze(access_token=token, user_id=user_id).to_dict()

    @app.get("/calendar/upcoming", dependencies=[Depends(require_api_key)])
    def calendar_upcoming(token: str | None = Depends(calendar_token)) -> Any:
        """Summary: Recommend changes to the next seven days.

        Importance: Forward-looking view of the schedule.
        Alternatives: Only analyze past events.
        """

        try:
            return services.upcoming.upcoming(access_token=token).to_dict()
        except Exception as exc:
            logger.exception("Upcoming events analysis failed.")
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to analyze upcoming events", "details": str(exc)},
            )

    @app.get("/calendar/week-over-week", dependencies=[Depends(require_api_key)])
    def calendar_week_over_week(token: str | None = Depends(calendar_token)) -> Any:
        """Summary: Compare the last four weeks of calendar usage.

        Importance: Surfaces trends in meeting load and focus time.
        Alternatives: Let clients call the analysis endpoint once per week.
        """

        try:
            return services.week_over_week.compare(access_token=token).to_dict()
        except Exception as exc:
            logger.exception("Week-over-week analysis failed.")
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to analyze week-over-week data", "details": str(exc)},
            )

    @app.post("/calendar/schedule-suggestion", dependencies=[Depends(require_api_key)])
    def schedule_suggestion(
        payload: ScheduleSuggestionRequest, token: str | None = Depends(calendar_token)
    ) -> Any:
        """Summary: Create a calendar event for an accepted suggestion.

        Importance: Closes the loop from insight to calendar change.
        Alternatives: Return event details for the client to create.
        """

        try:
            suggestion = ActionableSuggestion.from_dict(
                {
                    "id": payload.suggestion.id,
                    "text": payload.suggestion.text,
                    "type": payload.suggestion.type,
                    "actionable": payload.suggestion.actionable,
                    "actionLabel": payload.suggestion.actionLabel,
                    "actionDescription": payload.suggestion.actionDescription,
                }
            )
        except ValueError as exc:
            return JSONResponse(
                status_code=400, content=ScheduleResult(success=False, error=str(exc)).to_dict()
            )
        slot = TimeSlot(
            start_time=payload.timeSlot.startTime,
            end_time=payload.timeSlot.endTime,
            date=payload.timeSlot.date,
            reasoning=payload.timeSlot.reasoning,
        )
        result = services.suggestions.schedule(suggestion, slot, access_token=token)
        if not result.success:
            return JSONResponse(status_code=400, content=result.to_dict())
        return result.to_dict()

    @app.post("/suggestions/classify", dependencies=[Depends(require_api_key)])
    def classify(payload: ClassifyRequest) -> dict[str, Any]:
        """Summary: Classify a suggestion into an actionable intent.

        Importance: Exposes the deterministic classifier to clients.
        Alternatives: Classify suggestions only inside analyses.
        """

        return services.suggestions.classify(payload.text).to_dict()

    return app


app = create_app(AppConfig.from_env())
