"""Summary: Application factory wiring core services.

Importance: Centralizes dependency creation for CLI and API layers.
Alternatives: Instantiate services manually in each entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from timesherpa.ai import AiProvider, AiProviderFactory
from timesherpa.analyzer import CalendarAnalyzer
from timesherpa.calendar import CalendarClientFactory, CalendarWriter
from timesherpa.config import AppConfig
from timesherpa.scheduling import SuggestionScheduler
from timesherpa.services import (
    AnalysisService,
    ProviderFactory,
    SuggestionService,
    UpcomingService,
    WeekOverWeekService,
)
from timesherpa.workweek import StaticWorkweekSource, WorkweekSource, parse_workweek


@dataclass(frozen=True)
class AppContext:
    """Summary: Shared application context for building services.

    Importance: Reuses the AI provider, timezone, and calendar factory across requests.
    Alternatives: Rebuild dependencies for every request.
    """

    config: AppConfig
    ai_provider: AiProvider
    model_name: str
    tz: ZoneInfo
    calendars: CalendarClientFactory
    workweeks: WorkweekSource


@dataclass(frozen=True)
class AppServices:
    """Summary: Bundle of core services for TimeSherpa.

    Importance: Simplifies passing dependencies to UI or API layers.
    Alternatives: Use a dependency injection container.
    """

    analysis: AnalysisService
    upcoming: UpcomingService
    week_over_week: WeekOverWeekService
    suggestions: SuggestionService
    context: AppContext


def build_context(config: AppConfig) -> AppContext:
    """Summary: Build shared context from configuration.

    Importance: Resolves the timezone and default workweek once at startup.
    Alternatives: Construct dependencies separately per request.
    """

    factory = AiProviderFactory(config)
    return AppContext(
        config=config,
        ai_provider=factory.build(),
        model_name=factory.model_name,
        tz=ZoneInfo(config.timezone),
        calendars=CalendarClientFactory(config),
        workweeks=StaticWorkweekSource(default=parse_workweek(config.default_workweek)),
    )


def build_services(
    config: AppConfig,
    providers: ProviderFactory | None = None,
    writer: CalendarWriter | None = None,
    ai_provider: AiProvider | None = None,
) -> AppServices:
    """Summary: Build core services from configuration.

    Importance: Lets entrypoints and tests swap the event source, writer, or model.
    Alternatives: Instantiate services directly within the CLI entrypoint.
    """

    context = build_context(config)
    analyzer = CalendarAnalyzer(
        ai_provider=ai_provider or context.ai_provider,
        model_name=context.model_name if ai_provider is None else "custom",
        tz=context.tz,
    )
    read = providers or context.calendars.provider
    write = (lambda _token: writer) if writer is not None else context.calendars.calendar_writer
    scheduler = SuggestionScheduler(
        writer_factory=write, tz=context.tz, timezone_name=config.timezone
    )
    return AppServices(
        analysis=AnalysisService(
            providers=read,
            analyzer=analyzer,
            workweeks=context.workweeks,
            lookback_days=config.analysis_lookback_days,
            tz=context.tz,
        ),
        upcoming=UpcomingService(providers=read, analyzer=analyzer),
        week_over_week=WeekOverWeekService(providers=read, tz=context.tz),
        suggestions=SuggestionService(scheduler=scheduler),
        context=context,
    )
