"""Service wiring.

Builds the service graph from repositories so the application lifespan and
the test suite assemble it the same way.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from src.comments.repository import CommentRepository
from src.comments.service import CommentService
from src.config import Settings
from src.content.repository import ContentItemRepository
from src.content.service import ContentItemService
from src.core.database.sequences import IdAllocator
from src.core.rate_limit import RateLimiter
from src.listing.service import ListingService
from src.moderation.service import ModerationService
from src.recommendations.repository import RecommendationRepository
from src.recommendations.service import RecommendationService
from src.reports.repository import ReportRepository
from src.reports.service import ReportService


if TYPE_CHECKING:
    from fastapi import FastAPI
    from redis.asyncio import Redis


COMMENT_WINDOW_SECONDS = 60
REPORT_WINDOW_SECONDS = 3600


@dataclass
class Repositories:
    """Persistence objects the services are built on."""

    content: Any
    comments: Any
    recommendations: Any
    reports: Any
    ids: Any


@dataclass
class Services:
    """Application services container."""

    content_service: ContentItemService
    comment_service: CommentService
    recommendation_service: RecommendationService
    report_service: ReportService
    moderation_service: ModerationService
    listing_service: ListingService

    def install(self, app: "FastAPI") -> None:
        """Expose every service on ``app.state`` for request dependencies."""
        for name, service in vars(self).items():
            setattr(app.state, name, service)


def build_services(
    repositories: Repositories,
    settings: Settings,
    redis: "Redis | None" = None,
) -> Services:
    """Assemble the service graph."""
    content_service = ContentItemService(repositories.content, repositories.ids)

    comment_service = CommentService(
        repositories.comments,
        repositories.ids,
        content_service,
        rate_limiter=RateLimiter(
            redis,
            scope="comments",
            limit=settings.comment_rate_limit_per_minute,
            window_seconds=COMMENT_WINDOW_SECONDS,
            message="Too many comments, please wait a minute",
        ),
    )
    recommendation_service = RecommendationService(
        repositories.recommendations, content_service
    )
    moderation_service = ModerationService(content_service, comment_service)
    report_service = ReportService(
        repositories.reports,
        repositories.ids,
        content_service,
        comment_service,
        executor=moderation_service,
        rate_limiter=RateLimiter(
            redis,
            scope="reports",
            limit=settings.report_rate_limit_per_hour,
            window_seconds=REPORT_WINDOW_SECONDS,
            message="Too many reports, please try again later",
        ),
    )
    listing_service = ListingService(
        content_service,
        comment_service,
        recommendation_service,
        report_service,
        max_page_size=settings.listing_max_page_size,
    )

    # Hard delete removes dependent rows; reports are retained
    content_service.register_purge_hook(comment_service.purge_for_item)
    content_service.register_purge_hook(recommendation_service.purge_for_item)

    return Services(
        content_service=content_service,
        comment_service=comment_service,
        recommendation_service=recommendation_service,
        report_service=report_service,
        moderation_service=moderation_service,
        listing_service=listing_service,
    )


def cassandra_repositories(session: Any, settings: Settings) -> Repositories:
    """Repositories backed by a connected Cassandra session."""
    keyspace = settings.cassandra_keyspace
    return Repositories(
        content=ContentItemRepository(session, keyspace),
        comments=CommentRepository(session, keyspace),
        recommendations=RecommendationRepository(session, keyspace),
        reports=ReportRepository(session, keyspace),
        ids=IdAllocator(session, keyspace, max_attempts=settings.id_allocation_max_attempts),
    )
