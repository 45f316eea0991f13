"""Recommendation service layer.

A recommendation is a per-user toggle on an item. Counts are always derived
from the stored rows, never kept as a separate counter.
"""

from typing import TYPE_CHECKING

import structlog

from src.auth.permissions import Principal
from src.content.models import ItemSpace
from src.core.errors import AuthenticationRequiredError

from .models import ToggleResult, create_recommendation


if TYPE_CHECKING:
    from src.content.service import ContentItemService

    from .repository import RecommendationRepository


logger = structlog.get_logger(__name__)


class RecommendationService:
    """Service for recommendation toggles."""

    def __init__(
        self,
        repository: "RecommendationRepository",
        content_service: "ContentItemService",
    ):
        self.repository = repository
        self.content_service = content_service

    async def toggle(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ToggleResult:
        """Recommend the item if not yet recommended, withdraw otherwise.

        A concurrent request that already made the same change is treated as
        success; the returned state is read back from the store.

        Raises:
            AuthenticationRequiredError: Without a principal
            NotFoundError: If the item is unknown or not visible
        """
        if principal is None:
            raise AuthenticationRequiredError

        await self.content_service.get_visible(space, item_id, principal)

        user_id = principal.user_id
        if await self.repository.exists(space, item_id, user_id):
            applied = await self.repository.delete_if_present(space, item_id, user_id)
            recommended = False
        else:
            applied = await self.repository.insert_if_absent(
                create_recommendation(space, item_id, user_id)
            )
            recommended = True

        if not applied:
            logger.debug(
                "recommendation_toggle_race_lost",
                space=space.value,
                item_id=item_id,
                user_id=user_id,
            )

        count = await self.repository.count(space, item_id)
        logger.info(
            "recommendation_toggled",
            space=space.value,
            item_id=item_id,
            user_id=user_id,
            recommended=recommended,
        )
        return ToggleResult(recommended=recommended, recommend_count=count)

    async def is_recommended(
        self, space: ItemSpace, item_id: int, user_id: int | None
    ) -> bool:
        if user_id is None:
            return False
        return await self.repository.exists(space, item_id, user_id)

    async def count(self, space: ItemSpace, item_id: int) -> int:
        return await self.repository.count(space, item_id)

    async def status(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ToggleResult:
        """Current state for the caller on a visible item."""
        await self.content_service.get_visible(space, item_id, principal)
        user_id = principal.user_id if principal else None
        return ToggleResult(
            recommended=await self.is_recommended(space, item_id, user_id),
            recommend_count=await self.count(space, item_id),
        )

    async def purge_for_item(self, space: ItemSpace, item_id: int) -> None:
        """Remove all recommendations of a hard-deleted item."""
        await self.repository.delete_for_item(space, item_id)
