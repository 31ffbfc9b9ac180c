from sqlmodel import col
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.domain.enums import SupplyRequestStatus
from stockroom.domain.models.supply_request import SupplyRequest
from stockroom.domain.repositories.base_repository import BaseRepository


class SupplyRequestRepository(BaseRepository[SupplyRequest]):
    """
    Repository for managing supply requests in the system.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(SupplyRequest, session)

    async def list_requests(
        self,
        status: SupplyRequestStatus | None = None,
        track_id: str | None = None,
    ) -> list[SupplyRequest]:
        """List requests, newest first, optionally filtered by status and location."""
        return await self.find_all_by(
            order_by=[col(SupplyRequest.created_datetime).desc()],
            fresh=True,
            status=status,
            track_id=track_id,
        )
