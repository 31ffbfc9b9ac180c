from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.database.session import get_db_session
from stockroom.core.dependencies import CurrentActor
from stockroom.core.exceptions import errors
from stockroom.core.helpers.response import IResponseBase, build_json_response
from stockroom.core.logging import get_logger
from stockroom.domain.enums import SupplyRequestStatus
from stockroom.domain.schemas import SupplyRequestCreate, SupplyRequestResponse
from stockroom.domain.services.supply_request_service import SupplyRequestService

logger = get_logger(__name__)


router = APIRouter()


@router.get(
    "",
    response_model=IResponseBase[list[SupplyRequestResponse]],
    operation_id="list_supply_requests",
)
async def list_supply_requests(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    request_status: Annotated[SupplyRequestStatus | None, Query(alias="status")] = None,
    track_id: Annotated[str | None, Query()] = None,
) -> IResponseBase[list[SupplyRequestResponse]]:
    """
    List supply requests, newest first.
    """
    try:
        supply_request_service = SupplyRequestService(session)
        requests = await supply_request_service.list_requests(status=request_status, track_id=track_id)

        return build_json_response(
            data=[SupplyRequestResponse.model_validate(request) for request in requests],
            message="Supply requests retrieved successfully",
            meta={"count": len(requests)},
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.supply_request.endpoints.list_supply_requests:: Error listing requests: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to list supply requests",
        ) from e


@router.post(
    "",
    response_model=IResponseBase[SupplyRequestResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="create_supply_request",
)
async def create_supply_request(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    request_data: Annotated[SupplyRequestCreate, Body(...)],
) -> IResponseBase[SupplyRequestResponse]:
    """
    Raise a supply request for a track.

    Lines are resolved against the catalog by id or by name, unknown items and
    non-positive quantities are dropped and repeated items are merged.
    """
    try:
        supply_request_service = SupplyRequestService(session)

        request = await supply_request_service.create_supply_request(
            track_id=request_data.track_id,
            items=list(request_data.items),
            note=request_data.note,
            requested_by=actor,
            photo_url=request_data.photo_url,
        )

        return build_json_response(
            data=SupplyRequestResponse.model_validate(request),
            message="Supply request created successfully",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.supply_request.endpoints.create_supply_request:: Error creating request: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to create supply request",
        ) from e


@router.get(
    "/{request_id}",
    response_model=IResponseBase[SupplyRequestResponse],
    operation_id="get_supply_request",
)
async def get_supply_request(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    request_id: Annotated[UUID, Path(description="The supply request id")],
) -> IResponseBase[SupplyRequestResponse]:
    try:
        supply_request_service = SupplyRequestService(session)
        request = await supply_request_service.get_request(request_id)

        return build_json_response(
            data=SupplyRequestResponse.model_validate(request),
            message="Supply request retrieved successfully",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.supply_request.endpoints.get_supply_request:: Error getting request {request_id}: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to get supply request",
        ) from e


@router.post(
    "/{request_id}/approve",
    response_model=IResponseBase[SupplyRequestResponse],
    operation_id="approve_supply_request",
)
async def approve_supply_request(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    request_id: Annotated[UUID, Path(description="The supply request id")],
) -> IResponseBase[SupplyRequestResponse]:
    """
    Reserve stock for every line of a pending request. Nothing is reserved if any line is short.
    """
    try:
        supply_request_service = SupplyRequestService(session)
        request = await supply_request_service.approve(request_id, actor)

        return build_json_response(
            data=SupplyRequestResponse.model_validate(request),
            message="Supply request approved",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.supply_request.endpoints.approve_supply_request:: Error approving request {request_id}: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to approve supply request",
        ) from e


@router.post(
    "/{request_id}/unapprove",
    response_model=IResponseBase[SupplyRequestResponse],
    operation_id="unapprove_supply_request",
)
async def unapprove_supply_request(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    request_id: Annotated[UUID, Path(description="The supply request id")],
) -> IResponseBase[SupplyRequestResponse]:
    """
    Release the reservation of an approved request and send it back to pending.
    """
    try:
        supply_request_service = SupplyRequestService(session)
        request = await supply_request_service.unapprove(request_id, actor)

        return build_json_response(
            data=SupplyRequestResponse.model_validate(request),
            message="Supply request returned to pending",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.supply_request.endpoints.unapprove_supply_request:: Error releasing request {request_id}: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to unapprove supply request",
        ) from e


@router.post(
    "/{request_id}/dispatch",
    response_model=IResponseBase[SupplyRequestResponse],
    operation_id="dispatch_supply_request",
)
async def dispatch_supply_request(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    request_id: Annotated[UUID, Path(description="The supply request id")],
) -> IResponseBase[SupplyRequestResponse]:
    """
    Hand out the reserved stock of an approved request.
    """
    try:
        supply_request_service = SupplyRequestService(session)
        request = await supply_request_service.dispatch(request_id, actor)

        return build_json_response(
            data=SupplyRequestResponse.model_validate(request),
            message="Supply request dispatched",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.supply_request.endpoints.dispatch_supply_request:: Error dispatching request {request_id}: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to dispatch supply request",
        ) from e


@router.post(
    "/{request_id}/cancel",
    response_model=IResponseBase[SupplyRequestResponse],
    operation_id="cancel_supply_request",
)
async def cancel_supply_request(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    request_id: Annotated[UUID, Path(description="The supply request id")],
) -> IResponseBase[SupplyRequestResponse]:
    try:
        supply_request_service = SupplyRequestService(session)
        request = await supply_request_service.cancel(request_id, actor)

        return build_json_response(
            data=SupplyRequestResponse.model_validate(request),
            message="Supply request cancelled",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.supply_request.endpoints.cancel_supply_request:: Error cancelling request {request_id}: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to cancel supply request",
        ) from e
