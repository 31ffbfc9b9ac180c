from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession
from stockroom.core.constants import CSV_MEDIA_TYPE
from stockroom.core.database.session import get_db_session
from stockroom.core.dependencies import CurrentActor
from stockroom.core.exceptions import errors
from stockroom.core.helpers.response import IResponseBase, build_json_response
from stockroom.core.logging import get_logger
from stockroom.domain.enums import StockSortOrder
from stockroom.domain.schemas import (
    CategoryGroup,
    InventoryItemCreate,
    InventoryItemResponse,
    StockChangeRequest,
    StockMovementResponse,
)
from stockroom.domain.services.inventory_service import InventoryService
from stockroom.domain.services.stock_report_service import StockReportService

logger = get_logger(__name__)


router = APIRouter()


@router.get(
    "/items",
    response_model=IResponseBase[list[InventoryItemResponse]],
    operation_id="list_inventory_items",
)
async def list_items(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    search: Annotated[str | None, Query(description="Substring of name, unit or category")] = None,
    low_only: Annotated[bool, Query(description="Only items at or below their minimum")] = False,
    sort_by: Annotated[StockSortOrder, Query()] = StockSortOrder.MIN_GAP,
    category: Annotated[str | None, Query()] = None,
) -> IResponseBase[list[InventoryItemResponse]]:
    """
    List catalog items for the stock room view.
    """
    try:
        report_service = StockReportService(session)
        items = await report_service.search_items(search=search, low_only=low_only, sort_by=sort_by, category=category)

        return build_json_response(
            data=[InventoryItemResponse.model_validate(item) for item in items],
            message="Items retrieved successfully",
            meta={"count": len(items)},
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.list_items:: Error listing items: {e}")
        raise errors.ServiceError(
            detail="Failed to list items",
        ) from e


@router.get(
    "/categories",
    response_model=IResponseBase[list[CategoryGroup]],
    operation_id="list_inventory_categories",
)
async def list_categories(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    search: Annotated[str | None, Query()] = None,
    low_only: Annotated[bool, Query()] = False,
    sort_by: Annotated[StockSortOrder, Query()] = StockSortOrder.MIN_GAP,
) -> IResponseBase[list[CategoryGroup]]:
    """
    List catalog items grouped by category.
    """
    try:
        report_service = StockReportService(session)
        items = await report_service.search_items(search=search, low_only=low_only, sort_by=sort_by)

        groups = [
            CategoryGroup(
                category=label,
                items=[InventoryItemResponse.model_validate(item) for item in grouped],
            )
            for label, grouped in report_service.group_by_category(items)
        ]

        return build_json_response(data=groups, message="Categories retrieved successfully")
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.list_categories:: Error grouping items: {e}")
        raise errors.ServiceError(
            detail="Failed to list categories",
        ) from e


@router.post(
    "/items",
    response_model=IResponseBase[InventoryItemResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="create_inventory_item",
)
async def create_item(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    item_data: Annotated[InventoryItemCreate, Body(...)],
) -> IResponseBase[InventoryItemResponse]:
    """
    Register a new item in the catalog, optionally with stock already on hand.
    """
    try:
        inventory_service = InventoryService(session)

        item = await inventory_service.create_item(
            name=item_data.name,
            unit=item_data.unit,
            category=item_data.category,
            min_qty=item_data.min_qty,
            max_qty=item_data.max_qty,
            initial_qty=item_data.initial_qty,
            actor=actor,
        )

        return build_json_response(
            data=InventoryItemResponse.model_validate(item),
            message="Item created successfully",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.create_item:: Error creating item: {e}")
        raise errors.ServiceError(
            detail="Failed to create item",
        ) from e


@router.get(
    "/items/{item_id}",
    response_model=IResponseBase[InventoryItemResponse],
    operation_id="get_inventory_item",
)
async def get_item(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    item_id: Annotated[UUID, Path(description="The item id")],
) -> IResponseBase[InventoryItemResponse]:
    try:
        inventory_service = InventoryService(session)
        item = await inventory_service.get_item(item_id)

        return build_json_response(
            data=InventoryItemResponse.model_validate(item),
            message="Item retrieved successfully",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.get_item:: Error getting item {item_id}: {e}")
        raise errors.ServiceError(
            detail="Failed to get item",
        ) from e


@router.post(
    "/items/{item_id}/receive",
    response_model=IResponseBase[InventoryItemResponse],
    operation_id="receive_stock",
)
async def receive_stock(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    item_id: Annotated[UUID, Path(description="The item id")],
    change: Annotated[StockChangeRequest, Body(...)],
) -> IResponseBase[InventoryItemResponse]:
    """
    Add delivered stock to an item.
    """
    try:
        inventory_service = InventoryService(session)
        item = await inventory_service.receive_stock(item_id, change.qty, reason=change.reason, actor=actor)

        return build_json_response(
            data=InventoryItemResponse.model_validate(item),
            message="Stock received successfully",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.inventory.endpoints.receive_stock:: Error receiving stock for {item_id}: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to receive stock",
        ) from e


@router.post(
    "/items/{item_id}/issue",
    response_model=IResponseBase[InventoryItemResponse],
    operation_id="issue_stock",
)
async def issue_stock(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    actor: CurrentActor,
    item_id: Annotated[UUID, Path(description="The item id")],
    change: Annotated[StockChangeRequest, Body(...)],
) -> IResponseBase[InventoryItemResponse]:
    """
    Take stock out of the room outside of the request workflow.
    """
    try:
        inventory_service = InventoryService(session)
        item = await inventory_service.issue_stock(item_id, change.qty, reason=change.reason, actor=actor)

        return build_json_response(
            data=InventoryItemResponse.model_validate(item),
            message="Stock issued successfully",
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.issue_stock:: Error issuing stock for {item_id}: {e}")
        raise errors.ServiceError(
            detail="Failed to issue stock",
        ) from e


@router.get(
    "/items/{item_id}/movements",
    response_model=IResponseBase[list[StockMovementResponse]],
    operation_id="list_stock_movements",
)
async def list_movements(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    item_id: Annotated[UUID, Path(description="The item id")],
) -> IResponseBase[list[StockMovementResponse]]:
    try:
        inventory_service = InventoryService(session)
        movements = await inventory_service.list_movements(item_id)

        return build_json_response(
            data=[StockMovementResponse.model_validate(movement) for movement in movements],
            message="Movements retrieved successfully",
            meta={"count": len(movements)},
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(
            f"stockroom.domain.routers.inventory.endpoints.list_movements:: Error listing movements for {item_id}: {e}"
        )
        raise errors.ServiceError(
            detail="Failed to list movements",
        ) from e


@router.get(
    "/reorder",
    response_model=IResponseBase[list[InventoryItemResponse]],
    operation_id="list_reorder_items",
)
async def reorder_list(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> IResponseBase[list[InventoryItemResponse]]:
    """
    Items whose available stock has fallen below their minimum.
    """
    try:
        report_service = StockReportService(session)
        items = await report_service.reorder_list()

        return build_json_response(
            data=[InventoryItemResponse.model_validate(item) for item in items],
            message="Reorder list retrieved successfully",
            meta={"count": len(items)},
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.reorder_list:: Error building reorder list: {e}")
        raise errors.ServiceError(
            detail="Failed to build reorder list",
        ) from e


@router.get("/export.csv", operation_id="export_inventory_csv")
async def export_items_csv(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    search: Annotated[str | None, Query()] = None,
    low_only: Annotated[bool, Query()] = False,
    sort_by: Annotated[StockSortOrder, Query()] = StockSortOrder.MIN_GAP,
    category: Annotated[str | None, Query()] = None,
) -> Response:
    """
    Export the listing, with the same filters as `GET /items`, as CSV.
    """
    try:
        report_service = StockReportService(session)
        items = await report_service.search_items(search=search, low_only=low_only, sort_by=sort_by, category=category)

        return Response(
            content=report_service.export_items_csv(items),
            media_type=CSV_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="inventory.csv"'},
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.export_items_csv:: Error exporting items: {e}")
        raise errors.ServiceError(
            detail="Failed to export items",
        ) from e


@router.get("/reorder.csv", operation_id="export_reorder_csv")
async def export_reorder_csv(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> Response:
    try:
        report_service = StockReportService(session)

        return Response(
            content=await report_service.export_reorder_csv(),
            media_type=CSV_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="reorder.csv"'},
        )
    except errors.ServiceError as se:
        raise se
    except Exception as e:
        logger.exception(f"stockroom.domain.routers.inventory.endpoints.export_reorder_csv:: Error exporting reorder list: {e}")
        raise errors.ServiceError(
            detail="Failed to export reorder list",
        ) from e
