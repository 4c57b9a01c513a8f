"""am_inventory REST endpoints.

GET /products/{product_id}    — current price and stock of a product
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import Principal, get_current_principal
from src.am_inventory.application.service import ProductQueryService

router = APIRouter(prefix="/products", tags=["products"])

_service = ProductQueryService()


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_product(db, product_id)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
