# ============================================================================
# aetherchat/api/v1/customer_products.py
# Session packages and customer usage
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from aetherchat.api.dependencies import get_notifier, http_error
from aetherchat.config.database import get_db
from aetherchat.core.exceptions import AetherChatError
from aetherchat.schemas.customer_product import AssignProductRequest, UpdateCustomerProductRequest
from aetherchat.services.notification.notifier import Notifier
from aetherchat.services.session.customer_product_service import CustomerProductService
from aetherchat.services.session.session_usage_service import SessionUsageService

router = APIRouter(tags=["customer-products"])


@router.get("/customer-products")
async def list_customer_products(
        customer_id: Optional[UUID] = Query(None),
        active_only: bool = Query(False),
        db: Session = Depends(get_db)
):
    customer_products = CustomerProductService.list_customer_products(db, customer_id, active_only)
    return [cp.to_dict() for cp in customer_products]


@router.post("/customer-products", status_code=status.HTTP_201_CREATED)
async def assign_product(
        request: AssignProductRequest,
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    try:
        customer_product = CustomerProductService.assign_product(
            db=db,
            customer_id=request.customer_id,
            product_id=request.product_id,
            staff_id=request.staff_id,
            total_sessions=request.total_sessions,
            expiry_days=request.expiry_days,
            notes=request.notes,
            notifier=notifier,
        )
    except AetherChatError as e:
        raise http_error(e)
    return customer_product.to_dict()


@router.patch("/customer-products/{customer_product_id}")
async def update_customer_product(
        request: UpdateCustomerProductRequest,
        customer_product_id: UUID = Path(...),
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    try:
        customer_product = CustomerProductService.update_customer_product(
            db, customer_product_id, request.model_dump(exclude_unset=True), notifier
        )
    except AetherChatError as e:
        raise http_error(e)
    return customer_product.to_dict()


@router.delete("/customer-products/{customer_product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer_product(
        customer_product_id: UUID = Path(...),
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    try:
        CustomerProductService.delete_customer_product(db, customer_product_id, notifier)
    except AetherChatError as e:
        raise http_error(e)


@router.get("/customer-service-usage")
async def get_customer_service_usage(
        customer_id: UUID = Query(...),
        db: Session = Depends(get_db)
):
    try:
        return SessionUsageService.get_customer_service_usage(db, customer_id)
    except AetherChatError as e:
        raise http_error(e)
