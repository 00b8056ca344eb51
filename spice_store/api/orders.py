from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from spice_store.api.deps import (
    get_admin_user,
    get_current_user,
    get_dispatcher,
    get_optional_user,
    get_promo_validator,
    get_store,
)
from spice_store.models.schemas import (
    GuestOrderLookup,
    OrderCreated,
    OrderIntent,
    OrderList,
    OrderRecord,
    OrderStatus,
    OrderSummary,
    StatusUpdate,
)
from spice_store.services import orders_service

router = APIRouter()


@router.post("", response_model=OrderCreated)
def create_order(
    intent: OrderIntent,
    background_tasks: BackgroundTasks,
    user=Depends(get_optional_user),
    store=Depends(get_store),
    promo=Depends(get_promo_validator),
    dispatcher=Depends(get_dispatcher),
):
    order = orders_service.create_order(store, intent, promo, user_id=user["id"] if user else None)
    background_tasks.add_task(dispatcher.dispatch_order, order)
    return {"success": True, "order": order}


@router.post("/lookup", response_model=OrderList)
def lookup_orders(payload: GuestOrderLookup, store=Depends(get_store)):
    orders = orders_service.find_guest_orders(
        store, str(payload.email), payload.pincode, payload.start, payload.limit
    )
    return {"orders": orders}


@router.get("/my", response_model=OrderList)
def my_orders(
    start: int = Query(0, ge=0),
    limit: int = Query(orders_service.DEFAULT_PAGE_SIZE, ge=1),
    user=Depends(get_current_user),
    store=Depends(get_store),
):
    orders = orders_service.list_user_orders(store, user["id"], user.get("email"), start, limit)
    return {"orders": orders}


@router.get("/summary", response_model=OrderSummary)
def summary(admin=Depends(get_admin_user), store=Depends(get_store)):
    return orders_service.order_summary(store)


@router.get("", response_model=OrderList)
def all_orders(
    status: Optional[OrderStatus] = None,
    start: int = Query(0, ge=0),
    limit: int = Query(orders_service.DEFAULT_PAGE_SIZE, ge=1),
    admin=Depends(get_admin_user),
    store=Depends(get_store),
):
    return {"orders": orders_service.list_orders(store, status, start, limit)}


@router.patch("/{order_id}/status", response_model=OrderRecord)
def set_status(order_id: str, payload: StatusUpdate, admin=Depends(get_admin_user), store=Depends(get_store)):
    return orders_service.update_status(store, order_id, payload.status)
