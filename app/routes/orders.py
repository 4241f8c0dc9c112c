from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session

from app.database import get_session
from app.schemas.orders_schemas import (
    MoveRequest,
    MoveResponse,
    OrderCreate,
    OrderDetail,
    OrderItemRead,
    OrderRead,
    StatusUpdate,
    WalkInCreate,
)
from app.services import order_service
from app.services.ledger_service import get_order_items
from app.services.table_service import move_or_merge

router = APIRouter()


def _detail(session: Session, order) -> OrderDetail:
    return OrderDetail(
        **OrderRead.model_validate(order).model_dump(),
        items=[OrderItemRead.model_validate(i) for i in get_order_items(session, order.id)],
    )


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def open_order(payload: OrderCreate, response: Response, session: Session = Depends(get_session)):
    existing = order_service.get_order_by_table(session, payload.table_number)
    order = order_service.create_order(
        session=session,
        table_number=payload.table_number,
        customer_name=payload.customer_name,
    )
    if existing is not None and existing.id == order.id:
        # table was already open; nothing created
        response.status_code = status.HTTP_200_OK
    return OrderRead.model_validate(order)


@router.post("/walk-in", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def open_walk_in(payload: WalkInCreate, session: Session = Depends(get_session)):
    order = order_service.open_walk_in(session=session, customer_name=payload.customer_name)
    return OrderRead.model_validate(order)


@router.get("", response_model=List[OrderDetail])
def list_active_orders(session: Session = Depends(get_session)):
    return [_detail(session, o) for o in order_service.list_active_orders(session)]


@router.get("/by-table/{table_number}", response_model=OrderDetail)
def order_for_table(table_number: str, session: Session = Depends(get_session)):
    order = order_service.get_order_by_table(session, table_number)
    if not order:
        raise HTTPException(404, f"No open order on table {table_number}")
    return _detail(session, order)


@router.get("/{order_id}", response_model=OrderDetail)
def order_details(order_id: str, session: Session = Depends(get_session)):
    order = order_service.get_order_by_id(session, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    return _detail(session, order)


@router.patch("/{order_id}/status", response_model=OrderRead)
def change_status(order_id: str, payload: StatusUpdate, session: Session = Depends(get_session)):
    order = order_service.update_status(session=session, order_id=order_id, status=payload.status)
    return OrderRead.model_validate(order)


@router.post("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(order_id: str, session: Session = Depends(get_session)):
    order = order_service.cancel_order(session=session, order_id=order_id)
    return OrderRead.model_validate(order)


@router.post("/{order_id}/move", response_model=MoveResponse)
def move_order(order_id: str, payload: MoveRequest, session: Session = Depends(get_session)):
    result = move_or_merge(session=session, order_id=order_id, new_table_number=payload.table_number)
    return MoveResponse(merged=result.merged, order_id=result.order_id)


@router.post("/{order_id}/discard")
def discard_order(order_id: str, session: Session = Depends(get_session)):
    deleted = order_service.discard_if_empty(session=session, order_id=order_id)
    return {"order_id": order_id, "deleted": deleted}


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: str, session: Session = Depends(get_session)):
    order_service.delete_order(session=session, order_id=order_id)
