from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from app.database import get_session
from app.schemas.orders_schemas import ItemAdd, ItemUpdate, OrderItemRead
from app.services import ledger_service
from app.services.order_service import get_order_by_id

router = APIRouter()


@router.get("/{order_id}/items", response_model=List[OrderItemRead])
def list_items(order_id: str, session: Session = Depends(get_session)):
    if not get_order_by_id(session, order_id):
        raise HTTPException(404, "Order not found")
    return [OrderItemRead.model_validate(i) for i in ledger_service.get_order_items(session, order_id)]


@router.post("/{order_id}/items", response_model=OrderItemRead, status_code=status.HTTP_201_CREATED)
def add_item(order_id: str, payload: ItemAdd, session: Session = Depends(get_session)):
    item = ledger_service.add_item(
        session=session,
        order_id=order_id,
        item_name=payload.item_name,
        category_name=payload.category_name,
        unit_price=payload.unit_price,
    )
    return OrderItemRead.model_validate(item)


@router.put("/{order_id}/items/{item_id}", response_model=OrderItemRead)
def correct_item(order_id: str, item_id: int, payload: ItemUpdate, session: Session = Depends(get_session)):
    item = ledger_service.update_line_item(
        session=session,
        order_id=order_id,
        item_id=item_id,
        quantity=payload.quantity,
        rate=payload.rate,
    )
    return OrderItemRead.model_validate(item)


@router.post("/{order_id}/items/{item_id}/decrement")
def decrement_item(order_id: str, item_id: int, session: Session = Depends(get_session)):
    remaining = ledger_service.decrement_item(session=session, order_id=order_id, item_id=item_id)
    return {
        "item": OrderItemRead.model_validate(remaining) if remaining else None,
        "removed": remaining is None,
    }


@router.delete("/{order_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_item(order_id: str, item_id: int, session: Session = Depends(get_session)):
    ledger_service.remove_item(session=session, order_id=order_id, item_id=item_id)
