from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.schemas.orders_schemas import OrderRead
from app.schemas.payment_schemas import PaymentRequest, PaymentResponse
from app.services import payment_service

router = APIRouter()


def _response(order) -> PaymentResponse:
    return PaymentResponse(
        order=OrderRead.model_validate(order),
        tender_discrepancy=payment_service.tender_discrepancy(order),
    )


@router.post("/{order_id}", response_model=PaymentResponse)
def settle_order(order_id: str, payload: PaymentRequest, session: Session = Depends(get_session)):
    order = payment_service.process_payment(
        session=session,
        order_id=order_id,
        cash_amount=payload.cash_amount,
        online_amount=payload.online_amount,
    )
    return _response(order)


@router.put("/{order_id}", response_model=PaymentResponse)
def correct_payment(order_id: str, payload: PaymentRequest, session: Session = Depends(get_session)):
    order = payment_service.edit_payment(
        session=session,
        order_id=order_id,
        cash_amount=payload.cash_amount,
        online_amount=payload.online_amount,
    )
    return _response(order)
