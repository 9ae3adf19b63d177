import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from ledger.errors import AccountResolutionFailure, InvalidState, SaleNotFound
from ledger.poster import get_split_poster
from ledger.poster.schemas import PostingResult
from ledger.poster.service import SplitPoster
from ledger.reverser import get_reversal_service
from ledger.reverser.schemas import ReversalResult
from ledger.reverser.service import ReversalService
from schemas import PaymentConfirmed, RefundRequested

router = APIRouter()


@router.post("/confirmed", response_model=PostingResult, summary="Split the proceeds of a paid sale")
async def payment_confirmed(
    event: PaymentConfirmed,
    poster: SplitPoster = Depends(get_split_poster),
):
    """
    Called by the gateway adapters once a payment is confirmed.
    Repeated deliveries for the same sale answer with `already_processed`.
    """
    logging.info(f"Received payment confirmation: sale={event.sale_id} total={event.total_cents}")
    try:
        return await poster.handle_payment_confirmed(event)
    except SaleNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AccountResolutionFailure as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/reversals", response_model=ReversalResult, summary="Reverse a sale on refund or chargeback")
async def refund_requested(
    event: RefundRequested,
    reverser: ReversalService = Depends(get_reversal_service),
):
    """
    Manual refunds and chargeback notices.
    Per-split failures do not abort the call; they come back in `errors`
    with a 502 so that the caller retries the event later.
    """
    logging.info(f"Received {event.kind.value} request: sale={event.sale_id} amount={event.amount_cents}")
    try:
        result = await reverser.handle_refund_requested(event)
    except SaleNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidState as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if not result.ok:
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=result.model_dump(mode="json"))
    return result
