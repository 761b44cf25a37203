from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storefront.api.deps import get_runtime
from storefront.runtime import StorefrontRuntime

router = APIRouter(prefix="/api/payment", tags=["payment"])


class PaymentReturnIn(BaseModel):
    url: str


@router.post("/return", summary="Payment page navigated to a URL")
async def payment_return(payload: PaymentReturnIn, runtime: StorefrontRuntime = Depends(get_runtime)):
    outcome = await runtime.handoff.handle_return(payload.url)
    if outcome is None:
        return {"handled": False}
    return {
        "handled": True,
        "success": outcome.success,
        "orderReference": outcome.order_reference,
        "message": outcome.message,
    }


@router.post("/reset", summary="Try the payment again")
async def payment_reset(runtime: StorefrontRuntime = Depends(get_runtime)):
    runtime.handoff.reset()
    return {"ok": True}
