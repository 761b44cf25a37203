from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from storefront.api.deps import get_runtime
from storefront.runtime import StorefrontRuntime

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _busy(runtime: StorefrontRuntime, product_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "notification": {
                "kind": "busy",
                "message": "This item is already being updated",
                "retryable": True,
                "productId": product_id,
            },
            "cart": runtime.session.view(),
        },
    )


@router.get("", summary="Current cart view")
async def get_cart(runtime: StorefrontRuntime = Depends(get_runtime)):
    return runtime.session.view()


@router.post("/refresh", summary="Reload the cart (mount, refocus, pull to refresh)")
async def refresh_cart(runtime: StorefrontRuntime = Depends(get_runtime)):
    await runtime.cache.load()
    return runtime.session.view()


@router.post("/close", summary="Screen unmounted")
async def close_cart(runtime: StorefrontRuntime = Depends(get_runtime)):
    runtime.session.close()
    return {"ok": True}


@router.post("/selection/{product_id}/toggle", summary="Toggle one item")
async def toggle_selection(product_id: str, runtime: StorefrontRuntime = Depends(get_runtime)):
    runtime.session.selection.toggle(product_id)
    return runtime.session.view()


@router.post("/selection/all", summary="Select every item")
async def select_all(runtime: StorefrontRuntime = Depends(get_runtime)):
    runtime.session.selection.select_all()
    return runtime.session.view()


@router.delete("/selection", summary="Deselect every item")
async def clear_selection(runtime: StorefrontRuntime = Depends(get_runtime)):
    runtime.session.selection.clear_all()
    return runtime.session.view()


@router.post("/items/{product_id}/increase", summary="Increase quantity by one")
async def increase_item(product_id: str, runtime: StorefrontRuntime = Depends(get_runtime)):
    if not await runtime.coordinator.increase(product_id):
        return _busy(runtime, product_id)
    return runtime.session.view()


@router.post("/items/{product_id}/decrease", summary="Decrease quantity by one")
async def decrease_item(product_id: str, runtime: StorefrontRuntime = Depends(get_runtime)):
    if not await runtime.coordinator.decrease(product_id):
        return _busy(runtime, product_id)
    return runtime.session.view()


@router.delete("/items/{product_id}", summary="Remove item")
async def remove_item(product_id: str, runtime: StorefrontRuntime = Depends(get_runtime)):
    if not await runtime.coordinator.remove(product_id):
        return _busy(runtime, product_id)
    return runtime.session.view()


@router.post("/checkout", summary="Create a payment for the selected items")
async def checkout(runtime: StorefrontRuntime = Depends(get_runtime)):
    target = await runtime.assembler.submit()
    return {
        "paymentUrl": target.url,
        "orderReference": target.reference,
        "totalAmount": target.total,
    }
