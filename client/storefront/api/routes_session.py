from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from storefront.api.deps import get_runtime
from storefront.runtime import StorefrontRuntime

router = APIRouter(prefix="/api/session", tags=["session"])


class SessionIn(BaseModel):
    token: str = Field(..., min_length=1)
    profile: Optional[dict] = None


@router.put("", summary="Store a session token issued by the auth service")
async def store_session(payload: SessionIn, runtime: StorefrontRuntime = Depends(get_runtime)):
    runtime.session_store.store_token(payload.token, payload.profile)
    return {"authenticated": True, "profile": runtime.session_store.get_profile()}


@router.delete("", summary="Sign out")
async def sign_out(runtime: StorefrontRuntime = Depends(get_runtime)):
    runtime.session_store.sign_out()
    runtime.session.apply_empty(authenticated=False)
    return {"authenticated": False}
