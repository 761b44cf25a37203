from fastapi import Request

from storefront.runtime import StorefrontRuntime


async def get_runtime(request: Request) -> StorefrontRuntime:
    return request.app.state.runtime
