"""
CORS for the dashboard routes.
"""
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class DashboardCORSMiddleware(CORSMiddleware):
    """Starlette CORS handling, skipped for paths under `exclude_prefixes`.

    The proxy functions answer their own preflights and always send the fixed
    proxy CORS headers, whatever the dashboard origin policy is.
    """

    def __init__(self, app: ASGIApp, exclude_prefixes=(), **options) -> None:
        super().__init__(app, **options)
        self.exclude_prefixes = tuple(exclude_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.exclude_prefixes):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
