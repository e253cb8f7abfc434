"""App-wide CORS with per-prefix exemptions."""

from typing import Sequence

from fastapi.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

# Function endpoints answer CORS themselves with "*" (including preflight)
CORS_EXEMPT_PREFIXES = ("/functions/v1/",)


class ScopedCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware that skips requests under ``exempt_prefixes``.

    Requests on an exempt path go straight to the route, so its own CORS
    headers and OPTIONS handler apply whatever CORS_ORIGINS says.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        exempt_prefixes: Sequence[str] = (),
        **kwargs,
    ) -> None:
        super().__init__(app, **kwargs)
        self.exempt_prefixes = tuple(exempt_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.exempt_prefixes):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
