"""Request pipeline wrapped around every route of the user directory API.

The pipeline is an ordered list of stages.  Each stage receives the request
and a ``call_next`` coroutine for the remainder of the chain and either
awaits it exactly once or returns its own response without doing so.  The
order is fixed by :func:`build_pipeline`::

    ErrorBoundary -> BearerTokenGate -> AccessLogger -> routes
"""

from __future__ import annotations

import logging
import secrets
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Iterable, Tuple

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from .errors import INTERNAL_ERROR_MESSAGE, AuthFailure

logger = logging.getLogger("userdirectory.service")
access_logger = logging.getLogger("userdirectory.access")

CallNext = Callable[[Request], Awaitable[Response]]

PUBLIC_PATH = "/"


class Stage(ABC):
    """A single interceptor in the request pipeline."""

    @abstractmethod
    async def intercept(self, request: Request, call_next: CallNext) -> Response:
        """Return a response, awaiting ``call_next`` at most once."""


class ErrorBoundary(Stage):
    """Turn any exception raised further down the chain into a 500 response."""

    async def intercept(self, request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(
                "Unhandled error while processing %s %s", request.method, request.url.path
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": INTERNAL_ERROR_MESSAGE, "details": str(exc)},
            )


class BearerTokenGate(Stage):
    """Reject requests that do not carry the shared bearer token.

    The root path is always public.  The token is a single static secret with
    no expiry and no per-user identity.
    """

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("An API token must be provided")
        self._expected = f"Bearer {token}"

    async def intercept(self, request: Request, call_next: CallNext) -> Response:
        if request.url.path == PUBLIC_PATH:
            return await call_next(request)

        header = request.headers.get("authorization")
        if header is None:
            return _unauthorized(request, AuthFailure.MISSING_HEADER)
        if not secrets.compare_digest(header.encode("utf-8"), self._expected.encode("utf-8")):
            return _unauthorized(request, AuthFailure.INVALID_TOKEN)

        return await call_next(request)


class AccessLogger(Stage):
    """Record ``<METHOD> <PATH> => <STATUS>`` once the chain below has finished."""

    async def intercept(self, request: Request, call_next: CallNext) -> Response:
        method = request.method
        path = request.url.path

        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            # A raised exception is reported as the 500 the error boundary will send.
            access_logger.info("%s %s => %s", method, path, status_code)


class Pipeline:
    """Run the stages in order, ending with the routed endpoint.

    Instances are used as the ``dispatch`` callable of Starlette's
    ``BaseHTTPMiddleware``, whose ``call_next`` invokes the router.
    """

    def __init__(self, stages: Iterable[Stage]) -> None:
        self._stages: Tuple[Stage, ...] = tuple(stages)

    @property
    def stages(self) -> Tuple[Stage, ...]:
        return self._stages

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        return await self._run(0, request, call_next)

    async def _run(self, index: int, request: Request, endpoint: CallNext) -> Response:
        if index == len(self._stages):
            return await endpoint(request)

        async def next_stage(next_request: Request) -> Response:
            return await self._run(index + 1, next_request, endpoint)

        return await self._stages[index].intercept(request, next_stage)


def build_pipeline(token: str) -> Pipeline:
    return Pipeline([ErrorBoundary(), BearerTokenGate(token), AccessLogger()])


def _unauthorized(request: Request, failure: AuthFailure) -> JSONResponse:
    # Rejected requests never reach AccessLogger, so they are recorded here.
    access_logger.info(
        "%s %s => %s", request.method, request.url.path, status.HTTP_401_UNAUTHORIZED
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": failure.message},
    )


__all__ = [
    "AccessLogger",
    "BearerTokenGate",
    "ErrorBoundary",
    "Pipeline",
    "Stage",
    "build_pipeline",
]
