"""HTTP API exposing CRUD operations over the user directory."""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from fastapi import FastAPI, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from .config import DEFAULT_API_TOKEN
from .errors import LookupFailure, ValidationFailure
from .middleware import build_pipeline
from .models import User
from .repository import UserRepository

logger = logging.getLogger("userdirectory.service")

WELCOME_MESSAGE = "Welcome to the User Management API!"


class UserPayload(BaseModel):
    """Request body for create and update; a supplied ``id`` is ignored."""

    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email)


def _failure_response(failure: Union[LookupFailure, ValidationFailure]) -> JSONResponse:
    if isinstance(failure, LookupFailure):
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=status_code, content=failure.message)


def register_api_routes(app: FastAPI, repository: UserRepository) -> None:
    """Expose the user endpoints on the provided FastAPI application.

    Handlers are plain functions so FastAPI runs them on its worker threads;
    the repository serialises access to the shared collection.
    """

    @app.get("/", response_class=PlainTextResponse)
    def welcome() -> str:
        return WELCOME_MESSAGE

    @app.get("/users", response_model=List[UserResponse])
    def list_users() -> List[UserResponse]:
        return [_user_to_response(user) for user in repository.list_users()]

    @app.get("/users/{user_id}", response_model=UserResponse)
    def get_user(user_id: int):
        user = repository.get(user_id)
        if user is None:
            return _failure_response(LookupFailure.USER_NOT_FOUND)
        return _user_to_response(user)

    @app.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
    def create_user(payload: UserPayload, response: Response):
        result = repository.add(payload.name, payload.email)
        if not result.ok:
            return _failure_response(result.failure)

        user = result.user
        logger.info("Created user %s", user.id)
        response.headers["Location"] = f"/users/{user.id}"
        return _user_to_response(user)

    @app.put("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def update_user(user_id: int, payload: UserPayload):
        result = repository.update(user_id, payload.name, payload.email)
        if not result.ok:
            return _failure_response(result.failure)

        logger.info("Updated user %s", user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_user(user_id: int):
        result = repository.delete(user_id)
        if not result.ok:
            return _failure_response(result.failure)

        logger.info("Deleted user %s", user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


def create_app(
    *,
    repository: UserRepository | None = None,
    api_token: str | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the user directory."""

    app_repository = repository if repository is not None else UserRepository()

    app = FastAPI(
        title="User Management API",
        version="1.0.0",
        description="CRUD operations over an in-memory user directory.",
    )
    app.state.repository = app_repository

    app.add_middleware(BaseHTTPMiddleware, dispatch=build_pipeline(api_token or DEFAULT_API_TOKEN))
    register_api_routes(app, app_repository)

    return app


__all__ = ["UserPayload", "UserResponse", "create_app", "register_api_routes"]
