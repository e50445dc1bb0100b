"""
Users Controllers (API Routes)
==============================

FastAPI routes for the users resource.

Controllers delegate to the UserService held by the application context.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, status

from users_service.shared.infrastructure.logging import get_logger
from users_service.users.application import (
    CreateUserRequest,
    DeleteUserResponse,
    UpdateUserRequest,
    UserResponse,
    UserService,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/api/users", tags=["Users"])


# ========== Example payloads for Swagger ==========

USER_RESPONSE_EXAMPLE = {
    "id": "652f1c9e8b3e4a0f5c2d7b10",
    "name": "Ada",
    "lastname": "Lovelace"
}

NOT_FOUND_EXAMPLE = {
    "detail": "User with id '652f1c9e8b3e4a0f5c2d7b10' not found",
    "correlation_id": "1b4e28ba-2fa1-11d2-883f-0016d3cca427"
}


# ========== Dependencies ==========

def get_user_service(request: Request) -> UserService:
    """Get the user service from the application context."""
    return request.app.state.context.user_service


# ========== Route Handlers ==========

@router.get(
    "/",
    response_model=List[UserResponse],
    summary="List all users"
)
async def list_users(service: UserService = Depends(get_user_service)):
    users = await service.list_users()
    return [UserResponse.from_domain(user) for user in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user by id",
    responses={
        200: {"content": {"application/json": {"example": USER_RESPONSE_EXAMPLE}}},
        404: {
            "description": "Unknown or malformed user id",
            "content": {"application/json": {"example": NOT_FOUND_EXAMPLE}}
        }
    }
)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    user = await service.get_user(user_id)
    return UserResponse.from_domain(user)


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    responses={201: {"content": {"application/json": {"example": USER_RESPONSE_EXAMPLE}}}}
)
async def create_user(
    payload: CreateUserRequest,
    service: UserService = Depends(get_user_service)
):
    """
    Create a user.

    **Example Request**:
    ```json
    {"name": "Ada", "lastname": "Lovelace"}
    ```
    """
    user = await service.create_user(payload.to_domain())
    return UserResponse.from_domain(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Replace a user's fields",
    responses={404: {"description": "Unknown or malformed user id"}}
)
async def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    service: UserService = Depends(get_user_service)
):
    user = await service.update_user(user_id, payload.to_domain())
    return UserResponse.from_domain(user)


@router.delete(
    "/{user_id}",
    response_model=DeleteUserResponse,
    summary="Delete a user",
    responses={404: {"description": "Unknown or malformed user id"}}
)
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    deleted = await service.delete_user(user_id)
    return DeleteUserResponse(deleted=deleted)
