"""User directory endpoints."""

from fastapi import APIRouter, status

from api.dependencies import ProjectStoreDep
from api.models import CreateUserRequest, UserListResponse, UserResponse

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


@router.get("/all", response_model=UserListResponse)
async def list_users(store: ProjectStoreDep) -> UserListResponse:
    return UserListResponse(
        users=[UserResponse.model_validate(user.to_dict()) for user in store.list_users()]
    )


@router.post("/create", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(request: CreateUserRequest, store: ProjectStoreDep) -> UserResponse:
    user = store.add_user(request.display_name, user_id=request.id)
    return UserResponse.model_validate(user.to_dict())
