"""FastAPI profile endpoint: GET /v1/profiles/me."""

from uuid import UUID

from fastapi import APIRouter, Depends

from shelfmap.api.dependencies import get_current_user_id, get_profile_repo
from shelfmap.api.errors import ApiError
from shelfmap.models.workspace import Profile
from shelfmap.repositories.workspace import ProfileRepository

router = APIRouter(prefix="/v1/profiles", tags=["profiles"])


@router.get("/me", response_model=Profile)
async def get_my_profile(
    user_id: UUID = Depends(get_current_user_id),
    repo: ProfileRepository = Depends(get_profile_repo),
) -> Profile:
    row = await repo.get(user_id)
    if row is None:
        raise ApiError(404, "User profile not found.")
    return Profile.model_validate(row)
