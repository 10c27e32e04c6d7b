# teamboard/api/v1/routers/users.py
from fastapi import APIRouter, Depends, HTTPException, status
from teamboard.api.v1.deps import get_current_identity, get_user_service
from teamboard.schemas.user import UserUpdate
from teamboard.services import Identity, UserService

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me")
async def get_my_profile(
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
):
    profile = await users.get_by_id(identity.id)
    return {"success": True, "data": profile.model_dump(mode="json")}

@router.patch("/me")
async def update_my_profile(
    body: UserUpdate,
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
):
    data = body.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="EMPTY_UPDATE")
    profile = await users.update(identity.id, data)
    return {"success": True, "data": profile.model_dump(mode="json")}

@router.get("/{user_id}")
async def get_profile(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
):
    profile = await users.get_by_id(user_id)
    return {"success": True, "data": profile.model_dump(mode="json")}
