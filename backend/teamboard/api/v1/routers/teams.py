# teamboard/api/v1/routers/teams.py
from fastapi import APIRouter, Depends, HTTPException, status
from teamboard.api.v1.deps import get_current_identity, get_team_service
from teamboard.schemas.team import TeamCreate, TeamMemberCreate, TeamUpdate
from teamboard.services import Identity, TeamService

router = APIRouter(prefix="/teams", tags=["teams"])

async def _require_owner(teams: TeamService, team_id: str, identity: Identity) -> None:
    team = await teams.get_by_id(team_id)
    if team.owner_id != identity.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_OWNER_ONLY")

@router.post("")
async def create_team(
    body: TeamCreate,
    identity: Identity = Depends(get_current_identity),
    teams: TeamService = Depends(get_team_service),
):
    """Create a team owned by the caller; the caller is enrolled as its first member."""
    team = await teams.create(body.model_dump(exclude_unset=True), identity.id)
    return {"success": True, "data": team.model_dump(mode="json")}

@router.get("")
async def list_my_teams(
    identity: Identity = Depends(get_current_identity),
    teams: TeamService = Depends(get_team_service),
):
    """Teams the caller belongs to, newest first."""
    items = await teams.get_user_teams(identity.id)
    return {"success": True, "data": {"items": [t.model_dump(mode="json") for t in items]}}

@router.get("/{team_id}")
async def get_team(
    team_id: str,
    identity: Identity = Depends(get_current_identity),
    teams: TeamService = Depends(get_team_service),
):
    """Team with its members and their profiles. Members only."""
    team = await teams.get_by_id(team_id)
    if not any(m.user_id == identity.id for m in team.members):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_NOT_A_MEMBER")
    return {"success": True, "data": team.model_dump(mode="json")}

@router.patch("/{team_id}")
async def update_team(
    team_id: str,
    body: TeamUpdate,
    identity: Identity = Depends(get_current_identity),
    teams: TeamService = Depends(get_team_service),
):
    data = body.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="EMPTY_UPDATE")
    await _require_owner(teams, team_id, identity)
    team = await teams.update(team_id, data)
    return {"success": True, "data": team.model_dump(mode="json")}

@router.delete("/{team_id}")
async def delete_team(
    team_id: str,
    identity: Identity = Depends(get_current_identity),
    teams: TeamService = Depends(get_team_service),
):
    """Delete a team together with its projects and memberships. Owner only."""
    await _require_owner(teams, team_id, identity)
    await teams.delete(team_id)
    return {"success": True, "data": {"id": team_id}}

@router.post("/{team_id}/members")
async def add_team_member(
    team_id: str,
    body: TeamMemberCreate,
    identity: Identity = Depends(get_current_identity),
    teams: TeamService = Depends(get_team_service),
):
    """Add a user to the team. Owner only; fails with TEAM_FULL at max_members."""
    await _require_owner(teams, team_id, identity)
    member = await teams.add_member(team_id, body.user_id, body.role)
    return {"success": True, "data": member.model_dump(mode="json")}
