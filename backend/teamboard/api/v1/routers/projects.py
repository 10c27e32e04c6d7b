# teamboard/api/v1/routers/projects.py
from fastapi import APIRouter, Depends, HTTPException, status
from teamboard.api.v1.deps import (
    get_current_identity,
    get_project_service,
    get_project_view,
    get_team_service,
)
from teamboard.schemas.project import Project, ProjectCreate, ProjectStatusIn, ProjectUpdate
from teamboard.services import Identity, ProjectService, ProjectViewState, TeamService

router = APIRouter(tags=["projects"])

def _out(project: Project) -> dict:
    return project.model_dump(mode="json")

async def _require_member(teams: TeamService, team_id: str, identity: Identity) -> None:
    if not await teams.is_member(team_id, identity.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_NOT_A_MEMBER")

async def _member_project(projects: ProjectService, teams: TeamService, project_id: str, identity: Identity) -> Project:
    """Project by id, provided the caller belongs to its team (404 before 403)."""
    project = await projects.get_by_id(project_id)
    await _require_member(teams, project.team_id, identity)
    return project

@router.get("/projects")
async def list_projects(view: ProjectViewState = Depends(get_project_view)):
    """
    Visible project list of the caller: projects of every team they belong to,
    newest first, plus the view's loading flag, last error and status.
    """
    return {"success": True, "data": view.snapshot()}

@router.post("/projects/refresh")
async def refresh_projects(view: ProjectViewState = Depends(get_project_view)):
    """Recompute the visible list now. A store failure keeps the previous list and sets `error`."""
    await view.refresh()
    return {"success": True, "data": view.snapshot()}

@router.post("/projects")
async def create_project(
    body: ProjectCreate,
    identity: Identity = Depends(get_current_identity),
    view: ProjectViewState = Depends(get_project_view),
    teams: TeamService = Depends(get_team_service),
):
    """
    Create a project in one of the caller's teams. The caller becomes its owner.

    Raises:
        HTTPException (403): If the caller is not a member of the team
    """
    await _require_member(teams, body.team_id, identity)
    project = await view.create(body.model_dump(exclude_unset=True))
    return {"success": True, "data": _out(project)}

@router.get("/projects/{project_id}")
async def get_project(
    project_id: str,
    identity: Identity = Depends(get_current_identity),
    projects: ProjectService = Depends(get_project_service),
    teams: TeamService = Depends(get_team_service),
):
    """
    Project by id. Served from the cache when present, otherwise fetched with
    its team, members and their profiles. Members of the project's team only.

    Raises:
        HTTPException (403): If the caller is not a member of the project's team
        HTTPException (404): If the project does not exist
    """
    project = await _member_project(projects, teams, project_id, identity)
    return {"success": True, "data": _out(project)}

@router.patch("/projects/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    identity: Identity = Depends(get_current_identity),
    view: ProjectViewState = Depends(get_project_view),
    projects: ProjectService = Depends(get_project_service),
    teams: TeamService = Depends(get_team_service),
):
    """
    Partial update; only the fields present in the body are written.
    Moving a project (`team_id`) needs membership of the target team as well.
    """
    data = body.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="EMPTY_UPDATE")
    current = await _member_project(projects, teams, project_id, identity)
    if data.get("team_id") and data["team_id"] != current.team_id:
        await _require_member(teams, data["team_id"], identity)
    project = await view.update(project_id, data)
    return {"success": True, "data": _out(project)}

@router.patch("/projects/{project_id}/status")
async def update_project_status(
    project_id: str,
    body: ProjectStatusIn,
    identity: Identity = Depends(get_current_identity),
    projects: ProjectService = Depends(get_project_service),
    teams: TeamService = Depends(get_team_service),
    view: ProjectViewState = Depends(get_project_view),
):
    """
    Status-only update. The service leaves its cache alone for this write;
    the caller's view is refreshed right after.
    """
    await _member_project(projects, teams, project_id, identity)
    project = await projects.update_status(project_id, body.status)
    await view.refresh()
    return {"success": True, "data": _out(project)}

@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: str,
    identity: Identity = Depends(get_current_identity),
    view: ProjectViewState = Depends(get_project_view),
    projects: ProjectService = Depends(get_project_service),
    teams: TeamService = Depends(get_team_service),
):
    await _member_project(projects, teams, project_id, identity)
    await view.delete(project_id)
    return {"success": True, "data": {"id": project_id}}

@router.get("/teams/{team_id}/projects")
async def list_team_projects(
    team_id: str,
    identity: Identity = Depends(get_current_identity),
    projects: ProjectService = Depends(get_project_service),
    teams: TeamService = Depends(get_team_service),
):
    """Projects of one team, served from the cache when any are cached."""
    await _require_member(teams, team_id, identity)
    items = await projects.get_by_team(team_id)
    return {"success": True, "data": {"items": [_out(p) for p in items]}}
