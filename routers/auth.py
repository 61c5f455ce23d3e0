from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

import schemas
from dependencies import get_current_admin_user, get_current_user, get_user_workflow
from models import as_utc
from utils.user_workflow import UserWorkflow

router = APIRouter()


# Helper pour convertir un document MongoDB en schéma UserOut (sans mot de passe)
def user_helper(user_data: Dict[str, Any]) -> schemas.UserOut:
    return schemas.UserOut(
        id=str(user_data["_id"]),
        name=user_data.get("name"),
        email=user_data["email"],
        phone=user_data.get("phone"),
        role=user_data.get("role", "user"),
        dashboard_access=bool(user_data.get("dashboard_access")),
        training_progress=user_data.get("training_progress") or 0,
        videos_watched=user_data.get("videos_watched") or [],
        quiz_passed=bool(user_data.get("quiz_passed")),
        meeting_scheduled=bool(user_data.get("meeting_scheduled")),
        created_at=as_utc(user_data.get("created_at")),
    )


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterRequest, workflow: UserWorkflow = Depends(get_user_workflow)):
    user = workflow.register(payload.name, payload.email, payload.password, payload.phone)
    return {"success": True, "user": user_helper(user), "token": workflow.issue_token(user)}


@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.LoginRequest, workflow: UserWorkflow = Depends(get_user_workflow)):
    """
    Connecte l'utilisateur et retourne un token JWT.
    """
    user, token = workflow.authenticate(payload.email, payload.password)
    return {"success": True, "user": user_helper(user), "token": token}


@router.get("/me", response_model=schemas.UserResponse)
def read_users_me(current_user: Dict[str, Any] = Depends(get_current_user)):
    """
    Retourne les informations de l'utilisateur actuellement connecté.
    """
    return {"success": True, "user": user_helper(current_user)}


@router.put("/training", response_model=schemas.UserResponse)
def update_training_progress(
    payload: schemas.TrainingProgressUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    workflow: UserWorkflow = Depends(get_user_workflow),
):
    # Seuls les champs envoyés (non nuls) sont appliqués
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    user = workflow.update_progress(str(current_user["_id"]), changes)
    return {"success": True, "user": user_helper(user)}


# --- Routes administrateur ---

@router.get("/admin/candidates", response_model=schemas.CandidatesResponse)
def list_candidates(
    workflow: UserWorkflow = Depends(get_user_workflow),
    current_admin: Dict[str, Any] = Depends(get_current_admin_user),
):
    return {"success": True, "candidates": [user_helper(u) for u in workflow.list_candidates()]}


@router.put("/admin/schedule/{user_id}", response_model=schemas.UserMessageResponse)
def schedule_meeting(
    user_id: str,
    payload: Optional[schemas.MeetingRequest] = None,
    workflow: UserWorkflow = Depends(get_user_workflow),
    current_admin: Dict[str, Any] = Depends(get_current_admin_user),
):
    payload = payload or schemas.MeetingRequest()
    user = workflow.schedule_meeting(user_id, payload.meeting_date, payload.meeting_time)
    return {"success": True, "message": "Meeting scheduled successfully", "user": user_helper(user)}


@router.put("/admin/approve/{user_id}", response_model=schemas.UserMessageResponse)
def approve_dashboard_access(
    user_id: str,
    workflow: UserWorkflow = Depends(get_user_workflow),
    current_admin: Dict[str, Any] = Depends(get_current_admin_user),
):
    user = workflow.approve_dashboard_access(user_id)
    return {"success": True, "message": "Dashboard access approved successfully", "user": user_helper(user)}
