from typing import Any, Dict

from fastapi import APIRouter, Depends, status

import schemas
from dependencies import get_current_admin_user, get_current_user, get_lead_workflow
from models import as_utc
from utils.lead_workflow import LeadWorkflow

router = APIRouter()


# Helper pour convertir un document MongoDB en schéma LeadOut
def lead_helper(lead_data: Dict[str, Any]) -> schemas.LeadOut:
    hunter = lead_data.get("hunter")
    if hunter is not None and not isinstance(hunter, dict):
        hunter = str(hunter)

    fields = {key: value for key, value in lead_data.items() if key not in ("_id", "hunter")}
    for key in ("created_at", "updated_at"):
        fields[key] = as_utc(fields.get(key))
    return schemas.LeadOut(id=str(lead_data["_id"]), hunter=hunter, **fields)


@router.post("", response_model=schemas.LeadResponse, status_code=status.HTTP_201_CREATED)
def create_lead(
    payload: schemas.LeadCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    workflow: LeadWorkflow = Depends(get_lead_workflow),
):
    lead = workflow.create(current_user["_id"], payload.model_dump())
    return {"success": True, "lead": lead_helper(lead)}


@router.get("", response_model=schemas.LeadListResponse)
def get_leads(
    current_user: Dict[str, Any] = Depends(get_current_user),
    workflow: LeadWorkflow = Depends(get_lead_workflow),
):
    leads = workflow.list_for_hunter(current_user["_id"])
    return {"success": True, "count": len(leads), "leads": [lead_helper(lead) for lead in leads]}


@router.get("/stats", response_model=schemas.StatsResponse)
def get_stats(
    current_user: Dict[str, Any] = Depends(get_current_user),
    workflow: LeadWorkflow = Depends(get_lead_workflow),
):
    return {"success": True, "stats": workflow.stats(current_user["_id"])}


@router.get("/all", response_model=schemas.LeadListResponse)
def get_all_leads(
    workflow: LeadWorkflow = Depends(get_lead_workflow),
    current_admin: Dict[str, Any] = Depends(get_current_admin_user),
):
    leads = workflow.list_all()
    return {"success": True, "count": len(leads), "leads": [lead_helper(lead) for lead in leads]}


@router.put("/{lead_id}/status", response_model=schemas.LeadResponse)
def update_lead_status(
    lead_id: str,
    payload: schemas.LeadStatusUpdate,
    workflow: LeadWorkflow = Depends(get_lead_workflow),
    current_admin: Dict[str, Any] = Depends(get_current_admin_user),
):
    lead = workflow.update_status(lead_id, payload.status, payload.project_value)
    return {"success": True, "lead": lead_helper(lead)}
