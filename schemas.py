from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from models import LeadStatus, UserRole


# L'API expose les champs en camelCase (comme le frontend Leopay), le code Python en snake_case.
class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Schémas pour l'Authentification ---

class RegisterRequest(ApiModel):
    # Les nombres envoyés en JSON (téléphone, nom) sont conservés comme du texte
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None


class LoginRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TrainingProgressUpdate(ApiModel):
    training_progress: Optional[int] = Field(None, ge=0)
    quiz_passed: Optional[bool] = None
    meeting_scheduled: Optional[bool] = None
    dashboard_access: Optional[bool] = None
    video_id: Optional[Union[int, str]] = None


class MeetingRequest(ApiModel):
    meeting_date: Optional[str] = None
    meeting_time: Optional[str] = None


# Schéma pour la lecture d'un utilisateur (réponse API), jamais de mot de passe
class UserOut(ApiModel):
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: UserRole
    dashboard_access: bool = False
    training_progress: int = 0
    videos_watched: List[Union[int, str]] = []
    quiz_passed: bool = False
    meeting_scheduled: bool = False
    created_at: Optional[datetime] = None


class AuthResponse(ApiModel):
    success: bool = True
    user: UserOut
    token: str


class UserResponse(ApiModel):
    success: bool = True
    user: UserOut


class UserMessageResponse(ApiModel):
    success: bool = True
    message: str
    user: UserOut


class CandidatesResponse(ApiModel):
    success: bool = True
    candidates: List[UserOut]


# --- Schémas pour les Leads ---

class LeadCreate(ApiModel):
    # Tous optionnels ici: les champs obligatoires sont vérifiés par le service
    # pour renvoyer un message unique listant tout ce qui manque.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    client_name: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    alternate_phone: Optional[str] = None
    address: Optional[str] = None
    business_type: Optional[str] = None
    project_requirements: Optional[str] = None
    budget: Optional[str] = None
    additional_notes: Optional[str] = None


class LeadStatusUpdate(ApiModel):
    status: Optional[str] = None
    project_value: Optional[float] = None


class HunterSummary(ApiModel):
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None


class LeadOut(ApiModel):
    id: str = Field(..., alias="_id")
    hunter: Union[HunterSummary, str, None] = None
    client_name: str
    company_name: Optional[str] = None
    email: str
    phone: str
    alternate_phone: Optional[str] = None
    address: Optional[str] = None
    business_type: str
    project_requirements: str
    budget: str
    additional_notes: Optional[str] = None
    status: LeadStatus = LeadStatus.pending
    commission_rate: float
    project_value: float = 0
    commission_earned: float = 0
    created_at: datetime
    updated_at: datetime


class LeadResponse(ApiModel):
    success: bool = True
    lead: LeadOut


class LeadListResponse(ApiModel):
    success: bool = True
    count: int
    leads: List[LeadOut]


class LeadStats(ApiModel):
    total_leads: int
    converted_leads: int
    total_earnings: float


class StatsResponse(ApiModel):
    success: bool = True
    stats: LeadStats
