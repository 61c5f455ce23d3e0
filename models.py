from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict
import enum

from errors import PreconditionFailed


# Définition des énumérations pour les rôles et statuts
# Cela garantit que seules les valeurs prédéfinies peuvent être utilisées.
class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"


class LeadStatus(str, enum.Enum):
    pending = "pending"
    contacted = "contacted"
    in_progress = "in_progress"
    completed = "completed"
    rejected = "rejected"


LEAD_STATUSES = tuple(s.value for s in LeadStatus)
DEFAULT_COMMISSION_RATE = 0.5

VideoId = Union[int, str]

PROGRESS_FIELDS = ("training_progress", "quiz_passed", "meeting_scheduled", "dashboard_access")


class WorkflowState(BaseModel):
    """
    État du parcours d'un utilisateur (formation, quiz, rendez-vous, accès).

    Les champs restent indépendants en base; toutes les règles de transition
    passent par cette classe.
    """

    model_config = ConfigDict(frozen=True)

    training_progress: int = 0
    videos_watched: List[VideoId] = []
    quiz_passed: bool = False
    meeting_scheduled: bool = False
    dashboard_access: bool = False

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "WorkflowState":
        return cls(
            training_progress=doc.get("training_progress") or 0,
            videos_watched=list(doc.get("videos_watched") or []),
            quiz_passed=bool(doc.get("quiz_passed")),
            meeting_scheduled=bool(doc.get("meeting_scheduled")),
            dashboard_access=bool(doc.get("dashboard_access")),
        )

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump()

    def apply_progress(self, changes: Dict[str, Any]) -> "WorkflowState":
        """
        Applique une mise à jour partielle envoyée par l'utilisateur.

        Seules les clés présentes dans `changes` sont appliquées. `video_id`
        est ajouté s'il n'a pas déjà été vu. Si la mise à jour contient à la
        fois quiz_passed=False et training_progress=0 (échec au quiz), la liste
        des vidéos vues est vidée, quel que soit l'état précédent.
        """
        updates = {key: changes[key] for key in PROGRESS_FIELDS if key in changes}

        videos = list(self.videos_watched)
        video_id = changes.get("video_id")
        if video_id is not None and video_id not in videos:
            videos.append(video_id)

        if changes.get("quiz_passed") is False and changes.get("training_progress") == 0:
            videos = []
        updates["videos_watched"] = videos

        new_state = self.model_copy(update=updates)
        new_state._check_dashboard_transition(self)
        return new_state

    def schedule_meeting(self) -> "WorkflowState":
        return self.model_copy(update={"meeting_scheduled": True})

    def grant_dashboard(self) -> "WorkflowState":
        # L'approbation exige un rendez-vous, même si l'accès est déjà ouvert.
        if not self.meeting_scheduled:
            raise PreconditionFailed("Meeting must be scheduled before approving dashboard access")
        return self.model_copy(update={"dashboard_access": True})

    def _check_dashboard_transition(self, previous: "WorkflowState") -> None:
        if self.dashboard_access and not previous.dashboard_access and not self.meeting_scheduled:
            raise PreconditionFailed("Meeting must be scheduled before approving dashboard access")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """MongoDB renvoie des dates naïves en UTC; on les rend toutes explicites."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_user_document(name: str, email: str, password_hash: str, phone: Optional[str],
                      role: UserRole = UserRole.user, now: Optional[datetime] = None,
                      workflow: Optional[WorkflowState] = None) -> Dict[str, Any]:
    doc = {
        "name": name,
        "email": email,
        "password": password_hash,
        "phone": phone,
        "role": role.value,
        "created_at": now,
    }
    doc.update((workflow or WorkflowState()).to_fields())
    return doc


def apply_status_change(lead: Dict[str, Any], status: str, project_value: Optional[float],
                        now: datetime) -> Dict[str, Any]:
    """
    Calcule les champs modifiés d'un lead lors d'un changement de statut.

    La valeur du projet n'est prise en compte que pour le statut 'completed'
    avec un montant positif. La commission est recalculée dès que le lead est
    terminé avec une valeur de projet positive; sinon elle reste inchangée.
    """
    changes: Dict[str, Any] = {"status": status, "updated_at": now}

    stored_value = lead.get("project_value") or 0
    if status == LeadStatus.completed.value and project_value is not None and project_value > 0:
        changes["project_value"] = project_value
        stored_value = project_value

    if status == LeadStatus.completed.value and stored_value > 0:
        rate = lead.get("commission_rate", DEFAULT_COMMISSION_RATE)
        changes["commission_earned"] = stored_value * rate

    return changes
