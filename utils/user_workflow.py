"""
Parcours utilisateur Leopay: inscription, connexion, formation, quiz,
rendez-vous et accès au tableau de bord.

Les règles de transition sont portées par models.WorkflowState; ce module
fait le lien avec la collection MongoDB `users`.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from auth import create_access_token, hash_password, verify_password
from errors import Conflict, NotFound, Unauthorized, ValidationError
from models import UserRole, WorkflowState, new_user_document

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def find_user_by_id(db: Database, user_id: str) -> Optional[Dict[str, Any]]:
    if not user_id or not ObjectId.is_valid(str(user_id)):
        return None
    return db.users.find_one({"_id": ObjectId(str(user_id))})


class UserWorkflow:
    def __init__(self, db: Database, settings):
        self.db = db
        self.settings = settings

    def _get_user(self, user_id: str) -> Dict[str, Any]:
        user = find_user_by_id(self.db, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def _save_workflow(self, user: Dict[str, Any], state: WorkflowState) -> Dict[str, Any]:
        fields = state.to_fields()
        self.db.users.update_one({"_id": user["_id"]}, {"$set": fields})
        user.update(fields)
        return user

    def register(self, name: str, email: str, password: str, phone: Optional[str] = None) -> Dict[str, Any]:
        email = normalize_email(email)
        if self.db.users.find_one({"email": email}):
            raise Conflict("User with this email already exists")

        doc = new_user_document(
            name=(name or "").strip(),
            email=email,
            password_hash=hash_password(password),
            phone=(phone or "").strip() or None,
            now=datetime.now(timezone.utc),
        )
        try:
            result = self.db.users.insert_one(doc)
        except DuplicateKeyError:
            # inscription concurrente avec le même email
            raise Conflict("User with this email already exists")
        doc["_id"] = result.inserted_id
        logger.info("Nouvel utilisateur inscrit: %s", email)
        return doc

    def authenticate(self, email: Optional[str], password: Optional[str]) -> Tuple[Dict[str, Any], str]:
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = self.db.users.find_one({"email": normalize_email(email)})
        # Même erreur que l'email soit inconnu ou le mot de passe faux.
        if not user or not verify_password(password, user.get("password")):
            logger.warning("Échec de connexion pour %s", normalize_email(email))
            raise Unauthorized(INVALID_CREDENTIALS)

        token = create_access_token(str(user["_id"]), self.settings)
        logger.info("Connexion réussie: %s (rôle %s)", user["email"], user.get("role"))
        return user, token

    def issue_token(self, user: Dict[str, Any]) -> str:
        return create_access_token(str(user["_id"]), self.settings)

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        return self._get_user(user_id)

    def update_progress(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """`changes` ne contient que les champs explicitement envoyés."""
        user = self._get_user(user_id)
        state = WorkflowState.from_document(user).apply_progress(changes)
        return self._save_workflow(user, state)

    def list_candidates(self) -> List[Dict[str, Any]]:
        query = {"quiz_passed": True, "dashboard_access": False, "role": UserRole.user.value}
        return list(self.db.users.find(query, {"password": 0}))

    def schedule_meeting(self, user_id: str, meeting_date: Optional[str], meeting_time: Optional[str]) -> Dict[str, Any]:
        if not meeting_date or not meeting_time:
            raise ValidationError("Please provide meeting date and time")

        user = self._get_user(user_id)
        state = WorkflowState.from_document(user).schedule_meeting()
        # Seul le drapeau est enregistré, pas la date ni l'heure.
        logger.info("Rendez-vous planifié pour %s le %s à %s", user["email"], meeting_date, meeting_time)
        return self._save_workflow(user, state)

    def approve_dashboard_access(self, user_id: str) -> Dict[str, Any]:
        user = self._get_user(user_id)
        state = WorkflowState.from_document(user).grant_dashboard()
        logger.info("Accès au tableau de bord accordé à %s", user["email"])
        return self._save_workflow(user, state)
