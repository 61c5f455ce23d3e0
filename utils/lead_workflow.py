import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database

from errors import NotFound, ValidationError
from models import DEFAULT_COMMISSION_RATE, LEAD_STATUSES, LeadStatus, apply_status_change

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r'@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$'
)

# (champ, message si absent), dans l'ordre des messages d'erreur
REQUIRED_FIELDS = (
    ("client_name", "Please provide a client name"),
    ("email", "Please provide an email"),
    ("phone", "Please provide a phone number"),
    ("business_type", "Please provide a business type"),
    ("project_requirements", "Please provide project requirements"),
    ("budget", "Please provide a budget range"),
)
OPTIONAL_FIELDS = ("company_name", "alternate_phone", "address", "additional_notes")

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class LeadWorkflow:
    def __init__(self, db: Database):
        self.db = db

    def create(self, hunter_id: Any, fields: Dict[str, Any],
               commission_rate: float = DEFAULT_COMMISSION_RATE) -> Dict[str, Any]:
        data = {name: clean_text(fields.get(name)) for name, _ in REQUIRED_FIELDS}
        data.update({name: clean_text(fields.get(name)) for name in OPTIONAL_FIELDS})
        if data["email"]:
            data["email"] = data["email"].lower()

        errors = []
        for name, message in REQUIRED_FIELDS:
            if not data[name]:
                errors.append(message)
            elif name == "email" and not EMAIL_REGEX.match(data["email"]):
                errors.append("Please provide a valid email")
        if not 0 <= commission_rate <= 1:
            errors.append("Commission rate must be between 0 and 1")
        if errors:
            raise ValidationError(", ".join(errors))

        now = datetime.now(timezone.utc)
        lead = {
            "hunter": ObjectId(str(hunter_id)),
            **data,
            "status": LeadStatus.pending.value,
            "commission_rate": commission_rate,
            "project_value": 0,
            "commission_earned": 0,
            "created_at": now,
            "updated_at": now,
        }
        result = self.db.leads.insert_one(lead)
        lead["_id"] = result.inserted_id
        logger.info("Lead %s créé par %s", lead["_id"], hunter_id)
        return lead

    def list_for_hunter(self, hunter_id: Any) -> List[Dict[str, Any]]:
        return list(self.db.leads.find({"hunter": ObjectId(str(hunter_id))}).sort(NEWEST_FIRST))

    def stats(self, hunter_id: Any) -> Dict[str, Any]:
        hunter = ObjectId(str(hunter_id))
        total_leads = self.db.leads.count_documents({"hunter": hunter})
        converted_leads = self.db.leads.count_documents({"hunter": hunter, "status": LeadStatus.completed.value})

        earnings = list(self.db.leads.aggregate([
            {"$match": {"hunter": hunter, "status": LeadStatus.completed.value}},
            {"$group": {"_id": None, "total": {"$sum": "$commission_earned"}}},
        ]))
        total_earnings = earnings[0]["total"] if earnings else 0

        return {
            "total_leads": total_leads,
            "converted_leads": converted_leads,
            "total_earnings": total_earnings,
        }

    def list_all(self) -> List[Dict[str, Any]]:
        """Tous les leads, chacun avec le nom et l'email de son apporteur."""
        leads = list(self.db.leads.find().sort(NEWEST_FIRST))

        hunter_ids = list({lead["hunter"] for lead in leads})
        hunters = {
            user["_id"]: {"_id": str(user["_id"]), "name": user.get("name"), "email": user.get("email")}
            for user in self.db.users.find({"_id": {"$in": hunter_ids}}, {"name": 1, "email": 1})
        }
        for lead in leads:
            lead["hunter"] = hunters.get(lead["hunter"])
        return leads

    def update_status(self, lead_id: str, status: Optional[str],
                      project_value: Optional[float] = None) -> Dict[str, Any]:
        if status not in LEAD_STATUSES:
            raise ValidationError("Invalid status")

        lead = None
        if lead_id and ObjectId.is_valid(str(lead_id)):
            lead = self.db.leads.find_one({"_id": ObjectId(str(lead_id))})
        if lead is None:
            raise NotFound("Lead not found")

        changes = apply_status_change(lead, status, project_value, datetime.now(timezone.utc))
        # Lecture puis écriture sans verrou: le dernier écrivain l'emporte.
        self.db.leads.update_one({"_id": lead["_id"]}, {"$set": changes})
        lead.update(changes)
        logger.info("Lead %s passé au statut %s", lead["_id"], status)
        return lead
