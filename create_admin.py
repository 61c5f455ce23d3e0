import logging
from datetime import datetime, timezone

from pymongo.database import Database
from pymongo.errors import PyMongoError

from auth import hash_password
from models import UserRole, WorkflowState, new_user_document

logger = logging.getLogger(__name__)

# Un administrateur a déjà terminé tout le parcours.
ADMIN_WORKFLOW = WorkflowState(
    training_progress=3,
    videos_watched=[1, 2, 3],
    quiz_passed=True,
    meeting_scheduled=True,
    dashboard_access=True,
)


def ensure_admin_account(db: Database, settings) -> str:
    """
    Vérifie si l'admin existe déjà, et le crée ou le met à jour si nécessaire.

    Si le compte existe, son mot de passe est toujours réécrit pour
    correspondre à la configuration courante. Retourne "created" ou "updated".
    """
    admin_email = settings.admin_email.strip().lower()
    hashed_password = hash_password(settings.admin_password)

    admin_user = db.users.find_one({"email": admin_email})
    if admin_user:
        db.users.update_one({"_id": admin_user["_id"]}, {"$set": {"password": hashed_password}})
        logger.info("Compte admin '%s' existant: mot de passe synchronisé avec la configuration", admin_email)
        return "updated"

    db.users.insert_one(new_user_document(
        name=settings.admin_name,
        email=admin_email,
        password_hash=hashed_password,
        phone=None,
        role=UserRole.admin,
        now=datetime.now(timezone.utc),
        workflow=ADMIN_WORKFLOW,
    ))
    logger.info("Compte admin '%s' créé", admin_email)
    return "created"


if __name__ == "__main__":
    from dotenv import load_dotenv

    from config import Settings
    from database import create_mongo_client, ensure_indexes
    from utils.logger import setup_logging

    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings)

    client = create_mongo_client(settings)
    try:
        db = client[settings.mongo_db_name]
        ensure_indexes(db)
        ensure_admin_account(db, settings)
    except PyMongoError as e:
        logger.error("Erreur MongoDB lors de la création de l'admin : %s", e)
        raise SystemExit(1)
    finally:
        client.close()
