# Base de données: connexion MongoDB et index des collections Leopay.

import logging

from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)


def create_mongo_client(settings) -> MongoClient:
    """Crée le client une seule fois, il est ensuite réutilisé par toute l'application."""
    return MongoClient(settings.mongo_uri, tz_aware=True, serverSelectionTimeoutMS=30000, socketTimeoutMS=45000)


def ensure_indexes(db: Database) -> None:
    # L'unicité de l'email est la seule garantie fournie par la base.
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.users.create_index([("quiz_passed", ASCENDING), ("dashboard_access", ASCENDING), ("role", ASCENDING)])
    db.leads.create_index([("hunter", ASCENDING), ("created_at", DESCENDING)])
    db.leads.create_index([("hunter", ASCENDING), ("status", ASCENDING)])
    logger.info("Index MongoDB vérifiés sur la base '%s'", db.name)


# Dépendance FastAPI pour obtenir la base MongoDB attachée à l'application.
def get_mongo_db(request: Request) -> Database:
    return request.app.state.db
