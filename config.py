# config.py
"""
Configuration centralisée du backend Leopay.

Les valeurs sont lues une seule fois au démarrage (voir main.py) et l'objet
Settings est ensuite passé explicitement à create_app et aux services.
"""

import os
from typing import List

from pydantic import BaseModel

REQUIRED_ENV_VARS = ("MONGO_URI", "JWT_SECRET")


class Settings(BaseModel):
    env: str = "development"
    port: int = 5001

    mongo_uri: str
    mongo_db_name: str = "leopay"

    # Configuration de la sécurité JWT (JSON Web Token)
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expire: str = "7d"  # valeur nominale, la durée réelle est token_lifetime_days
    token_lifetime_days: int = 30

    cors_origin: str = "http://localhost:5173"

    admin_email: str = "admin@leopay.mockello.com"
    admin_password: str = "admin123"
    admin_name: str = "Admin"

    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def cors_origins(self) -> List[str]:
        """Accepte '*', une origine unique ou une liste séparée par des virgules."""
        value = (self.cors_origin or "").strip()
        if not value:
            return ["http://localhost:5173"]
        return [origin.strip() for origin in value.split(",") if origin.strip()]

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

        return cls(
            env=environ.get("APP_ENV", "development"),
            port=int(environ.get("PORT", "5001")),
            mongo_uri=environ["MONGO_URI"],
            mongo_db_name=environ.get("MONGO_DB_NAME", "leopay"),
            jwt_secret=environ["JWT_SECRET"],
            jwt_algorithm=environ.get("JWT_ALGORITHM", "HS256"),
            jwt_expire=environ.get("JWT_EXPIRE", "7d"),
            token_lifetime_days=int(environ.get("TOKEN_LIFETIME_DAYS", "30")),
            cors_origin=environ.get("CORS_ORIGIN", "http://localhost:5173"),
            admin_email=environ.get("ADMIN_EMAIL", "admin@leopay.mockello.com"),
            admin_password=environ.get("ADMIN_PASSWORD", "admin123"),
            admin_name=environ.get("ADMIN_NAME", "Admin"),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        )
