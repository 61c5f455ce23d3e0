# main.py: Point d'entrée pour le serveur uvicorn.
# Ce fichier charge la configuration une seule fois et crée l'application
# via l'app factory.

from dotenv import load_dotenv

# Charger les variables d'environnement au tout début
load_dotenv()

from config import Settings
from app_factory import create_app #qui se trouve dans app_factory.py

settings = Settings.from_env()
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
