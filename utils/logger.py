import logging
import time

from fastapi import Request

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

request_log = logging.getLogger("leopay.request")


def setup_logging(settings) -> None:
    """Configure le logging racine selon le niveau défini dans Settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


async def request_logger(request: Request, call_next):
    """Middleware HTTP: journalise méthode, chemin, statut et durée de chaque requête."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    request_log.info(
        "%s %s %s %.3fms ip=%s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request.client.host if request.client else "-",
    )
    return response
