"""
Erreurs API avec enveloppe {error, details} / API errors with the {error, details} envelope.
Utilise par les routes admin et SQL / Used by the admin and SQL routes.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Erreur renvoyee telle quelle au client / Error returned as-is to the client."""

    def __init__(self, status_code: int, error: str, details: Any = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Convertir ApiError en reponse JSON / Convert ApiError into a JSON response."""
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.error)
    else:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
