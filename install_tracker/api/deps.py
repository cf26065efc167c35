"""
Dépendances partagées des routes / Shared route dependencies.
Le jeton admin est compare a ADMIN_RESET_TOKEN / The admin token is compared to ADMIN_RESET_TOKEN.
"""

import hmac

from install_tracker.config import settings
from install_tracker.errors import ApiError
from install_tracker.schemas.admin import AdminRequest


def require_admin_token(data: AdminRequest) -> None:
    """Verifier le jeton admin du corps / Check the admin token sent in the body."""
    token = data.admin_token or ""
    if not token or not hmac.compare_digest(token, settings.ADMIN_RESET_TOKEN):
        raise ApiError(401, "Invalid admin token")
