import os
import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

logger = logging.getLogger(__name__)

# Only POST /analysis/run is guarded; read endpoints stay open.
# Without ADMIN_TOKEN the guarded endpoints refuse every caller.
security = HTTPBearer(auto_error=False)


def require_admin(creds: Optional[HTTPAuthorizationCredentials] = Security(security)) -> bool:
    admin = os.getenv("ADMIN_TOKEN")
    if not admin:
        logger.error("ADMIN_TOKEN not set - audit trigger endpoint is disabled")
        raise HTTPException(status_code=503, detail="ADMIN_TOKEN not configured")
    if creds is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    if not secrets.compare_digest(creds.credentials or "", admin):
        logger.warning("Rejected audit trigger with an invalid token")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return True
