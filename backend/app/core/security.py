import secrets

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.db.session import get_db  # noqa: F401  (routes import get_db from here)

bearer_scheme = HTTPBearer(auto_error=False)


def require_cron(creds: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> None:
    if not settings.CRON_SECRET_TOKEN:
        raise HTTPException(status_code=503, detail="Cron endpoints are disabled")

    if creds is None or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")

    if not secrets.compare_digest(creds.credentials, settings.CRON_SECRET_TOKEN):
        raise HTTPException(status_code=401, detail="Invalid token")
