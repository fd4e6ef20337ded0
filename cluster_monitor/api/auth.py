from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from cluster_monitor.api.schemas.auth import TokenData
from cluster_monitor.config import settings

# Sécurité Bearer Token (les tokens sont émis par le service d'authentification)
security = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> TokenData:
    """Vérifie et décode un token JWT"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _credentials_exception()

    username: Optional[str] = payload.get("sub")
    if username is None:
        raise _credentials_exception()

    return TokenData(username=username, role=payload.get("role"))


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenData:
    """Récupère l'utilisateur courant à partir du token"""
    if credentials is None:
        raise _credentials_exception("Not authenticated")
    return verify_token(credentials.credentials)


def require_monitoring_role(current_user: TokenData = Depends(get_current_user)) -> TokenData:
    """Vérifie que le rôle de l'utilisateur donne accès au monitoring"""
    if current_user.role not in settings.ALLOWED_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user
