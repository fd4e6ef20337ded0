from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import List, Optional
import os
from pathlib import Path

root_dir = Path(__file__).parent.parent
env_path = root_dir / ".env"
load_dotenv(env_path)


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Cluster Monitoring API"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Kubernetes
    KUBECONFIG_PATH: Optional[str] = None
    KUBE_CONTEXT: Optional[str] = None
    K8S_REQUEST_TIMEOUT: float = 30.0
    K8S_HEALTH_CHECK_ON_STARTUP: bool = True
    SYSTEM_NAMESPACE: str = "kube-system"

    # Monitoring
    DEFAULT_TAIL_LINES: int = 100
    DASHBOARD_WARNINGS_LIMIT: int = 5
    DASHBOARD_RECENT_EVENTS_LIMIT: int = 10
    DASHBOARD_RECENT_EVENTS_HOURS: int = 1

    # Security (JWT émis par le service d'authentification)
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ALLOWED_ROLES: List[str] = ["user", "admin"]

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"
        case_sensitive = True


try:
    settings = Settings()
except Exception as e:
    print(f"❌ Settings creation failed: {e}")
    print(f"❌ Available environment variables:")
    for key, value in os.environ.items():
        if any(prefix in key for prefix in ['K8S', 'KUBE', 'LOG', 'APP', 'DEBUG', 'DASHBOARD', 'SECRET']):
            print(f"   {key}: {'*' * min(8, len(value)) if 'KEY' in key or 'SECRET' in key else value}")
    raise
