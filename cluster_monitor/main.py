import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from cluster_monitor.api.middleware import setup_middlewares
from cluster_monitor.api.router import router
from cluster_monitor.config import settings
from cluster_monitor.core.logging import setup_logging
from cluster_monitor.dependencies import get_k8s_client

setup_logging(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Démarrage de l'application...")

    if settings.K8S_HEALTH_CHECK_ON_STARTUP:
        # Échec non bloquant
        try:
            await get_k8s_client().health_check()
            logger.info("✅ Connexion Kubernetes établie")
        except Exception as e:
            logger.error(f"❌ Vérification de la connexion Kubernetes échouée: {e}")

    yield

    logger.info("✅ Application arrêtée proprement")


app = FastAPI(
    title=settings.APP_NAME,
    description="API de monitoring de cluster Kubernetes",
    version="1.0.0",
    lifespan=lifespan
)

setup_middlewares(app)
app.include_router(router)


if __name__ == "__main__":
    url = "http://localhost:8000/docs"
    print(f"🚀 {settings.APP_NAME} démarrée !")
    print(f"📚 Documentation : {url}")
    uvicorn.run("cluster_monitor.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
