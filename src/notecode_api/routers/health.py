import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse

from database import DocumentStore
from notecode_api.config.settings import Settings
from notecode_api.dependencies import get_app_settings, get_document_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def welcome():
    return "Welcome to the NoteCode API"


@router.head("/check")
def liveness_check():
    """Header-only liveness probe for uptime monitors."""
    return Response(status_code=status.HTTP_200_OK)


@router.get("/health")
def health_check(
    response: Response,
    settings: Settings = Depends(get_app_settings),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API and the document store along with deployment mode.
    """
    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "database": "ready"
        },
        "ready": True
    }

    try:
        store.ping()
    except Exception as e:
        logger.error(f"Health check could not reach the document store: {e}")
        health_status["components"]["database"] = "unreachable"
        health_status["status"] = "degraded"
        health_status["ready"] = False
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return health_status
