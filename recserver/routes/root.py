"""Root and health endpoints."""

from fastapi import APIRouter, Depends

from ..services import check_provider_available
from ..state import AppState, get_state

router = APIRouter()


@router.get("/")
def root(state: AppState = Depends(get_state)):
    return {
        "name": "Movie Night Recommender API",
        "version": "1.0.0",
        "embedding_model": state.embedder.model,
        "store": state.store_backend,
        "endpoints": {
            "recommendations": ["/api/recommend"],
            "catalog": ["/api/catalog/status"],
            "health": ["/api/health"],
        },
    }


@router.get("/api/health")
def health(state: AppState = Depends(get_state)):
    provider_ok, provider_msg = check_provider_available(state.config)
    return {
        "status": "healthy",
        "embedding_model": state.embedder.model,
        "embedding_dimensions": state.embedder.dimensions,
        "store": state.store_backend,
        "embeddings": {"available": provider_ok, "message": provider_msg},
    }
