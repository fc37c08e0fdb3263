"""Catalog status endpoint."""

import asyncio

from fastapi import APIRouter, Depends

from ..models import CatalogStatus
from ..state import AppState, get_state

router = APIRouter()


@router.get("/status", response_model=CatalogStatus)
async def catalog_status(state: AppState = Depends(get_state)):
    """How many movies the store holds and which embedding space they live in."""
    count = await asyncio.to_thread(state.catalog_count)
    return CatalogStatus(
        store=state.store_backend,
        movie_count=count,
        embedding_model=state.embedder.model,
        embedding_dimensions=state.embedder.dimensions,
        ready=count > 0,
    )
