"""
FastAPI Web Interface for the Wake Ritual

Exposes the bloom store and the token-based remote ritual over HTTP, so
clients without an interactive terminal can still be woken.
"""

import logging
from typing import Optional, List, Union

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from .. import __version__
from ..config import RitualConfig
from ..errors import BloomNotFoundError, InvalidTokenError, PersistenceFailure, RitualError
from ..kernel.bloom import Bloom
from ..matching.classifier import MatchClassifier
from ..ritual.remote import (
    WakeBeginResponse,
    WakeErrorResponse,
    WakeRespondResponse,
    WakeSkipResponse,
    begin_ritual,
    respond_ritual,
    skip_ritual,
)
from ..storage.bloom_store import BloomStore

logger = logging.getLogger(__name__)


# Pydantic models for API request/response
class BloomRequest(BaseModel):
    """Request model for creating a bloom."""
    title: str = Field(..., min_length=1, description="Bloom title")
    body: Optional[str] = Field(None, description="Content revealed after the ritual")
    resonance: float = Field(0.5, ge=0.0, le=1.0, description="Resonance in [0, 1]")
    resonance_type: Optional[str] = Field(None, description="Resonance label")
    wake_phrases: List[str] = Field(default_factory=list, description="Wake phrases")
    wake_order: Optional[int] = Field(None, description="Explicit ritual position")


class BloomResponse(BaseModel):
    """Response model for bloom data; wake phrases are never returned."""
    id: str
    title: str
    resonance: float
    resonance_type: Optional[str] = None
    wake_order: Optional[int] = None
    has_wake_phrase: bool
    activation_count: int = 0

    @classmethod
    def from_bloom(cls, bloom: Bloom) -> "BloomResponse":
        return cls(
            id=bloom.id,
            title=bloom.title,
            resonance=bloom.resonance,
            resonance_type=bloom.resonance_type,
            wake_order=bloom.wake_order,
            has_wake_phrase=bloom.has_wake_phrase,
            activation_count=bloom.activation_count,
        )


class BloomUpdateRequest(BaseModel):
    """Partial update; only the fields sent are changed. A null wake_order clears it."""
    title: Optional[str] = Field(None, min_length=1)
    body: Optional[str] = None
    resonance: Optional[float] = Field(None, ge=0.0, le=1.0)
    resonance_type: Optional[str] = None
    wake_order: Optional[int] = None
    add_phrase: Optional[str] = Field(None, min_length=1)
    remove_phrase: Optional[str] = None


class PhraseRequest(BaseModel):
    phrase: str = Field(..., min_length=1, description="Wake phrase to append")


class BeginRequest(BaseModel):
    limit: int = Field(default=20, ge=1, le=100, description="Maximum blooms in the ritual")
    activate: bool = Field(default=True, description="Mark blooms as woken")


class RespondRequest(BaseModel):
    session: str = Field(..., min_length=1, description="Signed session token")
    bloom_id: str = Field(..., min_length=1)
    phrase: str = Field(..., description="Recall attempt")


class SkipRequest(BaseModel):
    session: str = Field(..., min_length=1, description="Signed session token")
    bloom_id: str = Field(..., min_length=1)


# Create FastAPI application
app = FastAPI(
    title="Wake Ritual API",
    description="Recall ritual over a personal knowledge store",
    version=__version__,
)

# Global store and configuration
store: Optional[BloomStore] = None
config: Optional[RitualConfig] = None


def get_config() -> RitualConfig:
    """Get or create the configuration."""
    global config
    if config is None:
        config = RitualConfig.from_env()
    return config


def get_store() -> BloomStore:
    """Get or create the bloom store."""
    global store
    if store is None:
        store = BloomStore(get_config().storage_dir)
    return store


def _ritual_error(e: Exception) -> HTTPException:
    if isinstance(e, InvalidTokenError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, BloomNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=409, detail=str(e))


# ============================================================================
# Bloom Endpoints
# ============================================================================

@app.get("/blooms", response_model=List[BloomResponse])
async def list_blooms(limit: int = Query(20, ge=1, le=100)):
    """List blooms in ritual order without activating them."""
    blooms = get_store().fetch_candidates(limit, activate=False)
    return [BloomResponse.from_bloom(b) for b in blooms]


@app.post("/blooms", response_model=BloomResponse, status_code=201)
async def create_bloom(request: BloomRequest):
    """Create a bloom."""
    try:
        bloom = Bloom(
            title=request.title,
            body=request.body,
            resonance=request.resonance,
            resonance_type=request.resonance_type,
            wake_phrases=request.wake_phrases,
            wake_order=request.wake_order,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not get_store().store(bloom):
        raise HTTPException(status_code=500, detail="Failed to store bloom")
    return BloomResponse.from_bloom(bloom)


@app.patch("/blooms/{bloom_id}", response_model=BloomResponse)
async def update_bloom(bloom_id: str, request: BloomUpdateRequest):
    """Edit a bloom, e.g. to re-sequence it with wake_order."""
    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        bloom = get_store().update(bloom_id, **changes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    if bloom is None:
        raise HTTPException(status_code=404, detail="Bloom not found")
    return BloomResponse.from_bloom(bloom)


@app.post("/blooms/{bloom_id}/phrases", response_model=BloomResponse)
async def add_phrase(bloom_id: str, request: PhraseRequest):
    """Append a wake phrase to a bloom."""
    bloom_store = get_store()
    if bloom_store.get(bloom_id) is None:
        raise HTTPException(status_code=404, detail="Bloom not found")

    if not bloom_store.append_phrase(bloom_id, request.phrase):
        raise HTTPException(status_code=500, detail="Failed to save wake phrase")
    return BloomResponse.from_bloom(bloom_store.get(bloom_id))


# ============================================================================
# Ritual Endpoints
# ============================================================================

@app.post("/ritual/begin", response_model=WakeBeginResponse)
async def ritual_begin(request: BeginRequest):
    """Start a token-based ritual and return the first prompt."""
    blooms = get_store().fetch_candidates(request.limit, activate=request.activate)
    try:
        return begin_ritual(blooms, get_config().session_secret)
    except RitualError as e:
        raise _ritual_error(e)


@app.post("/ritual/respond", response_model=Union[WakeRespondResponse, WakeErrorResponse])
async def ritual_respond(request: RespondRequest):
    """Submit a recall attempt for the current bloom."""
    cfg = get_config()
    try:
        return respond_ritual(
            get_store(),
            request.bloom_id,
            request.phrase,
            request.session,
            cfg.session_secret,
            classifier=MatchClassifier(**cfg.to_classifier_kwargs()),
            max_attempts=cfg.max_attempts,
        )
    except (RitualError, InvalidTokenError) as e:
        raise _ritual_error(e)


@app.post("/ritual/skip", response_model=Union[WakeSkipResponse, WakeErrorResponse])
async def ritual_skip(request: SkipRequest):
    """Skip the current bloom."""
    try:
        return skip_ritual(get_store(), request.bloom_id, request.session, get_config().session_secret)
    except (RitualError, InvalidTokenError) as e:
        raise _ritual_error(e)


# ============================================================================
# System Endpoints
# ============================================================================

@app.get("/stats")
async def get_stats():
    """Get bloom store statistics."""
    return get_store().get_stats()


@app.get("/health")
async def health_check():
    """
    Health check endpoint.
    """
    return {"status": "healthy", "service": "wakeritual"}


@app.get("/")
async def root():
    """
    API root endpoint with basic information.
    """
    return {
        "service": "Wake Ritual",
        "version": __version__,
        "endpoints": {
            "blooms": "GET /blooms or POST /blooms",
            "update": "PATCH /blooms/{id}",
            "add_phrase": "POST /blooms/{id}/phrases",
            "begin": "POST /ritual/begin",
            "respond": "POST /ritual/respond",
            "skip": "POST /ritual/skip",
            "stats": "GET /stats",
            "health": "GET /health",
        },
    }
