"""FLOORMAP - Indoor floor-plan map service.

Main FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import Settings, settings
from app.routers.indoor import router as indoor_router
from floormap.altitude import AltitudeFloorClassifier
from floormap.fetch import FeatureFetchError
from floormap.floors import FloorClassifier
from floormap.session import MapSession
from floormap.view import ViewState


# ---------------------------------------------------------------------------
# Session construction
# ---------------------------------------------------------------------------

def create_session(cfg: Settings = settings) -> MapSession:
    """Build a MapSession from settings (nothing is fetched yet)."""
    return MapSession(
        classifier=FloorClassifier.from_synonyms(cfg.ground_levels, cfg.upper_levels),
        altitude=AltitudeFloorClassifier(
            up_threshold=cfg.altitude_up_threshold,
            down_threshold=cfg.altitude_down_threshold,
            smoothing=cfg.altitude_smoothing,
            floor_height=cfg.floor_height,
            ground_elevation=cfg.ground_elevation,
            lagged=cfg.altitude_lagged,
        ),
        initial_view=ViewState(
            longitude=cfg.initial_longitude,
            latitude=cfg.initial_latitude,
            zoom=cfg.initial_zoom,
            max_zoom=cfg.max_zoom,
        ),
        bearing_offset=cfg.bearing_offset,
        home_zoom=cfg.home_zoom,
    )


async def _load_session(session: MapSession, cfg: Settings = settings) -> None:
    """Fetch building data; a failure leaves the session in its error state."""
    logger.info("Fetching building features...")
    try:
        await session.load(cfg.units_url, cfg.details_url, timeout=cfg.fetch_timeout)
    except FeatureFetchError:
        # Recorded on the session; map endpoints report it as 503
        logger.error("Map initialization aborted: building data unavailable")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info("  FLOORMAP v0.1.0 - INITIALIZING")
    logger.info("=" * 60)

    session = create_session()
    app.state.session = session

    if settings.load_on_startup:
        await _load_session(session)
    else:
        logger.info("Startup load disabled (LOAD_ON_STARTUP=false)")

    logger.info("FLOORMAP ONLINE" if session.loaded else "FLOORMAP ONLINE (map unavailable)")

    yield

    session.stop_tracking()
    logger.info("FLOORMAP shutting down...")


# Create FastAPI app
app = FastAPI(
    title="FLOORMAP",
    description="Indoor floor-plan map with live room location",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(indoor_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": "0.1.0",
        "system": "FLOORMAP",
    }


@app.get("/api/status")
async def status():
    """Map load status; ``error`` is set when startup fetching failed."""
    session = getattr(app.state, "session", None)
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "loaded": bool(session and session.loaded),
        "error": session.load_error if session is not None else None,
    }


def main() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
