import logging
import math
import random
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from settings import get_settings
from src.data.geo import BoundingBox, GeoPoint
from src.data.listings_repo import find_listings, init_db
from src.middleware import RequestLoggingMiddleware
from src.monitoring import get_metrics, record_nearby_search
from src.nearby.models import NearbyServicesResponse
from src.nearby.service import NearbyFilters, find_nearby

settings = get_settings()
BACKEND_ROOT = Path(__file__).resolve().parent
LISTINGS_DB = BACKEND_ROOT / settings.listings_db_path

# Structured logging: include module and level; handlers can add JSON later
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])

# Input validation bounds (public robustness)
LAT_MIN, LAT_MAX = -90.0, 90.0
LNG_MIN, LNG_MAX = -180.0, 180.0
RADIUS_KM_MAX = 500.0
LIMIT_MIN, LIMIT_MAX = 1, 100
K_MIN, K_MAX = 1, 50


def _validate_lat_lng(lat: float | None, lng: float | None) -> GeoPoint:
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="lat and lng are required")
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise HTTPException(status_code=400, detail="lat and lng must be finite numbers")
    if not (LAT_MIN <= lat <= LAT_MAX):
        raise HTTPException(status_code=400, detail=f"lat must be between {LAT_MIN} and {LAT_MAX}")
    if not (LNG_MIN <= lng <= LNG_MAX):
        raise HTTPException(status_code=400, detail=f"lng must be between {LNG_MIN} and {LNG_MAX}")
    return GeoPoint(lat=lat, lng=lng)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(LISTINGS_DB)
    yield


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    """Return consistent JSON error for unhandled exceptions (500). Skip validation/HTTP errors."""
    from fastapi.exceptions import RequestValidationError
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc
    logger.exception("telemetry unhandled_exception path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again later."},
    )


# Order: last added = outermost. RequestLogging wraps CORS so every response is logged.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/favicon.ico", include_in_schema=False)
@limiter.exempt
def favicon(request: Request):
    """Return 204 so browser favicon requests don't log 404."""
    return Response(status_code=204)


@app.get("/health")
@limiter.exempt
def health(request: Request):
    logger.info("telemetry route=health")
    return {"status": "ok"}


@app.get("/metrics")
@limiter.exempt
def metrics(request: Request):
    """Request counts, nearby-search counters and uptime."""
    return get_metrics()


# --- Nearby services (k-means over listings around the user) ---


def _find_listings(category: str | None, text_query: str | None, bbox: BoundingBox | None) -> list:
    return find_listings(LISTINGS_DB, category=category, text_query=text_query, bbox=bbox)


def _request_rng() -> random.Random | None:
    if settings.kmeans_seed is None:
        return None
    return random.Random(settings.kmeans_seed)


@app.get("/services/nearby", response_model=NearbyServicesResponse)
@limiter.limit(settings.rate_limit)
def services_nearby(
    request: Request,
    lat: float | None = None,
    lng: float | None = None,
    k: int | None = None,
    page: int = 1,
    limit: int | None = None,
    radius_km: float | None = None,
    category: str = "",
    q: str = "",
):
    """
    Services in the k-means cluster nearest to (lat, lng), sorted by distance.
    `total` counts the selected cluster only; `centroid` is null when nothing is in range.
    """
    requester = _validate_lat_lng(lat, lng)
    limit = settings.nearby_default_limit if limit is None else limit
    radius = settings.nearby_default_radius_km if radius_km is None else radius_km
    if page < 1:
        raise HTTPException(status_code=400, detail="page must be >= 1")
    if not (LIMIT_MIN <= limit <= LIMIT_MAX):
        raise HTTPException(status_code=400, detail=f"limit must be between {LIMIT_MIN} and {LIMIT_MAX}")
    if not (math.isfinite(radius) and 0 < radius <= RADIUS_KM_MAX):
        raise HTTPException(status_code=400, detail=f"radius_km must be greater than 0 and at most {RADIUS_KM_MAX}")
    if k is not None and not (K_MIN <= k <= K_MAX):
        raise HTTPException(status_code=400, detail=f"k must be between {K_MIN} and {K_MAX}")

    filters = NearbyFilters(
        category=category.strip() or None,
        text_query=q.strip() or None,
        radius_km=radius,
        k=k,
    )
    logger.info("telemetry route=services_nearby radius_km=%s k=%s page=%s limit=%s", radius, k, page, limit)
    try:
        result = find_nearby(
            requester,
            filters,
            page,
            limit,
            find_listings=_find_listings,
            rng=_request_rng(),
            max_iter=settings.kmeans_max_iter,
            tol=settings.kmeans_tol,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("telemetry services_nearby_error")
        raise HTTPException(status_code=500, detail="Nearby search failed. Please try again later.") from e
    record_nearby_search(result.k, result.total)
    return NearbyServicesResponse.from_result(result)
