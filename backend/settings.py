from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Services Marketplace API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    # CORS: "*" for dev; in production set to comma-separated origins, e.g. "https://app.example.com,https://admin.example.com"
    cors_origins: str = "*"
    listings_db_path: str = "data/listings.db"  # Path relative to backend root, or absolute (run scripts/seed_listings.py first)
    rate_limit: str = "100/minute"  # slowapi default limit per client IP

    # Nearby search
    nearby_default_radius_km: float = 15.0
    nearby_default_limit: int = 20
    kmeans_max_iter: int = 100
    kmeans_tol: float = 1e-4  # meters of centroid movement
    kmeans_seed: int | None = None  # Set for reproducible clustering (tests, debugging). Unset = fresh seed per request.


def get_settings() -> Settings:
    return Settings()
