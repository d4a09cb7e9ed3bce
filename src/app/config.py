"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "FLOORMAP"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Building feature services (ArcGIS FeatureServer, GeoJSON output)
    units_url: str = (
        "https://services-eu1.arcgis.com/3UOELksVE9tSHPLL/arcgis/rest/services/"
        "Units/FeatureServer/2/query?where=1%3D1&outFields=*&f=geojson"
    )
    details_url: str = (
        "https://services-eu1.arcgis.com/3UOELksVE9tSHPLL/arcgis/rest/services/"
        "Details/FeatureServer/1/query?where=1%3D1&outFields=*&f=geojson"
    )
    fetch_timeout: float = 30.0
    load_on_startup: bool = True

    # Basemap style served to the client
    map_style_url: str = "https://basemaps.cartocdn.com/gl/voyager-nolabels-gl-style/style.json"

    # Initial camera (replaced by the orientation fit once data loads)
    initial_longitude: float = 17.9128075
    initial_latitude: float = 59.2890342
    initial_zoom: float = 19.0
    max_zoom: float = 33.0
    home_zoom: float = 20.2
    pitch_3d: float = 70.0

    # Orientation fit: building-specific offset between principal axis
    # and renderer bearing, degrees
    bearing_offset: float = 83.0

    # Floor buckets: level identifier synonyms (matched case-insensitively)
    ground_levels: list[str] = ["BV", "ENTRÉ", "VÅN 1"]
    upper_levels: list[str] = ["ÖV", "OV", "VÅN 2", "2V"]
    floor_height: float = 2.7
    ground_elevation: float = 0.1

    # Altitude floor classifier
    altitude_smoothing: float = 0.2
    altitude_up_threshold: float = 1.5
    altitude_down_threshold: float = 1.0
    altitude_lagged: bool = True  # check pre-update smoothed value (reference behaviour)

    # Client geolocation options
    location_high_accuracy: bool = True
    location_maximum_age_ms: int = 0
    location_timeout_ms: int = 10_000


settings = Settings()
