"""Application configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Game settings loaded from environment variables."""

    # Logging
    log_level: str = "INFO"

    # Box editor interaction (display-space pixels)
    min_drag_distance: float = 10.0  # Shorter drags are treated as clicks
    handle_radius: float = 8.0  # Corner handle hit tolerance
    delete_button_size: float = 20.0  # Square centered on the top-right corner

    # Label chip rendering
    label_font_scale: float = 0.45
    label_thickness: int = 1
    label_padding: int = 3

    # Round timing
    timer_duration_seconds: int = 30
    max_time_bonus: int = 25

    # Labels and persistence keys
    default_label: str = "Whale"
    best_score_key: str = "oceanAnnotationBestScore"

    class Config:
        env_file = ".env"
        env_prefix = "OCEAN_"


settings = Settings()
