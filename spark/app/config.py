"""Application configuration loaded from .env and defaults."""
from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    db_path: Path = PROJECT_ROOT / "data" / "spark.db"
    web_host: str = "127.0.0.1"
    web_port: int = 8787
    llm_provider: str = "anthropic"
    anthropic_api_key: str = ""
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_version: str = "2023-06-01"
    llm_timeout: float = 60.0
    spark_max_tokens: int = 400
    scout_max_tokens: int = 1000
    scout_expand_max_tokens: int = 500
    max_active_ideas: int = 5
    max_pdf_bytes: int = 5 * 1024 * 1024
    max_image_bytes: int = 3 * 1024 * 1024
    url_meta_timeout: float = 8.0
    log_path: Path = PROJECT_ROOT / "data" / "logs" / "app.log"
    log_level: str = "INFO"
    default_scout_zones: str = "technology,culture,work,creativity"

    def get_default_zones(self) -> list[str]:
        """Parse DEFAULT_SCOUT_ZONES env var into a list of topic names."""
        if not self.default_scout_zones:
            return []
        return [z.strip() for z in self.default_scout_zones.split(",") if z.strip()]

    @property
    def llm_enabled(self) -> bool:
        return self.llm_provider == "anthropic" and bool(self.anthropic_api_key)

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"

def get_settings() -> Settings:
    return Settings()
