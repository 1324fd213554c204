"""Path utilities for ensuring directories exist."""
from spark.app.config import get_settings

def ensure_dirs() -> None:
    settings = get_settings()
    for d in [
        settings.db_path.parent,
        settings.log_path.parent,
    ]:
        d.mkdir(parents=True, exist_ok=True)
