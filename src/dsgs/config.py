"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # Transport A (HTTP)
    host: str = "127.0.0.1"
    port: int = 3000
    max_connections: int = 100

    # Logging
    log_level: str = "info"
    json_logs: bool = False

    # Constraint templates and specifications
    template_dir: Path = _PACKAGE_DIR / "constraint" / "templates"
    global_spec_path: Path = _PACKAGE_DIR / "specification" / "global-spec.json"
    schema_path: Path = _PACKAGE_DIR / "specification" / "bsl.schema.json"

    # Evolution stage bookkeeping
    evolution_state_path: Path = Path(".dsgs/evolution-state.json")

    # Reported system state
    environment: str = "DEVELOPMENT"
    server_version: str = "1.0.0"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "DSGS_",
    }


settings = Settings()
