"""Config Port - application configuration schema."""

from pydantic import BaseModel, ConfigDict


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000


class SecurityConfig(BaseModel):
    """Security settings."""

    rate_limit_requests_per_minute: int = 100
    cors_origins: list[str] = ["http://localhost:5173"]


class WorkflowsConfig(BaseModel):
    """Workflow catalog settings."""

    model_config = ConfigDict(extra="ignore")

    default: str = "waterfall"  # Used when start omits a workflow name
    # Allow-list of bundled workflow domains ("code", "office", ...). Empty = no filtering.
    domains: list[str] = []
    # Explicit bundled workflows directory; empty = search package/install locations.
    bundled_dir: str = ""


class PersistenceConfig(BaseModel):
    """Persistence settings (paths are relative to each project)."""

    state_dir: str = ".vibe"
    database_file: str = "conversation-state.sqlite"


class AppConfig(BaseModel):
    """Root application configuration."""

    server: ServerConfig = ServerConfig()
    security: SecurityConfig = SecurityConfig()
    workflows: WorkflowsConfig = WorkflowsConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    log_level: str = "INFO"
    log_file: str = ""  # Optional path; if set, logs also go to file with rotation
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3

