from pydantic_settings import BaseSettings

MB = 1024 * 1024

DEVELOPMENT_ORIGINS = [
    "http://localhost:8081",
    "http://localhost:3000",
    "http://localhost:19006",
    "capacitor://localhost",
    "ionic://localhost",
    "https://hdfhr.netlify.app",
]
PRODUCTION_ORIGINS = ["https://hdfhr.netlify.app"]


class Settings(BaseSettings):
    environment: str = "production"

    # Microsoft Graph (client-credentials flow against the admin's drive)
    microsoft_tenant_id: str = ""
    microsoft_client_id: str = ""
    microsoft_client_secret: str = ""
    microsoft_admin_email: str = ""
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    login_base_url: str = "https://login.microsoftonline.com"
    graph_timeout_seconds: float = 60.0

    database_url: str = "sqlite:///./hrdocs.db"

    additional_allowed_origins: str = ""

    create_share_links: bool = True
    share_link_type: str = "view"
    share_link_scope: str = "anonymous"

    retry_attempts: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 5.0

    max_file_name_length: int = 100
    api_prefix: str = "/functions/v1"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    @property
    def max_upload_bytes(self) -> int:
        return 20 * MB if self.is_development else 10 * MB

    @property
    def allowed_origins(self) -> list[str]:
        if self.is_development:
            return list(DEVELOPMENT_ORIGINS)
        extra = [o.strip() for o in self.additional_allowed_origins.split(",") if o.strip()]
        return PRODUCTION_ORIGINS + extra

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.is_development else "ERROR"

    model_config = {"env_prefix": "HRDOCS_"}
