from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str
    jwt_secret_key: str = "your-secret-key-change-in-production"  # Default for development

    # Comma-separated, e.g. "ops@example.com,lead@example.com"
    admin_emails: str = ""

    google_client_id: str = ""
    google_client_secret: str = ""
    google_calendar_id: str = "primary"
    calendar_time_zone: str = "Asia/Tokyo"
    http_timeout_seconds: float = 10.0

    session_title: str = "Group Consultation"
    paired_session_title: str = "Instructor Dialogue"

    cors_origins: str = ""
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def admin_email_list(self) -> list[str]:
        return [e.strip().lower() for e in self.admin_emails.split(",") if e.strip()]

settings = Settings()
