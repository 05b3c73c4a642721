"""mdskills configuration — loaded from environment / .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="MDSKILLS_", extra="ignore")

    env: str = "development"
    log_level: str = "INFO"
    secret_key: str = "change-me"  # signs access tokens
    admin_secret: str = ""  # exchanged for an admin token at /api/admin/auth
    database_url: str = "sqlite+aiosqlite:///./mdskills.db"
    db_echo: bool = False  # log every SQL statement
    cors_origins: list[str] = ["http://localhost:3000"]

    # Listing
    page_size: int = 20
    max_page_size: int = 50

    # GitHub import
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    import_delay_seconds: float = 0.5  # pause between batch imports (rate limit)

    access_token_hours: int = 24

    @property
    def github_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "mdskills-importer",
        }
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers


settings = Settings()
