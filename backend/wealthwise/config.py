from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "WealthWise API"
    database_url: str = ""
    # Access tokens are issued by the hosted auth provider and signed with its JWT secret.
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"  # override via GEMINI_MODEL in .env if needed
    gemini_timeout_seconds: float = 30
    # Comma-separated origins for CORS. Use "*" only for local development.
    cors_allow_origins: str = "*"
    # Used when the user has no profile row yet.
    default_currency: str = "USD"
    # When enabled the advisor prompt omits the user's name.
    advice_redact_personal_details: bool = False
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
