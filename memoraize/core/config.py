from typing import Literal, Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PostgresSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    host: str = Field(default="localhost", alias="POSTGRES_HOST")
    port: int = Field(default=5432, alias="POSTGRES_DB_PORT")
    db_name: str = Field(default="memoraize", alias="POSTGRES_DB_NAME")
    user: str = Field(default="postgres", alias="POSTGRES_DB_USER")
    password: str = Field(default="postgres", alias="POSTGRES_DB_PASSWORD")
    # Full SQLAlchemy URL; wins over the POSTGRES_* parts when set
    url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    @computed_field
    def connection_string(self) -> str:
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db_name}"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    token_lifetime_seconds: int = Field(
        default=3600, alias="JWT_TOKEN_LIFETIME_SECONDS"
    )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="memoraize", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    jwt_secret: str = Field(alias="JWT_SECRET")

    @computed_field
    def is_production(self) -> bool:
        return self.mode == "prod"

    @computed_field
    def is_testing(self) -> bool:
        return self.mode == "test"


class GenerationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    # Where the views reach the generation contract (GET/POST <base_url>/generate)
    base_url: str = Field(
        default="http://localhost:9000/api", alias="GENERATION_BASE_URL"
    )
    timeout_seconds: float = Field(default=60.0, alias="GENERATION_TIMEOUT_SECONDS")

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    flashcards_model: str = Field(
        default="gemini-2.0-flash", alias="GENERATION_FLASHCARDS_MODEL"
    )
    recommendation_model: str = Field(
        default="gemini-2.0-flash", alias="GENERATION_RECOMMENDATION_MODEL"
    )


class ExtractionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    ocr_lang: str = Field(default="eng", alias="OCR_LANG")


class ViewSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    flip_key: Literal["position", "id"] = Field(default="position", alias="VIEW_FLIP_KEY")
    cascade_collection_delete: bool = Field(
        default=False, alias="VIEW_CASCADE_COLLECTION_DELETE"
    )
    session_idle_seconds: int = Field(default=1800, alias="VIEW_SESSION_IDLE_SECONDS")
    session_sweep_seconds: int = Field(default=60, alias="VIEW_SESSION_SWEEP_SECONDS")
    session_cookie: str = Field(default="memoraize_view", alias="VIEW_SESSION_COOKIE")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    postgres: PostgresSettings = Field(default_factory=lambda: PostgresSettings())
    jwt: JWTSettings = Field(default_factory=lambda: JWTSettings())
    generation: GenerationSettings = Field(default_factory=lambda: GenerationSettings())
    extraction: ExtractionSettings = Field(default_factory=lambda: ExtractionSettings())
    views: ViewSettings = Field(default_factory=lambda: ViewSettings())


settings = Settings()
