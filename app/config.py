from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):

    postgres_db: str = "ndc_features"
    postgres_user: str = "ndc_usr"
    postgres_password: str = "eXaMpLe_pWd"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    database_url: Optional[str] = None

    api_title: str = "NDC Features API"
    api_version: str = "1.0.0"
    api_description: str = (
        "API for tracking airline NDC feature implementations, "
        "with a natural-language chat over the data"
    )

    # Chat completion API
    llm_api_key: Optional[str] = None
    llm_base_url: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 30.0

    # Context sizes handed to the model
    context_general_sample_size: int = 10
    context_comparison_sample_size: int = 15
    context_fallback_size: int = 5

    seed_on_startup: bool = True

    log_level: str = "INFO"

    environment: str = "development"

    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
