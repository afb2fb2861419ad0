from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Required from environment (.env / deployment secrets)
    database_url: str
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    app_env: str = "development"  # development, staging, production

    # Bedrock LLM for match scoring
    bedrock_llm_model_id: str = "mistral.ministral-3-8b-instruct"
    bedrock_llm_enabled: bool = True
    aws_region: str = "us-west-2"
    llm_timeout_seconds: float = 15.0
    llm_temperature: float = 0.3
    llm_max_tokens: int = 1000
    match_description_max_chars: int = 1000

    # Batch scoring: groups of N jobs, fixed pause between groups
    match_batch_size: int = 5
    match_batch_delay_seconds: float = 1.0
    match_refresh_job_limit: int = 200
    match_refresh_on_profile_update: bool = True

    # CORS origins as comma-separated values
    # Example: "https://app.example.com,https://admin.example.com"
    cors_allow_origins: str = "http://localhost:3000"

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # Request guards
    rate_limit_auth_per_min: int = 20
    rate_limit_match_refresh_per_min: int = 5
    rate_limit_auto_apply_per_min: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
