from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Security: Read from .env, never hardcode keys here
    OPENAI_API_KEY: str | None = None
    TAVILY_API_KEY: str | None = None # Optional: without it steps use model knowledge only

    # Model Configuration
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_CHAT_MODEL: str = "gpt-4o"
    MODEL_TAG: str = "Fast"

    # Generation Parameters
    CHAT_TEMPERATURE: float = 0.7  # Planning and step calls stay at 0.0

    # Web Search
    TAVILY_URL: str = "https://api.tavily.com/search"
    TAVILY_MAX_RESULTS: int = 5
    STRICT_SEARCH_ROUTING: bool = False

    # Remote Browser Sandbox (optional)
    SANDBOX_URL: str | None = None
    BROWSER_READY_TIMEOUT: float = 15.0
    BROWSER_NAVIGATION_TIMEOUT: float = 10.0

    # Plan Execution
    PLAN_STEP_COUNT: int = 4
    LOG_LINE_DELAY: float = 0.3
    STEP_PAUSE: float = 0.5

    # Access Control
    GUEST_INTERACTION_LIMIT: int = 3

    # Persistence
    SESSION_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite:///./agentic_chat.db"

    LOG_LEVEL: str = "INFO"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()
