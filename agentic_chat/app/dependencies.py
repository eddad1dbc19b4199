"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the application's services.
It is responsible for:
1. Instantiating the core Singleton services (Repositories, Adapters, Tools).
2. Wiring them together (e.g., building one TaskOrchestrator per chat session
   from the shared LLM provider and search provider).
3. Managing the lifecycle of these objects using @lru_cache to ensure
   they are created only once per application process.

Tests override get_chat_service (or its inputs) through FastAPI's
dependency_overrides.
"""


from functools import lru_cache
from typing import List, Optional
from fastapi import Depends

from ..config import settings
from ..llm.interface import LLMProvider
from ..llm.adapters.openai_adapter import OpenAIAdapter
from ..repositories.session import SessionRepository, InMemorySessionRepository, SqlSessionRepository
from ..execution.engine import TaskOrchestrator
from ..execution.executor import StepExecutor
from ..execution.planner import PlanSynthesizer
from ..services.access import AccessGate, GuestAccessGate
from ..services.chat import ChatService
from ..tools.browser import BrowserSession, HttpBrowserSandbox
from ..tools.search import SearchProvider, TavilySearchProvider

from ..infrastructure.database.connection import init_db

_live_services: List[ChatService] = []

# LLM Provider (Singleton)
@lru_cache()
def get_llm_provider() -> LLMProvider:
    return OpenAIAdapter(
        api_key=settings.OPENAI_API_KEY,
        model_name=settings.OPENAI_MODEL,
        chat_model_name=settings.OPENAI_CHAT_MODEL,
    )

# Web Search (Singleton, optional)
@lru_cache()
def get_search_provider() -> Optional[SearchProvider]:
    if not settings.TAVILY_API_KEY:
        return None
    return TavilySearchProvider(
        api_key=settings.TAVILY_API_KEY,
        url=settings.TAVILY_URL,
        max_results=settings.TAVILY_MAX_RESULTS,
    )

# Session Repository (Singleton)
# Note: In-memory storage must be a singleton so data persists across requests!
@lru_cache()
def get_session_repository() -> SessionRepository:
    if settings.SESSION_BACKEND == "sql":
        init_db()
        return SqlSessionRepository()
    return InMemorySessionRepository()

# Access Gate (Singleton)
@lru_cache()
def get_access_gate() -> AccessGate:
    return GuestAccessGate(interaction_limit=settings.GUEST_INTERACTION_LIMIT)


def build_orchestrator(
    llm: LLMProvider, search: Optional[SearchProvider]
) -> TaskOrchestrator:
    """One orchestrator (and remote browser) per chat session."""
    browser = None
    if settings.SANDBOX_URL:
        browser = BrowserSession(
            HttpBrowserSandbox(settings.SANDBOX_URL),
            ready_timeout=settings.BROWSER_READY_TIMEOUT,
            navigation_timeout=settings.BROWSER_NAVIGATION_TIMEOUT,
        )
    executor = StepExecutor(
        llm_provider=llm,
        search_provider=search,
        browser=browser,
        strict_search=settings.STRICT_SEARCH_ROUTING,
    )
    return TaskOrchestrator(
        llm_provider=llm,
        executor=executor,
        planner=PlanSynthesizer(llm, step_count=settings.PLAN_STEP_COUNT),
        model_tag=settings.MODEL_TAG,
        log_line_delay=settings.LOG_LINE_DELAY,
        step_pause=settings.STEP_PAUSE,
        chat_temperature=settings.CHAT_TEMPERATURE,
    )

# The Chat Service (Singleton Service)
@lru_cache()
def get_chat_service(
    session_repo: SessionRepository = Depends(get_session_repository),
    llm: LLMProvider = Depends(get_llm_provider),
    search: Optional[SearchProvider] = Depends(get_search_provider),
    gate: AccessGate = Depends(get_access_gate),
) -> ChatService:
    """
    Injects all necessary components into the ChatService.
    """
    service = ChatService(
        session_repository=session_repo,
        orchestrator_factory=lambda: build_orchestrator(llm, search),
        access_gate=gate,
    )
    _live_services.append(service)
    return service


async def close_chat_services():
    """Stops running tasks and releases remote browsers at shutdown."""
    while _live_services:
        await _live_services.pop().shutdown()
