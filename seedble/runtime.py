"""Process-wide application wiring shared across Streamlit reruns.

Streamlit reruns page scripts in a fresh namespace; this module is imported
normally and cached in sys.modules, so the context built here survives reruns
and is shared by every page.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading

from seedble.advisor import LLMAdvisor
from seedble.data_store import JsonDataStore
from seedble.demo_data import seed_demo_data
from seedble.llm_config import create_default_llm
from seedble.services import AssessmentService, ProjectService, ReviewService
from seedble.settings import SeedbleSettings, load_settings


logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: SeedbleSettings
    store: JsonDataStore
    advisor: LLMAdvisor | None
    projects: ProjectService
    reviews: ReviewService
    assessments: AssessmentService


def build_context(settings: SeedbleSettings, seed_demo: bool = True) -> AppContext:
    """Wire the store, optional advisor and services from *settings*."""
    store = JsonDataStore(settings.data_path)
    if seed_demo:
        seed_demo_data(store)

    advisor = None
    llm = create_default_llm(settings)
    if llm is not None:
        advisor = LLMAdvisor(llm)
    else:
        logger.info("No LLM in use; AI text uses templated fallbacks")

    return AppContext(
        settings=settings,
        store=store,
        advisor=advisor,
        projects=ProjectService(store, advisor, settings),
        reviews=ReviewService(store, settings),
        assessments=AssessmentService(store, advisor),
    )


_lock = threading.Lock()
_context: AppContext | None = None


def get_app_context() -> AppContext:
    """The shared context, built on first use."""
    global _context
    with _lock:
        if _context is None:
            _context = build_context(load_settings())
        return _context


def reset_app_context() -> None:
    global _context
    with _lock:
        _context = None
