"""
FastAPI dependencies; overridden in tests
"""
from config import settings
from services.preview_store import PreviewStore, preview_store
from services.storefront_generator import StorefrontGenerator
from services.wizard import WizardSessionStore, session_store

# Shared so the Anthropic connection pool is reused across requests
storefront_generator = StorefrontGenerator(settings=settings)


def get_storefront_generator() -> StorefrontGenerator:
    return storefront_generator


def get_session_store() -> WizardSessionStore:
    return session_store


def get_preview_store() -> PreviewStore:
    return preview_store
