# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends(), and tests replace
# them with app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from agents.reminder_parser import ReminderParserAgent
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> type[SupabaseClient]:
    """
    Get Supabase client instance.

    Returns the singleton client wrapper.
    """
    return SupabaseClient


def get_reminder_parser() -> ReminderParserAgent:
    """A parser agent configured from settings."""
    return ReminderParserAgent()


# Type aliases for dependency injection
SupabaseDep = Annotated[type[SupabaseClient], Depends(get_supabase_client)]
ParserDep = Annotated[ReminderParserAgent, Depends(get_reminder_parser)]
