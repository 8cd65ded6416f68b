"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import ClientOptions, create_client

from macromate.adapters.openai_client import OpenAIStructuredClient
from macromate.adapters.supabase_auth_client import SupabaseAuthClient
from macromate.adapters.supabase_meal_repository import SupabaseMealRepository
from macromate.adapters.supabase_photo_storage import SupabasePhotoStorage
from macromate.adapters.supabase_profile_repository import SupabaseProfileRepository
from macromate.adapters.supabase_weight_repository import SupabaseWeightRepository
from macromate.config import Settings
from macromate.services.auth import AuthService
from macromate.services.cache import InMemoryCache
from macromate.services.identification import IdentificationService
from macromate.services.meals import MealService
from macromate.services.nutrition import MacroLookupService
from macromate.services.stats import StatsService
from macromate.services.users import UserService
from macromate.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    user_service: UserService
    meal_service: MealService
    stats_service: StatsService
    lookup_service: MacroLookupService
    identification_service: IdentificationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    # Sign-ins store a user session on the client, so auth gets its own.
    auth_supabase_client = create_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_service_key,
        options=ClientOptions(persist_session=False, auto_refresh_token=False),
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    weight_repository = SupabaseWeightRepository(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)
    photo_storage = SupabasePhotoStorage(
        supabase_client, bucket=resolved_settings.supabase_photo_bucket
    )

    user_service = UserService(profile_repository, weight_repository)
    auth_service = AuthService(
        client=SupabaseAuthClient(auth_supabase_client),
        user_service=user_service,
        email_domain=resolved_settings.auth_email_domain,
    )
    meal_service = MealService(meal_repository, photo_storage)
    stats_service = StatsService(meal_repository, profile_repository)

    openai_client = OpenAIStructuredClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    vision_service = VisionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    lookup_service = MacroLookupService(
        client=openai_client,
        cache=InMemoryCache(),
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        cache_ttl_seconds=resolved_settings.lookup_cache_ttl_seconds,
    )
    identification_service = IdentificationService(
        vision_service=vision_service,
        lookup_service=lookup_service,
        timeout_seconds=resolved_settings.lookup_timeout_seconds,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        user_service=user_service,
        meal_service=meal_service,
        stats_service=stats_service,
        lookup_service=lookup_service,
        identification_service=identification_service,
        close_resources=close_resources,
    )
