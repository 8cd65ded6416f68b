"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import date
from uuid import UUID, uuid4

import pytest

from macromate.config import Settings
from macromate.containers import AppContainer
from macromate.domain.meals import FoodItem, Meal
from macromate.domain.models import (
    AuthenticatedUser,
    AuthSession,
    UserProfile,
    WeightEntry,
)
from macromate.domain.nutrition import NutrientTotals
from macromate.errors import (
    AuthenticationError,
    DuplicateAccountError,
    LookupFailedError,
    MealNotFoundError,
    PhotoNotFoundError,
)
from macromate.services.auth import AuthClient, AuthService
from macromate.services.cache import InMemoryCache
from macromate.services.identification import IdentificationService
from macromate.services.meals import MealRepository, MealService, PhotoStorage
from macromate.services.nutrition import MacroLookupService
from macromate.services.stats import StatsService
from macromate.services.users import ProfileRepository, UserService, WeightRepository
from macromate.services.vision import StructuredOutputClient, VisionService

TEST_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, Meal] = field(default_factory=dict)
    update_calls: list[UUID] = field(default_factory=list)
    fail_create: Exception | None = None
    fail_queries: Exception | None = None

    def create_meal(self, meal: Meal) -> Meal:
        if self.fail_create is not None:
            raise self.fail_create
        self.meals[meal.id] = meal
        return meal

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return self.meals.get(meal_id)

    def update_meal_items(
        self,
        meal_id: UUID,
        name: str,
        food_items: list[FoodItem],
        totals: NutrientTotals,
    ) -> None:
        self.update_calls.append(meal_id)
        if meal_id not in self.meals:
            raise MealNotFoundError(meal_id)
        self.meals[meal_id] = replace(
            self.meals[meal_id], name=name, food_items=food_items, totals=totals
        )

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)

    def list_meals_for_day(self, user_id: UUID, day: date) -> list[Meal]:
        if self.fail_queries is not None:
            raise self.fail_queries
        return [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id and meal.date == day
        ]

    def list_meals_between(self, user_id: UUID, start: date, end: date) -> list[Meal]:
        if self.fail_queries is not None:
            raise self.fail_queries
        return [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id and start <= meal.date <= end
        ]


@dataclass
class FakePhotoStorage(PhotoStorage):
    """Photo storage that keeps objects in a dict."""

    objects: dict[str, bytes] = field(default_factory=dict)
    uploads: list[tuple[str, str]] = field(default_factory=list)
    delete_calls: list[str] = field(default_factory=list)
    delete_error: Exception | None = None

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        self.objects[path] = content
        self.uploads.append((path, content_type))
        return f"https://storage.test/{path}"

    def delete(self, path: str) -> None:
        self.delete_calls.append(path)
        if self.delete_error is not None:
            raise self.delete_error
        if path not in self.objects:
            raise PhotoNotFoundError(f"No stored photo at {path}.")
        del self.objects[path]


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, UserProfile] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get(user_id)

    def create_profile(self, profile: UserProfile) -> None:
        self.profiles[profile.id] = profile

    def update_profile(self, user_id: UUID, updates: dict[str, object]) -> None:
        self.profiles[user_id] = replace(self.profiles[user_id], **updates)

    def update_goals(self, user_id: UUID, goals: NutrientTotals) -> None:
        self.profiles[user_id] = replace(self.profiles[user_id], goals=goals)


@dataclass
class InMemoryWeightRepository(WeightRepository):
    """In-memory weight history keyed by user and date."""

    entries: dict[tuple[UUID, date], WeightEntry] = field(default_factory=dict)

    def upsert_weight_entry(self, entry: WeightEntry) -> None:
        self.entries[(entry.user_id, entry.date)] = entry

    def list_weight_entries(self, user_id: UUID) -> list[WeightEntry]:
        return [entry for key, entry in self.entries.items() if key[0] == user_id]


@dataclass
class FakeAuthClient(AuthClient):
    """Auth provider with accounts and tokens held in memory."""

    accounts: dict[str, tuple[str, AuthenticatedUser]] = field(default_factory=dict)
    tokens: dict[str, AuthenticatedUser] = field(default_factory=dict)

    def sign_up(
        self, email: str, password: str, display_name: str
    ) -> AuthenticatedUser:
        if email in self.accounts:
            raise DuplicateAccountError(
                "This username is already taken. Please choose another one."
            )
        user = AuthenticatedUser(id=uuid4(), email=email)
        self.accounts[email] = (password, user)
        return user

    def sign_in(self, email: str, password: str) -> AuthSession:
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthenticationError("Invalid username or password.")
        user = account[1]
        token = f"token-{uuid4()}"
        self.tokens[token] = user
        return AuthSession(user=user, access_token=token, refresh_token="refresh")

    def get_user(self, access_token: str) -> AuthenticatedUser | None:
        return self.tokens.get(access_token)


@dataclass
class FakeStructuredClient(StructuredOutputClient):
    """Structured-output client answering from canned data.

    Identification returns `food_names`; lookups answer from `macros` by the
    food name embedded in the prompt and fail for unknown foods.
    `identify_output` overrides the identification payload and `error` is
    raised from every call.
    """

    food_names: list[str] = field(default_factory=list)
    macros: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[dict[str, object]] = field(default_factory=list)
    identify_output: dict[str, object] | None = None
    error: Exception | None = None

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "model": model,
                "schema_name": schema_name,
                "prompt": prompt,
                "image_data_url": image_data_url,
            }
        )
        if self.error is not None:
            raise self.error
        if schema_name == "identify_food":
            if self.identify_output is not None:
                return self.identify_output
            return {"food_items": list(self.food_names)}
        for name, values in self.macros.items():
            if f"Food Item: {name}\n" in prompt:
                return values
        raise LookupFailedError("The model returned an empty response.")


@dataclass
class ControlledLookup:
    """Lookup whose completion order is driven by the test.

    Each call waits on the event for its food name, then returns the
    configured nutrients or raises the configured error.
    """

    results: dict[str, NutrientTotals] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    started: list[str] = field(default_factory=list)

    def gate(self, name: str) -> asyncio.Event:
        if name not in self.gates:
            self.gates[name] = asyncio.Event()
        return self.gates[name]

    async def lookup(self, food_name: str, serving_size: str = "1 serving"):
        self.started.append(food_name)
        await self.gate(food_name).wait()
        if food_name in self.errors:
            raise self.errors[food_name]
        return self.results[food_name]


def make_item(name: str = "Apple", **nutrients: float) -> FoodItem:
    values = {"calories": 0.0, "protein": 0.0, "carbs": 0.0, "fat": 0.0, "fiber": 0.0}
    values.update(nutrients)
    return FoodItem(name=name, **values)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def structured_client() -> FakeStructuredClient:
    return FakeStructuredClient(
        food_names=["Grilled chicken", "Rice"],
        macros={
            "Grilled chicken": {
                "calories": 280,
                "protein": 52,
                "carbs": 0,
                "fat": 6,
                "fiber": 0,
            },
            "Rice": {"calories": 205, "protein": 4, "carbs": 45, "fat": 0, "fiber": 1},
        },
    )


@pytest.fixture
def container(
    settings: Settings, structured_client: FakeStructuredClient
) -> AppContainer:
    profile_repository = InMemoryProfileRepository()
    meal_repository = InMemoryMealRepository()
    user_service = UserService(profile_repository, InMemoryWeightRepository())
    auth_service = AuthService(
        client=FakeAuthClient(),
        user_service=user_service,
        email_domain=settings.auth_email_domain,
    )
    vision_service = VisionService(
        client=structured_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )
    lookup_service = MacroLookupService(
        client=structured_client,
        cache=InMemoryCache(),
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=auth_service,
        user_service=user_service,
        meal_service=MealService(meal_repository, FakePhotoStorage()),
        stats_service=StatsService(meal_repository, profile_repository),
        lookup_service=lookup_service,
        identification_service=IdentificationService(
            vision_service=vision_service,
            lookup_service=lookup_service,
            timeout_seconds=settings.lookup_timeout_seconds,
        ),
        close_resources=close_resources,
    )
