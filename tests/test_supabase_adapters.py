"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from types import SimpleNamespace
from uuid import uuid4

import httpx
import pytest
from supabase import AuthApiError, PostgrestAPIError, StorageException

from macromate.adapters.supabase_auth_client import (
    INVALID_CREDENTIALS_MESSAGE,
    USERNAME_TAKEN_MESSAGE,
    SupabaseAuthClient,
)
from macromate.adapters.supabase_meal_repository import SupabaseMealRepository
from macromate.adapters.supabase_photo_storage import SupabasePhotoStorage
from macromate.adapters.supabase_profile_repository import SupabaseProfileRepository
from macromate.adapters.supabase_weight_repository import SupabaseWeightRepository
from macromate.domain.meals import Meal, MealCategory, MealPhoto
from macromate.domain.models import DEFAULT_GOALS, UserProfile, WeightEntry
from macromate.domain.nutrition import NutrientTotals, sum_totals
from macromate.errors import (
    AuthenticationError,
    DuplicateAccountError,
    InvalidNutrientsError,
    MealNotFoundError,
    PersistenceError,
    PhotoNotFoundError,
)
from tests.conftest import make_item


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "insert": [],
            "update": [],
            "upsert": [],
            "delete": [],
        }
    )
    last_payload: object | None = None
    last_options: dict[str, object] = field(default_factory=dict)
    last_filters: list[tuple[str, str, object]] = field(default_factory=list)
    error: Exception | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "select"
        self.last_filters = []
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        self.last_filters = []
        return self

    def upsert(self, payload, **options) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_options = options
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        self.last_filters = []
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("eq", column, value))
        return self

    def or_(self, filters: str) -> "FakeTable":
        self.last_filters.append(("or", "", filters))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeBucket:
    objects: dict[str, bytes] = field(default_factory=dict)
    upload_options: dict[str, str] = field(default_factory=dict)
    fail_upload: bool = False

    def upload(self, path: str, file: bytes, file_options: dict[str, str]) -> None:
        if self.fail_upload:
            raise StorageException("bucket unavailable")
        self.objects[path] = file
        self.upload_options = file_options

    def get_public_url(self, path: str) -> str:
        return f"https://example.supabase.co/storage/v1/object/public/{path}"

    def remove(self, paths: list[str]) -> list[dict[str, object]]:
        removed = [{"name": path} for path in paths if path in self.objects]
        for path in paths:
            self.objects.pop(path, None)
        return removed


@dataclass
class FakeStorage:
    buckets: dict[str, FakeBucket] = field(default_factory=dict)

    def from_(self, name: str) -> FakeBucket:
        return self.buckets.setdefault(name, FakeBucket())


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    storage: FakeStorage = field(default_factory=FakeStorage)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _meal_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "date": "2024-05-10",
        "name": "Lunch",
        "category": "Lunch",
        "food_items": [
            {
                "id": "item-1",
                "name": "Rice",
                "serving_size": "1 cup",
                "calories": 205,
                "protein": 4,
                "carbs": 45,
                "fat": 0,
                "fiber": 1,
            }
        ],
        "total_calories": 205,
        "total_protein": 4,
        "total_carbs": 45,
        "total_fat": 0,
        "total_fiber": 1,
        "photo_url": None,
        "photo_path": None,
        "created_at": "2024-05-10T12:00:00+00:00",
    }
    row.update(overrides)
    return row


def test_meal_repository_create_writes_items_and_totals() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    items = [make_item("Rice", calories=205, protein=4, carbs=45, fiber=1)]
    meal = Meal(
        id=uuid4(),
        user_id=uuid4(),
        date=date(2024, 5, 10),
        name="Lunch",
        category=MealCategory.LUNCH,
        food_items=items,
        totals=sum_totals(items),
        created_at=datetime(2024, 5, 10, 12, tzinfo=UTC),
        photo=MealPhoto(url="https://x/y", path="meals/u/m"),
    )
    table.queue(
        "insert",
        [
            _meal_row(
                id=str(meal.id),
                user_id=str(meal.user_id),
                photo_url="https://x/y",
                photo_path="meals/u/m",
            )
        ],
    )

    stored = SupabaseMealRepository(client).create_meal(meal)

    payload = table.last_payload
    assert isinstance(payload, dict)
    assert payload["total_calories"] == 205
    assert payload["date"] == "2024-05-10"
    assert payload["category"] == "Lunch"
    assert payload["food_items"][0]["name"] == "Rice"
    assert stored.id == meal.id
    assert stored.photo == MealPhoto(url="https://x/y", path="meals/u/m")


def test_meal_repository_create_without_data_fails() -> None:
    client = FakeSupabaseClient()
    items = [make_item("Rice")]
    meal = Meal(
        id=uuid4(),
        user_id=uuid4(),
        date=date(2024, 5, 10),
        name="Lunch",
        category=MealCategory.LUNCH,
        food_items=items,
        totals=sum_totals(items),
        created_at=datetime(2024, 5, 10, 12, tzinfo=UTC),
    )

    with pytest.raises(PersistenceError):
        SupabaseMealRepository(client).create_meal(meal)


def test_meal_repository_parses_rows() -> None:
    client = FakeSupabaseClient()
    row = _meal_row()
    client.table("meals").queue("select", [row])

    meal = SupabaseMealRepository(client).get_meal(uuid4())

    assert meal is not None
    assert meal.date == date(2024, 5, 10)
    assert meal.category is MealCategory.LUNCH
    assert meal.food_items[0].id == "item-1"
    assert meal.food_items[0].serving_size == "1 cup"
    assert meal.totals == NutrientTotals(205, 4, 45, 0, 1)
    assert meal.photo is None


def test_meal_repository_falls_back_to_created_day() -> None:
    client = FakeSupabaseClient()
    client.table("meals").queue(
        "select", [_meal_row(date=None, created_at="2024-05-09T23:30:00+00:00")]
    )

    meal = SupabaseMealRepository(client).get_meal(uuid4())

    assert meal is not None
    assert meal.date == date(2024, 5, 9)


def test_meal_repository_rejects_malformed_nutrients() -> None:
    client = FakeSupabaseClient()
    client.table("meals").queue("select", [_meal_row(total_fat="lots")])

    with pytest.raises(InvalidNutrientsError):
        SupabaseMealRepository(client).get_meal(uuid4())


def test_meal_repository_queries_date_range() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    table.queue("select", [_meal_row(), _meal_row(date="2024-05-11")])
    user_id = uuid4()

    meals = SupabaseMealRepository(client).list_meals_between(
        user_id, date(2024, 5, 5), date(2024, 5, 11)
    )

    assert len(meals) == 2
    assert ("eq", "user_id", str(user_id)) in table.last_filters
    assert (
        "or",
        "",
        "and(date.gte.2024-05-05,date.lte.2024-05-11),"
        "and(date.is.null,created_at.gte.2024-05-05T00:00:00Z,"
        "created_at.lt.2024-05-12T00:00:00Z)",
    ) in table.last_filters


def test_meal_repository_day_query_includes_undated_rows() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    table.queue("select", [_meal_row(date=None, created_at="2024-05-10T08:00:00Z")])

    meals = SupabaseMealRepository(client).list_meals_for_day(
        uuid4(), date(2024, 5, 10)
    )

    assert [meal.date for meal in meals] == [date(2024, 5, 10)]
    assert (
        "or",
        "",
        "and(date.gte.2024-05-10,date.lte.2024-05-10),"
        "and(date.is.null,created_at.gte.2024-05-10T00:00:00Z,"
        "created_at.lt.2024-05-11T00:00:00Z)",
    ) in table.last_filters


def test_meal_repository_update_writes_one_row() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    meal_id = uuid4()
    items = [make_item("Tea", calories=2)]
    table.queue("update", [_meal_row(id=str(meal_id))])

    SupabaseMealRepository(client).update_meal_items(
        meal_id, name="Edited Meal", food_items=items, totals=sum_totals(items)
    )

    assert table.last_payload["name"] == "Edited Meal"
    assert table.last_payload["total_calories"] == 2
    assert table.last_filters == [("eq", "id", str(meal_id))]


def test_meal_repository_update_of_missing_row_fails() -> None:
    client = FakeSupabaseClient()
    items = [make_item("Tea", calories=2)]

    with pytest.raises(MealNotFoundError):
        SupabaseMealRepository(client).update_meal_items(
            uuid4(), name="Tea", food_items=items, totals=sum_totals(items)
        )


def test_api_errors_become_persistence_errors() -> None:
    client = FakeSupabaseClient()
    client.table("meals").error = PostgrestAPIError(
        {"message": "permission denied", "code": "42501"}
    )

    with pytest.raises(PersistenceError) as exc_info:
        SupabaseMealRepository(client).list_meals_for_day(uuid4(), date(2024, 5, 10))

    assert exc_info.value.details == {"operation": "list_meals_for_day"}


def test_network_errors_become_persistence_errors() -> None:
    client = FakeSupabaseClient()
    client.table("profiles").error = httpx.ConnectError("offline")

    with pytest.raises(PersistenceError):
        SupabaseProfileRepository(client).get_profile(uuid4())


def test_profile_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    table = client.table("profiles")
    user_id = uuid4()
    profile = UserProfile(
        id=user_id,
        email="ana@macromate.com",
        display_name="Ana",
        photo_url=None,
        height=None,
        weight=None,
        goals=DEFAULT_GOALS,
    )
    repository = SupabaseProfileRepository(client)

    repository.create_profile(profile)
    assert table.last_payload["goals"] == DEFAULT_GOALS.to_dict()

    table.queue(
        "select",
        [
            {
                "id": str(user_id),
                "email": "ana@macromate.com",
                "display_name": "Ana",
                "photo_url": None,
                "height": 170,
                "weight": None,
                "goals": {
                    "calories": 1800,
                    "protein": 120,
                    "carbs": 200,
                    "fat": 60,
                    "fiber": 30,
                },
            }
        ],
    )
    fetched = repository.get_profile(user_id)

    assert fetched is not None
    assert fetched.height == 170.0
    assert fetched.goals.calories == 1800


def test_profile_repository_defaults_missing_goals() -> None:
    client = FakeSupabaseClient()
    client.table("profiles").queue(
        "select", [{"id": str(uuid4()), "email": None, "goals": None}]
    )

    fetched = SupabaseProfileRepository(client).get_profile(uuid4())

    assert fetched is not None
    assert fetched.goals == DEFAULT_GOALS


def test_profile_repository_update_goals() -> None:
    client = FakeSupabaseClient()
    table = client.table("profiles")
    user_id = uuid4()

    SupabaseProfileRepository(client).update_goals(user_id, DEFAULT_GOALS)

    assert table.last_payload == {"goals": DEFAULT_GOALS.to_dict()}
    assert table.last_filters == [("eq", "id", str(user_id))]


def test_weight_repository_upserts_per_day() -> None:
    client = FakeSupabaseClient()
    table = client.table("weight_entries")
    user_id = uuid4()
    repository = SupabaseWeightRepository(client)

    repository.upsert_weight_entry(
        WeightEntry(user_id=user_id, date=date(2024, 5, 10), weight=70.5)
    )
    table.queue(
        "select", [{"user_id": str(user_id), "date": "2024-05-10", "weight": 70.5}]
    )
    entries = repository.list_weight_entries(user_id)

    assert table.last_options == {"on_conflict": "user_id,date"}
    assert entries == [
        WeightEntry(user_id=user_id, date=date(2024, 5, 10), weight=70.5)
    ]


def test_photo_storage_upload_and_delete() -> None:
    client = FakeSupabaseClient()
    storage = SupabasePhotoStorage(client, bucket="meal-photos")

    url = storage.upload("meals/u/m", b"bytes", "image/png")
    bucket = client.storage.from_("meal-photos")

    assert url.endswith("/meals/u/m")
    assert bucket.upload_options["content-type"] == "image/png"

    storage.delete("meals/u/m")
    assert bucket.objects == {}
    with pytest.raises(PhotoNotFoundError):
        storage.delete("meals/u/m")


def test_photo_storage_upload_failure() -> None:
    client = FakeSupabaseClient()
    client.storage.from_("meal-photos").fail_upload = True

    with pytest.raises(PersistenceError):
        SupabasePhotoStorage(client, bucket="meal-photos").upload(
            "meals/u/m", b"bytes", "image/jpeg"
        )


@dataclass
class FakeGoTrue:
    sign_up_error: Exception | None = None
    sign_in_error: Exception | None = None
    identities: list[object] | None = field(default_factory=lambda: [object()])
    user_id: str = field(default_factory=lambda: str(uuid4()))
    last_sign_up: dict[str, object] | None = None

    def _user(self, email: str) -> SimpleNamespace:
        return SimpleNamespace(id=self.user_id, email=email, identities=self.identities)

    def sign_up(self, credentials: dict[str, object]) -> SimpleNamespace:
        self.last_sign_up = credentials
        if self.sign_up_error is not None:
            raise self.sign_up_error
        return SimpleNamespace(user=self._user(str(credentials["email"])), session=None)

    def sign_in_with_password(self, credentials: dict[str, str]) -> SimpleNamespace:
        if self.sign_in_error is not None:
            raise self.sign_in_error
        return SimpleNamespace(
            user=self._user(credentials["email"]),
            session=SimpleNamespace(access_token="access", refresh_token="refresh"),
        )

    def get_user(self, jwt: str) -> SimpleNamespace | None:
        if jwt != "access":
            raise AuthApiError("invalid JWT", 401, "bad_jwt")
        return SimpleNamespace(user=self._user("ana@macromate.com"))


def _auth_client(gotrue: FakeGoTrue) -> SupabaseAuthClient:
    return SupabaseAuthClient(SimpleNamespace(auth=gotrue))  # type: ignore[arg-type]


def test_auth_client_sign_up_passes_display_name() -> None:
    gotrue = FakeGoTrue()

    user = _auth_client(gotrue).sign_up("ana@macromate.com", "secret1", "Ana")

    assert str(user.id) == gotrue.user_id
    assert gotrue.last_sign_up["options"] == {"data": {"display_name": "Ana"}}


def test_auth_client_maps_duplicate_accounts() -> None:
    gotrue = FakeGoTrue(
        sign_up_error=AuthApiError(
            "User already registered", 422, "user_already_exists"
        )
    )

    with pytest.raises(DuplicateAccountError) as exc_info:
        _auth_client(gotrue).sign_up("ana@macromate.com", "secret1", "Ana")

    assert exc_info.value.message == USERNAME_TAKEN_MESSAGE


def test_auth_client_treats_identityless_user_as_duplicate() -> None:
    gotrue = FakeGoTrue(identities=[])

    with pytest.raises(DuplicateAccountError):
        _auth_client(gotrue).sign_up("ana@macromate.com", "secret1", "Ana")


def test_auth_client_sign_in() -> None:
    session = _auth_client(FakeGoTrue()).sign_in("ana@macromate.com", "secret1")

    assert session.access_token == "access"
    assert session.refresh_token == "refresh"


def test_auth_client_maps_bad_credentials() -> None:
    gotrue = FakeGoTrue(
        sign_in_error=AuthApiError(
            "Invalid login credentials", 400, "invalid_credentials"
        )
    )

    with pytest.raises(AuthenticationError) as exc_info:
        _auth_client(gotrue).sign_in("ana@macromate.com", "wrong")

    assert exc_info.value.message == INVALID_CREDENTIALS_MESSAGE


def test_auth_client_get_user_rejects_bad_token() -> None:
    client = _auth_client(FakeGoTrue())

    assert client.get_user("expired") is None
    user = client.get_user("access")
    assert user is not None
    assert user.email == "ana@macromate.com"
