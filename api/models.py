"""
API request and response models for the car inventory REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in inventory/models.py
and auth/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire names are camelCase (carModel, fuelType, createdAt, totalPages). Every
response model is generated from its snake_case field names through
to_camel and must be dumped with by_alias=True; api/envelope.py does that.

Car create/update bodies are not modelled here: they are validated by
inventory/schemas.py so the same rules apply outside HTTP.

Separation of concerns: domain models = domain truth; api/ models = API contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.models import Role, User
from inventory.models import Car, PageMeta

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@", no whitespace, a dot in the domain part.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# PASSWORD_MIN counts characters. PASSWORD_MAX counts UTF-8 bytes: bcrypt
# refuses anything longer than 72 bytes.
PASSWORD_MIN = 6
PASSWORD_MAX = 72


def check_password(value: str) -> str:
    """Raise ValueError unless value is PASSWORD_MIN chars to PASSWORD_MAX bytes."""
    if len(value) < PASSWORD_MIN:
        raise ValueError(f"Password must be at least {PASSWORD_MIN} characters")
    if len(value.encode("utf-8")) > PASSWORD_MAX:
        raise ValueError(f"Password must be at most {PASSWORD_MAX} bytes")
    return value


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=PASSWORD_MAX)


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register.

    role is accepted so a client sending role="sales" explicitly is not
    rejected. Any other role is refused by the route, not here, because it is
    a permission failure (403) rather than a malformed body (400).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Optional[Role] = None

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return check_password(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        """Strip and lower-case before the pattern check runs."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value: object) -> object:
        # Passwords are not stripped; names are.
        if isinstance(value, str):
            return value.strip()
        return value


class UserCreate(RegisterRequest):
    """Request body for POST /api/auth/users (admin only). Any role is allowed."""

    role: Role = Role.sales


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class UserOut(_WireModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )


class AuthData(_WireModel):
    """data payload of a successful register or login."""

    token: str
    user: UserOut


# ---------------------------------------------------------------------------
# Cars -- response models
# ---------------------------------------------------------------------------


class CarOut(_WireModel):
    """One car record as returned by every /api/cars endpoint."""

    id: str
    brand: str
    car_model: str
    year: int
    price: float
    mileage: float
    color: str
    fuel_type: str
    transmission: str
    status: str
    features: list[str]
    images: list[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_car(cls, car: Car) -> "CarOut":
        """Build a CarOut from an inventory Car.

        This is the Factory Method pattern -- the mapping lives here, colocated
        with the output model, rather than scattered across route handlers.
        """
        return cls(
            id=car.id,
            brand=car.brand,
            car_model=car.car_model,
            year=car.year,
            price=car.price,
            mileage=car.mileage,
            color=car.color,
            fuel_type=car.fuel_type,
            transmission=car.transmission,
            status=car.status.value,
            features=list(car.features),
            images=list(car.images),
            created_at=car.created_at,
            updated_at=car.updated_at,
        )


class PaginationMeta(_WireModel):
    """pagination block of GET /api/cars."""

    total: int
    page: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_meta(cls, meta: PageMeta) -> "PaginationMeta":
        return cls(
            total=meta.total,
            page=meta.page,
            total_pages=meta.total_pages,
            has_next=meta.has_next,
            has_prev=meta.has_prev,
        )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
