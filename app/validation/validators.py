"""Reusable field validators for untrusted request input."""

from __future__ import annotations

import re
from typing import Annotated
from typing import Any

from bson import ObjectId
from pydantic import AfterValidator
from pydantic import BaseModel
from pydantic import BeforeValidator
from pydantic import ConfigDict
from pydantic import Field
from pydantic import PlainSerializer
from pydantic import PlainValidator
from pydantic import Strict
from pydantic import WithJsonSchema
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from app.core.config import IMAGE_SIZE_LIMIT
from app.core.config import IMAGE_TYPE_LIMIT
from app.core.security import verify_password
from app.validation.schema import Schema

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
CACHE_KEY_MAX_LENGTH = 250
BEARER_PREFIX = "Bearer "

EMAIL_PATTERN = re.compile(
    r"^(?!\.)(?!.*\.\.)([A-Z0-9_'+\-\.]*)[A-Z0-9_+-]@([A-Z0-9][A-Z0-9\-]*\.)+[A-Z]{2,}$",
    re.IGNORECASE,
)
JWT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*$")


def _trim(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _required(message: str, code: str = "required"):
    def check(value: str) -> str:
        if not value:
            raise PydanticCustomError(code, message)
        return value

    return check


def _normalize_email(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _check_email(value: str) -> str:
    if not value:
        raise PydanticCustomError("email_required", "Email is required.")
    if not EMAIL_PATTERN.match(value):
        raise PydanticCustomError("invalid_email", "Invalid email format.")
    return value


def _check_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise PydanticCustomError(
            "password_too_short",
            "Password should be at least {min_length} characters long.",
            {"min_length": PASSWORD_MIN_LENGTH},
        )
    if len(value) > PASSWORD_MAX_LENGTH:
        raise PydanticCustomError(
            "password_too_long",
            "Password should be at most {max_length} characters long.",
            {"max_length": PASSWORD_MAX_LENGTH},
        )
    return value


def _check_jwt(value: str) -> str:
    if not JWT_PATTERN.match(value):
        raise PydanticCustomError("invalid_jwt", "Invalid jwt token format.")
    return value


def jwt_string(label: str = "Token") -> Any:
    """Build a JWT-shaped string validator whose empty-value message names ``label``."""
    return Annotated[
        str,
        BeforeValidator(_trim),
        AfterValidator(_required(f"{label} is required.", code="token_required")),
        AfterValidator(_check_jwt),
    ]


def _strip_bearer(value: str) -> str:
    if not value:
        raise PydanticCustomError("authorization_required", "Authorization header is required.")
    token = value[len(BEARER_PREFIX):].strip()
    if not value.startswith(BEARER_PREFIX) or not token:
        raise PydanticCustomError(
            "invalid_authorization",
            "Invalid authorization header. It must start with 'Bearer ' followed by a token.",
        )
    return token


def _to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise PydanticCustomError("invalid_object_id", "Invalid ObjectId format.")


def _allowed_image_subtypes() -> str:
    return ", ".join(mimetype.replace("image/", "") for mimetype in IMAGE_TYPE_LIMIT)


def _check_image_type(value: str) -> str:
    if value not in IMAGE_TYPE_LIMIT:
        raise PydanticCustomError(
            "invalid_image_type",
            "Invalid image type. Allowed types: {allowed}",
            {"allowed": _allowed_image_subtypes()},
        )
    return value


def _check_image_size(value: float) -> float:
    if value > IMAGE_SIZE_LIMIT:
        raise PydanticCustomError(
            "image_too_large",
            "Image size should not exceed 5MB",
            {"max_size": IMAGE_SIZE_LIMIT},
        )
    return value


def _check_cache_key(value: str) -> str:
    if not value:
        raise PydanticCustomError("cache_key_empty", "Cache key cannot be empty")
    if len(value) > CACHE_KEY_MAX_LENGTH:
        raise PydanticCustomError(
            "cache_key_too_long",
            "Cache key too long",
            {"max_length": CACHE_KEY_MAX_LENGTH},
        )
    return value


def _check_cache_value(value: Any) -> Any:
    if value is None:
        raise PydanticCustomError("cache_value_missing", "Cache value must not be null")
    return value


Email = Annotated[str, BeforeValidator(_normalize_email), AfterValidator(_check_email)]
Password = Annotated[str, BeforeValidator(_trim), AfterValidator(_check_password)]
JwtToken = jwt_string()
BearerToken = Annotated[str, AfterValidator(_strip_bearer)]
ObjectIdField = Annotated[
    ObjectId,
    PlainValidator(_to_object_id),
    PlainSerializer(str, return_type=str),
    WithJsonSchema({"type": "string", "pattern": "^[0-9a-fA-F]{24}$"}),
]
NonEmptyStr = Annotated[str, Field(min_length=1)]
CacheKey = Annotated[str, BeforeValidator(_trim), AfterValidator(_check_cache_key)]


def required_text(message: str) -> Any:
    """Trimmed string field that reports ``message`` when missing or blank."""
    return Annotated[
        str,
        BeforeValidator(_trim),
        AfterValidator(_required(message)),
    ]


class ImageUpload(BaseModel):
    """Metadata and content of one uploaded image file."""

    fieldname: NonEmptyStr
    originalname: NonEmptyStr
    encoding: NonEmptyStr
    mimetype: Annotated[str, AfterValidator(_check_image_type)]
    buffer: Annotated[
        bytes,
        Strict(),
        AfterValidator(_required("File buffer must not be empty", code="empty_buffer")),
    ]
    size: Annotated[float, Field(gt=0), AfterValidator(_check_image_size)]


AddressText = required_text("Address is required.")
CityText = required_text("City is required.")
PostalCodeText = required_text("Postal code is required.")
CountryText = required_text("Country is required.")


class ShippingAddress(BaseModel):
    """Destination of an order; every field is mandatory."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_default=True)

    address: AddressText = ""
    city: CityText = ""
    postal_code: PostalCodeText = ""
    country: CountryText = ""


class CacheItem(BaseModel):
    """Entry accepted by cache writes."""

    key: CacheKey
    value: Annotated[Any, AfterValidator(_check_cache_value)]
    ttl: Annotated[float, Field(gt=0)] | None = None


class PasswordPair(BaseModel):
    """Plaintext password and the stored hash it must match."""

    request: Password
    encrypted: Password


async def _password_matches(pair: PasswordPair) -> bool:
    return await verify_password(pair.request, pair.encrypted)


email_schema: Schema[str] = Schema(Email)
password_schema: Schema[str] = Schema(Password)
jwt_schema: Schema[str] = Schema(JwtToken)
bearer_token_schema: Schema[str] = Schema(BearerToken)
object_id_schema: Schema[ObjectId] = Schema(ObjectIdField)
image_upload_schema: Schema[ImageUpload] = Schema(ImageUpload)
shipping_address_schema: Schema[ShippingAddress] = Schema(ShippingAddress)
cache_key_schema: Schema[str] = Schema(CacheKey)
cache_item_schema: Schema[CacheItem] = Schema(CacheItem)
password_confirmation_schema: Schema[PasswordPair] = Schema(PasswordPair).refine(
    _password_matches,
    "Invalid email or password.",
    code="password_mismatch",
)
