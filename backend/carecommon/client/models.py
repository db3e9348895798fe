"""Public API models: profiles, OAuth payloads and API error bodies."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carecommon.errors import CareCommonError
from carecommon.models.config import AppConfig
from carecommon.validators import ErrorMap, ValidationFailedError, validate_struct, validation_field

PHONE_TYPES = "mobile|home|work|tablet|other"


class GenderOption(str, Enum):
    FEMALE = "Female"
    MALE = "Male"
    TRANSGENDER = "Transgender"
    UNSPECIFIED = "Unspecified"


class Profile(BaseModel):
    """A user profile as accepted by the admin user-profiles endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    first_name: Optional[str] = validation_field("required,max-length:255", default=None)
    middle_name: Optional[str] = validation_field("max-length:255", default=None)
    last_name: Optional[str] = validation_field("required,max-length:255", default=None)
    username: Optional[str] = validation_field("required,max-length:255", default=None)
    email: Optional[str] = validation_field("email,max-length:255,required", default=None)
    second_email: Optional[str] = validation_field("email,max-length:255", default=None)
    address_line1: Optional[str] = validation_field("max-length:255", default=None, alias="address1")
    address_line2: Optional[str] = validation_field("max-length:255", default=None, alias="address2")
    city: Optional[str] = validation_field("max-length:255", default=None)
    state: Optional[str] = validation_field("max-length:255", default=None)
    zip_code: Optional[str] = validation_field("max-length:255", default=None)
    country: Optional[str] = validation_field("max-length:255", default=None)
    primary_phone_number: Optional[str] = None
    primary_phone_type: Optional[str] = validation_field(f"values-insensitive:{PHONE_TYPES}", default=None)
    secondary_phone_number: Optional[str] = None
    secondary_phone_type: Optional[str] = validation_field(f"values-insensitive:{PHONE_TYPES}", default=None)
    locale: Optional[str] = validation_field("max-length:255", default=None)
    time_zone: Optional[str] = None
    gender: Optional[GenderOption] = validation_field("values:Female|Male|Transgender|Unspecified", default=None)
    birthday: Optional[datetime] = None
    needs_onboarding: bool = False
    user_type_id: Optional[int] = None
    organization_id: Optional[int] = None
    extended_properties: Optional[dict[str, str]] = None
    access_token: str = Field(default="", exclude=True)
    landing: str = validation_field("required", default="")
    program: str = validation_field("required", default="")

    def validate_profile(self, config: AppConfig) -> None:
        """Run the field rules plus the landing/program checks against `config`.

        Raises:
            ValidationFailedError: with every field error found
        """
        errors = ErrorMap()
        validate_struct(self, errors)

        landing = config.landing.get(self.landing)
        if landing is None:
            errors.append_error_field("landing", "Invalid landing passed")
        elif self.program not in landing.programs:
            errors.append_error_field("program", "Invalid program passed")

        if errors:
            raise ValidationFailedError(errors)

    def to_payload(self) -> dict:
        """JSON body for the API: aliases applied, unset optionals and empty id dropped."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not data.get("id"):
            data.pop("id", None)
        if not data.get("needs_onboarding"):
            data.pop("needs_onboarding", None)
        return data


class ProfileResponse(BaseModel):
    user_profile: Profile


class OAuthRequest(BaseModel):
    """Password-grant token request."""

    username: str
    password: str
    client_id: str

    def to_params(self) -> dict[str, str]:
        return {
            "grant_type": "password",
            "client_id": self.client_id,
            "username": self.username,
            "password": self.password,
        }


class OAuthResponse(BaseModel):
    access_token: str


class HttpErrorField(BaseModel):
    name: str
    message: str


class HttpErrorBody(BaseModel):
    """Error body returned by the API on non-200 responses."""

    status_code: int = 0
    path: str = ""
    message: str = ""
    error_type: str = ""
    fields: list[HttpErrorField] = Field(default_factory=list)


class HttpClientError(CareCommonError):
    """Non-200 response from the public API."""

    def __init__(
        self,
        status_code: int,
        path: str,
        message: str = "",
        error_type: str = "",
        fields: Optional[list[HttpErrorField]] = None,
    ):
        super().__init__(
            f"status code: {status_code}, path: {path}, message: {message}, error_type: {error_type}"
        )
        self.status_code = status_code
        self.path = path
        self.message = message
        self.error_type = error_type
        self.fields = fields or []

    @classmethod
    def from_body(cls, body: HttpErrorBody, path: str, status_code: int) -> "HttpClientError":
        return cls(
            status_code=body.status_code or status_code,
            path=path,
            message=body.message,
            error_type=body.error_type,
            fields=body.fields,
        )


class AuthenticationError(HttpClientError):
    """The OAuth token endpoint refused the credentials."""


class APIResponseError(CareCommonError):
    """A 200 response whose body is unreadable or lacks an expected value."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
