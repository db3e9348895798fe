"""Public user/care-team API client."""

from carecommon.client.models import (
    APIResponseError,
    AuthenticationError,
    GenderOption,
    HttpClientError,
    HttpErrorField,
    OAuthRequest,
    OAuthResponse,
    Profile,
    ProfileResponse,
)
from carecommon.client.public import PublicAPIClient

__all__ = [
    "APIResponseError",
    "AuthenticationError",
    "GenderOption",
    "HttpClientError",
    "HttpErrorField",
    "OAuthRequest",
    "OAuthResponse",
    "Profile",
    "ProfileResponse",
    "PublicAPIClient",
]
