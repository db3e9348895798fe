"""Public API client: thin wrappers around the user/care-team admin REST endpoints.

Usage:
    with PublicAPIClient.from_config(config) as client:
        token = client.get_token(OAuthRequest(username=..., password=..., client_id=...))
        profile.access_token = token.access_token
        client.create_profile(profile, config.program_for(profile.landing, profile.program))
        care_team_id = client.get_care_room_id(profile)
        client.authorize_care_room(profile, care_team_id)

No retries: every call makes one request per target and raises on the first
failure. Keep-alive is disabled so no connection outlives its request.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from carecommon.client.models import (
    APIResponseError,
    AuthenticationError,
    HttpClientError,
    HttpErrorBody,
    OAuthRequest,
    OAuthResponse,
    Profile,
    ProfileResponse,
)
from carecommon.config import get_settings
from carecommon.models.config import AppConfig, Program
from carecommon.services.request_context import get_request_id
from carecommon.validators import ErrorMap, ValidationFailedError

logger = structlog.get_logger()

OWNER_CARE_MANAGER = "CareManager"
OWNER_CAREGIVER = "Caregiver"


class PublicAPIClient:
    """Synchronous client for the public admin API."""

    def __init__(
        self,
        base_uri: Optional[str] = None,
        timeout: Optional[float] = None,
        max_connections: Optional[int] = None,
        request_id_header: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = get_settings()
        self.base_uri = (base_uri if base_uri is not None else settings.PUBLIC_BASE_URI).rstrip("/")
        self.request_id_header = request_id_header or settings.REQUEST_ID_HEADER
        self._http = httpx.Client(
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            limits=httpx.Limits(
                max_connections=max_connections or settings.HTTP_MAX_CONNECTIONS,
                max_keepalive_connections=0,
            ),
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "PublicAPIClient":
        return cls(base_uri=config.common.public_base_uri, **kwargs)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "PublicAPIClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Endpoints ──

    def get_token(self, oauth: OAuthRequest) -> OAuthResponse:
        """Exchange username/password for an access token (password grant)."""
        url = f"{self.base_uri}/authentication/token"
        response = self._send("POST", url, headers=self._headers(json_body=False), data=oauth.to_params())

        if response.status_code != httpx.codes.OK:
            logger.info(
                "oauth_error",
                status_code=response.status_code,
                response=self._json(response, url),
            )
            raise AuthenticationError(
                status_code=response.status_code,
                path=url,
                message="Can't log in to oauth",
                error_type="authentication",
            )

        return self._parse(OAuthResponse, response, url)

    def create_profile(self, profile: Profile, program: Program) -> Profile:
        """Create `profile` under `program`; sets and returns it with the new consumer id.

        Raises:
            ValidationFailedError: the API rejected individual fields
            HttpClientError: any other non-200 response
            APIResponseError: the response has no consumer id
        """
        profile.organization_id = program.organization_id
        profile.user_type_id = program.user_type_id

        url = f"{self.base_uri}/api/v1/admin/user-profiles"
        response = self._send(
            "POST",
            url,
            headers=self._headers(token=profile.access_token),
            json={"user_profile": profile.to_payload()},
        )
        data = self._json(response, url)

        if response.status_code != httpx.codes.OK:
            logger.info("create_profile_error", status_code=response.status_code, response=data)
            error = self._error(response, url, data)
            if error.fields:
                raise ValidationFailedError(self._field_errors(error))
            raise error

        inner = data.get("user_profile") if isinstance(data, dict) else None
        consumer_id = inner.get("id") if isinstance(inner, dict) else None
        if not isinstance(consumer_id, str) or not consumer_id:
            raise APIResponseError("Failed to acquire consumer ID", path=url)

        profile.id = consumer_id
        logger.info("profile_created", consumer_id=consumer_id, landing=profile.landing, program=profile.program)
        return profile

    def get_care_room_id(self, profile: Profile) -> str:
        """Care team id of the consumer behind `profile`."""
        url = f"{self.base_uri}/api/v1/admin/care-teams/consumer/{profile.id}"
        response = self._send("GET", url, headers=self._headers(token=profile.access_token))

        if response.status_code != httpx.codes.OK:
            raise self._error(response, url, self._json(response, url))

        data = self._json(response, url)
        care_team = data.get("care_team") if isinstance(data, dict) else None
        care_team_id = care_team.get("id") if isinstance(care_team, dict) else None
        if isinstance(care_team_id, bool) or not isinstance(care_team_id, (int, float)):
            raise APIResponseError("Failed to acquire care team ID", path=url)
        return f"{care_team_id:.0f}"

    def authorize_care_room(self, profile: Profile, care_team_id: str) -> None:
        """Mark the care team as authorized by the profile's consumer."""
        url = f"{self.base_uri}/api/v1/admin/care-teams/{care_team_id}/authorize"
        body = {
            "authorize": {
                "authorized": True,
                "authorized_at": datetime.now(timezone.utc).isoformat(),
                "authorized_by": profile.id,
            }
        }
        response = self._send("POST", url, headers=self._headers(token=profile.access_token), json=body)
        data = self._json(response, url)
        if response.status_code != httpx.codes.OK:
            raise self._error(response, url, data)
        logger.info("care_team_authorized", care_team_id=care_team_id, consumer_id=profile.id)

    def add_professionals(self, profile: Profile, care_team_id: str, pro_ids: list[str]) -> None:
        self._add_members(profile, care_team_id, pro_ids, OWNER_CARE_MANAGER)

    def add_caregivers_to_care_team(self, profile: Profile, care_team_id: str, caregiver_ids: list[str]) -> None:
        self._add_members(profile, care_team_id, caregiver_ids, OWNER_CAREGIVER)

    def user_exists_for_email(self, token: str, email: str) -> Optional[Profile]:
        """Profile registered under `email`, or None when the API answers 404."""
        url = f"{self.base_uri}/api/v1/admin/user-profiles/by-reference/email/{email}"
        response = self._send("GET", url, headers=self._headers(token=token))

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.status_code != httpx.codes.OK:
            raise self._error(response, url, self._json(response, url))

        return self._parse(ProfileResponse, response, url).user_profile

    # ── Internals ──

    def _add_members(self, profile: Profile, care_team_id: str, user_ids: list[str], owner_type: str) -> None:
        url = f"{self.base_uri}/api/v1/admin/care-teams/{care_team_id}/member"
        for user_id in user_ids:
            body = {"member": {"user_id": user_id, "owner_type": owner_type}}
            response = self._send("POST", url, headers=self._headers(token=profile.access_token), json=body)
            data = self._json(response, url)
            if response.status_code != httpx.codes.OK:
                raise self._error(response, url, data)
        logger.info(
            "care_team_members_added",
            care_team_id=care_team_id,
            owner_type=owner_type,
            count=len(user_ids),
        )

    def _headers(self, token: Optional[str] = None, json_body: bool = True) -> dict[str, str]:
        headers = {self.request_id_header: get_request_id()}
        headers["Content-Type"] = "application/json" if json_body else "application/x-www-form-urlencoded"
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug("public_api_request", method=method, url=url)
        response = self._http.request(method, url, **kwargs)
        logger.debug("public_api_response", method=method, url=url, status_code=response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise APIResponseError(f"Invalid JSON from {url}: {e}", path=url) from e

    @staticmethod
    def _parse(model: type, response: httpx.Response, url: str) -> Any:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise APIResponseError(f"Unexpected response from {url}: {e}", path=url) from e

    @staticmethod
    def _error(response: httpx.Response, url: str, data: Any) -> HttpClientError:
        try:
            body = HttpErrorBody.model_validate(data if isinstance(data, dict) else {})
        except ValidationError:
            body = HttpErrorBody()
        return HttpClientError.from_body(body, path=url, status_code=response.status_code)

    @staticmethod
    def _field_errors(error: HttpClientError) -> ErrorMap:
        """Field names arrive as "<model>:<field>"; keep the part after the colon."""
        errors = ErrorMap()
        for f in error.fields:
            _, sep, name = f.name.partition(":")
            errors.append_error_field(name if sep else f.name, f.message)
        return errors
