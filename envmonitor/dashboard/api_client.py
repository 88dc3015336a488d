"""HTTP client for the environments API, used by the dashboard state cache."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from envmonitor.config import settings
from envmonitor.modules.environments.schemas import EnvironmentResponse

API_PATH = "/api/environments"


class ApiError(Exception):
    """A request to the environments API failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


class EnvironmentApiClient:
    """Thin wrapper over an httpx.Client pointed at the backend.

    Pass ``http_client`` to reuse an existing client (any ``httpx.Client``,
    including FastAPI's ``TestClient``); otherwise one is built from settings.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(
            base_url=base_url or settings.dashboard_api_url,
            timeout=timeout if timeout is not None else settings.dashboard_timeout_s,
        )

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "EnvironmentApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(f"{method} {path} failed: {exc}") from exc
        if response.is_error:
            raise ApiError(
                f"{method} {path} returned {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )
        return response

    def _parse(self, response: httpx.Response, many: bool = False) -> Any:
        """Decode a 2xx body into records; a body that is not what the API returns is an ApiError."""
        request = response.request
        try:
            body = response.json()
            if many:
                if not isinstance(body, list):
                    raise ValueError(f"expected a JSON array, got {type(body).__name__}")
                return [EnvironmentResponse.model_validate(env) for env in body]
            return EnvironmentResponse.model_validate(body)
        except (ValueError, ValidationError) as exc:
            raise ApiError(
                f"{request.method} {request.url.path} returned an unreadable body: {exc}",
                status_code=response.status_code,
            ) from exc

    def get_environments(self) -> List[EnvironmentResponse]:
        return self._parse(self._request("GET", API_PATH), many=True)

    def get_environment(self, environment_id: str) -> EnvironmentResponse:
        return self._parse(self._request("GET", f"{API_PATH}/{environment_id}"))

    def create_environment(self, payload: Dict[str, Any]) -> EnvironmentResponse:
        return self._parse(self._request("POST", API_PATH, json=payload))

    def update_environment(self, environment_id: str, payload: Dict[str, Any]) -> EnvironmentResponse:
        return self._parse(self._request("PUT", f"{API_PATH}/{environment_id}", json=payload))

    def delete_environment(self, environment_id: str) -> None:
        self._request("DELETE", f"{API_PATH}/{environment_id}")
