"""
Thin REST client for the course API.

Every call carries the session's bearer token. After a successful write the
full list is fetched again so the session never holds a stale copy.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from app.client.session import Session

logger = logging.getLogger("app.client.api")

GENERIC_ERROR = "Something went wrong. Please try again."
BANNER_SECONDS = 3.0


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ConflictError(ApiError):
    """400 from the API; the message is meant to be shown as-is."""


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


_ERRORS_BY_STATUS = {
    400: ConflictError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}


class Banner:
    """Transient error banner that clears itself after a fixed delay."""

    def __init__(self, seconds: float = BANNER_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._message: Optional[str] = None
        self._shown_at = 0.0

    def show(self, message: str) -> None:
        self._message = message
        self._shown_at = self._clock()

    @property
    def message(self) -> Optional[str]:
        if self._message is not None and self._clock() - self._shown_at >= self.seconds:
            self._message = None
        return self._message


class ScheduleClient:
    def __init__(
        self,
        session: Session,
        base_url: str = "http://localhost:5000/api",
        http: Any = None,
        timeout: float = 10.0,
        banner: Optional[Banner] = None,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        # anything with requests' request()/Response shape works here
        self.http = http or requests.Session()
        self.timeout = timeout
        self.banner = banner or Banner()

    def _headers(self) -> Dict[str, str]:
        if self.session.user is None:
            raise UnauthorizedError(401, "Not signed in")
        return {"Authorization": f"Bearer {self.session.user.token}"}

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(method, url, headers=self._headers(), json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            self.banner.show(GENERIC_ERROR)
            raise ApiError(0, GENERIC_ERROR) from exc

        if resp.status_code >= 400:
            try:
                message = resp.json().get("message") or GENERIC_ERROR
            except (ValueError, AttributeError):
                message = GENERIC_ERROR
            error_cls = _ERRORS_BY_STATUS.get(resp.status_code, ApiError)
            logger.warning("%s %s -> %s: %s", method, url, resp.status_code, message)
            if error_cls is not ConflictError:
                self.banner.show(GENERIC_ERROR)
            raise error_cls(resp.status_code, message)

        try:
            return resp.json()
        except ValueError as exc:
            logger.error("%s %s -> %s with a non-JSON body", method, url, resp.status_code)
            self.banner.show(GENERIC_ERROR)
            raise ApiError(resp.status_code, GENERIC_ERROR) from exc

    def refresh(self) -> List[Dict[str, Any]]:
        self.session.courses = self._request("GET", "/courses")
        return self.session.courses

    def create_course(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        created = self._request("POST", "/courses", json=draft)
        self.refresh()
        return created

    def update_course(self, course_id: str, draft: Dict[str, Any]) -> Dict[str, Any]:
        updated = self._request("PUT", f"/courses/{course_id}", json=draft)
        self.refresh()
        return updated

    def save_course(self, draft: Dict[str, Any], course_id: Optional[str] = None) -> Dict[str, Any]:
        if course_id:
            return self.update_course(course_id, draft)
        return self.create_course(draft)

    def delete_course(self, course_id: str) -> str:
        result = self._request("DELETE", f"/courses/{course_id}")
        self.refresh()
        return result.get("message", "")
