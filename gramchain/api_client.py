"""Mini README: Client for the GramChain backend REST API.

Structure:
    * Session - bearer token plus the user profile returned at login.
    * ApiError - non-success response carrying the server message and status.
    * GramChainApiClient - authentication, user, and project endpoints.

There is no module-level token. ``login``/``register`` return a new
:class:`Session`, ``refresh`` returns its replacement, and ``logout`` clears
it. Every authenticated call takes the session explicitly. A 401 response
clears the session it was made with before the error is raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from .configuration import get_settings
from .logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class Session:
    token: Optional[str]
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def active(self) -> bool:
        return bool(self.token)

    def clear(self) -> None:
        self.token = None
        self.user = {}


class ApiError(RuntimeError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GramChainApiClient:
    """Thin wrapper over the backend endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        http: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "GramChainApiClient":
        settings = get_settings()
        return cls(settings.api_base_url, timeout=settings.http_timeout_seconds)

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        session: Optional[Session] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if session is not None and session.token:
            headers["Authorization"] = f"Bearer {session.token}"
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.http.request(
                method, url, headers=headers, json=payload, timeout=self.timeout
            )
        except requests.RequestException as error:
            LOGGER.error("API request %s %s failed: %s", method, endpoint, error)
            raise ApiError(f"API request failed: {error}") from error

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not response.ok:
            if response.status_code == 401 and session is not None:
                LOGGER.info("Session token rejected; clearing session")
                session.clear()
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiError(
                message or f"HTTP error! status: {response.status_code}",
                response.status_code,
            )
        return data

    def _session_from(self, data: Dict[str, Any]) -> Session:
        token = data.get("token")
        if not token:
            raise ApiError("Authentication response did not include a token")
        return Session(token=token, user=dict(data.get("user") or {}))

    # Authentication

    def register(self, *, name: str, email: str, password: str, role: str) -> Session:
        data = self._request(
            "POST",
            "/auth/register",
            payload={"name": name, "email": email, "password": password, "role": role},
        )
        return self._session_from(data)

    def login(self, email: str, password: str, role: str) -> Session:
        data = self._request(
            "POST", "/auth/login", payload={"email": email, "password": password, "role": role}
        )
        session = self._session_from(data)
        LOGGER.info("Logged in as %s (%s)", session.user.get("name", email), role)
        return session

    def current_user(self, session: Session) -> Dict[str, Any]:
        return self._request("GET", "/auth/me", session=session)

    def refresh(self, session: Session) -> Session:
        """Re-validate the token and return a replacement session."""

        data = self._request(
            "POST", "/auth/verify-token", session=session, payload={"token": session.token}
        )
        return Session(token=data.get("token") or session.token, user=dict(data.get("user") or session.user))

    def logout(self, session: Session) -> None:
        session.clear()

    # Users

    def list_users(self, session: Session) -> Dict[str, Any]:
        return self._request("GET", "/users", session=session)

    def get_user(self, session: Session, user_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/users/{user_id}", session=session)

    def update_user(
        self,
        session: Session,
        user_id: str,
        *,
        name: Optional[str] = None,
        organization: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            key: value
            for key, value in (("name", name), ("organization", organization))
            if value is not None
        }
        return self._request("PUT", f"/users/{user_id}", session=session, payload=payload)

    # Projects

    def list_projects(self, session: Session) -> Dict[str, Any]:
        return self._request("GET", "/projects", session=session)

    def create_project(
        self,
        session: Session,
        *,
        name: str,
        description: str,
        location: str,
        total_budget: float,
        contractor: str,
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/projects",
            session=session,
            payload={
                "name": name,
                "description": description,
                "location": location,
                "totalBudget": total_budget,
                "contractor": contractor,
            },
        )

    def allocate_funds(self, session: Session, project_id: str, amount: float) -> Dict[str, Any]:
        return self._request(
            "PUT", f"/projects/{project_id}/allocate", session=session, payload={"amount": amount}
        )

    def approve_payment(self, session: Session, project_id: str, milestone_id: str) -> Dict[str, Any]:
        return self._request(
            "PUT",
            f"/projects/{project_id}/approve-payment",
            session=session,
            payload={"milestoneId": milestone_id},
        )

    def submit_milestone(
        self, session: Session, project_id: str, *, name: str, description: str, amount: float
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/projects/{project_id}/milestones",
            session=session,
            payload={"name": name, "description": description, "amount": amount},
        )

    def project_transactions(self, session: Session, project_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/projects/{project_id}/transactions", session=session)
