"""
Backend HTTP client.

Speaks the backend's REST contract. Unlike the access protocol, this client
does not fall back: every transport failure, non-success status or malformed
payload is raised as ``RemoteError`` so the caller can decide what to do.

Usage:
    async with RemoteClient(settings.api) as client:
        if await client.health_check():
            user, token = await client.login(email, password)
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

import httpx
from loguru import logger

from entprep.config import ApiConfig
from entprep.core.errors import QuotaExhaustedError, RemoteError
from entprep.core.models import Question, Test, User

T = TypeVar("T")


class RemoteClient:
    """
    HTTP client for the quiz backend.

    Supports:
    - Liveness probe
    - Login / register / logout with bearer tokens
    - Test and question listing
    - Quiz generation (free-form and track-based)
    - Result submission
    - Assistant chat with forwarded third-party model keys
    """

    def __init__(
        self,
        config: ApiConfig,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._token: str | None = token

    async def __aenter__(self) -> "RemoteClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"

            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=headers,
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        """Replace the bearer token used on subsequent calls."""
        self._token = token
        if self._client is None:
            return
        if token:
            self._client.headers["Authorization"] = f"Bearer {token}"
        else:
            self._client.headers.pop("Authorization", None)

    # =========================================================================
    # Plumbing
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            client = await self._ensure_client()
            response = await client.request(method, path, json=json, headers=headers)
        except httpx.RequestError as e:
            raise RemoteError(f"{method} {path}: {e.__class__.__name__}: {e}") from e
        except (TypeError, ValueError) as e:
            # Unencodable request body
            raise RemoteError(f"{method} {path}: cannot encode request: {e}") from e

        if response.status_code == 402:
            raise QuotaExhaustedError(f"{method} {path}: payment required")
        if not response.is_success:
            raise RemoteError(
                f"{method} {path}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"{method} {path}: invalid JSON body") from e

    @staticmethod
    def _decode(what: str, parse: Callable[[], T]) -> T:
        try:
            return parse()
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RemoteError(f"malformed {what} response: {e}") from e

    # =========================================================================
    # Health
    # =========================================================================

    async def health_check(self) -> bool:
        """Check if the backend is reachable. Never raises."""
        try:
            client = await self._ensure_client()
            response = await client.get(self.config.health_endpoint)
            return response.is_success
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            logger.debug(f"Health check failed: {e}")
            return False

    # =========================================================================
    # Authentication
    # =========================================================================

    async def login(self, email: str, password: str) -> tuple[User, str]:
        data = await self._request(
            "POST", self.config.login_endpoint, json={"email": email, "password": password}
        )
        user, token = self._decode(
            "login", lambda: (User.from_dict(data["user"]), str(data["token"]))
        )
        self.set_token(token)
        logger.info(f"Authenticated as {user.email}")
        return user, token

    async def register(self, email: str, password: str, name: str, role: str) -> User:
        data = await self._request(
            "POST",
            self.config.register_endpoint,
            json={"email": email, "password": password, "name": name, "role": role},
        )
        return self._decode("register", lambda: User.from_dict(data["user"]))

    async def logout(self) -> None:
        if not self._token:
            raise RemoteError("logout: no session token")
        await self._request("POST", self.config.logout_endpoint)
        self.set_token(None)

    # =========================================================================
    # Content
    # =========================================================================

    async def get_tests(self) -> list[Test]:
        data = await self._request("GET", self.config.tests_endpoint)
        return self._decode("tests", lambda: [Test.from_dict(t) for t in data])

    async def get_questions(self) -> list[Question]:
        data = await self._request("GET", self.config.questions_endpoint)
        return self._decode("questions", lambda: [Question.from_dict(q) for q in data])

    async def generate_quiz(self, subject: str, difficulty: str, count: int) -> list[Question]:
        data = await self._request(
            "POST",
            self.config.generate_quiz_endpoint,
            json={"subject": subject, "difficulty": difficulty, "count": count},
        )
        return self._decode(
            "generate-quiz", lambda: [Question.from_dict(q) for q in data["questions"]]
        )

    async def generate_track_quiz(self, track: str) -> list[Question]:
        data = await self._request(
            "POST", self.config.generate_track_quiz_endpoint, json={"track": track}
        )
        return self._decode(
            "generate-ent-quiz",
            lambda: [Question.from_dict(q) for q in data.get("questions") or []],
        )

    # =========================================================================
    # Results & assistant
    # =========================================================================

    async def submit_test(self, payload: dict[str, Any]) -> None:
        await self._request("POST", self.config.submit_endpoint, json=payload)
        logger.debug(f"Submitted result for {payload.get('subject')}")

    async def chat(
        self,
        message: str,
        context: str | None = None,
        language: str | None = None,
        api_keys: dict[str, str] | None = None,
    ) -> str:
        """Send an assistant message. A 402 raises ``QuotaExhaustedError``."""
        data = await self._request(
            "POST",
            self.config.chat_endpoint,
            json={"message": message, "context": context, "language": language},
            headers={k: v for k, v in (api_keys or {}).items() if v},
        )
        return self._decode("chat", lambda: str(data["response"]))
