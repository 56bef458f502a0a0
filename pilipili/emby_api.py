"""Emby server endpoints."""

from __future__ import annotations

import abc
from dataclasses import dataclass

from pilipili.config import get_config
from pilipili.network import (
    DEFAULT_USER_AGENT,
    HttpMethod,
    RequestParameters,
    TargetType,
    Task,
)


class EmbyAPI(TargetType, abc.ABC):
    """Base of all Emby endpoints, addressed through the shared configuration."""

    def base_url(self) -> str:
        return get_config().emby.base_url

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def headers(self) -> list[tuple[str, str]]:
        base_url = get_config().emby.base_url
        return [
            ("accept", "application/json"),
            ("origin", base_url),
            ("referer", f"{base_url}/"),
            ("user-agent", DEFAULT_USER_AGENT),
        ]


@dataclass(frozen=True)
class GetUser(EmbyAPI):
    """Fetch one user by identifier."""

    user_id: str

    def path(self) -> str:
        return f"emby/Users/{self.user_id}"

    def task(self) -> Task:
        return RequestParameters({"api_key": get_config().emby.api_key})