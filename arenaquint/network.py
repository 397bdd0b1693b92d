"""Client for the authorization and achievements services."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

import requests

from .model import Achievement, MatchStats


class NetworkError(Exception):
    """A request to a service failed or returned something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkClient:
    """Talks to the authorization and achievements services of the game."""

    def __init__(
        self,
        authorization_url: str,
        achievement_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self.authorization_url = authorization_url
        self.achievement_url = achievement_url
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.user_id = 0
        self._achievements: list[Achievement] = []

    @property
    def achievements(self) -> list[Achievement]:
        """Achievements received with the last successful stats upload."""
        return list(self._achievements)

    @classmethod
    def from_config(cls, path: Union[str, Path]) -> "NetworkClient":
        """Build a client from a JSON file naming both service URLs."""
        with open(path, encoding="utf-8") as fh:
            info = json.load(fh)
        try:
            authorization = info["authorization"]
            achievements = info["achievements"]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"service configuration lacks {exc}") from None
        if not isinstance(authorization, str) or not isinstance(achievements, str):
            raise ValueError("service URLs must be strings")
        return cls(authorization, achievements)

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise NetworkError(str(exc)) from exc
        if response.status_code != 200:
            raise NetworkError(
                f"{method} {url} answered with status {response.status_code}",
                response.status_code,
            )
        return response

    def auth(self, login: str, password: str) -> int:
        """Log in and return the player id the server assigned."""
        response = self._request(
            "GET",
            self.authorization_url,
            params={"username": login, "password": password},
        )
        try:
            user_id = response.json()["id"]
        except (ValueError, KeyError, TypeError) as exc:
            raise NetworkError(f"malformed authorization answer: {exc}") from exc
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise NetworkError("player id must be an integer")
        self.user_id = user_id
        return user_id

    def send_match_stats(self, stats: MatchStats) -> list[Achievement]:
        """Upload match statistics and return the achievements awarded."""
        response = self._request(
            "POST",
            self.achievement_url,
            params={"playerId": str(self.user_id)},
            data=json.dumps(stats.to_payload()),
            headers={"Content-Type": "application/json"},
        )
        try:
            entries = response.json()["achievements"]
            achievements = [Achievement.from_json(entry) for entry in entries]
        except (ValueError, KeyError, TypeError) as exc:
            raise NetworkError(f"malformed achievements answer: {exc}") from exc
        self._achievements = achievements
        return list(achievements)