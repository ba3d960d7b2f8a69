"""Profile action creators: call the API and dispatch the result into a store."""

from typing import Any
from urllib.parse import quote

import httpx

from devconnector.client.state import Action, ActionType, ProfileState, ProfileStore

PROFILE_PATH = "/api/v1/profile"


def _segment(value: str) -> str:
    """Escape a value for use as one URL path segment."""
    return quote(value, safe="")


def _error_payload(response: httpx.Response) -> dict[str, Any]:
    """Describe a failed response the way the UI shows it."""
    try:
        body = response.json()
    except ValueError:
        body = None
    msg = response.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        msg = body["error"].get("message", msg)
    return {"msg": msg, "status": response.status_code}


class ProfileActions:
    """
    Client-side profile operations.

    Each method performs one API call and dispatches the matching action:
    the server's answer on success, ``PROFILE_ERROR`` on failure (or
    ``NO_REPOS`` when repositories cannot be fetched). Methods return the
    store's state after dispatching.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: ProfileStore,
        api_key: str | None = None,
    ):
        self.client = client
        self.store = store
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"X-API-Key": self.api_key} if self.api_key else {}

    async def _request(
        self,
        method: str,
        path: str,
        success: ActionType,
        json: dict[str, Any] | None = None,
        failure: ActionType = ActionType.PROFILE_ERROR,
    ) -> ProfileState:
        try:
            response = await self.client.request(
                method, f"{PROFILE_PATH}{path}", json=json, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            payload = None if failure == ActionType.NO_REPOS else {"msg": str(exc), "status": None}
            return self.store.dispatch(Action(failure, payload))

        if response.is_error:
            payload = None if failure == ActionType.NO_REPOS else _error_payload(response)
            return self.store.dispatch(Action(failure, payload))

        payload = None if success == ActionType.CLEAR_PROFILE else response.json()
        return self.store.dispatch(Action(success, payload))

    async def get_current_profile(self) -> ProfileState:
        return await self._request("GET", "/me", ActionType.GET_PROFILE)

    async def get_profiles(self) -> ProfileState:
        self.store.dispatch(Action(ActionType.CLEAR_PROFILE))
        return await self._request("GET", "", ActionType.GET_PROFILES)

    async def get_profile_by_id(self, user_id: str) -> ProfileState:
        return await self._request("GET", f"/user/{_segment(user_id)}", ActionType.GET_PROFILE)

    async def get_github_repos(self, username: str) -> ProfileState:
        return await self._request(
            "GET", f"/github/{_segment(username)}", ActionType.GET_REPOS, failure=ActionType.NO_REPOS
        )

    async def create_profile(self, data: dict[str, Any]) -> ProfileState:
        """Create or update the caller's profile."""
        return await self._request("POST", "", ActionType.GET_PROFILE, json=data)

    async def add_experience(self, data: dict[str, Any]) -> ProfileState:
        return await self._request("PUT", "/experience", ActionType.UPDATE_PROFILE, json=data)

    async def add_education(self, data: dict[str, Any]) -> ProfileState:
        return await self._request("PUT", "/education", ActionType.UPDATE_PROFILE, json=data)

    async def delete_experience(self, entry_id: str) -> ProfileState:
        path = f"/experience/{_segment(entry_id)}"
        return await self._request("DELETE", path, ActionType.UPDATE_PROFILE)

    async def delete_education(self, entry_id: str) -> ProfileState:
        path = f"/education/{_segment(entry_id)}"
        return await self._request("DELETE", path, ActionType.UPDATE_PROFILE)

    async def delete_account(self) -> ProfileState:
        """Delete the caller's account, profile and posts. This cannot be undone."""
        return await self._request("DELETE", "", ActionType.CLEAR_PROFILE)
