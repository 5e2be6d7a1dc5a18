"""HTTP client for the /live endpoints, used by the go-live poller and the CLI."""

from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel

from app.api.live.schemas.live import (
    CheckAndGoLiveOut,
    CreateLiveOut,
    EndLiveOut,
    StatusOut,
)
from app.app_config import get_app_environ_config


class LiveApiError(Exception):
    """Transport failure, timeout or non-2xx answer from the live API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errcode: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errcode = errcode

    @property
    def timed_out(self) -> bool:
        return self.status_code is None and self.errcode == "timeout"


class LiveApiClient:
    def __init__(
        self,
        base_url: str,
        session_token: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = (
            timeout if timeout is not None else get_app_environ_config().POLL_REQUEST_TIMEOUT_SECONDS
        )
        self._session_token = session_token
        self._transport = transport

    def _build_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._session_token}"}

    async def _request(
        self, method: str, path: str, *, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.request(
                    method, url, json=json, headers=self._build_headers()
                )
        except httpx.TimeoutException as e:
            raise LiveApiError(f"{method} {path} timed out", errcode="timeout") from e
        except httpx.TransportError as e:
            raise LiveApiError(f"{method} {path} failed: {type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            errcode = data.get("errcode") if isinstance(data, dict) else None
            errmesg = data.get("errmesg") if isinstance(data, dict) else None
            logger.debug("{} {} -> {} {}", method, path, response.status_code, errcode)
            raise LiveApiError(
                errmesg or f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                errcode=errcode,
            )

        return data

    async def _call(
        self, model: type[BaseModel], method: str, path: str, json: dict[str, Any] | None = None
    ) -> Any:
        data = await self._request(method, path, json=json)
        try:
            return model.model_validate(data)
        except ValueError as e:
            raise LiveApiError(f"{method} {path} returned an unexpected body") from e

    async def create_live(
        self,
        *,
        title: str | None = None,
        description: str | None = None,
        privacy: str | None = None,
    ) -> CreateLiveOut:
        body = {"title": title, "description": description, "privacy": privacy}
        body = {k: v for k, v in body.items() if v is not None}
        return await self._call(CreateLiveOut, "POST", "/live/create", body)

    async def check_and_go_live(
        self, broadcast_id: str, budget_seconds: float | None = None
    ) -> CheckAndGoLiveOut:
        body: dict[str, Any] = {"broadcastId": broadcast_id}
        if budget_seconds is not None:
            body["budgetSeconds"] = budget_seconds
        return await self._call(CheckAndGoLiveOut, "POST", "/live/check-and-go-live", body)

    async def get_status(self, broadcast_id: str) -> StatusOut:
        return await self._call(StatusOut, "GET", f"/live/status/{broadcast_id}")

    async def end_live(self, broadcast_id: str) -> EndLiveOut:
        return await self._call(EndLiveOut, "POST", "/live/end", {"broadcastId": broadcast_id})
