"""HTTP client for the ledger gateway API.

Mutations return transaction queues. A queue is applied only once it is
run; HttpJob.run() starts it and polls until it settles.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import httpx

from permissions_console.backend.interfaces import Job, LedgerBackend
from permissions_console.domain.delegates import Delegate, SecurityToken
from permissions_console.exceptions import (
    BackendError,
    JobExecutionError,
    JobTimeoutError,
)
from permissions_console.logging_config import get_logger

logger = get_logger(__name__)

QUEUE_SUCCEEDED = "Succeeded"
QUEUE_FAILED = "Failed"


def _segment(value: str) -> str:
    return quote(value, safe="")


class HttpJob(Job):
    def __init__(
        self,
        backend: HttpLedgerBackend,
        job_id: str,
        *,
        poll_interval: float,
        timeout: float,
    ) -> None:
        self._backend = backend
        self._id = job_id
        self._poll_interval = poll_interval
        self._timeout = timeout

    @property
    def id(self) -> str:
        return self._id

    async def run(self) -> None:
        path = f"/transaction-queues/{_segment(self._id)}"
        queue = await self._backend._request_json("POST", f"{path}/run")
        logger.info("job_started", job_id=self._id)
        try:
            async with asyncio.timeout(self._timeout):
                while True:
                    status = (queue or {}).get("status")
                    if status == QUEUE_SUCCEEDED:
                        logger.info("job_completed", job_id=self._id)
                        return
                    if status == QUEUE_FAILED:
                        reason = queue.get("error") or "unknown error"
                        raise JobExecutionError(self._id, reason)
                    await asyncio.sleep(self._poll_interval)
                    queue = await self._backend._request_json("GET", path)
        except TimeoutError:
            raise JobTimeoutError(self._id, self._timeout) from None


class HttpLedgerBackend(LedgerBackend):
    def __init__(
        self,
        base_url: str = "http://localhost:8545",
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        *,
        poll_interval: float = 1.0,
        job_timeout: float = 600.0,
    ) -> None:
        self._client = (
            client
            if client is not None
            else httpx.AsyncClient(base_url=base_url, timeout=timeout)
        )
        self._base_url = base_url
        self._poll_interval = poll_interval
        self._job_timeout = job_timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            r = await self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            raise BackendError(f"Ledger gateway unreachable: {exc}") from exc

        if 200 <= r.status_code < 300:
            if r.status_code == 204:
                return None
            return r.json()

        detail = ""
        try:
            payload = r.json()
            raw_detail = payload.get("detail")
            detail = raw_detail if isinstance(raw_detail, str) else str(raw_detail)
        except (ValueError, AttributeError):
            detail = r.text

        raise BackendError(
            detail or f"{method} {path} failed", status_code=r.status_code
        )

    def _token_path(self, token: SecurityToken) -> str:
        return f"/tokens/{_segment(token.symbol)}"

    def _job(self, queue: Any) -> HttpJob:
        if not isinstance(queue, dict) or "id" not in queue:
            raise BackendError("Ledger gateway returned no transaction queue")
        job_id = str(queue["id"])
        logger.info("job_submitted", job_id=job_id)
        return HttpJob(
            self,
            job_id,
            poll_interval=self._poll_interval,
            timeout=self._job_timeout,
        )

    # === Queries ===

    async def list_tokens(self) -> list[SecurityToken]:
        data = await self._request_json("GET", "/tokens")
        assert isinstance(data, list)
        return [
            SecurityToken(
                symbol=item["symbol"],
                address=item.get("address", ""),
                name=item.get("name", ""),
            )
            for item in data
        ]

    async def get_feature_status(self, token: SecurityToken) -> dict[str, bool]:
        data = await self._request_json("GET", f"{self._token_path(token)}/features")
        assert isinstance(data, dict)
        return {str(name): bool(enabled) for name, enabled in data.items()}

    async def get_grantable_roles(self, token: SecurityToken) -> list[str]:
        data = await self._request_json(
            "GET", f"{self._token_path(token)}/permissions/roles"
        )
        assert isinstance(data, list)
        return [str(role) for role in data]

    async def get_all_delegates(self, token: SecurityToken) -> list[Delegate]:
        data = await self._request_json(
            "GET", f"{self._token_path(token)}/permissions/delegates"
        )
        assert isinstance(data, list)
        return [Delegate.from_dict(item) for item in data]

    # === Mutations ===

    async def enable_feature(self, token: SecurityToken, feature: str) -> HttpJob:
        queue = await self._request_json(
            "POST", f"{self._token_path(token)}/features/{_segment(feature)}/enable"
        )
        return self._job(queue)

    async def disable_feature(self, token: SecurityToken, feature: str) -> HttpJob:
        queue = await self._request_json(
            "POST", f"{self._token_path(token)}/features/{_segment(feature)}/disable"
        )
        return self._job(queue)

    async def assign_role(
        self, token: SecurityToken, address: str, role: str, description: str
    ) -> HttpJob:
        queue = await self._request_json(
            "POST",
            f"{self._token_path(token)}/permissions/delegates/{_segment(address)}/roles",
            json={"role": role, "description": description},
        )
        return self._job(queue)

    async def revoke_role(
        self, token: SecurityToken, address: str, role: str
    ) -> HttpJob:
        queue = await self._request_json(
            "DELETE",
            f"{self._token_path(token)}/permissions/delegates/{_segment(address)}"
            f"/roles/{_segment(role)}",
        )
        return self._job(queue)
