"""Client for the Shelly Gen2 cover RPC API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from .const import DEFAULT_POLL_TIMEOUT
from .exceptions import DeviceUnreachable

_LOGGER = logging.getLogger(__name__)

METHOD_GO_TO_POSITION = "Cover.GoToPosition"
METHOD_STOP = "Cover.Stop"
METHOD_GET_STATUS = "Cover.GetStatus"


class ShellyCoverApi:
    """Send commands to and read status from one Shelly cover component."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        timeout: float = DEFAULT_POLL_TIMEOUT,
        component_id: int = 0,
    ) -> None:
        self._session = session
        self._host = host.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._component_id = component_id

    @property
    def host(self) -> str:
        return self._host

    @property
    def base_url(self) -> str:
        return f"http://{self._host}"

    async def _post_rpc(self, method: str, params: dict[str, Any]) -> Any:
        url = f"{self.base_url}/rpc"
        payload = {"id": 1, "method": method, "params": params}
        _LOGGER.debug("POST %s %s", url, payload)
        try:
            async with self._session.post(
                url, json=payload, timeout=self._timeout
            ) as resp:
                if resp.status != 200:
                    raise DeviceUnreachable(
                        f"{method} on {self._host} failed: HTTP {resp.status}"
                    )
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as err:
            raise DeviceUnreachable(f"{method} on {self._host} failed: {err}") from err
        if isinstance(data, dict) and data.get("error") is not None:
            raise DeviceUnreachable(
                f"{method} on {self._host} failed: {data['error']}"
            )
        return data

    async def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with self._session.get(url, timeout=self._timeout) as resp:
                if resp.status != 200:
                    raise DeviceUnreachable(
                        f"GET {path} on {self._host} failed: HTTP {resp.status}"
                    )
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as err:
            raise DeviceUnreachable(
                f"GET {path} on {self._host} failed: {err}"
            ) from err

    async def go_to_position(self, position: int) -> None:
        """Move the cover to an absolute position (0 closed, 100 open)."""
        await self._post_rpc(
            METHOD_GO_TO_POSITION, {"id": self._component_id, "pos": position}
        )

    async def stop(self) -> None:
        """Stop any movement in progress."""
        await self._post_rpc(METHOD_STOP, {"id": self._component_id})

    async def get_position(self) -> int | None:
        """Return the position reported by the device.

        Firmware versions differ between ``current_pos`` and ``pos``; None is
        returned when neither is present (e.g. an uncalibrated cover).
        """
        data = await self._get_json(
            f"/rpc/{METHOD_GET_STATUS}?id={self._component_id}"
        )
        if not isinstance(data, dict):
            return None
        position = data.get("current_pos")
        if position is None:
            position = data.get("pos")
        if position is None:
            return None
        try:
            return int(position)
        except (TypeError, ValueError):
            return None
