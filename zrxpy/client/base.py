import itertools
import json
import logging
from typing import Any

import httpx

from zrxpy.exceptions import NodeQueryError
from zrxpy.logger import get_logger


class JsonRpcError(NodeQueryError):
    """
    The node answered with a JSON-RPC error object.
    """

    def __init__(self, method: str, code: int | None, message: str, data: Any = None):
        self.method = method
        self.code = code
        self.data = data
        super().__init__(f"{method} failed ({code}): {message}")


class BaseClient:
    """
    Base JSON-RPC client over HTTP.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        log_level: int = logging.INFO,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        self._ids = itertools.count(1)
        self.logger = get_logger(__name__, log_level=log_level)

    async def _rpc(self, method: str, params: list[Any] | None = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        self.logger.debug(f"RPC {method} with params: {payload['params']}")

        try:
            response = await self._client.post(self.base_url, json=payload)
            response.raise_for_status()
            json_response = response.json()

        except httpx.TimeoutException as e:
            self.logger.error(f"RPC {method} timed out: {e}")
            raise NodeQueryError(f"{method} timed out.") from e
        except httpx.HTTPStatusError as e:
            self.logger.error(
                f"HTTP error {e.response.status_code} during {method}: {e.response.text[:100]}"
            )
            raise NodeQueryError(f"{method} failed with HTTP {e.response.status_code}.") from e
        except httpx.RequestError as e:
            self.logger.error(f"An error occurred during {method}: {type(e).__name__} - {e}")
            raise NodeQueryError(f"{method} failed: {type(e).__name__}.") from e
        except json.JSONDecodeError as e:
            self.logger.error(
                f"Failed to decode JSON response for {method}: {response.text[:100]}..."
            )
            raise NodeQueryError(f"Invalid JSON received for {method}.") from e

        if not isinstance(json_response, dict):
            raise NodeQueryError(f"Invalid response for {method}: {json_response!r}")

        elif error := json_response.get("error"):
            if isinstance(error, dict):
                raise JsonRpcError(
                    method, error.get("code"), error.get("message", ""), error.get("data")
                )

            raise JsonRpcError(method, None, str(error))

        elif "result" not in json_response:
            raise NodeQueryError(f"Response for {method} has no result.")

        return json_response["result"]

    async def close(self) -> None:
        """
        Closes the underlying httpx async client.
        """
        self.logger.debug("Closing async HTTP client.")
        if self._client and isinstance(self._client, httpx.AsyncClient):
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
