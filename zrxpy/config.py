import os
from enum import IntEnum

from pydantic import BaseModel, Field

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
GWEI = 10**9


class NetworkType(IntEnum):
    """
    Networks with 0x v3 deployments, by chain id.
    """

    MAINNET = 1
    ROPSTEN = 3
    KOVAN = 42


class NodeConfig(BaseModel):
    """
    Connection settings for the JSON-RPC node.
    """

    rpc_url: str = DEFAULT_RPC_URL

    timeout: float = Field(default=10.0, gt=0)
    """
    Seconds to wait for a single RPC response.
    """

    poll_interval: float = Field(default=1.0, gt=0)
    """
    Seconds between receipt and log polls.
    """

    @classmethod
    def from_env(cls) -> "NodeConfig":
        values: dict = {}
        if rpc_url := os.environ.get("ZRX_RPC_URL"):
            values["rpc_url"] = rpc_url
        if timeout := os.environ.get("ZRX_RPC_TIMEOUT"):
            values["timeout"] = timeout
        if poll_interval := os.environ.get("ZRX_POLL_INTERVAL"):
            values["poll_interval"] = poll_interval

        return cls.model_validate(values)


class GasConfig(BaseModel):
    """
    Fixed gas settings, with optional limits per contract method.
    """

    gas_limit: int = Field(default=400_000, gt=0)
    gas_price: int = Field(default=5 * GWEI, ge=0)
    method_gas_limits: dict[str, int] = {}
    method_gas_prices: dict[str, int] = {}
