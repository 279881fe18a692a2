from typing import Protocol, runtime_checkable

from zrxpy.config import GasConfig


@runtime_checkable
class GasProvider(Protocol):
    """
    Supplies gas limit and price, optionally per contract method.
    """

    def gas_limit(self, method_name: str | None = None) -> int: ...

    def gas_price(self, method_name: str | None = None) -> int: ...


class StaticGasProvider:
    def __init__(self, config: GasConfig | None = None):
        self.config = config or GasConfig()

    def __repr__(self) -> str:
        return f"<StaticGasProvider limit={self.config.gas_limit} price={self.config.gas_price}>"

    def gas_limit(self, method_name: str | None = None) -> int:
        if method_name is not None and method_name in self.config.method_gas_limits:
            return self.config.method_gas_limits[method_name]

        return self.config.gas_limit

    def gas_price(self, method_name: str | None = None) -> int:
        if method_name is not None and method_name in self.config.method_gas_prices:
            return self.config.method_gas_prices[method_name]

        return self.config.gas_price
