import pytest
from pydantic import ValidationError

from zrxpy.config import DEFAULT_RPC_URL, GWEI, GasConfig, NetworkType, NodeConfig
from zrxpy.evm.gas import GasProvider, StaticGasProvider


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ZRX_RPC_URL", "ZRX_RPC_TIMEOUT", "ZRX_POLL_INTERVAL"):
        monkeypatch.delenv(name, raising=False)


def test_node_config_defaults():
    config = NodeConfig.from_env()
    assert config.rpc_url == DEFAULT_RPC_URL
    assert config.timeout == 10.0
    assert config.poll_interval == 1.0


def test_node_config_from_env(monkeypatch):
    monkeypatch.setenv("ZRX_RPC_URL", "https://kovan.example")
    monkeypatch.setenv("ZRX_RPC_TIMEOUT", "2.5")
    config = NodeConfig.from_env()
    assert config.rpc_url == "https://kovan.example"
    assert config.timeout == 2.5


def test_node_config_invalid_env(monkeypatch):
    monkeypatch.setenv("ZRX_POLL_INTERVAL", "0")
    with pytest.raises(ValidationError):
        NodeConfig.from_env()


def test_network_type():
    assert NetworkType(42) is NetworkType.KOVAN
    assert int(NetworkType.MAINNET) == 1
    assert NetworkType.ROPSTEN == 3


def test_gas_config_defaults():
    config = GasConfig()
    assert config.gas_limit == 400_000
    assert config.gas_price == 5 * GWEI


def test_static_gas_provider():
    provider = StaticGasProvider(
        GasConfig(
            gas_limit=100,
            gas_price=2,
            method_gas_limits={"fillOrder": 300},
            method_gas_prices={"fillOrder": 3},
        )
    )
    assert isinstance(provider, GasProvider)
    assert provider.gas_limit() == 100
    assert provider.gas_limit("cancelOrder") == 100
    assert provider.gas_limit("fillOrder") == 300
    assert provider.gas_price(None) == 2
    assert provider.gas_price("fillOrder") == 3


def test_static_gas_provider_default_config():
    assert StaticGasProvider().gas_limit() == 400_000
