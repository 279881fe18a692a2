import pytest

from zrxpy.evm.builder import TransactionBuilder
from zrxpy.exceptions import CannotBuildTransaction
from zrxpy.model.transaction import ContractMethod

CANCEL_ORDER = ContractMethod("cancelOrder", ("uint256",))


@pytest.fixture
def builder(address, gas_provider):
    return TransactionBuilder(address, gas_provider)


def test_build_invocation(builder, address, exchange_address):
    invocation = CANCEL_ORDER.invoke(exchange_address, 7)
    request = builder.build(3, invocation=invocation)

    assert request.nonce == 3
    assert request.sender == address
    assert request.to.lower() == exchange_address
    assert request.value == 0
    assert request.gas == 90_000
    assert request.gas_price == 10**9
    assert request.data == "0x" + invocation.data.hex()
    assert request.data.startswith("0x" + CANCEL_ORDER.selector.hex())


def test_build_invocation_ignores_destination(builder, exchange_address):
    invocation = CANCEL_ORDER.invoke(exchange_address, 7)
    request = builder.build(0, invocation=invocation, destination="0x" + "22" * 20)
    assert request.to.lower() == exchange_address


def test_build_transfer(builder):
    destination = "0x" + "22" * 20
    request = builder.build(1, destination=destination, value=5, data=b"\xca\xfe")

    assert request.to.lower() == destination
    assert request.value == 5
    assert request.gas == 21_000
    assert request.data == "0xcafe"


def test_build_asks_gas_provider_per_method(address, exchange_address, mocker):
    gas_provider = mocker.Mock()
    gas_provider.gas_limit.return_value = 50_000
    gas_provider.gas_price.return_value = 7
    builder = TransactionBuilder(address, gas_provider)

    builder.build(0, invocation=CANCEL_ORDER.invoke(exchange_address, 1))
    gas_provider.gas_limit.assert_called_once_with("cancelOrder")
    gas_provider.gas_price.assert_called_once_with("cancelOrder")

    gas_provider.reset_mock()
    request = builder.build(0, destination=exchange_address)
    gas_provider.gas_limit.assert_called_once_with(None)
    assert request.gas == 50_000
    assert request.gas_price == 7


def test_build_without_target(builder):
    with pytest.raises(CannotBuildTransaction):
        builder.build(0)


def test_build_invalid_destination(builder):
    with pytest.raises(CannotBuildTransaction):
        builder.build(0, destination="0xnot-an-address")


def test_to_signable(builder, exchange_address):
    request = builder.build(9, destination=exchange_address, value=1, data=b"\x01")
    tx = request.to_signable(42)

    assert tx == {
        "nonce": 9,
        "gasPrice": 10**9,
        "gas": 21_000,
        "value": 1,
        "data": b"\x01",
        "chainId": 42,
        "to": request.to,
    }
