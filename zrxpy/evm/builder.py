from typing import TYPE_CHECKING

from zrxpy.exceptions import CannotBuildTransaction
from zrxpy.model.transaction import ContractInvocation, TransactionRequest
from zrxpy.utils.hex import to_hex

if TYPE_CHECKING:
    from zrxpy.evm.gas import GasProvider


class TransactionBuilder:
    """
    Creates unsigned transactions, asking the gas provider for limit and price.
    """

    def __init__(self, sender: str, gas_provider: "GasProvider"):
        self.sender = sender
        self.gas_provider = gas_provider

    def build(
        self,
        nonce: int,
        invocation: ContractInvocation | None = None,
        destination: str | None = None,
        value: int | None = None,
        data: bytes = b"",
    ) -> TransactionRequest:
        """
        Build a transaction for a contract invocation or, without one, for
        the raw ``destination``/``value``/``data``.

        Raises:
            :class:`~zrxpy.exceptions.CannotBuildTransaction`: If there is
              neither an invocation nor a destination.
        """
        if invocation is not None:
            method_name = invocation.method_name
            to = invocation.to
            payload = invocation.data

        elif destination is not None:
            method_name = None
            to = destination
            payload = data

        else:
            raise CannotBuildTransaction("Need a contract invocation or a destination address.")

        try:
            return TransactionRequest(
                nonce=nonce,
                sender=self.sender,
                to=to,
                value=value or 0,
                gas=self.gas_provider.gas_limit(method_name),
                gas_price=self.gas_provider.gas_price(method_name),
                data=to_hex(payload, prefix=True),
            )
        except ValueError as err:
            # Includes pydantic's ValidationError, e.g. a malformed address.
            raise CannotBuildTransaction(f"Invalid transaction fields: {err}") from err
