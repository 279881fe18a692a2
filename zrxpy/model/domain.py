from eip712.messages import EIP712Domain as BaseEIP712Domain
from pydantic import ConfigDict


class EIP712Domain(BaseEIP712Domain):
    """
    The signing context: protocol name and version, chain, and verifying contract.
    """

    model_config = ConfigDict(frozen=True)

    def to_message(self) -> dict:
        return self.model_dump(exclude_none=True)
