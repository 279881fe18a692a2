from typing import Any

from eth_pydantic_types.hex.int import HexInt32
from pydantic_core.core_schema import ValidationInfo, plain_serializer_function_ser_schema


class Uint256(HexInt32):
    """
    An unsigned 256-bit integer that also accepts decimal strings. Serializes
    to a decimal string in JSON, the way 0x relayers transport amounts.
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, value, handler=None):
        schema = super().__get_pydantic_core_schema__(value, handler)
        schema["serialization"] = plain_serializer_function_ser_schema(
            function=str, when_used="json"
        )
        return schema

    @classmethod
    def __eth_pydantic_validate__(
        cls, value: Any, info: ValidationInfo | None = None, **kwargs
    ) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Unsupported type {type(value)}.")

        elif isinstance(value, str) and value.isdecimal():
            value = int(value)

        return super().__eth_pydantic_validate__(value, info, **kwargs)
