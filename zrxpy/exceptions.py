from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zrxpy.model.transaction import SignedTransaction


class ZrxError(Exception):
    """
    Base class for every error raised by zrxpy.
    """


class SchemaError(ZrxError, ValueError):
    """
    A typed-data schema or message is malformed. The message is never
    hashed when this is raised.
    """


class SigningError(ZrxError):
    """
    The signing primitive failed, e.g. because of a malformed private key.
    """


class MalformedSignatureError(ZrxError, ValueError):
    """
    A signature has the wrong length, an out-of-range header byte,
    or is not valid hex.
    """


class UnsupportedSchemeError(ZrxError, ValueError):
    """
    The trailing signature-type byte is not a known scheme.
    """

    def __init__(self, tag: int):
        self.tag = tag
        super().__init__(f"Unsupported signature type '0x{tag:02x}'.")


class CannotBuildTransaction(ZrxError):
    """
    Neither a contract invocation nor a destination address was given.
    """


class NodeQueryError(ZrxError):
    """
    A query against the node (nonce, receipt, logs, call) failed.
    """


class EmptyResponseError(NodeQueryError):
    """
    The node answered a read-only call with no data.
    """


class BroadcastError(ZrxError):
    """
    The node rejected or could not deliver a signed transaction.
    The signed payload is kept so it can be broadcast again.
    """

    def __init__(self, message: str, signed_transaction: "SignedTransaction | None" = None):
        self.signed_transaction = signed_transaction
        super().__init__(message)
