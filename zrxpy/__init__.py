from zrxpy.eip712.encoder import hash_structured_data, validate_structured_data
from zrxpy.evm.contract import Contract
from zrxpy.evm.pipeline import TransactionPipeline
from zrxpy.evm.watcher import TransactionWatcher
from zrxpy.model.order import Order, SignedOrder
from zrxpy.model.signature import SignatureScheme
from zrxpy.sign.codec import decode_scheme, encode_signature
from zrxpy.sign.signer import OrderSigner, recover_signer

__all__ = [
    "Contract",
    "Order",
    "OrderSigner",
    "SignatureScheme",
    "SignedOrder",
    "TransactionPipeline",
    "TransactionWatcher",
    "decode_scheme",
    "encode_signature",
    "hash_structured_data",
    "recover_signer",
    "validate_structured_data",
]
