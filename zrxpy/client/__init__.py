from zrxpy.client.node import JsonRpcNode

__all__ = ["JsonRpcNode"]
