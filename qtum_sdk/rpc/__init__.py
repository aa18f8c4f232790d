"""
Node RPC layer: transport plus typed wrappers for both API profiles.
"""
from typing import Union

from .eth import EthRPC
from .qtum import QtumRPC
from .transport import HTTPTransport, RPCTransport

AnyRPC = Union[QtumRPC, EthRPC]

__all__ = ["AnyRPC", "EthRPC", "HTTPTransport", "QtumRPC", "RPCTransport"]
