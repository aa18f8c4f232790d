"""
ABI encoding and decoding for contract calls and event logs.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from ._rate_limited_log import rate_limited_log
from .models import LogEntry
from .utils import ensure_hex0x, strip_hex0x

logger = logging.getLogger(__name__)

ABIDefinition = Mapping[str, Any]

DYNAMIC_INDEXED_TYPES = ("string", "bytes")


def abi_type(param: ABIDefinition) -> str:
    """Canonical type string of an ABI input/output, expanding tuples."""
    type_str = param["type"]
    if type_str.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param.get("components", []))
        return f"({inner}){type_str[len('tuple'):]}"
    return type_str


def method_signature(method: ABIDefinition) -> str:
    """Signature such as ``transfer(address,uint256)``."""
    types = ",".join(abi_type(i) for i in method.get("inputs", []))
    return f"{method['name']}({types})"


def method_selector(method: ABIDefinition) -> bytes:
    return bytes(Web3.keccak(text=method_signature(method))[:4])


def event_topic(event: ABIDefinition) -> str:
    """Topic0 (keccak of the signature) of an event, 0x-prefixed lowercase hex."""
    return Web3.to_hex(Web3.keccak(text=method_signature(event))).lower()


def is_constant(method: ABIDefinition) -> bool:
    """True for methods that cannot change state."""
    if method.get("constant"):
        return True
    return method.get("stateMutability") in ("view", "pure")


def _normalize(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def encode_inputs(method: ABIDefinition, args: Sequence[Any] = ()) -> str:
    """
    Encode call data for a method.

    Returns:
        Selector plus encoded arguments as hex without the 0x prefix
    """
    inputs = method.get("inputs", [])
    if len(args) != len(inputs):
        raise ValueError(
            f"{method_signature(method)} expects {len(inputs)} arguments, got {len(args)}"
        )

    # Qtum hex addresses usually come without the 0x prefix
    values = [
        ensure_hex0x(arg) if inp["type"] == "address" and isinstance(arg, str) else arg
        for inp, arg in zip(inputs, args)
    ]
    types = [abi_type(i) for i in inputs]
    return (method_selector(method) + encode(types, values)).hex()


def decode_outputs(method: ABIDefinition, output_hex: str) -> List[Any]:
    """Decode the return data of a method call into a list of values."""
    types = [abi_type(o) for o in method.get("outputs", [])]
    data = bytes.fromhex(strip_hex0x(output_hex))
    return [_normalize(v) for v in decode(types, data)]


class ContractLogDecoder:
    """
    Decodes raw event logs against a set of event ABI definitions.

    Decoding is a pure function of the log: the same raw log always yields an
    equal result.
    """

    def __init__(self, abi: Iterable[ABIDefinition]):
        self.abi = [d for d in abi if d.get("type") == "event"]
        self._events_by_topic: Dict[str, ABIDefinition] = {}
        for event in self.abi:
            if event.get("anonymous"):
                continue
            self._events_by_topic[event_topic(event)] = event

    def decode(self, rawlog: LogEntry) -> Optional[Dict[str, Any]]:
        """
        Decode a log into ``{"type": EventName, **fields}``.

        Returns:
            The decoded event, or None if no known event matches or the log is malformed
        """
        topics = [ensure_hex0x(t).lower() for t in rawlog.topics]
        if not topics:
            return None

        event = self._events_by_topic.get(topics[0])
        if event is None:
            rate_limited_log(f"No event ABI for log topic {topics[0]}", level="debug", logger_instance=logger)
            return None

        try:
            return self._decode_event(event, topics[1:], rawlog.data)
        except (DecodingError, ValueError, TypeError) as e:
            logger.debug(f"Cannot decode {event['name']} log: {e}")
            return None

    def _decode_event(self, event: ABIDefinition, topics: List[str], data: str) -> Dict[str, Any]:
        inputs = event.get("inputs", [])
        indexed = [i for i in inputs if i.get("indexed")]
        non_indexed = [i for i in inputs if not i.get("indexed")]

        if len(topics) != len(indexed):
            raise ValueError(f"expected {len(indexed)} indexed topics, got {len(topics)}")

        indexed_values = []
        for inp, topic in zip(indexed, topics):
            type_str = abi_type(inp)
            if type_str in DYNAMIC_INDEXED_TYPES or type_str.endswith("]") or type_str.startswith("("):
                # Only the keccak hash of dynamic values is logged
                indexed_values.append(topic)
            else:
                indexed_values.append(decode([type_str], bytes.fromhex(strip_hex0x(topic)))[0])

        data_values = decode([abi_type(i) for i in non_indexed], bytes.fromhex(strip_hex0x(data)))

        decoded: Dict[str, Any] = {"type": event["name"]}
        indexed_iter = iter(indexed_values)
        data_iter = iter(data_values)
        for pos, inp in enumerate(inputs):
            value = next(indexed_iter) if inp.get("indexed") else next(data_iter)
            decoded[inp.get("name") or str(pos)] = _normalize(value)
        return decoded


def decode_logs(abi: Iterable[ABIDefinition], logs: Iterable[LogEntry]) -> List[Optional[Dict[str, Any]]]:
    """Decode several logs with a one-off decoder."""
    decoder = ContractLogDecoder(abi)
    return [decoder.decode(log) for log in logs]
