"""
Index of a contract's methods by name and by full signature.
"""
from typing import Any, Dict, Iterable, Optional, Sequence, Set

from .abi import ABIDefinition, method_signature


class MethodMap:
    """
    Resolves method selectors against a contract ABI.

    Solidity allows overloading. A bare method name works as long as it is
    unambiguous for the number of arguments given; otherwise the full
    signature (``foo(uint256,address)``) must be used.
    """

    def __init__(self, abi: Iterable[ABIDefinition]):
        self._methods: Dict[str, ABIDefinition] = {}
        collisions: Set[str] = set()

        for method in abi:
            if method.get("type", "function") != "function":
                continue

            key = f"{method['name']}#{len(method.get('inputs', []))}"
            if key in self._methods:
                collisions.add(key)
            else:
                self._methods[key] = method

            self._methods[method_signature(method)] = method

        for key in collisions:
            del self._methods[key]

    def find_method(self, selector: str, args: Sequence[Any] = ()) -> Optional[ABIDefinition]:
        """
        Find a method by signature, else by name and arity.

        Returns:
            The method ABI, or None if unknown or ambiguous
        """
        method = self._methods.get(selector)
        if method is not None:
            return method

        return self._methods.get(f"{selector}#{len(args)}")
