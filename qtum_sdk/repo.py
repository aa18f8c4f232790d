"""
Repository of known contracts.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .abi import ContractLogDecoder
from .contract import Contract
from .events import EventListener
from .exceptions import ContractNotFoundError
from .models import ContractInfo, ContractsRepoData
from .rpc import AnyRPC

logger = logging.getLogger(__name__)


class ContractsRepo:
    """
    ABI definitions and addresses of all known contracts.

    Every contract it creates shares one log decoder that knows the events of
    all contracts, libraries and related ABIs, so logs emitted by a library or
    by another contract during a call are decoded too.
    """

    def __init__(
        self,
        rpc: AnyRPC,
        repo_data: Union[ContractsRepoData, Mapping[str, Any], None] = None,
        min_confirmations: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        if repo_data is None:
            repo_data = ContractsRepoData()
        elif not isinstance(repo_data, ContractsRepoData):
            repo_data = ContractsRepoData.model_validate(repo_data)

        self.rpc = rpc
        self.repo_data = repo_data
        self.min_confirmations = min_confirmations
        self.logger = logger or logging.getLogger(__name__)
        self.log_decoder = ContractLogDecoder(self.all_event_abis())

    def contract(self, name: str, info: Union[ContractInfo, Mapping[str, Any], None] = None) -> Contract:
        """
        Create a contract by name, or from explicit info.

        Raises:
            ContractNotFoundError: If no info is given and the name is unknown
        """
        if info is None:
            info = self.repo_data.contracts.get(name)
            if info is None:
                raise ContractNotFoundError(name)

        return Contract(
            self.rpc,
            info,
            log_decoder=self.log_decoder,
            min_confirmations=self.min_confirmations,
            logger=self.logger
        )

    def event_listener(self) -> EventListener:
        """A listener for logs of any address, decoded with every known event."""
        return EventListener(self.rpc, self.log_decoder, logger=self.logger)

    def all_event_abis(self) -> List[Dict[str, Any]]:
        """Combine the event definitions of every known ABI."""
        event_abis: List[Dict[str, Any]] = []
        for defs in (self.repo_data.contracts, self.repo_data.libraries, self.repo_data.related):
            for info in defs.values():
                event_abis.extend(d for d in info.abi if d.get("type") == "event")
        return event_abis
