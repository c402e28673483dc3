"""Network client bound to one Hedera network and one operator.

Transactions go through the Hedera JSON-RPC relay with ``web3``; balances and
execution records are read from the public Mirror Node REST API.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from web3 import Web3

from .config import ConfigurationError, NetworkConfig, Operator

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class MirrorNodeError(RuntimeError):
    """Raised when the Mirror Node responds with an error or an unexpected payload."""


class MirrorNodeNotFound(MirrorNodeError):
    """Raised for 404 responses, e.g. a transaction the mirror has not ingested yet."""


@dataclass
class HederaClient:
    """Operator-bound access to one network's JSON-RPC relay and Mirror Node."""

    network: NetworkConfig
    operator: Operator
    web3: Optional[Web3] = None
    session: Optional[requests.Session] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT
    record_poll_attempts: int = 10
    record_poll_interval: float = 2.0
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.web3 is None:
            self.web3 = Web3(Web3.HTTPProvider(self.network.json_rpc_url))
        if self.session is None:
            self.session = requests.Session()
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "hedera-contract-withdraw/1.0",
        }

    @classmethod
    def for_network(cls, network: NetworkConfig, operator: Operator, **kwargs: Any) -> "HederaClient":
        _LOGGER.info("Connecting to %s via %s", network.name, network.json_rpc_url)
        return cls(network=network, operator=operator, **kwargs)

    def mirror_get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.network.mirror_node_url.rstrip('/')}/api/v1/{path.lstrip('/')}"
        response = self.session.get(url, params=params, headers=self._headers, timeout=self.timeout)
        if response.status_code == 404:
            raise MirrorNodeNotFound(f"Mirror node has no data for {path}")
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise MirrorNodeError(f"Mirror node error for {path}: {exc}") from exc
        data = response.json()
        if not isinstance(data, Mapping):
            raise MirrorNodeError(f"Unexpected payload for {path}: {data!r}")
        return dict(data)

    def verify_operator(self) -> None:
        """Check that the operator key controls ``operator.account_id``.

        The relay signs and pays as the key's EVM address, so that address must
        be the configured account's alias.

        Raises:
            ConfigurationError: If the account's EVM address differs from the key's.
        """

        account_id = self.operator.account_id
        payload = self.mirror_get(f"accounts/{account_id}")
        evm_address = payload.get("evm_address")
        if not isinstance(evm_address, str) or evm_address.lower() != self.operator.evm_address.lower():
            raise ConfigurationError(
                f"PRIVATE_KEY signs as {self.operator.evm_address} but ACCOUNT_ID {account_id} "
                f"has EVM address {evm_address}"
            )
        _LOGGER.debug("Operator %s verified as %s", account_id, evm_address)

    def get_contract_result(self, transaction_hash: str) -> Dict[str, Any]:
        """Fetch the execution record for ``transaction_hash``, waiting for mirror ingestion."""

        path = f"contracts/results/{transaction_hash}"
        for attempt in range(1, self.record_poll_attempts + 1):
            try:
                return self.mirror_get(path)
            except MirrorNodeNotFound:
                if attempt == self.record_poll_attempts:
                    raise
                _LOGGER.debug(
                    "Record for %s not yet available (attempt %d/%d)",
                    transaction_hash,
                    attempt,
                    self.record_poll_attempts,
                )
                self.sleep(self.record_poll_interval)
        raise MirrorNodeNotFound(f"Mirror node has no data for {path}")


__all__ = ["DEFAULT_TIMEOUT", "HederaClient", "MirrorNodeError", "MirrorNodeNotFound"]
