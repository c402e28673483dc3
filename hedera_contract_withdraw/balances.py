"""Utilities for reading a contract's HBAR and token balances."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .client import HederaClient, MirrorNodeError
from .entity_ids import EntityId

_LOGGER = logging.getLogger(__name__)

TOKEN_BALANCE_UNAVAILABLE = -1


@dataclass(frozen=True)
class ContractBalance:
    """Balance snapshot; ``hbar_balance`` is in tinybars."""

    token_balance: int
    hbar_balance: int

    @property
    def has_token_relationship(self) -> bool:
        return self.token_balance != TOKEN_BALANCE_UNAVAILABLE


def extract_hbar_balance(payload: Mapping[str, Any], contract_id: EntityId) -> int:
    """Return the tinybar balance for ``contract_id`` from a ``/balances`` payload.

    Raises:
        MirrorNodeError: If the payload does not include the contract.
    """

    target = str(contract_id)
    for candidate in payload.get("balances") or []:
        if isinstance(candidate, Mapping) and candidate.get("account") == target:
            return int(candidate.get("balance") or 0)
    raise MirrorNodeError(f"Balance payload has no entry for contract {target}")


def extract_token_balance(payload: Mapping[str, Any], token_id: EntityId) -> int:
    """Return the balance of ``token_id`` from an ``/accounts/<id>/tokens`` payload.

    A token missing from the payload means there is no relationship and yields
    :data:`TOKEN_BALANCE_UNAVAILABLE`.
    """

    wanted = str(token_id)
    for token in payload.get("tokens") or []:
        if isinstance(token, Mapping) and token.get("token_id") == wanted:
            return int(token.get("balance") or 0)
    return TOKEN_BALANCE_UNAVAILABLE


def get_contract_balance(
    client: HederaClient,
    contract_id: EntityId,
    token_id: Optional[EntityId],
) -> ContractBalance:
    payload = client.mirror_get("balances", params={"account.id": str(contract_id)})
    hbar_balance = extract_hbar_balance(payload, contract_id)

    token_balance = TOKEN_BALANCE_UNAVAILABLE
    if token_id is not None:
        # Filtered by token id so a long association list cannot hide it.
        tokens = client.mirror_get(f"accounts/{contract_id}/tokens", params={"token.id": str(token_id)})
        token_balance = extract_token_balance(tokens, token_id)

    balance = ContractBalance(token_balance=token_balance, hbar_balance=hbar_balance)
    if not balance.has_token_relationship:
        _LOGGER.info("Contract %s has no relationship with token %s", contract_id, token_id)
    return balance


__all__ = [
    "ContractBalance",
    "TOKEN_BALANCE_UNAVAILABLE",
    "extract_hbar_balance",
    "extract_token_balance",
    "get_contract_balance",
]
