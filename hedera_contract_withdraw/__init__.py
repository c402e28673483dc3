"""Withdraw HBAR or an HTS token from a deployed Hedera smart contract."""
from __future__ import annotations

from .abi import ContractAbi, FunctionDescriptor, UnknownFunctionError, load_contract_abi
from .balances import TOKEN_BALANCE_UNAVAILABLE, ContractBalance, get_contract_balance
from .client import HederaClient, MirrorNodeError
from .config import ConfigurationError, NetworkConfig, Operator, WithdrawConfig, load_config, resolve_network
from .entity_ids import EntityId
from .invoker import ContractFunctionParameters, TransactionOutcome, execute_contract_function
from .withdrawals import (
    HbarUnit,
    WithdrawContext,
    WithdrawalKind,
    WithdrawalRequest,
    retrieve_token_from_contract,
    transfer_hbar_from_contract,
)

__all__ = [
    "ConfigurationError",
    "ContractAbi",
    "ContractBalance",
    "ContractFunctionParameters",
    "EntityId",
    "FunctionDescriptor",
    "HbarUnit",
    "HederaClient",
    "MirrorNodeError",
    "NetworkConfig",
    "Operator",
    "TOKEN_BALANCE_UNAVAILABLE",
    "TransactionOutcome",
    "UnknownFunctionError",
    "WithdrawConfig",
    "WithdrawContext",
    "WithdrawalKind",
    "WithdrawalRequest",
    "execute_contract_function",
    "get_contract_balance",
    "load_config",
    "load_contract_abi",
    "resolve_network",
    "retrieve_token_from_contract",
    "transfer_hbar_from_contract",
]
