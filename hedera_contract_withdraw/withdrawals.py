"""Helpers for withdrawing HBAR or the configured HTS token from the contract."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from .abi import ContractAbi
from .client import HederaClient
from .entity_ids import EntityId
from .invoker import ContractFunctionParameters, TransactionOutcome, execute_contract_function

TRANSFER_HBAR_GAS = 400_000
TRANSFER_TOKEN_GAS = 200_000

Amount = Union[Decimal, int, str]


class HbarUnit(enum.Enum):
    """HBAR denominations and their size in tinybars."""

    TINYBAR = ("tℏ", 1)
    MICROBAR = ("μℏ", 100)
    MILLIBAR = ("mℏ", 100_000)
    HBAR = ("ℏ", 100_000_000)
    KILOBAR = ("kℏ", 100_000_000_000)
    MEGABAR = ("Mℏ", 100_000_000_000_000)
    GIGABAR = ("Gℏ", 100_000_000_000_000_000)

    def __init__(self, symbol: str, tinybars: int) -> None:
        self.symbol = symbol
        self.tinybars = tinybars


class WithdrawalKind(enum.Enum):
    HBAR = "hbar"
    TOKEN = "tier"


@dataclass(frozen=True)
class WithdrawalRequest:
    kind: WithdrawalKind
    wallet: EntityId
    amount: Decimal


@dataclass(frozen=True)
class WithdrawContext:
    """Everything a withdrawal needs, passed explicitly instead of via globals."""

    client: HederaClient
    abi: ContractAbi
    contract_id: EntityId
    token_id: Optional[EntityId] = None
    token_decimals: int = 1


def _to_decimal(amount: Amount) -> Decimal:
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Amount {amount!r} is not a number") from exc
    if not value.is_finite():
        raise ValueError(f"Amount {amount!r} is not a number")
    return value


def hbar_to_tinybars(amount: Amount, unit: HbarUnit = HbarUnit.HBAR) -> int:
    """Convert ``amount`` of ``unit`` to tinybars.

    Raises:
        ValueError: For non-numeric amounts or ones that do not land on a whole tinybar.
    """

    tinybars = _to_decimal(amount) * unit.tinybars
    if tinybars != tinybars.to_integral_value():
        raise ValueError(f"{amount} {unit.symbol} is not a whole number of tinybars")
    return int(tinybars)


def token_amount_to_units(amount: Amount, decimals: int = 1) -> int:
    """Scale a display amount to the token's smallest unit (``amount * 10**decimals``)."""

    units = _to_decimal(amount).scaleb(decimals)
    if units != units.to_integral_value():
        raise ValueError(f"{amount} has more precision than the token's {decimals} decimals")
    return int(units)


def execute_hbar_withdrawal(
    ctx: WithdrawContext,
    wallet: EntityId,
    amount: Amount,
    unit: HbarUnit = HbarUnit.HBAR,
) -> TransactionOutcome:
    params = (
        ContractFunctionParameters()
        .add_address(wallet)
        .add_uint256(hbar_to_tinybars(amount, unit))
    )
    return execute_contract_function(ctx.client, ctx.abi, ctx.contract_id, TRANSFER_HBAR_GAS, "transferHbar", params)


def execute_token_withdrawal(ctx: WithdrawContext, wallet: EntityId, amount: Amount) -> TransactionOutcome:
    if ctx.token_id is None:
        raise ValueError("TOKEN_ID must be configured to withdraw tokens")
    params = (
        ContractFunctionParameters()
        .add_address(ctx.token_id)
        .add_address(wallet)
        .add_int64(token_amount_to_units(amount, ctx.token_decimals))
    )
    return execute_contract_function(ctx.client, ctx.abi, ctx.contract_id, TRANSFER_TOKEN_GAS, "transferHTS", params)


def transfer_hbar_from_contract(
    ctx: WithdrawContext,
    wallet: EntityId,
    amount: Amount,
    unit: HbarUnit = HbarUnit.HBAR,
) -> str:
    """Ask the contract to send ``amount`` HBAR to ``wallet``; returns the status string."""

    return execute_hbar_withdrawal(ctx, wallet, amount, unit).receipt.status


def retrieve_token_from_contract(ctx: WithdrawContext, wallet: EntityId, amount: Amount) -> str:
    """Ask the contract to send ``amount`` display units of the token to ``wallet``.

    ``SUCCESS`` implies it worked; any other status is returned unchanged.
    """

    return execute_token_withdrawal(ctx, wallet, amount).receipt.status


__all__ = [
    "HbarUnit",
    "TRANSFER_HBAR_GAS",
    "TRANSFER_TOKEN_GAS",
    "WithdrawContext",
    "WithdrawalKind",
    "WithdrawalRequest",
    "execute_hbar_withdrawal",
    "execute_token_withdrawal",
    "hbar_to_tinybars",
    "retrieve_token_from_contract",
    "token_amount_to_units",
    "transfer_hbar_from_contract",
]
