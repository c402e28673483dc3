"""Human readable output for balances and withdrawal prompts."""
from __future__ import annotations

from decimal import Decimal

from .balances import ContractBalance
from .withdrawals import HbarUnit, WithdrawalKind, WithdrawalRequest


def format_hbar(tinybars: int) -> str:
    """Render tinybars in whole HBAR, e.g. ``1250000000`` -> ``12.5 ℏ``."""

    value = Decimal(tinybars) / HbarUnit.HBAR.tinybars
    return f"{_plain(value)} {HbarUnit.HBAR.symbol}"


def _plain(value: Decimal) -> str:
    if not value.is_finite():
        return str(value)
    normalised = value.normalize()
    if normalised == normalised.to_integral_value():
        return str(normalised.quantize(Decimal(1)))
    return format(normalised, "f")


def format_balance_lines(label: str, balance: ContractBalance, token_symbol: str) -> list[str]:
    return [
        f"Contract {label} hbar balance: {format_hbar(balance.hbar_balance)}",
        f"Contract {label} {token_symbol} balance: {balance.token_balance}",
    ]


def describe_withdrawal(request: WithdrawalRequest, token_symbol: str) -> str:
    if request.kind is WithdrawalKind.HBAR:
        amount = f"{_plain(request.amount)} {HbarUnit.HBAR.symbol}"
    else:
        amount = f"{_plain(request.amount)} ${token_symbol}"
    return f"Do you wish to withdraw {amount} to {request.wallet} ?"


__all__ = ["describe_withdrawal", "format_balance_lines", "format_hbar"]
