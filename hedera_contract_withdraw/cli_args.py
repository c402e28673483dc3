"""Single-dash flag scanning for the withdrawal CLI.

Flags look like ``-hbar`` or ``-wallet 0.0.1234``; the value of a flag is the
token that follows its first occurrence.
"""
from __future__ import annotations

import sys
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from .entity_ids import EntityId
from .withdrawals import WithdrawalKind, WithdrawalRequest

USAGE = "Usage: withdraw_to_wallet.py -[hbar|tier] -wallet WWWW -amount AA"


def _argv(argv: Optional[Sequence[str]]) -> Sequence[str]:
    return sys.argv if argv is None else argv


def get_arg(name: str, argv: Optional[Sequence[str]] = None) -> Optional[str]:
    """Return the token after the first ``-<name>``, or ``None``."""

    args = list(_argv(argv))
    flag = f"-{name}"
    if flag not in args:
        return None
    index = args.index(flag)
    if index + 1 >= len(args):
        return None
    return args[index + 1]


def get_arg_flag(name: str, argv: Optional[Sequence[str]] = None) -> bool:
    return f"-{name}" in _argv(argv)


def parse_amount(raw: Optional[str]) -> Decimal:
    """Parse ``raw`` as a decimal; anything unparseable becomes ``Decimal('NaN')``."""

    if raw is None:
        return Decimal("NaN")
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        return Decimal("NaN")


def parse_withdrawal_request(argv: Optional[Sequence[str]] = None) -> Optional[WithdrawalRequest]:
    """Build the request described by ``argv``.

    Returns ``None`` when neither ``-hbar`` nor ``-tier`` is given. ``-hbar``
    wins when both are present.

    Raises:
        ValueError: If ``-wallet`` is missing or not an entity id.
    """

    if get_arg_flag("hbar", argv):
        kind = WithdrawalKind.HBAR
    elif get_arg_flag("tier", argv):
        kind = WithdrawalKind.TOKEN
    else:
        return None

    wallet_raw = get_arg("wallet", argv)
    if wallet_raw is None:
        raise ValueError("-wallet is required, run with -h for usage pattern")
    wallet = EntityId.from_string(wallet_raw)
    amount = parse_amount(get_arg("amount", argv))
    return WithdrawalRequest(kind=kind, wallet=wallet, amount=amount)


__all__ = ["USAGE", "get_arg", "get_arg_flag", "parse_amount", "parse_withdrawal_request"]
