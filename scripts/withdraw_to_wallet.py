#!/usr/bin/env python3
"""Withdraw HBAR or the configured HTS token from the contract to a wallet.

Example usage::

    python scripts/withdraw_to_wallet.py -tier -wallet 0.0.1234 -amount 20

Operator credentials, the contract and the network are read from the
environment (or a ``.env`` file): ``PRIVATE_KEY``, ``ACCOUNT_ID``,
``CONTRACT_NAME``, ``CONTRACT_ID``, ``TOKEN_ID`` and ``ENVIRONMENT``.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Mapping, Optional, Sequence

from dotenv import load_dotenv

from hedera_contract_withdraw.abi import load_contract_abi
from hedera_contract_withdraw.balances import get_contract_balance
from hedera_contract_withdraw.cli_args import USAGE, get_arg_flag, parse_withdrawal_request
from hedera_contract_withdraw.client import HederaClient
from hedera_contract_withdraw.config import load_config, resolve_network
from hedera_contract_withdraw.prompt import confirm as confirm_prompt
from hedera_contract_withdraw.reporting import describe_withdrawal, format_balance_lines
from hedera_contract_withdraw.withdrawals import (
    WithdrawContext,
    WithdrawalKind,
    retrieve_token_from_contract,
    transfer_hbar_from_contract,
)

_LOGGER = logging.getLogger("withdraw_to_wallet")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def run(
    argv: Sequence[str],
    *,
    env: Optional[Mapping[str, str]] = None,
    confirm_fn: Callable[[str], bool] = confirm_prompt,
    client_factory: Callable[..., HederaClient] = HederaClient.for_network,
) -> int:
    if get_arg_flag("h", argv):
        print(USAGE)
        return 0

    config = load_config(env)
    if config.contract_name is None:
        print("Environment required, please specify CONTRACT_NAME for ABI in the .env file")
        return 0

    print("\n-Using ENVIRONMENT:", config.environment)
    print("\n-Using Operator:", config.operator.account_id)

    network = resolve_network(
        config.environment,
        json_rpc_url=config.json_rpc_url,
        mirror_node_url=config.mirror_node_url,
    )
    if network is None:
        print("ERROR: Must specify either MAIN or TEST as environment in .env file")
        return 0
    print(f"interacting in *{network.name.upper()}*")

    client = client_factory(network, config.operator)
    client.verify_operator()

    abi = load_contract_abi(config.contract_name, config.artifacts_dir)
    print("\n -Loading ABI...\n")

    ctx = WithdrawContext(
        client=client,
        abi=abi,
        contract_id=config.contract_id,
        token_id=config.token_id,
        token_decimals=config.token_decimals,
    )

    balance = get_contract_balance(client, config.contract_id, config.token_id)
    for line in format_balance_lines("starting", balance, config.token_symbol):
        print(line)

    request = parse_withdrawal_request(argv)
    if request is None:
        print("No valid switch given, run with -h for usage pattern")
        return 0

    if not confirm_fn(describe_withdrawal(request, config.token_symbol)):
        print("User aborted")
        return 0

    if request.kind is WithdrawalKind.HBAR:
        status = transfer_hbar_from_contract(ctx, request.wallet, request.amount)
    else:
        status = retrieve_token_from_contract(ctx, request.wallet, request.amount)
    print(status)

    balance = get_contract_balance(client, config.contract_id, config.token_id)
    for line in format_balance_lines("ending", balance, config.token_symbol):
        print(line)
    return 0


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    confirm: Optional[Callable[[str], bool]] = None,
    client_factory: Optional[Callable[..., HederaClient]] = None,
) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if env is None:
        load_dotenv()
        env = os.environ
    configure_logging(env.get("LOG_LEVEL") or "WARNING")
    try:
        return run(
            args,
            env=env,
            confirm_fn=confirm or confirm_prompt,
            client_factory=client_factory or HederaClient.for_network,
        )
    except Exception:
        _LOGGER.exception("Withdrawal failed")
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
