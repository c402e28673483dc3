"""Tests for contract balance snapshots."""
from __future__ import annotations

import pytest

from conftest import CONTRACT_ID, TOKEN_ID, account_tokens_payload, balances_payload, queue_contract_balance
from hedera_contract_withdraw.balances import (
    TOKEN_BALANCE_UNAVAILABLE,
    ContractBalance,
    extract_hbar_balance,
    extract_token_balance,
    get_contract_balance,
)
from hedera_contract_withdraw.client import MirrorNodeError
from hedera_contract_withdraw.entity_ids import EntityId

CONTRACT = EntityId.from_string(CONTRACT_ID)
TOKEN = EntityId.from_string(TOKEN_ID)


def test_extract_hbar_balance_reads_contract_entry() -> None:
    payload = balances_payload(CONTRACT_ID, 2_500_000_000)
    assert extract_hbar_balance(payload, CONTRACT) == 2_500_000_000


def test_extract_hbar_balance_requires_contract_entry() -> None:
    with pytest.raises(MirrorNodeError):
        extract_hbar_balance({"balances": []}, CONTRACT)


def test_extract_token_balance_picks_configured_token() -> None:
    payload = account_tokens_payload({"0.0.42": 9, TOKEN_ID: 1000})
    assert extract_token_balance(payload, TOKEN) == 1000


def test_missing_token_relationship_is_sentinel_not_zero() -> None:
    balance = ContractBalance(token_balance=extract_token_balance(account_tokens_payload(), TOKEN), hbar_balance=100)
    assert balance.token_balance == TOKEN_BALANCE_UNAVAILABLE
    assert balance.token_balance != 0
    assert not balance.has_token_relationship


def test_zero_token_balance_is_still_a_relationship() -> None:
    balance = ContractBalance(
        token_balance=extract_token_balance(account_tokens_payload({TOKEN_ID: 0}), TOKEN), hbar_balance=100
    )
    assert balance.token_balance == 0
    assert balance.has_token_relationship


def test_get_contract_balance_filters_token_query_by_id(make_client, mirror_session) -> None:
    queue_contract_balance(mirror_session, 700, 800)

    balance = get_contract_balance(make_client(), CONTRACT, TOKEN)

    assert balance == ContractBalance(token_balance=800, hbar_balance=700)
    assert [(call["url"].split("/api/v1/")[1], call["params"]) for call in mirror_session.calls] == [
        ("balances", {"account.id": CONTRACT_ID}),
        (f"accounts/{CONTRACT_ID}/tokens", {"token.id": TOKEN_ID}),
    ]


def test_token_beyond_first_page_of_associations_is_found(make_client, mirror_session) -> None:
    # The account holds more associations than one unfiltered page would return.
    mirror_session.queue("balances", balances_payload(CONTRACT_ID, 1, {f"0.0.{n}": 1 for n in range(100, 130)}))
    mirror_session.queue(f"accounts/{CONTRACT_ID}/tokens", account_tokens_payload({TOKEN_ID: 55}))

    assert get_contract_balance(make_client(), CONTRACT, TOKEN).token_balance == 55


def test_unconfigured_token_skips_token_query(make_client, mirror_session) -> None:
    mirror_session.queue("balances", balances_payload(CONTRACT_ID, 100, {TOKEN_ID: 5}))

    balance = get_contract_balance(make_client(), CONTRACT, None)

    assert balance.token_balance == TOKEN_BALANCE_UNAVAILABLE
    assert len(mirror_session.calls) == 1
