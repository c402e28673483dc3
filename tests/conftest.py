"""Shared fakes so the suite never touches a real relay or mirror node."""
from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import requests

from hedera_contract_withdraw.client import HederaClient
from hedera_contract_withdraw.config import NETWORK_CONFIGS, Operator
from hedera_contract_withdraw.entity_ids import EntityId

OPERATOR_KEY = "0x" + "11" * 32
OPERATOR_ID = "0.0.1001"
CONTRACT_ID = "0.0.5005"
TOKEN_ID = "0.0.6006"
CONTRACT_NAME = "TierVault"

VAULT_ABI: List[Dict[str, Any]] = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {
        "type": "event",
        "name": "transferHbar",
        "inputs": [{"name": "to", "type": "address", "indexed": False}],
    },
    {
        "type": "function",
        "name": "transferHbar",
        "inputs": [
            {"name": "receiverAddress", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transferHTS",
        "inputs": [
            {"name": "token", "type": "address"},
            {"name": "receiver", "type": "address"},
            {"name": "amount", "type": "int64"},
        ],
        "outputs": [{"name": "sent", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
]


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return self._payload


class FakeMirrorSession:
    """Serves queued responses per path suffix and records every request."""

    def __init__(self) -> None:
        self.routes: Dict[str, List[FakeResponse]] = {}
        self.calls: List[Dict[str, Any]] = []

    def queue(self, path: str, payload: Any, status_code: int = 200) -> None:
        self.routes.setdefault(path, []).append(FakeResponse(payload, status_code))

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, headers=None, timeout=None) -> FakeResponse:
        self.calls.append({"url": url, "params": params})
        path = url.split("/api/v1/", 1)[1]
        responses = self.routes.get(path)
        if not responses:
            raise AssertionError(f"Unexpected URL: {url}")
        return responses.pop(0) if len(responses) > 1 else responses[0]


class FakeEth:
    def __init__(self) -> None:
        self.gas_price = 710_000_000_000
        self.sent: List[bytes] = []
        self.receipt = {"status": 1, "blockNumber": 77, "gasUsed": 41_000}

    def get_transaction_count(self, address: str) -> int:
        return 3

    def send_raw_transaction(self, raw: bytes) -> bytes:
        self.sent.append(raw)
        return b"\xab" * 32

    def wait_for_transaction_receipt(self, transaction_hash: str, timeout: float = 120) -> Dict[str, Any]:
        return self.receipt


class SigningSpy:
    """Stands in for ``LocalAccount`` and keeps the transaction dicts it signs."""

    address = "0x19E7E376E7C213B7E7e7e46cc70A5dD086DAff2A"

    def __init__(self) -> None:
        self.signed: List[Dict[str, Any]] = []

    def sign_transaction(self, transaction: Dict[str, Any]) -> SimpleNamespace:
        self.signed.append(transaction)
        return SimpleNamespace(raw_transaction=b"signed-" + str(len(self.signed)).encode())


def balances_payload(contract_id: str, tinybars: int, tokens: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    return {
        "timestamp": "1700000000.000000000",
        "balances": [
            {
                "account": contract_id,
                "balance": tinybars,
                "tokens": [{"token_id": token, "balance": amount} for token, amount in (tokens or {}).items()],
            }
        ],
    }


def account_tokens_payload(token_balances: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    return {
        "tokens": [
            {"token_id": token, "balance": amount, "automatic_association": False}
            for token, amount in (token_balances or {}).items()
        ],
        "links": {"next": None},
    }


def queue_contract_balance(
    session: FakeMirrorSession, tinybars: int, token_balance: Optional[int] = None
) -> None:
    """Queue one snapshot of both mirror reads made by ``get_contract_balance``."""

    session.queue("balances", balances_payload(CONTRACT_ID, tinybars))
    tokens = {} if token_balance is None else {TOKEN_ID: token_balance}
    session.queue(f"accounts/{CONTRACT_ID}/tokens", account_tokens_payload(tokens))


@pytest.fixture()
def mirror_session() -> FakeMirrorSession:
    session = FakeMirrorSession()
    # The operator account, aliased to the key's EVM address.
    session.queue(f"accounts/{OPERATOR_ID}", {"account": OPERATOR_ID, "evm_address": SigningSpy.address.lower()})
    return session


@pytest.fixture()
def fake_web3() -> SimpleNamespace:
    return SimpleNamespace(eth=FakeEth())


@pytest.fixture()
def signing_spy() -> SigningSpy:
    return SigningSpy()


@pytest.fixture()
def make_client(mirror_session: FakeMirrorSession, fake_web3: SimpleNamespace, signing_spy: SigningSpy):
    """Build a :class:`HederaClient` wired to the fakes (signing spy by default)."""

    def factory(network=None, operator=None, **_kwargs: Any) -> HederaClient:
        if operator is None:
            operator = Operator(account_id=EntityId.from_string(OPERATOR_ID), account=signing_spy)
        return HederaClient(
            network=network or NETWORK_CONFIGS["TEST"],
            operator=operator,
            web3=fake_web3,
            session=mirror_session,
            sleep=lambda _seconds: None,
        )

    return factory


@pytest.fixture()
def artifacts_dir(tmp_path: Path) -> Path:
    target = tmp_path / "artifacts" / "contracts" / f"{CONTRACT_NAME}.sol"
    target.mkdir(parents=True)
    (target / f"{CONTRACT_NAME}.json").write_text(
        json.dumps({"contractName": CONTRACT_NAME, "abi": VAULT_ABI}), encoding="utf-8"
    )
    return tmp_path / "artifacts"


@pytest.fixture()
def env(artifacts_dir: Path) -> Dict[str, str]:
    return {
        "PRIVATE_KEY": OPERATOR_KEY,
        "ACCOUNT_ID": OPERATOR_ID,
        "CONTRACT_NAME": CONTRACT_NAME,
        "CONTRACT_ID": CONTRACT_ID,
        "TOKEN_ID": TOKEN_ID,
        "ENVIRONMENT": "test",
        "ARTIFACTS_DIR": str(artifacts_dir),
    }
