"""Environment driven configuration for contract withdrawals."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from dotenv import load_dotenv
from eth_account import Account

from .entity_ids import EntityId

if TYPE_CHECKING:  # pragma: no cover - typing only
    from eth_account.signers.local import LocalAccount
else:
    LocalAccount = Any  # type: ignore[assignment]

_LOGGER = logging.getLogger(__name__)

# DER prefixes used by the Hedera portal and SDK key exports.
_ECDSA_DER_PREFIX = "3030020100300706052b8104000a04220420"
_ED25519_DER_PREFIX = "302e020100300506032b657004220420"

DEFAULT_ARTIFACTS_DIR = Path("artifacts")
DEFAULT_TOKEN_SYMBOL = "TIER"
DEFAULT_TOKEN_DECIMALS = 1


class ConfigurationError(RuntimeError):
    """Raised when required operator or contract settings are missing or invalid."""


@dataclass(frozen=True)
class NetworkConfig:
    """Endpoints for one of the supported Hedera networks."""

    name: str
    chain_id: int
    json_rpc_url: str
    mirror_node_url: str


NETWORK_CONFIGS: Dict[str, NetworkConfig] = {
    "TEST": NetworkConfig(
        name="testnet",
        chain_id=296,
        json_rpc_url="https://testnet.hashio.io/api",
        mirror_node_url="https://testnet.mirrornode.hedera.com",
    ),
    "MAIN": NetworkConfig(
        name="mainnet",
        chain_id=295,
        json_rpc_url="https://mainnet.hashio.io/api",
        mirror_node_url="https://mainnet-public.mirrornode.hedera.com",
    ),
}


@dataclass(frozen=True)
class Operator:
    """Account that signs and pays for every transaction in a run."""

    account_id: EntityId
    account: LocalAccount

    @property
    def evm_address(self) -> str:
        return self.account.address


@dataclass(frozen=True)
class WithdrawConfig:
    operator: Operator
    contract_id: EntityId
    contract_name: Optional[str]
    token_id: Optional[EntityId]
    environment: Optional[str]
    artifacts_dir: Path = DEFAULT_ARTIFACTS_DIR
    token_symbol: str = DEFAULT_TOKEN_SYMBOL
    token_decimals: int = DEFAULT_TOKEN_DECIMALS
    json_rpc_url: Optional[str] = None
    mirror_node_url: Optional[str] = None


def _get_env() -> Mapping[str, str]:
    """Return ``os.environ`` after merging any ``.env`` file in the working directory."""

    load_dotenv()
    return os.environ


def normalise_private_key(value: str) -> str:
    """Return a ``0x`` prefixed raw secp256k1 key from hex or DER input.

    Raises:
        ConfigurationError: For ED25519 keys or values that are not hex.
    """

    text = value.strip()
    if text.lower().startswith("0x"):
        text = text[2:]
    lowered = text.lower()
    if lowered.startswith(_ED25519_DER_PREFIX):
        raise ConfigurationError("ED25519 operator keys cannot sign JSON-RPC transactions; use an ECDSA key")
    if lowered.startswith(_ECDSA_DER_PREFIX):
        text = text[len(_ECDSA_DER_PREFIX) :]
    if len(text) != 64:
        raise ConfigurationError("PRIVATE_KEY must be a 32 byte hex or DER encoded ECDSA key")
    try:
        bytes.fromhex(text)
    except ValueError as exc:
        raise ConfigurationError("PRIVATE_KEY is not valid hex") from exc
    return "0x" + text


def _require(env: Mapping[str, str], key: str) -> str:
    value = env.get(key)
    if not value:
        raise ConfigurationError(f"Set {key} in the environment or .env file")
    return value


def _parse_entity(env: Mapping[str, str], key: str) -> EntityId:
    try:
        return EntityId.from_string(_require(env, key))
    except ValueError as exc:
        raise ConfigurationError(f"{key} is not a valid entity id: {exc}") from exc


def load_operator(env: Mapping[str, str]) -> Operator:
    account_id = _parse_entity(env, "ACCOUNT_ID")
    account = Account.from_key(normalise_private_key(_require(env, "PRIVATE_KEY")))
    return Operator(account_id=account_id, account=account)


def load_config(env: Optional[Mapping[str, str]] = None) -> WithdrawConfig:
    """Build a :class:`WithdrawConfig` from ``env`` (defaults to the process environment).

    ``CONTRACT_NAME``, ``TOKEN_ID`` and ``ENVIRONMENT`` are optional here so the
    caller can report them as informational errors; the operator credentials
    and ``CONTRACT_ID`` are mandatory.
    """

    if env is None:
        env = _get_env()

    operator = load_operator(env)
    contract_id = _parse_entity(env, "CONTRACT_ID")
    token_id = _parse_entity(env, "TOKEN_ID") if env.get("TOKEN_ID") else None

    decimals_raw = env.get("TOKEN_DECIMALS") or str(DEFAULT_TOKEN_DECIMALS)
    try:
        token_decimals = int(decimals_raw)
    except ValueError as exc:
        raise ConfigurationError(f"TOKEN_DECIMALS must be an integer, got {decimals_raw!r}") from exc
    if token_decimals < 0:
        raise ConfigurationError("TOKEN_DECIMALS must not be negative")

    config = WithdrawConfig(
        operator=operator,
        contract_id=contract_id,
        contract_name=env.get("CONTRACT_NAME") or None,
        token_id=token_id,
        environment=env.get("ENVIRONMENT") or None,
        artifacts_dir=Path(env.get("ARTIFACTS_DIR") or DEFAULT_ARTIFACTS_DIR),
        token_symbol=env.get("TOKEN_SYMBOL") or DEFAULT_TOKEN_SYMBOL,
        token_decimals=token_decimals,
        json_rpc_url=env.get("JSON_RPC_URL") or None,
        mirror_node_url=env.get("MIRROR_NODE_URL") or None,
    )
    _LOGGER.debug("Loaded config for contract %s (operator %s)", contract_id, operator.account_id)
    return config


def resolve_network(
    selector: Optional[str],
    *,
    json_rpc_url: Optional[str] = None,
    mirror_node_url: Optional[str] = None,
) -> Optional[NetworkConfig]:
    """Map ``TEST``/``MAIN`` (any case) to a :class:`NetworkConfig`, or ``None`` if unknown."""

    if not selector:
        return None
    network = NETWORK_CONFIGS.get(selector.strip().upper())
    if network is None:
        return None
    if json_rpc_url or mirror_node_url:
        network = NetworkConfig(
            name=network.name,
            chain_id=network.chain_id,
            json_rpc_url=json_rpc_url or network.json_rpc_url,
            mirror_node_url=mirror_node_url or network.mirror_node_url,
        )
    return network


__all__ = [
    "ConfigurationError",
    "NETWORK_CONFIGS",
    "NetworkConfig",
    "Operator",
    "WithdrawConfig",
    "load_config",
    "load_operator",
    "normalise_private_key",
    "resolve_network",
]
