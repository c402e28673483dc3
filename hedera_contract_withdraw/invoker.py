"""Submit contract calls and collect their receipt, record and decoded result."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address, to_hex
from web3 import Web3

from .abi import ContractAbi, UnknownFunctionError
from .client import HederaClient
from .entity_ids import EntityId

_LOGGER = logging.getLogger(__name__)

SUCCESS_STATUS = "SUCCESS"
WEIBARS_PER_TINYBAR = 10**10
RECEIPT_TIMEOUT = 120.0

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _require_int(value: Any, abi_type: str, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{abi_type} parameter must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ValueError(f"{value} is out of range for {abi_type}")
    return value


class ContractFunctionParameters:
    """Ordered, typed arguments for a contract function call."""

    def __init__(self) -> None:
        self._types: List[str] = []
        self._values: List[Any] = []

    def _add(self, abi_type: str, value: Any) -> "ContractFunctionParameters":
        self._types.append(abi_type)
        self._values.append(value)
        return self

    def add_address(self, address: Union[str, EntityId]) -> "ContractFunctionParameters":
        if isinstance(address, EntityId):
            address = address.to_evm_address()
        elif not address.lower().startswith("0x"):
            address = "0x" + address
        return self._add("address", to_checksum_address(address))

    def add_uint256(self, value: int) -> "ContractFunctionParameters":
        return self._add("uint256", _require_int(value, "uint256", 0, 2**256 - 1))

    def add_int256(self, value: int) -> "ContractFunctionParameters":
        return self._add("int256", _require_int(value, "int256", -(2**255), 2**255 - 1))

    def add_uint64(self, value: int) -> "ContractFunctionParameters":
        return self._add("uint64", _require_int(value, "uint64", 0, 2**64 - 1))

    def add_int64(self, value: int) -> "ContractFunctionParameters":
        return self._add("int64", _require_int(value, "int64", _INT64_MIN, _INT64_MAX))

    def add_bool(self, value: bool) -> "ContractFunctionParameters":
        return self._add("bool", bool(value))

    def add_string(self, value: str) -> "ContractFunctionParameters":
        return self._add("string", str(value))

    @property
    def types(self) -> Tuple[str, ...]:
        return tuple(self._types)

    @property
    def values(self) -> Tuple[Any, ...]:
        return tuple(self._values)

    def signature(self, function_name: str) -> str:
        return f"{function_name}({','.join(self._types)})"

    def to_calldata(self, function_name: str) -> bytes:
        selector = function_signature_to_4byte_selector(self.signature(function_name))
        return selector + encode(list(self._types), list(self._values))


@dataclass(frozen=True)
class TransactionRecord:
    """Execution record as reported by the Mirror Node."""

    transaction_hash: str
    result: str
    call_result: str
    error_message: Optional[str] = None
    gas_used: Optional[int] = None

    @classmethod
    def from_payload(cls, transaction_hash: str, payload: Mapping[str, Any]) -> "TransactionRecord":
        gas_used = payload.get("gas_used")
        return cls(
            transaction_hash=transaction_hash,
            result=str(payload.get("result") or "UNKNOWN"),
            call_result=str(payload.get("call_result") or "0x"),
            error_message=payload.get("error_message") or None,
            gas_used=int(gas_used) if gas_used is not None else None,
        )


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: str
    status: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None


@dataclass(frozen=True)
class TransactionOutcome:
    receipt: TransactionReceipt
    result: Optional[Tuple[Any, ...]]
    record: TransactionRecord

    @property
    def succeeded(self) -> bool:
        return self.receipt.status == SUCCESS_STATUS


def tinybars_to_weibars(tinybars: Optional[int]) -> int:
    if not tinybars:
        return 0
    return int(tinybars) * WEIBARS_PER_TINYBAR


def execute_contract_function(
    client: HederaClient,
    abi: ContractAbi,
    contract_id: EntityId,
    gas: int,
    function_name: str,
    params: ContractFunctionParameters,
    payable_amount: Optional[int] = None,
) -> TransactionOutcome:
    """Submit one call of ``function_name`` on ``contract_id``.

    Args:
        client: Operator-bound network client.
        abi: ABI used to decode the function's return value.
        contract_id: Target contract.
        gas: Gas limit for the call.
        function_name: Name of the function; its signature is derived from ``params``.
        params: Typed call arguments.
        payable_amount: Optional HBAR to attach, in tinybars.

    Returns:
        The receipt, the decoded result (``None`` when the call did not succeed)
        and the execution record. A non-success status is returned, not raised.

    Raises:
        UnknownFunctionError: If ``function_name`` is not in ``abi``. Checked
            before anything is submitted.
        ValueError: If the parameter types do not match the ABI inputs.
    """

    descriptor = abi.get_function(function_name)
    if descriptor is None:
        raise UnknownFunctionError(f"Function {function_name!r} is not declared in the contract ABI")
    if descriptor.signature != params.signature(function_name):
        raise ValueError(
            f"Parameters build {params.signature(function_name)} but the ABI declares {descriptor.signature}"
        )

    w3 = client.web3
    operator = client.operator
    transaction = {
        "to": to_checksum_address(contract_id.to_evm_address()),
        "data": to_hex(params.to_calldata(function_name)),
        "gas": gas,
        "gasPrice": w3.eth.gas_price,
        "nonce": w3.eth.get_transaction_count(operator.evm_address),
        "chainId": client.network.chain_id,
        "value": tinybars_to_weibars(payable_amount),
    }
    _LOGGER.debug("Submitting %s to %s: %s", params.signature(function_name), contract_id, transaction)

    signed = operator.account.sign_transaction(transaction)
    transaction_hash = Web3.to_hex(w3.eth.send_raw_transaction(signed.raw_transaction))
    _LOGGER.info("Submitted %s as %s", function_name, transaction_hash)

    raw_receipt = w3.eth.wait_for_transaction_receipt(transaction_hash, timeout=RECEIPT_TIMEOUT)

    record = TransactionRecord.from_payload(transaction_hash, client.get_contract_result(transaction_hash))
    result = None
    if record.result == SUCCESS_STATUS:
        result = abi.decode_function_result(function_name, record.call_result)
    else:
        _LOGGER.warning("%s finished with %s: %s", function_name, record.result, record.error_message or "")

    receipt = TransactionReceipt(
        transaction_hash=transaction_hash,
        status=record.result,
        block_number=raw_receipt.get("blockNumber"),
        gas_used=raw_receipt.get("gasUsed"),
    )
    return TransactionOutcome(receipt=receipt, result=result, record=record)


__all__ = [
    "ContractFunctionParameters",
    "SUCCESS_STATUS",
    "TransactionOutcome",
    "TransactionReceipt",
    "TransactionRecord",
    "execute_contract_function",
    "tinybars_to_weibars",
]
