"""Loading contract ABIs from build artifacts and decoding call results."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from eth_abi import decode
from eth_utils import to_bytes

_LOGGER = logging.getLogger(__name__)


class UnknownFunctionError(KeyError):
    """Raised when a function name is not declared in the loaded ABI."""


def _collapse_type(param: Mapping[str, Any]) -> str:
    abi_type = str(param.get("type", ""))
    if not abi_type.startswith("tuple"):
        return abi_type
    components = param.get("components") or []
    inner = ",".join(_collapse_type(component) for component in components)
    return f"({inner}){abi_type[len('tuple'):]}"


@dataclass(frozen=True)
class FunctionDescriptor:
    name: str
    inputs: Tuple[Mapping[str, Any], ...] = ()
    outputs: Tuple[Mapping[str, Any], ...] = ()
    state_mutability: Optional[str] = None

    @property
    def input_types(self) -> List[str]:
        return [_collapse_type(param) for param in self.inputs]

    @property
    def output_types(self) -> List[str]:
        return [_collapse_type(param) for param in self.outputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"


@dataclass(frozen=True)
class ContractAbi:
    """Function descriptors keyed by name."""

    functions: Mapping[str, FunctionDescriptor] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Sequence[Mapping[str, Any]]) -> "ContractAbi":
        """Index ``entries`` by name, keeping the first declaration of overloaded functions."""

        functions: Dict[str, FunctionDescriptor] = {}
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            if entry.get("type", "function") != "function":
                continue
            name = entry.get("name")
            if not isinstance(name, str) or not name or name in functions:
                continue
            functions[name] = FunctionDescriptor(
                name=name,
                inputs=tuple(entry.get("inputs") or ()),
                outputs=tuple(entry.get("outputs") or ()),
                state_mutability=entry.get("stateMutability"),
            )
        return cls(functions=functions)

    def __contains__(self, name: object) -> bool:
        return name in self.functions

    def __len__(self) -> int:
        return len(self.functions)

    def get_function(self, name: str) -> Optional[FunctionDescriptor]:
        return self.functions.get(name)

    def decode_function_result(self, function_name: str, result: Union[bytes, str]) -> Tuple[Any, ...]:
        """Decode ``result`` against the declared outputs of ``function_name``.

        Raises:
            UnknownFunctionError: If the ABI has no function with that name.
        """

        descriptor = self.get_function(function_name)
        if descriptor is None:
            raise UnknownFunctionError(f"Function {function_name!r} is not declared in the contract ABI")

        data = to_bytes(hexstr=result) if isinstance(result, str) else bytes(result)
        output_types = descriptor.output_types
        if not output_types:
            return ()
        decoded = decode(output_types, data)
        _LOGGER.debug("Decoded %s result: %s", function_name, decoded)
        return tuple(decoded)


def artifact_path(contract_name: str, artifacts_dir: Path) -> Path:
    return Path(artifacts_dir) / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"


def load_contract_abi(contract_name: str, artifacts_dir: Path = Path("artifacts")) -> ContractAbi:
    """Read the compiled artifact for ``contract_name`` and index its ABI.

    Raises:
        FileNotFoundError: If the artifact file does not exist.
        ValueError: If the artifact has no ``abi`` list.
    """

    path = artifact_path(contract_name, artifacts_dir)
    payload = json.loads(path.read_text(encoding="utf-8"))
    entries = payload.get("abi") if isinstance(payload, Mapping) else None
    if not isinstance(entries, list):
        raise ValueError(f"Artifact {path} does not contain an 'abi' list")
    abi = ContractAbi.from_entries(entries)
    _LOGGER.info("Loaded %d ABI functions from %s", len(abi), path)
    return abi


__all__ = [
    "ContractAbi",
    "FunctionDescriptor",
    "UnknownFunctionError",
    "artifact_path",
    "load_contract_abi",
]
