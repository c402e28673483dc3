"""Parsing helpers for Hedera ``shard.realm.num`` entity identifiers."""
from __future__ import annotations

from dataclasses import dataclass

_SHARD_BYTES = 4
_REALM_BYTES = 8
_NUM_BYTES = 8


@dataclass(frozen=True)
class EntityId:
    """An account, contract or token identifier such as ``0.0.1234``."""

    shard: int
    realm: int
    num: int

    @classmethod
    def from_string(cls, value: str) -> "EntityId":
        """Parse ``shard.realm.num`` (or a bare ``num`` in shard 0 realm 0).

        Raises:
            ValueError: If ``value`` is not a well formed identifier.
        """

        if not isinstance(value, str):
            raise ValueError(f"Entity id must be a string, got {value!r}")
        text = value.strip()
        parts = text.split(".")
        if len(parts) == 1:
            parts = ["0", "0", parts[0]]
        if len(parts) != 3 or not all(part.isdigit() for part in parts):
            raise ValueError(f"Invalid entity id {value!r}; expected shard.realm.num")
        shard, realm, num = (int(part) for part in parts)
        return cls(shard=shard, realm=realm, num=num)

    def to_solidity_address(self) -> str:
        """Return the 20 byte long-zero EVM address, hex encoded without ``0x``."""

        raw = (
            self.shard.to_bytes(_SHARD_BYTES, "big")
            + self.realm.to_bytes(_REALM_BYTES, "big")
            + self.num.to_bytes(_NUM_BYTES, "big")
        )
        return raw.hex()

    def to_evm_address(self) -> str:
        return "0x" + self.to_solidity_address()

    def __str__(self) -> str:
        return f"{self.shard}.{self.realm}.{self.num}"


__all__ = ["EntityId"]
