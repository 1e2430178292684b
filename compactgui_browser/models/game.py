"""Game-related data models."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class CompressionAlgorithm(IntEnum):
    """Windows compression algorithms, keyed by their dataset CompType code."""
    XPRESS4K = 0
    XPRESS8K = 1
    XPRESS16K = 2
    LZX = 3

    @property
    def label(self) -> str:
        """Human-readable algorithm name."""
        return _ALGORITHM_LABELS[self]

    @property
    def slug(self) -> str:
        """Identifier used in sort keys."""
        return self.name.lower()

    @classmethod
    def from_code(cls, code: int) -> "CompressionAlgorithm | None":
        """Look up an algorithm by CompType code, None if unknown."""
        try:
            return cls(code)
        except ValueError:
            return None


_ALGORITHM_LABELS: dict[CompressionAlgorithm, str] = {
    CompressionAlgorithm.XPRESS4K: "XPRESS 4K",
    CompressionAlgorithm.XPRESS8K: "XPRESS 8K",
    CompressionAlgorithm.XPRESS16K: "XPRESS 16K",
    CompressionAlgorithm.LZX: "LZX",
}


def _require_int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass but never a valid size or code
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number for '{key}', got {value!r}")
    # JSON allows exponents beyond float range, which decode to inf
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Number out of range for '{key}': {value!r}")
    return int(value)


@dataclass(frozen=True)
class CompressionResult:
    """Size of a game before and after compressing with one algorithm."""
    comp_type: int
    before_bytes: int
    after_bytes: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompressionResult":
        """Build a result from its dataset representation."""
        if not isinstance(data, Mapping):
            raise ValueError("Compression result must be an object")
        return cls(
            comp_type=_require_int(data, "CompType"),
            before_bytes=_require_int(data, "BeforeBytes"),
            after_bytes=_require_int(data, "AfterBytes"),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "CompType": self.comp_type,
            "BeforeBytes": self.before_bytes,
            "AfterBytes": self.after_bytes,
        }


@dataclass(frozen=True)
class RawGameRecord:
    """A game entry exactly as published in the database."""
    steam_id: str
    game_name: str
    compression_results: tuple[CompressionResult, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawGameRecord":
        """Build a record from its dataset representation.

        Raises:
            ValueError: If required fields are missing or mistyped
        """
        if not isinstance(data, Mapping):
            raise ValueError("Game record must be an object")

        steam_id = data.get("SteamID")
        if isinstance(steam_id, bool) or not isinstance(steam_id, (int, str)):
            raise ValueError(f"Missing or invalid SteamID: {steam_id!r}")

        game_name = data.get("GameName")
        if not isinstance(game_name, str):
            raise ValueError(f"Missing or invalid GameName for SteamID {steam_id}")

        results = data.get("CompressionResults") or []
        if not isinstance(results, list):
            raise ValueError(f"CompressionResults must be a list for SteamID {steam_id}")

        return cls(
            steam_id=str(steam_id),
            game_name=game_name,
            compression_results=tuple(CompressionResult.from_dict(r) for r in results),
        )

    def to_dict(self) -> dict[str, Any]:
        # Numeric IDs are written back as numbers to match the published format
        steam_id: int | str = int(self.steam_id) if self.steam_id.isdigit() else self.steam_id
        return {
            "SteamID": steam_id,
            "GameName": self.game_name,
            "CompressionResults": [r.to_dict() for r in self.compression_results],
        }


Dataset = list[RawGameRecord]


def parse_dataset(payload: Any) -> Dataset:
    """Parse a decoded JSON payload into game records.

    Args:
        payload: Decoded JSON document, expected to be an array of game objects

    Returns:
        List of raw game records in document order

    Raises:
        ValueError: If the payload is not an array of valid records
    """
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array of games, got {type(payload).__name__}")
    return [RawGameRecord.from_dict(item) for item in payload]


def dataset_to_payload(dataset: Dataset) -> list[dict[str, Any]]:
    """Convert game records back into their JSON-ready representation."""
    return [record.to_dict() for record in dataset]


@dataclass(frozen=True)
class AlgorithmResult:
    """A compression result together with its derived savings percentage."""
    algorithm: CompressionAlgorithm
    before_bytes: int
    after_bytes: int
    savings: float


@dataclass(frozen=True)
class DerivedGameRecord:
    """Game record with values computed for display and sorting."""
    record: RawGameRecord
    original_size: int
    results: Mapping[CompressionAlgorithm, AlgorithmResult] = field(default_factory=dict)

    @property
    def steam_id(self) -> str:
        return self.record.steam_id

    @property
    def game_name(self) -> str:
        return self.record.game_name

    def result_for(self, algorithm: CompressionAlgorithm) -> AlgorithmResult | None:
        """Get the result for an algorithm, None if the game was not tested with it."""
        return self.results.get(algorithm)
