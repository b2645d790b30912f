"""Argument and result types for canister snapshots and canister logs."""

from __future__ import annotations

import dataclasses
import struct
from typing import Any

from canister_kit.base import Principal, Variant
from canister_kit.canister import (
    U64,
    CanisterIdRecord,
    ChunkHash,
    _OrderedEnum,
    _Record,
)

_U64_LIMIT = 1 << 64


def _check_u64(owner: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{owner} must be an integer, not {type(value).__name__}")
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"{owner} does not fit in an unsigned 64-bit integer, got {value}")
    return value


@dataclasses.dataclass
class Snapshot(_Record):
    """A snapshot of a canister's state at a point in time."""

    id: bytes = b""
    taken_at_timestamp: U64 = 0
    total_size: U64 = 0


TakeCanisterSnapshotResult = Snapshot


@dataclasses.dataclass
class TakeCanisterSnapshotArgs(_Record):
    """A ``replace_snapshot`` is deleted once the new snapshot has been created."""

    canister_id: Principal
    replace_snapshot: bytes | None = None


@dataclasses.dataclass
class LoadCanisterSnapshotArgs(_Record):
    canister_id: Principal
    snapshot_id: bytes
    sender_canister_version: U64 | None = None


ListCanisterSnapshotsArgs = CanisterIdRecord
ListCanisterSnapshotsResult = list[Snapshot]


@dataclasses.dataclass
class DeleteCanisterSnapshotArgs(_Record):
    canister_id: Principal
    snapshot_id: bytes


@dataclasses.dataclass
class ReadCanisterSnapshotMetadataArgs(_Record):
    canister_id: Principal
    snapshot_id: bytes


class SnapshotSource(_OrderedEnum):
    """Where a snapshot came from."""

    TAKEN_FROM_CANISTER = "taken_from_canister"
    METADATA_UPLOAD = "metadata_upload"


class OnLowWasmMemoryHookStatus(_OrderedEnum):
    """The state of the "on low wasm memory" hook."""

    CONDITION_NOT_SATISFIED = "condition_not_satisfied"
    READY = "ready"
    EXECUTED = "executed"


_INT_RANGES = {
    "i32": (-(1 << 31), 1 << 31),
    "i64": (-(1 << 63), 1 << 63),
}


class SnapshotMetadataGlobal(Variant):
    """An exported global variable: an i32, i64, f32, f64 or a 128-bit vector."""

    _variants = {
        "i32": int,
        "i64": int,
        "f32": float,
        "f64": float,
        "v128": int,
    }

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "value", self._checked(self.tag, self.value))

    @staticmethod
    def _checked(tag: str, value: Any) -> Any:
        if tag in ("f32", "f64"):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"{tag} global must be a number, not {type(value).__name__}")
            value = float(value)
            if tag == "f32":
                try:
                    (value,) = struct.unpack("<f", struct.pack("<f", value))
                except OverflowError as exc:
                    raise ValueError(f"{value} does not fit in a 32-bit float") from exc
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{tag} global must be an integer, not {type(value).__name__}")
        if tag == "v128":
            if not 0 <= value < 1 << 128:
                raise ValueError(f"v128 global must fit in 128 unsigned bits, got {value}")
            return value
        low, high = _INT_RANGES[tag]
        if not low <= value < high:
            raise ValueError(f"{tag} global out of range, got {value}")
        return value

    @classmethod
    def i32(cls, value: int) -> SnapshotMetadataGlobal:
        return cls("i32", value)

    @classmethod
    def i64(cls, value: int) -> SnapshotMetadataGlobal:
        return cls("i64", value)

    @classmethod
    def f32(cls, value: float) -> SnapshotMetadataGlobal:
        return cls("f32", value)

    @classmethod
    def f64(cls, value: float) -> SnapshotMetadataGlobal:
        return cls("f64", value)

    @classmethod
    def v128(cls, value: int) -> SnapshotMetadataGlobal:
        return cls("v128", value)


class CanisterTimer(Variant):
    """The global timer: inactive, or active with a timestamp in nanoseconds."""

    _variants = {"inactive": None, "active": int}

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.tag == "active":
            _check_u64("active timer timestamp", self.value)

    @classmethod
    def inactive(cls) -> CanisterTimer:
        return cls("inactive")

    @classmethod
    def active(cls, timestamp: int) -> CanisterTimer:
        return cls("active", timestamp)


@dataclasses.dataclass
class ReadCanisterSnapshotMetadataResult(_Record):
    source: SnapshotSource
    taken_at_timestamp: U64
    wasm_module_size: U64
    globals: list[SnapshotMetadataGlobal]
    wasm_memory_size: U64
    stable_memory_size: U64
    wasm_chunk_store: list[ChunkHash]
    canister_version: U64
    certified_data: bytes
    global_timer: CanisterTimer | None = None
    on_low_wasm_memory_hook_status: OnLowWasmMemoryHookStatus | None = None


@dataclasses.dataclass(frozen=True)
class _DataRange(_Record):
    offset: U64
    size: U64


@dataclasses.dataclass(frozen=True)
class _DataOffset(_Record):
    offset: U64


@dataclasses.dataclass(frozen=True)
class _ChunkRef(_Record):
    hash: bytes


class SnapshotDataKind(Variant):
    """Which part of a snapshot to read: a byte range of a memory, or a stored chunk."""

    _variants = {
        "wasm_module": _DataRange,
        "main_memory": _DataRange,
        "stable_memory": _DataRange,
        "wasm_chunk": _ChunkRef,
    }

    @classmethod
    def wasm_module(cls, offset: int, size: int) -> SnapshotDataKind:
        return cls("wasm_module", _DataRange(offset, size))

    @classmethod
    def main_memory(cls, offset: int, size: int) -> SnapshotDataKind:
        return cls("main_memory", _DataRange(offset, size))

    @classmethod
    def stable_memory(cls, offset: int, size: int) -> SnapshotDataKind:
        return cls("stable_memory", _DataRange(offset, size))

    @classmethod
    def wasm_chunk(cls, hash: bytes) -> SnapshotDataKind:
        return cls("wasm_chunk", _ChunkRef(bytes(hash)))


@dataclasses.dataclass
class ReadCanisterSnapshotDataArgs(_Record):
    canister_id: Principal
    snapshot_id: bytes
    kind: SnapshotDataKind


@dataclasses.dataclass
class ReadCanisterSnapshotDataResult(_Record):
    chunk: bytes


@dataclasses.dataclass(kw_only=True)
class UploadCanisterSnapshotMetadataArgs(_Record):
    """A ``replace_snapshot`` is deleted once the new snapshot has been created."""

    canister_id: Principal
    replace_snapshot: bytes | None = None
    wasm_module_size: U64
    globals: list[SnapshotMetadataGlobal]
    wasm_memory_size: U64
    stable_memory_size: U64
    certified_data: bytes
    global_timer: CanisterTimer | None = None
    on_low_wasm_memory_hook_status: OnLowWasmMemoryHookStatus | None = None


@dataclasses.dataclass
class UploadCanisterSnapshotMetadataResult(_Record):
    snapshot_id: bytes


class SnapshotDataOffset(Variant):
    """Where uploaded snapshot data goes: an offset into a memory, or the chunk store."""

    _variants = {
        "wasm_module": _DataOffset,
        "main_memory": _DataOffset,
        "stable_memory": _DataOffset,
        "wasm_chunk": None,
    }

    @classmethod
    def wasm_module(cls, offset: int) -> SnapshotDataOffset:
        return cls("wasm_module", _DataOffset(offset))

    @classmethod
    def main_memory(cls, offset: int) -> SnapshotDataOffset:
        return cls("main_memory", _DataOffset(offset))

    @classmethod
    def stable_memory(cls, offset: int) -> SnapshotDataOffset:
        return cls("stable_memory", _DataOffset(offset))

    @classmethod
    def wasm_chunk(cls) -> SnapshotDataOffset:
        return cls("wasm_chunk")


@dataclasses.dataclass
class UploadCanisterSnapshotDataArgs(_Record):
    canister_id: Principal
    snapshot_id: bytes
    kind: SnapshotDataOffset
    chunk: bytes


FetchCanisterLogsArgs = CanisterIdRecord


@dataclasses.dataclass
class CanisterLogRecord(_Record):
    idx: U64
    timestamp_nanos: U64
    content: bytes


@dataclasses.dataclass
class FetchCanisterLogsResult(_Record):
    canister_log_records: list[CanisterLogRecord]