"""Argument and result types for the canister lifecycle methods of the management canister."""

from __future__ import annotations

import dataclasses
import enum
import functools
import types
import typing
from typing import Annotated, Any, Union

from canister_kit.base import Principal, Variant, _hints


@dataclasses.dataclass(frozen=True)
class _Unsigned:
    """Marks an integer field as unsigned, with an optional bit width."""

    bits: int | None = None

    def check(self, owner: str, name: str, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(
                f"{owner}.{name} must be an integer, not {type(value).__name__}"
            )
        if value < 0:
            raise ValueError(f"{owner}.{name} must not be negative, got {value}")
        if self.bits is not None and value >= 1 << self.bits:
            raise ValueError(
                f"{owner}.{name} does not fit in {self.bits} bits, got {value}"
            )


Nat = Annotated[int, _Unsigned()]
U64 = Annotated[int, _Unsigned(64)]

CanisterId = Principal
SnapshotId = bytes
WasmModule = bytes
RawRandResult = bytes


def _unsigned_spec(hint: Any) -> _Unsigned | None:
    if typing.get_origin(hint) is Annotated:
        for meta in hint.__metadata__:
            if isinstance(meta, _Unsigned):
                return meta
        return None
    origin = typing.get_origin(hint)
    if origin is Union or origin is types.UnionType:
        for arg in typing.get_args(hint):
            spec = _unsigned_spec(arg)
            if spec is not None:
                return spec
    return None


@functools.lru_cache(maxsize=None)
def _unsigned_fields(cls: type) -> tuple[tuple[str, _Unsigned], ...]:
    hints = _hints(cls)
    checks = []
    for f in dataclasses.fields(cls):
        spec = _unsigned_spec(hints.get(f.name, Any))
        if spec is not None:
            checks.append((f.name, spec))
    return tuple(checks)


def _sort_key(value: Any) -> Any:
    """A key that orders values the way the wire types do: absent values first."""
    if value is None:
        return (0,)
    if isinstance(value, _Record):
        return (1, tuple(_sort_key(getattr(value, f.name)) for f in dataclasses.fields(value)))
    if isinstance(value, Variant):
        rank = list(type(value)._variants).index(value.tag)
        return (1, rank, _sort_key(value.value))
    if isinstance(value, enum.Enum):
        return (1, list(type(value)).index(value))
    if isinstance(value, (list, tuple)):
        return (1, tuple(_sort_key(item) for item in value))
    return (1, value)


class _Record:
    """Shared behaviour of the record types: unsigned checks and field-wise ordering."""

    def __post_init__(self) -> None:
        owner = type(self).__name__
        for name, spec in _unsigned_fields(type(self)):
            value = getattr(self, name)
            if value is not None:
                spec.check(owner, name, value)

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return _sort_key(self) < _sort_key(other)

    def __le__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return _sort_key(self) <= _sort_key(other)

    def __gt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return _sort_key(self) > _sort_key(other)

    def __ge__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return _sort_key(self) >= _sort_key(other)


class _OrderedEnum(enum.Enum):
    """An enum whose members order by declaration."""

    def _rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() < other._rank()

    def __le__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() <= other._rank()

    def __gt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() > other._rank()

    def __ge__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() >= other._rank()


@dataclasses.dataclass
class CanisterIdRecord(_Record):
    """A record holding only a canister ID."""

    canister_id: Principal


@dataclasses.dataclass
class ChunkHash(_Record):
    """The hash of an uploaded chunk."""

    hash: bytes


class LogVisibility(Variant):
    """Who may read a canister's logs."""

    _variants = {
        "controllers": None,
        "public": None,
        "allowed_viewers": list[Principal],
    }

    @classmethod
    def controllers(cls) -> LogVisibility:
        return cls("controllers")

    @classmethod
    def public(cls) -> LogVisibility:
        return cls("public")

    @classmethod
    def allowed_viewers(cls, viewers) -> LogVisibility:
        return cls("allowed_viewers", list(viewers))


@dataclasses.dataclass
class CanisterSettings(_Record):
    """Settings for creating or updating a canister; unset fields are left alone."""

    controllers: list[Principal] | None = None
    compute_allocation: Nat | None = None
    memory_allocation: Nat | None = None
    freezing_threshold: Nat | None = None
    reserved_cycles_limit: Nat | None = None
    log_visibility: LogVisibility | None = None
    wasm_memory_limit: Nat | None = None
    wasm_memory_threshold: Nat | None = None


@dataclasses.dataclass
class DefiniteCanisterSettings(_Record):
    """The settings actually in effect for a canister."""

    controllers: list[Principal] = dataclasses.field(default_factory=list)
    compute_allocation: Nat = 0
    memory_allocation: Nat = 0
    freezing_threshold: Nat = 0
    reserved_cycles_limit: Nat = 0
    log_visibility: LogVisibility = dataclasses.field(
        default_factory=LogVisibility.controllers
    )
    wasm_memory_limit: Nat = 0
    wasm_memory_threshold: Nat = 0


@dataclasses.dataclass
class CreateCanisterArgs(_Record):
    settings: CanisterSettings | None = None
    sender_canister_version: U64 | None = None


CreateCanisterResult = CanisterIdRecord


@dataclasses.dataclass
class UpdateSettingsArgs(_Record):
    canister_id: Principal
    settings: CanisterSettings
    sender_canister_version: U64 | None = None


@dataclasses.dataclass
class UploadChunkArgs(_Record):
    canister_id: Principal
    chunk: bytes


UploadChunkResult = ChunkHash
ClearChunkStoreArgs = CanisterIdRecord
StoredChunksArgs = CanisterIdRecord
StoredChunksResult = list[ChunkHash]


class WasmMemoryPersistence(_OrderedEnum):
    """Whether the WASM heap survives an upgrade; the default is ``REPLACE``."""

    KEEP = "keep"
    REPLACE = "replace"


@dataclasses.dataclass
class UpgradeFlags(_Record):
    skip_pre_upgrade: bool | None = None
    wasm_memory_persistence: WasmMemoryPersistence | None = None


class CanisterInstallMode(Variant):
    """How code is installed: fresh install, reinstall or upgrade."""

    _variants = {
        "install": None,
        "reinstall": None,
        "upgrade": Union[UpgradeFlags, None],
    }

    @classmethod
    def install(cls) -> CanisterInstallMode:
        return cls("install")

    @classmethod
    def reinstall(cls) -> CanisterInstallMode:
        return cls("reinstall")

    @classmethod
    def upgrade(cls, flags=None) -> CanisterInstallMode:
        return cls("upgrade", flags)


@dataclasses.dataclass
class InstallCodeArgs(_Record):
    mode: CanisterInstallMode
    canister_id: Principal
    wasm_module: bytes
    arg: bytes = b""
    sender_canister_version: U64 | None = None


@dataclasses.dataclass(kw_only=True)
class InstallChunkedCodeArgs(_Record):
    mode: CanisterInstallMode
    target_canister: Principal
    store_canister: Principal | None = None
    chunk_hashes_list: list[ChunkHash]
    wasm_module_hash: bytes
    arg: bytes = b""
    sender_canister_version: U64 | None = None


@dataclasses.dataclass
class UninstallCodeArgs(_Record):
    canister_id: Principal
    sender_canister_version: U64 | None = None


StartCanisterArgs = CanisterIdRecord
StopCanisterArgs = CanisterIdRecord
CanisterStatusArgs = CanisterIdRecord
DeleteCanisterArgs = CanisterIdRecord
DepositCyclesArgs = CanisterIdRecord


class CanisterStatusType(_OrderedEnum):
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclasses.dataclass
class MemoryMetrics(_Record):
    wasm_memory_size: Nat
    stable_memory_size: Nat
    global_memory_size: Nat
    wasm_binary_size: Nat
    custom_sections_size: Nat
    canister_history_size: Nat
    wasm_chunk_store_size: Nat
    snapshots_size: Nat


@dataclasses.dataclass
class QueryStats(_Record):
    num_calls_total: Nat
    num_instructions_total: Nat
    request_payload_bytes_total: Nat
    response_payload_bytes_total: Nat


@dataclasses.dataclass
class CanisterStatusResult(_Record):
    status: CanisterStatusType
    settings: DefiniteCanisterSettings
    module_hash: bytes | None
    memory_size: Nat
    memory_metrics: MemoryMetrics
    cycles: Nat
    reserved_cycles: Nat
    idle_cycles_burned_per_day: Nat
    query_stats: QueryStats


@dataclasses.dataclass
class CanisterInfoArgs(_Record):
    canister_id: Principal
    num_requested_changes: U64 | None = None


@dataclasses.dataclass
class FromUserRecord(_Record):
    user_id: Principal


@dataclasses.dataclass
class FromCanisterRecord(_Record):
    canister_id: Principal
    canister_version: U64 | None = None


class ChangeOrigin(Variant):
    """Who initiated a canister change."""

    _variants = {
        "from_user": FromUserRecord,
        "from_canister": FromCanisterRecord,
    }


@dataclasses.dataclass
class CreationRecord(_Record):
    controllers: list[Principal]


class CodeDeploymentMode(_OrderedEnum):
    INSTALL = "install"
    REINSTALL = "reinstall"
    UPGRADE = "upgrade"


@dataclasses.dataclass
class CodeDeploymentRecord(_Record):
    mode: CodeDeploymentMode
    module_hash: bytes


@dataclasses.dataclass
class LoadSnapshotRecord(_Record):
    canister_version: U64
    snapshot_id: bytes
    taken_at_timestamp: U64


@dataclasses.dataclass
class ControllersChangeRecord(_Record):
    controllers: list[Principal]


class ChangeDetails(Variant):
    """What a canister change did."""

    _variants = {
        "creation": CreationRecord,
        "code_uninstall": None,
        "code_deployment": CodeDeploymentRecord,
        "load_snapshot": LoadSnapshotRecord,
        "controllers_change": ControllersChangeRecord,
    }


@dataclasses.dataclass
class Change(_Record):
    """A canister change as stored in the canister history."""

    timestamp_nanos: U64
    canister_version: U64
    origin: ChangeOrigin
    details: ChangeDetails


@dataclasses.dataclass
class CanisterInfoResult(_Record):
    total_num_changes: U64
    recent_changes: list[Change]
    module_hash: bytes | None
    controllers: list[Principal]


@dataclasses.dataclass
class ProvisionalCreateCanisterWithCyclesArgs(_Record):
    amount: Nat | None = None
    settings: CanisterSettings | None = None
    specified_id: Principal | None = None
    sender_canister_version: U64 | None = None


ProvisionalCreateCanisterWithCyclesResult = CanisterIdRecord


@dataclasses.dataclass
class ProvisionalTopUpCanisterArgs(_Record):
    canister_id: Principal
    amount: Nat