import pytest

from canister_kit.base import Principal, from_value, to_value
from canister_kit.canister import ChunkHash
from canister_kit.snapshots import (
    CanisterLogRecord,
    CanisterTimer,
    DeleteCanisterSnapshotArgs,
    FetchCanisterLogsResult,
    LoadCanisterSnapshotArgs,
    OnLowWasmMemoryHookStatus,
    ReadCanisterSnapshotDataArgs,
    ReadCanisterSnapshotDataResult,
    ReadCanisterSnapshotMetadataArgs,
    ReadCanisterSnapshotMetadataResult,
    Snapshot,
    SnapshotDataKind,
    SnapshotDataOffset,
    SnapshotMetadataGlobal,
    SnapshotSource,
    TakeCanisterSnapshotArgs,
    UploadCanisterSnapshotDataArgs,
    UploadCanisterSnapshotMetadataArgs,
    UploadCanisterSnapshotMetadataResult,
)

CANISTER = Principal(b"\x00\x00\x00\x00\x00\x00\x00\x07\x01\x01")


def _metadata():
    return ReadCanisterSnapshotMetadataResult(
        source=SnapshotSource.TAKEN_FROM_CANISTER,
        taken_at_timestamp=1_700_000_000,
        wasm_module_size=2048,
        globals=[
            SnapshotMetadataGlobal.i32(-5),
            SnapshotMetadataGlobal.i64(1 << 40),
            SnapshotMetadataGlobal.f32(0.5),
            SnapshotMetadataGlobal.f64(2.25),
            SnapshotMetadataGlobal.v128(1 << 100),
        ],
        wasm_memory_size=65536,
        stable_memory_size=0,
        wasm_chunk_store=[ChunkHash(b"\x01" * 32)],
        canister_version=3,
        certified_data=b"cert",
        global_timer=CanisterTimer.active(99),
        on_low_wasm_memory_hook_status=OnLowWasmMemoryHookStatus.READY,
    )


def test_snapshot_defaults():
    snap = Snapshot()
    assert (snap.id, snap.taken_at_timestamp, snap.total_size) == (b"", 0, 0)


def test_snapshot_rejects_negative_size():
    with pytest.raises(ValueError):
        Snapshot(id=b"x", taken_at_timestamp=0, total_size=-1)


def test_snapshot_rejects_u64_overflow():
    with pytest.raises(ValueError):
        Snapshot(id=b"x", taken_at_timestamp=1 << 64, total_size=0)


def test_snapshot_round_trip():
    snap = Snapshot(id=b"\x00\x01", taken_at_timestamp=10, total_size=20)
    assert from_value(Snapshot, to_value(snap)) == snap


def test_take_snapshot_args_optional_replace():
    args = from_value(TakeCanisterSnapshotArgs, {"canister_id": CANISTER.to_text()})
    assert args == TakeCanisterSnapshotArgs(CANISTER)
    assert args.replace_snapshot is None


def test_load_snapshot_args_round_trip():
    args = LoadCanisterSnapshotArgs(CANISTER, b"snap", 4)
    plain = to_value(args)
    assert plain["canister_id"] == CANISTER.to_text()
    assert from_value(LoadCanisterSnapshotArgs, plain) == args


def test_delete_and_read_metadata_args_round_trip():
    delete = DeleteCanisterSnapshotArgs(CANISTER, b"id")
    read = ReadCanisterSnapshotMetadataArgs(CANISTER, b"id")
    assert from_value(DeleteCanisterSnapshotArgs, to_value(delete)) == delete
    assert from_value(ReadCanisterSnapshotMetadataArgs, to_value(read)) == read


def test_snapshot_source_values():
    assert SnapshotSource("taken_from_canister") is SnapshotSource.TAKEN_FROM_CANISTER
    assert to_value(SnapshotSource.METADATA_UPLOAD) == "metadata_upload"


def test_hook_status_values():
    assert [to_value(s) for s in OnLowWasmMemoryHookStatus] == [
        "condition_not_satisfied",
        "ready",
        "executed",
    ]
    assert (
        from_value(OnLowWasmMemoryHookStatus, "executed")
        is OnLowWasmMemoryHookStatus.EXECUTED
    )


def test_global_plain_value():
    assert SnapshotMetadataGlobal.i32(7).to_value() == {"i32": 7}
    assert SnapshotMetadataGlobal.v128(12).to_value() == {"v128": 12}


@pytest.mark.parametrize(
    "tag, value",
    [("i32", 1 << 31), ("i32", -(1 << 31) - 1), ("i64", 1 << 63), ("v128", -1), ("v128", 1 << 128)],
)
def test_global_out_of_range(tag, value):
    with pytest.raises(ValueError):
        SnapshotMetadataGlobal(tag, value)


def test_global_integer_bounds_accepted():
    assert SnapshotMetadataGlobal.i32(-(1 << 31)).value == -(1 << 31)
    assert SnapshotMetadataGlobal.i64((1 << 63) - 1).value == (1 << 63) - 1


def test_global_wrong_type():
    with pytest.raises(TypeError):
        SnapshotMetadataGlobal.i32(1.5)
    with pytest.raises(TypeError):
        SnapshotMetadataGlobal.f64("1.0")


def test_global_float_precision():
    assert SnapshotMetadataGlobal.f64(0.1).value == 0.1
    assert SnapshotMetadataGlobal.f32(0.1).value == pytest.approx(0.1, rel=1e-7)
    assert SnapshotMetadataGlobal.f32(0.5).value == 0.5
    assert isinstance(SnapshotMetadataGlobal.f64(3).value, float)


def test_global_f32_overflow():
    with pytest.raises(ValueError):
        SnapshotMetadataGlobal.f32(1e300)


def test_global_unknown_tag():
    with pytest.raises(ValueError):
        SnapshotMetadataGlobal.from_value({"i16": 1})


def test_timer_values():
    assert CanisterTimer.inactive().to_value() == "inactive"
    assert CanisterTimer.active(42).to_value() == {"active": 42}
    assert CanisterTimer.from_value({"active": 42}) == CanisterTimer.active(42)


def test_timer_rejects_negative():
    with pytest.raises(ValueError):
        CanisterTimer.active(-1)


def test_timer_inactive_takes_no_value():
    with pytest.raises(ValueError):
        CanisterTimer("inactive", 5)


def test_metadata_result_round_trip():
    meta = _metadata()
    assert from_value(ReadCanisterSnapshotMetadataResult, to_value(meta)) == meta


def test_metadata_result_optional_fields_default():
    plain = to_value(_metadata())
    del plain["global_timer"]
    del plain["on_low_wasm_memory_hook_status"]
    meta = from_value(ReadCanisterSnapshotMetadataResult, plain)
    assert meta.global_timer is None
    assert meta.on_low_wasm_memory_hook_status is None
    assert meta.globals == _metadata().globals


def test_data_kind_plain_value():
    assert SnapshotDataKind.wasm_module(0, 10).to_value() == {
        "wasm_module": {"offset": 0, "size": 10}
    }
    assert SnapshotDataKind.wasm_chunk(b"h").to_value() == {"wasm_chunk": {"hash": b"h"}}


@pytest.mark.parametrize(
    "kind",
    [
        SnapshotDataKind.wasm_module(1, 2),
        SnapshotDataKind.main_memory(3, 4),
        SnapshotDataKind.stable_memory(5, 6),
        SnapshotDataKind.wasm_chunk(b"\xff" * 32),
    ],
)
def test_data_kind_round_trip(kind):
    assert SnapshotDataKind.from_value(kind.to_value()) == kind


def test_data_kind_distinguishes_memories():
    assert SnapshotDataKind.main_memory(0, 1) != SnapshotDataKind.stable_memory(0, 1)
    assert SnapshotDataKind.main_memory(0, 1) == SnapshotDataKind.main_memory(0, 1)


def test_data_kind_rejects_negative_offset():
    with pytest.raises(ValueError):
        SnapshotDataKind.main_memory(-1, 4)


def test_read_data_args_round_trip():
    args = ReadCanisterSnapshotDataArgs(CANISTER, b"s", SnapshotDataKind.stable_memory(8, 16))
    assert from_value(ReadCanisterSnapshotDataArgs, to_value(args)) == args


def test_read_data_result_round_trip():
    result = ReadCanisterSnapshotDataResult(b"\x00\x01\x02")
    assert from_value(ReadCanisterSnapshotDataResult, to_value(result)) == result


def test_data_offset_values():
    assert SnapshotDataOffset.wasm_chunk().to_value() == "wasm_chunk"
    assert SnapshotDataOffset.main_memory(64).to_value() == {"main_memory": {"offset": 64}}
    assert SnapshotDataOffset.from_value("wasm_chunk") == SnapshotDataOffset.wasm_chunk()


def test_data_offset_wasm_chunk_needs_no_value():
    with pytest.raises(ValueError):
        SnapshotDataOffset.from_value({"wasm_chunk": {"offset": 1}})


def test_data_offset_requires_payload():
    with pytest.raises(ValueError):
        SnapshotDataOffset.from_value("wasm_module")


def test_upload_metadata_args_round_trip():
    args = UploadCanisterSnapshotMetadataArgs(
        canister_id=CANISTER,
        wasm_module_size=100,
        globals=[SnapshotMetadataGlobal.i64(-9)],
        wasm_memory_size=200,
        stable_memory_size=300,
        certified_data=b"",
        global_timer=CanisterTimer.inactive(),
    )
    assert args.replace_snapshot is None
    assert from_value(UploadCanisterSnapshotMetadataArgs, to_value(args)) == args


def test_upload_metadata_result_and_data_args():
    result = UploadCanisterSnapshotMetadataResult(b"new")
    args = UploadCanisterSnapshotDataArgs(
        CANISTER, result.snapshot_id, SnapshotDataOffset.wasm_module(0), b"\x00asm"
    )
    assert from_value(UploadCanisterSnapshotMetadataResult, to_value(result)) == result
    assert from_value(UploadCanisterSnapshotDataArgs, to_value(args)) == args


def test_log_records_order_by_index():
    later = CanisterLogRecord(2, 5, b"b")
    earlier = CanisterLogRecord(1, 9, b"a")
    assert sorted([later, earlier]) == [earlier, later]


def test_log_record_rejects_negative_index():
    with pytest.raises(ValueError):
        CanisterLogRecord(-1, 0, b"")


def test_fetch_logs_result_round_trip():
    result = FetchCanisterLogsResult(
        [CanisterLogRecord(0, 10, b"hello"), CanisterLogRecord(1, 20, b"world")]
    )
    plain = to_value(result)
    assert plain["canister_log_records"][1]["content"] == b"world"
    assert from_value(FetchCanisterLogsResult, plain) == result


def test_fetch_logs_result_missing_field():
    with pytest.raises(ValueError):
        from_value(FetchCanisterLogsResult, {})