# canister_kit

Plain Python data types for the arguments and results of canister
management calls (lifecycle, settings, code installation, status, history,
snapshots and logs), a principal type with its checksummed text form, and a
classification of reject codes. No third-party dependencies.

## Install

    pip install canister_kit

To run the tests:

    pip install "canister_kit[test]"
    pytest

## Reject codes

`canister_kit.reject_codes.RejectCode` classifies why a request or
inter-canister call was rejected. Codes 1 to 6 have names (`SysFatal`,
`SysTransient`, `DestinationInvalid`, `CanisterReject`, `CanisterError`,
`SysUnknown`) and class constants such as `RejectCode.CANISTER_REJECT`. Any
other non-zero code that fits in 32 bits is kept as an unrecognized code.
Zero raises `ZeroIsInvalidRejectCode` (a `ValueError`).

```python
from canister_kit.reject_codes import RejectCode, ZeroIsInvalidRejectCode

code = RejectCode.from_code(4)
str(code)            # "CanisterReject(4)"
int(code)            # 4
code == 4            # True
code.is_recognized   # True

str(RejectCode.from_code(42))   # "Unrecognized(42)"

try:
    RejectCode.from_code(0)
except ZeroIsInvalidRejectCode:
    ...
```

Reject codes compare equal to their integers, hash like them and order by
number.

## Principals and plain values

`canister_kit.base.Principal` holds up to 29 raw bytes. `Principal.from_text`
parses the dashed lower-case base32 form and checks its CRC-32 checksum and
canonical layout; `to_text()` (also `str()`) produces it.

`canister_kit.base.Variant` is the base of the tagged unions. A case without
payload converts to its tag; a case with payload converts to `{tag: payload}`.

`to_value` turns any record, variant, enum or principal into plain values
(dicts, lists, str, int, float, bytes; principals become their text form).
`from_value(type, value)` builds the typed object back:

```python
from canister_kit.base import Principal, to_value, from_value
from canister_kit.canister import CanisterIdRecord

record = CanisterIdRecord(canister_id=Principal.from_text("aaaaa-aa"))
plain = to_value(record)          # {"canister_id": "aaaaa-aa"}
assert from_value(CanisterIdRecord, plain) == record
```

Optional fields that are missing from a mapping are read as `None`.

## Record modules

- `canister_kit.canister`: `CanisterSettings`, `DefiniteCanisterSettings`,
  `CreateCanisterArgs`, `UpdateSettingsArgs`, `UploadChunkArgs`,
  `InstallCodeArgs`, `InstallChunkedCodeArgs`, `UninstallCodeArgs`,
  `CanisterStatusResult`, `CanisterInfoArgs`, `CanisterInfoResult`, `Change`
  and its origin and detail records, and the provisional create/top-up
  arguments. Unions are built with `LogVisibility.controllers()`,
  `LogVisibility.public()`, `LogVisibility.allowed_viewers(principals)`,
  `CanisterInstallMode.install()`, `.reinstall()` and `.upgrade(flags)`.
- `canister_kit.snapshots`: `Snapshot`, the take/load/delete/read/upload
  snapshot arguments and results, `SnapshotDataKind` (for example
  `SnapshotDataKind.main_memory(offset, size)`), `SnapshotDataOffset`,
  `SnapshotMetadataGlobal` (`i32`, `i64`, `f32`, `f64`, `v128`, range
  checked), `CanisterTimer.active(timestamp)`, and the canister log records
  `CanisterLogRecord` and `FetchCanisterLogsResult`.

Unsigned fields are checked on construction: a negative value raises
`ValueError`, as does a value that does not fit a 64-bit field. Records order
field by field, with absent values first; enums and variant cases order by
declaration.

## What this package does not do

- It has no types for HTTP outcalls, ECDSA, Schnorr or VetKD keys and
  signatures, node metrics history or subnet info.
- It does not encode values to a binary wire format and makes no calls:
  it only builds, checks and converts the records to and from plain values.