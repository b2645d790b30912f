"""Reject codes that classify why a request or inter-canister call was rejected."""

from __future__ import annotations

import dataclasses
import functools
from typing import ClassVar

_U32_MAX = 2**32 - 1

_NAMES = {
    1: "SysFatal",
    2: "SysTransient",
    3: "DestinationInvalid",
    4: "CanisterReject",
    5: "CanisterError",
    6: "SysUnknown",
}


class ZeroIsInvalidRejectCode(ValueError):
    """Raised when 0 is given as a reject code; zero is never valid."""

    def __init__(self) -> None:
        super().__init__("zero is invalid reject code")


@functools.total_ordering
@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class RejectCode:
    """A reject code: one of the six defined codes, or an unrecognized non-zero code."""

    code: int

    SYS_FATAL: ClassVar[RejectCode]
    SYS_TRANSIENT: ClassVar[RejectCode]
    DESTINATION_INVALID: ClassVar[RejectCode]
    CANISTER_REJECT: ClassVar[RejectCode]
    CANISTER_ERROR: ClassVar[RejectCode]
    SYS_UNKNOWN: ClassVar[RejectCode]

    def __post_init__(self) -> None:
        code = self.code
        if isinstance(code, RejectCode):
            code = code.code
            object.__setattr__(self, "code", code)
        if isinstance(code, bool) or not isinstance(code, int):
            raise TypeError(f"reject code must be an integer, not {type(code).__name__}")
        if code == 0:
            raise ZeroIsInvalidRejectCode()
        if not 0 < code <= _U32_MAX:
            raise ValueError(f"reject code {code} does not fit in an unsigned 32-bit integer")

    @classmethod
    def from_code(cls, code: int) -> RejectCode:
        """Build a reject code from its numeric value; 0 raises ZeroIsInvalidRejectCode."""
        return cls(code)

    @property
    def name(self) -> str:
        """The variant name, "Unrecognized" for codes outside the defined set."""
        return _NAMES.get(self.code, "Unrecognized")

    @property
    def is_recognized(self) -> bool:
        return self.code in _NAMES

    def __int__(self) -> int:
        return self.code

    def __str__(self) -> str:
        return f"{self.name}({self.code})"

    def __repr__(self) -> str:
        return f"RejectCode({self.code})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RejectCode):
            return self.code == other.code
        if isinstance(other, int) and not isinstance(other, bool):
            return self.code == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, RejectCode):
            return self.code < other.code
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.code)


RejectCode.SYS_FATAL = RejectCode(1)
RejectCode.SYS_TRANSIENT = RejectCode(2)
RejectCode.DESTINATION_INVALID = RejectCode(3)
RejectCode.CANISTER_REJECT = RejectCode(4)
RejectCode.CANISTER_ERROR = RejectCode(5)
RejectCode.SYS_UNKNOWN = RejectCode(6)