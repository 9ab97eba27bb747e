"""
Limit Resolver.

A PTR's OPT_FLAG byte says which of its limits are usable:

    bit 4 / bit 6 set -> low limit invalid
    bit 5 / bit 7 set -> high limit invalid

The first limits seen for a (head, site, test key) are the ones used for
the rest of the file. Later PTRs with different limits are reported and
otherwise ignored.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .diagnostics import DiagnosticKind, DiagnosticLog
from .records import PTR

LO_LIMIT_INVALID = 0x50
HI_LIMIT_INVALID = 0xA0

LimitKey = Tuple[int, int, str]


@dataclass(frozen=True)
class Limits:
    lo_limit: Optional[float] = None
    hi_limit: Optional[float] = None
    lo_valid: bool = False
    hi_valid: bool = False

    def passes(self, result: float) -> int:
        """1 if result is within the valid limits, 0 otherwise"""
        lo_ok = not self.lo_valid or result >= self.lo_limit
        hi_ok = not self.hi_valid or result <= self.hi_limit
        return int(lo_ok and hi_ok)


NO_LIMITS = Limits()


def decode_limits(opt_flag: Optional[int], lo_limit: Optional[float], hi_limit: Optional[float]) -> Limits:
    """Work out which limits apply from the OPT_FLAG byte.

    A missing flag byte means neither limit applies. A limit flagged as
    valid but with no value is treated as invalid.
    """
    if opt_flag is None:
        return NO_LIMITS
    lo_valid = not (opt_flag & LO_LIMIT_INVALID) and lo_limit is not None
    hi_valid = not (opt_flag & HI_LIMIT_INVALID) and hi_limit is not None
    return Limits(
        lo_limit=lo_limit if lo_valid else None,
        hi_limit=hi_limit if hi_valid else None,
        lo_valid=lo_valid,
        hi_valid=hi_valid,
    )


class LimitTable:
    """First-wins limits per (head, site, test key) for one file"""

    def __init__(self, diagnostics: DiagnosticLog):
        self._limits: Dict[LimitKey, Limits] = {}
        self._diagnostics = diagnostics

    def observe(self, ptr: PTR, test_key: str) -> None:
        # PTRs without OPT_FLAG inherit whatever was established earlier
        if ptr.opt_flag is None:
            return
        key = (ptr.head_num, ptr.site_num, test_key)
        limits = decode_limits(ptr.opt_flag, ptr.lo_limit, ptr.hi_limit)
        existing = self._limits.get(key)
        if existing is None:
            self._limits[key] = limits
        elif existing != limits:
            self._diagnostics.warn(
                DiagnosticKind.LIMIT_CONFLICT,
                f"limits for {test_key!r} on head {ptr.head_num} site {ptr.site_num} "
                f"redefined as {limits}, keeping {existing}",
            )

    def get(self, head_num: int, site_num: int, test_key: str) -> Limits:
        return self._limits.get((head_num, site_num, test_key), NO_LIMITS)

    def pass_fail(self, ptr: PTR, test_key: str) -> int:
        return self.get(ptr.head_num, ptr.site_num, test_key).passes(ptr.result)

    def __len__(self):
        return len(self._limits)
