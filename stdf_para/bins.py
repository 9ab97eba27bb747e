"""Bin Resolver: bin number -> bin name, per file and bin kind"""

from typing import Dict

from .diagnostics import DiagnosticKind, DiagnosticLog


class BinNames:
    """Names from HBR or SBR records. The first name seen for a bin number sticks."""

    def __init__(self, kind: str, diagnostics: DiagnosticLog):
        self.kind = kind
        self._names: Dict[int, str] = {}
        self._diagnostics = diagnostics

    def define(self, bin_num: int, name: str) -> None:
        existing = self._names.get(bin_num)
        if existing is None:
            self._names[bin_num] = name
        elif existing != name:
            self._diagnostics.warn(
                DiagnosticKind.BIN_CONFLICT,
                f"{self.kind} {bin_num} renamed {name!r}, keeping {existing!r}",
            )

    def describe(self, bin_num: int) -> str:
        # Devices can land in bins no HBR/SBR ever named
        return self._names.get(bin_num, "")

    def __contains__(self, bin_num):
        return bin_num in self._names

    def __len__(self):
        return len(self._names)
