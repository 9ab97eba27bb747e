"""Run options for the parametric report"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_SEPARATOR = "::"
REPORT_SUFFIX = ".para.csv"
COMBINED_REPORT_NAME = "para.csv"
PASS_FAIL_SUFFIX = "PF"
FUNCTIONAL_SUFFIX = "FTR"


@dataclass(frozen=True)
class ReportOptions:
    """
    Options consumed by the report pipeline.

    Args:
        files: Input STDF files, in the order their rows should appear
        include_pass_fail: Append a pass/fail column for every test
        include_functional: Add FTR results as columns
        split_output: Write one report per input file instead of one combined report
        separator: Joins test number and test name into a column name
        output_dir: Where reports go (defaults depend on split_output)
        verbose: More chatty logging
    """
    files: Tuple[str, ...] = ()
    include_pass_fail: bool = False
    include_functional: bool = False
    split_output: bool = False
    separator: str = DEFAULT_SEPARATOR
    output_dir: Optional[Path] = None
    verbose: bool = False

    def test_key(self, test_num: int, test_txt: str) -> str:
        return f"{test_num}{self.separator}{test_txt}"

    def pass_fail_column(self, test_key: str) -> str:
        return f"{test_key}{self.separator}{PASS_FAIL_SUFFIX}"

    def functional_column(self, test_key: str) -> str:
        return f"{test_key}{self.separator}{FUNCTIONAL_SUFFIX}"
