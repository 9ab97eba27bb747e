import pandas as pd

from conftest import bins, device, header

from stdf_para.aggregator import Aggregator
from stdf_para.config import ReportOptions
from stdf_para.diagnostics import DiagnosticKind
from stdf_para.records import FTR, HBR, MIR, PRR, PTR
from stdf_para.report import DEVICE_COLUMNS, HEADER_COLUMNS, assemble_report, merge_reports


def build_state(records, options, file_name="a.stdf"):
    aggregator = Aggregator(options, [file_name])
    for record in records:
        aggregator.handle(0, record)
    return aggregator.state_for(0)


def fixed_columns():
    return ["File Name"] + [name for name, _, _ in HEADER_COLUMNS] + DEVICE_COLUMNS


def test_column_order_and_header_broadcast() -> None:
    options = ReportOptions()
    state = build_state(header() + bins()
                        + device("1", [(1, "Vdd", 1.0), (2, "Idd", 0.5)])
                        + device("2", [(1, "Vdd", 1.2)]), options)

    frame = assemble_report(state, options)

    assert list(frame.columns) == fixed_columns() + ["1::Vdd", "2::Idd"]
    assert frame["File Name"].tolist() == ["a.stdf", "a.stdf"]
    assert frame["Lot ID"].tolist() == ["LOT1", "LOT1"]
    assert frame["Station Num"].tolist() == [3, 3]
    assert frame["Setup Time"].iloc[0] == "2023-03-15T13:20:00+00:00"
    assert frame["Handler ID"].tolist() == ["H1", "H1"]
    assert frame["HBIN Description"].tolist() == ["PASS", "PASS"]
    assert frame["SBIN Description"].tolist() == ["GOOD", "GOOD"]
    assert frame["2::Idd"].isna().tolist() == [False, True]


def test_undefined_bin_gives_empty_description() -> None:
    options = ReportOptions()
    state = build_state(header() + [HBR(hbin_num=1, hbin_nam="PASS")]
                        + device("1", [(1, "Vdd", 1.0)], hard_bin=7, soft_bin=3), options)

    frame = assemble_report(state, options)

    assert frame["HBIN"].tolist() == [7]
    assert frame["HBIN Description"].tolist() == [""]
    assert frame["SBIN Description"].tolist() == [""]


def test_functional_and_pass_fail_blocks() -> None:
    options = ReportOptions(include_functional=True, include_pass_fail=True)
    records = header() + [
        PTR(test_num=1, test_txt="Vdd", result=3.0, opt_flag=0, lo_limit=1.0, hi_limit=5.0),
        FTR(test_num=2, test_txt="scan", test_flg=0x80),
        PRR(part_id="1"),
        PTR(test_num=1, test_txt="Vdd", result=6.0, opt_flag=0, lo_limit=1.0, hi_limit=5.0),
        PRR(part_id="2"),
    ]
    state = build_state(records, options)

    frame = assemble_report(state, options)

    assert list(frame.columns)[len(fixed_columns()):] == [
        "1::Vdd", "2::scan::FTR", "1::Vdd::PF", "2::scan::FTR::PF",
    ]
    assert frame["1::Vdd::PF"].tolist() == [1, 0]
    assert frame["2::scan::FTR"].iloc[0] == 0x80
    assert frame["2::scan::FTR::PF"].iloc[0] == 0
    assert frame["2::scan::FTR::PF"].isna().tolist() == [False, True]


def test_functional_only_pass_fail_needs_both_flags() -> None:
    options = ReportOptions(include_pass_fail=True)
    records = header() + [FTR(test_num=2, test_txt="scan"), PTR(test_num=1, test_txt="Vdd", result=1.0), PRR()]
    state = build_state(records, options)

    frame = assemble_report(state, options)

    assert "2::scan::FTR" not in frame.columns
    assert "2::scan::FTR::PF" not in frame.columns
    assert "1::Vdd::PF" in frame.columns


def test_functional_columns_are_tagged() -> None:
    options = ReportOptions(include_functional=True)
    records = header() + [PTR(test_num=1, test_txt="t", result=1.0), FTR(test_num=1, test_txt="t"), PRR()]
    state = build_state(records, options)

    frame = assemble_report(state, options)

    assert list(frame.columns)[len(fixed_columns()):] == ["1::t", "1::t::FTR"]


def test_functional_and_parametric_tests_of_the_same_name_stay_apart_when_merged() -> None:
    options = ReportOptions(include_functional=True)
    functional = build_state(header("A") + [FTR(test_num=2, test_txt="X", test_flg=0x80), PRR()], options, "a.stdf")
    parametric = build_state(header("B") + [PTR(test_num=2, test_txt="X", result=1.5), PRR()], options, "b.stdf")

    merged = merge_reports([assemble_report(functional, options), assemble_report(parametric, options)])

    assert merged["2::X::FTR"].isna().tolist() == [False, True]
    assert merged["2::X::FTR"].iloc[0] == 0x80
    assert merged["2::X"].isna().tolist() == [True, False]
    assert merged["2::X"].iloc[1] == 1.5


def test_missing_sdr_drops_file() -> None:
    options = ReportOptions()
    state = build_state([MIR()] + device("1", [(1, "Vdd", 1.0)]), options)

    assert assemble_report(state, options) is None
    missing = state.diagnostics.of_kind(DiagnosticKind.MISSING_HEADER)
    assert len(missing) == 1
    assert "SDR" in missing[0].message


def test_file_without_devices_gives_empty_table() -> None:
    options = ReportOptions()

    frame = assemble_report(build_state(header(), options), options)

    assert len(frame) == 0
    assert list(frame.columns) == fixed_columns()


def test_merge_unions_columns() -> None:
    a = pd.DataFrame({"X": pd.array([1.0, 2.0], dtype="Float64"), "Y": pd.array([3.0, 4.0], dtype="Float64")})
    b = pd.DataFrame({"Y": pd.array([5.0], dtype="Float64"), "Z": pd.array([6.0], dtype="Float64")})

    merged = merge_reports([a, b])

    assert list(merged.columns) == ["X", "Y", "Z"]
    assert merged["Y"].tolist() == [3.0, 4.0, 5.0]
    assert merged["Z"].isna().tolist() == [True, True, False]
    assert merged["X"].isna().tolist() == [False, False, True]
    assert str(merged["Z"].dtype) == "Float64"


def test_merge_keeps_file_major_order() -> None:
    options = ReportOptions()
    first = assemble_report(build_state(header("A") + device("1", [(1, "Vdd", 1.0)])
                                        + device("2", [(1, "Vdd", 1.1)]), options, "a.stdf"), options)
    second = assemble_report(build_state(header("B") + device("1", [(1, "Vdd", 2.0)]), options, "b.stdf"),
                             options)

    merged = merge_reports([first, second])

    assert merged["File Name"].tolist() == ["a.stdf", "a.stdf", "b.stdf"]
    assert merged["1::Vdd"].tolist() == [1.0, 1.1, 2.0]
    assert list(merged.index) == [0, 1, 2]


def test_merge_nothing() -> None:
    assert merge_reports([]).empty
