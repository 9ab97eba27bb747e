from stdf_para.diagnostics import DiagnosticKind, DiagnosticLog
from stdf_para.limits import HI_LIMIT_INVALID, LO_LIMIT_INVALID, NO_LIMITS, LimitTable, decode_limits
from stdf_para.records import PTR


def test_masks_select_bits_4_6_and_5_7() -> None:
    assert LO_LIMIT_INVALID == (1 << 4) | (1 << 6)
    assert HI_LIMIT_INVALID == (1 << 5) | (1 << 7)


def test_all_valid_limits() -> None:
    limits = decode_limits(0x00, 1.0, 5.0)

    assert limits.passes(3.0) == 1
    assert limits.passes(6.0) == 0
    assert limits.passes(0.5) == 0
    assert limits.passes(1.0) == 1
    assert limits.passes(5.0) == 1


def test_low_limit_invalid_skips_low_check() -> None:
    for flag in (0x10, 0x40):
        limits = decode_limits(flag, 1.0, 5.0)
        assert limits.passes(-100.0) == 1
        assert limits.passes(6.0) == 0


def test_high_limit_invalid_skips_high_check() -> None:
    for flag in (0x20, 0x80):
        limits = decode_limits(flag, 1.0, 5.0)
        assert limits.passes(1e9) == 1
        assert limits.passes(0.0) == 0


def test_missing_flag_means_no_limits() -> None:
    assert decode_limits(None, 1.0, 5.0) == NO_LIMITS
    assert NO_LIMITS.passes(-1e30) == 1


def test_valid_flag_without_value_is_not_a_limit() -> None:
    limits = decode_limits(0x00, None, 5.0)

    assert not limits.lo_valid
    assert limits.passes(-3.0) == 1


def test_first_limits_win_and_conflict_is_recorded() -> None:
    log = DiagnosticLog(0, "a.stdf")
    table = LimitTable(log)
    first = PTR(test_num=1, result=3.0, opt_flag=0, lo_limit=1.0, hi_limit=5.0)
    second = PTR(test_num=1, result=3.0, opt_flag=0, lo_limit=1.0, hi_limit=2.0)

    table.observe(first, "1::Vdd")
    table.observe(second, "1::Vdd")

    assert table.pass_fail(second, "1::Vdd") == 1
    assert len(log.of_kind(DiagnosticKind.LIMIT_CONFLICT)) == 1


def test_identical_redefinition_is_not_a_conflict() -> None:
    log = DiagnosticLog(0, "a.stdf")
    table = LimitTable(log)
    ptr = PTR(test_num=1, result=3.0, opt_flag=0, lo_limit=1.0, hi_limit=5.0)

    table.observe(ptr, "1::Vdd")
    table.observe(ptr, "1::Vdd")

    assert len(log) == 0


def test_ptr_without_flag_uses_established_limits() -> None:
    table = LimitTable(DiagnosticLog(0, "a.stdf"))
    table.observe(PTR(test_num=1, result=0.0, opt_flag=0, lo_limit=1.0, hi_limit=5.0), "1::Vdd")
    later = PTR(test_num=1, result=9.0)

    table.observe(later, "1::Vdd")

    assert table.pass_fail(later, "1::Vdd") == 0


def test_limits_are_per_site() -> None:
    table = LimitTable(DiagnosticLog(0, "a.stdf"))
    table.observe(PTR(test_num=1, result=0.0, site_num=1, opt_flag=0, lo_limit=1.0, hi_limit=5.0), "1::Vdd")

    on_other_site = PTR(test_num=1, result=9.0, site_num=2)

    assert table.pass_fail(on_other_site, "1::Vdd") == 1
    assert len(table) == 1
