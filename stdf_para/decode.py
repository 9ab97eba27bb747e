"""
Decode Source: turns an STDF file into the typed records of stdf_para.records.

Uses the Semi-ATE STDF package to read the binary file. Only the record
kinds the report consumes are converted; everything else is skipped.
Any error raised by the reader propagates to the caller (the file worker),
which ends that file's stream.
"""

import logging
from typing import Callable, Iterable, Iterator, Optional

from Semi_ATE.STDF import records_from_file

from .records import FTR, HBR, MIR, PIR, PRR, PTR, SBR, SDR, Record

logger = logging.getLogger(__name__)

DecodeSource = Callable[[str], Iterable[Record]]


def flag_byte(value) -> Optional[int]:
    """Normalise a B*1 field to an int in 0..255.

    The reader hands back a list of '0'/'1' digits, most significant bit
    first. Ints, bytes and plain digit strings are accepted as well.
    None and empty values come back as None.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value & 0xFF
    if isinstance(value, (bytes, bytearray)):
        return value[0] if value else None
    if isinstance(value, str):
        value = value.strip()
        return int(value, 2) & 0xFF if value else None
    bits = list(value)
    if not bits:
        return None
    return int("".join(str(int(bit)) for bit in bits[:8]), 2)


def _value(rec, field, default=None):
    # get_value() substitutes the field's "missing" default for fields the
    # record never carried, so look at the stored value first
    fields = getattr(rec, "fields", None)
    if isinstance(fields, dict) and isinstance(fields.get(field), dict):
        value = fields[field].get("Value")
        return default if value is None else value
    try:
        value = rec.get_value(field)
    except (KeyError, AttributeError):
        return default
    return default if value is None else value


def _text(rec, field) -> str:
    value = _value(rec, field, "")
    return value if isinstance(value, str) else str(value)


def _optional_float(rec, field) -> Optional[float]:
    value = _value(rec, field)
    return None if value is None else float(value)


def _convert_mir(rec) -> MIR:
    return MIR(
        setup_t=int(_value(rec, "SETUP_T", 0)),
        start_t=int(_value(rec, "START_T", 0)),
        stat_num=int(_value(rec, "STAT_NUM", 0)),
        mode_cod=_text(rec, "MODE_COD"),
        lot_id=_text(rec, "LOT_ID"),
        part_typ=_text(rec, "PART_TYP"),
        node_nam=_text(rec, "NODE_NAM"),
        tstr_typ=_text(rec, "TSTR_TYP"),
        job_nam=_text(rec, "JOB_NAM"),
        job_rev=_text(rec, "JOB_REV"),
        oper_nam=_text(rec, "OPER_NAM"),
        exec_ver=_text(rec, "EXEC_VER"),
        test_cod=_text(rec, "TEST_COD"),
        tst_temp=_text(rec, "TST_TEMP"),
        pkg_typ=_text(rec, "PKG_TYP"),
        facil_id=_text(rec, "FACIL_ID"),
        proc_id=_text(rec, "PROC_ID"),
        spec_nam=_text(rec, "SPEC_NAM"),
        spec_ver=_text(rec, "SPEC_VER"),
        flow_id=_text(rec, "FLOW_ID"),
        dsgn_rev=_text(rec, "DSGN_REV"),
        serl_num=_text(rec, "SERL_NUM"),
    )


def _convert_sdr(rec) -> SDR:
    return SDR(
        head_num=int(_value(rec, "HEAD_NUM", 1)),
        site_grp=int(_value(rec, "SITE_GRP", 0)),
        hand_typ=_text(rec, "HAND_TYP"),
        hand_id=_text(rec, "HAND_ID"),
        load_id=_text(rec, "LOAD_ID"),
        cont_id=_text(rec, "CONT_ID"),
        dib_typ=_text(rec, "DIB_TYP"),
        dib_id=_text(rec, "DIB_ID"),
    )


def _convert_hbr(rec) -> HBR:
    return HBR(
        hbin_num=int(_value(rec, "HBIN_NUM", 0)),
        hbin_nam=_text(rec, "HBIN_NAM"),
        head_num=int(_value(rec, "HEAD_NUM", 255)),
        site_num=int(_value(rec, "SITE_NUM", 0)),
    )


def _convert_sbr(rec) -> SBR:
    return SBR(
        sbin_num=int(_value(rec, "SBIN_NUM", 0)),
        sbin_nam=_text(rec, "SBIN_NAM"),
        head_num=int(_value(rec, "HEAD_NUM", 255)),
        site_num=int(_value(rec, "SITE_NUM", 0)),
    )


def _convert_pir(rec) -> PIR:
    return PIR(head_num=int(_value(rec, "HEAD_NUM", 1)), site_num=int(_value(rec, "SITE_NUM", 1)))


def _convert_ptr(rec) -> PTR:
    return PTR(
        test_num=int(_value(rec, "TEST_NUM", 0)),
        result=float(_value(rec, "RESULT", 0.0)),
        head_num=int(_value(rec, "HEAD_NUM", 1)),
        site_num=int(_value(rec, "SITE_NUM", 1)),
        test_txt=_text(rec, "TEST_TXT"),
        test_flg=flag_byte(_value(rec, "TEST_FLG")) or 0,
        opt_flag=flag_byte(_value(rec, "OPT_FLAG")),
        lo_limit=_optional_float(rec, "LO_LIMIT"),
        hi_limit=_optional_float(rec, "HI_LIMIT"),
        units=_text(rec, "UNITS"),
    )


def _convert_ftr(rec) -> FTR:
    return FTR(
        test_num=int(_value(rec, "TEST_NUM", 0)),
        test_flg=flag_byte(_value(rec, "TEST_FLG")) or 0,
        head_num=int(_value(rec, "HEAD_NUM", 1)),
        site_num=int(_value(rec, "SITE_NUM", 1)),
        test_txt=_text(rec, "TEST_TXT"),
    )


def _convert_prr(rec) -> PRR:
    return PRR(
        head_num=int(_value(rec, "HEAD_NUM", 1)),
        site_num=int(_value(rec, "SITE_NUM", 1)),
        part_id=_text(rec, "PART_ID"),
        part_txt=_text(rec, "PART_TXT"),
        hard_bin=int(_value(rec, "HARD_BIN", 0)),
        soft_bin=int(_value(rec, "SOFT_BIN", 0)),
        part_flg=flag_byte(_value(rec, "PART_FLG")) or 0,
    )


CONVERTERS = {
    "MIR": _convert_mir,
    "SDR": _convert_sdr,
    "HBR": _convert_hbr,
    "SBR": _convert_sbr,
    "PIR": _convert_pir,
    "PTR": _convert_ptr,
    "FTR": _convert_ftr,
    "PRR": _convert_prr,
}


def convert_record(rec) -> Optional[Record]:
    """Convert one Semi-ATE record object, or return None for kinds we skip"""
    converter = CONVERTERS.get(getattr(rec, "id", None))
    if converter is None:
        return None
    return converter(rec)


def read_stdf(path: str) -> Iterator[Record]:
    """Default decode source: yield the consumed records of one STDF file in file order"""
    logger.debug("Decoding %s", path)
    for rec in records_from_file(path):
        converted = convert_record(rec)
        if converted is not None:
            yield converted
