"""
Typed STDF V4 records consumed by the parametric report.

Only the record kinds the report needs are modelled; the decoder never
produces anything else. Field names follow the STDF V4 field names,
lower-cased.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class MIR:
    """Master Information Record (run header)"""
    setup_t: int = 0
    start_t: int = 0
    stat_num: int = 0
    mode_cod: str = ""
    lot_id: str = ""
    part_typ: str = ""
    node_nam: str = ""
    tstr_typ: str = ""
    job_nam: str = ""
    job_rev: str = ""
    oper_nam: str = ""
    exec_ver: str = ""
    test_cod: str = ""
    tst_temp: str = ""
    pkg_typ: str = ""
    facil_id: str = ""
    proc_id: str = ""
    spec_nam: str = ""
    spec_ver: str = ""
    flow_id: str = ""
    dsgn_rev: str = ""
    serl_num: str = ""


@dataclass(frozen=True)
class SDR:
    """Site Description Record (handler / hardware setup)"""
    head_num: int = 1
    site_grp: int = 0
    hand_typ: str = ""
    hand_id: str = ""
    load_id: str = ""
    cont_id: str = ""
    dib_typ: str = ""
    dib_id: str = ""


@dataclass(frozen=True)
class HBR:
    """Hardware Bin Record"""
    hbin_num: int
    hbin_nam: str = ""
    head_num: int = 255
    site_num: int = 0


@dataclass(frozen=True)
class SBR:
    """Software Bin Record"""
    sbin_num: int
    sbin_nam: str = ""
    head_num: int = 255
    site_num: int = 0


@dataclass(frozen=True)
class PIR:
    """Part Information Record"""
    head_num: int = 1
    site_num: int = 1


@dataclass(frozen=True)
class PTR:
    """Parametric Test Record"""
    test_num: int
    result: float
    head_num: int = 1
    site_num: int = 1
    test_txt: str = ""
    test_flg: int = 0
    # None means the record carried no OPT_FLAG (and so no limits)
    opt_flag: Optional[int] = None
    lo_limit: Optional[float] = None
    hi_limit: Optional[float] = None
    units: str = ""


@dataclass(frozen=True)
class FTR:
    """Functional Test Record"""
    test_num: int
    test_flg: int = 0
    head_num: int = 1
    site_num: int = 1
    test_txt: str = ""


@dataclass(frozen=True)
class PRR:
    """Part Results Record, closes one device"""
    head_num: int = 1
    site_num: int = 1
    part_id: str = ""
    part_txt: str = ""
    hard_bin: int = 0
    soft_bin: int = 0
    part_flg: int = 0


Record = Union[MIR, SDR, HBR, SBR, PIR, PTR, FTR, PRR]
