import pytest

from stdf_para.config import ReportOptions
from stdf_para.records import HBR, MIR, PIR, PRR, PTR, SBR, SDR


class FakeDecoder:
    """Decode source backed by in-memory record lists.

    A stream may end with an exception instance, which is raised after the
    records before it have been yielded.
    """

    def __init__(self, streams):
        self.streams = streams

    def __call__(self, path):
        for item in self.streams[path]:
            if isinstance(item, BaseException):
                raise item
            yield item


def header(lot_id="LOT1", setup_t=1678886400):
    return [
        MIR(setup_t=setup_t, lot_id=lot_id, part_typ="PART", job_nam="JOB", stat_num=3, tst_temp="25"),
        SDR(hand_id="H1", hand_typ="HT", load_id="LB1", dib_typ="DT", dib_id="D1"),
    ]


def device(part_id, results, hard_bin=1, soft_bin=1, site=1):
    """PIR, one PTR per (test_num, test_txt, result), PRR"""
    records = [PIR(site_num=site)]
    for test_num, test_txt, result in results:
        records.append(PTR(test_num=test_num, test_txt=test_txt, result=result, site_num=site,
                           opt_flag=0, lo_limit=0.0, hi_limit=10.0))
    records.append(PRR(site_num=site, part_id=part_id, hard_bin=hard_bin, soft_bin=soft_bin))
    return records


def bins():
    return [HBR(hbin_num=1, hbin_nam="PASS"), SBR(sbin_num=1, sbin_nam="GOOD")]


@pytest.fixture
def options():
    return ReportOptions(files=("a.stdf",))
