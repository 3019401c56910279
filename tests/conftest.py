from collections.abc import Callable

import pytest

from cms_gc_analyze.models import GcEvent, LogType
from cms_gc_analyze.parser import CmsLogParser

MINOR_GC_LINE = (
    "126.426: [GC (Allocation Failure) 126.426: [ParNew: 30720K-&gt;3392K(30720K), 0.0128764 secs] "
    "83156K-&gt;58798K(99008K), 0.0131301 secs] [Times: user=0.02 sys=0.00, real=0.01 secs]"
)

FULL_GC_SYSTEM_LINE = (
    "111.569: [Full GC (System.gc()) 111.569: [CMS: 49837K-&gt;38462K(68288K), 0.1817762 secs] "
    "65053K-&gt;38462K(99008K), [Metaspace: 60946K-&gt;60946K(1105920K)], 0.1819922 secs] "
    "[Times: user=0.18 sys=0.00, real=0.18 secs]"
)

INITIAL_MARK_LINE = (
    "127.942: [GC (CMS Initial Mark) [1 CMS-initial-mark: 51589K(68288K)] 55338K(99008K), "
    "0.0025420 secs] [Times: user=0.01 sys=0.00, real=0.00 secs]"
)

REMARK_LINE = (
    "127.794: [GC (CMS Final Remark) [YG occupancy: 19543 K (30720 K)]127.795: "
    "[Rescan (parallel) , 0.0081128 secs]127.803: [weak refs processing, 0.0015528 secs]"
    "127.804: [class unloading, 0.0164919 secs]127.821: [scrub symbol table, 0.0126534 secs]"
    "127.834: [scrub string table, 0.0010522 secs][1 CMS-remark: 58240K(68288K)] "
    "77784K(99008K), 0.0402029 secs] [Times: user=0.06 sys=0.01, real=0.04 secs]"
)

# A ParNew escalated into a CMS collection, cut at "[CMS" by the concurrent thread.
ESCALATED_HEAD = (
    "126.743: [GC (Allocation Failure) 126.743: [ParNew: 30719K-&gt;30719K(30720K), "
    "0.0000574 secs]126.743: [CMS"
)
ESCALATED_TAIL = (
    " (concurrent mode failure): 66466K-&gt;45817K(68288K), 0.2277434 secs] "
    "97186K-&gt;45817K(99008K), [Metaspace: 60953K-&gt;60953K(1105920K)], 0.2280550 secs] "
    "[Times: user=0.23 sys=0.00, real=0.22 secs]"
)

CONCURRENT_MARK_LINE = (
    "126.757: [CMS-concurrent-mark: 0.304/0.377 secs] [Times: user=1.08 sys=0.13, real=0.38 secs]"
)

SAMPLE_LOG = "\n".join(
    [
        "<writer thread='11779'/>",
        MINOR_GC_LINE,
        INITIAL_MARK_LINE,
        "<writer thread='11267'/>",
        "127.945: [CMS-concurrent-mark-start]",
        CONCURRENT_MARK_LINE,
        "<writer thread='11779'/>",
        REMARK_LINE,
        ESCALATED_HEAD,
        "<writer thread='11267'/>",
        "127.835: [CMS-concurrent-sweep-start]",
        "<writer thread='11779'/>",
        ESCALATED_TAIL,
        FULL_GC_SYSTEM_LINE,
        "</tty>",
    ]
)


@pytest.fixture
def parser() -> CmsLogParser:
    return CmsLogParser()


@pytest.fixture
def sample_log_text() -> str:
    return SAMPLE_LOG


@pytest.fixture
def sample_log_file(tmp_path):
    path = tmp_path / "hotspot.log"
    path.write_text(SAMPLE_LOG + "\n", encoding="utf-8")
    return path


@pytest.fixture
def make_event() -> Callable[..., GcEvent]:
    def _make(log_type: LogType, pause_time: float = 0.0, **fields) -> GcEvent:
        return GcEvent(log_type=log_type, pause_time=pause_time, **fields)

    return _make
