import threading

import pytest

import cms_gc_analyze
from cms_gc_analyze.jobs import AnalysisStatus, InMemoryTicketer, LogAnalyzeJob
from cms_gc_analyze.models import AnalysisSettings

from .conftest import MINOR_GC_LINE


class RecordingTicketer(InMemoryTicketer):
    def __init__(self) -> None:
        super().__init__()
        self.history: list[AnalysisStatus] = []

    def set_status(self, ticket, status):
        self.history.append(status)
        super().set_status(ticket, status)


@pytest.fixture
def ticketer() -> RecordingTicketer:
    return RecordingTicketer()


def submit(ticketer, path):
    ticket = ticketer.issue_ticket()
    ticketer.set_log_file(ticket, path)
    return ticket


def test_job_completes(ticketer, sample_log_file):
    ticket = submit(ticketer, sample_log_file)

    LogAnalyzeJob(ticketer, ticket).run()

    assert ticketer.history == [AnalysisStatus.ANALYZING, AnalysisStatus.COMPLETED]
    assert ticketer.get_status(ticket) == AnalysisStatus.COMPLETED
    result = ticketer.get_result(ticket)
    assert result is not None
    assert sum(stat.count for stat in result.pauses) == 5


def test_job_uses_settings(ticketer, sample_log_file):
    ticket = submit(ticketer, sample_log_file)

    LogAnalyzeJob(ticketer, ticket, AnalysisSettings(mean_levels=[0.2])).run()

    result = ticketer.get_result(ticket)
    assert [estimate.level for estimate in result.pauses[0].means] == [0.2]


def test_missing_log_file_ends_in_error(ticketer, tmp_path, caplog):
    ticket = submit(ticketer, tmp_path / "gone.log")

    LogAnalyzeJob(ticketer, ticket).run()

    assert ticketer.history == [AnalysisStatus.ANALYZING, AnalysisStatus.ERROR]
    assert ticketer.get_result(ticket) is None
    assert f"Failed to analyze the log of ticket {ticket}" in caplog.text


def test_unclassifiable_line_ends_in_error(ticketer, tmp_path):
    path = tmp_path / "bad.log"
    path.write_text(
        f"{MINOR_GC_LINE}\n"
        "1.000: [ParNew: 30720K->3392K(30720K), 0.0128764 secs] "
        "[Times: user=0.02 sys=0.00, real=0.01 secs]\n",
        encoding="utf-8",
    )
    ticket = submit(ticketer, path)

    LogAnalyzeJob(ticketer, ticket).run()

    assert ticketer.history == [AnalysisStatus.ANALYZING, AnalysisStatus.ERROR]
    assert ticketer.get_result(ticket) is None


def test_unknown_ticket_ends_in_error(ticketer):
    LogAnalyzeJob(ticketer, 42).run()

    assert ticketer.get_status(42) == AnalysisStatus.ERROR


def test_status_defaults_to_not_ready():
    assert InMemoryTicketer().get_status(1) == AnalysisStatus.NOT_READY


def test_get_log_file_for_unknown_ticket():
    with pytest.raises(KeyError, match="ticket 7"):
        InMemoryTicketer().get_log_file(7)


def test_tickets_are_unique_across_threads():
    ticketer = InMemoryTicketer()
    issued: list[int] = []

    def issue():
        for _ in range(100):
            issued.append(ticketer.issue_ticket())

    threads = [threading.Thread(target=issue) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(issued) == list(range(1, 401))


def test_concurrent_jobs_are_independent(ticketer, sample_log_file, tmp_path):
    empty = tmp_path / "empty.log"
    empty.write_text("", encoding="utf-8")
    tickets = [submit(ticketer, sample_log_file), submit(ticketer, empty)]

    threads = [threading.Thread(target=LogAnalyzeJob(ticketer, t).run) for t in tickets]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    full, blank = (ticketer.get_result(t) for t in tickets)
    assert sum(stat.count for stat in full.pauses) == 5
    assert sum(stat.count for stat in blank.pauses) == 0


def test_job_api_is_exported_from_package():
    assert cms_gc_analyze.LogAnalyzeJob is LogAnalyzeJob
    assert cms_gc_analyze.InMemoryTicketer is InMemoryTicketer
    assert cms_gc_analyze.AnalysisStatus is AnalysisStatus
    assert {"LogAnalyzeJob", "InMemoryTicketer", "AnalysisStatus", "Ticketer"} <= set(
        cms_gc_analyze.__all__
    )
