import pytest

from cms_gc_analyze.classify import build_event, classify_event
from cms_gc_analyze.errors import UnknownEventTypeError
from cms_gc_analyze.grammar import GRAMMAR_TYPES, CmsGcLogGrammar, GcEventNode

from .conftest import ESCALATED_HEAD, ESCALATED_TAIL, REMARK_LINE


def node(type_, detail=None, children=(), **fields):
    return GcEventNode(type=type_, detail=detail, children=list(children), **fields)


@pytest.mark.parametrize(
    ("root", "expected"),
    [
        (node("CMS-concurrent-mark-start"), "CMS_CONCURRENT"),
        (node("CMS-concurrent-some-future-phase"), "CMS_CONCURRENT"),
        (node("Full GC", "Allocation Failure", [node("CMS")]), "FULL_GC"),
        (node("GC", "CMS Initial Mark", [node("1 CMS-initial-mark")]), "CMS_INIT_MARK"),
        (node("GC", "CMS Final Remark", [node("YG occupancy")]), "CMS_FINAL_REMARK"),
        (node("GC", "Allocation Failure", [node("ParNew")]), "MINOR_GC"),
        (node("GC", "Allocation Failure", [node("ParNew"), node("CMS")]), "FULL_GC"),
        (
            node("GC", "Allocation Failure", [node("ParNew"), node("CMS"), node("Metaspace")]),
            "FULL_GC",
        ),
        # CMS must directly follow ParNew
        (node("GC", "Allocation Failure", [node("CMS"), node("ParNew")]), "MINOR_GC"),
        (
            node("GC", "Allocation Failure", [node("ParNew"), node("Metaspace"), node("CMS")]),
            "MINOR_GC",
        ),
    ],
)
def test_classify_event(root, expected):
    assert classify_event(root) == expected


def test_escalated_young_gc_line_is_full_gc():
    root = CmsGcLogGrammar().parse(ESCALATED_HEAD + ESCALATED_TAIL)

    assert classify_event(root) == "FULL_GC"


@pytest.mark.parametrize("type_", [t for t in GRAMMAR_TYPES if t not in ("GC", "Full GC")])
def test_sub_phase_types_are_not_root_events(type_):
    with pytest.raises(UnknownEventTypeError) as excinfo:
        classify_event(node(type_, "some detail"))

    assert excinfo.value.event_type == type_
    assert excinfo.value.detail == "some detail"


def test_build_event_defaults_missing_numbers_to_zero():
    event = build_event(node("GC", "Allocation Failure", [node("ParNew")]), thread=3)

    assert event.thread == 3
    assert event.timestamp == 0
    assert event.log_type == "MINOR_GC"
    assert event.pause_time == 0.0
    assert (event.user_time, event.sys_time, event.real_time) == (0.0, 0.0, 0.0)
    assert (event.cms_cpu_time, event.cms_wall_time) == (0.0, 0.0)
    assert event.ref_time is None
    assert event.type_detail == "GC (Allocation Failure); ParNew"


def test_build_event_type_detail_is_preorder():
    root = node(
        "GC",
        "Allocation Failure",
        [node("ParNew", children=[node("Metaspace")]), node("CMS", "concurrent mode failure")],
    )

    event = build_event(root, thread=1)

    assert event.type_detail == (
        "GC (Allocation Failure); ParNew; Metaspace; CMS (concurrent mode failure)"
    )


def test_build_event_reference_processing_time():
    event = build_event(CmsGcLogGrammar().parse(REMARK_LINE), thread=11779)

    assert event.log_type == "CMS_FINAL_REMARK"
    assert event.ref_time == pytest.approx(0.0015528)


def test_remark_without_weak_refs_leaves_ref_time_unset():
    root = node("GC", "CMS Final Remark", [node("1 CMS-remark")], elapsed_time=0.04)

    event = build_event(root, thread=1)

    assert event.ref_time is None
    assert event.pause_time == 0.04


def test_ref_time_only_for_final_remark():
    root = node(
        "GC",
        "Allocation Failure",
        [node("ParNew"), node("weak refs processing", elapsed_time=0.5)],
    )

    assert build_event(root, thread=1).ref_time is None


def test_built_event_is_immutable():
    event = build_event(node("Full GC"), thread=1)

    with pytest.raises(Exception):
        event.pause_time = 1.0
