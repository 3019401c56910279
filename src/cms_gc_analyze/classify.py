"""Map grammar trees to log types and flatten them into GcEvent records."""

from __future__ import annotations

from .errors import UnknownEventTypeError
from .grammar import CONCURRENT_TYPE_PREFIX, GcEventNode
from .models import GcEvent, LogType

# A young collection escalated into a full CMS collection (promotion failure or
# concurrent mode failure) logs "[CMS ...]" right after "[ParNew ...]".
ESCALATED_YOUNG_GC: tuple[str, ...] = ("ParNew", "CMS")
WEAK_REFS_PROCESSING = "weak refs processing"


def _contains_sublist(items: list[str], sublist: tuple[str, ...]) -> bool:
    width = len(sublist)
    return any(tuple(items[i : i + width]) == sublist for i in range(len(items) - width + 1))


def classify_event(node: GcEventNode) -> LogType:
    """Return the log type of a root node.

    A "GC" pause is one of: CMS initial mark, CMS remark, ParNew (minor GC), or
    ParNew that ended up as a full GC.

    Raises:
        UnknownEventTypeError: the node type is outside the classified set.
    """
    if node.type.startswith(CONCURRENT_TYPE_PREFIX):
        return "CMS_CONCURRENT"
    if node.type == "Full GC":
        return "FULL_GC"
    if node.type == "GC":
        if node.detail == "CMS Initial Mark":
            return "CMS_INIT_MARK"
        if node.detail == "CMS Final Remark":
            return "CMS_FINAL_REMARK"
        child_types = [child.type for child in node.children]
        if _contains_sublist(child_types, ESCALATED_YOUNG_GC):
            return "FULL_GC"
        return "MINOR_GC"
    raise UnknownEventTypeError(node.type, node.detail)


def build_event(node: GcEventNode, thread: int) -> GcEvent:
    """Flatten a root node into a GcEvent; absent numbers default to zero."""
    log_type = classify_event(node)

    ref_time: float | None = None
    if log_type == "CMS_FINAL_REMARK":
        weak_refs = next(
            (n for n in node.iter_preorder() if n.type == WEAK_REFS_PROCESSING),
            None,
        )
        if weak_refs is not None:
            ref_time = weak_refs.elapsed_time or 0.0

    return GcEvent(
        thread=thread,
        timestamp=node.timestamp or 0,
        log_type=log_type,
        pause_time=node.elapsed_time or 0.0,
        user_time=node.user or 0.0,
        sys_time=node.sys or 0.0,
        real_time=node.real or 0.0,
        cms_cpu_time=node.cms_cpu_time or 0.0,
        cms_wall_time=node.cms_wall_time or 0.0,
        ref_time=ref_time,
        type_detail="; ".join(n.type_and_detail() for n in node.iter_preorder()),
    )
