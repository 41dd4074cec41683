# --- report.py ---

from models import Report, ScanAccumulator

DEFAULT_TOP_TYPES = 10
DEFAULT_TOP_FINDINGS = 20


def build_report(accumulator: ScanAccumulator,
                 top_types_limit: int = DEFAULT_TOP_TYPES,
                 top_findings_limit: int = DEFAULT_TOP_FINDINGS) -> Report:
    """
    Ranks a finished scan: file types by cumulative size and findings by size,
    both largest first and truncated to their limits.

    Sorting is stable, so equal sizes keep insertion / discovery order.
    The accumulator is only read.
    """
    if top_types_limit < 0 or top_findings_limit < 0:
        raise ValueError("Report limits must be >= 0")

    top_types = sorted(
        accumulator.type_size_totals.items(),
        key=lambda item: item[1],
        reverse=True
    )[:top_types_limit]

    top_findings = sorted(
        accumulator.candidate_findings,
        key=lambda obs: obs.size_bytes,
        reverse=True
    )[:top_findings_limit]

    return Report(
        total_size_bytes=accumulator.total_size_bytes,
        file_count=accumulator.file_count,
        top_types_by_size=top_types,
        top_findings_by_size=top_findings,
        skipped_count=len(accumulator.skipped),
    )
