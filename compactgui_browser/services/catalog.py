"""Transform and query stage for the game catalog.

Everything in this module is a pure function over game records: deriving
display values from the raw database, filtering by name, sorting by one of the
offered sort keys, and cutting the result into pages.
"""

import locale
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

import structlog

from compactgui_browser.models.game import (
    AlgorithmResult,
    CompressionAlgorithm,
    DerivedGameRecord,
    RawGameRecord,
)
from compactgui_browser.models.view_state import SortKey

log = structlog.stdlib.get_logger()


# Transform

def compute_savings(before_bytes: int, after_bytes: int) -> float:
    """Percentage of space saved by compression, 0 when the original size is 0."""
    if before_bytes > 0:
        return (1 - after_bytes / before_bytes) * 100
    return 0.0


def derive_record(raw: RawGameRecord) -> DerivedGameRecord:
    """Compute the original size and per-algorithm results for one game.

    Results with an unrecognised compression code are left out of the lookup.
    """
    original_size = max((r.before_bytes for r in raw.compression_results), default=0)
    original_size = max(original_size, 0)

    results: dict[CompressionAlgorithm, AlgorithmResult] = {}
    for result in raw.compression_results:
        algorithm = CompressionAlgorithm.from_code(result.comp_type)
        if algorithm is None:
            continue
        results[algorithm] = AlgorithmResult(
            algorithm=algorithm,
            before_bytes=result.before_bytes,
            after_bytes=result.after_bytes,
            savings=compute_savings(result.before_bytes, result.after_bytes),
        )

    return DerivedGameRecord(record=raw, original_size=original_size, results=results)


def derive_all(raw_records: Iterable[RawGameRecord]) -> list[DerivedGameRecord]:
    """Derive display records for a whole dataset, preserving order."""
    return [derive_record(raw) for raw in raw_records]


# Filtering and sorting

def filter_records(records: Sequence[DerivedGameRecord], search_term: str) -> list[DerivedGameRecord]:
    """Keep records whose name contains the search term, ignoring case.

    The term is matched as typed; only an empty term matches everything.
    """
    term = search_term.casefold()
    if not term:
        return list(records)
    return [r for r in records if term in r.game_name.casefold()]


def _collation_key(name: str) -> tuple[str, str]:
    # strxfrm rejects embedded NUL characters
    cleaned = name.replace("\x00", "")
    return (locale.strxfrm(cleaned.casefold()), locale.strxfrm(cleaned))


def _after_bytes_or_inf(record: DerivedGameRecord, algorithm: CompressionAlgorithm) -> float:
    result = record.result_for(algorithm)
    return result.after_bytes if result is not None else math.inf


def _savings_or_neg_inf(record: DerivedGameRecord, algorithm: CompressionAlgorithm) -> float:
    result = record.result_for(algorithm)
    return result.savings if result is not None else -math.inf


def resolve_sort_key(sort_key: SortKey | str) -> SortKey | None:
    """Map a sort key value to its enum member, None if unrecognised."""
    if isinstance(sort_key, SortKey):
        return sort_key
    try:
        return SortKey(sort_key)
    except ValueError:
        return None


def sort_records(records: Sequence[DerivedGameRecord], sort_key: SortKey | str) -> list[DerivedGameRecord]:
    """Sort records with a stable sort.

    Per-algorithm size keys put games without a result for that algorithm
    last; so do per-algorithm savings keys. An unknown key leaves the order
    unchanged.
    """
    key = resolve_sort_key(sort_key)
    if key is None:
        log.debug("Unknown sort key, keeping original order", sort_key=str(sort_key))
        return list(records)

    if key is SortKey.NAME_ASC:
        return sorted(records, key=lambda r: _collation_key(r.game_name))
    if key is SortKey.NAME_DESC:
        return sorted(records, key=lambda r: _collation_key(r.game_name), reverse=True)
    if key is SortKey.SIZE_DESC:
        return sorted(records, key=lambda r: r.original_size, reverse=True)
    if key is SortKey.SIZE_ASC:
        return sorted(records, key=lambda r: r.original_size)

    algorithm = key.algorithm
    assert algorithm is not None
    if key.value.endswith("_size_asc"):
        return sorted(records, key=lambda r: _after_bytes_or_inf(r, algorithm))
    return sorted(records, key=lambda r: _savings_or_neg_inf(r, algorithm), reverse=True)


# Pagination

@dataclass(frozen=True)
class QueryResult:
    """One page of a filtered and sorted catalog."""
    page_items: list[DerivedGameRecord]
    total_pages: int
    clamped_page: int
    total_matches: int


def count_pages(item_count: int, page_size: int) -> int:
    """Number of pages needed for the items, never less than 1."""
    page_size = max(page_size, 1)
    return max(1, math.ceil(item_count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(page, 1), max(total_pages, 1))


def paginate(records: Sequence[DerivedGameRecord], page_size: int, page: int) -> QueryResult:
    """Cut a page out of the records, clamping the requested page into range."""
    page_size = max(page_size, 1)
    total_pages = count_pages(len(records), page_size)
    current = clamp_page(page, total_pages)
    start = (current - 1) * page_size
    return QueryResult(
        page_items=list(records[start:start + page_size]),
        total_pages=total_pages,
        clamped_page=current,
        total_matches=len(records),
    )


def query(
    records: Sequence[DerivedGameRecord],
    search_term: str,
    sort_key: SortKey | str,
    page_size: int,
    page: int,
) -> QueryResult:
    """Filter, sort and paginate the catalog.

    Args:
        records: Derived records in dataset order
        search_term: Case-insensitive substring to look for in game names
        sort_key: One of the SortKey values; unknown values keep dataset order
        page_size: Number of records per page
        page: Requested 1-based page, clamped into the available range

    Returns:
        QueryResult with the visible records and the page actually shown
    """
    filtered = filter_records(records, search_term)
    ordered = sort_records(filtered, sort_key)
    result = paginate(ordered, page_size, page)
    log.debug(
        "Catalog queried",
        search=search_term,
        sort_key=str(sort_key),
        matches=result.total_matches,
        page=result.clamped_page,
        total_pages=result.total_pages,
    )
    return result


class PageControlKind(Enum):
    """Kinds of controls in the pagination bar."""
    PREV = "prev"
    PAGE = "page"
    ELLIPSIS = "ellipsis"
    NEXT = "next"


@dataclass(frozen=True)
class PageControl:
    """One element of the pagination bar."""
    kind: PageControlKind
    label: str
    page: int | None = None
    disabled: bool = False
    active: bool = False


def visible_pages(total_pages: int, current_page: int) -> list[int]:
    """First page, last page and the neighbours of the current page, ascending."""
    pages = {1, total_pages}
    pages.update(range(max(2, current_page - 1), min(total_pages - 1, current_page + 1) + 1))
    return sorted(p for p in pages if 1 <= p <= total_pages)


def pagination_controls(total_pages: int, current_page: int) -> list[PageControl]:
    """Build the pagination bar for the given position.

    The bar always contains Prev, the visible page numbers with an ellipsis
    wherever pages are skipped, and Next. Nothing is shown for a single page.
    """
    if total_pages <= 1:
        return []

    current_page = clamp_page(current_page, total_pages)
    controls = [
        PageControl(
            kind=PageControlKind.PREV,
            label="« Prev",
            page=current_page - 1,
            disabled=current_page == 1,
        )
    ]

    last_page = 0
    for page in visible_pages(total_pages, current_page):
        if page > last_page + 1:
            controls.append(PageControl(kind=PageControlKind.ELLIPSIS, label="..."))
        controls.append(
            PageControl(
                kind=PageControlKind.PAGE,
                label=str(page),
                page=page,
                active=page == current_page,
            )
        )
        last_page = page

    controls.append(
        PageControl(
            kind=PageControlKind.NEXT,
            label="Next »",
            page=current_page + 1,
            disabled=current_page == total_pages,
        )
    )
    return controls
