"""View state models for the catalog browser."""

from dataclasses import dataclass, replace
from enum import Enum

from .game import CompressionAlgorithm


class ViewMode(Enum):
    """Mutually exclusive presentation layouts for the catalog."""
    GRID = "grid"
    LIST = "list"
    COMPACT = "compact"


class SortKey(Enum):
    """Sort orders offered by the catalog browser."""
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    SIZE_DESC = "size_desc"
    SIZE_ASC = "size_asc"
    XPRESS4K_SIZE_ASC = "xpress4k_size_asc"
    XPRESS4K_RATIO_DESC = "xpress4k_ratio_desc"
    XPRESS8K_SIZE_ASC = "xpress8k_size_asc"
    XPRESS8K_RATIO_DESC = "xpress8k_ratio_desc"
    XPRESS16K_SIZE_ASC = "xpress16k_size_asc"
    XPRESS16K_RATIO_DESC = "xpress16k_ratio_desc"
    LZX_SIZE_ASC = "lzx_size_asc"
    LZX_RATIO_DESC = "lzx_ratio_desc"

    @property
    def algorithm(self) -> CompressionAlgorithm | None:
        """Algorithm compared by this key, None for name and size keys."""
        slug = self.value.split("_", 1)[0]
        for algorithm in CompressionAlgorithm:
            if algorithm.slug == slug:
                return algorithm
        return None

    @property
    def label(self) -> str:
        """Label shown in the sort selector."""
        algorithm = self.algorithm
        if algorithm is None:
            return _BASIC_SORT_LABELS[self]
        if self.value.endswith("_size_asc"):
            return f"{algorithm.label}: Smallest size"
        return f"{algorithm.label}: Best savings"


_BASIC_SORT_LABELS: dict[SortKey, str] = {
    SortKey.NAME_ASC: "Name (A-Z)",
    SortKey.NAME_DESC: "Name (Z-A)",
    SortKey.SIZE_DESC: "Size (Largest)",
    SortKey.SIZE_ASC: "Size (Smallest)",
}


@dataclass(frozen=True)
class ViewState:
    """Search, sort, pagination and layout selection for the catalog view.

    The sort key is kept as a plain string so that values coming from outside
    (command line, stale settings) survive unchanged even when unrecognised.
    """
    search: str = ""
    sort_key: str = SortKey.NAME_ASC.value
    page_size: int = 24
    page: int = 1
    view_mode: ViewMode = ViewMode.GRID

    def with_changes(self, **changes: object) -> "ViewState":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)  # type: ignore[arg-type]
