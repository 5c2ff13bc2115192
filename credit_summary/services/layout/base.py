from typing import Protocol, runtime_checkable

from credit_summary.schemas.layout import LayoutResult


@runtime_checkable
class BaseLayoutClient(Protocol):
    async def extract(
        self,
        source: str | bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> LayoutResult:
        """Turn a document into positioned text fragments, page by page."""
        ...
