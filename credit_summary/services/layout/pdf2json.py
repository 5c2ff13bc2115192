"""Usage: adapt pdf2json output (Pages[].Texts[]) into positioned tokens."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import unquote

from credit_summary.schemas.layout import LayoutPage, LayoutResult, PositionedToken
from credit_summary.services.layout.base import BaseLayoutClient

logger = logging.getLogger(__name__)


class Pdf2JsonLayoutClient(BaseLayoutClient):
    """Reads the JSON document produced by pdf2json, given as bytes or a file path."""

    async def extract(
        self,
        source: str | bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> LayoutResult:
        if isinstance(source, bytes):
            payload = json.loads(source.decode("utf-8"))
        else:
            loop = asyncio.get_running_loop()
            raw = await loop.run_in_executor(None, Path(source).read_text, "utf-8")
            payload = json.loads(raw)
        if not isinstance(payload, Mapping):
            raise ValueError(f"pdf2json payload must be an object, got {type(payload).__name__}")
        result = layout_from_pdf2json(payload)
        logger.debug(
            "pdf2json layout parsed file=%s pages=%d tokens=%d",
            filename,
            len(result.pages),
            sum(len(page.tokens) for page in result.pages),
        )
        return result


def layout_from_pdf2json(payload: Mapping[str, Any]) -> LayoutResult:
    pages_data = payload.get("Pages")
    if pages_data is None:
        pages_data = (payload.get("formImage") or {}).get("Pages")

    pages: list[LayoutPage] = []
    for index, page_data in enumerate(pages_data or [], start=1):
        tokens: list[PositionedToken] = []
        for text_item in page_data.get("Texts") or []:
            text = "".join(decode_text_run(run.get("T")) for run in text_item.get("R") or [])
            if not text.strip():
                continue
            tokens.append(
                PositionedToken(
                    x=float(text_item.get("x", 0.0)),
                    y=float(text_item.get("y", 0.0)),
                    text=text,
                )
            )
        pages.append(LayoutPage(page=index, tokens=tokens))
    return LayoutResult(pages=pages)


def decode_text_run(raw: str | None) -> str:
    """URL-decode a pdf2json text run, keeping the raw text when it is not valid UTF-8."""

    if not raw:
        return ""
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return raw
