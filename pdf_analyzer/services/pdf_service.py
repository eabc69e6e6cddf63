"""PDF text extraction.

Reads a saved upload with PyPDF2, walks the requested page range and returns
cleaned text plus its word count. The source file is always removed
afterwards, whether extraction worked or not.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Tuple

import PyPDF2

from pdf_analyzer.errors import ExtractionFailure
from pdf_analyzer.services.text_service import clean_text, count_words

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


@dataclass
class ExtractionResult:
    text: str
    word_count: int
    total_pages: int
    start_page: int
    end_page: int


def page_range(total_pages: int, skip_first: int, skip_last: int) -> Tuple[int, int]:
    """Return the 1-indexed inclusive (start, end) pages left after skipping."""
    start = min(skip_first + 1, total_pages)
    end = max(1, total_pages - skip_last)
    return start, end


def _discard(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        logger.error("Could not delete temporary PDF %s: %s", path, e)


def extract_pdf_text(path: str, skip_first: int = 1, skip_last: int = 0) -> ExtractionResult:
    if not os.path.exists(path):
        raise ExtractionFailure(f"File not found: {path}")

    try:
        if skip_first < 0 or skip_last < 0:
            raise ExtractionFailure("Page skip counts must be non-negative")

        with open(path, "rb") as f:
            reader = PyPDF2.PdfReader(f)
            total_pages = len(reader.pages)
            logger.info("Processing PDF %s (%d pages)", os.path.basename(path), total_pages)

            if skip_first + skip_last >= total_pages:
                raise ExtractionFailure("Cannot skip more pages than the document contains")

            start, end = page_range(total_pages, skip_first, skip_last)
            logger.info("Extracting pages %d to %d", start, end)

            parts: List[str] = []
            for number in range(start, end + 1):
                page_text = reader.pages[number - 1].extract_text() or ""
                logger.debug("Page %d: %d characters", number, len(page_text))
                parts.append(page_text)
    except ExtractionFailure:
        raise
    except Exception as e:
        raise ExtractionFailure(f"Could not read PDF: {type(e).__name__}: {e}") from e
    finally:
        _discard(path)

    text = clean_text(PAGE_SEPARATOR.join(parts))
    word_count = count_words(text)
    logger.info("Extracted %d characters, %d words", len(text), word_count)

    return ExtractionResult(
        text=text,
        word_count=word_count,
        total_pages=total_pages,
        start_page=start,
        end_page=end,
    )
