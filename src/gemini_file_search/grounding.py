"""Helpers for reading generateContent responses grounded on File Search."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def _first_candidate(response: dict[str, Any]) -> dict[str, Any]:
    candidates = response.get("candidates") or []
    if not candidates:
        return {}
    return candidates[0] or {}


def extract_text(response: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    content = _first_candidate(response).get("content") or {}
    texts = [
        part["text"]
        for part in content.get("parts") or []
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts).strip()


def extract_grounding_chunks(response: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Retrieve the document chunks the model grounded its answer on.

    Args:
        response: Raw generateContent JSON response

    Returns:
        List of dicts containing:
            - content: The retrieved text chunk
            - title: Title of the source document (its display name)
            - store: File Search store the chunk came from, if reported
            - reference_count: Number of times the chunk was cited in groundingSupports

    Example:
        >>> response = client.generate_content("Who was Newton?", [store.name])
        >>> for chunk in extract_grounding_chunks(response):
        ...     print(f"{chunk['title']}: referenced {chunk['reference_count']} times")
    """
    grounding = _first_candidate(response).get("groundingMetadata") or {}

    # Count references for each chunk from groundingSupports
    reference_counts: dict[int, int] = {}
    for support in grounding.get("groundingSupports") or []:
        for idx in support.get("groundingChunkIndices") or []:
            reference_counts[idx] = reference_counts.get(idx, 0) + 1

    chunks = []
    for idx, chunk in enumerate(grounding.get("groundingChunks") or []):
        context = chunk.get("retrievedContext")
        if not context:
            continue
        chunks.append(
            {
                "content": context.get("text", ""),
                "title": context.get("title", ""),
                "store": context.get("fileSearchStore"),
                "reference_count": reference_counts.get(idx, 0),
            }
        )

    logger.debug(f"Extracted {len(chunks)} grounding chunks")
    return chunks
