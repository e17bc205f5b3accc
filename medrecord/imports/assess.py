from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from medrecord.ai.gpt import fetch_gpt, image_content, text_content
from medrecord.ai.schema import load_schema

logger = logging.getLogger(__name__)


def assess(
    images: Optional[Sequence[str]],
    client: Any,
    *,
    model: str,
    text: Optional[str] = None,
) -> Dict[str, Any]:
    """Split scanned pages into documents. Each image is one page, in upload order."""
    content = [image_content(image) for image in images or []]
    if text:
        content.append(text_content(text))

    token_usage: Dict[str, int] = {"total": 0}
    data = fetch_gpt(content, load_schema("assess"), token_usage, client=client, model=model)
    data.setdefault("pages", [])
    data.setdefault("documents", [])
    data["tokenUsage"] = token_usage
    logger.info(
        "import assessed pages=%d documents=%d tokens=%d",
        len(data["pages"]),
        len(data["documents"]),
        token_usage["total"],
    )
    return data
