from __future__ import annotations

"""
Structured extraction of an imported medical document.

Design intent:
- Feature detection first; everything else depends on its type and flags.
- Follow-up extractions run on the text only, except imaging which needs the image.
- Output keeps the camelCase keys the client stores in documents.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from medrecord.ai.gpt import Content, fetch_gpt, image_content, text_content
from medrecord.ai.providers import criteria_from_document, select_provider
from medrecord.ai.schema import load_schema, update_language
from medrecord.labs.properties import load_properties

logger = logging.getLogger(__name__)


class NotMedicalInputError(RuntimeError):
    pass


def content_for(text: Optional[str], images: Optional[Sequence[str]]) -> List[Content]:
    content: List[Content] = []
    if text:
        content.append(text_content(text))
    if images:
        # Only the first image is sent; multi-page input goes through assess() first.
        content.append(image_content(images[0]))
    return content


def localized_schemas(language: str) -> Dict[str, Dict[str, Any]]:
    schemas = {
        name: update_language(load_schema(name), language)
        for name in (
            "feature_detection",
            "report",
            "laboratory",
            "dental",
            "imaging",
            "prescription",
            "immunization",
        )
    }
    signal = schemas["laboratory"]["parameters"]["properties"]["signals"]["items"]["properties"]["signal"]
    signal["enum"] = [prop.key for prop in load_properties()]
    return schemas


def _merge_tags(tags: Sequence[str], body_parts: Sequence[Dict[str, Any]]) -> List[str]:
    merged: List[str] = []
    for tag in list(tags) + [part.get("identification") for part in body_parts]:
        if tag and tag not in merged:
            merged.append(tag)
    return merged


def _parse_number(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return None


def normalize_signals(signals: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for raw in signals:
        item = dict(raw)
        if item.get("signal"):
            item["signal"] = str(item["signal"]).lower()
        if item.get("valueType") == "number":
            item["value"] = _parse_number(item.get("value"))
        item.pop("valueType", None)
        out.append(item)
    return out


def analyze_report(
    text: Optional[str],
    images: Optional[Sequence[str]],
    client: Any,
    *,
    model: str,
    language: str = "English",
    preferred_provider: Optional[str] = None,
) -> Dict[str, Any]:
    schemas = localized_schemas(language)
    token_usage: Dict[str, int] = {"total": 0}
    text_only = [text_content(text or "")]

    def evaluate(content: Sequence[Content], name: str) -> Dict[str, Any]:
        return fetch_gpt(content, schemas[name], token_usage, client=client, model=model)

    data = evaluate(content_for(text, images), "feature_detection")
    data["text"] = text
    if not data.get("isMedical"):
        raise NotMedicalInputError("Not a medical input")

    if data.get("hasPrescription"):
        prescriptions = evaluate(text_only, "prescription").get("prescriptions") or []
        if prescriptions:
            data["prescriptions"] = prescriptions

    if data.get("hasImmunization"):
        immunizations = evaluate(text_only, "immunization").get("immunizations") or []
        if immunizations:
            data["immunizations"] = immunizations

    doc_type = data.get("type")
    report: Dict[str, Any] = {}
    if doc_type == "report":
        report = evaluate(text_only, "report")
        if data.get("hasLabOrVitals"):
            report["signals"] = evaluate(text_only, "laboratory").get("signals") or []
    elif doc_type == "laboratory":
        report = evaluate(text_only, "laboratory")
        report["category"] = "laboratory"
    elif doc_type == "dental":
        report = evaluate(text_only, "dental")
    elif doc_type in ("imaging", "dicom"):
        report = evaluate(content_for(text, images), "imaging")
        report["category"] = "imaging"

    if report.get("bodyParts"):
        data["tags"] = _merge_tags(data.get("tags") or [], report["bodyParts"])
    if report.get("signals"):
        report["signals"] = normalize_signals(report["signals"])
    data["report"] = report

    selection = select_provider(criteria_from_document(doc_type, text, images, preferred_provider, language))
    data["provider"] = selection.to_dict()
    data["tokenUsage"] = token_usage
    logger.info("import analyzed type=%s tokens=%d", doc_type, token_usage["total"])
    return data
