from __future__ import annotations

from ..domain.models import MetadataRecord
from ..domain.schemas import to_metadata_record
from ..infrastructure.llm.exceptions import NoJsonFoundError
from ..infrastructure.llm.json_parser import extract_json_object_loose, parse_json_strict


def parse_metadata_response(raw: str) -> MetadataRecord:
    """Pull the outermost {...} span out of a model reply and normalize it.

    Replies often wrap the object in prose or markdown fences, so the whole
    reply is never decoded directly.
    """
    candidate = extract_json_object_loose(raw)
    if candidate is None:
        raise NoJsonFoundError("No JSON object found in backend output.")
    return to_metadata_record(parse_json_strict(candidate))
