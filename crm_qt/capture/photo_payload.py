"""
Helpers the photo capture flow uses to turn a captured (optionally
marked-up) image into the upload payload for a lead.

Uploading itself is the caller's job; this module only shapes the data.
"""
from __future__ import annotations
import base64
import math
import re
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

AVAILABLE_TAGS: List[str] = [
    "Back Side", "Before and After", "Bottom", "Clock In", "Clock Out", "Document", "East Side",
    "Finished", "Front Side", "Left Side", "New", "North Side", "Old", "Receipt", "Right Side",
    "South Side", "Start", "Top", "West Side",
]


@dataclass(frozen=True)
class PhotoPayload:
    name: str
    type: str
    size: int
    base64_data: str

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return {"name": self.name, "type": self.type, "size": self.size, "base64Data": self.base64_data}


def toggle_tag(selected: Sequence[str], tag: str) -> List[str]:
    if tag in selected:
        return [t for t in selected if t != tag]
    return [*selected, tag]


def merge_description(description: str, tags: Sequence[str]) -> str:
    """'Ridge damage' + ['Top', 'Old'] -> 'Ridge damage [Top, Old]'."""
    description = description or ""
    if not tags:
        return description
    prefix = f"{description} " if description else ""
    return f"{prefix}[{', '.join(tags)}]"


def build_photo_filename(last_name: Optional[str], counter: Optional[int] = None) -> str:
    name = re.sub(r"\s+", "_", (last_name or "").strip()) or "photo"
    if counter is None:
        counter = int(time.time()) % 100000
    return f"{name}-image-{counter}.jpg"


def strip_data_url(data: str) -> str:
    # "data:image/jpeg;base64,AAAA" -> "AAAA"
    return data.split(",", 1)[1] if "," in data else data


def build_photo_payload(data: str, last_name: Optional[str] = None, *,
                        counter: Optional[int] = None, mime: str = "image/jpeg") -> PhotoPayload:
    """
    Build the upload payload from a data URL or bare base64 string.

    Raises:
        ValueError: empty or non-base64 image data
    """
    b64 = strip_data_url(data or "").strip()
    if not b64:
        raise ValueError("no image data")
    try:
        base64.b64decode(b64, validate=True)
    except ValueError as e:
        raise ValueError(f"image data is not valid base64: {e}") from e
    return PhotoPayload(
        name=build_photo_filename(last_name, counter),
        type=mime,
        size=math.ceil(len(b64) * 3 / 4),
        base64_data=b64,
    )
