import json
from typing import Iterable, List, Optional

from audio_regions.config.settings import settings
from audio_regions.domain.region import RegionParams, RegionSpan, round_to_five_decimals


def _params_from_dict(raw: dict) -> RegionParams:
    return RegionParams(
        silence_threshold=raw.get("silenceThreshold"),
        time_threshold=raw.get("timeThreshold"),
        seg_len_threshold=raw.get("segLenThreshold"),
    )


def params_to_dict(params: RegionParams) -> dict:
    return {
        "silenceThreshold": params.silence_threshold,
        "timeThreshold": params.time_threshold,
        "segLenThreshold": params.seg_len_threshold,
    }


def parse_region_params(text: Optional[str], default: Optional[RegionParams]) -> Optional[RegionParams]:
    """Stored params win only when they carry a timeThreshold."""
    if not text:
        return default
    doc = json.loads(text)
    params = doc.get("params") if isinstance(doc, dict) else None
    if params and params.get("timeThreshold"):
        return _params_from_dict(params)
    return default


def parse_regions(text: Optional[str]) -> List[RegionSpan]:
    """
    Region list from a region document, sorted by start.
    The regions value may itself be a JSON-encoded string.
    """
    if not text:
        return []
    doc = json.loads(text)
    raw = doc.get("regions") if isinstance(doc, dict) else None
    if not raw:
        return []
    if isinstance(raw, str):
        raw = json.loads(raw)

    spans = [
        RegionSpan(float(r["start"]), float(r["end"]), r.get("label") or "")
        for r in raw
        if r.get("start") is not None and r.get("end") is not None
    ]
    spans.sort(key=lambda s: s.start)
    return spans


def dump_regions(params: Optional[RegionParams], spans: Iterable[RegionSpan]) -> str:
    return json.dumps(
        {
            "params": params_to_dict(params or settings.default_region_params()),
            "regions": [
                {
                    "start": round_to_five_decimals(s.start),
                    "end": round_to_five_decimals(s.end),
                    "label": s.label or "",
                }
                for s in spans
            ],
        }
    )
