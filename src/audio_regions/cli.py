import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from audio_regions.config.settings import settings
from audio_regions.domain.errors import AudioRegionsError
from audio_regions.domain.region import RegionParams
from audio_regions.services.editor_session import EditorSession
from audio_regions.services.region_serializer import parse_regions
from audio_regions.use_cases.auto_segment_regions import AutoSegmentRegions
from audio_regions.use_cases.delete_region_audio import DeleteRegionAudio
from audio_regions.use_cases.export_audio import ExportAudio
from audio_regions.use_cases.load_media import LoadMedia
from audio_regions.use_cases.save_regions import SaveRegions

logger = logging.getLogger("audio_regions")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="audio-regions",
        description="Segment and edit spoken audio by regions.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    seg = sub.add_parser("segment", help="Propose regions from silence (and verse timings).")
    seg.add_argument("audio", type=Path)
    seg.add_argument("--verses", type=Path, help="Region JSON document with verse intervals.")
    seg.add_argument("--silence-threshold", type=float, default=settings.SILENCE_THRESHOLD)
    seg.add_argument("--time-threshold", type=float, default=settings.TIME_THRESHOLD)
    seg.add_argument("--seg-len-threshold", type=float, default=settings.SEG_LEN_THRESHOLD)
    seg.add_argument("-o", "--output", type=Path, help="Write the region JSON here instead of stdout.")

    cut = sub.add_parser("delete", help="Cut [start, end) seconds out of the audio.")
    cut.add_argument("audio", type=Path)
    cut.add_argument("start", type=float)
    cut.add_argument("end", type=float)
    cut.add_argument("-o", "--output", type=Path, required=True)
    cut.add_argument("--float", dest="is_float", action="store_true", help="Write 32-bit float WAV.")

    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=settings.LOG_LEVEL.upper(),
    )
    return p


async def _segment(args: argparse.Namespace) -> str:
    verses = parse_regions(args.verses.read_text(encoding="utf-8")) if args.verses else None
    params = RegionParams(args.silence_threshold, args.time_threshold, args.seg_len_threshold)
    session = EditorSession(params=params, verses=verses)
    await LoadMedia(session).execute(args.audio.read_bytes())
    count = AutoSegmentRegions(session).execute()
    logger.info(f"{args.audio.name}: {count} regions")
    return SaveRegions(session).execute()


async def _delete(args: argparse.Namespace) -> float:
    session = EditorSession(single_region=True)
    await LoadMedia(session).execute(args.audio.read_bytes())
    region_id = session.store.set_single(args.start, args.end)
    session.transport.set_current_region(region_id)
    position = DeleteRegionAudio(session).execute()
    args.output.write_bytes(ExportAudio(session).execute(is_float=args.is_float))
    logger.info(f"Wrote {args.output} ({session.duration:.3f}s)")
    return position


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "segment":
            doc = asyncio.run(_segment(args))
            if args.output:
                args.output.write_text(doc, encoding="utf-8")
            else:
                print(json.dumps(json.loads(doc), indent=2))
        elif args.command == "delete":
            asyncio.run(_delete(args))
    except (AudioRegionsError, OSError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
