import argparse
import json
import sys

import structlog

from yt_engagement.loaders.record_source import dump_records
from yt_engagement.loaders.youtube_extract import VideoExtractor
from yt_engagement.logging_config import bind_run_context, configure_logging
from yt_engagement.pipelines.config import get_config
from yt_engagement.pipelines.video_table import VideoTablePipeline
from yt_engagement.utils.exceptions import FlattenError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Flatten a YouTube videos export into a CSV table and compare engagement ratios"
    )
    parser.add_argument("--input", "-i", type=str, required=True,
                        help="JSON export with an items collection (written first when --fetch-ids or --fetch-chart is used)")
    parser.add_argument("--output", "-o", type=str, required=True,
                        help="Output CSV path (e.g., videos.csv)")
    parser.add_argument("--figure", "-f", type=str, default=None,
                        help="Density plot output path (e.g., density.png)")
    parser.add_argument("--workers", "-w", type=int, default=None,
                        help="Number of flatten worker processes")
    fetch_group = parser.add_mutually_exclusive_group()
    fetch_group.add_argument("--fetch-ids", type=str, default=None,
                             help="Comma separated video ids to fetch from the API into --input")
    fetch_group.add_argument("--fetch-chart", action="store_true",
                             help="Fetch the mostPopular chart (region and size from extract.yaml) into --input")
    parser.add_argument("--api-key", type=str, default=None,
                        help="YouTube Data API key (defaults to YOUTUBE_API_KEY)")
    parser.add_argument("--log-level", type=str, default="INFO",
                        help="Log level (DEBUG, INFO, WARNING)")
    parser.add_argument("--log-file", type=str, default=None,
                        help="Write logs to this file instead of stderr")
    return parser


def fetch(args: argparse.Namespace) -> None:
    """API에서 영상 메타데이터를 받아 --input 경로에 저장"""
    ecfg = get_config().extract
    api_key = args.api_key or ecfg.get_api_key()
    extractor = VideoExtractor(api_key, url=ecfg.get_url(), timeout=ecfg.get_timeout())
    if args.fetch_chart:
        items = extractor.fetch_chart(
            region=ecfg.get_chart_region(),
            max_results=ecfg.get_chart_max_results(),
            parts=ecfg.get_parts(),
        )
    else:
        items = extractor.fetch_videos(
            args.fetch_ids.split(','),
            parts=ecfg.get_parts(),
            batch_size=ecfg.get_batch_size(),
        )
    dump_records(items, args.input)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(level=args.log_level, log_file=args.log_file)
    bind_run_context(input=args.input)

    if args.fetch_ids or args.fetch_chart:
        fetch(args)

    pipeline = VideoTablePipeline(max_workers=args.workers)
    try:
        pipeline.run(args.input, args.output, args.figure)
    except FlattenError as e:
        logger.error('pipeline aborted', error=str(e), error_type=type(e).__name__)
        return 1

    print(json.dumps(pipeline.stats['assembly'], ensure_ascii=False, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
