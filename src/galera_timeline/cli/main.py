import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List

from dotenv import load_dotenv

from galera_timeline.analysis.pipeline import TimelineBuilder
from galera_timeline.analysis.summary import TimelineSummary, summarize
from galera_timeline.core.config import COLOR_CHOICES, FORMAT_CHOICES, Settings
from galera_timeline.core.exceptions import TimelineError
from galera_timeline.core.models import Event
from galera_timeline.utils.markup import markup_for

load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="galera-timeline",
        description="Merge Galera cluster node logs into one chronological timeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Node index follows argument order: node0, node1, node2
  galera-timeline db0/error.log db1/error.log db2/error.log

  # JSON output with a summary block
  galera-timeline --format json --summary logs/*.err

  # Include the raw log lines under every event
  galera-timeline --raw --color never node*.log

Environment (also read from .env):
  GALERA_TIMELINE_WORKERS, GALERA_TIMELINE_COLOR, GALERA_TIMELINE_FORMAT
        """,
    )

    parser.add_argument("log_files", nargs="+", help="Node log files, in node order")
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=FORMAT_CHOICES,
        help="Output format (default: text, or GALERA_TIMELINE_FORMAT)",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_CHOICES,
        help="Severity coloring of messages (default: auto)",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        help="Read node logs concurrently; relaxes same-second ordering between nodes",
    )
    parser.add_argument(
        "--raw", action="store_true", help="Print the raw log lines of each event"
    )
    parser.add_argument(
        "--summary", action="store_true", help="Append timeline statistics"
    )
    parser.add_argument("-o", "--output", help="Write the timeline to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--debug", action="store_true", help="Debug level logging")
    return parser


def main(argv: List[str] = None) -> int:
    """Command line interface for the timeline builder."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        overrides = {
            "workers": args.workers,
            "color": args.color,
            "output_format": args.output_format,
        }
        settings = replace(
            Settings.from_env(),
            **{key: value for key, value in overrides.items() if value is not None},
        )
    except TimelineError as e:
        parser.error(str(e))

    to_file = args.output is not None
    markup = markup_for(
        settings.color, is_tty=not to_file and sys.stdout.isatty()
    )

    try:
        timeline = TimelineBuilder(markup=markup).build(
            args.log_files, workers=settings.workers
        )
    except TimelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.debug:
            logging.exception("Timeline extraction failed")
        return 1

    summary = summarize(timeline) if args.summary else None

    if settings.output_format == "json":
        document = format_json_output(timeline, summary)
    else:
        document = format_text_output(timeline, args.log_files, args.raw, summary)

    if to_file:
        with open(args.output, "w") as f:
            f.write(document)
        print(f"Timeline saved to: {args.output}", file=sys.stderr)
    else:
        print(document)

    return 0


def format_json_output(timeline: List[Event], summary: TimelineSummary = None) -> str:
    document = {"events": [event.to_dict() for event in timeline]}
    if summary is not None:
        document["summary"] = summary.to_dict()
    return json.dumps(document, indent=2)


def format_text_output(
    timeline: List[Event],
    log_files: List[str],
    include_raw: bool = False,
    summary: TimelineSummary = None,
) -> str:
    """Plain columns: time, node, message."""
    lines = []
    for event in timeline:
        when = (
            event.timestamp.strftime("%Y-%m-%d %H:%M:%S")
            if event.has_timestamp
            else "????-??-?? ??:??:??"
        )
        lines.append(f"{when}  node{event.node}  {event.message}")
        if include_raw:
            lines.extend(f"    | {raw}" for raw in event.raw_lines)

    if summary is not None:
        lines.extend(format_summary(summary, log_files))

    return "\n".join(lines)


def format_summary(summary: TimelineSummary, log_files: List[str]) -> List[str]:
    lines = ["", "=" * 80, "TIMELINE SUMMARY", "=" * 80]
    lines.append(f"Events: {summary.total_events}")
    if summary.untimed_events:
        lines.append(f"Events without a valid timestamp: {summary.untimed_events}")

    for node, path in enumerate(log_files):
        lines.append(f"  node{node} ({path}): {summary.events_per_node.get(node, 0)}")

    if summary.first_event:
        lines.append(f"First event: {summary.first_event}")
        lines.append(f"Last event: {summary.last_event}")
        lines.append(f"Span: {summary.span_seconds:.0f}s")
    if summary.largest_gap_after:
        lines.append(
            f"Longest quiet period: {summary.largest_gap_seconds:.0f}s "
            f"after {summary.largest_gap_after}"
        )

    if summary.events_per_kind:
        lines.append("Event kinds:")
        for kind, count in summary.events_per_kind.items():
            lines.append(f"  - {kind}: {count}")

    return lines


if __name__ == "__main__":
    exit(main())
