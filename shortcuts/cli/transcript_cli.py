import argparse
import sys


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch the caption transcript the analyzer would use for a YouTube video"
    )
    parser.add_argument("yt_url", help="YouTube video URL or ID")
    parser.add_argument(
        "--output", default=None, help="Path to save the transcript (prints to stdout if omitted)"
    )
    return parser


def _resolve_video_id(value: str) -> str | None:
    from shortcuts.helpers.youtube_urls import extract_video_id

    value = value.strip()
    if len(value) == 11 and "/" not in value:
        return value
    return extract_video_id(value)


def _get_fetch_transcript():
    from shortcuts.analysis.transcript import fetch_transcript

    return fetch_transcript


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    video_id = _resolve_video_id(args.yt_url)
    if not video_id:
        print(f"Not a YouTube URL or video ID: {args.yt_url}", file=sys.stderr)
        return 2

    transcript = _get_fetch_transcript()(video_id)
    if not transcript:
        print("TRANSCRIPT: No transcript available for this video.", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(transcript + "\n")
        print(f"TRANSCRIPT: Saved transcript to {args.output}")
    else:
        print(transcript)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
