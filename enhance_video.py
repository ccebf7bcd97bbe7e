#!/usr/bin/env python3
"""
Content Enhancement Runner

Regenerates one YouTube video's script, title, description and keywords, and
optionally its sentence breakdown, thumbnail and per-sentence images.

Usage:
    source venv/bin/activate
    python enhance_video.py VIDEO_ID --title "Original title" --transcript-file transcript.txt

Requires .env with at least one of ANTHROPIC_API_KEY, OPENAI_API_KEY or
OPENROUTER_API_KEY. Image generation also needs LEONARDO_API_KEY,
OPENAI_API_KEY or REPLICATE_API_KEY depending on IMAGE_MODEL.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from viral_pipeline.config import PipelineConfig
from viral_pipeline.enhancer import ContentEnhancer
from viral_pipeline.log import configure_logger
from viral_pipeline.models import VideoData


def parse_args(argv):
    parser = argparse.ArgumentParser(description="Enhance one video's content with AI providers")
    parser.add_argument("video_id")
    parser.add_argument("--title", default="")
    parser.add_argument("--description", default="")
    parser.add_argument("--channel", default="")
    parser.add_argument("--transcript-file", type=Path)
    parser.add_argument("--output-dir", default="output")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-dir")
    parser.add_argument("--health-check", action="store_true", help="Only ping the configured providers")
    return parser.parse_args(argv)


async def run(args) -> int:
    config = PipelineConfig.from_env()
    enhancer = ContentEnhancer.from_env(config, output_dir=args.output_dir)

    if args.health_check:
        await enhancer.health_check()
        print("At least one AI service is working")
        return 0

    transcript = args.transcript_file.read_text(encoding="utf-8") if args.transcript_file else ""
    video = VideoData(
        video_id=args.video_id,
        title=args.title,
        description=args.description,
        channel_title=args.channel,
        transcript=transcript,
    )

    print(f"\n{'='*60}")
    print(f"Enhancing video {video.video_id}")
    print(f"Image generation: {'on' if config.images.enabled else 'off'}, "
          f"script breakdown: {'on' if config.script.enable_breakdown else 'off'}")
    print(f"{'='*60}\n")

    result = await enhancer.enhance_content(video)

    output_dir = Path(args.output_dir) / "videos" / video.video_id
    output_dir.mkdir(parents=True, exist_ok=True)
    result_file = output_dir / "enhancement.json"
    result_file.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")

    summary = enhancer.get_cost_summary()
    print(f"\n{'='*60}")
    print("Enhancement Complete!")
    print(f"Recommended title: {result.titles.recommended}")
    print(f"Sentences: {len(result.script_sentences)}, images: {len(result.generated_images)}")
    if result.thumbnail:
        print(f"Thumbnail: {result.thumbnail.uploaded_url}")
    print(f"Video cost: ${result.cost_summary['total_cost']:.4f} (budget ${summary['budget_ceiling']:.2f})")
    print(f"Result: {result_file}")
    print(f"{'='*60}\n")
    return 0


def main(argv=None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logger(args.log_level, args.log_dir)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
