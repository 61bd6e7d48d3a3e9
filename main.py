"""Story Generator — launcher.

    python main.py                      serve POST /api/generate with uvicorn
    python main.py --topic "a heist"    generate one story and print it as JSON
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "7071")


async def generate_once(topic: str, style: str | None, length: str) -> dict:
    from storygen.config import build_generator, load_settings
    from storygen.models import validate_request

    generator = build_generator(load_settings(ROOT / ".env"))
    request = validate_request({"topic": topic, "style": style, "length": length})
    story = await generator.generate(request)
    return {"success": True, "data": story.to_json()}


def main():
    parser = argparse.ArgumentParser(description="Story Generator")
    parser.add_argument("--host", default=HOST, help=f"Bind address (default: {HOST})")
    parser.add_argument("--port", type=int, default=int(PORT), help=f"Port (default: {PORT})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--log-level", default="info",
                        choices=["debug", "info", "warning", "error"])
    parser.add_argument("--topic", help="Generate a single story about TOPIC and exit")
    parser.add_argument("--style", default=None, help="Writing style for --topic")
    parser.add_argument("--length", default="medium", choices=["short", "medium", "long"],
                        help="Story length for --topic (default: medium)")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.topic:
        try:
            result = asyncio.run(generate_once(args.topic, args.style, args.length))
        except Exception as e:
            print(json.dumps({"success": False, "error": str(e) or "Unknown error occurred"}))
            sys.exit(1)
        print(json.dumps(result, indent=2))
        return

    import uvicorn

    print(f"Starting backend on http://localhost:{args.port}/api/generate ...")
    uvicorn.run("backend.app:app", host=args.host, port=args.port,
                reload=args.reload, log_level=args.log_level)


if __name__ == "__main__":
    main()
