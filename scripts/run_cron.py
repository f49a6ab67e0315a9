#!/usr/bin/env python3
"""CLI to run one seo-autopilot pipeline pass in-process."""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from db.database import get_session, init_db
from pipeline.auto_publish import run_auto_publish
from pipeline.content_plan import run_content_plan
from pipeline.gateways import LocalGenerationGateway, LocalPublishGateway
from pipeline.generate_ahead import run_generation_ahead

JOBS = ["auto-publish", "generate-ahead", "content-plan"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a seo-autopilot pipeline once")
    parser.add_argument("job", choices=JOBS, help="Pipeline to run")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    init_db()
    publish_gateway = LocalPublishGateway()
    generation_gateway = LocalGenerationGateway()

    session = get_session()
    try:
        if args.job == "auto-publish":
            result = run_auto_publish(session, publish_gateway)
        elif args.job == "generate-ahead":
            result = run_generation_ahead(session, generation_gateway, publish_gateway)
        else:
            result = run_content_plan(session, generation_gateway, publish_gateway)
    except Exception:
        logging.exception("Job %s failed", args.job)
        sys.exit(1)
    finally:
        session.close()

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
