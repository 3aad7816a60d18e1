import argparse
import logging

from octopulse import config
from octopulse.app import create_app


parser = argparse.ArgumentParser(description="OctoPulse server entry point.")
parser.add_argument(
    "--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)."
)
parser.add_argument(
    "--port", type=int, default=config.PORT, help="Port to listen on."
)
parser.add_argument(
    "--reload", action="store_true", help="Reload on code changes (development)."
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = create_app()


def run():
    import uvicorn

    args, _ = parser.parse_known_args()
    logger.info(f"Starting OctoPulse on {args.host}:{args.port}")
    uvicorn.run("main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    run()
