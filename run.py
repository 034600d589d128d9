import argparse
import logging

import uvicorn

from adlinkcrawl.api.server import create_app
from adlinkcrawl.container import Container
from adlinkcrawl.db.engine import init_db

logger = logging.getLogger(__name__)


def main(container=None, argv=None):
    """Run one audit (`once`) or serve the control API with the scheduler."""
    parser = argparse.ArgumentParser(description="Audit ad, keyword and sitelink URLs")
    parser.add_argument("command", nargs="?", choices=("serve", "once"), default="serve")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if container is None:
        container = Container()

    init_db(container.db_engine())

    if args.command == "once":
        summary = container.audit_job_runner().run()
        logger.info("Audit finished: %s", summary)
        return summary

    scheduler = container.scheduler_service()
    scheduler.start()
    try:
        uvicorn.run(create_app(container), host=args.host, port=args.port)
    finally:
        scheduler.shutdown(wait=False)


if __name__ == '__main__':
    main()
