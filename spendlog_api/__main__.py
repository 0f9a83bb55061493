"""Run the API with Flask's built-in server."""

import logging
import os

from .app import create_app


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    app = create_app()
    debug = os.getenv("SPENDLOG_ENV", "prod").lower() in {"dev", "development"}
    app.run(
        host=os.getenv("SPENDLOG_HOST", "127.0.0.1"),
        port=int(os.getenv("SPENDLOG_PORT", "5000")),
        debug=debug,
    )


if __name__ == "__main__":
    main()
