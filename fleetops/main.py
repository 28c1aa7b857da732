"""Application entry point for the fleet operations API server."""

import uvicorn

from fleetops.api.app import create_app
from fleetops.utils.config import load_config
from fleetops.utils.logger import setup_logging


def main() -> None:
    """Create missing tables and start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level, sql_echo=config.database.echo)
    app = create_app(config)
    app.state.database.create_all()
    uvicorn.run(app, host=config.api.host, port=config.api.port)


if __name__ == "__main__":
    main()
