#!/usr/bin/env python3
"""Run the phaseguide API server."""
import argparse

import uvicorn

from phaseguide.api.dependencies import get_config

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    config = get_config()
    uvicorn.run(
        "phaseguide.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=args.reload,
    )
