"""
Production entrypoint for the Comparable Property Engine.

Binds to 0.0.0.0:$PORT.
"""

import logging
import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"Starting Comparable Property Engine on port {port}")

    # Import app here so logging is configured before the app is built
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port)
