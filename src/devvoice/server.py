"""Server entry point for the DevVoice API."""

import os

import uvicorn

from devvoice.logging_utils import configure_logging


def main():
    """Run the FastAPI server."""
    configure_logging()
    uvicorn.run(
        "devvoice.api:app",
        host=os.environ.get("DEVVOICE_HOST", "127.0.0.1"),
        port=int(os.environ.get("DEVVOICE_PORT", "8080")),
        log_level="info",
    )


if __name__ == "__main__":
    main()
