import argparse
import os

import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the booking API.")
    parser.add_argument("--host", default=os.getenv("API_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("API_PORT", 8000)))
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload (always off outside development)",
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    development = os.getenv("APP_ENV", "development") == "development"
    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=development and not args.no_reload,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
