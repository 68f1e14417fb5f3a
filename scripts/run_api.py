#!/usr/bin/env python3
"""
API scope only. Do not implement beyond this file's responsibilities.

Command-line launcher for the priority review API, with a config check.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from priority_review.core.config import API_HOST, API_PORT, validate_config


def main():
    parser = argparse.ArgumentParser(
        description="Serve the priority weight and correction review API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                       # Serve on API_HOST:API_PORT
  %(prog)s --port 9000 --reload  # Development server on port 9000
  %(prog)s --check               # Validate configuration and exit

Environment variables:
- AUDIT_ENABLED=true (record review commands in DB_PATH)
- WEIGHT_SUM_TOLERANCE=1e-9
- CORS_ORIGINS=http://localhost:3000
        """
    )

    parser.add_argument("--host", default=API_HOST, help=f"Bind address (default: {API_HOST})")
    parser.add_argument("--port", type=int, default=API_PORT, help=f"Port (default: {API_PORT})")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument("--check", action="store_true", help="Validate configuration without serving")

    args = parser.parse_args()

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"❌ {issue}", file=sys.stderr)
        return 1

    if args.check:
        print("✅ Configuration valid")
        return 0

    import uvicorn
    uvicorn.run(
        "priority_review.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
