#!/usr/bin/env python3
"""
MiniBank Entry Point

Starts the FastAPI server (port 8090 unless MINIBANK_API_PORT is set).
"""

import sys

from minibank.api import run_server


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down MiniBank...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
