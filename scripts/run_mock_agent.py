#!/usr/bin/env python3
"""
Start the mock A2A agent with uvicorn.
Usage: python scripts/run_mock_agent.py [--mode success|a2a_error|malformed|http_error] [--port 8080]
Example: python scripts/run_mock_agent.py --mode a2a_error --port 9001
"""
import argparse
import sys
from pathlib import Path

repo_root = Path(__file__).resolve().parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

import uvicorn

from a2a_bridge.config import configure_logging
from a2a_bridge.mock_agent import MODES, create_app

parser = argparse.ArgumentParser(description="Run a mock A2A agent")
parser.add_argument("--mode", default="success", choices=MODES)
parser.add_argument("--host", default="127.0.0.1")
parser.add_argument("--port", type=int, default=8080)
args = parser.parse_args()

configure_logging("INFO")
app = create_app(mode=args.mode, base_url=f"http://{args.host}:{args.port}")
uvicorn.run(app, host=args.host, port=args.port)
