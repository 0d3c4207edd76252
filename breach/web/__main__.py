"""Entry point for the web host: python -m breach.web"""

import argparse

from breach.web.server import run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="Breach Protocol — Web JSON host")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    args = parser.parse_args()

    run_server(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
