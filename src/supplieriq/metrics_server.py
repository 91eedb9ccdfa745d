"""
Prometheus metrics server for SupplierIQ.

Usage:
    python -m supplieriq.metrics_server --port 9090
"""

import argparse
import time

from supplieriq.kernel.logging import configure_logging, get_logger
from supplieriq.kernel.metrics import start_metrics_server

logger = get_logger(__name__)


def main() -> None:
    """Expose SupplierIQ metrics at http://0.0.0.0:<port>/metrics"""
    parser = argparse.ArgumentParser(description="SupplierIQ Metrics Server")
    parser.add_argument("--port", type=int, default=9090, help="Port to listen on (default: 9090)")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    parser.add_argument("--json-logs", action="store_true", help="Output logs in JSON format")
    args = parser.parse_args()

    configure_logging(json_output=args.json_logs, log_level=args.log_level)
    start_metrics_server(port=args.port)
    logger.info("Metrics server started", endpoint=f"http://0.0.0.0:{args.port}/metrics")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down metrics server")


if __name__ == "__main__":
    main()
