"""
Health check, intake and suggestion endpoints (Flask).

- /health/live: process is up
- /health/ready: store is reachable
- POST /requests: accept a procurement request (201)
- /requests/<request_id>: the request and its status (404 if unknown)
- /requests/<request_id>/suggestions: ranked suggestions with supplier details

Async views need the flask[async] extra.
"""

import sqlite3
from typing import Any

from flask import Flask, jsonify, request
from pydantic import ValidationError

from supplieriq.app import SupplierIQ
from supplieriq.kernel.logging import get_logger
from supplieriq.procurement.reader import suggestion_row
from supplieriq.procurement.sqlite_store import SQLiteStore

logger = get_logger(__name__)

app = Flask(__name__)

# Set by initialize_health_server()
_iq: SupplierIQ | None = None


def initialize_health_server(iq: SupplierIQ | None) -> None:
    """Attach the SupplierIQ instance the endpoints serve"""
    global _iq
    _iq = iq
    logger.info(
        "Health server initialized",
        store=type(iq.store).__name__ if iq else None,
    )


@app.route("/health/live", methods=["GET"])
def liveness() -> tuple[Any, int]:
    return jsonify({"status": "alive", "service": "supplieriq"}), 200


@app.route("/health/ready", methods=["GET"])
def readiness() -> tuple[Any, int]:
    """503 until a SupplierIQ instance is attached and its store answers"""
    if _iq is None:
        logger.error("Readiness check failed: not initialized")
        return jsonify({"status": "not_ready", "reason": "not_initialized"}), 503

    body: dict[str, Any] = {
        "status": "ready",
        "pending_pipelines": _iq.channel.pending_count,
    }

    if not isinstance(_iq.store, SQLiteStore):
        body["store"] = "in_memory"
        return jsonify(body), 200

    db_path = _iq.store.db_path
    if not db_path.exists():
        logger.error("Readiness check failed: DB file does not exist", db_path=str(db_path))
        return (
            jsonify({"status": "not_ready", "reason": "database_file_not_found"}),
            503,
        )

    try:
        body["store"] = "sqlite"
        body["supplier_count"] = _iq.store.count_rows("suppliers")
        body["request_count"] = _iq.store.count_rows("requests")
    except sqlite3.Error as e:
        logger.error("Readiness check failed: DB error", error=str(e))
        return (
            jsonify(
                {"status": "not_ready", "reason": "database_error", "error": str(e)}
            ),
            503,
        )
    return jsonify(body), 200


_INTAKE_FIELDS = ("category", "description", "quantity", "budget", "region", "urgency")


def _validation_errors(error: ValidationError) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


@app.route("/requests", methods=["POST"])
async def create_request() -> tuple[Any, int]:
    """
    Accept a procurement request and generate its suggestions

    Each async view runs on its own short-lived event loop, so the pipeline
    run started by the intake is awaited before responding; a background
    task would be cancelled when the loop closes.
    """
    if _iq is None:
        return jsonify({"error": "not_initialized"}), 503

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "invalid_json"}), 400

    fields = {name: payload.get(name) for name in _INTAKE_FIELDS if name != "urgency"}
    if payload.get("urgency") is not None:
        fields["urgency"] = payload["urgency"]

    try:
        created, receipt = await _iq.submit_request(**fields)
    except ValidationError as e:
        return jsonify({"error": "validation_error", "details": _validation_errors(e)}), 400

    await receipt.wait()
    stored = await _iq.get_request(created.request_id)
    logger.info("Request created over HTTP", request_id=created.request_id)
    return jsonify((stored or created).model_dump(mode="json")), 201


@app.route("/requests/<request_id>", methods=["GET"])
async def get_request(request_id: str) -> tuple[Any, int]:
    if _iq is None:
        return jsonify({"error": "not_initialized"}), 503

    found = await _iq.get_request(request_id)
    if found is None:
        return jsonify({"error": "request_not_found", "request_id": request_id}), 404
    return jsonify(found.model_dump(mode="json")), 200


@app.route("/requests/<request_id>/suggestions", methods=["GET"])
async def request_suggestions(request_id: str) -> tuple[Any, int]:
    """
    Ranked suggestions for a request, best first, each with its supplier

    Always 200: the list is empty for unknown, unprocessed and failed
    requests alike. Use GET /requests/<id> to tell those apart.
    """
    if _iq is None:
        return jsonify({"error": "not_initialized"}), 503

    rows = await _iq.get_suggestions_with_suppliers(request_id)
    return (
        jsonify(
            {
                "request_id": request_id,
                "suggestions": [suggestion_row(s, supplier) for s, supplier in rows],
            }
        ),
        200,
    )


def run_health_server(port: int = 8080, debug: bool = False) -> None:
    logger.info("Starting health server", port=port)
    app.run(host="0.0.0.0", port=port, debug=debug)
