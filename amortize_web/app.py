"""JSON API for the amortization calculator.

The routes accept loan parameters as a JSON body, run the engine and return
the summary and the serialized schedule. Process settings are read from the
environment:

``AMORTIZE_LOG_LEVEL``
    Logging level for the app (default ``INFO``).
``AMORTIZE_MAX_ROWS``
    Maximum number of schedule rows returned; ``0`` means no limit.
"""

import logging
import os
from datetime import date
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from amortize.data_models import LoanConfig, LoanConfigBuilder, Overpayment
from amortize.engine import compute_schedule
from amortize.exceptions import AmortizeError, InvalidConfiguration
from amortize.formatter import schedule_to_dicts
from amortize.utils import parse_year_month

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["MAX_ROWS"] = int(os.environ.get("AMORTIZE_MAX_ROWS", "0"))
logging.basicConfig(level=os.environ.get("AMORTIZE_LOG_LEVEL", "INFO").upper())


def _parse_start_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        return parse_year_month(str(value))
    except ValueError as exc:
        raise InvalidConfiguration(str(exc)) from exc


def _payload_to_config(payload: Dict[str, Any]) -> LoanConfig:
    """Translate a request body into a validated :class:`LoanConfig`."""
    missing = [key for key in ("principal", "rate", "term") if key not in payload]
    if missing:
        raise InvalidConfiguration(f"Missing required field(s): {', '.join(missing)}")
    term = payload["term"]
    if isinstance(term, str) and term.strip().isdigit():
        term = int(term)

    builder = (
        LoanConfigBuilder()
        .set_principal(payload["principal"])
        .set_interest_rate(payload["rate"])
        .set_term(term)
        .set_start_date(_parse_start_date(payload.get("start_date")))
    )
    for item in payload.get("overpayments") or []:
        if not isinstance(item, dict) or "month" not in item or "amount" not in item:
            raise InvalidConfiguration(f"Overpayment needs 'month' and 'amount': {item!r}")
        overpayment = Overpayment(amount=item["amount"], mode=item.get("mode", "reduceLoanTerm"))
        builder.add_overpayment(item["month"], overpayment)
    return builder.build()


def _run_analysis(payload: Dict[str, Any]):
    config = _payload_to_config(payload)
    schedule, summary = compute_schedule(config)
    max_rows = app.config["MAX_ROWS"]
    if max_rows and len(schedule) > max_rows:
        summary["truncated"] = len(schedule) - max_rows
        schedule = schedule[:max_rows]
    return summary, schedule_to_dicts(schedule)


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidConfiguration("Request body must be a JSON object")
    return payload


@app.errorhandler(AmortizeError)
def handle_amortize_error(exc: AmortizeError):
    logger.info("Rejected request: %s", exc)
    return jsonify({"error": str(exc)}), 400


@app.get("/api/health")
def health():
    return jsonify({"status": "ok"})


@app.post("/api/schedule")
def schedule():
    summary, serialized = _run_analysis(_json_body())
    return jsonify({"summary": summary, "schedule": serialized})


@app.post("/api/summary")
def summary():
    config = _payload_to_config(_json_body())
    _, summary_data = compute_schedule(config)
    return jsonify({"summary": summary_data})


if __name__ == "__main__":
    print("Starting amortization API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
