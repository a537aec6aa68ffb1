"""HTTP routes for the Flask API."""

import logging
from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from finmodel.core.errors import FinModelError, RuleEvaluationError
from finmodel.core.ping import get_ping
from finmodel.core.service import calculate_model
from finmodel.schemas.model import ModelRequest

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return (
        jsonify({"detail": exc.errors(include_url=False, include_context=False)}),
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )


@api_bp.errorhandler(RuleEvaluationError)
def _handle_rule_error(exc: RuleEvaluationError):
    """Point at the rule, period and formula that could not be evaluated."""
    return (
        jsonify(
            {
                "detail": str(exc),
                "error": type(exc.cause).__name__,
                "target": exc.target,
                "period": exc.period,
                "formula": exc.formula,
            }
        ),
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )


@api_bp.errorhandler(FinModelError)
def _handle_model_error(exc: FinModelError):
    """Registration errors: unknown names, bad formulas, wrong lengths."""
    logger.info("Rejected model: %s", exc)
    return jsonify({"detail": str(exc), "error": type(exc).__name__}), HTTPStatus.BAD_REQUEST


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    return jsonify(get_ping().model_dump())


@api_bp.post("/model/calculate")
def calculate() -> Any:
    """Build a model from the payload, calculate it and return every account."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = ModelRequest.model_validate(raw_payload)
    result = calculate_model(payload)
    return jsonify(result.model_dump())
