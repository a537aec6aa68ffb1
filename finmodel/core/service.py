"""Build, calculate and report a model from a declarative request."""

import logging

from finmodel.core.model import Model
from finmodel.schemas.model import (
    AccountSeries,
    ModelRequest,
    ModelResponse,
    ParameterSeries,
    RuleFailure,
)

logger = logging.getLogger(__name__)


def build_model(request: ModelRequest) -> Model:
    """Register variables, parameters, initial values and rules, in that order."""
    model = Model(request.n_periods)
    model.add_variables(request.variables, unit=request.unit)
    model.set_parameters(request.parameters)
    model.set_initials(request.initials)
    model.set_rules(
        [(row.target, row.formula) for row in request.rules],
        order=request.order,
    )
    return model


def calculate_model(request: ModelRequest) -> ModelResponse:
    """Run a full calculation pass and collect every account's values."""
    model = build_model(request)
    warnings = model.check_order()
    for warning in warnings:
        logger.warning("Rule order: %s", warning)

    failures = model.calculate(errors=request.errors)

    return ModelResponse(
        n_periods=model.n_periods,
        periods=list(model.periods),
        accounts=[
            AccountSeries(name=name, unit=account.unit, values=account.values)
            for name, account in model.variables.items()
        ],
        parameters=[
            ParameterSeries(name=name, values=values)
            for name, values in model.parameter_table().items()
        ],
        failures=[
            RuleFailure(
                target=failure.target,
                period=failure.period,
                formula=failure.formula,
                message=str(failure.cause),
            )
            for failure in failures
        ],
        warnings=warnings,
    )
