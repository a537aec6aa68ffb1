"""Data contracts for model calculations."""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RuleRow(BaseModel):
    """One rule: the account it writes and the formula that computes it."""

    model_config = ConfigDict(extra="forbid")

    target: str = Field(..., min_length=1, description="Account written by the rule.")
    formula: str = Field(..., description="Formula, e.g. ':cash[-1] + :netp[+0]'.")


class ModelRequest(BaseModel):
    """Everything needed to build and calculate a model."""

    model_config = ConfigDict(extra="forbid")

    n_periods: int = Field(..., ge=1, le=10_000, description="Number of computed periods.")
    variables: List[str] = Field(default_factory=list)
    unit: str = "unit"
    initials: Dict[str, float] = Field(default_factory=dict)
    parameters: Dict[str, Union[float, List[float]]] = Field(default_factory=dict)
    rules: List[RuleRow] = Field(default_factory=list)
    order: Literal["declared", "dependency"] = "declared"
    errors: Literal["raise", "skip"] = "raise"

    @model_validator(mode="after")
    def ensure_unique_variables(self) -> "ModelRequest":
        duplicates = sorted({name for name in self.variables if self.variables.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate variable names: {duplicates}")
        return self


class AccountSeries(BaseModel):
    """Values of one account, period 1 first; ``None`` marks an unset slot."""

    name: str
    unit: str
    values: List[Optional[float]]


class ParameterSeries(BaseModel):
    """A parameter expanded to one value per period; scalars are repeated."""

    name: str
    values: List[float]


class RuleFailure(BaseModel):
    """A cell left unset because its rule could not be evaluated."""

    target: str
    period: int = Field(..., ge=1)
    formula: str
    message: str


class ModelResponse(BaseModel):
    """Calculated accounts."""

    n_periods: int
    periods: List[int]
    accounts: List[AccountSeries]
    parameters: List[ParameterSeries] = Field(default_factory=list)
    failures: List[RuleFailure] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
