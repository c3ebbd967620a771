"""
Bank rate snapshot model.

``BankRecord`` is the only unit of exchange between the record source, the
history store, the estimator, the ranking engine and the report formatters.

The model is frozen. Scoring never mutates a record; ``with_estimate()``
returns a copy carrying the predicted return and the investor's term, so the
historical and freshly-scraped lists that get concatenated upstream can never
alias each other.

The "investment return" value plays three roles, kept apart by name:

  - observed  : ``investment_return`` of an unscored record (``return_source
                == "observed"``), preserved as ``observed_return`` on copies.
  - feature   : ``prior_return`` — what the estimator trains and predicts on.
  - predicted : ``investment_return`` of a scored copy (``return_source`` is
                ``"model"`` or ``"heuristic"``).
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ReturnSource = Literal["observed", "model", "heuristic"]


class BankRecord(BaseModel):
    """One bank's published rates on a given date.

    Attributes:
        bank_name: Display name of the bank (non-empty).
        deposit_rate: Annualized deposit rate in percent (6.5 means 6.5%).
        loan_rate: Annualized loan rate in percent.
        investment_return: Annualized return estimate in percent.
        observed_date: Date the rates were observed.
        term_days: Investment horizon in days.
        return_source: Provenance of ``investment_return``.
        observed_return: The pre-scoring return, set on scored copies.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    bank_name: str = Field(min_length=1)
    deposit_rate: float = Field(ge=0)
    loan_rate: float = Field(ge=0)
    investment_return: float
    observed_date: date
    term_days: int = Field(gt=0)
    return_source: ReturnSource = "observed"
    observed_return: Optional[float] = None

    @field_validator("bank_name")
    @classmethod
    def validate_bank_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("bank_name must not be blank.")
        return v

    @property
    def prior_return(self) -> float:
        """The observed return, whether or not this record has been scored."""
        if self.observed_return is not None:
            return self.observed_return
        return self.investment_return

    def with_estimate(
        self,
        predicted_return: float,
        term_days: int,
        source: ReturnSource,
    ) -> "BankRecord":
        """Return a scored copy of this record.

        Name, rates and date are kept. ``investment_return`` is replaced by
        ``predicted_return`` and ``term_days`` by the requested horizon.
        """
        return self.model_copy(
            update={
                "investment_return": float(predicted_return),
                "term_days": int(term_days),
                "return_source": source,
                "observed_return": self.prior_return,
            }
        )
