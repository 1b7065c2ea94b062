from __future__ import annotations

import logging

import pandas as pd

from .._exceptions import IdentificationError

logger = logging.getLogger(__name__)


class EffectResult:
    """
    Base class for a fitted treatment-effect estimate.

    Wraps the statsmodels result whose parameter named ``coef_name`` is the
    treatment effect. Subclasses add estimator-specific properties and
    implement ``_header_lines()`` for ``summary()``.
    """

    def __init__(self, result, coef_name: str, treatment: str, outcome: str) -> None:
        self._result = result
        self._coef_name = coef_name
        self._treatment = treatment
        self._outcome = outcome

    @property
    def effect(self) -> float:
        """Point estimate of the effect of treatment on outcome."""
        return float(self._result.params[self._coef_name])

    @property
    def std_err(self) -> float:
        """Standard error of the treatment effect estimate."""
        return float(self._result.bse[self._coef_name])

    @property
    def conf_int(self) -> tuple[float, float]:
        """95% confidence interval for the treatment effect."""
        ci = self._result.conf_int()
        return (float(ci.loc[self._coef_name, 0]), float(ci.loc[self._coef_name, 1]))

    @property
    def pvalue(self) -> float:
        """p-value for the treatment effect (``H0: effect = 0``)."""
        return float(self._result.pvalues[self._coef_name])

    @property
    def n_obs(self) -> int:
        """Number of rows the model was fitted on, after dropping missing values."""
        return int(self._result.nobs)

    @property
    def statsmodels_result(self):
        """The underlying statsmodels result, for full diagnostics."""
        return self._result

    def _header_lines(self) -> list[str]:
        raise NotImplementedError

    def _extra_lines(self) -> list[str]:
        return []

    def summary(self) -> str:
        lo, hi = self.conf_int
        lines = [
            "",
            *self._header_lines(),
            "─" * 50,
            f"  Estimate             : {self.effect:>10.4f}",
            f"  Std. error           : {self.std_err:>10.4f}",
            f"  95% CI               : [{lo:.4f}, {hi:.4f}]",
            f"  p-value              : {self.pvalue:>10.4f}",
            f"  Observations         : {self.n_obs:>10d}",
            *self._extra_lines(),
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()


def validate_names(treatment: str, outcome: str, covariates, instrument: str | None = None) -> None:
    """Reject overlapping roles before any data is seen."""
    if treatment == outcome:
        raise ValueError("Treatment and outcome must be different variables.")
    for label, var in [("Treatment", treatment), ("Outcome", outcome)]:
        if var in covariates:
            raise ValueError(f"{label} '{var}' cannot also be a covariate.")
    if instrument is None:
        return
    if instrument == treatment:
        raise ValueError("Instrument and treatment must be different variables.")
    if instrument == outcome:
        raise ValueError("Instrument and outcome must be different variables.")
    if instrument in covariates:
        raise ValueError(
            f"Instrument '{instrument}' cannot also be a covariate: it must be "
            f"excluded from the outcome equation."
        )


def require_columns(data: pd.DataFrame, roles: list[tuple[str, str]]) -> None:
    """Raise ``ValueError`` for the first ``(label, column)`` missing from ``data``."""
    data_columns = set(data.columns)
    for label, var in roles:
        if var not in data_columns:
            raise ValueError(f"{label} column '{var}' not found in dataframe.")


def require_variation(data: pd.DataFrame, label: str, column: str) -> None:
    """Raise ``IdentificationError`` if ``column`` is constant in ``data``."""
    if data[column].nunique() < 2:
        raise IdentificationError(
            f"{label} '{column}' takes a single value in the data, so the "
            f"effect of treatment on outcome cannot be identified."
        )


def complete_cases(data: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """
    Restrict ``data`` to ``columns`` and drop rows with a missing value in any
    of them, so every regression stage is fitted on the same rows.
    """
    subset = data[list(dict.fromkeys(columns))].dropna()
    n_dropped = len(data) - len(subset)
    if n_dropped:
        logger.debug("Dropped %d row(s) with missing values", n_dropped)
    return subset
