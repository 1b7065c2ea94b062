from __future__ import annotations

import logging
from collections.abc import Iterable

import pandas as pd
import statsmodels.formula.api as smf

from ..dgp import COVARIATES, OUTCOME, TREATMENT
from ._common import (
    EffectResult,
    complete_cases,
    require_columns,
    require_variation,
    validate_names,
)

logger = logging.getLogger(__name__)


class OLSResult(EffectResult):
    """
    The result of an OLS fit of outcome on treatment and observed covariates.

    When an unobserved confounder drives both treatment and outcome, this
    estimate absorbs the confounder's effect and is biased.
    """

    def __init__(self, result, treatment: str, outcome: str, covariates: list[str]) -> None:
        super().__init__(result, treatment, treatment, outcome)
        self._covariates = covariates

    @property
    def covariates(self) -> list[str]:
        """Covariates controlled for alongside treatment."""
        return list(self._covariates)

    def _header_lines(self) -> list[str]:
        lines = [f"OLS Effect: {self._treatment} → {self._outcome}"]
        if self._covariates:
            lines.append(f"  Controls: {', '.join(self._covariates)}")
        return lines

    def _extra_lines(self) -> list[str]:
        return [
            "",
            "  Ignores endogeneity: any unobserved confounder of",
            "  treatment and outcome biases this estimate.",
        ]


class OLS:
    """
    Ordinary least squares estimator of the treatment effect.

    Regresses the outcome on treatment plus the observed covariates. Neither
    the instrument nor the (unobserved) confounder enters the model, so with
    the default forest-protection data the estimate is biased upward.

    Example::

        df = ForestProtectionDGP().generate(seed=0)
        result = OLS().fit(df)
        print(result.summary())
    """

    name = "OLS"

    def __init__(
        self,
        treatment: str = TREATMENT,
        outcome: str = OUTCOME,
        covariates: Iterable[str] = COVARIATES,
    ) -> None:
        self._treatment = treatment
        self._outcome = outcome
        self._covariates = list(covariates)
        validate_names(treatment, outcome, self._covariates)

    def fit(self, data: pd.DataFrame) -> OLSResult:
        """
        Estimate the treatment effect by OLS.

        Parameters
        ----------
        data : pd.DataFrame
            Must contain the treatment, outcome and covariate columns. Any
            other columns are ignored, and rows missing a value in a model
            column are dropped.

        Raises
        ------
        ValueError
            If a required column is missing.
        IdentificationError
            If treatment is constant in ``data``.
        """
        require_columns(
            data,
            [("Treatment", self._treatment), ("Outcome", self._outcome)]
            + [("Covariate", c) for c in self._covariates],
        )
        data = complete_cases(data, [self._treatment, self._outcome] + self._covariates)
        require_variation(data, "Treatment", self._treatment)

        rhs = " + ".join([self._treatment] + self._covariates)
        result = smf.ols(f"{self._outcome} ~ {rhs}", data=data).fit()
        fitted = OLSResult(result, self._treatment, self._outcome, self._covariates)
        logger.debug("OLS effect %.4f (se %.4f)", fitted.effect, fitted.std_err)
        return fitted
