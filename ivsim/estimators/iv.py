from __future__ import annotations

import logging
from collections.abc import Iterable

import pandas as pd
import statsmodels.api as sm
from statsmodels.sandbox.regression.gmm import IV2SLS as _IV2SLS

from ..diagnostics import IV_ASSUMPTIONS, Assumption
from ..dgp import COVARIATES, INSTRUMENT, OUTCOME, TREATMENT
from ._common import (
    EffectResult,
    complete_cases,
    require_columns,
    require_variation,
    validate_names,
)

logger = logging.getLogger(__name__)


class IVResult(EffectResult):
    """
    The result of a library IV (2SLS) fit.

    Standard errors are the textbook 2SLS ones, computed from residuals
    with actual treatment. This is the reference the manual two-stage
    implementation is checked against.
    """

    def __init__(
        self,
        result,
        treatment: str,
        outcome: str,
        instrument: str,
        covariates: list[str],
    ) -> None:
        super().__init__(result, treatment, treatment, outcome)
        self._instrument = instrument
        self._covariates = covariates

    @property
    def covariates(self) -> list[str]:
        """Exogenous covariates included in both stages."""
        return list(self._covariates)

    @property
    def assumptions(self) -> list[Assumption]:
        """Modelling assumptions required for a causal interpretation."""
        return list(IV_ASSUMPTIONS)

    def diagnose(self, data: pd.DataFrame):
        """
        Run diagnostic checks against this IV fit.

        Re-uses the original data. Currently runs:

        - **First-stage F-statistic**: tests instrument relevance.
          ``F < 10`` indicates a weak instrument (Stock & Yogo, 2005).

        Parameters
        ----------
        data : pd.DataFrame
            The same dataframe passed to ``fit()``.
        """
        from ..diagnostics import DiagnosticReport, check_instrument_strength, first_stage_f

        data = complete_cases(
            data, [self._treatment, self._outcome, self._instrument] + self._covariates
        )
        f_stat = first_stage_f(data, self._treatment, self._instrument, self._covariates)
        return DiagnosticReport(
            checks=[check_instrument_strength(f_stat)],
            treatment=self._treatment,
            outcome=self._outcome,
            instrument=self._instrument,
        )

    def _header_lines(self) -> list[str]:
        return [
            f"IV (2SLS) Effect: {self._treatment} → {self._outcome}",
            f"  Instrument: {self._instrument}",
        ]

    def _extra_lines(self) -> list[str]:
        lines = ["", "  Assumptions", "  " + "┄" * 48]
        lines += [f"  {a.fmt_tag()}  {a.name}" for a in IV_ASSUMPTIONS]
        return lines


class IV2SLS:
    """
    Instrumental Variables estimator using statsmodels' built-in 2SLS.

    Fits the same model as ``TwoStageLeastSquares`` in a single call: the
    treatment is endogenous, the instrument is excluded from the outcome
    equation, and the covariates serve as their own instruments.

    Example::

        df = ForestProtectionDGP().generate(seed=0)
        result = IV2SLS().fit(df)
        print(result.summary())
    """

    name = "IV2SLS"

    def __init__(
        self,
        treatment: str = TREATMENT,
        outcome: str = OUTCOME,
        instrument: str = INSTRUMENT,
        covariates: Iterable[str] = COVARIATES,
    ) -> None:
        self._treatment = treatment
        self._outcome = outcome
        self._instrument = instrument
        self._covariates = list(covariates)
        validate_names(treatment, outcome, self._covariates, instrument)

    def fit(self, data: pd.DataFrame) -> IVResult:
        """
        Estimate the causal effect via 2SLS.

        Raises
        ------
        ValueError
            If a required column is missing.
        IdentificationError
            If treatment or instrument is constant in ``data``.

        Rows with a missing value in any model column are dropped.
        """
        T, Y, Z = self._treatment, self._outcome, self._instrument
        controls = self._covariates
        require_columns(
            data,
            [("Treatment", T), ("Outcome", Y), ("Instrument", Z)]
            + [("Covariate", c) for c in controls],
        )
        data = complete_cases(data, [T, Y, Z] + controls)
        require_variation(data, "Treatment", T)
        require_variation(data, "Instrument", Z)

        # exog:       [const, T, controls]
        # instrument: [const, Z, controls], renamed so params are indexed by T
        X = sm.add_constant(data[[T] + controls], prepend=True)
        Z_mat = sm.add_constant(data[[Z] + controls], prepend=True)
        Z_mat.columns = X.columns

        result = _IV2SLS(endog=data[Y], exog=X, instrument=Z_mat).fit()
        fitted = IVResult(result, T, Y, Z, controls)
        logger.debug("IV2SLS effect %.4f (se %.4f)", fitted.effect, fitted.std_err)
        return fitted
