from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from ..diagnostics import IV_ASSUMPTIONS, Assumption, _partial_f
from ..dgp import COVARIATES, INSTRUMENT, OUTCOME, TREATMENT
from ._common import (
    EffectResult,
    complete_cases,
    require_columns,
    require_variation,
    validate_names,
)

logger = logging.getLogger(__name__)


class TwoStageResult(EffectResult):
    """
    The result of a hand-rolled two-stage least squares fit.

    ``effect`` is the second-stage coefficient on fitted treatment. It is
    the 2SLS point estimate and matches a library IV routine exactly.

    ``std_err`` is what the second-stage OLS reports. It is **not** a valid
    2SLS standard error: the second stage computes residuals from fitted
    treatment rather than actual treatment, so the error variance is
    misestimated. ``corrected_std_err`` applies the textbook fix.
    """

    def __init__(
        self,
        first_stage,
        second_stage,
        treatment: str,
        outcome: str,
        instrument: str,
        covariates: list[str],
    ) -> None:
        super().__init__(second_stage, f"{treatment}_hat", treatment, outcome)
        self._first_stage = first_stage
        self._instrument = instrument
        self._covariates = covariates

    @property
    def corrected_std_err(self) -> float:
        """
        2SLS standard error with residuals computed from actual treatment.

        With ``b`` the 2SLS estimate, the structural residual is
        ``y - X b`` using observed treatment, which equals the second-stage
        residual minus ``b`` times the first-stage residual. The naive
        standard error is rescaled by the ratio of the two error variances.
        """
        second = self._result
        b = self.effect
        first_resid = self._first_stage.resid.reindex(second.resid.index)
        structural_resid = np.asarray(second.resid - b * first_resid)
        sigma2 = float(structural_resid @ structural_resid) / second.df_resid
        return self.std_err * float(np.sqrt(sigma2 / second.scale))

    @property
    def first_stage_f(self) -> float:
        """Partial F-statistic for the instrument in the first stage."""
        return _partial_f(self._first_stage, self._instrument)

    @property
    def first_stage_effect(self) -> float:
        """First-stage coefficient of the instrument on treatment."""
        return float(self._first_stage.params[self._instrument])

    @property
    def covariates(self) -> list[str]:
        """Covariates included in both stages."""
        return list(self._covariates)

    @property
    def first_stage_result(self):
        """The statsmodels OLS result of the first stage."""
        return self._first_stage

    @property
    def second_stage_result(self):
        """The statsmodels OLS result of the second stage."""
        return self._result

    @property
    def assumptions(self) -> list[Assumption]:
        """Modelling assumptions required for a causal interpretation."""
        return list(IV_ASSUMPTIONS)

    def diagnose(self, data: pd.DataFrame):
        """
        Run diagnostic checks against this fit.

        - **First-stage F-statistic**: instrument relevance.
        - **Manual vs library 2SLS**: refits ``data`` with the library IV
          routine and checks that the point estimates agree.
        - **Naive vs corrected std. error**: whether the second-stage
          standard error can be read as a 2SLS one. On the default forest
          design it cannot: first-stage noise inflates the naive value.

        Parameters
        ----------
        data : pd.DataFrame
            The same dataframe passed to ``fit()``.
        """
        from ..diagnostics import (
            DiagnosticReport,
            check_agreement,
            check_instrument_strength,
            check_standard_error,
        )
        from .iv import IV2SLS

        library = IV2SLS(
            self._treatment, self._outcome, self._instrument, self._covariates
        ).fit(data)
        checks = [
            check_instrument_strength(self.first_stage_f),
            check_agreement(self, library),
            check_standard_error(self.std_err, self.corrected_std_err),
        ]
        return DiagnosticReport(checks, self._treatment, self._outcome, self._instrument)

    def _header_lines(self) -> list[str]:
        return [
            f"Manual 2SLS Effect: {self._treatment} → {self._outcome}",
            f"  Instrument: {self._instrument}",
        ]

    def _extra_lines(self) -> list[str]:
        lines = [
            "",
            f"  Corrected std. error : {self.corrected_std_err:>10.4f}  (residuals from actual treatment)",
            f"  First-stage F        : {self.first_stage_f:>10.2f}",
            "",
            "  The std. error above is the naive second-stage value;",
            "  use the corrected one for inference.",
            "",
            "  Assumptions",
            "  " + "┄" * 48,
        ]
        lines += [f"  {a.fmt_tag()}  {a.name}" for a in IV_ASSUMPTIONS]
        return lines


class TwoStageLeastSquares:
    """
    Two-stage least squares, fitted by hand as two OLS regressions.

    1. **First stage**: regress treatment on the covariates and the
       instrument; keep the fitted values as ``<treatment>_hat``.
    2. **Second stage**: regress outcome on ``<treatment>_hat`` and the
       covariates. The coefficient on ``<treatment>_hat`` is the causal
       estimate.

    Fitted treatment varies only through the instrument and covariates, so
    it is purged of the unobserved confounder.

    Example::

        df = ForestProtectionDGP().generate(seed=0)
        result = TwoStageLeastSquares().fit(df)
        print(result.effect, result.std_err, result.corrected_std_err)
    """

    name = "Manual 2SLS"

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

    def fit(self, data: pd.DataFrame) -> TwoStageResult:
        """
        Run both stages on ``data``.

        Raises
        ------
        ValueError
            If a required column is missing.
        IdentificationError
            If treatment or instrument is constant in ``data``.

        Rows with a missing value in any model column are dropped before
        the first stage, so both stages use the same rows.
        """
        T, Y, Z = self._treatment, self._outcome, self._instrument
        require_columns(
            data,
            [("Treatment", T), ("Outcome", Y), ("Instrument", Z)]
            + [("Covariate", c) for c in self._covariates],
        )
        data = complete_cases(data, [T, Y, Z] + self._covariates)
        require_variation(data, "Treatment", T)
        require_variation(data, "Instrument", Z)

        first_rhs = " + ".join(self._covariates + [Z])
        first_stage = smf.ols(f"{T} ~ {first_rhs}", data=data).fit()

        fitted_col = f"{T}_hat"
        staged = data.assign(**{fitted_col: first_stage.fittedvalues})
        second_rhs = " + ".join([fitted_col] + self._covariates)
        second_stage = smf.ols(f"{Y} ~ {second_rhs}", data=staged).fit()

        result = TwoStageResult(first_stage, second_stage, T, Y, Z, self._covariates)
        logger.debug(
            "Manual 2SLS effect %.4f (naive se %.4f)", result.effect, result.std_err
        )
        return result
