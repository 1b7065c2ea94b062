from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd
import statsmodels.formula.api as smf

logger = logging.getLogger(__name__)

FIRST_STAGE_F_THRESHOLD = 10.0
AGREEMENT_TOLERANCE = 1e-6
SE_RATIO_TOLERANCE = 0.1


@dataclass(frozen=True)
class Assumption:
    """
    A single modelling assumption required for causal identification.

    IV results expose their assumptions via ``result.assumptions``. Each
    assumption has a human-readable name and a ``testable`` flag indicating
    whether it can be checked in the data or must be argued from knowledge
    of how the data were generated.
    """

    name: str
    """Human-readable description of the assumption."""

    testable: bool
    """``True`` if the assumption can be empirically checked."""

    def fmt_tag(self) -> str:
        """Fixed-width bracketed testability label for summary output."""
        return "[  testable  ]" if self.testable else "[ untestable ]"


IV_ASSUMPTIONS: list[Assumption] = [
    Assumption("Relevance: the instrument shifts who gets treated", testable=True),
    Assumption("Exclusion restriction: the instrument moves the outcome only via treatment", testable=False),
    Assumption("Independence: the instrument is unrelated to unobserved confounders and the error", testable=False),
    Assumption("Monotonicity: no unit is made less likely to be treated by the instrument", testable=False),
]


class DiagnosticCheck:
    """
    Result of a single diagnostic check.

    ``value`` is the statistic the verdict was based on (an F-statistic, a
    gap between estimates, a ratio of standard errors).
    """

    def __init__(
        self, name: str, passed: bool, detail: str, value: float | None = None
    ) -> None:
        self.name = name
        self.passed = passed
        self.detail = detail
        self.value = value

    def __repr__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"DiagnosticCheck({status!r}, {self.name!r})"


class DiagnosticReport:
    """
    A set of diagnostic checks run against one IV fit.

    Obtain via ``TwoStageResult.diagnose(data)`` or ``IVResult.diagnose(data)``.
    Each check is a ``DiagnosticCheck`` in ``.checks``; the overall verdict
    is ``.passed``.
    """

    def __init__(
        self,
        checks: list[DiagnosticCheck],
        treatment: str,
        outcome: str,
        instrument: str,
    ) -> None:
        self._checks = checks
        self._treatment = treatment
        self._outcome = outcome
        self._instrument = instrument

    @property
    def checks(self) -> list[DiagnosticCheck]:
        """All checks, in the order they were run."""
        return list(self._checks)

    @property
    def passed(self) -> bool:
        """``True`` if every check passed."""
        return all(c.passed for c in self._checks)

    @property
    def failed_checks(self) -> list[DiagnosticCheck]:
        """Only the checks that did not pass."""
        return [c for c in self._checks if not c.passed]

    def summary(self) -> str:
        lines = [
            "",
            f"IV Diagnostics: {self._treatment} → {self._outcome}",
            f"  Instrument: {self._instrument}",
            "─" * 50,
        ]
        for check in self._checks:
            status = "PASS" if check.passed else "FAIL"
            lines.append(f"  [{status}]  {check.name}: {check.detail}")
        lines.append("")
        if self.passed:
            lines.append("  All checks passed.")
        else:
            lines.append(f"  {len(self.failed_checks)} check(s) failed — see above.")
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()


def first_stage_f(
    data: pd.DataFrame,
    treatment: str,
    instrument: str,
    covariates: list[str],
) -> float:
    """
    Partial F-statistic for the instrument in the first stage
    (``H0: instrument coefficient = 0``).

    The partial F rather than the overall model F is used so the statistic
    only reflects the excluded instrument, not the covariates.
    """
    rhs = " + ".join(list(covariates) + [instrument])
    first_stage = smf.ols(f"{treatment} ~ {rhs}", data=data).fit()
    return _partial_f(first_stage, instrument)


def _partial_f(first_stage, instrument: str) -> float:
    return float(first_stage.f_test(f"{instrument} = 0").fvalue)


def check_instrument_strength(
    f_stat: float, threshold: float = FIRST_STAGE_F_THRESHOLD
) -> DiagnosticCheck:
    """
    Compare a first-stage F-statistic against the weak-instrument threshold.

    Conventional rule of thumb: ``F < 10`` indicates a weak instrument
    (Stock & Yogo, 2005).
    """
    passed = f_stat >= threshold
    detail = f"F = {f_stat:.2f}  (threshold: F ≥ {threshold:.0f})"
    if not passed:
        detail += (
            "  Weak instrument detected — the instrument explains little "
            "variation in treatment. IV estimates may be severely biased "
            "and confidence intervals unreliable."
        )
    return DiagnosticCheck(
        name="First-stage F-statistic", passed=passed, detail=detail, value=f_stat
    )


def check_agreement(
    manual_result, library_result, tolerance: float = AGREEMENT_TOLERANCE
) -> DiagnosticCheck:
    """
    Cross-validate a manual 2SLS fit against the library IV fit on the
    same data.

    Both compute the same estimator, so their point estimates must match up
    to floating-point error. ``tolerance`` is relative to the size of the
    library estimate (absolute when that estimate is below 1).
    """
    gap = abs(manual_result.effect - library_result.effect)
    scale = max(1.0, abs(library_result.effect))
    passed = gap <= tolerance * scale
    logger.debug("manual vs library 2SLS gap: %.3e", gap)

    detail = (
        f"manual = {manual_result.effect:.6f}, library = {library_result.effect:.6f}  "
        f"(|diff| = {gap:.2e})"
    )
    if not passed:
        detail += "  Manual two-stage estimate does not reproduce the library fit."
    return DiagnosticCheck(
        name="Manual vs library 2SLS", passed=passed, detail=detail, value=gap
    )


def check_standard_error(
    naive_se: float, corrected_se: float, tolerance: float = SE_RATIO_TOLERANCE
) -> DiagnosticCheck:
    """
    Compare the naive second-stage standard error of a manual 2SLS fit with
    the corrected one.

    The naive value uses residuals built from fitted treatment. It passes
    when the ratio ``naive / corrected`` lies within ``1 ± tolerance``, i.e.
    when reading the naive value off the second stage would not misstate the
    uncertainty of the 2SLS estimate.
    """
    ratio = naive_se / corrected_se
    passed = abs(ratio - 1.0) <= tolerance
    detail = (
        f"naive = {naive_se:.4f}, corrected = {corrected_se:.4f}  "
        f"(ratio = {ratio:.2f}, allowed 1 ± {tolerance:g})"
    )
    if not passed:
        direction = "overstates" if ratio > 1 else "understates"
        detail += (
            f"  The naive second-stage std. error {direction} 2SLS uncertainty; "
            f"use corrected_std_err for inference."
        )
    return DiagnosticCheck(
        name="Naive vs corrected std. error", passed=passed, detail=detail, value=ratio
    )
