"""
Synthetic forest-protection data with a known causal effect.

Each unit is a forest plot. Protection (the treatment) is more likely on
remote plots, and remote plots keep more forest cover regardless of
protection, so ``remote`` confounds the effect of ``protected`` on
``forest_cover``. ``remote`` is not something an analyst would observe.

Being inside a conservation ``priority_zone`` makes protection more likely
but has no direct effect on forest cover, and is drawn independently of
``remote`` and of the error term. It is a valid instrument.

DGP::

    priority_zone ~ Bernoulli(0.5)                      [instrument]
    remote        ~ Bernoulli(0.5)                      [unobserved confounder]
    score         = priority_zone + remote + N(0, 0.5)
    protected     = 1 for the n_units // 2 highest scores, else 0
    slope         ~ U(0, 30)
    elevation     ~ U(0, 2)
    road_distance ~ U(0, 50)
    error         ~ N(0, 1)
    forest_cover  = 10 + 5*protected + 0.1*slope + 1.5*elevation
                    + 0.05*road_distance + 3*remote + error
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

N_UNITS = 1_000
TRUE_EFFECT = 5.0

TREATMENT = "protected"
OUTCOME = "forest_cover"
INSTRUMENT = "priority_zone"
CONFOUNDER = "remote"
ERROR = "error"
COVARIATES: tuple[str, ...] = ("slope", "elevation", "road_distance")

_MIN_UNITS = 10


@dataclass(frozen=True)
class ForestProtectionDGP:
    """
    Data-generating process for one simulated observational dataset.

    All coefficients and ranges are fixed at construction; ``generate()``
    draws a new, independent dataset on every call. Override any field to
    explore a different design::

        dgp = ForestProtectionDGP(n_units=5_000, confounder_effect=6.0)
        df = dgp.generate(seed=0)
    """

    n_units: int = N_UNITS
    """Number of plots in each dataset."""

    true_effect: float = TRUE_EFFECT
    """Causal effect of protection on forest cover."""

    intercept: float = 10.0
    slope_effect: float = 0.1
    elevation_effect: float = 1.5
    road_distance_effect: float = 0.05

    confounder_effect: float = 3.0
    """Direct effect of remoteness on forest cover (the source of OLS bias)."""

    instrument_strength: float = 1.0
    """Weight of the instrument in the treatment assignment score."""

    confounding_strength: float = 1.0
    """Weight of the confounder in the treatment assignment score."""

    assignment_noise: float = 0.5
    error_sd: float = 1.0

    slope_range: tuple[float, float] = (0.0, 30.0)
    elevation_range: tuple[float, float] = (0.0, 2.0)
    road_distance_range: tuple[float, float] = (0.0, 50.0)

    def __post_init__(self) -> None:
        if self.n_units < _MIN_UNITS:
            raise ValueError(
                f"n_units must be at least {_MIN_UNITS}, got {self.n_units}."
            )
        for label, (lo, hi) in [
            ("slope_range", self.slope_range),
            ("elevation_range", self.elevation_range),
            ("road_distance_range", self.road_distance_range),
        ]:
            if not lo < hi:
                raise ValueError(
                    f"{label} must have lower bound below upper bound, got ({lo}, {hi})."
                )
        if self.assignment_noise <= 0:
            raise ValueError("assignment_noise must be positive.")
        if self.error_sd <= 0:
            raise ValueError("error_sd must be positive.")

    @property
    def covariates(self) -> list[str]:
        """Observed exogenous covariates, in column order."""
        return list(COVARIATES)

    @property
    def n_treated(self) -> int:
        """Number of protected plots in every dataset."""
        return self.n_units // 2

    def generate(
        self, seed: int | np.random.SeedSequence | np.random.Generator | None = None
    ) -> pd.DataFrame:
        """
        Draw one dataset.

        Parameters
        ----------
        seed : int, SeedSequence, Generator or None
            Anything ``numpy.random.default_rng`` accepts. The same seed
            always yields an identical dataset; ``None`` draws fresh entropy.

        Returns
        -------
        pd.DataFrame
            One row per plot with the treatment, outcome, instrument,
            covariates, and the confounder and error terms that produced
            the outcome.
        """
        rng = np.random.default_rng(seed)
        n = self.n_units

        instrument = rng.binomial(1, 0.5, size=n)
        confounder = rng.binomial(1, 0.5, size=n)
        score = (
            self.instrument_strength * instrument
            + self.confounding_strength * confounder
            + rng.normal(scale=self.assignment_noise, size=n)
        )
        treatment = np.zeros(n, dtype=int)
        treatment[np.argsort(score)[n - self.n_treated:]] = 1

        slope = rng.uniform(*self.slope_range, size=n)
        elevation = rng.uniform(*self.elevation_range, size=n)
        road_distance = rng.uniform(*self.road_distance_range, size=n)
        error = rng.normal(scale=self.error_sd, size=n)

        outcome = (
            self.intercept
            + self.true_effect * treatment
            + self.slope_effect * slope
            + self.elevation_effect * elevation
            + self.road_distance_effect * road_distance
            + self.confounder_effect * confounder
            + error
        )

        return pd.DataFrame({
            TREATMENT: treatment,
            "slope": slope,
            "elevation": elevation,
            "road_distance": road_distance,
            CONFOUNDER: confounder,
            INSTRUMENT: instrument,
            ERROR: error,
            OUTCOME: outcome,
        })
