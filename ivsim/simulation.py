"""
Monte Carlo comparison of treatment-effect estimators.

Each replicate draws a fresh dataset from the data-generating process and
fits every estimator to it, recording the point estimate and its standard
error. Across replicates the distribution of estimates shows which
estimators are centred on the true effect and which are biased.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np
import pandas as pd

from .dgp import ForestProtectionDGP
from .estimators import IV2SLS, OLS, TwoStageLeastSquares

logger = logging.getLogger(__name__)

N_REPLICATES = 1_000

_STATS = ["mean", "std", "min", "max"]


def default_estimators() -> dict:
    """The three estimators compared by default, keyed by display name."""
    return {
        OLS.name: OLS(),
        TwoStageLeastSquares.name: TwoStageLeastSquares(),
        IV2SLS.name: IV2SLS(),
    }


class SimulationResult:
    """
    Replicate-level estimates from one estimator.

    ``effects[i]`` and ``std_errs[i]`` come from the dataset drawn for
    replicate ``i``, which is the same dataset every other estimator in the
    run saw.
    """

    def __init__(
        self,
        name: str,
        effects: np.ndarray,
        std_errs: np.ndarray,
        true_effect: float,
    ) -> None:
        self._name = name
        self._effects = np.asarray(effects, dtype=float)
        self._std_errs = np.asarray(std_errs, dtype=float)
        self._true_effect = true_effect

    @property
    def name(self) -> str:
        """Display name of the estimator these draws came from."""
        return self._name

    @property
    def effects(self) -> np.ndarray:
        """Point estimate from each replicate."""
        return self._effects.copy()

    @property
    def std_errs(self) -> np.ndarray:
        """Reported standard error from each replicate."""
        return self._std_errs.copy()

    @property
    def n_replicates(self) -> int:
        """Number of datasets the estimator was fitted to."""
        return len(self._effects)

    @property
    def true_effect(self) -> float:
        """Effect built into the data-generating process."""
        return self._true_effect

    @property
    def mean_effect(self) -> float:
        return float(self._effects.mean())

    @property
    def bias(self) -> float:
        """Mean estimate minus the true effect."""
        return self.mean_effect - self._true_effect

    def to_frame(self) -> pd.DataFrame:
        """One row per replicate with columns ``effect`` and ``std_err``."""
        return pd.DataFrame({"effect": self._effects, "std_err": self._std_errs})

    def describe(self) -> pd.DataFrame:
        """
        Mean, standard deviation, minimum and maximum of the point estimates
        (row ``effect``) and of their standard errors (row ``std_err``).
        """
        return self.to_frame().agg(_STATS).T

    def summary(self) -> str:
        table = self.describe()
        lines = [
            "",
            f"{self._name}: {self.n_replicates} replicates",
            "─" * 50,
            f"  True effect          : {self._true_effect:>10.4f}",
            f"  Mean estimate        : {self.mean_effect:>10.4f}",
            f"  Bias                 : {self.bias:>+10.4f}",
            "",
            f"  {'':<10}" + "".join(f"{s:>10}" for s in _STATS),
        ]
        for row in ("effect", "std_err"):
            lines.append(
                f"  {row:<10}" + "".join(f"{table.loc[row, s]:>10.4f}" for s in _STATS)
            )
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()


class MonteCarloReport:
    """
    Results of a Monte Carlo run, one ``SimulationResult`` per estimator.

    Index by estimator name::

        report = MonteCarlo(default_estimators(), seed=0).run()
        report["OLS"].bias
    """

    def __init__(self, results: dict[str, SimulationResult], seed) -> None:
        self._results = results
        self._seed = seed

    def __getitem__(self, name: str) -> SimulationResult:
        return self._results[name]

    def __iter__(self):
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    @property
    def names(self) -> list[str]:
        """Estimator names in the order they were run."""
        return list(self._results)

    @property
    def seed(self):
        """The seed the run was started from (``None`` if unseeded)."""
        return self._seed

    def table(self) -> pd.DataFrame:
        """
        ``describe()`` of every estimator stacked into one frame, indexed by
        ``(estimator, statistic)`` where statistic is ``effect`` or ``std_err``.
        """
        return pd.concat(
            {name: result.describe() for name, result in self._results.items()},
            names=["estimator", "statistic"],
        )

    def max_abs_difference(self, first: str, second: str) -> float:
        """
        Largest per-replicate gap between two estimators' point estimates.

        Meaningful because every estimator is fitted to the same datasets.
        """
        return float(np.max(np.abs(self[first].effects - self[second].effects)))

    def summary(self) -> str:
        parts = [self._results[name].summary() for name in self._results]
        parts += ["", self.table().to_string(float_format=lambda v: f"{v:.4f}"), ""]
        return "\n".join(parts)

    def __repr__(self) -> str:
        return self.summary()


class MonteCarlo:
    """
    Repeat generate → fit for a set of estimators.

    Each replicate gets its own generator, spawned from a single
    ``SeedSequence(seed)``. Replicates are therefore statistically
    independent, a run is reproducible for a fixed seed, and all estimators
    are fitted to the same datasets.

    Parameters
    ----------
    estimators
        A single estimator, a sequence of estimators (named by their
        ``name`` attribute), or a mapping of display name to estimator.
        Anything with ``fit(data)`` returning an object with ``effect`` and
        ``std_err`` works.
    dgp : ForestProtectionDGP, optional
        Data-generating process; defaults to ``ForestProtectionDGP()``.
    n_replicates : int
        Number of datasets to draw.
    seed : int, optional
        Root seed. ``None`` draws fresh entropy.

    Example::

        report = MonteCarlo(default_estimators(), seed=0).run()
        print(report.table())
    """

    def __init__(
        self,
        estimators,
        dgp: ForestProtectionDGP | None = None,
        n_replicates: int = N_REPLICATES,
        seed: int | None = None,
    ) -> None:
        if n_replicates < 1:
            raise ValueError(f"n_replicates must be at least 1, got {n_replicates}.")
        if seed is not None and seed < 0:
            raise ValueError(f"seed must be a non-negative integer, got {seed}.")
        self._estimators = self._named(estimators)
        self._dgp = dgp if dgp is not None else ForestProtectionDGP()
        self._n_replicates = n_replicates
        self._seed = seed

    @staticmethod
    def _named(estimators) -> dict:
        if hasattr(estimators, "fit"):
            estimators = [estimators]
        if isinstance(estimators, Mapping):
            named = dict(estimators)
        else:
            named = {}
            for est in estimators:
                name = getattr(est, "name", type(est).__name__)
                if name in named:
                    raise ValueError(
                        f"Duplicate estimator name '{name}'. Pass a mapping to "
                        f"give each estimator a distinct name."
                    )
                named[name] = est
        if not named:
            raise ValueError("At least one estimator is required.")
        return named

    @property
    def dgp(self) -> ForestProtectionDGP:
        """Data-generating process each replicate is drawn from."""
        return self._dgp

    @property
    def n_replicates(self) -> int:
        """Number of datasets drawn per run."""
        return self._n_replicates

    def run(self) -> MonteCarloReport:
        """
        Draw ``n_replicates`` datasets and fit every estimator to each.

        Errors raised while fitting (e.g. a singular design) propagate
        unchanged.
        """
        n = self._n_replicates
        names = list(self._estimators)
        effects = {name: np.empty(n) for name in names}
        std_errs = {name: np.empty(n) for name in names}

        logger.info(
            "Running %d replicates of %d units for %s",
            n, self._dgp.n_units, ", ".join(names),
        )
        children = np.random.SeedSequence(self._seed).spawn(n)
        for i, child in enumerate(children):
            data = self._dgp.generate(child)
            for name, estimator in self._estimators.items():
                result = estimator.fit(data)
                effects[name][i] = result.effect
                std_errs[name][i] = result.std_err
            if (i + 1) % 100 == 0:
                logger.debug("Completed %d/%d replicates", i + 1, n)

        results = {
            name: SimulationResult(name, effects[name], std_errs[name], self._dgp.true_effect)
            for name in names
        }
        for name, result in results.items():
            logger.info("%s: mean estimate %.4f (bias %+.4f)", name, result.mean_effect, result.bias)
        return MonteCarloReport(results, self._seed)
