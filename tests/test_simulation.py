import numpy as np
import pytest

from ivsim import (
    IV2SLS,
    OLS,
    ForestProtectionDGP,
    MonteCarlo,
    TwoStageLeastSquares,
    default_estimators,
)
from ivsim.simulation import SimulationResult

N_REPLICATES = 200  # enough to pin the mean down to a few hundredths


@pytest.fixture(scope="module")
def report():
    return MonteCarlo(default_estimators(), n_replicates=N_REPLICATES, seed=2024).run()


class TestMonteCarloValidation:
    def test_zero_replicates_raises(self):
        with pytest.raises(ValueError, match="n_replicates"):
            MonteCarlo(OLS(), n_replicates=0)

    def test_empty_estimators_raises(self):
        with pytest.raises(ValueError, match="At least one estimator"):
            MonteCarlo({})

    def test_negative_seed_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            MonteCarlo(OLS(), seed=-1)

    def test_duplicate_names_raise(self):
        with pytest.raises(ValueError, match="Duplicate estimator name 'OLS'"):
            MonteCarlo([OLS(), OLS()])

    def test_single_estimator_named_by_attribute(self):
        mc = MonteCarlo(IV2SLS(), n_replicates=2, seed=0)
        assert mc.run().names == ["IV2SLS"]

    def test_defaults(self):
        mc = MonteCarlo(OLS())
        assert mc.n_replicates == 1_000
        assert mc.dgp == ForestProtectionDGP()


class TestMonteCarloEstimates:
    def test_default_estimator_names(self, report):
        assert report.names == ["OLS", "Manual 2SLS", "IV2SLS"]
        assert len(report) == 3

    def test_ols_biased_away_from_true_effect(self, report):
        assert report["OLS"].mean_effect > 6.0
        assert report["OLS"].bias > 1.0

    @pytest.mark.parametrize("name", ["Manual 2SLS", "IV2SLS"])
    def test_iv_estimators_centered_on_true_effect(self, report, name):
        assert abs(report[name].bias) < 0.1

    def test_manual_and_library_agree_per_replicate(self, report):
        assert report.max_abs_difference("Manual 2SLS", "IV2SLS") < 1e-6

    def test_library_std_err_matches_spread_of_estimates(self, report):
        iv = report["IV2SLS"]
        spread = iv.effects.std(ddof=1)
        assert iv.std_errs.mean() == pytest.approx(spread, rel=0.2)

    def test_naive_manual_std_err_exceeds_library(self, report):
        assert report["Manual 2SLS"].std_errs.mean() > report["IV2SLS"].std_errs.mean()

    def test_ols_less_variable_than_iv(self, report):
        assert report["OLS"].effects.std() < report["IV2SLS"].effects.std()


class TestSummaries:
    def test_describe_layout(self, report):
        table = report["OLS"].describe()
        assert list(table.index) == ["effect", "std_err"]
        assert list(table.columns) == ["mean", "std", "min", "max"]
        effects = report["OLS"].effects
        assert table.loc["effect", "mean"] == pytest.approx(effects.mean())
        assert table.loc["effect", "std"] == pytest.approx(effects.std(ddof=1))
        assert table.loc["effect", "min"] == effects.min()
        assert table.loc["effect", "max"] == effects.max()

    def test_table_stacks_all_estimators(self, report):
        table = report.table()
        assert table.index.names == ["estimator", "statistic"]
        assert len(table) == 6
        assert table.loc[("IV2SLS", "std_err"), "mean"] == pytest.approx(
            report["IV2SLS"].std_errs.mean()
        )

    def test_to_frame(self, report):
        frame = report["IV2SLS"].to_frame()
        assert list(frame.columns) == ["effect", "std_err"]
        assert len(frame) == N_REPLICATES

    def test_summary_text(self, report):
        text = report.summary()
        for name in ("OLS", "Manual 2SLS", "IV2SLS"):
            assert f"{name}: {N_REPLICATES} replicates" in text
        assert "Bias" in text

    def test_effects_returns_copy(self, report):
        report["OLS"].effects[:] = 0
        assert report["OLS"].effects.mean() > 6.0


class TestReproducibility:
    def test_same_seed_same_estimates(self):
        dgp = ForestProtectionDGP(n_units=200)
        first = MonteCarlo(OLS(), dgp=dgp, n_replicates=5, seed=7).run()
        second = MonteCarlo(OLS(), dgp=dgp, n_replicates=5, seed=7).run()
        np.testing.assert_array_equal(first["OLS"].effects, second["OLS"].effects)
        np.testing.assert_array_equal(first["OLS"].std_errs, second["OLS"].std_errs)

    def test_different_seeds_differ(self):
        dgp = ForestProtectionDGP(n_units=200)
        first = MonteCarlo(OLS(), dgp=dgp, n_replicates=5, seed=7).run()
        second = MonteCarlo(OLS(), dgp=dgp, n_replicates=5, seed=8).run()
        assert not np.array_equal(first["OLS"].effects, second["OLS"].effects)

    def test_replicates_are_distinct_datasets(self):
        result = MonteCarlo(OLS(), dgp=ForestProtectionDGP(n_units=200), n_replicates=5, seed=1).run()
        assert len(set(result["OLS"].effects)) == 5

    def test_estimators_see_same_datasets(self):
        """Running an estimator alone or alongside others yields the same draws."""
        dgp = ForestProtectionDGP(n_units=200)
        alone = MonteCarlo(TwoStageLeastSquares(), dgp=dgp, n_replicates=4, seed=3).run()
        together = MonteCarlo(
            {"ols": OLS(), "2sls": TwoStageLeastSquares()}, dgp=dgp, n_replicates=4, seed=3
        ).run()
        np.testing.assert_array_equal(alone["Manual 2SLS"].effects, together["2sls"].effects)


class TestSimulationResult:
    def test_bias_against_true_effect(self):
        result = SimulationResult("x", np.array([4.0, 6.0, 8.0]), np.array([1.0, 1.0, 1.0]), 5.0)
        assert result.mean_effect == 6.0
        assert result.bias == 1.0
        assert result.n_replicates == 3
        assert result.describe().loc["std_err", "std"] == 0.0
