import pytest

from ivsim import ForestProtectionDGP, IdentificationError, OLS
from ivsim.estimators.ols import OLSResult


def make_data(n_units=5_000, seed=11, **overrides):
    return ForestProtectionDGP(n_units=n_units, **overrides).generate(seed=seed)


class TestOLSValidation:
    def test_same_treatment_and_outcome_raises(self):
        with pytest.raises(ValueError, match="different variables"):
            OLS(treatment="forest_cover", outcome="forest_cover")

    def test_treatment_as_covariate_raises(self):
        with pytest.raises(ValueError, match="cannot also be a covariate"):
            OLS(covariates=["slope", "protected"])

    def test_missing_treatment_column_raises(self):
        df = make_data().drop(columns=["protected"])
        with pytest.raises(ValueError, match="Treatment column"):
            OLS().fit(df)

    def test_missing_outcome_column_raises(self):
        df = make_data().drop(columns=["forest_cover"])
        with pytest.raises(ValueError, match="Outcome column"):
            OLS().fit(df)

    def test_missing_covariate_column_raises(self):
        df = make_data().drop(columns=["elevation"])
        with pytest.raises(ValueError, match="Covariate column 'elevation'"):
            OLS().fit(df)

    def test_constant_treatment_raises(self):
        df = make_data().assign(protected=1)
        with pytest.raises(IdentificationError, match="Treatment 'protected'"):
            OLS().fit(df)


class TestOLSEstimation:
    def test_estimate_biased_upward(self):
        """The omitted confounder raises both protection and forest cover."""
        result = OLS().fit(make_data())
        assert result.effect > 6.0
        assert abs(result.effect - 5.0) > 1.0

    def test_no_confounding_recovers_true_effect(self):
        result = OLS().fit(make_data(confounder_effect=0.0))
        assert abs(result.effect - 5.0) < 0.15

    def test_controlling_for_confounder_recovers_true_effect(self):
        df = make_data()
        result = OLS(covariates=["slope", "elevation", "road_distance", "remote"]).fit(df)
        assert abs(result.effect - 5.0) < 0.15

    def test_result_has_expected_attributes(self):
        result = OLS().fit(make_data(n_units=1_000))
        assert isinstance(result, OLSResult)
        lo, hi = result.conf_int
        assert lo < result.effect < hi
        assert result.std_err > 0
        assert 0 <= result.pvalue <= 1
        assert result.n_obs == 1_000
        assert result.covariates == ["slope", "elevation", "road_distance"]
        assert result.statsmodels_result is not None

    def test_instrument_and_confounder_not_in_model(self):
        result = OLS().fit(make_data(n_units=1_000))
        params = set(result.statsmodels_result.params.index)
        assert "priority_zone" not in params
        assert "remote" not in params
        assert "protected" in params

    def test_summary_mentions_variables(self):
        summary = OLS().fit(make_data(n_units=1_000)).summary()
        assert "OLS Effect: protected → forest_cover" in summary
        assert "slope, elevation, road_distance" in summary
        assert repr(OLS().fit(make_data(n_units=1_000))) == summary


class TestOLSMissingValues:
    def test_rows_with_missing_model_values_dropped(self):
        df = make_data(n_units=1_000)
        df.loc[[0, 1], "forest_cover"] = float("nan")
        df.loc[2, "road_distance"] = float("nan")
        assert OLS().fit(df).n_obs == 997
