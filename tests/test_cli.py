import pytest

from ivsim.cli import main


class TestCLI:
    def test_runs_all_estimators(self, capsys):
        assert main(["--replicates", "3", "--units", "200", "--seed", "1"]) == 0
        out = capsys.readouterr().out
        for name in ("OLS", "Manual 2SLS", "IV2SLS"):
            assert f"{name}: 3 replicates" in out
        assert "std_err" in out

    def test_selects_estimators(self, capsys):
        assert main(["--replicates", "2", "--units", "200", "--seed", "1", "--estimator", "OLS"]) == 0
        out = capsys.readouterr().out
        assert "OLS: 2 replicates" in out
        assert "IV2SLS" not in out

    def test_same_seed_same_output(self, capsys):
        args = ["--replicates", "2", "--units", "200", "--seed", "5"]
        main(args)
        first = capsys.readouterr().out
        main(args)
        assert capsys.readouterr().out == first

    def test_invalid_units_returns_error_code(self):
        assert main(["--units", "3", "--replicates", "1"]) == 2

    def test_invalid_replicates_returns_error_code(self):
        assert main(["--replicates", "0"]) == 2

    def test_negative_seed_returns_error_code(self):
        assert main(["--replicates", "1", "--units", "50", "--seed", "-1"]) == 2

    def test_unknown_estimator_exits(self):
        with pytest.raises(SystemExit):
            main(["--estimator", "lasso"])
