from .dgp import ForestProtectionDGP, TRUE_EFFECT
from .estimators.ols import OLS, OLSResult
from .estimators.two_stage import TwoStageLeastSquares, TwoStageResult
from .estimators.iv import IV2SLS, IVResult
from .simulation import MonteCarlo, MonteCarloReport, SimulationResult, default_estimators
from .diagnostics import Assumption, DiagnosticCheck, DiagnosticReport
from ._exceptions import IdentificationError

__all__ = [
    "ForestProtectionDGP", "TRUE_EFFECT",
    "OLS", "OLSResult",
    "TwoStageLeastSquares", "TwoStageResult",
    "IV2SLS", "IVResult",
    "MonteCarlo", "MonteCarloReport", "SimulationResult", "default_estimators",
    "Assumption", "DiagnosticCheck", "DiagnosticReport",
    "IdentificationError",
]
