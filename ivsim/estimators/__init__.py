from .ols import OLS
from .two_stage import TwoStageLeastSquares
from .iv import IV2SLS

__all__ = ["OLS", "TwoStageLeastSquares", "IV2SLS"]
