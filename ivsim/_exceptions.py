class IdentificationError(Exception):
    """
    Raised when the data cannot identify the treatment effect.

    This covers a treatment or instrument column with no variation: with a
    constant treatment there is nothing to compare, and with a constant
    instrument the first stage has no excluded regressor to move treatment.
    Numerical failures raised by statsmodels or numpy themselves (e.g. a
    singular design) are not wrapped and propagate unchanged.
    """
    pass
