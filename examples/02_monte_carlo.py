"""
Distribution of OLS, manual 2SLS and library IV estimates over 1000
simulated datasets.

OLS is centred well above the true effect of 5.0; both 2SLS estimates are
centred on it. The manual and library 2SLS point estimates agree replicate
by replicate, while their standard errors differ: the manual one is the
naive second-stage value.
"""

from ivsim import MonteCarlo, default_estimators

report = MonteCarlo(default_estimators(), n_replicates=1_000, seed=0).run()
print(report.summary())

gap = report.max_abs_difference("Manual 2SLS", "IV2SLS")
print(f"Largest manual vs library gap across replicates: {gap:.2e}")
