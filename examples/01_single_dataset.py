"""
OLS vs IV on a single simulated dataset.

Protection is more likely on remote plots, and remote plots keep more
forest cover anyway. Remoteness is unobserved, so OLS credits protection
with part of remoteness's effect. Being inside a conservation priority zone
shifts protection but not forest cover, which makes it a valid instrument.

    priority_zone → protected → forest_cover
                        ↑             ↑
    remote ─────────────┘─────────────┘

True effect of protection on forest cover: 5.0
"""

from ivsim import IV2SLS, OLS, ForestProtectionDGP, TwoStageLeastSquares

df = ForestProtectionDGP().generate(seed=0)

print(OLS().fit(df).summary())
print(TwoStageLeastSquares().fit(df).summary())
print(IV2SLS().fit(df).summary())
