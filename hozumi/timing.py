"""Speed tiers and the hold durations they stand for."""

from collections import namedtuple

DEFAULT_TIER = 'middle'

# Seconds per step: (row interval, letter interval)
TIERS = {
    'low': (0.600, 0.270),
    'middle': (0.300, 0.180),
    'high': (0.150, 0.090),
}

COOL_INTERVAL = 0.010

TimingProfile = namedtuple('TimingProfile', ['tier', 'row', 'letter', 'cool'])


class InvalidTier(ValueError):
    def __init__(self, tier):
        super().__init__(f"Unknown speed tier: {tier!r}")
        self.tier = tier


def resolve(tier):
    """Map a tier name to a TimingProfile.

    An empty name falls back to the default tier; any other unknown name
    raises InvalidTier.
    """
    if not tier:
        tier = DEFAULT_TIER
    try:
        row, letter = TIERS[tier]
    except KeyError:
        raise InvalidTier(tier) from None
    return TimingProfile(tier, row, letter, COOL_INTERVAL)
