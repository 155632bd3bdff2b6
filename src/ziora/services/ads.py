"""Ad cadence rules for gacha draws."""

import random
from dataclasses import dataclass, field, replace

from ziora.domain.draws import AdDecision, DrawState
from ziora.services.randomness import RandomSource

FORCED_AD_INTERVAL = 5
AD_ODDS = 5


@dataclass
class AdCadenceGate:
    """Decides whether a draw shows an ad instead of a photo.

    Rules, in order of precedence:

    1. never on the first draw of a session;
    2. never right after a draw that showed an ad;
    3. always on every fifth draw;
    4. otherwise one time in five.

    Rule 2 wins over rule 3, so a forced slot that directly follows an ad is
    skipped rather than moved to the next draw.
    """

    rng: RandomSource = field(default_factory=random.Random)
    ads_enabled: bool = True

    def decide(self, state: DrawState) -> AdDecision:
        """Count a draw and return whether it should show an ad."""
        draw_count = state.draw_count + 1
        counted = replace(state, draw_count=draw_count)
        if not self.ads_enabled or not self._should_show_ad(counted):
            return AdDecision(show_ad=False, state=counted)
        return AdDecision(
            show_ad=True, state=replace(counted, last_ad_draw_index=draw_count)
        )

    def _should_show_ad(self, state: DrawState) -> bool:
        if state.draw_count == 1:
            return False
        if state.draw_count - state.last_ad_draw_index == 1:
            return False
        if state.draw_count % FORCED_AD_INTERVAL == 0:
            return True
        return self.rng.randint(1, AD_ODDS) == 1
