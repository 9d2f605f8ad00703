"""Effect application.

EFFECT_HANDLERS maps every EffectKind to exactly one handler. The module
refuses to import if a kind is missing, so adding a member to EffectKind
without a handler fails immediately rather than at the first matching turn.
"""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple

from label_tycoon.engine.ledger import TurnLedger
from label_tycoon.models import Artist, ChangeType, Effect, EffectKind

logger = logging.getLogger(__name__)


class EffectContext(NamedTuple):
    source: str  # human-readable origin, e.g. "CEO meeting"
    change_type: ChangeType
    expense_category: str  # ExpenseBreakdown field for negative money
    artists: list[Artist]  # targets for artist_* effects


Handler = Callable[[TurnLedger, int, EffectContext], None]


def _money(ledger: TurnLedger, amount: int, ctx: EffectContext) -> None:
    if amount >= 0:
        ledger.earn(amount, ctx.change_type, f"{ctx.source}: +${amount:,}")
    else:
        ledger.spend(-amount, ctx.expense_category, ctx.change_type, f"{ctx.source}: -${-amount:,}")


def _reputation(ledger: TurnLedger, amount: int, ctx: EffectContext) -> None:
    applied = ledger.adjust_reputation(amount, ctx.source)
    ledger.log(ctx.change_type, f"{ctx.source}: reputation {applied:+d}", amount=applied)


def _creative_capital(ledger: TurnLedger, amount: int, ctx: EffectContext) -> None:
    state = ledger.state
    state.creative_capital = max(0, state.creative_capital + amount)
    ledger.log(ctx.change_type, f"{ctx.source}: creative capital {amount:+d}", amount=amount)


def _artist_stat(stat: str) -> Handler:
    def handler(ledger: TurnLedger, amount: int, ctx: EffectContext) -> None:
        if not ctx.artists:
            logger.debug("%s effect from %s has no target artist", stat, ctx.source)
            return
        for artist in ctx.artists:
            applied = ledger.adjust_artist(artist, stat, amount)
            ledger.log(
                ctx.change_type, f"{ctx.source}: {artist.name} {stat} {applied:+d}",
                amount=applied, artist_id=artist.id,
            )
    return handler


EFFECT_HANDLERS: dict[EffectKind, Handler] = {
    EffectKind.MONEY: _money,
    EffectKind.REPUTATION: _reputation,
    EffectKind.CREATIVE_CAPITAL: _creative_capital,
    EffectKind.ARTIST_MOOD: _artist_stat("mood"),
    EffectKind.ARTIST_LOYALTY: _artist_stat("loyalty"),
    EffectKind.ARTIST_ENERGY: _artist_stat("energy"),
    EffectKind.ARTIST_POPULARITY: _artist_stat("popularity"),
}

_missing = set(EffectKind) - set(EFFECT_HANDLERS)
if _missing:
    raise RuntimeError(f"No handler for effect kinds: {sorted(k.value for k in _missing)}")


def apply_effects(ledger: TurnLedger, effects: list[Effect], ctx: EffectContext) -> None:
    for effect in effects:
        EFFECT_HANDLERS[effect.kind](ledger, effect.amount, ctx)
