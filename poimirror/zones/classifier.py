"""Status classifier — pure function, locates a price among buy and sell zones."""

from dataclasses import dataclass
from typing import Iterable

from poimirror.zones.models import Side, Status, Zone


@dataclass(frozen=True)
class Classification:
    """Status of a price plus the zones that contain it."""

    status: Status
    active_buy: tuple[Zone, ...]
    active_sell: tuple[Zone, ...]

    @property
    def active(self) -> tuple[Zone, ...]:
        return self.active_buy + self.active_sell


def classify(zones: Iterable[Zone], price: float) -> Classification:
    """Classify *price* against *zones*.

    A zone is active when ``start <= price <= end``.  Both sides active is a
    conflict; one side active gives that side; nothing active is neutral.
    An empty zone list is always neutral.
    """
    active_buy: list[Zone] = []
    active_sell: list[Zone] = []
    for zone in zones:
        if not zone.contains(price):
            continue
        if zone.side is Side.BUY:
            active_buy.append(zone)
        else:
            active_sell.append(zone)

    if active_buy and active_sell:
        status = Status.CONFLICT
    elif active_buy:
        status = Status.BUY
    elif active_sell:
        status = Status.SELL
    else:
        status = Status.NEUTRAL

    return Classification(
        status=status,
        active_buy=tuple(active_buy),
        active_sell=tuple(active_sell),
    )
