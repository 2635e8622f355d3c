"""Render MVP descriptions from the template pools."""

from __future__ import annotations

import logging

from jinja2 import Environment

from combat_telemetry.core.rng import TelemetryRNG
from combat_telemetry.models.summary import MvpPattern
from combat_telemetry.mvp.patterns import DescriptionStats
from combat_telemetry.mvp.templates import (
    NO_MVP_POOL,
    TEMPLATE_POOLS,
    build_environment,
    template_name,
)

logger = logging.getLogger(__name__)


class DescriptionGenerator:
    """Pick a template uniformly at random from a pool and render it.

    Parameters
    ----------
    rng:
        Source of template choices.  Pass a seeded RNG for reproducible
        text; the default is unseeded.
    pools:
        Template sources per pool name.  Defaults to :data:`TEMPLATE_POOLS`.
    """

    def __init__(
        self,
        rng: TelemetryRNG | None = None,
        pools: dict[str, list[str]] | None = None,
    ) -> None:
        self._rng = rng or TelemetryRNG()
        self._pools = TEMPLATE_POOLS if pools is None else pools
        self._env: Environment = build_environment(self._pools)
        for pool in [p.value for p in MvpPattern] + [NO_MVP_POOL]:
            if not self._pools.get(pool):
                raise ValueError(f"Template pool {pool!r} is empty")

    def describe(
        self,
        name: str,
        stats: DescriptionStats,
        pattern: MvpPattern | None,
    ) -> str:
        """Render a description for *name*; ``None`` uses the no-MVP pool."""
        pool = NO_MVP_POOL if pattern is None else pattern.value
        return self._render(pool, name, stats)

    def describe_no_mvp(self) -> str:
        return self._render(NO_MVP_POOL, "", DescriptionStats())

    def _render(self, pool: str, name: str, stats: DescriptionStats) -> str:
        index = self._rng.random_choice(range(len(self._pools[pool])))
        template = self._env.get_template(template_name(pool, index))
        text = template.render(
            name=name,
            hits=stats.hits,
            attempts=stats.attempts,
            accuracy=stats.accuracy,
            damage=stats.damage,
            crits=stats.crits,
            healing=stats.healing,
            fumbles=stats.fumbles,
        )
        logger.debug("Rendered %s template %d for %r", pool, index, name)
        return text
