"""Jinja2 template pools for MVP descriptions.

One pool per :class:`MvpPattern`, plus a pool for rounds with no MVP.
Templates receive ``name``, ``hits``, ``attempts``, ``accuracy``,
``damage``, ``crits``, ``healing`` and ``fumbles``; numbers go through the
``number`` filter for digit grouping.
"""

from __future__ import annotations

from jinja2 import DictLoader, Environment, StrictUndefined

from combat_telemetry.models.summary import MvpPattern

NO_MVP_POOL = "no_mvp"

TEMPLATE_POOLS: dict[str, list[str]] = {
    MvpPattern.COMBAT_EXCELLENCE.value: [
        "{{ name }} landed {{ hits|number }} of {{ attempts|number }} attacks "
        "({{ accuracy }}%) with {{ crits|number }} critical strike(s) for "
        "{{ damage|number }} damage.",
        "Clinical work from {{ name }}: {{ accuracy }}% accuracy, "
        "{{ crits|number }} crit(s), {{ damage|number }} damage dealt.",
        "{{ name }} found the gaps in every guard, {{ hits|number }} hits "
        "and {{ crits|number }} critical(s) this round.",
        "Nothing got past {{ name }}: {{ hits|number }}/{{ attempts|number }} "
        "on target and {{ damage|number }} damage.",
        "{{ name }} set the pace with {{ crits|number }} critical hit(s) and "
        "a {{ accuracy }}% hit rate.",
    ],
    MvpPattern.DAMAGE.value: [
        "{{ name }} hit hard: {{ damage|number }} damage across "
        "{{ hits|number }} hit(s).",
        "{{ damage|number }} damage from {{ name }} this round.",
        "{{ name }} turned {{ hits|number }} hit(s) into {{ damage|number }} "
        "points of damage.",
        "Heavy blows from {{ name }}, {{ damage|number }} damage in total.",
        "{{ name }} led the damage with {{ damage|number }}.",
    ],
    MvpPattern.PRECISION.value: [
        "{{ name }} did not miss: {{ hits|number }}/{{ attempts|number }} "
        "({{ accuracy }}%).",
        "Perfect aim from {{ name }}, {{ accuracy }}% of attacks landed.",
        "{{ name }} connected on {{ hits|number }} of {{ attempts|number }} "
        "attempts.",
        "Steady hands: {{ name }} hit at {{ accuracy }}%.",
        "{{ name }} made every swing count ({{ accuracy }}% accuracy).",
    ],
    MvpPattern.MIXED.value: [
        "{{ name }} stumbled {{ fumbles|number }} time(s) but still dealt "
        "{{ damage|number }} damage.",
        "A messy round for {{ name }}: {{ fumbles|number }} fumble(s), "
        "{{ damage|number }} damage anyway.",
        "{{ name }} recovered from {{ fumbles|number }} fumble(s) to deal "
        "{{ damage|number }} damage.",
        "Not pretty, but {{ name }} got {{ damage|number }} damage in.",
        "{{ name }} fumbled, shrugged, and dealt {{ damage|number }} damage.",
    ],
    NO_MVP_POOL: [
        "No one stood out this round.",
        "A quiet round: nobody earned the spotlight.",
        "Everyone held back this round; no MVP.",
        "The round passed without a standout performance.",
        "No MVP this round. Maybe next time.",
    ],
}


def format_number(value: float | int) -> str:
    """Group digits with commas (``12345`` -> ``"12,345"``)."""
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.1f}"
    return f"{int(value):,}"


def template_name(pool: str, index: int) -> str:
    return f"{pool}/{index}"


def build_environment(pools: dict[str, list[str]] | None = None) -> Environment:
    """Create a Jinja2 environment holding every template of *pools*.

    Templates are registered as ``<pool>/<index>``.  Undefined variables
    raise instead of rendering as empty strings.
    """
    pools = TEMPLATE_POOLS if pools is None else pools
    mapping = {
        template_name(pool, i): source
        for pool, sources in pools.items()
        for i, source in enumerate(sources)
    }
    env = Environment(loader=DictLoader(mapping), undefined=StrictUndefined)
    env.filters["number"] = format_number
    return env
