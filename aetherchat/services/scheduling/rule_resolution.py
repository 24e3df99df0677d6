# aetherchat/services/scheduling/rule_resolution.py
"""
Effective scheduling rules for one calendar date.

Three scopes contribute rules, in increasing precedence: global settings,
branch, product. Inside each scope a specific-day rule for the exact date
overrides that scope's weekly/base values. Value fields (working hours,
staff, duration) come from the highest scope that defines them. Off-days are
an OR across scopes, except that an explicit ``is_off`` on a specific-day rule
decides for its own scope and every lower one.
"""
import logging
import warnings
from datetime import date
from typing import Any, List, Optional, Sequence, Tuple, Union

from aetherchat.core.exceptions import AmbiguousRuleWarning
from aetherchat.schemas.scheduling import SchedulingContext, SchedulingScope, SpecificDayRule
from aetherchat.services.scheduling.time_slots import (
    format_date,
    parse_date,
    parse_time,
    weekday_index,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKING_HOURS = [f"{hour:02d}:00" for hour in range(9, 18)]  # hourly starts 09:00..17:00
DEFAULT_NUMBER_OF_STAFF = 1
DEFAULT_SERVICE_DURATION_MINUTES = 60
DEFAULT_WEEKLY_OFF_DAYS = [0, 6]  # Sunday, Saturday

SYSTEM_DEFAULTS = SchedulingScope(
    working_hours=DEFAULT_WORKING_HOURS,
    weekly_off_days=DEFAULT_WEEKLY_OFF_DAYS,
    one_time_off_dates=[],
    number_of_staff=DEFAULT_NUMBER_OF_STAFF,
    service_duration_minutes=DEFAULT_SERVICE_DURATION_MINUTES,
)

ScopeInput = Union[SchedulingScope, dict, None]


def _as_scope(scope: ScopeInput) -> Optional[SchedulingScope]:
    if scope is None or isinstance(scope, SchedulingScope):
        return scope
    return SchedulingScope.model_validate(scope)


def find_specific_day_rule(
        rules: Sequence[SpecificDayRule],
        date_str: str,
        scope_name: str = "scope"
) -> Optional[SpecificDayRule]:
    """Return the rule for date_str; with duplicates, the last stored one wins"""
    matches = [rule for rule in rules if rule.date == date_str]
    if not matches:
        return None

    if len(matches) > 1:
        message = (
            f"{len(matches)} specific-day rules for {date_str} in {scope_name}; "
            f"using the last one"
        )
        logger.warning(message)
        warnings.warn(message, AmbiguousRuleWarning, stacklevel=2)

    return matches[-1]


def _pick(rule: Optional[SpecificDayRule], scope: SchedulingScope, field: str) -> Any:
    if rule is not None and getattr(rule, field, None) is not None:
        return getattr(rule, field)
    return getattr(scope, field, None)


def _first_defined(values: List[Any], default: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def _resolve_is_off(
        target: date,
        date_str: str,
        chain: List[Tuple[str, SchedulingScope, Optional[SpecificDayRule]]],
        weekly_fallback: Optional[List[int]]
) -> bool:
    """Walk scopes from highest to lowest precedence"""
    weekday = weekday_index(target)
    off_by_higher_scope = False

    for name, scope, rule in chain:
        if rule is not None and rule.is_off is not None:
            if off_by_higher_scope and not rule.is_off:
                logger.debug(f"{name} opens {date_str} but a higher scope marks it off")
            return off_by_higher_scope or rule.is_off

        if scope.weekly_off_days and weekday in scope.weekly_off_days:
            off_by_higher_scope = True
        if scope.one_time_off_dates and date_str in scope.one_time_off_dates:
            off_by_higher_scope = True

    if weekly_fallback and weekday in weekly_fallback:
        return True

    return off_by_higher_scope


def resolve_scheduling_context(
        target_date: Union[str, date],
        global_scope: ScopeInput,
        branch_scope: ScopeInput = None,
        product_scope: ScopeInput = None
) -> SchedulingContext:
    """
    Resolve the fully populated scheduling context for target_date.

    Never fails on missing optional fields; raises InvalidDate or
    InvalidTimeFormat on malformed input.
    """
    if isinstance(target_date, date):
        target = target_date
        date_str = format_date(target_date)
    else:
        target = parse_date(target_date)
        date_str = target_date

    scopes = [
        ("product", _as_scope(product_scope)),
        ("branch", _as_scope(branch_scope)),
        ("global", _as_scope(global_scope)),
    ]

    # Highest precedence first
    chain = [
        (name, scope, find_specific_day_rule(scope.specific_day_rules, date_str, name))
        for name, scope in scopes
        if scope is not None
    ]

    working_hours = _first_defined(
        [_pick(rule, scope, "working_hours") for _, scope, rule in chain],
        DEFAULT_WORKING_HOURS,
    )
    number_of_staff = _first_defined(
        [_pick(rule, scope, "number_of_staff") for _, scope, rule in chain],
        DEFAULT_NUMBER_OF_STAFF,
    )
    service_duration = _first_defined(
        [_pick(rule, scope, "service_duration_minutes") for _, scope, rule in chain],
        DEFAULT_SERVICE_DURATION_MINUTES,
    )

    for slot in working_hours:
        parse_time(slot)

    defined_weekly = [scope.weekly_off_days for _, scope, _ in chain if scope.weekly_off_days is not None]
    weekly_fallback = None if defined_weekly else DEFAULT_WEEKLY_OFF_DAYS

    is_off = _resolve_is_off(target, date_str, chain, weekly_fallback)

    weekly_off_days = sorted({day for days in defined_weekly for day in days}) if defined_weekly \
        else list(DEFAULT_WEEKLY_OFF_DAYS)
    one_time_off_dates = sorted({
        d for _, scope, _ in chain for d in (scope.one_time_off_dates or [])
    })

    context = SchedulingContext(
        date=date_str,
        is_off=is_off,
        working_hours=list(working_hours),
        number_of_staff=number_of_staff,
        service_duration_minutes=service_duration,
        weekly_off_days=weekly_off_days,
        one_time_off_dates=one_time_off_dates,
        specific_day_rules=[rule for _, _, rule in chain if rule is not None],
    )

    logger.debug(
        f"Resolved {date_str}: off={context.is_off}, slots={len(context.working_hours)}, "
        f"staff={context.number_of_staff}, duration={context.service_duration_minutes}"
    )
    return context


# ============================================================================
# Persisted record -> scope
# ============================================================================

def scope_from_app_settings(settings) -> Optional[SchedulingScope]:
    if settings is None:
        return None
    return SchedulingScope(
        working_hours=settings.working_hours,
        weekly_off_days=settings.weekly_off_days,
        one_time_off_dates=settings.one_time_off_dates,
        specific_day_rules=settings.specific_day_rules or [],
        number_of_staff=settings.number_of_staff,
        service_duration_minutes=settings.default_service_duration_minutes,
    )


def scope_from_branch(branch) -> Optional[SchedulingScope]:
    if branch is None:
        return None
    return SchedulingScope(
        working_hours=branch.working_hours,
        weekly_off_days=branch.off_days,
        specific_day_rules=branch.specific_day_overrides or [],
        number_of_staff=branch.number_of_staff,
    )


def scope_from_product(product) -> Optional[SchedulingScope]:
    if product is None:
        return None
    return SchedulingScope.model_validate(product.scheduling_rules or {})


def validate_scope(scope: ScopeInput) -> Optional[SchedulingScope]:
    """
    Strict check of every time and date string a scope carries, for write
    paths. Raises InvalidTimeFormat / InvalidDate.
    """
    scope = _as_scope(scope)
    if scope is None:
        return None

    for slot in scope.working_hours or []:
        parse_time(slot)
    for date_str in scope.one_time_off_dates or []:
        parse_date(date_str)
    for rule in scope.specific_day_rules:
        for slot in rule.working_hours or []:
            parse_time(slot)
    return scope
