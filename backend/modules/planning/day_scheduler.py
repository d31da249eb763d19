"""
modules/planning/day_scheduler.py
-----------------------------------
Turns an (already route-ordered) day into clock times.

For each place activity, in order:
  1. Travel in from the previous stop (or from the day's start anchor for
     the first place).  Mode comes from the activity's explicit choice or
     from the distance (walk ≤ WALK_MAX_MINUTES of walking, else transit).
  2. arrival = clock.  If the place has operating hours for the day's
     weekday and the arrival falls outside every window, arrival moves to
     the next opening the same day.  No window left → conflict, never a
     silent placement.
  3. departure = arrival + duration (explicit → category default →
     default_visit_minutes).
  4. clock = departure + transition buffer.

Notes keep their slot but get no times.  Missing coordinates give a
zero-minute, low-confidence travel leg.  Afterwards meal gaps are
flagged and, when an end anchor exists, a final leg is appended.

Nothing here raises for business reasons: the result always carries a
best-effort schedule plus the list of conflicts.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

import config
from schemas.itinerary import (
    ConflictReason,
    Coordinate,
    Day,
    DayEntryPoints,
    EntryPoint,
    NoteActivity,
    PlaceActivity,
    ScheduledActivity,
    ScheduledDay,
    ScheduleStatus,
    SchedulingConflict,
    TravelMode,
    TravelSegment,
    Weekday,
)
from modules.planning.meal_gaps import detect_meal_gaps_in_day
from modules.tool_usage.distance_tool import distance_km
from modules.tool_usage.reference_data import DEFAULT_TABLES, ReferenceTables
from modules.tool_usage.time_tool import MINUTES_IN_DAY, format_time, parse_time
from modules.tool_usage.travel_time_tool import (
    HeuristicTravelTimeProvider,
    TravelTimeProvider,
)

logger = logging.getLogger(__name__)

_FALLBACK_DAY_START = 9 * 60
_FALLBACK_DAY_END = 21 * 60


@dataclass(frozen=True)
class SchedulerOptions:
    day_start: str = config.DAY_START
    day_end: str = config.DAY_END
    default_visit_minutes: int = config.DEFAULT_VISIT_MINUTES
    transition_buffer_minutes: int = config.TRANSITION_BUFFER_MINUTES


@dataclass
class _WindowFit:
    arrival_min: int
    status: ScheduleStatus
    window: Optional[tuple[str, str]] = None
    close_min: Optional[int] = None
    conflict_reason: Optional[ConflictReason] = None
    detail: str = ""


# ── Operating windows ─────────────────────────────────────────────────────────

def _fit_operating_window(
    activity: PlaceActivity,
    weekday: Optional[Weekday],
    arrival_min: int,
) -> _WindowFit:
    """Place *arrival_min* inside the first usable window of the day."""
    hours = activity.operating_hours
    if hours is None or weekday is None:
        return _WindowFit(arrival_min=arrival_min, status=ScheduleStatus.tentative)

    periods = hours.windows_for(weekday)
    if not periods:
        return _WindowFit(
            arrival_min=arrival_min,
            status=ScheduleStatus.out_of_hours,
            conflict_reason=ConflictReason.closed_today,
            detail=f"closed on {weekday.value}",
        )

    for period in periods:
        open_min = parse_time(period.open)
        close_min = parse_time(period.close)
        open_min = 0 if open_min is None else open_min
        close_min = MINUTES_IN_DAY if close_min is None else close_min
        if period.is_overnight or close_min <= open_min:
            close_min += MINUTES_IN_DAY
        if arrival_min >= close_min:
            continue
        return _WindowFit(
            arrival_min=max(arrival_min, open_min),
            status=ScheduleStatus.scheduled,
            window=(period.open, period.close),
            close_min=close_min,
        )

    last = periods[-1]
    return _WindowFit(
        arrival_min=arrival_min,
        status=ScheduleStatus.out_of_hours,
        window=(last.open, last.close),
        conflict_reason=ConflictReason.no_remaining_window,
        detail=f"arrives {format_time(arrival_min)}, last window closes {last.close}",
    )


# ── Scheduler ─────────────────────────────────────────────────────────────────

class DayScheduler:
    """
    Stateless day scheduler.  One instance can serve any number of days
    (and threads); all per-day state lives inside schedule().
    """

    def __init__(
        self,
        options: SchedulerOptions | None = None,
        provider: TravelTimeProvider | None = None,
        tables: ReferenceTables | None = None,
    ) -> None:
        self.options = options or SchedulerOptions()
        self.tables = tables or DEFAULT_TABLES
        self.provider = provider or HeuristicTravelTimeProvider(self.tables)

    # ── Public entry point ────────────────────────────────────────────────────

    def schedule(self, day: Day, entry_points: DayEntryPoints | None = None) -> ScheduledDay:
        opts = self.options
        start_min = self._bound(day.start_time, opts.day_start, _FALLBACK_DAY_START)
        end_min = self._bound(day.end_time, opts.day_end, _FALLBACK_DAY_END)
        start_anchor = entry_points.start if entry_points else None
        end_anchor = entry_points.end if entry_points else None

        result = ScheduledDay(day=day, start_min=start_min, end_min=end_min)
        cursor = start_min
        last_coords: Optional[Coordinate] = None
        last_departure: Optional[int] = None
        placed_any = False

        for activity in day.activities:
            if isinstance(activity, NoteActivity):
                result.activities.append(
                    ScheduledActivity(activity=activity, status=ScheduleStatus.unscheduled)
                )
                continue

            # ── 1. inbound travel ────────────────────────────────────────────
            if not placed_any and start_anchor is not None:
                segment = self._anchor_segment(
                    start_anchor, day.city_id or activity.city_id, activity.coordinates,
                    outbound=False,
                )
            elif placed_any and last_coords is not None and activity.coordinates is not None:
                segment = self.provider.segment(last_coords, activity.coordinates, activity.travel_mode)
            elif placed_any:
                segment = TravelSegment(
                    mode=activity.travel_mode or TravelMode.walk,
                    duration_minutes=0,
                    distance_meters=0.0,
                    low_confidence=True,
                )
            else:
                segment = None

            if segment is not None:
                segment.departure_min = cursor
                cursor += segment.duration_minutes
                segment.arrival_min = cursor
                if segment.low_confidence:
                    result.low_confidence_ids.append(activity.id)
                    logger.warning(
                        "Day %s: no coordinates around %r; travel assumed 0 min",
                        day.id, activity.id,
                    )

            # ── 2–3. arrival / departure ─────────────────────────────────────
            duration = self._visit_duration(activity)
            fit = _fit_operating_window(activity, day.weekday, cursor)
            arrival = fit.arrival_min
            departure = arrival + duration

            scheduled = ScheduledActivity(
                activity=activity,
                arrival_min=arrival,
                departure_min=departure,
                duration_minutes=duration,
                status=fit.status,
                travel_from_previous=segment,
                operating_window=fit.window,
                arrival_buffer_minutes=arrival - cursor,
            )
            if fit.conflict_reason is not None:
                self._flag(result, scheduled, fit.conflict_reason, fit.detail)
            elif fit.close_min is not None and departure > fit.close_min:
                self._flag(
                    result, scheduled, ConflictReason.closes_before_departure,
                    f"closes {format_time(fit.close_min)}, visit ends {format_time(departure)}",
                )
            if departure > end_min and scheduled.conflict is None:
                self._flag(
                    result, scheduled, ConflictReason.exceeds_day_end,
                    f"visit ends {format_time(departure)} after day end {format_time(end_min)}",
                )

            result.activities.append(scheduled)

            # ── 4. advance clock ─────────────────────────────────────────────
            cursor = departure + opts.transition_buffer_minutes
            last_departure = departure
            if activity.coordinates is not None:
                last_coords = activity.coordinates
            placed_any = True

        # ── meal gaps (annotations only) ─────────────────────────────────────
        result.meal_gaps = detect_meal_gaps_in_day(result.activities, tables=self.tables)

        # ── closing leg to the end anchor ────────────────────────────────────
        finish = last_departure if last_departure is not None else start_min
        if end_anchor is not None and placed_any:
            leg = self._anchor_segment(end_anchor, day.city_id, last_coords, outbound=True)
            leg.departure_min = finish
            leg.arrival_min = finish + leg.duration_minutes
            result.travel_to_end = leg
            finish = leg.arrival_min
        result.total_minutes = finish - start_min

        if result.conflicts:
            logger.info(
                "Day %s scheduled with %d conflict(s): %s",
                day.id, len(result.conflicts),
                ", ".join(f"{c.activity_id}={c.reason.value}" for c in result.conflicts),
            )
        return result

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _bound(day_value: Optional[str], option_value: str, fallback: int) -> int:
        parsed = parse_time(day_value)
        if parsed is None:
            parsed = parse_time(option_value)
        return fallback if parsed is None else parsed

    @staticmethod
    def _flag(
        result: ScheduledDay,
        scheduled: ScheduledActivity,
        reason: ConflictReason,
        detail: str,
    ) -> None:
        conflict = SchedulingConflict(activity_id=scheduled.id, reason=reason, detail=detail)
        scheduled.conflict = conflict
        scheduled.status = ScheduleStatus.out_of_hours
        result.conflicts.append(conflict)

    def _visit_duration(self, activity: PlaceActivity) -> int:
        if activity.duration_minutes is not None:
            return int(activity.duration_minutes)
        if activity.category:
            by_category = self.tables.category_durations.get(activity.category.lower())
            if by_category is not None:
                return by_category
        return self.options.default_visit_minutes

    def _anchor_segment(
        self,
        anchor: EntryPoint,
        city_id: Optional[str],
        local: Optional[Coordinate],
        *,
        outbound: bool,
    ) -> TravelSegment:
        """
        Leg between an entry point and the day's city.

        Inbound, different city with a known centroid → entry-point estimate
        (dwell buffer, rail/flight speed past the long-distance threshold).
        Outbound takes that estimate only when the anchor names a city other
        than the day's; an anchor without a city is reached from the last stop.
        Otherwise an ordinary local segment between the anchor and *local*.
        No local coordinates → zero, low confidence.
        """
        if outbound:
            inter_city = bool(city_id and anchor.city_id and anchor.city_id != city_id)
        else:
            inter_city = bool(city_id)
        minutes = self.provider.estimate_from_entry_point(anchor, city_id) if inter_city else 0
        if minutes > 0:
            center = self.tables.city_center(city_id)
            km = distance_km(anchor.coordinates, center) if center else 0.0
            mode = TravelMode.train if km > config.LONG_DISTANCE_THRESHOLD_KM else TravelMode.transit
            return TravelSegment(mode=mode, duration_minutes=minutes, distance_meters=round(km * 1000.0, 1))
        if local is None:
            return TravelSegment(
                mode=TravelMode.walk, duration_minutes=0, distance_meters=0.0, low_confidence=True,
            )
        if outbound:
            return self.provider.segment(local, anchor.coordinates)
        return self.provider.segment(anchor.coordinates, local)


def schedule_day(
    day: Day,
    options: SchedulerOptions | None = None,
    entry_points: DayEntryPoints | None = None,
    *,
    provider: TravelTimeProvider | None = None,
    tables: ReferenceTables | None = None,
) -> ScheduledDay:
    """Functional wrapper around DayScheduler.schedule()."""
    return DayScheduler(options=options, provider=provider, tables=tables).schedule(day, entry_points)
