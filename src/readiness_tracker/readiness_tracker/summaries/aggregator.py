"""Daily attendance projection.

`AttendanceProjector` classifies every member of a team for one local date:
not yet started, on approved leave, excused, or expected, and whether an
expected member checked in. The daily summary and the grading engine both
read this same projection, so they cannot disagree on who counted.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..absences.model import Absence
from ..checkins.model import Checkin
from ..common.datetime_utils import effective_start_day, format_local_date, is_work_day
from ..common.validators import round_half_up
from ..core.enums import AbsenceStatus, ExemptCheckinPolicy, ReadinessStatus
from ..exemptions.model import Exemption
from .model import DailyTeamSummary, SummaryRollup
from .snapshot import TeamSnapshot


@dataclass(frozen=True)
class DayProjection:
    day: date
    is_work_day: bool
    is_holiday: bool
    expected: FrozenSet[int]
    checked_in: FrozenSet[int]
    on_leave: FrozenSet[int]
    excused: FrozenSet[int]
    # First check-in of each team member on this local date.
    checkins: Tuple[Checkin, ...]

    @property
    def counts(self) -> bool:
        return self.is_work_day and not self.is_holiday

    @property
    def missing(self) -> FrozenSet[int]:
        return self.expected - self.checked_in


def compliance_rate(checked_in: int, expected: int) -> Optional[int]:
    if expected <= 0:
        return None
    return min(100, round_half_up(checked_in / expected * 100))


class AttendanceProjector:
    def __init__(self, snapshot: TeamSnapshot, *, policy: ExemptCheckinPolicy = ExemptCheckinPolicy.EXCLUDE):
        self._snapshot = snapshot
        self._policy = ExemptCheckinPolicy(policy)
        tz = snapshot.team.timezone

        self._first_checkin: Dict[Tuple[int, str], Checkin] = {}
        for checkin in sorted(snapshot.checkins, key=lambda c: (c.checked_in_at, c.checkin_id)):
            self._first_checkin.setdefault((checkin.user_id, format_local_date(checkin.checked_in_at, tz)), checkin)

        self._start_day: Dict[int, date] = {
            m.user_id: effective_start_day(m.joined_at, tz) for m in snapshot.members
        }

        self._exemptions: Dict[int, List[Exemption]] = defaultdict(list)
        for exemption in snapshot.exemptions:
            self._exemptions[exemption.user_id].append(exemption)

        self._absences: Dict[Tuple[int, str], Absence] = {
            (a.user_id, a.absence_date.isoformat()): a for a in snapshot.absences
        }

    @property
    def snapshot(self) -> TeamSnapshot:
        return self._snapshot

    def start_day(self, user_id: int) -> date:
        return self._start_day[user_id]

    def checkin_for(self, user_id: int, day: date) -> Optional[Checkin]:
        return self._first_checkin.get((user_id, day.isoformat()))

    def absence_for(self, user_id: int, day: date) -> Optional[Absence]:
        return self._absences.get((user_id, day.isoformat()))

    def on_leave(self, user_id: int, day: date) -> bool:
        # Overlapping exemptions collapse to a single yes/no.
        return any(e.covers(day) for e in self._exemptions.get(user_id, ()))

    def project(self, day: date) -> DayProjection:
        team = self._snapshot.team
        key = day.isoformat()
        work = is_work_day(day, team.work_days, team.timezone)
        holiday = key in self._snapshot.holiday_dates

        rows = []
        for member in self._snapshot.members:
            checkin = self._first_checkin.get((member.user_id, key))
            if checkin is not None:
                rows.append(checkin)

        if not work or holiday:
            empty: FrozenSet[int] = frozenset()
            return DayProjection(day, work, holiday, empty, empty, empty, empty, tuple(rows))

        expected, checked, on_leave, excused = set(), set(), set(), set()
        for member in self._snapshot.members:
            uid = member.user_id
            if day < self._start_day[uid]:
                continue
            has_checkin = (uid, key) in self._first_checkin
            if self.on_leave(uid, day):
                on_leave.add(uid)
                if self._policy == ExemptCheckinPolicy.FOLD_IN and has_checkin:
                    expected.add(uid)
                    checked.add(uid)
                continue
            absence = self._absences.get((uid, key))
            if absence is not None and absence.status == AbsenceStatus.EXCUSED:
                excused.add(uid)
                continue
            expected.add(uid)
            if has_checkin:
                checked.add(uid)

        return DayProjection(
            day,
            work,
            holiday,
            frozenset(expected),
            frozenset(checked),
            frozenset(on_leave),
            frozenset(excused),
            tuple(rows),
        )

    def summarize(self, day: date) -> DailyTeamSummary:
        return summary_from_projection(self._snapshot, self.project(day))


def summary_from_projection(snapshot: TeamSnapshot, projection: DayProjection) -> DailyTeamSummary:
    rows = projection.checkins
    scores = [c.readiness_score for c in rows]
    avg = round(sum(scores) / len(scores), 2) if scores else None

    if projection.counts:
        expected = len(projection.expected)
        checked = len(projection.checked_in)
        missing = projection.missing
        # Every expected member without a check-in, whether or not an absence row exists yet.
        absent = len(missing)
    else:
        # Check-ins on non-working days are kept for audit only.
        expected = 0
        checked = len(rows)
        missing = frozenset()
        absent = 0

    return DailyTeamSummary(
        team_id=snapshot.team.team_id,
        company_id=snapshot.team.company_id,
        summary_date=projection.day,
        is_work_day=projection.is_work_day,
        is_holiday=projection.is_holiday,
        total_members=len(snapshot.members),
        on_leave_count=len(projection.on_leave),
        excused_count=len(projection.excused),
        expected_to_check_in=expected,
        checked_in_count=checked,
        not_checked_in_count=len(missing),
        absent_count=absent,
        green_count=sum(1 for c in rows if c.readiness_status == ReadinessStatus.GREEN),
        yellow_count=sum(1 for c in rows if c.readiness_status == ReadinessStatus.YELLOW),
        red_count=sum(1 for c in rows if c.readiness_status == ReadinessStatus.RED),
        avg_readiness_score=avg,
        compliance_rate=compliance_rate(checked, expected) if projection.counts else None,
    )


def build_daily_summary(
    snapshot: TeamSnapshot,
    day: date,
    *,
    policy: ExemptCheckinPolicy = ExemptCheckinPolicy.EXCLUDE,
) -> DailyTeamSummary:
    return AttendanceProjector(snapshot, policy=policy).summarize(day)


def aggregate_summaries(summaries: Iterable[DailyTeamSummary]) -> SummaryRollup:
    counted = [s for s in summaries if s.is_work_day and not s.is_holiday]
    total_expected = sum(s.expected_to_check_in for s in counted)
    total_checked = sum(s.checked_in_count for s in counted)
    with_data = [s.avg_readiness_score for s in counted if s.avg_readiness_score is not None]
    return SummaryRollup(
        total_days=len(counted),
        total_expected=total_expected,
        total_checked_in=total_checked,
        avg_compliance_rate=round(total_checked / total_expected * 100, 1) if total_expected else None,
        avg_readiness_score=round(sum(with_data) / len(with_data), 1) if with_data else None,
        total_green=sum(s.green_count for s in counted),
        total_yellow=sum(s.yellow_count for s in counted),
        total_red=sum(s.red_count for s in counted),
    )
