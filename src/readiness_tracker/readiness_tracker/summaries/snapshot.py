"""Batch fetch of everything a team's attendance depends on over a date range.

One round trip per entity type for any number of teams; projections are then
computed in memory from this consistent set of rows.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, FrozenSet, List, Sequence, Tuple

from ..absences.model import Absence
from ..absences.repository import AbsenceRepository
from ..checkins.model import Checkin
from ..checkins.repository import CheckinRepository
from ..common.datetime_utils import local_range_bounds
from ..exemptions.model import Exemption
from ..exemptions.repository import ExemptionRepository
from ..holidays.repository import HolidayRepository
from ..teams.model import Member, Team
from ..teams.repository import TeamRepository


@dataclass(frozen=True)
class TeamSnapshot:
    team: Team
    start: date
    end: date
    members: Tuple[Member, ...]
    checkins: Tuple[Checkin, ...]
    holiday_dates: FrozenSet[str]
    exemptions: Tuple[Exemption, ...]
    absences: Tuple[Absence, ...]


class SnapshotLoader:
    def __init__(
        self,
        teams: TeamRepository,
        checkins: CheckinRepository,
        holidays: HolidayRepository,
        exemptions: ExemptionRepository,
        absences: AbsenceRepository,
    ):
        self._teams = teams
        self._checkins = checkins
        self._holidays = holidays
        self._exemptions = exemptions
        self._absences = absences

    def load(self, team: Team, start: date, end: date) -> TeamSnapshot:
        return self.load_many([team], start, end)[0]

    def load_for_member(self, team: Team, member: Member, start: date, end: date) -> TeamSnapshot:
        return self._build([team], {team.team_id: [member]}, start, end)[0]

    def load_many(self, teams: Sequence[Team], start: date, end: date) -> List[TeamSnapshot]:
        if not teams:
            return []
        by_team: Dict[int, List[Member]] = defaultdict(list)
        for member in self._teams.list_active_members([t.team_id for t in teams]):
            if member.team_id is not None:
                by_team[member.team_id].append(member)
        return self._build(teams, by_team, start, end)

    def _build(
        self,
        teams: Sequence[Team],
        by_team: Dict[int, List[Member]],
        start: date,
        end: date,
    ) -> List[TeamSnapshot]:
        user_ids = sorted({m.user_id for members in by_team.values() for m in members})

        # Widen by a day each side so every company timezone's local days are covered;
        # the projection re-buckets rows by local date.
        lo, hi = local_range_bounds(start - timedelta(days=1), end + timedelta(days=1), "UTC")
        checkins = self._checkins.list_for_users(user_ids, start=lo, end=hi) if user_ids else []
        exemptions = self._exemptions.list_approved_overlapping(user_ids, start, end) if user_ids else []
        absences = self._absences.list_for_users_between(user_ids, start, end) if user_ids else []

        holiday_keys: Dict[int, FrozenSet[str]] = {}
        for company_id in sorted({t.company_id for t in teams}):
            holiday_keys[company_id] = frozenset(
                h.date_key for h in self._holidays.list_between(company_id, start, end)
            )

        checkins_by_user = _group(checkins)
        exemptions_by_user = _group(exemptions)
        absences_by_user = _group(absences)

        snapshots = []
        for team in teams:
            members = tuple(sorted(by_team.get(team.team_id, []), key=lambda m: m.user_id))
            ids = [m.user_id for m in members]
            snapshots.append(
                TeamSnapshot(
                    team=team,
                    start=start,
                    end=end,
                    members=members,
                    checkins=tuple(c for uid in ids for c in checkins_by_user.get(uid, [])),
                    holiday_dates=holiday_keys.get(team.company_id, frozenset()),
                    exemptions=tuple(e for uid in ids for e in exemptions_by_user.get(uid, [])),
                    absences=tuple(a for uid in ids for a in absences_by_user.get(uid, [])),
                )
            )
        return snapshots


def _group(rows) -> Dict[int, list]:
    grouped: Dict[int, list] = defaultdict(list)
    for row in rows:
        grouped[row.user_id].append(row)
    return grouped


