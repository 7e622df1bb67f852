"""Shared builders for tournament tests."""

from datetime import datetime, timedelta, timezone

import pytest

from domain.enums import MatchStatus, Phase
from domain.models import Match


KICKOFF = datetime(2026, 6, 11, 19, 0, tzinfo=timezone.utc)


def group_match(match_id, home, away, home_score=None, away_score=None, *, group="A",
                status=MatchStatus.FINISHED, day=0):
    return Match(
        id=match_id,
        home_team_id=home,
        away_team_id=away,
        date=KICKOFF + timedelta(days=day),
        phase=Phase.GROUP,
        status=status,
        home_score=home_score,
        away_score=away_score,
        group=group,
    )


def set_score(matches, match_id, home, away, status=MatchStatus.FINISHED):
    return [m.with_result(home, away, status) if m.id == match_id else m for m in matches]


@pytest.fixture
def kickoff():
    return KICKOFF
