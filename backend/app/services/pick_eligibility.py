"""
backend/app/services/pick_eligibility.py

Purpose:
    Game status and pick locking rules. Decides, from timing data alone, what
    status a game is in, whether a team may be picked from it, whether an
    existing pick may still be changed and whether a member's picks for the
    active gameweek are locked.

    Every function is pure: inputs are plain game/league documents (or the
    dicts the API builds from them) plus an optional ``now``. Missing or
    unparseable timestamps never raise; they resolve to the fail-open
    defaults below. The one fail-closed rule is a stored ``completed``
    status, which is trusted over any start time.

Dependencies:
    - app.config
    - app.models.game
    - app.utils
"""

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from app.config import settings
from app.models.game import COMPLETED, IN_PROGRESS, NOT_STARTED, GameStatus
from app.utils import try_parse_utc, utcnow, ensure_utc

# One window for every sport; per-competition durations are not modelled.
COMPLETION_BUFFER = timedelta(minutes=settings.GAME_COMPLETION_BUFFER_MINUTES)

_STATUS_LABELS: dict[str, str] = {
    NOT_STARTED: "Not Started",
    IN_PROGRESS: "LIVE",
    COMPLETED: "FINAL",
}

_VALID_STATUSES = frozenset(_STATUS_LABELS)


def _now(now: Optional[datetime]) -> datetime:
    return ensure_utc(now) if now is not None else utcnow()


def game_start(game: Mapping[str, Any]) -> Optional[datetime]:
    """Kickoff of a game: ``start_time``, falling back to ``date``.

    A value that does not parse is treated as absent.
    """
    return try_parse_utc(game.get("start_time")) or try_parse_utc(game.get("date"))


def valid_status(value: Any) -> Optional[GameStatus]:
    """``value`` if it is one of the three statuses, else None."""
    return value if isinstance(value, str) and value in _VALID_STATUSES else None


def compute_game_status(
    game: Mapping[str, Any],
    now: Optional[datetime] = None,
    buffer: timedelta = COMPLETION_BUFFER,
) -> GameStatus:
    """Effective status of a game.

    Precedence: manual override, stored ``completed``, then kickoff time.
    Kickoff itself already counts as in progress; the game flips to completed
    only once ``now`` is strictly past ``kickoff + buffer``.
    """
    override = valid_status(game.get("manual_status_override"))
    if override:
        return override

    stored = valid_status(game.get("status"))
    if stored == COMPLETED:
        return COMPLETED

    start = game_start(game)
    if start is None:
        return stored or NOT_STARTED

    current = _now(now)
    try:
        end = start + buffer
    except OverflowError:
        # Kickoff this close to datetime.max never completes.
        end = None
    if end is not None and current > end:
        return COMPLETED
    if current >= start:
        return IN_PROGRESS
    return NOT_STARTED


def can_pick_from_game(game: Mapping[str, Any], now: Optional[datetime] = None) -> bool:
    """Only games that have not started are pickable."""
    return compute_game_status(game, now) == NOT_STARTED


def is_game_disabled(game: Mapping[str, Any], now: Optional[datetime] = None) -> bool:
    return compute_game_status(game, now) in (IN_PROGRESS, COMPLETED)


def can_change_existing_pick(picked_game: Mapping[str, Any], now: Optional[datetime] = None) -> bool:
    """Whether the game behind an existing pick still allows a change.

    Purely time based: stored status and manual override of that game are
    ignored. No time data at all allows the change.
    """
    start = game_start(picked_game)
    if start is None:
        return True
    return _now(now) <= start


def has_gameweek_started(league: Mapping[str, Any]) -> bool:
    """The league's pick week equals its game week, and neither is unset (0)."""
    pick_week = league.get("current_pick_week") or 0
    game_week = league.get("current_game_week") or 0
    return pick_week == game_week and pick_week > 0


def are_picks_locked(has_existing_pick: bool, gameweek_started: bool) -> bool:
    return gameweek_started and has_existing_pick


def can_make_first_pick(has_existing_pick: bool, gameweek_started: bool) -> bool:
    """Late pickers keep one pick during an active gameweek.

    The chosen game must itself still be pickable (see can_pick_from_game).
    """
    return gameweek_started and not has_existing_pick


def should_disable_pick_changes(has_existing_pick: bool, gameweek_started: bool) -> bool:
    return are_picks_locked(has_existing_pick, gameweek_started)


def game_status_display(status: GameStatus) -> str:
    return _STATUS_LABELS.get(status, _STATUS_LABELS[NOT_STARTED])
