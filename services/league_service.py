# services/league_service.py
from __future__ import annotations

import logging
import random
import re
from dataclasses import replace
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from domain.enums import InviteStatus, LeaguePlan, MemberStatus
from domain.models import Invitation, League, LeagueSettings
from repositories.identity_repo import IdentityRepo
from repositories.league_repo import LeagueRepo

log = logging.getLogger(__name__)

PLAN_CAPACITY: dict[LeaguePlan, Optional[int]] = {
    LeaguePlan.FREE: 10,
    LeaguePlan.VIP_BASIC: 50,
    LeaguePlan.VIP: 100,
    LeaguePlan.VIP_MASTER: 200,
    LeaguePlan.VIP_UNLIMITED: None,
}

LEAGUE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
LEAGUE_CODE_LENGTH = 6

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class LeagueServiceError(Exception):
    pass


class LeagueNotFoundError(LeagueServiceError):
    pass


class LeagueCapacityError(LeagueServiceError):
    pass


class LeaguePermissionError(LeagueServiceError):
    pass


class MembershipStateError(LeagueServiceError):
    pass


class InviteNotFoundError(LeagueServiceError):
    pass


# -------------------------
# Pure policy
# -------------------------


def league_capacity(settings: LeagueSettings) -> Optional[int]:
    """Max participants, None = unbounded. Legacy `is_unlimited` only counts when no plan is set."""
    if settings.plan is None:
        return None if settings.is_unlimited else PLAN_CAPACITY[LeaguePlan.FREE]
    return PLAN_CAPACITY[settings.plan]


def _has_room(league: League) -> bool:
    cap = league_capacity(league.settings)
    return cap is None or len(league.participants) < cap


def _require_room(league: League) -> None:
    if not _has_room(league):
        raise LeagueCapacityError(f"League is full ({len(league.participants)}/{league_capacity(league.settings)}).")


def _require_admin(league: League, actor_id: int) -> None:
    if actor_id != league.admin_id:
        raise LeaguePermissionError("Only the league admin can do that.")


def _without(ids: Sequence[int], user_id: int) -> tuple[int, ...]:
    return tuple(i for i in ids if i != user_id)


def join(league: League, user_id: int) -> League:
    """Public league: straight in. Private league: a pending request for the admin."""
    if user_id in league.participants:
        raise MembershipStateError("Already a participant.")
    if league.is_private and user_id in league.pending_requests:
        raise MembershipStateError("Request already pending.")
    _require_room(league)

    if league.is_private:
        return replace(league, pending_requests=league.pending_requests + (user_id,))

    return replace(
        league,
        participants=league.participants + (user_id,),
        pending_requests=_without(league.pending_requests, user_id),
    )


def approve(league: League, actor_id: int, user_id: int) -> League:
    _require_admin(league, actor_id)
    if user_id not in league.pending_requests:
        raise MembershipStateError("No pending request from that user.")
    # capacity may have filled since the request was made
    _require_room(league)
    return replace(
        league,
        participants=league.participants + (user_id,),
        pending_requests=_without(league.pending_requests, user_id),
    )


def reject(league: League, actor_id: int, user_id: int) -> League:
    _require_admin(league, actor_id)
    if user_id not in league.pending_requests:
        raise MembershipStateError("No pending request from that user.")
    return replace(league, pending_requests=_without(league.pending_requests, user_id))


def accept_invite(league: League, user_id: int) -> League:
    if user_id in league.participants:
        return league
    _require_room(league)
    return replace(
        league,
        participants=league.participants + (user_id,),
        pending_requests=_without(league.pending_requests, user_id),
    )


def remove_member(league: League, actor_id: int, user_id: int) -> League:
    """Admin removes someone, or a participant leaves. The admin cannot leave their own league."""
    if actor_id != user_id:
        _require_admin(league, actor_id)
    if user_id == league.admin_id:
        raise MembershipStateError("The league admin cannot be removed.")
    if user_id not in league.participants and user_id not in league.pending_requests:
        raise MembershipStateError("That user is not in this league.")
    return replace(
        league,
        participants=_without(league.participants, user_id),
        pending_requests=_without(league.pending_requests, user_id),
    )


def normalize_email(email: str) -> str:
    e = (email or "").strip().lower()
    if not _EMAIL_RE.match(e):
        raise LeagueServiceError(f"Invalid email: {email!r}")
    return e


def league_from_rows(row: Mapping[str, Any], members: Sequence[Mapping[str, Any]]) -> League:
    return League(
        id=int(row["league_id"]),
        name=str(row["name"]),
        admin_id=int(row["admin_account_id"]),
        is_private=bool(row.get("is_private")),
        participants=tuple(int(m["account_id"]) for m in members if m["status"] == MemberStatus.ACTIVE.value),
        pending_requests=tuple(int(m["account_id"]) for m in members if m["status"] == MemberStatus.PENDING.value),
        settings=LeagueSettings.from_json(row.get("settings")),
        league_code=row.get("league_code"),
        description=row.get("description"),
    )


# -------------------------
# Service
# -------------------------


class LeagueService:
    """
    Every membership change runs as:  lock league row -> read members ->
    apply the pure policy above -> write the difference, in one transaction.
    Two concurrent joins on the same league therefore see each other's
    participant count and cannot jointly exceed capacity.
    """

    def __init__(self, *, league_repo: LeagueRepo, identity_repo: IdentityRepo) -> None:
        self._repo = league_repo
        self._identity = identity_repo

    # -------------------------
    # Read
    # -------------------------

    async def get_league(self, *, league_id: int) -> League:
        row = await self._repo.get_league(league_id=league_id)
        if not row:
            raise LeagueNotFoundError(f"League not found: {league_id}")
        members = await self._repo.list_members(league_id=league_id)
        return league_from_rows(row, members)

    async def find_by_code(self, *, league_code: str) -> League:
        code = (league_code or "").strip().upper()
        row = await self._repo.get_league_by_code(league_code=code)
        if not row:
            raise LeagueNotFoundError(f"No league with code {code}")
        members = await self._repo.list_members(league_id=int(row["league_id"]))
        return league_from_rows(row, members)

    async def list_my_leagues(self, *, account_id: int) -> list[Mapping[str, Any]]:
        return await self._repo.list_leagues_for_account(account_id=account_id)

    # -------------------------
    # Create / settings
    # -------------------------

    async def _new_code(self) -> str:
        for _ in range(10):
            code = "".join(random.choices(LEAGUE_CODE_ALPHABET, k=LEAGUE_CODE_LENGTH))
            if not await self._repo.code_exists(league_code=code):
                return code
        raise LeagueServiceError("Could not allocate a league code, try again.")

    async def create_league(
        self,
        *,
        admin_account_id: int,
        name: str,
        is_private: bool = False,
        description: str | None = None,
        settings: LeagueSettings | None = None,
    ) -> League:
        name = (name or "").strip()
        if not name:
            raise LeagueServiceError("League name is required.")
        settings = settings or LeagueSettings()

        code = await self._new_code()
        league_id = await self._repo.create_league(
            name=name,
            description=(description or "").strip() or None,
            league_code=code,
            admin_account_id=admin_account_id,
            is_private=is_private,
            settings=settings.to_json(),
        )
        log.info("League created: id=%s code=%s admin=%s private=%s", league_id, code, admin_account_id, is_private)
        return League(
            id=league_id,
            name=name,
            admin_id=admin_account_id,
            is_private=is_private,
            participants=(admin_account_id,),
            settings=settings,
            league_code=code,
            description=description,
        )

    async def set_plan(self, *, league_id: int, plan: LeaguePlan) -> League:
        league = await self.get_league(league_id=league_id)
        settings = replace(league.settings, plan=plan)
        await self._repo.update_settings(league_id=league_id, settings=settings.to_json())
        log.info("League %s plan -> %s", league_id, plan.value)
        return replace(league, settings=settings)

    # -------------------------
    # Membership transitions
    # -------------------------

    async def _transition(
        self,
        league_id: int,
        policy: Callable[[League], League],
        after_write: Callable[[Any], Awaitable[None]] | None = None,
    ) -> League:
        async def run(_conn, cur) -> League:
            row, members = await self._repo.lock_league(cur, league_id=league_id)
            if row is None:
                raise LeagueNotFoundError(f"League not found: {league_id}")

            before = league_from_rows(row, members)
            after = policy(before)

            for uid in set(before.participants) | set(before.pending_requests):
                if uid not in after.participants and uid not in after.pending_requests:
                    await self._repo.delete_member(cur, league_id=league_id, account_id=uid)
            for uid in after.participants:
                if uid not in before.participants:
                    await self._repo.upsert_member(cur, league_id=league_id, account_id=uid, status=MemberStatus.ACTIVE.value)
            for uid in after.pending_requests:
                if uid not in before.pending_requests:
                    await self._repo.upsert_member(cur, league_id=league_id, account_id=uid, status=MemberStatus.PENDING.value)

            if after_write is not None:
                await after_write(cur)
            return after

        return await self._repo.in_tx(run)

    async def join(self, *, league_id: int, account_id: int) -> League:
        league = await self._transition(league_id, lambda lg: join(lg, account_id))
        log.info("Join league=%s account=%s pending=%s", league_id, account_id, account_id in league.pending_requests)
        return league

    async def join_by_code(self, *, league_code: str, account_id: int) -> League:
        league = await self.find_by_code(league_code=league_code)
        return await self.join(league_id=league.id, account_id=account_id)

    async def approve(self, *, league_id: int, actor_account_id: int, account_id: int) -> League:
        return await self._transition(league_id, lambda lg: approve(lg, actor_account_id, account_id))

    async def reject(self, *, league_id: int, actor_account_id: int, account_id: int) -> League:
        return await self._transition(league_id, lambda lg: reject(lg, actor_account_id, account_id))

    async def remove_member(self, *, league_id: int, actor_account_id: int, account_id: int) -> League:
        return await self._transition(league_id, lambda lg: remove_member(lg, actor_account_id, account_id))

    # -------------------------
    # Invites
    # -------------------------

    async def invite(self, *, league_id: int, actor_account_id: int, email: str) -> int:
        email = normalize_email(email)
        league = await self.get_league(league_id=league_id)
        if actor_account_id not in league.participants:
            raise LeaguePermissionError("Only participants can invite to this league.")

        invitee = await self._identity.find_account_by_email(email=email)
        if invitee is not None and invitee in league.participants:
            raise MembershipStateError("That user is already a participant.")
        if await self._repo.find_pending_invite(league_id=league_id, email=email):
            raise MembershipStateError("An invite is already pending for that email.")
        _require_room(league)

        invite_id = await self._repo.create_invite(
            league_id=league_id,
            email=email,
            invited_by_account_id=actor_account_id,
        )
        log.info("Invite %s: league=%s email=%s", invite_id, league_id, email)
        return invite_id

    async def list_invites(self, *, email: str) -> list[tuple[Invitation, str]]:
        """Pending invites for an email, with the league name."""
        rows = await self._repo.list_pending_invites(email=normalize_email(email))
        return [
            (
                Invitation(
                    id=int(r["invite_id"]),
                    league_id=int(r["league_id"]),
                    email=str(r["email"]),
                    status=str(r["status"]),
                ),
                str(r["league_name"]),
            )
            for r in rows
        ]

    async def respond_to_invite(self, *, invite_id: int, account_id: int, accept: bool) -> Optional[League]:
        row = await self._repo.get_invite(invite_id=invite_id)
        if not row or row["status"] != InviteStatus.PENDING.value:
            raise InviteNotFoundError(f"No pending invite {invite_id}")

        email = await self._identity.get_email(account_id=account_id)
        if not email or email.lower() != str(row["email"]).lower():
            raise LeaguePermissionError("This invite was sent to a different email.")

        status = InviteStatus.ACCEPTED if accept else InviteStatus.REJECTED

        async def mark(cur) -> None:
            await self._repo.set_invite_status(cur, invite_id=invite_id, status=status.value)

        if not accept:
            await self._repo.in_tx(lambda _conn, cur: mark(cur))
            return None

        return await self._transition(int(row["league_id"]), lambda lg: accept_invite(lg, account_id), mark)
