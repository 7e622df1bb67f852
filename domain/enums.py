# domain/enums.py
from __future__ import annotations

from enum import Enum


class MatchStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"


class Phase(str, Enum):
    GROUP = "Grupos"
    ROUND_32 = "16-avos de Final"
    ROUND_16 = "Oitavas de Final"
    QUARTER = "Quartas de Final"
    SEMI = "Semifinal"
    FINAL = "Final"     # final + 3rd place match


class LeaguePlan(str, Enum):
    FREE = "FREE"
    VIP_BASIC = "VIP_BASIC"
    VIP = "VIP"
    VIP_MASTER = "VIP_MASTER"
    VIP_UNLIMITED = "VIP_UNLIMITED"


class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
