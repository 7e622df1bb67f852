# domain/tournament.py
"""
FIFA World Cup 2026 format data: groups, fixture list and the Round-of-32
third-place eligibility table. Organizer data, kept verbatim.
"""
from __future__ import annotations

from datetime import datetime
from typing import Mapping

from domain.enums import MatchStatus, Phase
from domain.models import Match


GROUPS: Mapping[str, tuple[str, ...]] = {
    "A": ("México", "África do Sul", "Coréia do Sul", "Europa D"),
    "B": ("Canadá", "Europa A", "Catar", "Suíça"),
    "C": ("Brasil", "Marrocos", "Haiti", "Escócia"),
    "D": ("Estados Unidos", "Paraguai", "Austrália", "Europa C"),
    "E": ("Alemanha", "Curaçau", "Costa do Marfim", "Equador"),
    "F": ("Holanda", "Japão", "Europa B", "Tunísia"),
    "G": ("Bélgica", "Egito", "Irã", "Nova Zelândia"),
    "H": ("Espanha", "Cabo Verde", "Arábia Saudita", "Uruguai"),
    "I": ("França", "Senegal", "Intercontinental 2", "Noruega"),
    "J": ("Argentina", "Argélia", "Áustria", "Jordânia"),
    "K": ("Portugal", "Intercontinental 1", "Uzbequistão", "Colômbia"),
    "L": ("Inglaterra", "Croácia", "Gana", "Panamá"),
}

# Round-of-32 match -> groups whose 3rd-placed team may fill the away slot.
#   1º E vs 3º ABCDF    1º I vs 3º CDFGH    1º D vs 3º BEFIJ    1º G vs 3º AEHIJ
#   1º A vs 3º CEFHI    1º L vs 3º EHIJK    1º B vs 3º EFGIJ    1º K vs 3º DEIJL
THIRD_PLACE_ELIGIBILITY: Mapping[str, tuple[str, ...]] = {
    "m-R32-1": ("A", "B", "C", "D", "F"),
    "m-R32-2": ("C", "D", "F", "G", "H"),
    "m-R32-7": ("B", "E", "F", "I", "J"),
    "m-R32-8": ("A", "E", "H", "I", "J"),
    "m-R32-11": ("C", "E", "F", "H", "I"),
    "m-R32-12": ("E", "H", "I", "J", "K"),
    "m-R32-15": ("E", "F", "G", "I", "J"),
    "m-R32-16": ("D", "E", "I", "J", "L"),
}

THIRD_PLACE_QUALIFIERS = 8

FINAL_MATCH_ID = "m-FINAL"
THIRD_PLACE_MATCH_ID = "m-3RD"

KNOCKOUT_ORDER: tuple[Phase, ...] = (
    Phase.ROUND_32,
    Phase.ROUND_16,
    Phase.QUARTER,
    Phase.SEMI,
    Phase.FINAL,
)

# (id, home, away, kickoff, venue, group, phase)
SCHEDULE: tuple[tuple[str, str, str, str, str, str, Phase], ...] = (
    ("m-A1", "México", "África do Sul", "2026-06-11T19:00:00+00:00", "Estádio Azteca, Cidade do México", "A", Phase.GROUP),
    ("m-A2", "Coréia do Sul", "Europa D", "2026-06-12T02:00:00+00:00", "Estádio Akron, Guadalajara", "A", Phase.GROUP),
    ("m-A3", "México", "Coréia do Sul", "2026-06-19T01:00:00+00:00", "Estádio Akron, Guadalajara", "A", Phase.GROUP),
    ("m-A4", "Europa D", "África do Sul", "2026-06-18T16:00:00+00:00", "Mercedes-Benz Stadium, Atlanta", "A", Phase.GROUP),
    ("m-A5", "Europa D", "México", "2026-06-25T01:00:00+00:00", "Estádio Azteca, Cidade do México", "A", Phase.GROUP),
    ("m-A6", "África do Sul", "Coréia do Sul", "2026-06-25T01:00:00+00:00", "Estádio BBVA, Monterrey", "A", Phase.GROUP),
    ("m-B1", "Canadá", "Europa A", "2026-06-12T19:00:00+00:00", "BMO Field, Toronto", "B", Phase.GROUP),
    ("m-B2", "Catar", "Suíça", "2026-06-13T19:00:00+00:00", "BC Place, Vancouver", "B", Phase.GROUP),
    ("m-B3", "Canadá", "Catar", "2026-06-18T22:00:00+00:00", "BC Place, Vancouver", "B", Phase.GROUP),
    ("m-B4", "Suíça", "Europa A", "2026-06-18T19:00:00+00:00", "Lumen Field, Seattle", "B", Phase.GROUP),
    ("m-B5", "Suíça", "Canadá", "2026-06-24T19:00:00+00:00", "BC Place, Vancouver", "B", Phase.GROUP),
    ("m-B6", "Europa A", "Catar", "2026-06-24T19:00:00+00:00", "Lumen Field, Seattle", "B", Phase.GROUP),
    ("m-C1", "Brasil", "Marrocos", "2026-06-13T22:00:00+00:00", "MetLife Stadium, Nova Jersey", "C", Phase.GROUP),
    ("m-C2", "Haiti", "Escócia", "2026-06-14T01:00:00+00:00", "Gillette Stadium, Boston", "C", Phase.GROUP),
    ("m-C3", "Brasil", "Haiti", "2026-06-20T01:00:00+00:00", "Hard Rock Stadium, Miami", "C", Phase.GROUP),
    ("m-C4", "Escócia", "Marrocos", "2026-06-19T22:00:00+00:00", "Lincoln Financial Field, Filadélfia", "C", Phase.GROUP),
    ("m-C5", "Escócia", "Brasil", "2026-06-24T22:00:00+00:00", "MetLife Stadium, Nova Jersey", "C", Phase.GROUP),
    ("m-C6", "Marrocos", "Haiti", "2026-06-24T22:00:00+00:00", "Hard Rock Stadium, Miami", "C", Phase.GROUP),
    ("m-D1", "Estados Unidos", "Paraguai", "2026-06-13T01:00:00+00:00", "SoFi Stadium, Los Angeles", "D", Phase.GROUP),
    ("m-D2", "Austrália", "Europa C", "2026-06-13T04:00:00+00:00", "Levi's Stadium, San Francisco", "D", Phase.GROUP),
    ("m-D3", "Estados Unidos", "Austrália", "2026-06-19T19:00:00+00:00", "SoFi Stadium, Los Angeles", "D", Phase.GROUP),
    ("m-D4", "Europa C", "Paraguai", "2026-06-19T04:00:00+00:00", "Levi's Stadium, San Francisco", "D", Phase.GROUP),
    ("m-D5", "Europa C", "Estados Unidos", "2026-06-26T02:00:00+00:00", "SoFi Stadium, Los Angeles", "D", Phase.GROUP),
    ("m-D6", "Paraguai", "Austrália", "2026-06-26T02:00:00+00:00", "Levi's Stadium, San Francisco", "D", Phase.GROUP),
    ("m-E1", "Alemanha", "Curaçau", "2026-06-14T17:00:00+00:00", "Mercedes-Benz Stadium, Atlanta", "E", Phase.GROUP),
    ("m-E2", "Costa do Marfim", "Equador", "2026-06-14T23:00:00+00:00", "NRG Stadium, Houston", "E", Phase.GROUP),
    ("m-E3", "Alemanha", "Costa do Marfim", "2026-06-20T20:00:00+00:00", "AT&T Stadium, Dallas", "E", Phase.GROUP),
    ("m-E4", "Equador", "Curaçau", "2026-06-21T00:00:00+00:00", "NRG Stadium, Houston", "E", Phase.GROUP),
    ("m-E5", "Equador", "Alemanha", "2026-06-25T20:00:00+00:00", "AT&T Stadium, Dallas", "E", Phase.GROUP),
    ("m-E6", "Curaçau", "Costa do Marfim", "2026-06-25T20:00:00+00:00", "NRG Stadium, Houston", "E", Phase.GROUP),
    ("m-F1", "Holanda", "Japão", "2026-06-14T20:00:00+00:00", "Arrowhead Stadium, Kansas City", "F", Phase.GROUP),
    ("m-F2", "Europa B", "Tunísia", "2026-06-15T02:00:00+00:00", "AT&T Stadium, Dallas", "F", Phase.GROUP),
    ("m-F3", "Holanda", "Europa B", "2026-06-20T17:00:00+00:00", "Mercedes-Benz Stadium, Atlanta", "F", Phase.GROUP),
    ("m-F4", "Tunísia", "Japão", "2026-06-21T04:00:00+00:00", "Arrowhead Stadium, Kansas City", "F", Phase.GROUP),
    ("m-F5", "Tunísia", "Holanda", "2026-06-25T23:00:00+00:00", "AT&T Stadium, Dallas", "F", Phase.GROUP),
    ("m-F6", "Japão", "Europa B", "2026-06-25T23:00:00+00:00", "Arrowhead Stadium, Kansas City", "F", Phase.GROUP),
    ("m-G1", "Bélgica", "Egito", "2026-06-15T19:00:00+00:00", "MetLife Stadium, Nova Jersey", "G", Phase.GROUP),
    ("m-G2", "Irã", "Nova Zelândia", "2026-06-16T01:00:00+00:00", "Lincoln Financial Field, Filadélfia", "G", Phase.GROUP),
    ("m-G3", "Bélgica", "Irã", "2026-06-21T19:00:00+00:00", "MetLife Stadium, Nova Jersey", "G", Phase.GROUP),
    ("m-G4", "Nova Zelândia", "Egito", "2026-06-22T01:00:00+00:00", "Lincoln Financial Field, Filadélfia", "G", Phase.GROUP),
    ("m-G5", "Nova Zelândia", "Bélgica", "2026-06-27T03:00:00+00:00", "MetLife Stadium, Nova Jersey", "G", Phase.GROUP),
    ("m-G6", "Egito", "Irã", "2026-06-27T03:00:00+00:00", "Lincoln Financial Field, Filadélfia", "G", Phase.GROUP),
    ("m-H1", "Espanha", "Cabo Verde", "2026-06-15T16:00:00+00:00", "Hard Rock Stadium, Miami", "H", Phase.GROUP),
    ("m-H2", "Arábia Saudita", "Uruguai", "2026-06-15T22:00:00+00:00", "Mercedes-Benz Stadium, Atlanta", "H", Phase.GROUP),
    ("m-H3", "Espanha", "Arábia Saudita", "2026-06-21T16:00:00+00:00", "Hard Rock Stadium, Miami", "H", Phase.GROUP),
    ("m-H4", "Uruguai", "Cabo Verde", "2026-06-21T22:00:00+00:00", "Mercedes-Benz Stadium, Atlanta", "H", Phase.GROUP),
    ("m-H5", "Uruguai", "Espanha", "2026-06-27T00:00:00+00:00", "Hard Rock Stadium, Miami", "H", Phase.GROUP),
    ("m-H6", "Cabo Verde", "Arábia Saudita", "2026-06-27T00:00:00+00:00", "Mercedes-Benz Stadium, Atlanta", "H", Phase.GROUP),
    ("m-I1", "França", "Senegal", "2026-06-16T19:00:00+00:00", "Gillette Stadium, Boston", "I", Phase.GROUP),
    ("m-I2", "Intercontinental 2", "Noruega", "2026-06-16T22:00:00+00:00", "BMO Field, Toronto", "I", Phase.GROUP),
    ("m-I3", "França", "Intercontinental 2", "2026-06-22T21:00:00+00:00", "Gillette Stadium, Boston", "I", Phase.GROUP),
    ("m-I4", "Noruega", "Senegal", "2026-06-23T00:00:00+00:00", "BMO Field, Toronto", "I", Phase.GROUP),
    ("m-I5", "Noruega", "França", "2026-06-26T19:00:00+00:00", "Gillette Stadium, Boston", "I", Phase.GROUP),
    ("m-I6", "Senegal", "Intercontinental 2", "2026-06-26T19:00:00+00:00", "BMO Field, Toronto", "I", Phase.GROUP),
    ("m-J1", "Argentina", "Argélia", "2026-06-17T01:00:00+00:00", "SoFi Stadium, Los Angeles", "J", Phase.GROUP),
    ("m-J2", "Áustria", "Jordânia", "2026-06-17T04:00:00+00:00", "Levi's Stadium, San Francisco", "J", Phase.GROUP),
    ("m-J3", "Argentina", "Áustria", "2026-06-22T17:00:00+00:00", "SoFi Stadium, Los Angeles", "J", Phase.GROUP),
    ("m-J4", "Jordânia", "Argélia", "2026-06-23T03:00:00+00:00", "Levi's Stadium, San Francisco", "J", Phase.GROUP),
    ("m-J5", "Jordânia", "Argentina", "2026-06-28T02:00:00+00:00", "SoFi Stadium, Los Angeles", "J", Phase.GROUP),
    ("m-J6", "Argélia", "Áustria", "2026-06-28T02:00:00+00:00", "Levi's Stadium, San Francisco", "J", Phase.GROUP),
    ("m-K1", "Portugal", "Intercontinental 1", "2026-06-17T17:00:00+00:00", "Gillette Stadium, Boston", "K", Phase.GROUP),
    ("m-K2", "Uzbequistão", "Colômbia", "2026-06-18T02:00:00+00:00", "MetLife Stadium, Nova Jersey", "K", Phase.GROUP),
    ("m-K3", "Portugal", "Uzbequistão", "2026-06-23T17:00:00+00:00", "Gillette Stadium, Boston", "K", Phase.GROUP),
    ("m-K4", "Colômbia", "Intercontinental 1", "2026-06-24T02:00:00+00:00", "MetLife Stadium, Nova Jersey", "K", Phase.GROUP),
    ("m-K5", "Colômbia", "Portugal", "2026-06-27T23:30:00+00:00", "Gillette Stadium, Boston", "K", Phase.GROUP),
    ("m-K6", "Intercontinental 1", "Uzbequistão", "2026-06-27T23:30:00+00:00", "MetLife Stadium, Nova Jersey", "K", Phase.GROUP),
    ("m-L1", "Inglaterra", "Croácia", "2026-06-17T20:00:00+00:00", "Lincoln Financial Field, Filadélfia", "L", Phase.GROUP),
    ("m-L2", "Gana", "Panamá", "2026-06-17T23:00:00+00:00", "Hard Rock Stadium, Miami", "L", Phase.GROUP),
    ("m-L3", "Inglaterra", "Gana", "2026-06-23T20:00:00+00:00", "Lincoln Financial Field, Filadélfia", "L", Phase.GROUP),
    ("m-L4", "Panamá", "Croácia", "2026-06-23T23:00:00+00:00", "Hard Rock Stadium, Miami", "L", Phase.GROUP),
    ("m-L5", "Panamá", "Inglaterra", "2026-06-27T21:00:00+00:00", "Lincoln Financial Field, Filadélfia", "L", Phase.GROUP),
    ("m-L6", "Croácia", "Gana", "2026-06-27T21:00:00+00:00", "Hard Rock Stadium, Miami", "L", Phase.GROUP),
    ("m-R32-1", "1º Grupo E", "3º Grupo A/B/C/D/F", "2026-06-29T17:30:00-04:00", "Estádio Gillette, Boston", "", Phase.ROUND_32),
    ("m-R32-2", "1º Grupo I", "3º Grupo C/D/F/G/H", "2026-06-30T18:00:00-04:00", "MetLife Stadium, Nova Jersey", "", Phase.ROUND_32),
    ("m-R32-3", "2º Grupo A", "2º Grupo B", "2026-06-28T16:00:00-07:00", "SoFi Stadium, Los Angeles", "", Phase.ROUND_32),
    ("m-R32-4", "1º Grupo F", "2º Grupo C", "2026-06-29T22:00:00-06:00", "Estádio BBVA, Monterrey", "", Phase.ROUND_32),
    ("m-R32-5", "2º Grupo K", "2º Grupo L", "2026-07-02T20:00:00-04:00", "BMO Field, Toronto", "", Phase.ROUND_32),
    ("m-R32-6", "1º Grupo H", "2º Grupo J", "2026-07-02T16:00:00-07:00", "SoFi Stadium, Los Angeles", "", Phase.ROUND_32),
    ("m-R32-7", "1º Grupo D", "3º Grupo B/E/F/I/J", "2026-07-01T21:00:00-07:00", "Levi's Stadium, Santa Clara", "", Phase.ROUND_32),
    ("m-R32-8", "1º Grupo G", "3º Grupo A/E/H/I/J", "2026-07-01T17:00:00-07:00", "Lumen Field, Seattle", "", Phase.ROUND_32),
    ("m-R32-9", "1º Grupo C", "2º Grupo F", "2026-06-29T14:00:00-05:00", "NRG Stadium, Houston", "", Phase.ROUND_32),
    ("m-R32-10", "2º Grupo E", "2º Grupo I", "2026-06-30T14:00:00-05:00", "AT&T Stadium, Dallas", "", Phase.ROUND_32),
    ("m-R32-11", "1º Grupo A", "3º Grupo C/E/F/H/I", "2026-06-30T22:00:00-06:00", "Estádio Azteca, Cidade do México", "", Phase.ROUND_32),
    ("m-R32-12", "1º Grupo L", "3º Grupo E/H/I/J/K", "2026-07-01T13:00:00-04:00", "Mercedes-Benz Stadium, Atlanta", "", Phase.ROUND_32),
    ("m-R32-13", "1º Grupo J", "2º Grupo H", "2026-07-03T19:00:00-04:00", "Hard Rock Stadium, Miami", "", Phase.ROUND_32),
    ("m-R32-14", "2º Grupo D", "2º Grupo G", "2026-07-03T15:00:00-05:00", "AT&T Stadium, Dallas", "", Phase.ROUND_32),
    ("m-R32-15", "1º Grupo B", "3º Grupo E/F/G/I/H", "2026-07-03T00:00:00-07:00", "BC Place, Vancouver", "", Phase.ROUND_32),
    ("m-R32-16", "1º Grupo K", "3º Grupo D/E/I/J/L", "2026-07-03T22:30:00-05:00", "Arrowhead Stadium, Kansas City", "", Phase.ROUND_32),
    ("m-R16-1", "Venc. R32-1", "Venc. R32-2", "2026-07-04T18:00:00-04:00", "Lincoln Financial Field, Filadélfia", "", Phase.ROUND_16),
    ("m-R16-2", "Venc. R32-3", "Venc. R32-4", "2026-07-04T14:00:00-05:00", "NRG Stadium, Houston", "", Phase.ROUND_16),
    ("m-R16-3", "Venc. R32-5", "Venc. R32-6", "2026-07-06T16:00:00-05:00", "AT&T Stadium, Dallas", "", Phase.ROUND_16),
    ("m-R16-4", "Venc. R32-7", "Venc. R32-8", "2026-07-06T21:00:00-07:00", "Lumen Field, Seattle", "", Phase.ROUND_16),
    ("m-R16-5", "Venc. R32-9", "Venc. R32-10", "2026-07-05T17:00:00-04:00", "MetLife Stadium, Nova Jersey", "", Phase.ROUND_16),
    ("m-R16-6", "Venc. R32-11", "Venc. R32-12", "2026-07-05T21:00:00-06:00", "Estádio Azteca, Cidade do México", "", Phase.ROUND_16),
    ("m-R16-7", "Venc. R32-13", "Venc. R32-14", "2026-07-07T13:00:00-04:00", "Mercedes-Benz Stadium, Atlanta", "", Phase.ROUND_16),
    ("m-R16-8", "Venc. R32-15", "Venc. R32-16", "2026-07-07T17:00:00-07:00", "BC Place, Vancouver", "", Phase.ROUND_16),
    ("m-QF-1", "Venc. R16-1", "Venc. R16-2", "2026-07-09T17:00:00-04:00", "Estádio Gillette, Boston", "", Phase.QUARTER),
    ("m-QF-2", "Venc. R16-3", "Venc. R16-4", "2026-07-10T16:00:00-07:00", "SoFi Stadium, Los Angeles", "", Phase.QUARTER),
    ("m-QF-3", "Venc. R16-5", "Venc. R16-6", "2026-07-11T18:00:00-04:00", "Hard Rock Stadium, Miami", "", Phase.QUARTER),
    ("m-QF-4", "Venc. R16-7", "Venc. R16-8", "2026-07-11T22:00:00-05:00", "Arrowhead Stadium, Kansas City", "", Phase.QUARTER),
    ("m-SF-1", "Venc. QF-1", "Venc. QF-2", "2026-07-14T16:00:00-05:00", "AT&T Stadium, Dallas", "", Phase.SEMI),
    ("m-SF-2", "Venc. QF-3", "Venc. QF-4", "2026-07-15T16:00:00-04:00", "Mercedes-Benz Stadium, Atlanta", "", Phase.SEMI),
    ("m-3RD", "Perd. SF-1", "Perd. SF-2", "2026-07-18T18:00:00-04:00", "Hard Rock Stadium, Miami", "", Phase.FINAL),
    ("m-FINAL", "Venc. SF-1", "Venc. SF-2", "2026-07-19T16:00:00-04:00", "MetLife Stadium, Nova Jersey", "", Phase.FINAL),
)


def team_group(team_id: str) -> str | None:
    for letter, teams in GROUPS.items():
        if team_id in teams:
            return letter
    return None


def initial_matches() -> list[Match]:
    return [
        Match(
            id=match_id,
            home_team_id=home,
            away_team_id=away,
            date=datetime.fromisoformat(kickoff),
            phase=phase,
            status=MatchStatus.SCHEDULED,
            group=group or None,
            location=venue,
        )
        for (match_id, home, away, kickoff, venue, group, phase) in SCHEDULE
    ]
