"""
Bracket shell construction.

A shell is a match definition before any player is bound to it: its section,
round, position, the seeds it starts with (round one only) and the match
numbers its winner and loser move on to.  Everything here is pure and
deterministic for a given (participant count, format).

Double elimination layout for W winners rounds (bracket size B = 2**W):
- Losers round 1 pairs off the losers of winners round 1.
- Losers round 2k takes the losers of winners round k+1 (player_2) against
  the survivors of losers round 2k-1 (player_1).
- Losers round 2k+1 pairs off the survivors of losers round 2k.
- The winners final winner and the losers final winner meet in the grand
  final.  The winners final loser drops into the losers final (player_2),
  not into the grand final; only with no losers rounds (B = 2) does it go
  straight to the grand final.

Round-one byes never produce a loser, so losers-bracket slots fed only by
byes are dead.  A match with one dead slot is itself a bye; a match with two
dead slots never receives anyone.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from rackbracket.errors import InvalidInput
from rackbracket.models import (
    TOURNAMENT_FORMATS, DOUBLE_ELIMINATION,
    WINNERS, LOSERS, GRAND_FINAL, PLAYER_1, PLAYER_2,
)


@dataclass
class MatchShell:
    match_number: int
    round_number: int
    match_order_in_round: int
    bracket_type: str
    seed_1: Optional[int] = None
    seed_2: Optional[int] = None
    is_bye: bool = False
    next_winner_match: Optional[int] = None
    next_winner_slot: Optional[str] = None
    next_loser_match: Optional[int] = None
    next_loser_slot: Optional[str] = None


def next_power_of_2(n: int) -> int:
    size = 1
    while size < n:
        size *= 2
    return size


def winners_round_count(participant_count: int) -> int:
    """ceil(log2(N)); zero for a single entrant."""
    size = next_power_of_2(participant_count)
    return size.bit_length() - 1


def losers_round_count(bracket_size: int) -> int:
    winners_rounds = bracket_size.bit_length() - 1
    if winners_rounds < 1:
        return 0
    return 2 * (winners_rounds - 1)


def bye_count(participant_count: int) -> int:
    return next_power_of_2(participant_count) - participant_count


def seed_order(bracket_size: int) -> List[int]:
    """Seeds in bracket-line order, e.g. 8 -> [1, 8, 5, 4, 3, 6, 7, 2].

    Each step pairs every seed s with (2k + 1 - s), mirroring alternate
    pairs so seed 1 heads the top half and seed 2 closes the bottom half.
    """
    if bracket_size < 2:
        return [1][:bracket_size]
    if bracket_size == 2:
        return [1, 2]
    previous = seed_order(bracket_size // 2)
    order = []
    for index, seed in enumerate(previous):
        opponent = bracket_size + 1 - seed
        if index % 2 == 0:
            order.extend([seed, opponent])
        else:
            order.extend([opponent, seed])
    return order


def first_round_matchups(bracket_size: int) -> List[Tuple[int, int]]:
    """Round-one seed pairs, lower seed first: 8 -> (1,8) (4,5) (3,6) (2,7)."""
    if bracket_size < 2:
        return []
    order = seed_order(bracket_size)
    pairs = []
    for idx in range(0, len(order), 2):
        high, low = sorted(order[idx:idx + 2])
        pairs.append((high, low))
    return pairs


def _slot_for(index):
    return PLAYER_1 if index % 2 == 0 else PLAYER_2


def _build_winners_bracket(participant_count, bracket_size, start_number=1):
    rounds: List[List[MatchShell]] = []
    number = start_number
    matchups = first_round_matchups(bracket_size)
    total_rounds = bracket_size.bit_length() - 1

    for round_number in range(1, total_rounds + 1):
        round_matches = []
        for index in range(bracket_size >> round_number):
            shell = MatchShell(
                match_number=number,
                round_number=round_number,
                match_order_in_round=index + 1,
                bracket_type=WINNERS,
            )
            if round_number == 1:
                seed_1, seed_2 = matchups[index]
                shell.seed_1 = seed_1 if seed_1 <= participant_count else None
                shell.seed_2 = seed_2 if seed_2 <= participant_count else None
                shell.is_bye = seed_1 > participant_count or seed_2 > participant_count
            round_matches.append(shell)
            number += 1

        if rounds:
            for index, previous in enumerate(rounds[-1]):
                previous.next_winner_match = round_matches[index // 2].match_number
                previous.next_winner_slot = _slot_for(index)
        rounds.append(round_matches)
    return rounds


def _build_losers_bracket(winners_rounds, bracket_size, start_number):
    rounds: List[List[MatchShell]] = []
    number = start_number

    for round_number in range(1, losers_round_count(bracket_size) + 1):
        if round_number == 1:
            count = bracket_size // 4
        elif round_number % 2 == 0:
            count = len(rounds[-1])
        else:
            count = len(rounds[-1]) // 2

        round_matches = [
            MatchShell(
                match_number=number + index,
                round_number=round_number,
                match_order_in_round=index + 1,
                bracket_type=LOSERS,
            )
            for index in range(count)
        ]
        number += count

        if round_number == 1:
            for index, feeder in enumerate(winners_rounds[0]):
                feeder.next_loser_match = round_matches[index // 2].match_number
                feeder.next_loser_slot = _slot_for(index)
        elif round_number % 2 == 0:
            dropping = winners_rounds[round_number // 2]
            for index, feeder in enumerate(dropping):
                feeder.next_loser_match = round_matches[index].match_number
                feeder.next_loser_slot = PLAYER_2
            for index, survivor in enumerate(rounds[-1]):
                survivor.next_winner_match = round_matches[index].match_number
                survivor.next_winner_slot = PLAYER_1
        else:
            for index, survivor in enumerate(rounds[-1]):
                survivor.next_winner_match = round_matches[index // 2].match_number
                survivor.next_winner_slot = _slot_for(index)

        rounds.append(round_matches)
    return rounds


def _mark_dead_slots(shells: List[MatchShell], participant_count: int):
    """Flag losers-bracket matches that can never fill both slots as byes."""
    feeders: Dict[int, Dict[str, Tuple[str, int]]] = {}
    for shell in shells:
        if shell.next_winner_match is not None:
            feeders.setdefault(shell.next_winner_match, {})[shell.next_winner_slot] = ('winner', shell.match_number)
        if shell.next_loser_match is not None:
            feeders.setdefault(shell.next_loser_match, {})[shell.next_loser_slot] = ('loser', shell.match_number)

    live_slots: Dict[int, int] = {}
    for shell in sorted(shells, key=lambda item: item.match_number):
        if shell.bracket_type == WINNERS and shell.round_number == 1:
            live = sum(
                1 for seed in (shell.seed_1, shell.seed_2)
                if seed is not None and seed <= participant_count
            )
        else:
            live = 0
            for kind, source in feeders.get(shell.match_number, {}).values():
                needed = 1 if kind == 'winner' else 2
                if live_slots.get(source, 0) >= needed:
                    live += 1
        live_slots[shell.match_number] = live
        if shell.bracket_type != WINNERS and live < 2:
            shell.is_bye = True


def build_single_elimination(participant_count: int) -> List[MatchShell]:
    if participant_count < 1:
        raise InvalidInput('At least one participant is required')
    bracket_size = next_power_of_2(participant_count)
    rounds = _build_winners_bracket(participant_count, bracket_size)
    return [shell for round_matches in rounds for shell in round_matches]


def build_double_elimination(participant_count: int) -> List[MatchShell]:
    if participant_count < 1:
        raise InvalidInput('At least one participant is required')
    bracket_size = next_power_of_2(participant_count)
    winners = _build_winners_bracket(participant_count, bracket_size)
    if not winners:
        return []

    winners_shells = [shell for round_matches in winners for shell in round_matches]
    losers = _build_losers_bracket(winners, bracket_size, len(winners_shells) + 1)
    losers_shells = [shell for round_matches in losers for shell in round_matches]

    grand_final = MatchShell(
        match_number=len(winners_shells) + len(losers_shells) + 1,
        round_number=len(losers) + 1,
        match_order_in_round=1,
        bracket_type=GRAND_FINAL,
    )
    winners_final = winners[-1][0]
    winners_final.next_winner_match = grand_final.match_number
    winners_final.next_winner_slot = PLAYER_1
    if losers:
        losers_final = losers[-1][0]
        losers_final.next_winner_match = grand_final.match_number
        losers_final.next_winner_slot = PLAYER_2
    else:
        winners_final.next_loser_match = grand_final.match_number
        winners_final.next_loser_slot = PLAYER_2

    shells = winners_shells + losers_shells + [grand_final]
    _mark_dead_slots(shells, participant_count)
    return shells


def build_bracket(participant_count: int, tournament_format: str) -> List[MatchShell]:
    if tournament_format not in TOURNAMENT_FORMATS:
        raise InvalidInput(f'Unknown tournament format: {tournament_format}')
    if tournament_format == DOUBLE_ELIMINATION:
        return build_double_elimination(participant_count)
    return build_single_elimination(participant_count)
