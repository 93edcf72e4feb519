"""Read-only views over a bracket: standings, progress and round labels."""
from rackbracket.models import GRAND_FINAL, LOSERS


def _record_from_completed_matches(matches):
    wins = {}
    losses = {}
    for match in matches:
        if match.status != 'completed' or match.is_bye or match.winner_id is None:
            continue
        winner_id = match.winner_id
        loser_id = match.player_2_id if match.player_1_id == winner_id else match.player_1_id
        wins[winner_id] = wins.get(winner_id, 0) + 1
        if loser_id is not None:
            losses[loser_id] = losses.get(loser_id, 0) + 1
    return wins, losses


def calculate_standings(participants, matches, names=None):
    """Active players first, then by latest elimination round, then by seed."""
    names = names or {}
    wins, losses = _record_from_completed_matches(matches)
    rows = []
    for participant in participants:
        is_active = participant.status == 'active'
        rows.append({
            'player_id': participant.player_id,
            'partner_id': participant.partner_id,
            'display_name': names.get(participant.player_id),
            'partner_display_name': names.get(participant.partner_id),
            'seed': participant.seed,
            'eliminated_round': participant.eliminated_round,
            'is_active': is_active,
            'wins': wins.get(participant.player_id, 0),
            'losses': losses.get(participant.player_id, 0),
        })

    rows.sort(key=lambda row: (
        not row['is_active'],
        -(row['eliminated_round'] or 0),
        row['seed'],
    ))
    for placement, row in enumerate(rows, start=1):
        row['placement'] = placement
    return rows


def round_label(round_number, total_rounds, bracket_type):
    if bracket_type == GRAND_FINAL:
        return 'Grand Final'
    if bracket_type == LOSERS:
        return f'Losers Round {round_number}'

    rounds_from_end = total_rounds - round_number
    if rounds_from_end == 0:
        return 'Final'
    if rounds_from_end == 1:
        return 'Semi-Finals'
    if rounds_from_end == 2:
        return 'Quarter-Finals'
    return f'Round {round_number}'


def group_matches_by_round(matches, bracket_type):
    grouped = {}
    for match in matches:
        if match.bracket_type != bracket_type:
            continue
        grouped.setdefault(match.round_number, []).append(match)
    return [
        (round_number, sorted(grouped[round_number], key=lambda m: m.match_order_in_round))
        for round_number in sorted(grouped)
    ]


def tournament_progress(matches):
    playable = [m for m in matches if not m.is_bye]
    completed = [m for m in playable if m.status == 'completed']
    open_matches = [m for m in matches if m.status in ('ready', 'in_progress')]

    current_round = 1
    if open_matches:
        current_round = min(m.round_number for m in open_matches)
    elif completed:
        current_round = max(m.round_number for m in completed)

    return {
        'current_round': current_round,
        'completed_matches': len(completed),
        'total_matches': len(matches),
        'total_playable_matches': len(playable),
        'is_complete': bool(playable) and len(completed) == len(playable),
    }
