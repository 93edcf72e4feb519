"""Seed assignment for a tournament field."""
import random
from collections import namedtuple

from rackbracket.errors import InvalidInput
from rackbracket.models import SEEDING_METHODS

SeedEntry = namedtuple('SeedEntry', ['player_id', 'partner_id', 'seed'])


def assign_seeds(participant_ids, partner_ids=None, method='random', rng=None):
    """Number the field 1..N.

    ``random`` shuffles before numbering, ``manual`` keeps the given order.
    ``partner_ids`` runs parallel to ``participant_ids`` (None entries for
    singles); omitting it means no partners at all.
    """
    participant_ids = list(participant_ids or [])
    if not participant_ids:
        raise InvalidInput('At least one participant is required')
    if partner_ids is None:
        partner_ids = [None] * len(participant_ids)
    partner_ids = list(partner_ids)
    if len(partner_ids) != len(participant_ids):
        raise InvalidInput(
            'Partner list must match the participant list',
            participants=len(participant_ids),
            partners=len(partner_ids),
        )
    if method not in SEEDING_METHODS:
        raise InvalidInput(f'Unknown seeding method: {method}')
    if any(pid is None for pid in participant_ids):
        raise InvalidInput('Participant ids cannot be empty')

    everyone = participant_ids + [pid for pid in partner_ids if pid is not None]
    if len(set(everyone)) != len(everyone):
        raise InvalidInput('A player can only appear once in a tournament')

    order = list(range(len(participant_ids)))
    if method == 'random':
        (rng or random).shuffle(order)

    return [
        SeedEntry(participant_ids[idx], partner_ids[idx], seed)
        for seed, idx in enumerate(order, start=1)
    ]
