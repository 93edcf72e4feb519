"""Tournament bracket routes."""
import logging
from flask import Blueprint, request, jsonify

from rackbracket.errors import BracketError, InvalidInput
from rackbracket.models import SINGLE_ELIMINATION
from rackbracket.services import tournaments as service
from rackbracket.store import EntityStore

logger = logging.getLogger(__name__)

tournaments_bp = Blueprint('tournaments', __name__)


def _error_response(error):
    if error.status_code >= 409:
        logger.warning('Rejected bracket request: %s %s', error.message, error.details)
    return jsonify(error.to_dict()), error.status_code


def _optional_int(raw_value, field):
    if raw_value is None:
        return None
    try:
        return int(raw_value)
    except (TypeError, ValueError):
        raise InvalidInput(f'{field} must be an integer') from None


def _id_list(raw_ids, field, allow_none=False):
    if not isinstance(raw_ids, list):
        raise InvalidInput(f'{field} must be a list')
    ids = []
    for raw in raw_ids:
        if raw is None and allow_none:
            ids.append(None)
            continue
        ids.append(_optional_int(raw, field))
    return ids


def _json_payload():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidInput('Invalid JSON payload')
    return data


def _match_response(store, match):
    tournament = service.get_tournament(match.tournament_id, store)
    return jsonify({
        'match': match.to_dict(),
        'tournament': tournament.to_dict(),
    })


@tournaments_bp.route('', methods=['POST'])
def create_tournament():
    store = EntityStore()
    try:
        data = _json_payload()
        participant_ids = _id_list(data.get('participant_ids'), 'participant_ids')
        partner_ids = data.get('partner_ids')
        if partner_ids is not None:
            partner_ids = _id_list(partner_ids, 'partner_ids', allow_none=True)
        tournament = service.create_tournament(
            participant_ids,
            partner_ids,
            tournament_format=str(data.get('format') or SINGLE_ELIMINATION).strip().lower(),
            seeding_method=data.get('seeding_method'),
            name=data.get('name'),
            match_format=data.get('match_format'),
            match_format_target=_optional_int(data.get('match_format_target'), 'match_format_target'),
            store=store,
        )
    except BracketError as error:
        return _error_response(error)
    return jsonify({'tournament': service.serialize_tournament(tournament, store)}), 201


@tournaments_bp.route('/<int:tournament_id>', methods=['GET'])
def get_tournament(tournament_id):
    store = EntityStore()
    try:
        tournament = service.get_tournament(tournament_id, store)
    except BracketError as error:
        return _error_response(error)
    return jsonify({'tournament': service.serialize_tournament(tournament, store)})


@tournaments_bp.route('/<int:tournament_id>/standings', methods=['GET'])
def get_standings(tournament_id):
    try:
        standings = service.get_standings(tournament_id)
    except BracketError as error:
        return _error_response(error)
    return jsonify({'tournament_id': tournament_id, 'standings': standings})


@tournaments_bp.route('/matches/<int:match_id>', methods=['GET'])
def get_match(match_id):
    store = EntityStore()
    try:
        match = service.get_match(match_id, store)
    except BracketError as error:
        return _error_response(error)
    data = match.to_dict()
    data['games'] = [game.to_dict() for game in match.games]
    return jsonify({'match': data})


@tournaments_bp.route('/matches/<int:match_id>/start', methods=['POST'])
def start_match(match_id):
    store = EntityStore()
    try:
        match = service.start_match(match_id, store)
        return _match_response(store, match)
    except BracketError as error:
        return _error_response(error)


@tournaments_bp.route('/matches/<int:match_id>/result', methods=['POST'])
def record_result(match_id):
    store = EntityStore()
    try:
        data = _json_payload()
        match = service.record_result(
            match_id,
            _optional_int(data.get('winner_id'), 'winner_id'),
            player_1_score=_optional_int(data.get('player_1_score'), 'player_1_score'),
            player_2_score=_optional_int(data.get('player_2_score'), 'player_2_score'),
            store=store,
        )
        return _match_response(store, match)
    except BracketError as error:
        return _error_response(error)


@tournaments_bp.route('/matches/<int:match_id>/undo', methods=['POST'])
def undo_result(match_id):
    store = EntityStore()
    try:
        match = service.undo_result(match_id, store)
        return _match_response(store, match)
    except BracketError as error:
        return _error_response(error)


@tournaments_bp.route('/matches/<int:match_id>/games', methods=['POST'])
def record_game(match_id):
    store = EntityStore()
    try:
        data = _json_payload()
        match = service.record_game(
            match_id,
            _optional_int(data.get('winner_id'), 'winner_id'),
            store=store,
        )
        return _match_response(store, match)
    except BracketError as error:
        return _error_response(error)


@tournaments_bp.route('/matches/<int:match_id>/games/last', methods=['DELETE'])
def undo_last_game(match_id):
    store = EntityStore()
    try:
        match = service.undo_last_game(match_id, store)
        return _match_response(store, match)
    except BracketError as error:
        return _error_response(error)
