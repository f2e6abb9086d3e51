"""
Game Controller

Handles all game-related HTTP endpoints.
"""

from flask import Blueprint, current_app, request, jsonify
from ..models.game import ErrorKind
from ..services.game_service import current_game_services
from ..utils.decorators import require_session
from ..utils.game_logger import game_logger
from ..websocket.handlers import broadcast_game_event

game_bp = Blueprint('game', __name__)

# DUPLICATE_ANSWER is harmless and answered with 200
_CONFLICT_KINDS = {ErrorKind.GAME_OVER, ErrorKind.ROUND_NOT_ACTIVE, ErrorKind.ROUND_NOT_OVER, ErrorKind.ALREADY_SPUN}
_VALIDATION_KINDS = {ErrorKind.INVALID_GUESS_LENGTH, ErrorKind.EMPTY_GUESS}


def _status_for(error_kind):
    if error_kind in _CONFLICT_KINDS:
        return 409
    if error_kind in _VALIDATION_KINDS:
        return 400
    return 200


def _unavailable():
    return jsonify({
        'success': False,
        'error': 'Game service unavailable'
    }), 500


def _emit_event(game, event, **payload):
    socketio = getattr(current_app, 'socketio', None)
    if socketio is not None:
        broadcast_game_event(socketio, request.session_id, game, event, **payload)


def _state_response(services, state, result=None):
    response_data = {
        'success': True if result is None else result.accepted,
        'persistent': services.persistent,
        'state': state
    }
    if result is not None:
        response_data['result'] = result.to_dict()
        if not result.accepted:
            response_data['error'] = result.message
            response_data['error_kind'] = result.error_kind.value if result.error_kind else None
    if not services.persistent:
        # play continues in memory only
        response_data.setdefault('error_kind', ErrorKind.STORAGE_UNAVAILABLE.value)
        response_data['warning'] = 'Progress is only kept until the server restarts'
    return response_data


def _read_guess():
    data = request.get_json(silent=True)
    if not data or 'guess' not in data or not isinstance(data['guess'], str):
        return None
    return data['guess']


@game_bp.route('/session', methods=['GET'])
@require_session
def get_session():
    """Return the browsing-session id, creating it on first call."""
    game_logger.log_user_action(request, 'get_session')
    return jsonify({'success': True, 'session_id': request.session_id})


@game_bp.route('/wordle/state', methods=['GET'])
@require_session
def get_wordle_state():
    """Restore today's word puzzle, or start it."""
    try:
        services = current_game_services()
        if not services:
            return _unavailable()

        game_logger.log_user_action(request, 'get_state', 'wordle')

        with services.word_game.locked(request.session_id):
            word_round = services.word_game.get_round(request.session_id)
            response_data = _state_response(services, word_round.public_view())

        game_logger.log_server_response(request, 'get_state', True, response_data, 'wordle')
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_state', 'wordle')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_state', False, error_response, 'wordle')
        return jsonify(error_response), 500


@game_bp.route('/wordle/guess', methods=['POST'])
@require_session
def make_wordle_guess():
    """Submit a guess for evaluation."""
    try:
        services = current_game_services()
        if not services:
            return _unavailable()

        guess = _read_guess()
        if guess is None:
            error_response = {
                'success': False,
                'error': 'Guess is required',
                'error_kind': ErrorKind.INVALID_GUESS_LENGTH.value
            }
            game_logger.log_server_response(request, 'submit_guess', False, error_response, 'wordle')
            return jsonify(error_response), 400

        game_logger.log_user_action(request, 'submit_guess', 'wordle', guess_length=len(guess))

        with services.word_game.locked(request.session_id):
            word_round, result = services.word_game.submit_guess(request.session_id, guess)
            response_data = _state_response(services, word_round.public_view(), result)

        game_logger.log_server_response(
            request, 'submit_guess', result.accepted, response_data, 'wordle',
            guesses_used=len(word_round.state.guesses), game_over=word_round.is_over
        )

        if 'won' in result.events:
            game_logger.log_game_event(
                request.session_id, 'game_won', request.remote_addr,
                guesses_used=len(word_round.state.guesses), target_word=word_round.state.solution
            )
            _emit_event('wordle', 'won', coupon_code=word_round.state.reward_code)
        elif 'lost' in result.events:
            game_logger.log_game_event(
                request.session_id, 'game_lost', request.remote_addr,
                target_word=word_round.state.solution, final_guess=guess.strip().upper()
            )
            _emit_event('wordle', 'lost', answer=word_round.state.solution)

        return jsonify(response_data), _status_for(result.error_kind)

    except Exception as e:
        game_logger.log_error(request, e, 'submit_guess', 'wordle')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'submit_guess', False, error_response, 'wordle')
        return jsonify(error_response), 500


@game_bp.route('/feud/state', methods=['GET'])
@require_session
def get_feud_state():
    """Restore today's feud session, or start it."""
    try:
        services = current_game_services()
        if not services:
            return _unavailable()

        game_logger.log_user_action(request, 'get_state', 'feud')

        with services.feud_game.locked(request.session_id):
            feud = services.feud_game.get_round(request.session_id)
            response_data = _state_response(services, feud.public_view())

        game_logger.log_server_response(request, 'get_state', True, response_data, 'feud')
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_state', 'feud')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_state', False, error_response, 'feud')
        return jsonify(error_response), 500


@game_bp.route('/feud/guess', methods=['POST'])
@require_session
def make_feud_guess():
    """Submit an answer for the current feud round."""
    try:
        services = current_game_services()
        if not services:
            return _unavailable()

        guess = _read_guess()
        if guess is None:
            error_response = {
                'success': False,
                'error': 'Guess is required',
                'error_kind': ErrorKind.EMPTY_GUESS.value
            }
            game_logger.log_server_response(request, 'submit_answer', False, error_response, 'feud')
            return jsonify(error_response), 400

        game_logger.log_user_action(request, 'submit_answer', 'feud', guess=guess)

        with services.feud_game.locked(request.session_id):
            feud, result = services.feud_game.submit_guess(request.session_id, guess)
            response_data = _state_response(services, feud.public_view(), result)

        game_logger.log_server_response(
            request, 'submit_answer', result.accepted, response_data, 'feud',
            strikes=feud.state.strikes, score=feud.state.score
        )

        if 'round_over' in result.events:
            _emit_event('feud', 'round_over', round=feud.state.question_index + 1, score=feud.state.score)

        return jsonify(response_data), _status_for(result.error_kind)

    except Exception as e:
        game_logger.log_error(request, e, 'submit_answer', 'feud')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'submit_answer', False, error_response, 'feud')
        return jsonify(error_response), 500


@game_bp.route('/feud/next', methods=['POST'])
@require_session
def next_feud_round():
    """Advance from a finished round."""
    try:
        services = current_game_services()
        if not services:
            return _unavailable()

        game_logger.log_user_action(request, 'next_round', 'feud')

        with services.feud_game.locked(request.session_id):
            feud, result = services.feud_game.advance(request.session_id)
            response_data = _state_response(services, feud.public_view(), result)

        game_logger.log_server_response(request, 'next_round', result.accepted, response_data, 'feud')

        if 'session_complete' in result.events:
            game_logger.log_game_event(
                request.session_id, 'session_complete', request.remote_addr,
                score=feud.state.score, rounds=len(feud.questions)
            )
            _emit_event('feud', 'session_complete', score=feud.state.score)

        return jsonify(response_data), _status_for(result.error_kind)

    except Exception as e:
        game_logger.log_error(request, e, 'next_round', 'feud')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'next_round', False, error_response, 'feud')
        return jsonify(error_response), 500


@game_bp.route('/spin/state', methods=['GET'])
@require_session
def get_spin_state():
    """Today's wheel, and the prize if the session already spun."""
    try:
        services = current_game_services()
        if not services:
            return _unavailable()

        game_logger.log_user_action(request, 'get_state', 'spin')

        with services.spin_game.locked(request.session_id):
            spin = services.spin_game.get_round(request.session_id)
            response_data = _state_response(services, spin.public_view())

        game_logger.log_server_response(request, 'get_state', True, response_data, 'spin')
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_state', 'spin')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_state', False, error_response, 'spin')
        return jsonify(error_response), 500


@game_bp.route('/spin', methods=['POST'])
@require_session
def spin_wheel():
    """Spin the daily prize wheel."""
    try:
        services = current_game_services()
        if not services:
            return _unavailable()

        game_logger.log_user_action(request, 'spin', 'spin')

        with services.spin_game.locked(request.session_id):
            spin, result = services.spin_game.spin(request.session_id)
            response_data = _state_response(services, spin.public_view(), result)

        game_logger.log_server_response(request, 'spin', result.accepted, response_data, 'spin')

        if 'prize_won' in result.events:
            game_logger.log_game_event(
                request.session_id, 'prize_won', request.remote_addr,
                prize=spin.segment.label, prize_type=spin.segment.prize_type
            )
            _emit_event('spin', 'prize_won', prize=spin.segment.to_dict(), coupon_code=spin.state.prize_code)

        return jsonify(response_data), _status_for(result.error_kind)

    except Exception as e:
        game_logger.log_error(request, e, 'spin', 'spin')
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'spin', False, error_response, 'spin')
        return jsonify(error_response), 500


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        services = current_game_services()

        game_logger.log_user_action(request, 'health_check')

        lifecycle = getattr(current_app, 'lifecycle', None)
        response_data = {
            'status': 'healthy' if services else 'degraded',
            'storage_backend': services.storage_backend if services else None,
            'persistent': services.persistent if services else False,
            'active_word_games': services.word_game.active_games if services else 0,
            'active_feud_games': services.feud_game.active_games if services else 0,
            'active_spin_games': services.spin_game.active_games if services else 0,
            'scheduled_tasks': lifecycle.status() if lifecycle else {},
            'log_stats': game_logger.get_log_stats()
        }

        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        game_logger.log_server_response(request, 'health_check', False, error_response)
        return jsonify(error_response), 500
