from flask import Blueprint, jsonify, request, current_app
from scribble.services.games.results import ResultStore
from scribble.services.games.session import SessionMode, Settings, TARGET_COUNTS, target_count
from scribble.services.games.words import Difficulty, WordSourceError, load_words


games = Blueprint('games', __name__)


@games.route('/modes', methods=['GET'])
def get_modes():
    settings = Settings.from_config(current_app.config)
    modes = {}
    for mode in SessionMode:
        modes[mode.value] = {
            'duration': settings.duration_for(mode),
            'target_counts': {d.value: target_count(d, mode) for d in TARGET_COUNTS},
            'acceptance_threshold': settings.acceptance_threshold if mode is SessionMode.CLUE_ROUND else None,
        }
    return jsonify({'modes': modes, 'difficulties': [d.value for d in Difficulty]})


@games.route('/words', methods=['GET'])
def get_words():
    difficulty = request.args.get('difficulty')
    if difficulty:
        try:
            difficulty = Difficulty.parse(difficulty)
        except ValueError as exc:
            return jsonify({'error': str(exc)}), 400
    try:
        words = load_words()
    except WordSourceError as exc:
        current_app.logger.error(f"[words-unavailable] error={exc}")
        return jsonify({'error': 'No word source available'}), 503
    if difficulty:
        words = [w for w in words if w.difficulty.lower() == difficulty.value.lower()]
    return jsonify({'words': [w.to_dict() for w in words], 'count': len(words)})


@games.route('/high-score', methods=['GET'])
def get_high_score():
    return jsonify({'high_score': ResultStore().get_high_score()})


@games.route('/sessions', methods=['GET'])
def get_sessions():
    default_limit = int(current_app.config.get('SESSION_HISTORY_LIMIT', 20))
    try:
        limit = int(request.args.get('limit', default_limit))
    except (TypeError, ValueError):
        return jsonify({'error': 'limit must be an integer'}), 400
    limit = max(1, min(limit, 100))
    return jsonify({'sessions': ResultStore().recent_sessions(limit)})
