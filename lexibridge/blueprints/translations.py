"""
LexiBridge - Translations Blueprint

Routes for proposing, resolving, suggesting, validating and voting on
translations.

Key Features:
    - Proposal: decides merge / separate / uncertain for a new translation
    - Resolution: applies a contributor's answer to an uncertain proposal
    - Suggestions: ranked target-language entries to link a translation to
    - Validation: human merge/separate verdicts feeding the case memory
    - Voting: one +1 / -1 vote per user per translation

The acting user comes from the JSON body ('user_id') or the X-User-Id header.
"""
from flask import Blueprint, jsonify, request

from lexibridge.errors import LexiBridgeError
from lexibridge.logging_config import get_logger

logger = get_logger('translations')

translations_bp = Blueprint('translations', __name__)

_orchestrator = None


def init_translations_blueprint(orchestrator):
    """Initialize blueprint with required dependencies"""
    global _orchestrator
    _orchestrator = orchestrator


def _current_user(data):
    return data.get('user_id') or request.headers.get('X-User-Id')


def _missing(data, *fields):
    absent = [f for f in fields if not data.get(f)]
    if absent:
        return jsonify({'error': f"Missing required fields: {', '.join(absent)}"}), 400
    return None


@translations_bp.route('/translations', methods=['POST'])
def propose_translation():
    """Submit a translation and let the engine decide whether it merges"""
    data = request.get_json(silent=True) or {}
    error = _missing(data, 'source_id', 'target_language', 'text')
    if error:
        return error
    try:
        result = _orchestrator.propose_translation(
            data['source_id'],
            data['target_language'],
            data['text'],
            _current_user(data),
            context=data.get('context'),
            confidence=data.get('confidence'),
        )
        return jsonify(result.to_dict()), 201 if result.translation_id else 200
    except LexiBridgeError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        logger.error(f"Proposal failed: {e}")
        return jsonify({'error': str(e)}), 500


@translations_bp.route('/translations/resolve', methods=['POST'])
def resolve_proposal():
    """Apply a human answer to an uncertain proposal"""
    data = request.get_json(silent=True) or {}
    error = _missing(data, 'source_id', 'target_language', 'text', 'target_entry_id', 'action')
    if error:
        return error
    try:
        result = _orchestrator.resolve_proposal(
            data['source_id'],
            data['target_language'],
            data['text'],
            data['target_entry_id'],
            data['action'],
            _current_user(data),
            reason=data.get('reason'),
        )
        return jsonify(result.to_dict())
    except LexiBridgeError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        logger.error(f"Resolution failed: {e}")
        return jsonify({'error': str(e)}), 500


@translations_bp.route('/translations/suggest', methods=['POST'])
def suggest_candidates():
    """Ranked candidates for linking a translation"""
    data = request.get_json(silent=True) or {}
    error = _missing(data, 'source_id', 'target_language')
    if error:
        return error
    try:
        suggestions = _orchestrator.suggest_candidates(
            data['source_id'],
            data['target_language'],
            search_term=data.get('search_term'),
            min_similarity=data.get('min_similarity'),
        )
        return jsonify({'suggestions': [s.to_dict() for s in suggestions]})
    except LexiBridgeError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        logger.error(f"Suggestion failed: {e}")
        return jsonify({'error': str(e)}), 500


@translations_bp.route('/translations/<translation_id>/validate', methods=['PUT'])
def validate_translation(translation_id):
    """Record a merge / separate verdict on an existing translation"""
    data = request.get_json(silent=True) or {}
    error = _missing(data, 'action')
    if error:
        return error
    try:
        result = _orchestrator.validate_translation(
            translation_id,
            data['action'],
            _current_user(data),
            reason=data.get('reason'),
            adjusted_confidence=data.get('adjusted_confidence'),
            target_entry_id=data.get('target_entry_id'),
        )
        return jsonify(result)
    except LexiBridgeError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        logger.error(f"Validation of {translation_id} failed: {e}")
        return jsonify({'error': str(e)}), 500


@translations_bp.route('/translations/<translation_id>/vote', methods=['POST'])
def vote(translation_id):
    """Cast a single +1 / -1 vote"""
    data = request.get_json(silent=True) or {}
    try:
        value = int(data.get('value', 0))
    except (TypeError, ValueError):
        return jsonify({'error': 'Vote value must be +1 or -1'}), 400
    try:
        return jsonify(_orchestrator.vote(translation_id, value, _current_user(data)))
    except LexiBridgeError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        logger.error(f"Vote on {translation_id} failed: {e}")
        return jsonify({'error': str(e)}), 500
