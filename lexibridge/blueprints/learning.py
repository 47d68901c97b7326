"""
LexiBridge - Learning Blueprint
Routes exposing what the engine has learned from human decisions
"""
from flask import Blueprint, jsonify, request

from lexibridge.errors import LexiBridgeError
from lexibridge.logging_config import get_logger

logger = get_logger('learning')

learning_bp = Blueprint('learning', __name__)

_orchestrator = None
_registry = None


def init_learning_blueprint(orchestrator, registry):
    """Initialize blueprint with required dependencies"""
    global _orchestrator, _registry
    _orchestrator = orchestrator
    _registry = registry


@learning_bp.route('/learning/insights')
def get_insights():
    """Accuracy per feature, recommended thresholds and top patterns"""
    limit = request.args.get('limit', type=int)
    try:
        return jsonify(_orchestrator.get_learning_insights(limit))
    except Exception as e:
        logger.error(f"Insights failed: {e}")
        return jsonify({'error': str(e)}), 500


@learning_bp.route('/learning/patterns')
def get_patterns():
    limit = request.args.get('limit', type=int)
    try:
        return jsonify({'patterns': _orchestrator.mine_patterns(limit)})
    except Exception as e:
        logger.error(f"Pattern mining failed: {e}")
        return jsonify({'error': str(e)}), 500


@learning_bp.route('/learning/thresholds')
def get_thresholds():
    """Threshold snapshot currently in effect"""
    return jsonify(_registry.current().to_dict())


@learning_bp.route('/learning/thresholds', methods=['PUT'])
def recalibrate_thresholds():
    """Recompute thresholds from the case memory

    The new snapshot only replaces the current one (and is saved) when the
    body carries "apply": true.
    """
    data = request.get_json(silent=True) or {}
    apply = bool(data.get('apply', False))
    try:
        thresholds = _orchestrator.recalibrate_thresholds(apply=apply)
        if apply:
            _registry.save()
        return jsonify({'applied': apply, 'thresholds': thresholds.to_dict()})
    except Exception as e:
        logger.error(f"Recalibration failed: {e}")
        return jsonify({'error': str(e)}), 500


@learning_bp.route('/learning/similarity')
def compare_entries():
    """Debug view: similarity and prediction for two entries"""
    source_id = request.args.get('a')
    target_id = request.args.get('b')
    if not source_id or not target_id:
        return jsonify({'error': 'Both a and b entry ids are required'}), 400
    try:
        return jsonify(_orchestrator.compare(source_id, target_id))
    except LexiBridgeError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        logger.error(f"Comparison failed: {e}")
        return jsonify({'error': str(e)}), 500
