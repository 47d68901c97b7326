"""
LexiBridge - Flask Blueprints
Modular route organization for maintainability
"""
from lexibridge.blueprints.translations import translations_bp, init_translations_blueprint
from lexibridge.blueprints.learning import learning_bp, init_learning_blueprint

__all__ = [
    'translations_bp', 'init_translations_blueprint',
    'learning_bp', 'init_learning_blueprint',
]
