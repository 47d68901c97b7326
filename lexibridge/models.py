"""
SQLAlchemy models for dictionary entries, translations and the case log.
List and set valued fields are stored as JSON text.
"""
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import UniqueConstraint


class Base(DeclarativeBase):
    pass


db = SQLAlchemy(model_class=Base)


class DictionaryEntryModel(db.Model):
    __tablename__ = 'dictionary_entries'
    id = db.Column(db.String(64), primary_key=True)
    word = db.Column(db.String(255), nullable=False, index=True)
    language = db.Column(db.String(10), nullable=False, index=True)
    category_id = db.Column(db.String(64), nullable=True, index=True)
    meanings_json = db.Column(db.Text, default='[]')
    keywords_json = db.Column(db.Text, nullable=True)
    etymology = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), default='approved')
    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)


class TranslationModel(db.Model):
    __tablename__ = 'translations'
    id = db.Column(db.String(64), primary_key=True)
    source_entry_id = db.Column(db.String(64), db.ForeignKey('dictionary_entries.id'),
                                nullable=False, index=True)
    language = db.Column(db.String(10), nullable=False)
    translated_word = db.Column(db.String(255), nullable=False)
    context_json = db.Column(db.Text, default='[]')
    confidence = db.Column(db.Float, default=0.8)
    votes = db.Column(db.Integer, default=0)
    target_entry_id = db.Column(db.String(64), db.ForeignKey('dictionary_entries.id'), nullable=True)
    translation_group_id = db.Column(db.String(255), nullable=True, index=True)
    validation_type = db.Column(db.String(20), default='manual')
    created_by = db.Column(db.String(255), nullable=True)
    validated_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.now)

    vote_rows = db.relationship('TranslationVote', backref='translation', lazy=True,
                                cascade='all, delete-orphan')


class TranslationVote(db.Model):
    __tablename__ = 'translation_votes'
    id = db.Column(db.Integer, primary_key=True)
    translation_id = db.Column(db.String(64), db.ForeignKey('translations.id'), nullable=False)
    user_id = db.Column(db.String(255), nullable=False)
    value = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    __table_args__ = (UniqueConstraint('translation_id', 'user_id', name='uq_vote_translation_user'),)


class CaseRecordModel(db.Model):
    __tablename__ = 'case_records'
    id = db.Column(db.Integer, primary_key=True)
    source_entry_id = db.Column(db.String(64), nullable=False)
    target_entry_id = db.Column(db.String(64), nullable=False)
    similarity_score = db.Column(db.Float, nullable=False, index=True)
    human_decision = db.Column(db.String(20), nullable=False)
    validated_by = db.Column(db.String(255), nullable=True)
    category_match = db.Column(db.Boolean, default=False, index=True)
    context_json = db.Column(db.Text, default='{}')
    validation_type = db.Column(db.String(20), default='manual')
    reason = db.Column(db.Text, nullable=True)
    was_correct_prediction = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.now)
    decided_at = db.Column(db.DateTime, default=datetime.now, index=True)

    __table_args__ = (UniqueConstraint('source_entry_id', 'target_entry_id', name='uq_case_pair'),)


class ConceptGroupModel(db.Model):
    __tablename__ = 'concept_groups'
    id = db.Column(db.String(64), primary_key=True)
    concept_id = db.Column(db.String(255), unique=True, nullable=False)
    primary_word = db.Column(db.String(255), nullable=False)
    primary_language = db.Column(db.String(10), nullable=False)
    category_id = db.Column(db.String(64), nullable=True)
    keywords_json = db.Column(db.Text, default='[]')
    total_translations = db.Column(db.Integer, default=1)
    quality_score = db.Column(db.Float, default=0.0)
    created_at = db.Column(db.DateTime, default=datetime.now)
