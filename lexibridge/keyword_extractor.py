"""
LexiBridge - Keyword Extractor

Derives the keyword set that stands in for an entry's meaning.

Sources, in order:
    - Definitions: every significant token
    - Examples: at most the first few significant tokens per example sentence
    - Synonyms: tokenized like definitions
    - Etymology: every significant token

A token is significant when it survives the stop list and is either long
(6+ letters) or ends in a derivational suffix such as -tion, -ness, -ción, -ung.
A cached keyword set on the entry short-circuits extraction.
"""
import re
import unicodedata

from lexibridge.config import KeywordConfig

_LETTER_RUN = re.compile(r'[^\W\d_]+')


def tokenize(text):
    """Split text into lower-cased runs of Unicode letters"""
    if not text:
        return []
    normalized = unicodedata.normalize('NFC', text).lower()
    return _LETTER_RUN.findall(normalized)


class KeywordExtractor:
    def __init__(self, config=None):
        self.config = config or KeywordConfig()

    def is_significant(self, token):
        """Long tokens, or short ones carrying a derivational suffix"""
        if len(token) >= self.config.long_token_length:
            return True
        if len(token) < self.config.min_suffix_token_length:
            return False
        return any(pattern.search(token) for pattern in self.config.suffix_patterns)

    def extract_from_text(self, text):
        """Significant tokens of a text, in reading order, duplicates kept"""
        keywords = []
        for token in tokenize(text):
            if len(token) < self.config.min_token_length:
                continue
            if token.isdigit() or token in self.config.stop_words:
                continue
            if self.is_significant(token):
                keywords.append(token)
        return keywords

    def extract(self, entry):
        """Keyword set of a dictionary entry

        Returns the cached set unchanged when the entry carries one.
        An entry with no meanings and no etymology yields an empty set.
        """
        if entry.keywords:
            return set(entry.keywords)

        keywords = set()
        for meaning in entry.meanings or []:
            for definition in meaning.definitions:
                keywords.update(self.extract_from_text(definition))
            for example in meaning.examples:
                extracted = self.extract_from_text(example)
                keywords.update(extracted[:self.config.max_tokens_per_example])
            for synonym in meaning.synonyms:
                keywords.update(self.extract_from_text(synonym))

        if entry.etymology:
            keywords.update(self.extract_from_text(entry.etymology))

        return keywords


keyword_extractor = KeywordExtractor()
