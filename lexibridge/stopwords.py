"""
LexiBridge - Multilingual Stop Words and Derivational Suffixes

Curated lists used by keyword extraction:
1. Function words and high-frequency verbs for French, English, Spanish and German
   - These carry little semantic weight inside dictionary definitions
2. Derivational suffixes that mark nouns and adjectives worth keeping
   even when the token is short
"""

STOP_WORDS_FRENCH = {
    # Articles and prepositions
    'le', 'la', 'les', 'un', 'une', 'des', 'de', 'du', 'dans', 'pour', 'avec',
    'sans', 'sur', 'sous', 'entre', 'par',
    # Conjunctions and relatives
    'et', 'ou', 'mais', 'donc', 'car', 'si', 'que', 'qui', 'dont', 'où',
    # Determiners and possessives
    'ce', 'cet', 'cette', 'ces', 'son', 'sa', 'ses', 'mon', 'ma', 'mes', 'ton',
    'ta', 'tes', 'notre', 'nos', 'votre', 'vos', 'leur', 'leurs',
    # Pronouns
    'je', 'tu', 'il', 'elle', 'nous', 'vous', 'ils', 'elles', 'me', 'te', 'se',
    'moi', 'toi', 'lui', 'eux',
    # Common verbs
    'être', 'avoir', 'faire', 'aller', 'venir', 'voir', 'savoir', 'pouvoir',
    'vouloir', 'dire', 'prendre', 'donner', 'mettre', 'tenir', 'partir',
    'sortir', 'entrer', 'monter', 'descendre', 'rester', 'tomber', 'naître',
    'mourir',
    # Auxiliary forms
    'est', 'sont', 'était', 'étaient', 'sera', 'seront', 'soit', 'soient',
    'ai', 'as', 'a', 'avons', 'avez', 'ont', 'avais', 'avait', 'avions',
    'aviez', 'avaient', 'aura', 'auras', 'auront', 'ait', 'aient',
}

STOP_WORDS_ENGLISH = {
    # Articles, conjunctions, prepositions
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of',
    'with', 'by', 'from', 'about', 'into', 'through', 'during', 'before',
    'after', 'above', 'below', 'up', 'down', 'out', 'off', 'over', 'under',
    'again', 'further', 'then', 'once',
    # Auxiliaries and modals
    'is', 'am', 'are', 'was', 'were', 'be', 'been', 'being', 'have', 'has',
    'had', 'having', 'do', 'does', 'did', 'doing', 'will', 'would', 'should',
    'could', 'can', 'may', 'might', 'must', 'shall',
    # Pronouns and possessives
    'he', 'she', 'it', 'they', 'we', 'you', 'i', 'me', 'him', 'her', 'us',
    'them', 'my', 'your', 'his', 'its', 'our', 'their',
    # Determiners, interrogatives, quantifiers
    'this', 'that', 'these', 'those', 'what', 'which', 'who', 'when', 'where',
    'why', 'how', 'all', 'any', 'both', 'each', 'few', 'more', 'most', 'other',
    'some', 'such', 'no', 'nor', 'not', 'only', 'own', 'same', 'so', 'than',
    'too', 'very',
}

STOP_WORDS_SPANISH = {
    # Articles and prepositions
    'el', 'la', 'los', 'las', 'un', 'una', 'unos', 'unas', 'de', 'del', 'en',
    'con', 'por', 'para', 'sin', 'sobre', 'bajo', 'entre', 'desde', 'hasta',
    'hacia', 'según', 'durante', 'mediante',
    # Conjunctions and relatives
    'y', 'o', 'pero', 'sino', 'aunque', 'si', 'que', 'quien', 'cual', 'donde',
    'cuando', 'como', 'porque',
    # Demonstratives and possessives
    'este', 'esta', 'estos', 'estas', 'ese', 'esa', 'esos', 'esas', 'aquel',
    'aquella', 'aquellos', 'aquellas', 'mi', 'tu', 'su', 'nuestro', 'vuestro',
    'sus',
    # Pronouns
    'yo', 'tú', 'él', 'ella', 'nosotros', 'vosotros', 'ellos', 'ellas', 'me',
    'te', 'se', 'nos', 'os', 'le', 'les', 'lo',
    # Common verbs
    'ser', 'estar', 'haber', 'tener', 'hacer', 'ir', 'venir', 'ver', 'saber',
    'poder', 'querer', 'decir', 'dar', 'poner', 'llevar', 'traer', 'salir',
    'entrar', 'subir', 'bajar', 'quedar', 'caer', 'nacer', 'morir',
}

STOP_WORDS_GERMAN = {
    # Articles
    'der', 'die', 'das', 'den', 'dem', 'des', 'ein', 'eine', 'einer', 'eines',
    'einem', 'einen',
    # Conjunctions and prepositions
    'und', 'oder', 'aber', 'in', 'an', 'auf', 'zu', 'für', 'von', 'mit', 'bei',
    'nach', 'vor', 'über', 'unter', 'zwischen', 'durch', 'gegen', 'ohne', 'um',
    'während', 'wegen', 'trotz', 'statt',
    # Demonstratives and possessives
    'dieser', 'diese', 'dieses', 'jener', 'jene', 'jenes', 'welcher', 'welche',
    'welches', 'mein', 'dein', 'sein', 'ihr', 'unser', 'euer',
    # Pronouns
    'ich', 'du', 'er', 'sie', 'es', 'wir', 'mich', 'dich', 'sich', 'uns',
    'euch', 'mir', 'dir', 'ihm', 'ihnen',
    # Common verbs
    'haben', 'werden', 'können', 'müssen', 'dürfen', 'sollen', 'wollen',
    'mögen', 'lassen', 'gehen', 'kommen', 'sehen', 'wissen', 'machen', 'geben',
    'nehmen', 'bringen', 'holen', 'legen', 'stellen', 'setzen', 'bleiben',
    'fallen', 'steigen',
}

STOP_WORDS = (
    STOP_WORDS_FRENCH | STOP_WORDS_ENGLISH | STOP_WORDS_SPANISH | STOP_WORDS_GERMAN
)

SIGNIFICANT_SUFFIXES = {
    'fr': ('tion', 'sion', 'ment', 'ité', 'eur', 'ique', 'aire', 'able', 'ible'),
    'en': ('tion', 'sion', 'ment', 'ity', 'ness', 'ful', 'less', 'able', 'ible'),
    'es': ('ción', 'sión', 'miento', 'dad', 'idad', 'ador', 'ivo', 'able'),
    'de': ('ung', 'keit', 'heit', 'schaft', 'lich', 'bar', 'sam'),
}
