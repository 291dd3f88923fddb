"""Text normalisation shared by the rebus checker and the idea stages."""

import re
import unicodedata

ALPHABET = frozenset('abcdefghijklmnopqrstuvwxyzæøå0123456789 ')

STOPWORDS = frozenset([
    # Norwegian
    'og', 'i', 'på', 'pa', 'med', 'for', 'til', 'av', 'en', 'ei', 'et', 'den', 'det',
    'de', 'som', 'er', 'var', 'om', 'fra', 'hos', 'ved', 'at', 'så', 'sa', 'men',
    'eller', 'jeg', 'vi', 'du', 'dere', 'ha', 'har', 'kan', 'vil', 'skal',
    # English
    'the', 'a', 'an', 'and', 'of', 'on', 'in', 'to', 'with',
])

_RE_WHITESPACE = re.compile(r'\s+')

_FOLD = str.maketrans({'ø': 'o', 'æ': 'ae', 'å': 'a'})


def _fold_char(ch):
    if ch in ALPHABET:
        return ch
    if ch.isspace():
        return ' '
    # é -> e, ü -> u; anything without an allowed base letter is dropped
    base = unicodedata.normalize('NFKD', ch)[:1]
    return base if base in ALPHABET and base != ' ' else ''


def normalize(text):
    """Lowercase, keep only the allowed alphabet and collapse whitespace."""
    if not text:
        return ''
    lowered = str(text).lower()
    kept = ''.join(_fold_char(ch) for ch in lowered)
    return _RE_WHITESPACE.sub(' ', kept).strip()


def tokenize(text):
    return [t for t in normalize(text).split(' ') if t and t not in STOPWORDS]


def fold(text):
    """Diacritic-free, lowercase form used when comparing labels like stage names."""
    stripped = ''.join(
        ch for ch in unicodedata.normalize('NFD', str(text or '').lower())
        if unicodedata.category(ch) != 'Mn'
    )
    return _RE_WHITESPACE.sub(' ', stripped.translate(_FOLD)).strip()
