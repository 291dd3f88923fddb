"""Turns an evaluation into the message shown to the player.

Solved puzzles get a fixed message. Everything else goes to the text
generator with a payload that only contains what the player already wrote
plus the *categories* of what is missing, so the model has nothing to spoil.
"""

import json
import logging
import re

from django.core.exceptions import ImproperlyConfigured

from core import llm
from core.text import tokenize

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = '🎉 Gratulerer! Du har låst opp denne opplevelsen for 2026!'
FALLBACK_MESSAGE = 'Hmm, ikke helt riktig ennå. Se nøye på alle bildene og prøv igjen!'

MAX_SENTENCES = 3
MAX_TOKENS = 120
TEMPERATURE = 0.8

SYSTEM_PROMPT = """Du gir korte, vennlige hint til en rebus.

DU FÅR KUN VITE HVA BRUKEREN HAR SKREVET OG HVILKE TYPER DELER SOM MANGLER. FØLG DISSE REGLENE:
- Du kan gjenta ord fra "funnet", "nesten" og "ekstra", men ingen andre svarord.
- Aldri gjett, skriv eller bruk synonymer for delene som mangler.
- Aldri nevne konkrete steder, navn eller objekter direkte.
- Bruk kun assosiative, menneskelige beskrivelser.
- Maks 2–3 setninger.
- Maks én emoji.

DU KAN:
- Bekrefte fremgang.
- Si at et ord under "nesten" er på rett spor, men ikke riktig.
- Spøke litt med ord under "ekstra" som ikke hører hjemme i svaret.
- Hinte til hva slags TYPE ting som mangler (sted, aktivitet, stemning).
- Beskrive funksjon eller bruk (f.eks. "noe man bærer på ryggen")."""

_RE_SENTENCE_END = re.compile(r'(?<=[.!?])\s+')


def progress_phrase(found, total):
    if found == 0:
        return 'Ingen deler funnet ennå'
    if found == total - 1:
        return 'Kun én del mangler'
    return f'Funnet {found} av {total} deler'


def build_hint_payload(puzzle, result):
    """Everything the generator is allowed to see about this attempt."""
    return {
        'rebus': puzzle.description,
        'fremgang': progress_phrase(result.found, result.total),
        'funnet': list(result.matched_keywords),
        'nesten': [
            {'ord': word, 'type': part.category.label}
            for part, word in zip(result.near_misses, result.near_miss_words)
        ],
        'ekstra': list(result.stray_tokens),
        'mangler': [
            {'type': part.category.label, 'hint': part.hint}
            for part in result.missing
        ],
    }


def build_messages(payload):
    user = (
        'KONTEKST (JSON):\n'
        + json.dumps(payload, ensure_ascii=False, indent=2)
        + '\n\nGi nå en kort, vennlig feedback som hjelper brukeren videre uten å røpe noe.'
    )
    return SYSTEM_PROMPT, user


def withheld_tokens(result):
    tokens = set()
    for part in result.unsolved:
        tokens.update(part.keyword_tokens)
    return tokens


def clip_sentences(text, limit=MAX_SENTENCES):
    sentences = _RE_SENTENCE_END.split(text.strip())
    return ' '.join(sentences[:limit])


def compose(puzzle, result, guess, generate=None):
    """Return the player-facing message for ``result``.

    ``generate(system, user)`` defaults to ``core.llm.complete``; any failure,
    an empty reply or a reply that names a withheld answer word falls back to
    a fixed encouragement.
    """
    if result.solved:
        return SUCCESS_MESSAGE

    system, user = build_messages(build_hint_payload(puzzle, result))
    generate = generate or (
        lambda s, u: llm.complete(s, u, max_tokens=MAX_TOKENS, temperature=TEMPERATURE)
    )
    try:
        text = generate(system, user)
    except (llm.LLMError, ImproperlyConfigured) as e:
        logger.error('Hint generation failed for rebus %s: %s', puzzle.id, e)
        return FALLBACK_MESSAGE

    text = (text or '').strip()
    if not text:
        return FALLBACK_MESSAGE

    leaked = withheld_tokens(result) & set(tokenize(text))
    if leaked:
        logger.warning(
            'Discarded hint for rebus %s that named %d withheld word(s); guess was %r',
            puzzle.id, len(leaked), guess[:80],
        )
        return FALLBACK_MESSAGE
    return clip_sentences(text)
