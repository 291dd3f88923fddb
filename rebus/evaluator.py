from dataclasses import dataclass
from typing import Tuple

from core.text import tokenize
from .catalog import Part, Puzzle


@dataclass(frozen=True)
class EvaluationResult:
    matched: Tuple[Part, ...]
    near_misses: Tuple[Part, ...]
    missing: Tuple[Part, ...]
    # literal keyword (as written in the catalog) for each matched part
    matched_keywords: Tuple[str, ...]
    # the guess word that triggered each near miss
    near_miss_words: Tuple[str, ...]
    # guess words matching no keyword and not in the answer (near-miss words included)
    stray_tokens: Tuple[str, ...]

    @property
    def found(self):
        return len(self.matched)

    @property
    def total(self):
        return len(self.matched) + len(self.near_misses) + len(self.missing)

    @property
    def progress(self):
        return self.found / self.total if self.total else 0.0

    @property
    def solved(self):
        return not self.missing and not self.near_misses

    @property
    def unsolved(self):
        return self.near_misses + self.missing


def evaluate(puzzle: Puzzle, guess: str) -> EvaluationResult:
    """Classify every part of ``puzzle`` as matched, near miss or missing.

    Matching is exact token equality after normalisation; a part with
    several keywords is matched by any one of them.
    """
    guess_tokens = tokenize(guess)
    token_set = set(guess_tokens)

    matched, near, missing = [], [], []
    matched_keywords, near_words = [], []

    for part in puzzle.parts:
        hit = next(
            ((kw, tok) for kw, tok in zip(part.keywords, part.keyword_tokens) if tok in token_set),
            None,
        )
        if hit:
            matched.append(part)
            matched_keywords.append(hit[0])
            continue
        close = next((tok for tok in part.near_miss_tokens if tok in token_set), None)
        if close:
            near.append(part)
            near_words.append(close)
        else:
            missing.append(part)

    known = set(tokenize(puzzle.answer))
    for part in puzzle.parts:
        known.update(part.keyword_tokens)
    stray = []
    for tok in guess_tokens:
        if tok in known or tok in stray:
            continue
        stray.append(tok)

    return EvaluationResult(
        matched=tuple(matched),
        near_misses=tuple(near),
        missing=tuple(missing),
        matched_keywords=tuple(matched_keywords),
        near_miss_words=tuple(near_words),
        stray_tokens=tuple(stray),
    )
