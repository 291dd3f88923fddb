import pytest

from core.text import STOPWORDS, tokenize
from rebus.catalog import PUZZLES, Category, Part, Puzzle, get_puzzle


def test_five_puzzles_with_unique_ids():
    assert [p.id for p in PUZZLES] == [1, 2, 3, 4, 5]


def test_get_puzzle_lookup():
    assert get_puzzle(3).id == 3
    assert get_puzzle('2').id == 2
    assert get_puzzle(99) is None
    assert get_puzzle('abc') is None
    assert get_puzzle(None) is None


@pytest.mark.parametrize('puzzle', PUZZLES, ids=lambda p: f'rebus{p.id}')
def test_keywords_appear_in_answer_and_are_not_stopwords(puzzle):
    answer = set(tokenize(puzzle.answer))
    for part in puzzle.parts:
        for token in part.keyword_tokens:
            assert token not in STOPWORDS
            assert token in answer


@pytest.mark.parametrize('puzzle', PUZZLES, ids=lambda p: f'rebus{p.id}')
def test_description_and_hints_do_not_name_answers(puzzle):
    keywords = {t for part in puzzle.parts for t in part.keyword_tokens}
    assert not keywords & set(tokenize(puzzle.description))
    for part in puzzle.parts:
        assert not keywords & set(tokenize(part.hint))


@pytest.mark.parametrize('puzzle', PUZZLES, ids=lambda p: f'rebus{p.id}')
def test_near_misses_never_collide_with_keywords(puzzle):
    keywords = {t for part in puzzle.parts for t in part.keyword_tokens}
    for part in puzzle.parts:
        assert not keywords & set(part.near_miss_tokens)


def test_part_rejects_overlapping_near_misses():
    with pytest.raises(ValueError):
        Part(Category.DRINK, ('øl',), 'noe man drikker', near_misses=('ØL',))


def test_part_rejects_multi_word_keywords():
    with pytest.raises(ValueError):
        Part(Category.PLACE, ('mon oncl',), 'et navn')


def test_puzzle_requires_parts():
    with pytest.raises(ValueError):
        Puzzle(id=9, answer='x', description='y', parts=())
