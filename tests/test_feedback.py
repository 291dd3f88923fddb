import json
from unittest.mock import MagicMock, patch

import pytest
from django.core.exceptions import ImproperlyConfigured

from core.llm import LLMError
from rebus import feedback
from rebus.evaluator import evaluate
from rebus.feedback import (
    FALLBACK_MESSAGE, SUCCESS_MESSAGE, build_hint_payload, clip_sentences, compose,
    progress_phrase,
)


@pytest.mark.parametrize('found,total,expected', [
    (0, 5, 'Ingen deler funnet ennå'),
    (4, 5, 'Kun én del mangler'),
    (2, 5, 'Funnet 2 av 5 deler'),
    (1, 4, 'Funnet 1 av 4 deler'),
])
def test_progress_phrase(found, total, expected):
    assert progress_phrase(found, total) == expected


def test_solved_never_calls_generator(bowling):
    generate = MagicMock()
    result = evaluate(bowling, 'pizza øl konkurranse oslo bowling')
    assert compose(bowling, result, 'x', generate=generate) == SUCCESS_MESSAGE
    generate.assert_not_called()


def test_payload_only_contains_what_the_player_wrote(bowling):
    result = evaluate(bowling, 'pizza øl dart sushi')
    payload = build_hint_payload(bowling, result)
    assert payload['funnet'] == ['pizza', 'øl']
    assert payload['nesten'] == [{'ord': 'dart', 'type': 'sted'}]
    assert payload['ekstra'] == ['dart', 'sushi']
    assert [m['type'] for m in payload['mangler']] == ['aktivitet', 'sted']
    assert payload['fremgang'] == 'Funnet 2 av 5 deler'

    dumped = json.dumps(payload, ensure_ascii=False).lower()
    for word in ('konkurranse', 'oslo', 'bowling'):
        assert word not in dumped


def test_generator_receives_prompt(bowling):
    generate = MagicMock(return_value='Du er godt i gang! Tenk på hvor man møtes.')
    result = evaluate(bowling, 'pizza')
    message = compose(bowling, result, 'pizza', generate=generate)
    assert message == 'Du er godt i gang! Tenk på hvor man møtes.'
    system, user = generate.call_args[0]
    assert system == feedback.SYSTEM_PROMPT
    assert '"funnet": [\n    "pizza"\n  ]' in user


@pytest.mark.parametrize('error', [
    LLMError('boom', status=500),
    LLMError('slow down', status=429, code='rate_limit_exceeded'),
    ImproperlyConfigured('no key'),
])
def test_generator_failure_falls_back(bowling, error):
    generate = MagicMock(side_effect=error)
    result = evaluate(bowling, 'pizza')
    assert compose(bowling, result, 'pizza', generate=generate) == FALLBACK_MESSAGE


@pytest.mark.parametrize('reply', ['', '   ', None])
def test_empty_reply_falls_back(bowling, reply):
    result = evaluate(bowling, 'pizza')
    assert compose(bowling, result, 'pizza', generate=lambda s, u: reply) == FALLBACK_MESSAGE


def test_reply_naming_a_withheld_word_is_discarded(bowling):
    result = evaluate(bowling, 'pizza')
    reply = 'Nesten! Kanskje du skal tenke på BOWLING?'
    assert compose(bowling, result, 'pizza', generate=lambda s, u: reply) == FALLBACK_MESSAGE


def test_reply_may_repeat_found_words(bowling):
    result = evaluate(bowling, 'pizza')
    reply = 'Pizza er riktig! Hva drikker man til?'
    assert compose(bowling, result, 'pizza', generate=lambda s, u: reply) == reply


def test_reply_is_clipped_to_three_sentences(bowling):
    result = evaluate(bowling, 'pizza')
    reply = 'En. To! Tre? Fire. Fem.'
    assert compose(bowling, result, 'pizza', generate=lambda s, u: reply) == 'En. To! Tre?'


def test_clip_sentences_keeps_short_text():
    assert clip_sentences('  Bare én setning  ') == 'Bare én setning'


def test_blocked_bedrock_reply_falls_back(bowling, settings):
    settings.LLM_PROVIDER = 'bedrock'
    client = MagicMock()
    client.converse.return_value = {
        'output': {'message': {'content': []}}, 'stopReason': 'guardrail_intervened',
    }
    result = evaluate(bowling, 'pizza')
    with patch('core.llm.boto3.client', return_value=client):
        assert compose(bowling, result, 'pizza') == FALLBACK_MESSAGE


def test_default_generator_uses_llm(bowling, monkeypatch):
    complete = MagicMock(return_value='Godt jobbet så langt.')
    monkeypatch.setattr(feedback.llm, 'complete', complete)
    result = evaluate(bowling, 'pizza')
    assert compose(bowling, result, 'pizza') == 'Godt jobbet så langt.'
    kwargs = complete.call_args[1]
    assert kwargs == {'max_tokens': feedback.MAX_TOKENS, 'temperature': feedback.TEMPERATURE}
