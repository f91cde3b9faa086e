"""
Tests for template generation and the Generate button's session state.

The OpenAI client is always mocked; no network access happens here.
"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from sirzmail.generator import (
    MISSING_KEY_MESSAGE,
    SYSTEM_INSTRUCTION,
    TEMPERATURE,
    UNEXPECTED_FAILURE_MESSAGE,
    UPSTREAM_FAILURE_MESSAGE,
    EmailGenerator,
    GenerationError,
    GenerationSession,
    build_prompt,
    strip_markdown_fences,
)
from sirzmail.models import EmailOptions, EmailType, LoadingState


def make_client(content):
    client = MagicMock()
    message = MagicMock()
    message.content = content
    client.chat.completions.create.return_value = MagicMock(choices=[MagicMock(message=message)])
    return client


@pytest.fixture
def options():
    return EmailOptions(
        topic='Spring Launch',
        audience='Existing customers',
        tone='Friendly',
        type=EmailType.PROMOTIONAL,
        additional_context='20% off until Friday',
    )


class TestPrompt:

    def test_prompt_lists_every_option(self, options):
        prompt = build_prompt(options)
        assert '- Type: Promotional' in prompt
        assert '- Topic: Spring Launch' in prompt
        assert '- Target Audience: Existing customers' in prompt
        assert '- Tone: Friendly' in prompt
        assert '- Context/Details: 20% off until Friday' in prompt

    def test_strip_fences(self):
        assert strip_markdown_fences('```html\n<div>x</div>\n```') == '<div>x</div>'

    def test_strip_leaves_plain_html(self):
        assert strip_markdown_fences('  <div>x</div>\n') == '<div>x</div>'

    def test_options_validation(self):
        assert EmailOptions(topic='  ').validation_error() == 'Topic is required'
        assert EmailOptions(topic='x', tone='Grumpy').validation_error() == "Unknown tone 'Grumpy'"
        assert EmailOptions(topic='x').validation_error() is None


class TestEmailGenerator:

    def test_generate_calls_chat_completions(self, options):
        client = make_client('```html\n<p>Hi</p>\n```')
        generator = EmailGenerator(client=client, model='gpt-test')

        assert generator.generate(options) == '<p>Hi</p>'

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs['model'] == 'gpt-test'
        assert kwargs['temperature'] == TEMPERATURE
        assert kwargs['messages'][0] == {'role': 'system', 'content': SYSTEM_INSTRUCTION}
        assert kwargs['messages'][1]['content'] == build_prompt(options)

    def test_uses_configured_model(self, options):
        client = make_client('<p>Hi</p>')
        with patch('sirzmail.generator.get_model', return_value='gpt-configured'):
            EmailGenerator(client=client).generate(options)
        assert client.chat.completions.create.call_args.kwargs['model'] == 'gpt-configured'

    def test_empty_response(self, options):
        client = make_client(None)
        assert EmailGenerator(client=client, model='m').generate(options) == ''

    def test_upstream_failure(self, options):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError('503 upstream')
        with pytest.raises(GenerationError) as exc:
            EmailGenerator(client=client, model='m').generate(options)
        assert str(exc.value) == UPSTREAM_FAILURE_MESSAGE

    def test_missing_api_key(self, options):
        with patch('sirzmail.generator.get_api_key', return_value=None):
            with pytest.raises(GenerationError) as exc:
                EmailGenerator(model='m').generate(options)
        assert str(exc.value) == MISSING_KEY_MESSAGE

    def test_client_built_from_stored_key(self, options):
        client = make_client('<p>ok</p>')
        with patch('sirzmail.generator.get_api_key', return_value='sk-test'), \
             patch('sirzmail.generator.OpenAI', return_value=client) as openai_cls:
            generator = EmailGenerator(model='m')
            generator.generate(options)
            generator.generate(options)
        openai_cls.assert_called_once_with(api_key='sk-test')

    def test_invalid_options_never_reach_the_client(self):
        client = make_client('<p>Hi</p>')
        with pytest.raises(ValueError):
            EmailGenerator(client=client, model='m').generate(EmailOptions(topic=''))
        client.chat.completions.create.assert_not_called()


class TestGenerationSession:

    def test_success(self, options):
        generator = MagicMock()
        generator.generate.return_value = '<p>done</p>'
        session = GenerationSession(generator)

        assert asyncio.run(session.submit(options)) == '<p>done</p>'
        assert session.state is LoadingState.SUCCESS
        assert session.error is None

    def test_generation_error_is_shown(self, options):
        generator = MagicMock()
        generator.generate.side_effect = GenerationError(MISSING_KEY_MESSAGE)
        session = GenerationSession(generator)

        assert asyncio.run(session.submit(options)) is None
        assert session.state is LoadingState.ERROR
        assert session.error == MISSING_KEY_MESSAGE

    def test_unexpected_error(self, options):
        generator = MagicMock()
        generator.generate.side_effect = KeyError('boom')
        session = GenerationSession(generator)

        asyncio.run(session.submit(options))
        assert session.error == UNEXPECTED_FAILURE_MESSAGE

    def test_dismiss_error(self, options):
        generator = MagicMock()
        generator.generate.side_effect = GenerationError(UPSTREAM_FAILURE_MESSAGE)
        session = GenerationSession(generator)
        changes = []
        session.set_on_change(lambda s: changes.append((s.state, s.error)))

        asyncio.run(session.submit(options))
        session.dismiss_error()

        assert session.error is None
        assert changes == [
            (LoadingState.GENERATING, None),
            (LoadingState.ERROR, UPSTREAM_FAILURE_MESSAGE),
            (LoadingState.ERROR, None),
        ]

    def test_submission_while_generating_is_rejected(self, options):
        generator = MagicMock()
        generator.generate.return_value = '<p>first</p>'

        async def scenario():
            gate = asyncio.Event()

            async def gated_runner(func, *args):
                await gate.wait()
                return func(*args)

            session = GenerationSession(generator, runner=gated_runner)
            first = asyncio.create_task(session.submit(options))
            await asyncio.sleep(0)
            assert session.busy
            assert await session.submit(options) is None
            gate.set()
            return await first

        assert asyncio.run(scenario()) == '<p>first</p>'
        generator.generate.assert_called_once()
