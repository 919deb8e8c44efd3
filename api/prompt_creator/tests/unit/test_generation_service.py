"""Unit tests for the generation call bracket."""

import pytest

from prompt_creator.core.config import settings
from prompt_creator.models.exceptions import ParseError, SchemaError, TransportError, ValidationError
from prompt_creator.models.schemas import OutputLanguage
from prompt_creator.services.generation import GenerationService
from prompt_creator.services.sessions import SessionStore


@pytest.fixture
def session():
    session = SessionStore().create()
    session.state.set_idea("A cozy reading nook")
    session.state.toggle_color("background", "#FF0000")
    return session


class TestGenerationService:

    @pytest.mark.asyncio
    async def test_success_sets_last_result(self, session, make_transport, sample_generation_json):
        transport = make_transport(sample_generation_json)
        service = GenerationService(transport=transport)

        request, result = await service.generate(session, "en")

        assert session.last_result == result
        assert request.output_language == OutputLanguage.EN
        assert request.background_colors == ("red",)
        call = transport.calls[0]
        assert call["kwargs"]["model"] == settings.generation_model
        assert call["kwargs"]["response_format"]["json_schema"]["name"] == "generation_result"
        assert call["args"][0][0]["role"] == "system"

    @pytest.mark.asyncio
    async def test_empty_idea_makes_no_call(self, make_transport):
        transport = make_transport()
        session = SessionStore().create()

        with pytest.raises(ValidationError):
            await GenerationService(transport=transport).generate(session)
        assert transport.calls == []
        assert session.last_result is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply, error", [
        (TransportError("upstream down", status_code=503), TransportError),
        ("not json", ParseError),
        ('{"midjourney":"a"}', SchemaError),
    ])
    async def test_failure_keeps_previous_result(self, session, make_transport, sample_generation_json, reply, error):
        service = GenerationService(transport=make_transport(sample_generation_json, reply))
        _, first = await service.generate(session)

        with pytest.raises(error):
            await service.generate(session)
        assert session.last_result is first

    @pytest.mark.asyncio
    async def test_brief_is_untouched(self, session, make_transport, sample_generation_json):
        before = session.state.brief
        await GenerationService(transport=make_transport(sample_generation_json)).generate(session)
        assert session.state.brief is before
