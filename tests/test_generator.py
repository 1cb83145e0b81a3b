"""Tests for message generation and the local fallback."""

import asyncio

import pytest

from cobrosmart.engine.generator import (
    FALLBACK_MODEL,
    FallbackContext,
    MessageGenerator,
    clamp_message,
    fallback_message,
)
from fakes import StubProvider


@pytest.fixture
def fallback_context() -> FallbackContext:
    return FallbackContext(
        addressee_line="Buen dia Juan",
        addressee_type="person",
        amount="$300.000",
        days_overdue=60,
        tone="amable",
        pronoun="vos",
        payment_line="Te paso alias para que te quede simple. Alias: corralon.puente",
        signature="Tavo - El Puente",
    )


class TestClampMessage:
    """Tests for whitespace cleanup and the 280 character cap."""

    def test_collapses_whitespace(self):
        assert clamp_message("  Hola \n\n Juan\t  ") == "Hola Juan"

    def test_short_text_untouched(self):
        text = "x" * 280
        assert clamp_message(text) == text

    def test_long_text_truncated_to_exactly_280(self):
        result = clamp_message("palabra " * 100)

        assert len(result) == 280
        assert result.endswith("...")

    def test_truncation_keeps_inner_space(self):
        """The slice is not re-trimmed, so the length stays exactly 280."""
        text = "a" * 276 + " " + "b" * 50
        result = clamp_message(text)

        assert len(result) == 280
        assert result == "a" * 276 + " ..."


class TestFallbackMessage:
    """Tests for the deterministic template."""

    def test_person_fallback(self, fallback_context):
        text = fallback_message(fallback_context)

        assert text.startswith("Buen dia Juan.")
        assert "$300.000" in text
        assert "60 dias" in text
        assert "Pagas hoy o coordinamos fecha?" in text
        assert "Alias: corralon.puente" in text
        assert text.endswith("Tavo - El Puente")
        assert "cuenta corriente" not in text

    def test_usted_register(self, fallback_context):
        context = fallback_context.model_copy(update={"pronoun": "usted"})
        text = fallback_message(context)

        assert "Le escribo" in text
        assert "Paga hoy o coordinamos fecha?" in text

    def test_entity_ultimo_fallback(self, fallback_context):
        context = fallback_context.model_copy(
            update={
                "addressee_type": "entity",
                "addressee_line": "Buen dia, con administracion o cuentas a pagar?",
                "tone": "ultimo",
            }
        )
        text = fallback_message(context)

        assert text.startswith("Buen dia, con administracion o cuentas a pagar? Les escribo")
        assert "me derivan con administracion" in text
        assert "cuenta corriente" in text
        assert len(clamp_message(text)) <= 280

    @pytest.mark.parametrize(
        "addressee_type,pronoun,cta",
        [
            ("person", "vos", "Pagas hoy o coordinamos fecha?"),
            ("person", "usted", "Paga hoy o coordinamos fecha?"),
            ("entity", "vos", "Pagan hoy o coordinamos fecha?"),
            ("entity", "usted", "Pagan hoy o coordinamos fecha?"),
        ],
    )
    def test_call_to_action_offers_both_options(self, fallback_context, addressee_type, pronoun, cta):
        context = fallback_context.model_copy(
            update={"addressee_type": addressee_type, "pronoun": pronoun}
        )
        text = fallback_message(context)

        assert text.count(cta) == 1
        assert text.index(cta) < text.index("Alias:")


class TestMessageGenerator:
    """Tests for the single-attempt generation policy."""

    @pytest.mark.asyncio
    async def test_success_uses_normal_sampling(self, settings, fallback_context):
        provider = StubProvider(content="  Buen dia Juan,\n pagas hoy?  ")
        generator = MessageGenerator(provider, settings)

        result = await generator.generate("prompt", fallback_context)

        assert result.text == "Buen dia Juan, pagas hoy?"
        assert result.model == "stub-model"
        assert result.fallback is False
        call = provider.calls[0]
        assert call["temperature"] == 0.7
        assert call["top_p"] == 0.9
        assert call["max_tokens"] == 180

    @pytest.mark.asyncio
    async def test_regenerate_uses_wider_sampling(self, settings, fallback_context):
        provider = StubProvider()
        generator = MessageGenerator(provider, settings)

        await generator.generate("prompt", fallback_context, regenerate=True)

        assert provider.calls[0]["temperature"] == 0.95
        assert provider.calls[0]["top_p"] == 1.0

    @pytest.mark.asyncio
    async def test_no_provider_falls_back(self, settings, fallback_context):
        result = await MessageGenerator(None, settings).generate("prompt", fallback_context)

        assert result.fallback is True
        assert result.model == FALLBACK_MODEL
        assert result.text == clamp_message(fallback_message(fallback_context))

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self, settings, fallback_context):
        provider = StubProvider(error=RuntimeError("503 from upstream"))

        result = await MessageGenerator(provider, settings).generate("prompt", fallback_context)

        assert result.fallback is True
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_prompt_falls_back(self, settings, fallback_context):
        provider = StubProvider()

        result = await MessageGenerator(provider, settings).generate("   ", fallback_context)

        assert result.fallback is True
        assert provider.completed == 0

    @pytest.mark.asyncio
    async def test_empty_completion_falls_back(self, settings, fallback_context):
        result = await MessageGenerator(StubProvider(content="  "), settings).generate(
            "prompt", fallback_context
        )
        assert result.fallback is True

    @pytest.mark.asyncio
    async def test_timeout_discards_late_result(self, settings, fallback_context):
        """settings.llm_timeout_seconds is 0.2 in tests."""
        provider = StubProvider(content="late message", delay=1.0)

        result = await MessageGenerator(provider, settings).generate("prompt", fallback_context)
        await asyncio.sleep(0.05)

        assert result.fallback is True
        assert result.model == FALLBACK_MODEL
        assert "late message" not in result.text
        assert provider.completed == 0

    @pytest.mark.asyncio
    async def test_long_completion_clamped(self, settings, fallback_context):
        provider = StubProvider(content="muy largo " * 60)

        result = await MessageGenerator(provider, settings).generate("prompt", fallback_context)

        assert len(result.text) == 280
        assert result.text.endswith("...")
