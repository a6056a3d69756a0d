# -*- coding: utf-8 -*-
"""
Drafting agendas and modules with a chat-completion model.

The endpoint is any OpenAI-compatible API (OpenRouter by default). Calls are
made once, without retries, and are bounded by an explicit timeout.
"""
from __future__ import annotations

import asyncio
import typing as t

import openai
from loguru import logger
from openai import OpenAI

from agenda_builder.config import DEFAULT_SETTINGS, AgendaSettings, GeneratorConfig
from agenda_builder.converter import from_generated_text, modules_from_generated_text
from agenda_builder.errors import GenerationError
from agenda_builder.models import AgendaDraft, ParseError
from prompts import load_prompt, render_prompt
from training_store.models import TrainingModule, TrainingRequirement


def get_openai_client(config: t.Optional[GeneratorConfig] = None) -> OpenAI:
    """Get an OpenAI client pointed at the configured endpoint."""
    config = config or GeneratorConfig()
    if not config.api_key:
        raise GenerationError("No API key configured. Set OPENROUTER_API_KEY or OPENAI_API_KEY.")
    return OpenAI(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.timeout,
        max_retries=0,
        default_headers={"X-Title": config.app_title},
    )


def complete(
        system_prompt: str,
        user_prompt: str,
        model: t.Optional[str] = None,
        temperature: t.Optional[float] = None,
        config: t.Optional[GeneratorConfig] = None,
        client: t.Optional[OpenAI] = None,
) -> str:
    """Send one system/user prompt pair and return the reply text.

    Args:
        system_prompt: System message content
        user_prompt: User message content
        model: Model id; defaults to the configured model
        temperature: Sampling temperature; defaults to the configured value
        config: Endpoint settings
        client: Pre-built client, mainly for tests

    Returns:
        The reply text, unparsed.

    Raises:
        GenerationError: On network, auth or API errors, or an empty reply.
    """
    config = config or GeneratorConfig()
    client = client or get_openai_client(config)
    model = model or config.model
    temperature = config.temperature if temperature is None else temperature

    logger.info("Requesting completion", model=model, temperature=temperature)
    try:
        completion = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=config.max_tokens,
        )
    except openai.APITimeoutError:
        raise GenerationError(f"Generation timed out after {config.timeout} seconds")
    except openai.APIStatusError as e:
        raise GenerationError(f"API Error: {e.status_code} {e.message}")
    except openai.APIError as e:
        raise GenerationError(f"Error calling generation service: {e}")

    content = completion.choices[0].message.content if completion.choices else None
    if not content:
        raise GenerationError("No content generated")
    return content


async def complete_async(
        system_prompt: str,
        user_prompt: str,
        model: t.Optional[str] = None,
        temperature: t.Optional[float] = None,
        timeout: t.Optional[float] = None,
        config: t.Optional[GeneratorConfig] = None,
        client: t.Optional[OpenAI] = None,
) -> str:
    """Run `complete` in a worker thread so the caller can cancel or time it out.

    Cancelling the awaiting task abandons the call; the reply, if it ever
    arrives, is discarded.

    Raises:
        GenerationError: As `complete`, or when `timeout` elapses.
    """
    config = config or GeneratorConfig()
    timeout = config.timeout if timeout is None else timeout
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(complete, system_prompt, user_prompt, model, temperature, config, client),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        raise GenerationError(f"Generation timed out after {timeout} seconds")


def _bullets(items: t.Sequence[str], fallback: str) -> str:
    return "\n".join(f"- {item}" for item in items) if items else f"- {fallback}"


def build_agenda_prompts(
        requirement: TrainingRequirement,
        modules: t.Sequence[TrainingModule],
        settings: t.Optional[AgendaSettings] = None,
) -> tuple[str, str]:
    """Build the system and user prompts for drafting an agenda.

    :param requirement: The training requirement to design for.
    :param modules: Modules the model may schedule.
    :return: (system_prompt, user_prompt)
    """
    settings = settings or DEFAULT_SETTINGS
    focus = requirement.mindset_focus
    modules_text = "\n".join(
        f"- {m.module_title} ({m.duration} min) - {m.description}" for m in modules
    ) or "- None available"
    user_prompt = render_prompt(
        "agenda_generator_user_prompt",
        training_title=requirement.training_title,
        description=requirement.description,
        duration=requirement.target_duration(settings),
        group_size=requirement.group_size(settings),
        experience_level=requirement.target_audience.experience_level or "intermediate",
        industry_context=requirement.target_audience.industry_context or "General",
        interaction_level=requirement.constraints.interaction_level or "medium",
        learning_objectives=_bullets(focus.learning_objectives, "To be defined"),
        primary_topics=", ".join(focus.primary_topics) or "General training topics",
        secondary_topics=", ".join(focus.secondary_topics) or "Supporting topics",
        modules=modules_text,
    )
    return load_prompt("agenda_generator_system_prompt"), user_prompt


def build_module_prompts(topic: str) -> tuple[str, str]:
    """Build the system and user prompts for researching training modules."""
    if not topic.strip():
        raise ValueError("Please enter a training topic")
    user_prompt = f"Please conduct the research for the training topic of {topic.strip()}"
    return load_prompt("module_generator_system_prompt"), user_prompt


def generate_agenda(
        requirement: TrainingRequirement,
        modules: t.Sequence[TrainingModule],
        model: t.Optional[str] = None,
        temperature: t.Optional[float] = None,
        config: t.Optional[GeneratorConfig] = None,
        client: t.Optional[OpenAI] = None,
) -> t.Union[AgendaDraft, ParseError]:
    """Draft an agenda for a requirement.

    Returns a ParseError when the reply is not usable JSON so the caller can
    show the raw reply and let the user retry.

    Raises:
        GenerationError: If the completion call fails.
    """
    system_prompt, user_prompt = build_agenda_prompts(requirement, modules)
    raw = complete(system_prompt, user_prompt, model, temperature, config, client)
    return _agenda_from_reply(raw, requirement)


async def generate_agenda_async(
        requirement: TrainingRequirement,
        modules: t.Sequence[TrainingModule],
        model: t.Optional[str] = None,
        temperature: t.Optional[float] = None,
        timeout: t.Optional[float] = None,
        config: t.Optional[GeneratorConfig] = None,
        client: t.Optional[OpenAI] = None,
) -> t.Union[AgendaDraft, ParseError]:
    """`generate_agenda` with a timeout, cancellable by cancelling the task."""
    system_prompt, user_prompt = build_agenda_prompts(requirement, modules)
    raw = await complete_async(system_prompt, user_prompt, model, temperature, timeout, config, client)
    return _agenda_from_reply(raw, requirement)


def _agenda_from_reply(raw: str, requirement: TrainingRequirement) -> t.Union[AgendaDraft, ParseError]:
    result = from_generated_text(raw)
    if isinstance(result, ParseError):
        return result
    if not result.title:
        result.title = requirement.training_title
    if not result.training_objectives:
        result.training_objectives = list(requirement.mindset_focus.learning_objectives)
    if result.group_size is None:
        result.group_size = requirement.delivery_preferences.group_size
    logger.info("Generated agenda", title=result.title, slots=len(result.time_slots))
    return result


def generate_modules(
        topic: str,
        model: t.Optional[str] = None,
        temperature: t.Optional[float] = None,
        config: t.Optional[GeneratorConfig] = None,
        client: t.Optional[OpenAI] = None,
) -> t.Union[list[TrainingModule], ParseError]:
    """Research training modules for a topic.

    Raises:
        GenerationError: If the completion call fails.
    """
    system_prompt, user_prompt = build_module_prompts(topic)
    raw = complete(system_prompt, user_prompt, model, temperature, config, client)
    return modules_from_generated_text(raw)
