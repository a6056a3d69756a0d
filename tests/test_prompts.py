"""Tests for loading and filling prompt files."""
import pytest

from prompts import load_prompt, render_prompt


def test_load_shipped_prompts() -> None:
    for name in ("agenda_generator_system_prompt", "agenda_generator_user_prompt", "module_generator_system_prompt"):
        assert load_prompt(name).strip()


def test_load_missing_prompt_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_prompt("does_not_exist", prompts_dir=str(tmp_path))


def test_render_prompt_substitutes_placeholders(tmp_path) -> None:
    (tmp_path / "greeting.txt").write_text('Hello $name, reply with {"ok": true}', encoding="utf-8")
    assert render_prompt("greeting", prompts_dir=str(tmp_path), name="Ada") == 'Hello Ada, reply with {"ok": true}'


def test_render_prompt_requires_every_placeholder(tmp_path) -> None:
    (tmp_path / "greeting.txt").write_text("Hello $name", encoding="utf-8")
    with pytest.raises(KeyError):
        render_prompt("greeting", prompts_dir=str(tmp_path))
