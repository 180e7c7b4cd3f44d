"""Interactive operator prompts."""

import click


class PromptService:
    """Thin wrapper over click prompts so phases can be driven by fakes in tests."""

    def ask_text(self, message: str, default: str = "") -> str:
        value = click.prompt(message, default=default, show_default=False)
        return str(value).strip()

    def ask_yes_no(self, message: str) -> bool:
        return click.confirm(message)

    def pause(self, message: str = "Press Enter to exit..."):
        click.prompt(message, default="", show_default=False, prompt_suffix="")
