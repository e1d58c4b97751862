from __future__ import annotations

from collections.abc import Callable


class TerminalPrompter:
    """Interactive yes/no and text prompts on the terminal."""

    def __init__(self, input_func: Callable[[str], str] | None = None, output: Callable[[str], None] = print):
        self._input = input_func or input
        self._print = output

    def ask_yes_no(self, prompt: str) -> bool:
        while True:
            response = self._input(f"{prompt} (y/n): ").strip().lower()
            if response.startswith("y"):
                return True
            if response.startswith("n"):
                return False
            self._print("Please answer yes (y) or no (n).")

    def ask_text(self, prompt: str) -> str:
        return self._input(prompt).strip()


class AutoPrompter:
    """Non-interactive answers for scripted runs (``--yes``)."""

    def __init__(self, answer: bool = True, text: str = ""):
        self.answer = answer
        self.text = text
        self.asked: list[str] = []

    def ask_yes_no(self, prompt: str) -> bool:
        self.asked.append(prompt)
        return self.answer

    def ask_text(self, prompt: str) -> str:
        self.asked.append(prompt)
        return self.text
