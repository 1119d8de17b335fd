"""ConsoleInterviewer: prompts the user at the terminal."""

from __future__ import annotations

import click

from pipegraph.model.question import Answer, AnswerValue, Question, QuestionType


class ConsoleInterviewer:
    """Interviewer that uses the terminal for interactive prompts.

    Options are shown with their accelerator keys. An empty reply (or
    end of input) is reported as ``AnswerValue.SKIPPED`` so the gate's
    default choice can take over.
    """

    def ask(self, question: Question) -> Answer:
        click.echo(f"\n{'=' * 60}")
        click.echo(f"  {question.text}")
        click.echo(f"{'=' * 60}")

        if question.type in (QuestionType.YES_NO, QuestionType.CONFIRMATION):
            return self._ask_yes_no(question)
        if question.type == QuestionType.MULTIPLE_CHOICE and question.options:
            return self._ask_multiple_choice(question)
        return self._ask_freeform(question)

    def _ask_yes_no(self, question: Question) -> Answer:
        raw = self._read("  [Y]es / [N]o")
        if raw is None or not raw:
            return Answer(value=AnswerValue.SKIPPED)
        if raw.lower() in ("y", "yes"):
            return Answer(value=AnswerValue.YES, text="YES")
        return Answer(value=AnswerValue.NO, text=raw)

    def _ask_multiple_choice(self, question: Question) -> Answer:
        for opt in question.options:
            click.echo(f"  [{opt.key}] {opt.label}")
        raw = self._read("  Choice")
        if raw is None or not raw:
            return Answer(value=AnswerValue.SKIPPED)

        for opt in question.options:
            if raw.lower() in (opt.key.lower(), opt.label.strip().lower()):
                return Answer(value=opt.key, selected_option=opt, text=opt.label)
        return Answer(value=raw, text=raw)

    def _ask_freeform(self, question: Question) -> Answer:
        raw = self._read("  >")
        if raw is None or not raw:
            return Answer(value=AnswerValue.SKIPPED)
        return Answer(value=raw, text=raw)

    @staticmethod
    def _read(prompt: str) -> str | None:
        """Read one line; None on end of input."""
        try:
            return click.prompt(prompt, default="", show_default=False).strip()
        except click.Abort:
            return None
