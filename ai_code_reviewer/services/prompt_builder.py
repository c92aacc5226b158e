"""Render the per-hunk review prompt."""

from __future__ import annotations

from dataclasses import dataclass

from ai_code_reviewer.config import DEFAULT_BOT_NAME, Settings
from ai_code_reviewer.models.diff import DiffFile, DiffHunk
from ai_code_reviewer.models.review import PullRequestContext

RESPONSE_SHAPE = '{"reviews": [{"lineNumber": <line_number>, "reviewComment": "<review comment>"}]}'


@dataclass(frozen=True, slots=True)
class PromptOptions:
    bot_name: str = DEFAULT_BOT_NAME
    rules: str = ""
    bot_instructions: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "PromptOptions":
        return cls(
            bot_name=settings.bot_name,
            rules=settings.rules,
            bot_instructions=settings.bot_instructions,
        )


def _rules_section(rules: str) -> str:
    rules = rules.strip()
    if not rules:
        return ""
    return (
        "Your review will *only* ensure the following rules are followed, "
        "ignore general style concerns that are not covered by them:\n"
        f"{rules}"
    )


def format_hunk(hunk: DiffHunk) -> str:
    """Render a hunk with each line tagged by the number the reviewer should answer with.

    Additions and context lines carry their new-file number, deletions their
    old-file number.
    """

    rendered = [str(hunk.header)]
    for line in hunk.lines:
        rendered.append(f"{line.anchor_line_number} {line.prefix}{line.content}")
    return "\n".join(rendered)


def build_prompt(
    file: DiffFile,
    hunk: DiffHunk,
    context: PullRequestContext,
    options: PromptOptions,
) -> str:
    """Build the review prompt for one hunk. Identical inputs give an identical prompt."""

    intro = f"Your name is {options.bot_name}. Your task is to review pull requests."
    persona = options.bot_instructions.strip()
    if persona:
        intro = f"{intro} {persona}"
    rules = _rules_section(options.rules)
    if rules:
        intro = f"{intro} {rules}"

    instructions = (
        "Here are your instructions regarding the format and the style of the review:\n"
        f"- Provide the response in the following JSON format: {RESPONSE_SHAPE}\n"
        "- Respond with that JSON object only.\n"
        "- Provide comments and suggestions ONLY if there is something to improve regarding "
        "code style or potential errors, otherwise \"reviews\" should be an empty array.\n"
        "- Use the line numbers shown at the start of each diff line for \"lineNumber\".\n"
        "- Write the comment in GitHub Markdown format.\n"
        "- Suggest a fix in a reviewComment if applicable by using a ```suggestion``` code block "
        "(with proper whitespace indentation).\n"
        "- Use the given description only for overall context and focus only on the code.\n"
        "- IMPORTANT: NEVER suggest adding comments to the code.\n"
        "- Do not review commented sections of code or already corrected errors in the code. "
        "Review only the latest updates.\n"
        "- Leave comments only on things that could potentially cause an error in the code "
        "or that do not match the code style."
    )

    return (
        f"{intro}\n\n"
        f"{instructions}\n\n"
        f"Review the following code diff in the file \"{file.path}\" and take the pull request "
        "title and description into account when writing the response.\n\n"
        f"Pull request title: {context.title}\n"
        "Pull request description:\n\n"
        "---\n"
        f"{context.description}\n"
        "---\n\n"
        "Git diff to review:\n\n"
        "```diff\n"
        f"{format_hunk(hunk)}\n"
        "```\n"
    )
