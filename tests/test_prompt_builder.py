"""Tests for ai_code_reviewer.services.prompt_builder."""

from ai_code_reviewer.services.diff_parser import parse_diff
from ai_code_reviewer.services.prompt_builder import (
    RESPONSE_SHAPE,
    PromptOptions,
    build_prompt,
    format_hunk,
)

from samples import APP_TS_DIFF, TWO_HUNK_DIFF


def _first_hunk(diff_text):
    file = parse_diff(diff_text)[0]
    return file, file.hunks[0]


class TestFormatHunk:
    def test_lines_are_tagged_with_meaningful_numbers(self):
        _, hunk = _first_hunk(TWO_HUNK_DIFF)

        assert format_hunk(hunk).splitlines() == [
            "@@ -1,3 +1,3 @@",
            "1  def add(a, b):",
            "2 -    return a - b",
            "2 +    return a + b",
            "3  # end add",
        ]

    def test_addition_uses_new_file_number(self):
        _, hunk = _first_hunk(APP_TS_DIFF)

        assert "12 +if (a = b) {" in format_hunk(hunk).splitlines()


class TestBuildPrompt:
    def test_contains_contract_context_and_diff(self, pr_context):
        file, hunk = _first_hunk(APP_TS_DIFF)

        prompt = build_prompt(file, hunk, pr_context, PromptOptions(bot_name="Reviewer Bot"))

        assert prompt.startswith("Your name is Reviewer Bot.")
        assert RESPONSE_SHAPE in prompt
        assert '"reviews" should be an empty array' in prompt
        assert "NEVER suggest adding comments to the code" in prompt
        assert "```suggestion```" in prompt
        assert "already corrected errors" in prompt
        assert "description only for overall context" in prompt
        assert 'in the file "app.ts"' in prompt
        assert "Pull request title: Fix comparison" in prompt
        assert "Compares a and b before logging." in prompt
        assert "```diff\n@@ -10,4 +10,5 @@ function main() {\n10  const a = 1;" in prompt

    def test_rules_scope_the_review(self, pr_context):
        file, hunk = _first_hunk(APP_TS_DIFF)

        prompt = build_prompt(
            file, hunk, pr_context, PromptOptions(rules="- Use strict equality")
        )

        assert "Your review will *only* ensure the following rules are followed" in prompt
        assert "- Use strict equality" in prompt

    def test_blank_rules_disable_rule_scoping(self, pr_context):
        file, hunk = _first_hunk(APP_TS_DIFF)

        prompt = build_prompt(file, hunk, pr_context, PromptOptions(rules="  \n"))

        assert "*only*" not in prompt

    def test_persona_instructions_follow_the_name(self, pr_context):
        file, hunk = _first_hunk(APP_TS_DIFF)

        prompt = build_prompt(
            file, hunk, pr_context, PromptOptions(bot_name="Ada", bot_instructions="Be terse.")
        )

        assert prompt.startswith("Your name is Ada. Your task is to review pull requests. Be terse.")

    def test_prompt_is_deterministic(self, pr_context):
        file, hunk = _first_hunk(APP_TS_DIFF)
        options = PromptOptions(rules="- no magic numbers")

        assert build_prompt(file, hunk, pr_context, options) == build_prompt(file, hunk, pr_context, options)

    def test_options_from_settings(self, settings):
        options = PromptOptions.from_settings(settings)

        assert options.bot_name == "Reviewer Bot"
        assert options.rules == ""
