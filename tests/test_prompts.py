"""Tests for stage prompt construction."""

from proxynode.pipeline.prompts import (
    StagePrompt,
    build_anonymize_prompt,
    build_classify_prompt,
    build_summarize_prompt,
    detect_stage,
    extract_feedback,
)


class TestPrompts:
    """Test suite for stage prompts."""

    def test_prompts_embed_feedback(self):
        """Test that each prompt carries the feedback text."""
        text = "The canteen closes too early"
        for build in (build_anonymize_prompt, build_summarize_prompt, build_classify_prompt):
            assert f'"{text}"' in build(text)

    def test_detect_stage(self):
        """Test that prompts are recognized by their opening line."""
        assert detect_stage(build_anonymize_prompt("x")) is StagePrompt.ANONYMIZE
        assert detect_stage(build_summarize_prompt("x")) is StagePrompt.SUMMARIZE
        assert detect_stage(build_classify_prompt("x")) is StagePrompt.CLASSIFY
        assert detect_stage("Tell me a joke") is None

    def test_extract_feedback_round_trip(self):
        """Test recovering multi-line feedback from a prompt."""
        text = 'Line one.\nLine "two" here.'
        assert extract_feedback(build_classify_prompt(text)) == text

    def test_classify_prompt_lists_categories(self):
        prompt = build_classify_prompt("x")
        for label in ("Academics", "Infrastructure", "Placement"):
            assert label in prompt
