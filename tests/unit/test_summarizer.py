"""
Unit tests for the extractive summarizer.
"""

import pytest

from blog_aggregator.config import MAX_SUMMARY_LENGTH
from blog_aggregator.services.summarizer import generate_summary, PLACEHOLDER_SUMMARY


class TestGenerateSummary:
    """Tests for generate_summary function."""
    
    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_empty_content_placeholder(self, content):
        assert generate_summary(content) == PLACEHOLDER_SUMMARY
    
    def test_first_three_sentences(self):
        content = (
            "Python makes building services pleasant. "
            "Flask keeps the web layer small and readable. "
            "Caching keeps the feeds fast for every reader. "
            "This fourth sentence should not appear at all."
        )
        summary = generate_summary(content)
        
        assert summary == (
            "Python makes building services pleasant. "
            "Flask keeps the web layer small and readable. "
            "Caching keeps the feeds fast for every reader."
        )
    
    def test_short_fragments_skipped(self):
        content = "Intro. Hi! This sentence is long enough to keep. Ok?"
        assert generate_summary(content) == "This sentence is long enough to keep."
    
    def test_boilerplate_prefix_stripped(self):
        content = "Continue reading on Medium The real article starts right here with content."
        assert generate_summary(content) == "The real article starts right here with content."
    
    def test_boilerplate_prefix_case_insensitive(self):
        content = "READ MORE about how the pipeline caches every post."
        assert generate_summary(content).startswith("about how the pipeline")
    
    def test_stops_before_exceeding_budget(self):
        first = "A" * 150 + " first sentence ends here."
        second = "B" * 200 + " second sentence ends here."
        summary = generate_summary(f"{first} {second}")
        
        assert summary == first
    
    def test_ellipsis_added_without_terminal_punctuation(self):
        content = "A single long line of text without any final punctuation mark"
        assert generate_summary(content) == content + "..."
    
    def test_fallback_when_no_sentence_long_enough(self):
        content = "Tiny. Bits. Only."
        assert generate_summary(content) == "Tiny. Bits. Only...."
    
    def test_fallback_when_first_sentence_too_long(self):
        content = "x" * (MAX_SUMMARY_LENGTH * 2) + "."
        summary = generate_summary(content)
        
        assert summary == "x" * MAX_SUMMARY_LENGTH + "..."
    
    def test_paragraph_breaks_flattened(self):
        content = "Heading\n\nThe opening paragraph has a full sentence."
        assert generate_summary(content) == "Heading The opening paragraph has a full sentence."
    
    @pytest.mark.parametrize("content", [
        "word " * 1000,
        "Sentence that is long enough to count. " * 50,
        "x" * 5000,
        "a. " * 500,
        "Short!\n\n" * 200,
    ])
    def test_bounded(self, content):
        assert len(generate_summary(content)) <= MAX_SUMMARY_LENGTH + 3
