"""Prompt construction for extraction and comparison."""

from watershed_extractor.prompts.builder import PromptBuilder

__all__ = ["PromptBuilder"]
