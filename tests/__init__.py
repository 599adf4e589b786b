"""Test suite for portable-blocks.

This package contains tests for all modules:
- test_models: Pydantic document models and wire formats
- test_entities / test_segmenter / test_inline: HTML parsing stages
- test_converter: End-to-end conversion properties
- test_links / test_marks: URL detection and link registry
- test_wordpress / test_stores / test_retry / test_cli: Export mapping and storage
"""
