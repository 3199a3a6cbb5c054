"""
Block Comparison Tests Package
==============================
Test suite for the block comparison engine.

Run all tests: python3 -m pytest tests/blocks/ -v
Run specific: python3 -m pytest tests/blocks/test_matcher.py -v
"""
