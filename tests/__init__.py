"""
Test suite for opinion_sign_helper

Contains:
- tests/unit/          : Unit tests for amounts, hashing, signing, order building
"""
