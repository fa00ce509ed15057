"""
Tests for the Flight Risk Scoring Engine.
"""
