"""
Tests for the flight_risk package.

This package contains tests for:
- Feature extraction and eligibility
- Risk classification and trends
- Categorization and unit views
- Scorer adapter and wire schemas
- Engine fan-out and failure containment
- Configuration, clock and record loaders
"""
