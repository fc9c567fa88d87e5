"""
Tests for payments app.

This package contains test modules for:
- test_models.py: Payment/Invoice models and store primitives
- test_state_transitions.py: Invoice FSM transitions
- test_money.py: Minor/major unit conversion
- test_tasks.py: Receipt task
- test_integration.py: Invoice payment flow end to end

Service, adapter and webhook tests live beside their packages.

Usage:
    pytest payments/
    pytest payments/tests/test_models.py
"""
