"""
Marketplace application.

Tasks posted or requested by clients, the assignments of contractors to
those tasks, and the reviews participants leave once work is done.

Usage:
    from marketplace.models import Task, TaskAssignment, Review
"""
