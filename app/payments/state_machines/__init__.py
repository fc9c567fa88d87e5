"""
State machine enums for payment models.
"""

from payments.state_machines.states import InvoiceState, PaymentMethod

__all__ = [
    "InvoiceState",
    "PaymentMethod",
]
