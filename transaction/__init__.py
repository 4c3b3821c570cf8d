from .builder import TransactionBuilder
from .models import DEFAULT_GAS, Eip1559TransactionRequest, SignedTransaction

__all__ = [
    "DEFAULT_GAS",
    "Eip1559TransactionRequest",
    "SignedTransaction",
    "TransactionBuilder",
]
