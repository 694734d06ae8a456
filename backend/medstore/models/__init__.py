from .catalog import Medicine, InventoryItem
from .ledger import (
    SELL,
    PURCHASE,
    TRANSACTION_TYPES,
    TransactionItem,
    Transaction,
    DateRange,
    TransactionFilter,
    TaxData,
    format_invoice_number,
)
from .snapshots import StoreSnapshot

__all__ = [
    'Medicine', 'InventoryItem',
    'SELL', 'PURCHASE', 'TRANSACTION_TYPES',
    'TransactionItem', 'Transaction', 'DateRange', 'TransactionFilter', 'TaxData',
    'format_invoice_number',
    'StoreSnapshot',
]
