from .tenancy import Business, Store, StoreCounter
from .customers import Customer
from .staff import Staff
from .inventory import InventoryItem, RestockEvent
from .sales import Order, Checkout, SaleTransaction
from .reporting import ProfitLoss
from .ledger import LedgerEvent

__all__ = [
    'Business', 'Store', 'StoreCounter',
    'Customer', 'Staff',
    'InventoryItem', 'RestockEvent',
    'Order', 'Checkout', 'SaleTransaction',
    'ProfitLoss',
    'LedgerEvent',
]
