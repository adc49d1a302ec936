from .inventory import Product, ProductCategory
from .registers import Cashier, RegisterAssignment, UNASSIGNED_REGISTER
from .sales import Receipt, ReceiptLine

__all__ = [
    'Product', 'ProductCategory',
    'Cashier', 'RegisterAssignment', 'UNASSIGNED_REGISTER',
    'Receipt', 'ReceiptLine',
]
