from .catalog import Product
from .payments import PaymentIntent
from .shipping import Shipment

__all__ = [
    'Product',
    'PaymentIntent',
    'Shipment',
]
