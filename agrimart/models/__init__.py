# agrimart/models/__init__.py
from .schemas import (
    # Enums
    OrderStatus,
    OrderItemStatus,
    PaymentMethod,

    # User
    UserRegister,
    UserLogin,
    User,
    ProfileUpdate,
    OtpRequest,
    OtpVerify,

    # Review
    Review,
    ReviewCreate,

    # Product
    Product,
    ProductCreate,
    ProductUpdate,
    StockUpdate,

    # Filter
    PriceRange,
    FilterOptions,
    FilterUpdate,

    # Cart
    CartItem,
    CartAdd,
    CartQuantity,

    # Order
    Address,
    OrderItem,
    Order,
    CheckoutRequest,
    OrderStatusUpdate,
    OrderItemStatusUpdate,
)

__all__ = [
    # Enums
    "OrderStatus",
    "OrderItemStatus",
    "PaymentMethod",

    # User
    "UserRegister",
    "UserLogin",
    "User",
    "ProfileUpdate",
    "OtpRequest",
    "OtpVerify",

    # Review
    "Review",
    "ReviewCreate",

    # Product
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "StockUpdate",

    # Filter
    "PriceRange",
    "FilterOptions",
    "FilterUpdate",

    # Cart
    "CartItem",
    "CartAdd",
    "CartQuantity",

    # Order
    "Address",
    "OrderItem",
    "Order",
    "CheckoutRequest",
    "OrderStatusUpdate",
    "OrderItemStatusUpdate",
]
