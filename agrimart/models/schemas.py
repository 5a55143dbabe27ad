from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum


# ============== ENUMS ==============
class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"
    returned = "returned"
    replacement = "replacement"


class OrderItemStatus(str, Enum):
    pending = "pending"
    processed = "processed"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentMethod(str, Enum):
    upi = "upi"
    netBanking = "netBanking"
    cashOnDelivery = "cashOnDelivery"


# ============== USER ==============
class UserRegister(BaseModel):
    username: str
    email: EmailStr
    password: str = Field(min_length=6)
    address: str = ""
    phoneNumber: str = ""


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class User(BaseModel):
    id: str
    username: str
    email: str
    address: str = ""
    phoneNumber: str = ""
    profilePicture: Optional[str] = None
    isAdmin: bool = False


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    address: Optional[str] = None
    phoneNumber: Optional[str] = None
    profilePicture: Optional[str] = None


class OtpRequest(BaseModel):
    email: EmailStr


class OtpVerify(BaseModel):
    email: EmailStr
    otp: str


# ============== REVIEW ==============
class Review(BaseModel):
    id: str
    productId: Optional[str] = None
    userId: str
    username: str
    rating: int
    comment: Optional[str] = None
    images: List[str] = []
    createdAt: datetime


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = ""
    images: Optional[List[str]] = None


# ============== PRODUCT ==============
class Product(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float
    images: List[str] = []
    category: str
    stockQuantity: int = 0
    colors: List[str] = []
    specifications: Dict[str, str] = {}
    createdAt: Optional[datetime] = None
    reviews: List[Review] = []


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(gt=0)
    category: str = Field(min_length=1)
    stockQuantity: int = Field(ge=0)
    images: List[str] = Field(min_length=1)
    colors: List[str] = []
    specifications: Dict[str, str] = {}


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    stockQuantity: Optional[int] = None
    images: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None


class StockUpdate(BaseModel):
    stockQuantity: int = Field(ge=0)


# ============== FILTER ==============
class PriceRange(BaseModel):
    min: float = 0
    max: float = 100000


class FilterOptions(BaseModel):
    category: List[str] = []
    priceRange: PriceRange = PriceRange()
    colors: List[str] = []
    specifications: Dict[str, List[str]] = {}


class FilterUpdate(BaseModel):
    """Mise à jour partielle: seuls les champs envoyés sont fusionnés"""
    category: Optional[List[str]] = None
    priceRange: Optional[PriceRange] = None
    colors: Optional[List[str]] = None
    specifications: Optional[Dict[str, List[str]]] = None


# ============== CART ==============
class CartItem(BaseModel):
    productId: str
    product: Product
    quantity: int = 1
    color: str = ""
    selected: bool = True


class CartAdd(BaseModel):
    productId: str
    quantity: int = Field(1, ge=1)
    color: str = ""


class CartQuantity(BaseModel):
    quantity: int = Field(ge=1)


# ============== ORDER ==============
class Address(BaseModel):
    doorNumber: str = ""
    street: str = ""
    cityOrVillage: str = ""
    state: str = ""
    pinCode: str = ""


class OrderItem(BaseModel):
    productId: Optional[str] = None
    productName: str
    quantity: int
    color: str = ""
    price: float
    status: OrderItemStatus = OrderItemStatus.pending


class Order(BaseModel):
    id: str
    userId: str
    items: List[OrderItem] = []
    shippingAddress: Address
    paymentMethod: str
    orderStatus: OrderStatus = OrderStatus.pending
    totalAmount: float
    orderedAt: datetime
    deliveredAt: Optional[datetime] = None
    canCancel: bool = True
    canReplace: bool = False
    canReturn: bool = False


class CheckoutRequest(BaseModel):
    shippingAddress: Address
    paymentMethod: PaymentMethod = PaymentMethod.cashOnDelivery


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemStatusUpdate(BaseModel):
    status: OrderItemStatus
