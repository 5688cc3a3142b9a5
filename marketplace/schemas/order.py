"""
marketplace/schemas/order.py

Purpose: Order, cart and payment request schemas
"""

from typing import Any, List, Optional, Literal

from pydantic import Field

from marketplace.schemas.common import CamelModel

PaymentMethod = Literal["credit_card", "debit_card", "paypal", "stripe", "cash_on_delivery"]
ReturnReason = Literal["defective", "wrong_item", "not_as_described", "changed_mind", "other"]


class OrderItemInput(CamelModel):
    product: str
    quantity: int = Field(..., ge=1)
    variant: Optional[str] = None


class AddressInput(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    street: Optional[str] = None
    city: str
    state: str
    zip_code: Optional[str] = None
    country: Optional[str] = "US"


class PaymentInput(CamelModel):
    method: PaymentMethod


class OrderCreateRequest(CamelModel):
    items: List[OrderItemInput] = Field(..., min_length=1)
    shipping_address: AddressInput
    billing_address: Optional[AddressInput] = None
    payment: PaymentInput
    notes: Optional[str] = Field(None, max_length=500)


class ReturnRequest(CamelModel):
    reason: ReturnReason
    description: Optional[str] = Field(None, max_length=500)


class CartItemRequest(CamelModel):
    product_id: Optional[str] = None
    quantity: Any = 1


class CartReplaceRequest(CamelModel):
    # Validated in the service so a non-list gets the "items must be an array" message
    items: Any = None


class PaymentIntentRequest(CamelModel):
    amount: float = Field(..., gt=0)
    currency: Optional[str] = None
    order_id: Optional[str] = None


class PaymentConfirmRequest(CamelModel):
    payment_intent_id: str = Field(..., min_length=1)
    order_id: Optional[str] = None


class PaymentMethodRequest(CamelModel):
    payment_method_id: str = Field(..., min_length=1)
    is_default: bool = False
