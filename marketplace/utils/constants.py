"""
marketplace/utils/constants.py

Purpose: Centralized static values

- Roles and status enumerations
- User-facing error messages shared by several services
- Default admin settings

(Prevents hardcoding across the codebase)
"""

# ============================================================
# ROLES
# ============================================================

ROLE_CUSTOMER = "customer"
ROLE_VENDOR = "vendor"
ROLE_ADMIN = "admin"
ROLE_SELLER = "seller"

USER_ROLES = (ROLE_CUSTOMER, ROLE_VENDOR, ROLE_ADMIN)
REGISTRABLE_ROLES = (ROLE_CUSTOMER, ROLE_VENDOR)

# ============================================================
# PRODUCTS
# ============================================================

PRODUCT_STATUSES = ("draft", "active", "inactive", "archived")
PRODUCT_STATUS_ACTIVE = "active"

DELIVERY_OPTIONS = ("instant", "next_day", "standard")

PRODUCT_SORTS = {
    "newest": [("created_at", -1)],
    "oldest": [("created_at", 1)],
    "price_low": [("price", 1)],
    "price_high": [("price", -1)],
    "rating": [("ratings.average", -1), ("ratings.count", -1)],
    "popular": [("sales.count", -1)],
}

# ============================================================
# ORDERS & PAYMENTS
# ============================================================

ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "refunded")
CANCELLABLE_STATUSES = ("pending", "confirmed")
VENDOR_ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")

PAYMENT_METHODS = ("credit_card", "debit_card", "paypal", "stripe", "cash_on_delivery")
PAYMENT_STATUSES = ("pending", "processing", "completed", "failed", "refunded", "partially_refunded")

RETURN_REASONS = ("defective", "wrong_item", "not_as_described", "changed_mind", "other")

ANALYTICS_PERIODS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}

# ============================================================
# CONTENT
# ============================================================

BANNER_AUDIENCES = ("all", "new_users", "returning_users", "premium_users")
BANNER_CATEGORIES = ("electronics", "fashion", "home", "beauty", "sports", "books", "general")

SECTION_TYPES = ("category", "featured", "custom", "banner")
SECTION_MAX_PRODUCTS_DEFAULT = 6
SECTION_MAX_PRODUCTS_LIMIT = 20

# ============================================================
# MESSAGES
# ============================================================

NOT_AUTHORIZED_MESSAGE = "Not authorized to access this route"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
ACCOUNT_SUSPENDED_MESSAGE = "Account is suspended"
INVALID_REFRESH_TOKEN_MESSAGE = "Invalid refresh token"
ROLE_NOT_AUTHORIZED_MESSAGE = "User role {role} is not authorized to access this route"
PRODUCT_NOT_FOUND_MESSAGE = "Product not found"
ORDER_NOT_FOUND_MESSAGE = "Order not found"
DELIVERY_OPTION_REQUIRED_MESSAGE = "At least one delivery option must be selected"

# ============================================================
# ADMIN SETTINGS
# ============================================================

DEFAULT_SITE_SETTINGS = {
    "site_name": "Ecom-MultiRole",
    "site_description": "Multi-role e-commerce platform",
    "currency": "USD",
    "tax_rate": 0.1,
    "shipping_rates": {"standard": 5.99, "express": 12.99, "overnight": 24.99},
    "payment_methods": ["stripe", "paypal", "cash_on_delivery"],
    "maintenance_mode": False,
    "allow_registration": True,
    "require_email_verification": False,
}
