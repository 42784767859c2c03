from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, computed_field, field_validator

# bcrypt refuses passwords longer than this many UTF-8 bytes
MAX_PASSWORD_BYTES = 72


class UserCreate(BaseModel):
    """Registration form"""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class CategoryForm(BaseModel):
    """Admin category form; id is set when editing"""

    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=100)


class ProductForm(BaseModel):
    """Admin product form; id is set when editing"""

    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    category_id: int
    price: float = Field(..., ge=0)
    weight: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    image_name: Optional[str] = None


class CartItem(BaseModel):
    """Snapshot of a product placed in a cart"""

    product_id: int
    name: str
    price: float
    image_name: Optional[str] = None

    @classmethod
    def from_product(cls, product) -> "CartItem":
        return cls(
            product_id=product.id,
            name=product.name,
            price=float(product.price or 0),
            image_name=product.image_name,
        )


class CartView(BaseModel):
    """Cart contents as rendered on the cart and checkout pages"""

    items: List[CartItem] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.items)

    @computed_field
    @property
    def total(self) -> float:
        return round(sum(item.price for item in self.items), 2)


class GoogleUserInfo(BaseModel):
    """Subset of the OpenID Connect userinfo document returned by Google"""

    email: EmailStr
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    name: Optional[str] = None
    email_verified: bool = True
