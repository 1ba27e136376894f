from pydantic import BaseModel, Field, confloat, constr, field_validator
from datetime import date, datetime
from typing import Literal, Optional

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
# bcrypt only looks at the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


class UserBase(BaseModel):
    email: constr(strip_whitespace=True, to_lower=True, pattern=EMAIL_PATTERN)


class UserCreate(UserBase):
    password: constr(min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class UserLogin(UserBase):
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class PublicUser(BaseModel):
    id: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str
    color: constr(pattern=HEX_COLOR_PATTERN) = "#f87171"


class CategoryResponse(BaseModel):
    id: str
    name: str
    color: str
    created_at: datetime
    user_id: str

    class Config:
        from_attributes = True


class ExpenseIn(BaseModel):
    date: date
    amount: confloat(allow_inf_nan=False)
    category_id: Optional[str] = None
    merchant: Optional[str] = None
    item: Optional[str] = None
    note: Optional[str] = None

    @field_validator("category_id", "merchant", "item", "note")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class ExpenseResponse(BaseModel):
    id: str
    date: date
    amount: float
    merchant: Optional[str] = None
    item: Optional[str] = None
    note: Optional[str] = None
    category_id: Optional[str] = None
    created_at: datetime
    user_id: str

    class Config:
        from_attributes = True


class JoinedExpense(ExpenseResponse):
    category: CategoryResponse


class CalendarDay(BaseModel):
    date: date
    day: int
    has_expenses: bool
    total: float
    is_today: bool


class CalendarMonth(BaseModel):
    year: int
    month: int
    leading_blanks: int
    days: list[CalendarDay]
    previous: tuple[int, int]
    next: tuple[int, int]


class CategoryBucket(BaseModel):
    category_id: str
    name: str
    color: str
    value: float


class DayBucket(BaseModel):
    date: date
    label: str
    amount: float


class ChartData(BaseModel):
    start_date: date
    end_date: date
    total: float
    by_category: list[CategoryBucket]
    by_day: list[DayBucket]


SuggestionField = Literal["merchant", "item"]


class ProfileResponse(BaseModel):
    email: str
    app_name: str


class ProfileUpdate(BaseModel):
    app_name: str = Field(..., max_length=100)
