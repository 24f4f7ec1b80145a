# kitchen/schemas.py
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr

WorkLocation = Literal["Main Office", "WFH", "Other"]
Role = Literal["admin", "employee"]


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    full_name: str
    employee_id: Optional[str] = None
    mobile_number: Optional[str] = None
    work_location: str
    role: str


class RegisterIn(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    employee_id: str
    mobile_number: str


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    mobile_number: Optional[str] = None
    work_location: Optional[WorkLocation] = None


class AdminProfileUpdate(BaseModel):
    work_location: Optional[WorkLocation] = None
    role: Optional[Role] = None


class MenuItems(BaseModel):
    item_breakfast: Optional[str] = None
    item_lunch: Optional[str] = None
    item_snack: Optional[str] = None
    item_dinner: Optional[str] = None


class MealToggle(BaseModel):
    opt_in_breakfast: Optional[bool] = None
    opt_in_lunch: Optional[bool] = None
    opt_in_snack: Optional[bool] = None
    opt_in_dinner: Optional[bool] = None


class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class SubscriptionIn(BaseModel):
    endpoint: str
    keys: SubscriptionKeys
    expirationTime: Optional[float] = None


class BroadcastIn(BaseModel):
    message: Optional[str] = None
