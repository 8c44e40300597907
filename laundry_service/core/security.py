"""Caller identity.

Authentication happens upstream; the service receives an already verified
identity and passes it explicitly into every operation as an ``Actor``.
Operations ask the actor for a capability rather than branching on its role.
"""
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from laundry_service.models.order import Order
from laundry_service.models.review import Review


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    LAUNDRY = "LAUNDRY"


class CustomerActor(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["CUSTOMER"] = "CUSTOMER"
    id: str = Field(min_length=1)

    def can_view(self, order: Order) -> bool:
        return order.customer_id == self.id

    def can_cancel(self, order: Order) -> bool:
        return order.customer_id == self.id

    def can_update_status(self, order: Order) -> bool:
        return False

    def can_review(self, order: Order) -> bool:
        return order.customer_id == self.id

    def can_confirm_delivery(self, order: Order) -> bool:
        return order.customer_id == self.id

    def can_reply(self, review: Review) -> bool:
        return False


class LaundryActor(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["LAUNDRY"] = "LAUNDRY"
    id: str = Field(min_length=1)

    def can_view(self, order: Order) -> bool:
        return order.laundry_id == self.id

    def can_cancel(self, order: Order) -> bool:
        return order.laundry_id == self.id

    def can_update_status(self, order: Order) -> bool:
        return order.laundry_id == self.id

    def can_review(self, order: Order) -> bool:
        return False

    def can_confirm_delivery(self, order: Order) -> bool:
        return False

    def can_reply(self, review: Review) -> bool:
        return review.laundry_id == self.id


Actor = Annotated[Union[CustomerActor, LaundryActor], Field(discriminator="role")]

actor_adapter: TypeAdapter[Actor] = TypeAdapter(Actor)
