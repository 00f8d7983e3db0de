"""
NaijaTax Compliance - Owner Reference

Every owned record (employee, payroll, schedule, remittance, invoice,
expense, WHT record) belongs to exactly one Company or Business. OwnerRef
carries the account-type discriminant and the entity id together, and is the
only place that turns them into query filters or column assignments:

    owner = OwnerRef(AccountType.COMPANY, company_id)
    select(Employee).where(*owner.filters(Employee))
    Employee(**owner.assignments(), first_name=...)

NULL in the other column is the "not this owner type" marker.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from app.models.user import AccountType
from app.utils.error_handling import (
    InvalidAccountTypeException,
    MissingEntityIdException,
    ValidationException,
)


OWNER_ACCOUNT_TYPES = (AccountType.COMPANY, AccountType.BUSINESS)


@dataclass(frozen=True)
class OwnerRef:
    """Discriminated reference to the Company or Business that owns a record."""

    account_type: AccountType
    entity_id: uuid.UUID

    def __post_init__(self):
        object.__setattr__(self, "account_type", _coerce_account_type(self.account_type))
        object.__setattr__(self, "entity_id", _coerce_entity_id(self.entity_id, self.account_type))

    @property
    def is_company(self) -> bool:
        return self.account_type == AccountType.COMPANY

    @property
    def company_id(self):
        return self.entity_id if self.is_company else None

    @property
    def business_id(self):
        return None if self.is_company else self.entity_id

    def assignments(self) -> Dict[str, Any]:
        """Column values for a new owned row."""
        return {"company_id": self.company_id, "business_id": self.business_id}

    def filters(self, model) -> List[Any]:
        """WHERE clauses restricting ``model`` to this owner."""
        if self.is_company:
            return [model.company_id == self.entity_id, model.business_id.is_(None)]
        return [model.business_id == self.entity_id, model.company_id.is_(None)]

    def __str__(self) -> str:
        return f"{self.account_type.value}:{self.entity_id}"


def _coerce_account_type(value: Union[AccountType, str, None]) -> AccountType:
    allowed = [t.value for t in OWNER_ACCOUNT_TYPES]
    provided = getattr(value, "value", value)
    try:
        account_type = AccountType(value)
    except ValueError:
        raise InvalidAccountTypeException(provided, allowed=allowed)
    if account_type not in OWNER_ACCOUNT_TYPES:
        raise InvalidAccountTypeException(provided, allowed=allowed)
    return account_type


def _coerce_entity_id(value: Union[uuid.UUID, str, None], account_type: AccountType) -> uuid.UUID:
    if value is None or value == "":
        raise MissingEntityIdException(account_type.value)
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationException(
            message=f"Invalid entity id: {value}",
            field="entity_id",
        )
