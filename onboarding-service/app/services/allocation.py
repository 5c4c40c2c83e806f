"""
Beneficiary allocation rules.

Pure ``Decimal`` arithmetic, no I/O: the beneficiary service loads the rows
of one ``(profile, type)`` allocation under a row lock and asks these
functions whether a change is allowed.

- single add / update: the type's total may not exceed 100;
- bulk replace: every type present in the batch must total exactly 100.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence, Tuple, TypeVar

from app.core.exceptions import BusinessRuleViolation
from app.models.beneficiary import Beneficiary
from app.models.enums import BeneficiaryType

FULL_ALLOCATION = Decimal("100")

T = TypeVar("T")


def total(shares: Iterable[Any]) -> Decimal:
    """Sum of ``percentage_of_benefit`` over rows or request items."""
    return sum((s.percentage_of_benefit for s in shares), Decimal("0"))


def ensure_can_add(
    beneficiary_type: BeneficiaryType, current_total: Decimal, attempted: Decimal
) -> None:
    if current_total + attempted > FULL_ALLOCATION:
        raise BusinessRuleViolation(
            f"Total percentage for {beneficiary_type.label} beneficiaries cannot exceed 100%. "
            f"Current total: {current_total}%, attempting to add: {attempted}%"
        )


def ensure_can_set(
    beneficiary_type: BeneficiaryType, others_total: Decimal, attempted: Decimal
) -> None:
    if others_total + attempted > FULL_ALLOCATION:
        raise BusinessRuleViolation(
            f"Total percentage for {beneficiary_type.label} beneficiaries cannot exceed 100%. "
            f"Other beneficiaries total: {others_total}%, attempting to set: {attempted}%"
        )


def group_by_type(
    items: Sequence[Tuple[BeneficiaryType, T]],
) -> "OrderedDict[BeneficiaryType, List[T]]":
    """Group ``(type, item)`` pairs, keeping first-seen type order."""
    groups: "OrderedDict[BeneficiaryType, List[T]]" = OrderedDict()
    for beneficiary_type, item in items:
        groups.setdefault(beneficiary_type, []).append(item)
    return groups


def ensure_complete(totals: Dict[BeneficiaryType, Decimal]) -> None:
    """Each type in a replacement batch must total exactly 100."""
    for beneficiary_type, type_total in totals.items():
        if type_total != FULL_ALLOCATION:
            raise BusinessRuleViolation(
                f"Total percentage for {beneficiary_type.label} beneficiaries must equal 100%. "
                f"Current total: {type_total}%"
            )


@dataclass
class BeneficiaryAllocation:
    """Read-only view: beneficiaries partitioned by type with per-type totals."""

    primary: List[Beneficiary] = field(default_factory=list)
    contingent: List[Beneficiary] = field(default_factory=list)

    @property
    def primary_total(self) -> Decimal:
        return total(self.primary)

    @property
    def contingent_total(self) -> Decimal:
        return total(self.contingent)

    @classmethod
    def partition(cls, beneficiaries: Iterable[Beneficiary]) -> "BeneficiaryAllocation":
        ordered = sorted(beneficiaries, key=lambda b: b.percentage_of_benefit, reverse=True)
        return cls(
            primary=[b for b in ordered if b.beneficiary_type == BeneficiaryType.PRIMARY],
            contingent=[b for b in ordered if b.beneficiary_type == BeneficiaryType.CONTINGENT],
        )
