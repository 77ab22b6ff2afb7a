"""
Static plan catalog.

Plans are not stored in the database: they are read from configuration once
when the application starts and never change while it runs.
"""
from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType

from flask import current_app

from fleetsub.errors import InvalidPlan


class PlanId(Enum):
    """Enum for the available plan identifiers."""
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


@dataclass(frozen=True)
class PlanFeatures:
    """Driver quota and capability flags bundled with a plan."""
    maxDrivers: int
    advancedAnalytics: bool = False
    apiAccess: bool = False
    customReports: bool = False
    prioritySupport: bool = False
    unlimitedDrivers: bool = False
    customIntegrations: bool = False
    dedicatedSupport: bool = False
    slaGuarantee: bool = False

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Plan:
    """
    A priced tier with a fixed feature bundle.

    Attributes:
        id (str): Plan identifier (starter, professional, enterprise)
        name (str): Display name
        description (str): Display description
        price (int): Monthly price in whole currency units
        trial_days (int): Length of the initial trial
        features (PlanFeatures): Quota and capability flags
    """
    id: str
    name: str
    description: str
    price: int
    trial_days: int
    features: PlanFeatures

    @property
    def unlimited_drivers(self):
        return self.features.unlimitedDrivers

    @property
    def max_drivers(self):
        return self.features.maxDrivers

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'trialDays': self.trial_days,
            'features': self.features.to_dict(),
        }


class PlanCatalog:
    """Read-only lookup of plans by id, in display order."""

    def __init__(self, plans):
        ids = [plan.id for plan in plans]
        expected = [plan_id.value for plan_id in PlanId]
        if sorted(ids) != sorted(expected):
            raise ValueError(
                f"Plan catalog must define exactly {expected}, got {ids}"
            )
        self._plans = MappingProxyType({plan.id: plan for plan in plans})

    @classmethod
    def from_config(cls, definitions):
        """
        Build a catalog from plain plan definitions.

        Args:
            definitions (list): Dicts with id, name, description, price,
                trial_days and a features dict.

        Returns:
            PlanCatalog: The immutable catalog
        """
        return cls([
            Plan(
                id=definition['id'],
                name=definition['name'],
                description=definition['description'],
                price=definition['price'],
                trial_days=definition['trial_days'],
                features=PlanFeatures(**definition['features']),
            )
            for definition in definitions
        ])

    def get_plan(self, plan_id):
        """Return the plan for ``plan_id`` or raise ``InvalidPlan``."""
        plan = self._plans.get(plan_id) if isinstance(plan_id, str) else None
        if plan is None:
            raise InvalidPlan(plan_id)
        return plan

    def list_plans(self):
        return list(self._plans.values())

    def __contains__(self, plan_id):
        return plan_id in self._plans

    def __len__(self):
        return len(self._plans)


def get_plan_catalog():
    """The catalog built for the running application."""
    return current_app.extensions['plan_catalog']
