"""Convenience exports for the models package."""

from .address import Address
from .area import Area
from .area_admin import AreaAdmin
from .common import utcnow
from .community import Community
from .event import Event
from .event_type import NWTA_CODE, EventType
from .group import FGroup, Group, IGroup
from .nwta import NwtaEvent, NwtaRole, NwtaRoleType
from .person import Person
from .prospect import Prospect
from .registrant import Registrant
from .transaction import (
    INFLOW_TYPES,
    OUTFLOW_TYPES,
    Transaction,
    TransactionMethod,
    TransactionType,
)
from .user import EmmaUser
from .venue import Venue
from .warrior import Warrior
