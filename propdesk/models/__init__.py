from ..extensions import db

from .account import Account, RevokedToken, ROLES
from .property import Property, Unit, UNIT_STATUSES
from .tenant import Tenant, TENANT_STATUSES
from .invite import TenantInvite
from .maintenance import MaintenanceRequest, REQUEST_STATUSES
