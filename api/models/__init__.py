from .base import Base
from .organization import Organization
from .sale import Sale, SaleStatus, PaymentStatus
from .account import VirtualAccount, AccountType, BalanceBucket
from .transaction import VirtualTransaction, TransactionType, TransactionStatus
from .split import SaleSplit, SplitType
from .settings import OrganizationSplitRules, PlatformSetting
from .audit import AuditLog
