"""SQLAlchemy models package"""
from .base import utcnow
from .vip_member import VipMember, MemberStatus, CustomerCategory, ID_FILE_FIELDS
from .job_order import JobOrder, JobOrderFile, OrderStatus, DeliveryType
from .paper_size import PaperSize
from .admin_user import AdminUser

__all__ = [
    'utcnow',
    'VipMember',
    'MemberStatus',
    'CustomerCategory',
    'ID_FILE_FIELDS',
    'JobOrder',
    'JobOrderFile',
    'OrderStatus',
    'DeliveryType',
    'PaperSize',
    'AdminUser',
]
