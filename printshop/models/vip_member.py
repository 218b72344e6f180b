"""VIP member model"""
import enum

from printshop import db
from .base import BaseModel


class MemberStatus(str, enum.Enum):
    """Free transitions: an admin may move a member between any two states."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class CustomerCategory(str, enum.Enum):
    STUDENT = 'Student'
    SENIOR_CITIZEN = 'Senior Citizen'
    REGULAR_CUSTOMER = 'Regular Customer'
    PWD = 'PWD'


ID_FILE_FIELDS = ('student_id_file', 'senior_id_file', 'pwd_id_file', 'verification_id_file')


class VipMember(BaseModel):
    """
    VIP member - a registered customer identified by a ``VIP-######`` id
    """
    __tablename__ = 'vip_members'

    unique_id = db.Column(db.String(32), unique=True, nullable=False, index=True)

    full_name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.Text, nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    mobile_number = db.Column(db.String(32), nullable=False)
    customer_category = db.Column(db.String(32), nullable=False,
                                  default=CustomerCategory.REGULAR_CUSTOMER.value)

    # Category specific
    school_name = db.Column(db.String(255))
    senior_id_number = db.Column(db.String(100))
    pwd_id_number = db.Column(db.String(100))

    # Identity documents (file references)
    student_id_file = db.Column(db.String(500))
    senior_id_file = db.Column(db.String(500))
    pwd_id_file = db.Column(db.String(500))
    verification_id_file = db.Column(db.String(500))

    status = db.Column(db.String(20), nullable=False, default=MemberStatus.PENDING.value, index=True)

    job_orders = db.relationship('JobOrder', back_populates='vip_member', lazy='dynamic')

    def __repr__(self):
        return f'<VipMember {self.unique_id} - {self.status}>'

    @property
    def is_approved(self):
        return self.status == MemberStatus.APPROVED.value

    def to_summary(self):
        """Admin list projection without raw file references"""
        data = self.to_dict(exclude=list(ID_FILE_FIELDS))
        data['has_id_files'] = any(getattr(self, name) for name in ID_FILE_FIELDS)
        return data
