"""Job order and attached file models"""
import enum

from printshop import db
from .base import BaseModel, utcnow


class OrderStatus(str, enum.Enum):
    """Management statuses, not a state machine: any status may follow any other."""
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    READY = 'ready'
    COMPLETED = 'completed'


class DeliveryType(str, enum.Enum):
    PICKUP = 'pickup'
    DELIVERY = 'delivery'


class JobOrder(BaseModel):
    """
    Job order - one print job submitted by a VIP member
    """
    __tablename__ = 'job_orders'

    job_order_number = db.Column(db.String(32), unique=True, nullable=False, index=True)
    vip_member_id = db.Column(db.Integer, db.ForeignKey('vip_members.id', ondelete='RESTRICT'),
                              nullable=False, index=True)

    # Delivery
    delivery_type = db.Column(db.String(20), nullable=False)
    pickup_schedule = db.Column(db.DateTime)
    receiver_name = db.Column(db.String(255))
    receiver_address = db.Column(db.Text)
    receiver_mobile = db.Column(db.String(32))

    # Print specification
    paper_sizes = db.Column(db.JSON, nullable=False, default=list)
    number_of_copies = db.Column(db.Integer, nullable=False, default=1)
    instructions = db.Column(db.Text)

    total_amount_to_pay = db.Column(db.Numeric(10, 2))
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)

    __table_args__ = (
        db.CheckConstraint('number_of_copies >= 1', name='ck_job_orders_copies_positive'),
    )

    vip_member = db.relationship('VipMember', back_populates='job_orders')
    files = db.relationship('JobOrderFile', back_populates='job_order',
                            cascade='all, delete-orphan', order_by='JobOrderFile.id')

    def __repr__(self):
        return f'<JobOrder {self.job_order_number} - {self.status}>'

    def to_dict(self, include_member=False):
        """Convert to dictionary with files and optional member summary"""
        data = super().to_dict()
        data['files'] = [f.to_dict() for f in self.files]
        if include_member and self.vip_member is not None:
            data['full_name'] = self.vip_member.full_name
            data['unique_id'] = self.vip_member.unique_id
        return data


class JobOrderFile(db.Model):
    """File attached to a job order; owned by (and deleted with) the order"""
    __tablename__ = 'job_order_files'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    job_order_id = db.Column(db.Integer, db.ForeignKey('job_orders.id', ondelete='CASCADE'),
                             nullable=False, index=True)
    original_filename = db.Column(db.String(255), nullable=False)
    stored_filename = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.BigInteger, nullable=False, default=0)
    file_type = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    job_order = db.relationship('JobOrder', back_populates='files')

    def __repr__(self):
        return f'<JobOrderFile {self.original_filename} - order={self.job_order_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'job_order_id': self.job_order_id,
            'original_filename': self.original_filename,
            'stored_filename': self.stored_filename,
            'file_path': self.file_path,
            'file_size': self.file_size,
            'file_type': self.file_type,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
