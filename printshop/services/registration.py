"""
VIP member registration, the login gate and admin status changes.
"""
import logging

from sqlalchemy import select

from printshop import db
from printshop.errors import MembershipNotApprovedError, NotFoundError, ValidationError
from printshop.models import CustomerCategory, MemberStatus, VipMember
from printshop.services.identifiers import MEMBER_ID_PREFIX, create_with_identifier
from printshop.services.storage import get_file_intake
from printshop.utils import (
    clean_text, is_numeric_reference, parse_id, require_fields, validate_email, validate_mobile_number,
)

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = 'Invalid VIP ID. Please check your ID and try again, or register for a new account.'
PENDING_MESSAGE = 'Your VIP membership is still pending approval.'
REJECTED_MESSAGE = 'Your VIP membership application was rejected. Please contact the shop.'

BASE_REQUIRED_FIELDS = {
    'full_name': 'Full name is required',
    'address': 'Address is required',
    'email': 'Email is required',
    'mobile_number': 'Mobile number is required',
}


class CategoryRules:
    """Extra required fields and the ID file field belonging to one customer category"""

    def __init__(self, required=None, optional=(), id_file_field=None):
        self.required = required or {}
        self.optional = tuple(optional)
        self.id_file_field = id_file_field

    @property
    def text_fields(self):
        return tuple(self.required) + self.optional

    @property
    def file_fields(self):
        fields = ['verification_id_file']
        if self.id_file_field:
            fields.insert(0, self.id_file_field)
        return tuple(fields)


CATEGORY_RULES = {
    CustomerCategory.STUDENT.value: CategoryRules(
        required={'school_name': 'School name is required for students'},
        id_file_field='student_id_file',
    ),
    CustomerCategory.SENIOR_CITIZEN.value: CategoryRules(
        required={'senior_id_number': 'Senior ID number is required'},
        id_file_field='senior_id_file',
    ),
    CustomerCategory.PWD.value: CategoryRules(
        optional=('pwd_id_number',),
        id_file_field='pwd_id_file',
    ),
    CustomerCategory.REGULAR_CUSTOMER.value: CategoryRules(),
}

CATEGORY_TEXT_FIELDS = ('school_name', 'senior_id_number', 'pwd_id_number')


def validate_registration(data, file_fields=()):
    """
    Check a registration form against its category variant

    Args:
        data (dict): Submitted text fields
        file_fields (iterable): Names of the file fields that carry uploads

    Returns:
        CategoryRules: Rules of the selected category

    Raises:
        ValidationError: with a field -> message map
    """
    errors = require_fields(data, BASE_REQUIRED_FIELDS)

    email = clean_text(data.get('email'))
    if email and not validate_email(email):
        errors['email'] = 'Email is invalid'

    mobile = clean_text(data.get('mobile_number'))
    if mobile and not validate_mobile_number(mobile):
        errors['mobile_number'] = 'Mobile number is invalid'

    category = clean_text(data.get('customer_category'))
    rules = CATEGORY_RULES.get(category)
    if rules is None:
        errors['customer_category'] = 'Customer category must be one of: {}'.format(
            ', '.join(CATEGORY_RULES))
    else:
        errors.update(require_fields(data, rules.required))
        for field in file_fields:
            if field not in rules.file_fields:
                errors[field] = 'This ID file does not apply to the {} category'.format(category)

    if errors:
        raise ValidationError('Please correct the highlighted fields', fields=errors)
    return rules


def register_member(data, uploads=None):
    """
    Create a pending VIP member

    Files are stored before the record is written; if the record cannot be
    written the stored files are removed again.

    Args:
        data (dict): Registration form fields
        uploads (dict): File field name -> werkzeug FileStorage

    Returns:
        VipMember: The committed member (status ``pending``)
    """
    uploads = {name: f for name, f in (uploads or {}).items() if f is not None and f.filename}
    rules = validate_registration(data, uploads.keys())

    intake = get_file_intake()
    stored = intake.accept_many(uploads.items())
    references = {field: s.file_path for field, s in zip(uploads.keys(), stored)}

    def build(unique_id):
        member = VipMember(
            unique_id=unique_id,
            full_name=clean_text(data['full_name']),
            address=clean_text(data['address']),
            email=clean_text(data['email']).lower(),
            mobile_number=clean_text(data['mobile_number']),
            customer_category=clean_text(data['customer_category']),
            status=MemberStatus.PENDING.value,
            **references
        )
        # Only the selected category's own fields are kept
        for field in CATEGORY_TEXT_FIELDS:
            setattr(member, field, clean_text(data.get(field)) if field in rules.text_fields else None)
        return member

    try:
        member = create_with_identifier(VipMember.unique_id, MEMBER_ID_PREFIX, build)
    except Exception:
        intake.discard(stored)
        raise

    logger.info('Registered VIP member %s (%s)', member.unique_id, member.customer_category)
    return member


def find_member_by_unique_id(unique_id):
    unique_id = clean_text(unique_id)
    if not unique_id:
        return None
    return db.session.scalar(select(VipMember).where(VipMember.unique_id == unique_id))


def find_member(reference):
    """Resolve a member from a numeric id or a unique_id string"""
    if is_numeric_reference(reference):
        member_id = parse_id(reference)
        return db.session.get(VipMember, member_id) if member_id is not None else None
    return find_member_by_unique_id(reference)


def authenticate(unique_id):
    """
    Login gate: only approved members are returned

    Raises:
        ValidationError: no identifier given
        NotFoundError: unknown identifier (generic message)
        MembershipNotApprovedError: member pending or rejected
    """
    if not clean_text(unique_id):
        raise ValidationError('VIP ID is required', fields={'unique_id': 'VIP ID is required'})

    member = find_member_by_unique_id(unique_id)
    if member is None:
        logger.warning('Login attempt with unknown VIP ID')
        raise NotFoundError(INVALID_ID_MESSAGE)

    if member.status != MemberStatus.APPROVED.value:
        logger.warning('Login refused for %s: status %s', member.unique_id, member.status)
        message = REJECTED_MESSAGE if member.status == MemberStatus.REJECTED.value else PENDING_MESSAGE
        raise MembershipNotApprovedError(message, member_status=member.status)

    return member


def list_members(status=None, category=None):
    """All members, newest first, optionally filtered"""
    query = select(VipMember)
    if status:
        query = query.where(VipMember.status == status)
    if category:
        query = query.where(VipMember.customer_category == category)
    query = query.order_by(VipMember.created_at.desc(), VipMember.id.desc())
    return db.session.scalars(query).all()


def parse_member_status(value):
    allowed = [s.value for s in MemberStatus]
    status = clean_text(value)
    if status not in allowed:
        raise ValidationError('Invalid status. Must be one of: {}'.format(', '.join(allowed)))
    return status


def update_member_status(member_id, status):
    """
    Set a member's status; any transition is allowed and repeating one is harmless

    Returns:
        VipMember: The updated member
    """
    status = parse_member_status(status)
    member_id = parse_id(member_id)
    member = db.session.get(VipMember, member_id) if member_id is not None else None
    if member is None:
        raise NotFoundError('VIP member not found')

    previous = member.status
    member.status = status
    member.touch()
    db.session.commit()

    logger.info('VIP member %s status %s -> %s', member.unique_id, previous, status)
    return member
