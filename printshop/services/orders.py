"""
Job order workflow: submission, member resolution, listing and the
admin mutations (status, amount, single and bulk delete).
"""
import logging

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from printshop import db
from printshop.errors import NotFoundError, ValidationError
from printshop.models import (
    ID_FILE_FIELDS, CustomerCategory, DeliveryType, JobOrder, JobOrderFile, MemberStatus, OrderStatus,
    VipMember, utcnow,
)
from printshop.services.identifiers import ORDER_NUMBER_PREFIX, create_with_identifier
from printshop.services.registration import find_member, find_member_by_unique_id
from printshop.services.storage import get_file_intake
from printshop.utils import (
    clean_text, is_blank, is_numeric_reference, parse_datetime, parse_decimal, parse_id, parse_string_list,
    safe_int,
)
from printshop.utils.helpers import MAX_RECORD_ID

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = 'Not provided'
PLACEHOLDER_NAME = 'VIP Member'
MAX_UNIQUE_ID_LENGTH = 32


def validate_order(data, upload_count=0):
    """
    Validate an order submission before anything is written

    Returns:
        dict: Normalised order fields

    Raises:
        ValidationError: with a field -> message map
    """
    errors = {}
    fields = {}

    delivery_type = clean_text(data.get('delivery_type'))
    if delivery_type not in [d.value for d in DeliveryType]:
        errors['delivery_type'] = 'Delivery type must be pickup or delivery'
    fields['delivery_type'] = delivery_type

    paper_sizes = parse_string_list(data.get('paper_sizes'))
    if not paper_sizes:
        errors['paper_sizes'] = 'Please select at least one paper size'
    fields['paper_sizes'] = paper_sizes or []

    copies = safe_int(data.get('number_of_copies'))
    if copies is None or not 1 <= copies <= MAX_RECORD_ID:
        errors['number_of_copies'] = 'Number of copies must be at least 1'
    fields['number_of_copies'] = copies

    fields['instructions'] = clean_text(data.get('instructions'))

    if delivery_type == DeliveryType.DELIVERY.value:
        receiver = {
            'receiver_name': 'Receiver name is required for delivery',
            'receiver_address': 'Receiver address is required for delivery',
            'receiver_mobile': 'Receiver mobile number is required for delivery',
        }
        for name, message in receiver.items():
            if is_blank(data.get(name)):
                errors[name] = message
            fields[name] = clean_text(data.get(name))
        fields['pickup_schedule'] = None
    elif delivery_type == DeliveryType.PICKUP.value:
        schedule = parse_datetime(data.get('pickup_schedule'))
        if schedule is None:
            errors['pickup_schedule'] = 'Pickup schedule is required'
        elif schedule < utcnow():
            errors['pickup_schedule'] = 'Pickup schedule cannot be in the past'
        fields['pickup_schedule'] = schedule
        for name in ('receiver_name', 'receiver_address', 'receiver_mobile'):
            fields[name] = None

    file_refs = data.get('files') or []
    if not isinstance(file_refs, list):
        errors['files'] = 'files must be a list of uploaded file references'
        file_refs = []
    fields['file_refs'] = file_refs

    if current_app.config.get('ORDER_REQUIRE_FILES') and not file_refs and not upload_count:
        errors['files'] = 'Please attach at least one file'

    if errors:
        raise ValidationError('Please correct the highlighted fields', fields=errors)
    return fields


def _describe_file_refs(file_refs):
    """Turn JSON file references into StoredFile metadata, checking each exists"""
    intake = get_file_intake()
    described = []
    for ref in file_refs:
        if isinstance(ref, str):
            described.append(intake.describe_reference(ref))
        elif isinstance(ref, dict) and ref.get('file_path'):
            described.append(intake.describe_reference(
                ref['file_path'],
                original_filename=clean_text(ref.get('original_filename')),
                file_type=clean_text(ref.get('file_type')),
            ))
        else:
            raise ValidationError('Invalid file reference', fields={'files': 'Invalid file reference'})
    return described


def member_reference(data):
    """
    Split the submitted member reference into ``(numeric_id, unique_id)``

    ``vip_member_id`` may hold either form; an explicit ``unique_id`` wins.
    """
    unique_id = clean_text(data.get('unique_id'))
    raw_id = data.get('vip_member_id')
    numeric_id = None
    if is_numeric_reference(raw_id):
        # Out-of-range ids become 0, which never matches a row
        numeric_id = parse_id(raw_id) or 0
    else:
        text = clean_text(raw_id)
        if text and unique_id is None:
            unique_id = text
    return numeric_id, unique_id


def resolve_member(data):
    """
    Find the ordering member

    Returns:
        tuple: ``(member, unique_id_to_create)``; exactly one is not None

    Raises:
        ValidationError: no member reference at all
        NotFoundError: reference does not resolve and auto-creation is off
    """
    numeric_id, unique_id = member_reference(data)

    if unique_id:
        member = find_member_by_unique_id(unique_id)
        if member is not None:
            return member, None
    if numeric_id:
        member = db.session.get(VipMember, numeric_id)
        if member is not None:
            return member, None

    if unique_id:
        if len(unique_id) > MAX_UNIQUE_ID_LENGTH:
            raise ValidationError('VIP ID is too long', fields={'unique_id': 'VIP ID is too long'})
        if not current_app.config.get('MEMBER_AUTO_CREATE'):
            raise NotFoundError('VIP member not found')
        return None, unique_id
    if numeric_id is not None:
        raise NotFoundError('VIP member not found')

    raise ValidationError('A VIP member reference is required',
                          fields={'vip_member_id': 'VIP member ID or unique ID is required'})


def auto_create_member(unique_id, data):
    """
    Create a minimal member for an order whose unique_id is not on file yet

    Keeps order submission available when member records lag behind the
    client; the status comes from AUTO_CREATED_MEMBER_STATUS.
    """
    member = VipMember(
        unique_id=unique_id,
        full_name=clean_text(data.get('full_name')) or PLACEHOLDER_NAME,
        address=clean_text(data.get('address')) or PLACEHOLDER_TEXT,
        email=clean_text(data.get('email')) or PLACEHOLDER_TEXT,
        mobile_number=clean_text(data.get('mobile_number')) or PLACEHOLDER_TEXT,
        customer_category=CustomerCategory.REGULAR_CUSTOMER.value,
        status=current_app.config.get('AUTO_CREATED_MEMBER_STATUS', MemberStatus.APPROVED.value),
    )
    db.session.add(member)
    try:
        db.session.commit()
    except IntegrityError:
        # Created concurrently by another request
        db.session.rollback()
        member = find_member_by_unique_id(unique_id)
        if member is None:
            raise
        return member

    logger.warning('Auto-created VIP member %s (status %s) during order submission',
                   member.unique_id, member.status)
    return member


def create_order(data, uploads=()):
    """
    Submit a job order

    Args:
        data (dict): Order fields, including the member reference and
            optional ``files`` references from earlier uploads
        uploads (list): Files sent with the request itself

    Returns:
        JobOrder: The committed order (status ``pending``)
    """
    uploads = [f for f in uploads if f is not None and f.filename]
    fields = validate_order(data, upload_count=len(uploads))
    member, unique_id_to_create = resolve_member(data)
    referenced = _describe_file_refs(fields.pop('file_refs'))

    intake = get_file_intake()
    stored = intake.accept_many(('files', f) for f in uploads)

    try:
        if member is None:
            member = auto_create_member(unique_id_to_create, data)
        member_id = member.id

        def build(job_order_number):
            order = JobOrder(
                job_order_number=job_order_number,
                vip_member_id=member_id,
                status=OrderStatus.PENDING.value,
                **fields
            )
            for item in referenced + stored:
                order.files.append(JobOrderFile(**item._asdict()))
            return order

        order = create_with_identifier(JobOrder.job_order_number, ORDER_NUMBER_PREFIX, build)
    except Exception:
        intake.discard(stored)
        raise

    logger.info('Created job order %s for member %s with %d file(s)',
                order.job_order_number, member.unique_id, len(order.files))
    return order


def list_member_orders(reference):
    """Orders of one member (numeric id or unique_id), newest first"""
    member = find_member(reference)
    if member is None:
        return []
    query = (
        select(JobOrder)
        .options(selectinload(JobOrder.files))
        .where(JobOrder.vip_member_id == member.id)
        .order_by(JobOrder.created_at.desc(), JobOrder.id.desc())
    )
    return db.session.scalars(query).all()


def list_orders(status=None, member_reference=None):
    """All orders newest first, each carrying its member"""
    query = (
        select(JobOrder)
        .join(JobOrder.vip_member)
        .options(selectinload(JobOrder.vip_member), selectinload(JobOrder.files))
    )
    if status:
        query = query.where(JobOrder.status == status)
    if member_reference:
        member = find_member(member_reference)
        if member is None:
            return []
        query = query.where(JobOrder.vip_member_id == member.id)
    query = query.order_by(JobOrder.created_at.desc(), JobOrder.id.desc())
    return db.session.scalars(query).all()


def get_order(order_id):
    order_id = parse_id(order_id)
    order = db.session.get(JobOrder, order_id) if order_id is not None else None
    if order is None:
        raise NotFoundError('Job order not found')
    return order


def update_order_status(order_id, status):
    """Set an order's status; every transition is allowed, including back from completed"""
    allowed = [s.value for s in OrderStatus]
    status = clean_text(status)
    if status not in allowed:
        raise ValidationError('Invalid status. Must be one of: {}'.format(', '.join(allowed)))

    order = get_order(order_id)
    previous = order.status
    order.status = status
    order.touch()
    db.session.commit()

    logger.info('Job order %s status %s -> %s', order.job_order_number, previous, status)
    return order


def update_order_amount(order_id, amount):
    """Record the staff-entered amount to pay"""
    value = parse_decimal(amount)
    if value is None or value < 0:
        raise ValidationError('Amount must be a non-negative number')

    order = get_order(order_id)
    order.total_amount_to_pay = value
    order.touch()
    db.session.commit()

    logger.info('Job order %s amount set to %s', order.job_order_number, value)
    return order


def _still_referenced(paths):
    """File references among ``paths`` that an order file or member ID field still points at"""
    if not paths:
        return set()
    paths = list(set(paths))
    referenced = set(db.session.scalars(
        select(JobOrderFile.file_path).where(JobOrderFile.file_path.in_(paths))
    ))
    for field in ID_FILE_FIELDS:
        column = getattr(VipMember, field)
        referenced.update(db.session.scalars(select(column).where(column.in_(paths))))
    return referenced


def _release_blobs(paths):
    """
    Flush the pending deletes, then commit and remove the blobs nothing references any more

    Must run inside the transaction that deleted the owning rows.
    """
    db.session.flush()
    orphaned = set(paths) - _still_referenced(paths)
    db.session.commit()

    intake = get_file_intake()
    for path in orphaned:
        intake.store.delete(path)
    kept = len(set(paths)) - len(orphaned)
    if kept:
        logger.info('Kept %d shared file(s) still referenced by other records', kept)


def delete_order(order_id):
    """
    Delete one order and its files

    Returns:
        dict: The deleted order as it was before deletion
    """
    order = get_order(order_id)
    snapshot = order.to_dict(include_member=True)
    paths = [f.file_path for f in order.files]

    db.session.delete(order)
    _release_blobs(paths)

    logger.info('Deleted job order %s', snapshot['job_order_number'])
    return snapshot


def bulk_delete_orders(order_ids):
    """
    Delete every listed order that exists

    Unknown ids are reported, not treated as an error.

    Returns:
        dict: ``deleted`` (order snapshots), ``not_found`` (ids) and ``deleted_count``
    """
    if not isinstance(order_ids, list) or not order_ids:
        raise ValidationError('orderIds must be a non-empty array')

    ids = []
    for raw in order_ids:
        value = parse_id(raw)
        if value is None:
            raise ValidationError('orderIds must contain only valid numeric ids')
        if value not in ids:
            ids.append(value)

    orders = db.session.scalars(
        select(JobOrder)
        .where(JobOrder.id.in_(ids))
        .options(selectinload(JobOrder.vip_member), selectinload(JobOrder.files))
    ).all()
    by_id = {order.id: order for order in orders}

    deleted = []
    not_found = []
    paths = []
    for order_id in ids:
        order = by_id.get(order_id)
        if order is None:
            not_found.append(order_id)
            continue
        deleted.append(order.to_dict(include_member=True))
        paths.extend(f.file_path for f in order.files)
        db.session.delete(order)

    _release_blobs(paths)

    logger.info('Bulk deleted %d job order(s); %d not found', len(deleted), len(not_found))
    return {
        'deleted': deleted,
        'not_found': not_found,
        'deleted_count': len(deleted),
    }


def order_stats():
    """Order counts per status plus member counts per status"""
    order_counts = dict(db.session.execute(
        select(JobOrder.status, func.count(JobOrder.id)).group_by(JobOrder.status)
    ).all())
    member_counts = dict(db.session.execute(
        select(VipMember.status, func.count(VipMember.id)).group_by(VipMember.status)
    ).all())
    return {
        'orders': {
            'total': sum(order_counts.values()),
            **{s.value: order_counts.get(s.value, 0) for s in OrderStatus},
        },
        'members': {
            'total': sum(member_counts.values()),
            **{s.value: member_counts.get(s.value, 0) for s in MemberStatus},
        },
    }
