"""
Admin API routes.
Every route except /login requires an admin bearer token.
"""
import logging

from flask import Blueprint, current_app, request
from sqlalchemy import select

from printshop import db
from printshop.errors import AuthenticationError, ValidationError
from printshop.extensions import limiter
from printshop.models import AdminUser, utcnow
from printshop.sanitize import request_fields
from printshop.services import orders as order_service
from printshop.services.registration import list_members, update_member_status
from printshop.utils import clean_text, success
from printshop.utils.auth import generate_token, require_admin

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/login', methods=['POST'])
@limiter.limit(lambda: current_app.config['LOGIN_RATE_LIMIT'])
def login():
    """
    Admin login
    POST /api/admin/login
    Body: {"username": "admin", "password": "..."}
    """
    data = request.get_json(silent=True) or {}
    username = clean_text(data.get('username'))
    password = data.get('password')

    if not username or not password:
        raise ValidationError('Username and password are required')

    admin = db.session.scalar(select(AdminUser).where(AdminUser.username == username))
    if admin is None or not admin.check_password(password):
        logger.warning('Failed admin login for %s', username)
        raise AuthenticationError('Invalid credentials')

    admin.last_login_at = utcnow()
    db.session.commit()

    return success({
        'token': generate_token(admin.id, admin.username),
        'admin': admin.to_dict(),
    }, message='Login successful')


@admin_bp.route('/registrations', methods=['GET'])
@require_admin
def registrations():
    """
    List VIP registrations, newest first
    GET /api/admin/registrations?status=pending&category=Student&view=summary
    """
    members = list_members(
        status=request.args.get('status'),
        category=request.args.get('category'),
    )
    if request.args.get('view') == 'summary':
        return success([m.to_summary() for m in members])
    return success([m.to_dict() for m in members])


@admin_bp.route('/vip-members/<int:member_id>/status', methods=['PATCH'])
@require_admin
def member_status(member_id):
    """
    Approve, reject or reset a member
    PATCH /api/admin/vip-members/:id/status
    Body: {"status": "approved"}
    """
    data = request_fields()
    member = update_member_status(member_id, data.get('status'))
    return success(member.to_dict(), message='Status updated successfully')


@admin_bp.route('/job-orders', methods=['GET'])
@require_admin
def job_orders():
    """
    List all job orders with member name and VIP ID
    GET /api/admin/job-orders?status=pending&member=VIP-123456
    """
    orders = order_service.list_orders(
        status=request.args.get('status'),
        member_reference=request.args.get('member'),
    )
    return success([order.to_dict(include_member=True) for order in orders])


@admin_bp.route('/job-orders/<int:order_id>', methods=['GET'])
@require_admin
def job_order_detail(order_id):
    order = order_service.get_order(order_id)
    return success(order.to_dict(include_member=True))


@admin_bp.route('/job-orders/<int:order_id>/status', methods=['PATCH'])
@require_admin
def job_order_status(order_id):
    """
    PATCH /api/admin/job-orders/:id/status
    Body: {"status": "in_progress"}
    """
    data = request_fields()
    order = order_service.update_order_status(order_id, data.get('status'))
    return success(order.to_dict(include_member=True), message='Order status updated')


@admin_bp.route('/job-orders/<int:order_id>/amount', methods=['PATCH'])
@require_admin
def job_order_amount(order_id):
    """
    PATCH /api/admin/job-orders/:id/amount
    Body: {"amount": 150.50}
    """
    data = request.get_json(silent=True) or {}
    order = order_service.update_order_amount(order_id, data.get('amount'))
    return success(order.to_dict(include_member=True), message='Order amount updated')


@admin_bp.route('/job-orders/<int:order_id>', methods=['DELETE'])
@require_admin
def delete_job_order(order_id):
    deleted = order_service.delete_order(order_id)
    return success(deleted, message='Order deleted')


@admin_bp.route('/job-orders', methods=['DELETE'])
@require_admin
def bulk_delete_job_orders():
    """
    DELETE /api/admin/job-orders
    Body: {"orderIds": [1, 2, 3]}
    """
    data = request.get_json(silent=True) or {}
    result = order_service.bulk_delete_orders(data.get('orderIds'))
    return success(result, message='Deleted {} order(s)'.format(result['deleted_count']))


@admin_bp.route('/stats', methods=['GET'])
@require_admin
def stats():
    return success(order_service.order_stats())
