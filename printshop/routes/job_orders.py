from flask import Blueprint, request

from printshop.sanitize import request_fields
from printshop.services.orders import create_order, list_member_orders
from printshop.utils import success

job_orders_bp = Blueprint('job_orders', __name__)


@job_orders_bp.route('', methods=['POST'])
def submit_order():
    """
    Create a job order
    POST /api/job-orders
    Body (JSON): {
        "vip_member_id": 12 | "VIP-123456",
        "unique_id": "VIP-123456",
        "delivery_type": "pickup" | "delivery",
        "pickup_schedule": "2025-01-15T09:00:00Z",
        "receiver_name": "...", "receiver_address": "...", "receiver_mobile": "...",
        "paper_sizes": ["A4", "Letter"],
        "number_of_copies": 2,
        "instructions": "...",
        "files": [{"file_path": "/uploads/...", "original_filename": "thesis.pdf"}]
    }
    multipart/form-data is accepted too, with the files under "files".
    """
    data = request_fields(list_fields=('paper_sizes',))
    uploads = request.files.getlist('files') if request.files else []

    order = create_order(data, uploads)

    return success(
        {'job_order_number': order.job_order_number},
        message='Order created successfully',
        status=201,
    )


@job_orders_bp.route('/member/<member_ref>', methods=['GET'])
def member_orders(member_ref):
    """
    List one member's orders, newest first
    GET /api/job-orders/member/:memberId  (numeric id or VIP unique_id)
    """
    orders = list_member_orders(member_ref)
    return success([order.to_dict() for order in orders])
