import logging

from flask import Blueprint, current_app, request

from printshop.extensions import limiter
from printshop.models import ID_FILE_FIELDS
from printshop.sanitize import request_fields
from printshop.services.registration import authenticate, register_member
from printshop.utils import success

logger = logging.getLogger(__name__)

members_bp = Blueprint('members', __name__)


def _login_limit():
    return current_app.config['LOGIN_RATE_LIMIT']


@members_bp.route('/register', methods=['POST'])
def register():
    """
    Register a VIP member
    POST /api/vip-members/register  (multipart/form-data or JSON)
    Fields: full_name, address, email, mobile_number, customer_category,
            school_name, senior_id_number, pwd_id_number
    Files:  student_id_file, senior_id_file, pwd_id_file, verification_id_file
    """
    data = request_fields()
    uploads = {name: request.files.get(name) for name in ID_FILE_FIELDS if name in request.files}

    member = register_member(data, uploads)

    return success(
        {'unique_id': member.unique_id},
        message='Registration successful. Your VIP ID will be active once approved.',
        status=201,
    )


@members_bp.route('/login', methods=['POST'])
@limiter.limit(_login_limit)
def login():
    """
    Log in with a VIP ID
    POST /api/vip-members/login
    Body: {"unique_id": "VIP-123456"}

    The returned member record is the client-held session.
    """
    data = request_fields()
    member = authenticate(data.get('unique_id'))
    return success(member.to_dict(), message='Login successful')


@members_bp.route('/<unique_id>', methods=['GET'])
@limiter.limit(_login_limit)
def get_member(unique_id):
    """Re-validate a client-held session; same rules as login"""
    member = authenticate(unique_id)
    return success(member.to_dict())
