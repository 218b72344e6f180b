"""
File upload routes.
Stores one attachment per request and serves stored files back by reference.
"""
from flask import Blueprint, current_app, request, send_from_directory

from printshop.errors import NotFoundError, ValidationError
from printshop.services.storage import UPLOAD_FIELD_NAME, get_file_intake
from printshop.utils import success

upload_bp = Blueprint('upload', __name__)


# ---------------------------------------------------------------------------
# POST /api/upload
# ---------------------------------------------------------------------------
@upload_bp.route('/api/upload', methods=['POST'])
def upload_file():
    """
    Upload one file (multipart/form-data, field "file")

    Returns: { success, data: { file_path, stored_filename, original_filename, file_size, file_type } }
    """
    if UPLOAD_FIELD_NAME not in request.files:
        raise ValidationError('No file uploaded')

    stored = get_file_intake().accept(request.files[UPLOAD_FIELD_NAME], UPLOAD_FIELD_NAME)
    return success(stored._asdict(), message='File uploaded', status=201)


# ---------------------------------------------------------------------------
# GET /uploads/<filename>  (serve stored files)
# ---------------------------------------------------------------------------
@upload_bp.route('/uploads/<filename>', methods=['GET'])
def serve_upload(filename):
    """Serve a previously uploaded file."""
    store = get_file_intake().store
    name = store.name_from_reference(filename)
    if name is None or not store.exists(name):
        raise NotFoundError('File not found')

    return send_from_directory(current_app.config['UPLOAD_FOLDER'], name)
