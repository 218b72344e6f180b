from flask import Blueprint, request

from printshop.services.catalog import list_paper_sizes
from printshop.utils import success

paper_sizes_bp = Blueprint('paper_sizes', __name__)


@paper_sizes_bp.route('', methods=['GET'])
def paper_sizes():
    """
    Active paper sizes for the order form
    GET /api/paper-sizes?include_inactive=true
    """
    include_inactive = request.args.get('include_inactive', 'false').lower() in ['true', '1']
    return success([size.to_dict() for size in list_paper_sizes(include_inactive)])
