"""
Print shop API route blueprints
"""
from .members import members_bp
from .job_orders import job_orders_bp
from .admin import admin_bp
from .paper_sizes import paper_sizes_bp
from .upload import upload_bp

__all__ = [
    "members_bp",
    "job_orders_bp",
    "admin_bp",
    "paper_sizes_bp",
    "upload_bp",
]
