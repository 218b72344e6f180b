"""
Pytest configuration and fixtures for the print shop backend tests
"""
import io
import pytest
from datetime import datetime, timedelta, timezone
from printshop import create_app, db
from printshop.models import AdminUser, JobOrder, VipMember
from printshop.services.identifiers import generate_identifier
from printshop.utils.auth import generate_token


@pytest.fixture
def app(tmp_path):
    """Create application instance with a fresh in-memory database and upload folder"""
    app = create_app('testing', UPLOAD_FOLDER=str(tmp_path / 'uploads'))

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def upload_dir(app):
    return app.config['UPLOAD_FOLDER']


@pytest.fixture
def admin_user(app):
    """Create an admin account"""
    admin = AdminUser(username='admin')
    admin.set_password('AdminPass123!')
    db.session.add(admin)
    db.session.commit()
    return admin


@pytest.fixture
def admin_headers(admin_user):
    """Generate auth headers with an admin JWT"""
    token = generate_token(admin_user.id, admin_user.username)
    return {
        'Authorization': f'Bearer {token}',
    }


@pytest.fixture
def member_factory(app):
    """Factory for creating VIP members directly in the store"""
    def _create_member(**kwargs):
        defaults = {
            'unique_id': generate_identifier('VIP-'),
            'full_name': 'Juan Dela Cruz',
            'address': '123 Rizal St, Manila',
            'email': 'juan@example.com',
            'mobile_number': '09171234567',
            'customer_category': 'Regular Customer',
            'status': 'approved',
        }
        defaults.update(kwargs)

        member = VipMember(**defaults)
        db.session.add(member)
        db.session.commit()
        return member

    return _create_member


@pytest.fixture
def approved_member(member_factory):
    return member_factory(unique_id='VIP-100001', status='approved')


@pytest.fixture
def order_factory(app, approved_member):
    """Factory for creating job orders directly in the store"""
    def _create_order(**kwargs):
        defaults = {
            'job_order_number': generate_identifier('JO-'),
            'vip_member_id': approved_member.id,
            'delivery_type': 'pickup',
            'pickup_schedule': datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=2),
            'paper_sizes': ['A4'],
            'number_of_copies': 1,
            'status': 'pending',
        }
        defaults.update(kwargs)

        order = JobOrder(**defaults)
        db.session.add(order)
        db.session.commit()
        return order

    return _create_order


@pytest.fixture
def future_schedule():
    return (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()


@pytest.fixture
def make_file():
    """Build multipart file tuples for the Flask test client"""
    def _make_file(content=b'%PDF-1.4 test document', name='document.pdf'):
        return (io.BytesIO(content), name)

    return _make_file
