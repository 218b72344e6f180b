"""
Job order submission and member history tests
"""
import json
import os
import re
from datetime import datetime, timedelta, timezone

import pytest

from printshop.models import JobOrder, VipMember


def order_payload(member, schedule, **overrides):
    payload = {
        'vip_member_id': member.id,
        'unique_id': member.unique_id,
        'delivery_type': 'pickup',
        'pickup_schedule': schedule,
        'paper_sizes': ['A4', 'Letter'],
        'number_of_copies': 2,
        'instructions': 'Staple on the left',
    }
    payload.update(overrides)
    return payload


class TestSubmitOrder:
    """Test job order submission"""

    def test_create_pickup_order(self, client, approved_member, future_schedule):
        response = client.post('/api/job-orders', json=order_payload(approved_member, future_schedule))

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['success'] is True
        number = data['data']['job_order_number']
        assert re.match(r'^JO-\d{6}$', number)

        order = JobOrder.query.filter_by(job_order_number=number).one()
        assert order.status == 'pending'
        assert order.vip_member_id == approved_member.id
        assert order.paper_sizes == ['A4', 'Letter']
        assert order.number_of_copies == 2
        assert order.receiver_name is None
        assert order.total_amount_to_pay is None

    def test_create_delivery_order(self, client, approved_member):
        payload = order_payload(
            approved_member, None,
            delivery_type='delivery',
            receiver_name='Ana Reyes',
            receiver_address='9 Luna St, Makati',
            receiver_mobile='09998887777',
        )

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 201
        order = JobOrder.query.one()
        assert order.delivery_type == 'delivery'
        assert order.receiver_name == 'Ana Reyes'
        assert order.pickup_schedule is None

    def test_delivery_requires_receiver_fields(self, client, approved_member):
        payload = order_payload(approved_member, None, delivery_type='delivery',
                                receiver_name='Ana Reyes')

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 400
        fields = json.loads(response.data)['fields']
        assert 'receiver_address' in fields
        assert 'receiver_mobile' in fields
        assert JobOrder.query.count() == 0

    def test_pickup_requires_schedule(self, client, approved_member):
        response = client.post('/api/job-orders', json=order_payload(approved_member, None))

        assert response.status_code == 400
        assert 'pickup_schedule' in json.loads(response.data)['fields']

    def test_pickup_schedule_in_past(self, client, approved_member):
        past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()

        response = client.post('/api/job-orders', json=order_payload(approved_member, past))

        assert response.status_code == 400
        assert 'pickup_schedule' in json.loads(response.data)['fields']

    def test_invalid_delivery_type(self, client, approved_member, future_schedule):
        response = client.post('/api/job-orders',
                               json=order_payload(approved_member, future_schedule, delivery_type='courier'))

        assert response.status_code == 400
        assert 'delivery_type' in json.loads(response.data)['fields']

    def test_empty_paper_sizes(self, client, approved_member, future_schedule):
        response = client.post('/api/job-orders',
                               json=order_payload(approved_member, future_schedule, paper_sizes=[]))

        assert response.status_code == 400
        assert 'paper_sizes' in json.loads(response.data)['fields']

    def test_zero_copies(self, client, approved_member, future_schedule):
        response = client.post('/api/job-orders',
                               json=order_payload(approved_member, future_schedule, number_of_copies=0))

        assert response.status_code == 400
        assert 'number_of_copies' in json.loads(response.data)['fields']
        assert JobOrder.query.count() == 0

    def test_paper_sizes_as_json_string(self, client, approved_member, future_schedule):
        payload = order_payload(approved_member, future_schedule, paper_sizes='["Legal/Folio"]')

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 201
        assert JobOrder.query.one().paper_sizes == ['Legal/Folio']

    def test_member_resolved_by_numeric_id_only(self, client, approved_member, future_schedule):
        payload = order_payload(approved_member, future_schedule)
        del payload['unique_id']

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 201
        assert JobOrder.query.one().vip_member_id == approved_member.id

    def test_unique_id_in_member_id_field(self, client, approved_member, future_schedule):
        payload = order_payload(approved_member, future_schedule, vip_member_id='VIP-100001')
        del payload['unique_id']

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 201
        assert JobOrder.query.one().vip_member_id == approved_member.id

    def test_unknown_unique_id_creates_member(self, client, future_schedule):
        payload = {
            'unique_id': 'VIP-777777',
            'delivery_type': 'pickup',
            'pickup_schedule': future_schedule,
            'paper_sizes': ['A4'],
            'number_of_copies': 1,
        }

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 201
        member = VipMember.query.filter_by(unique_id='VIP-777777').one()
        assert member.status == 'approved'
        assert member.customer_category == 'Regular Customer'
        assert JobOrder.query.one().vip_member_id == member.id

    def test_unknown_unique_id_rejected_when_auto_create_off(self, app, client, future_schedule):
        app.config['MEMBER_AUTO_CREATE'] = False
        payload = {
            'unique_id': 'VIP-777777',
            'delivery_type': 'pickup',
            'pickup_schedule': future_schedule,
            'paper_sizes': ['A4'],
            'number_of_copies': 1,
        }

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 404
        assert VipMember.query.count() == 0
        assert JobOrder.query.count() == 0

    def test_unknown_numeric_member_id(self, client, approved_member, future_schedule):
        payload = order_payload(approved_member, future_schedule, vip_member_id=9999)
        del payload['unique_id']

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 404

    @pytest.mark.parametrize('member_id', ['9' * 30, 10 ** 30, -5, 0])
    def test_out_of_range_member_id(self, client, approved_member, future_schedule, member_id):
        payload = order_payload(approved_member, future_schedule, vip_member_id=member_id)
        del payload['unique_id']

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 404
        assert JobOrder.query.count() == 0

    def test_non_ascii_digit_member_id_is_a_unique_id(self, app, client, approved_member, future_schedule):
        app.config['MEMBER_AUTO_CREATE'] = False
        payload = order_payload(approved_member, future_schedule, vip_member_id='²')
        del payload['unique_id']

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 404

    def test_huge_copy_count(self, client, approved_member, future_schedule):
        response = client.post('/api/job-orders',
                               json=order_payload(approved_member, future_schedule, number_of_copies=10 ** 30))

        assert response.status_code == 400
        assert 'number_of_copies' in json.loads(response.data)['fields']

    def test_missing_member_reference(self, client, approved_member, future_schedule):
        payload = order_payload(approved_member, future_schedule)
        del payload['unique_id']
        del payload['vip_member_id']

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 400
        assert 'vip_member_id' in json.loads(response.data)['fields']

    def test_multipart_order_with_files(self, client, approved_member, future_schedule, make_file):
        form = {
            'unique_id': approved_member.unique_id,
            'delivery_type': 'pickup',
            'pickup_schedule': future_schedule,
            'paper_sizes': ['A4', 'Legal/Folio'],
            'number_of_copies': '3',
            'files': [
                make_file(b'%PDF first', 'chapter1.pdf'),
                make_file(b'%PDF second', 'chapter2.pdf'),
                make_file(b'\x89PNG cover', 'cover.png'),
            ],
        }

        response = client.post('/api/job-orders', data=form, content_type='multipart/form-data')

        assert response.status_code == 201
        number = json.loads(response.data)['data']['job_order_number']

        response = client.get(f'/api/job-orders/member/{approved_member.unique_id}')
        orders = json.loads(response.data)['data']
        assert len(orders) == 1
        assert orders[0]['job_order_number'] == number
        assert orders[0]['paper_sizes'] == ['A4', 'Legal/Folio']
        assert orders[0]['number_of_copies'] == 3

        files = orders[0]['files']
        assert [f['original_filename'] for f in files] == ['chapter1.pdf', 'chapter2.pdf', 'cover.png']
        assert len({f['file_path'] for f in files}) == 3
        for f in files:
            served = client.get(f['file_path'])
            assert served.status_code == 200
            assert len(served.data) == f['file_size']

    def test_json_order_with_uploaded_references(self, client, approved_member, future_schedule, make_file):
        upload = client.post('/api/upload', data={'file': make_file(b'%PDF thesis', 'thesis.pdf')},
                             content_type='multipart/form-data')
        stored = json.loads(upload.data)['data']

        payload = order_payload(approved_member, future_schedule, files=[
            {'file_path': stored['file_path'], 'original_filename': 'thesis.pdf'},
        ])
        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 201
        attached = JobOrder.query.one().files
        assert len(attached) == 1
        assert attached[0].original_filename == 'thesis.pdf'
        assert attached[0].file_path == stored['file_path']
        assert attached[0].file_size == len(b'%PDF thesis')

    def test_missing_file_reference(self, client, approved_member, future_schedule):
        payload = order_payload(approved_member, future_schedule,
                                files=['/uploads/file-1-000000001.pdf'])

        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 400
        assert 'files' in json.loads(response.data)['fields']
        assert JobOrder.query.count() == 0

    def test_member_id_document_cannot_be_attached(self, client, approved_member,
                                                   future_schedule, make_file):
        form = {
            'full_name': 'Lea Cruz',
            'address': '7 Bonifacio Ave, Pasig',
            'email': 'lea@example.com',
            'mobile_number': '09181112222',
            'customer_category': 'Regular Customer',
            'verification_id_file': make_file(b'\x89PNG id card', 'id.png'),
        }
        client.post('/api/vip-members/register', data=form, content_type='multipart/form-data')
        id_file = VipMember.query.filter_by(email='lea@example.com').one().verification_id_file

        payload = order_payload(approved_member, future_schedule, files=[{'file_path': id_file}])
        response = client.post('/api/job-orders', json=payload)

        assert response.status_code == 400
        assert 'files' in json.loads(response.data)['fields']
        assert JobOrder.query.count() == 0
        assert client.get(id_file).status_code == 200

    def test_other_order_attachment_cannot_be_claimed(self, client, approved_member, future_schedule,
                                                      make_file):
        form = {
            'unique_id': approved_member.unique_id,
            'delivery_type': 'pickup',
            'pickup_schedule': future_schedule,
            'paper_sizes': 'A4',
            'number_of_copies': '1',
            'files': [make_file(b'%PDF mine', 'mine.pdf')],
        }
        client.post('/api/job-orders', data=form, content_type='multipart/form-data')
        attached = JobOrder.query.one().files[0].file_path

        response = client.post('/api/job-orders',
                               json=order_payload(approved_member, future_schedule, files=[attached]))

        assert response.status_code == 400
        assert JobOrder.query.count() == 1

    def test_files_required_when_configured(self, app, client, approved_member, future_schedule):
        app.config['ORDER_REQUIRE_FILES'] = True

        response = client.post('/api/job-orders', json=order_payload(approved_member, future_schedule))

        assert response.status_code == 400
        assert 'files' in json.loads(response.data)['fields']

    def test_failed_file_leaves_nothing_stored(self, app, client, upload_dir, approved_member,
                                               future_schedule, make_file):
        app.extensions['printshop.file_intake'].max_size = 20
        form = {
            'unique_id': approved_member.unique_id,
            'delivery_type': 'pickup',
            'pickup_schedule': future_schedule,
            'paper_sizes': 'A4',
            'number_of_copies': '1',
            'files': [
                make_file(b'small', 'a.pdf'),
                make_file(b'y' * 100, 'b.pdf'),
            ],
        }

        response = client.post('/api/job-orders', data=form, content_type='multipart/form-data')

        assert response.status_code == 413
        assert JobOrder.query.count() == 0
        assert not os.path.exists(upload_dir) or os.listdir(upload_dir) == []


class TestMemberOrders:
    """Test a member's order history"""

    def test_orders_newest_first(self, client, approved_member, order_factory):
        old = order_factory(created_at=datetime(2024, 1, 1))
        new = order_factory(created_at=datetime(2024, 6, 1))

        response = client.get(f'/api/job-orders/member/{approved_member.id}')

        assert response.status_code == 200
        numbers = [o['job_order_number'] for o in json.loads(response.data)['data']]
        assert numbers == [new.job_order_number, old.job_order_number]

    def test_only_own_orders(self, client, approved_member, member_factory, order_factory):
        other = member_factory(unique_id='VIP-555555')
        mine = order_factory()
        order_factory(vip_member_id=other.id)

        response = client.get('/api/job-orders/member/VIP-100001')

        orders = json.loads(response.data)['data']
        assert [o['id'] for o in orders] == [mine.id]

    @pytest.mark.parametrize('member_ref', ['9' * 30, '²', '0'])
    def test_unusable_numeric_reference_has_no_orders(self, client, order_factory, member_ref):
        order_factory()

        response = client.get(f'/api/job-orders/member/{member_ref}')

        assert response.status_code == 200
        assert json.loads(response.data)['data'] == []

    def test_unknown_member_has_no_orders(self, client):
        response = client.get('/api/job-orders/member/VIP-000000')

        assert response.status_code == 200
        assert json.loads(response.data)['data'] == []
