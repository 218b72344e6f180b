"""
Paper size catalog tests
"""
import json

from printshop import db
from printshop.models import PaperSize
from printshop.services.catalog import seed_paper_sizes


class TestPaperSizes:

    def test_default_catalog(self, client):
        response = client.get('/api/paper-sizes')

        assert response.status_code == 200
        names = [size['name'] for size in json.loads(response.data)['data']]
        assert sorted(names) == ['A4', 'Legal/Folio', 'Letter']

    def test_inactive_sizes_hidden_by_default(self, client):
        db.session.add(PaperSize(name='A3', description='Large format', active=False))
        db.session.commit()

        active = json.loads(client.get('/api/paper-sizes').data)['data']
        everything = json.loads(client.get('/api/paper-sizes?include_inactive=true').data)['data']

        assert 'A3' not in [s['name'] for s in active]
        assert 'A3' in [s['name'] for s in everything]

    def test_seed_is_idempotent(self, app):
        assert seed_paper_sizes() == 0
        assert PaperSize.query.count() == 3
