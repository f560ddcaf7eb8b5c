"""Tests for /api/leads endpoints."""
import csv
import io

import pytest

from models.lead import VisitorLead

ASHA = {
    'phone': '9876500000',
    'full_name': 'Asha Rao',
    'organization': 'Infra Ltd',
    'interests': 'Hot',
}


class TestCreateLead:

    def test_capture_new_visitor(self, client, auth_headers, employee, company):
        resp = client.post('/api/leads', headers=auth_headers(employee), json=ASHA)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body['message'] == 'Lead created successfully'
        lead = body['data']
        assert lead['company_id'] == company.id
        assert lead['employee_id'] == employee.id
        assert lead['organization'] == 'Infra Ltd'
        assert lead['visitor'] == {'id': lead['visitor_id'], 'phone': '9876500000', 'full_name': 'Asha Rao'}

    def test_repeat_same_day_conflicts(self, client, auth_headers, employee):
        headers = auth_headers(employee)
        first = client.post('/api/leads', headers=headers, json=ASHA).get_json()['data']
        resp = client.post('/api/leads', headers=headers, json=ASHA)
        assert resp.status_code == 409
        body = resp.get_json()
        assert body['error'] == 'Lead already exists for this visitor today'
        assert body['existing_lead_id'] == first['id']

    def test_requires_visitor_identity(self, client, auth_headers, employee):
        resp = client.post('/api/leads', headers=auth_headers(employee), json={'phone': '9876500000'})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Validation failed'

    def test_bad_interest_level(self, client, auth_headers, employee):
        resp = client.post('/api/leads', headers=auth_headers(employee), json=dict(ASHA, interests='Lukewarm'))
        assert resp.status_code == 400

    def test_unknown_visitor_id(self, client, auth_headers, employee):
        resp = client.post('/api/leads', headers=auth_headers(employee), json={'visitor_id': 999})
        assert resp.status_code == 404

    def test_platform_admin_without_company(self, client, auth_headers, platform_admin):
        resp = client.post('/api/leads', headers=auth_headers(platform_admin), json=ASHA)
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Company ID required for platform admin'

    def test_requires_token(self, client):
        assert client.post('/api/leads', json=ASHA).status_code == 401


@pytest.fixture
def seeded(make_visitor, make_lead, employee, coworker, outsider):
    asha = make_visitor(phone='9876500000', full_name='Asha Rao')
    vikram = make_visitor(phone='9123400000', full_name='Vikram Shah')
    return {
        'mine': make_lead(asha, employee),
        'coworker': make_lead(vikram, coworker),
        'foreign': make_lead(asha, outsider),
    }


def listed_ids(resp):
    return sorted(row['id'] for row in resp.get_json()['data'])


class TestListLeads:

    def test_company_admin_company_id_is_ignored(self, client, auth_headers, company_admin, other_company, seeded):
        resp = client.get(f'/api/leads?company_id={other_company.id}', headers=auth_headers(company_admin))
        assert resp.status_code == 200
        assert listed_ids(resp) == sorted([seeded['mine'].id, seeded['coworker'].id])

    def test_employee_sees_own(self, client, auth_headers, employee, seeded):
        resp = client.get('/api/leads', headers=auth_headers(employee))
        assert listed_ids(resp) == [seeded['mine'].id]
        row = resp.get_json()['data'][0]
        assert row['visitor_name'] == 'Asha Rao'
        assert row['employee_name'] == 'Ravi Kumar'
        assert row['company_name'] == 'Acme Expo'

    def test_pagination_envelope(self, client, auth_headers, platform_admin, seeded):
        resp = client.get('/api/leads', headers=auth_headers(platform_admin))
        assert resp.get_json()['pagination'] == {
            'current_page': 1,
            'total_pages': 1,
            'total_records': 3,
            'has_next': False,
            'has_prev': False,
        }

    def test_malformed_date(self, client, auth_headers, employee):
        resp = client.get('/api/leads?date_from=last-week', headers=auth_headers(employee))
        assert resp.status_code == 400
        assert resp.get_json()['details'][0]['field'] == 'date_from'


class TestSingleLead:

    def test_get_outside_scope(self, client, auth_headers, company_admin, seeded):
        resp = client.get(f"/api/leads/{seeded['foreign'].id}", headers=auth_headers(company_admin))
        assert resp.status_code == 404

    def test_update_ignores_ownership_fields(self, client, auth_headers, employee, other_company, outsider, seeded):
        lead_id = seeded['mine'].id
        resp = client.put(f'/api/leads/{lead_id}', headers=auth_headers(employee), json={
            'notes': 'Send brochure',
            'follow_up_date': '2030-01-15',
            'company_id': other_company.id,
            'employee_id': outsider.id,
        })
        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['notes'] == 'Send brochure'
        assert data['follow_up_date'] == '2030-01-15'
        assert data['company_id'] == employee.company_id
        assert data['employee_id'] == employee.id

    def test_update_coworker_lead_forbidden(self, client, auth_headers, employee, seeded):
        resp = client.put(f"/api/leads/{seeded['coworker'].id}", headers=auth_headers(employee), json={'notes': 'x'})
        assert resp.status_code == 403
        assert resp.get_json()['error'] == 'Can only update your own leads'

    def test_employee_cannot_delete(self, client, auth_headers, employee, seeded):
        resp = client.delete(f"/api/leads/{seeded['mine'].id}", headers=auth_headers(employee))
        assert resp.status_code == 403

    def test_company_admin_deletes(self, client, auth_headers, company_admin, session, seeded):
        lead_id = seeded['coworker'].id
        resp = client.delete(f'/api/leads/{lead_id}', headers=auth_headers(company_admin))
        assert resp.status_code == 200
        assert session.get(VisitorLead, lead_id) is None

    def test_company_admin_cannot_delete_foreign(self, client, auth_headers, company_admin, seeded):
        resp = client.delete(f"/api/leads/{seeded['foreign'].id}", headers=auth_headers(company_admin))
        assert resp.status_code == 403


def test_stats(client, auth_headers, company_admin, seeded):
    resp = client.get('/api/leads/stats/overview', headers=auth_headers(company_admin))
    assert resp.status_code == 200
    stats = resp.get_json()['data']
    assert stats['total_leads'] == 2
    assert stats['leads_today'] == 2


def test_export_csv(client, auth_headers, company_admin, seeded):
    resp = client.get('/api/leads/export/csv', headers=auth_headers(company_admin))
    assert resp.status_code == 200
    assert resp.headers['Content-Type'].startswith('text/csv')
    assert resp.headers['Content-Disposition'].startswith('attachment; filename=leads_')
    rows = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
    assert rows[0][0] == 'id'
    assert len(rows) == 3
