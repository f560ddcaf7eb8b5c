"""Tests for the employee-only /api/mobile surface."""
import pytest

PASSWORD = "secret123"


@pytest.fixture
def mobile_headers(auth_headers, employee):
    return auth_headers(employee)


class TestMobileLogin:

    def test_employee(self, client, employee):
        resp = client.post('/api/mobile/login', json={'email': employee.email, 'password': PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body['message'] == 'Mobile login successful'
        assert body['data']['user']['company_code'] == employee.company.company_code

    def test_company_admin_rejected(self, client, company_admin):
        resp = client.post('/api/mobile/login', json={'email': company_admin.email, 'password': PASSWORD})
        assert resp.status_code == 403
        assert resp.get_json()['error'] == 'Mobile access restricted to employees only'

    def test_inactive_company(self, client, session, employee, company):
        company.status = 'inactive'
        session.commit()
        resp = client.post('/api/mobile/login', json={'email': employee.email, 'password': PASSWORD})
        assert resp.status_code == 401


class TestMobileRegister:

    def payload(self, company):
        return {
            'email': 'walkin@example.com',
            'password': PASSWORD,
            'full_name': 'Walk In',
            'company_code': company.company_code,
        }

    def test_register_with_company_code(self, client, company):
        resp = client.post('/api/mobile/register', json=self.payload(company))
        assert resp.status_code == 201
        data = resp.get_json()['data']
        assert data['role'] == 'employee'
        assert data['company_id'] == company.id

    def test_unknown_code(self, client, company):
        payload = dict(self.payload(company), company_code='COMP999999')
        resp = client.post('/api/mobile/register', json=payload)
        assert resp.status_code == 400

    def test_disabled_by_config(self, app, client, company):
        app.config['ALLOW_MOBILE_SELF_REGISTRATION'] = False
        resp = client.post('/api/mobile/register', json=self.payload(company))
        assert resp.status_code == 403


def test_admin_token_rejected(client, auth_headers, company_admin):
    resp = client.get('/api/mobile/profile', headers=auth_headers(company_admin))
    assert resp.status_code == 403


def test_profile(client, mobile_headers, employee):
    resp = client.put('/api/mobile/profile', headers=mobile_headers, json={'phone': '9555555555'})
    assert resp.get_json()['data']['phone'] == '9555555555'
    resp = client.get('/api/mobile/profile', headers=mobile_headers)
    assert resp.get_json()['data']['id'] == employee.id


class TestMobileLeads:

    def test_capture_uses_token_company(self, client, mobile_headers, company, other_company):
        resp = client.post('/api/mobile/leads', headers=mobile_headers, json={
            'phone': '9876500000',
            'full_name': 'Asha Rao',
            'company_id': other_company.id,
        })
        assert resp.status_code == 201
        assert resp.get_json()['data']['company_id'] == company.id

    def test_repeat_conflicts(self, client, mobile_headers):
        lead = {'phone': '9876500000', 'full_name': 'Asha Rao'}
        first = client.post('/api/mobile/leads', headers=mobile_headers, json=lead).get_json()['data']
        resp = client.post('/api/mobile/leads', headers=mobile_headers, json=lead)
        assert resp.status_code == 409
        assert resp.get_json()['existing_lead_id'] == first['id']

    def test_list_own_with_organization_search(self, client, mobile_headers, employee, coworker,
                                               make_visitor, make_lead):
        mine = make_lead(make_visitor(organization='Infra Ltd'), employee)
        make_lead(make_visitor(organization='Infra Ltd'), coworker)
        make_lead(make_visitor(organization='Other'), employee, days_ago=1)
        resp = client.get('/api/mobile/leads?search=infra', headers=mobile_headers)
        body = resp.get_json()
        assert [row['id'] for row in body['data']] == [mine.id]
        assert body['pagination']['total_records'] == 1

    def test_update_other_employee_lead_is_not_found(self, client, mobile_headers, coworker,
                                                     make_visitor, make_lead):
        lead = make_lead(make_visitor(), coworker)
        resp = client.put(f'/api/mobile/leads/{lead.id}', headers=mobile_headers, json={'notes': 'x'})
        assert resp.status_code == 404

    def test_update_notes_only(self, client, mobile_headers, employee, make_visitor, make_lead):
        lead = make_lead(make_visitor(), employee, interests='Cold')
        resp = client.put(f'/api/mobile/leads/{lead.id}', headers=mobile_headers,
                          json={'notes': 'Met again', 'interests': 'Hot'})
        data = resp.get_json()['data']
        assert data['notes'] == 'Met again'
        assert data['interests'] == 'Cold'


class TestMobileVisitors:

    def test_search_requires_criteria(self, client, mobile_headers):
        resp = client.get('/api/mobile/visitors/search', headers=mobile_headers)
        assert resp.status_code == 400

    def test_search_by_name(self, client, mobile_headers, make_visitor):
        make_visitor(full_name='Asha Rao')
        resp = client.get('/api/mobile/visitors/search?full_name=asha', headers=mobile_headers)
        assert [v['full_name'] for v in resp.get_json()['data']] == ['Asha Rao']

    def test_exists(self, client, mobile_headers, employee, make_visitor, make_lead):
        visitor = make_visitor(phone='9876543210')
        make_lead(visitor, employee)
        resp = client.get('/api/mobile/visitors/exists/9876543210', headers=mobile_headers)
        data = resp.get_json()['data']
        assert data['exists'] is True
        assert data['visitor']['total_visits'] == 1

    def test_does_not_exist(self, client, mobile_headers):
        resp = client.get('/api/mobile/visitors/exists/9000000000', headers=mobile_headers)
        assert resp.get_json()['data'] == {'exists': False, 'visitor': None}

    def test_phone_suggestions(self, client, mobile_headers, make_visitor):
        make_visitor(phone='9876543210', full_name='Asha Rao')
        resp = client.get('/api/mobile/visitors/phone-suggestions/987', headers=mobile_headers)
        assert resp.get_json()['data'] == ['9876543210(Asha Rao)']
