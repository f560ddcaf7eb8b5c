"""Tests for services.visitors: reconciliation, lookups and stats."""
from datetime import timedelta
from unittest.mock import patch

import pytest

from models.company import Company
from models.lead import VisitorLead
from models.visitor import Visitor
from services import visitors as visitors_service
from services.errors import ConflictError, NotFoundError, ValidationError


class TestResolveVisitor:

    def test_creates_new_visitor(self, session):
        visitor, created = visitors_service.resolve_visitor(
            session, "9876500000", {"full_name": "Asha Rao", "organization": "Infra Ltd"},
        )
        assert created is True
        assert visitor.id is not None
        assert visitor.organization == "Infra Ltd"
        assert visitor.city is None

    def test_same_phone_returns_same_id(self, session):
        first, _ = visitors_service.resolve_visitor(session, "9876500000", {"full_name": "Asha Rao"})
        second, created = visitors_service.resolve_visitor(session, "9876500000", {"full_name": "Someone Else"})
        assert created is False
        assert second.id == first.id
        assert session.query(Visitor).count() == 1

    def test_existing_visitor_is_not_overwritten(self, session, make_visitor):
        existing = make_visitor(phone="9876500001", full_name="Asha Rao", city="Pune")
        visitor, _ = visitors_service.resolve_visitor(
            session, "9876500001", {"full_name": "A. Rao", "city": "Mumbai"},
        )
        assert visitor.id == existing.id
        assert visitor.full_name == "Asha Rao"
        assert visitor.city == "Pune"

    def test_new_phone_without_name_is_rejected(self, session):
        with pytest.raises(ValidationError):
            visitors_service.resolve_visitor(session, "9876500002", {})

    def test_missing_phone_is_rejected(self, session):
        with pytest.raises(ValidationError):
            visitors_service.resolve_visitor(session, "", {"full_name": "Nobody"})

    def test_concurrent_insert_reuses_winner(self, session, make_visitor):
        winner = make_visitor(phone="9811111111", full_name="First Writer")
        with patch("services.visitors.find_by_phone", side_effect=[None, winner]):
            visitor, created = visitors_service.resolve_visitor(
                session, "9811111111", {"full_name": "Late Writer"},
            )
        assert created is False
        assert visitor.id == winner.id
        assert session.query(Visitor).count() == 1

    def test_lost_race_keeps_earlier_pending_work(self, session, make_visitor):
        winner = make_visitor(phone="9998887771", full_name="First Writer")
        session.add(Company(name="Pending Co", company_code="COMP999999"))
        session.flush()
        with patch("services.visitors.find_by_phone", side_effect=[None, winner]):
            visitor, _ = visitors_service.resolve_visitor(session, "9998887771", {"full_name": "Asha Rao"})
        assert visitor.id == winner.id
        assert session.query(Company).filter_by(company_code="COMP999999").first() is not None


class TestCreateVisitor:

    def test_duplicate_phone_conflicts_with_visitor_id(self, session, make_visitor):
        existing = make_visitor(phone="9000012345")
        with pytest.raises(ConflictError) as exc:
            visitors_service.create_visitor(session, "9000012345", {"full_name": "Dup"})
        assert exc.value.extra["visitor_id"] == existing.id

    def test_requires_full_name(self, session):
        with pytest.raises(ValidationError):
            visitors_service.create_visitor(session, "9000012345", {})


class TestLookups:

    def test_get_missing_visitor(self, session):
        with pytest.raises(NotFoundError):
            visitors_service.get_visitor(session, 404)

    def test_search_by_phone_needs_three_digits(self, session):
        with pytest.raises(ValidationError):
            visitors_service.search_by_phone(session, "98")

    def test_search_by_phone_matches_fragment(self, session, make_visitor):
        make_visitor(phone="9876543210")
        make_visitor(phone="9123456789")
        results = visitors_service.search_by_phone(session, "543")
        assert [v.phone for v in results] == ["9876543210"]

    def test_search_by_name_is_case_insensitive(self, session, make_visitor):
        make_visitor(full_name="Asha Rao")
        make_visitor(full_name="Vikram Shah")
        results = visitors_service.search(session, full_name="asha")
        assert [v.full_name for v in results] == ["Asha Rao"]

    def test_wildcards_match_literally(self, session, make_visitor):
        make_visitor(full_name="Asha Rao")
        make_visitor(full_name="100% Pure_Tea")
        for term in ("%", "_"):
            results = visitors_service.search(session, full_name=term)
            assert [v.full_name for v in results] == ["100% Pure_Tea"]

    def test_phone_suggestions_format(self, session, make_visitor):
        make_visitor(phone="9876543210", full_name="Asha Rao")
        make_visitor(phone="8123456789", full_name="Other")
        assert visitors_service.phone_suggestions(session, "98-76") == ["9876543210(Asha Rao)"]

    def test_phone_suggestions_without_digits(self, session, make_visitor):
        make_visitor()
        assert visitors_service.phone_suggestions(session, "abc") == []

    def test_list_visitors_paginates(self, session, make_visitor):
        for _ in range(7):
            make_visitor()
        items, pagination = visitors_service.list_visitors(session, page=2, per_page=5)
        assert len(items) == 2
        assert pagination == {
            "current_page": 2,
            "total_pages": 2,
            "total_records": 7,
            "has_next": False,
            "has_prev": True,
        }


class TestVisitSummary:

    def test_counts_leads_across_companies(self, session, make_visitor, make_lead, employee, outsider):
        visitor = make_visitor()
        make_lead(visitor, employee, days_ago=2)
        latest = make_lead(visitor, outsider)
        summary = visitors_service.visit_summary(session, visitor)
        assert summary["total_visits"] == 2
        assert summary["last_visit"] == latest.created_at.isoformat()

    def test_no_visits(self, session, make_visitor):
        summary = visitors_service.visit_summary(session, make_visitor())
        assert summary["total_visits"] == 0
        assert summary["last_visit"] is None


def test_delete_visitor_removes_leads(session, make_visitor, make_lead, employee):
    visitor = make_visitor()
    make_lead(visitor, employee)
    visitors_service.delete_visitor(session, visitor.id)
    session.commit()
    assert session.query(Visitor).count() == 0
    assert session.query(VisitorLead).count() == 0


def test_update_visitor_keeps_name_when_blank(session, make_visitor):
    visitor = make_visitor(full_name="Asha Rao")
    updated = visitors_service.update_visitor(session, visitor.id, {"full_name": None, "city": "Pune"})
    assert updated.full_name == "Asha Rao"
    assert updated.city == "Pune"


def test_visitor_stats(session, make_visitor):
    make_visitor()
    old = make_visitor()
    old.created_at = old.created_at - timedelta(days=400)
    session.commit()
    stats = visitors_service.visitor_stats(session)
    assert stats["total_visitors"] == 2
    assert stats["visitors_last_30_days"] == 1
    assert stats["visitors_today"] == 1
