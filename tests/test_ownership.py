import pytest

from careerspage.core.errors import CompanyNotFound, Forbidden, Unauthorized
from careerspage.db.models import Company
from careerspage.schemas import Identity
from careerspage.services.ownership import check_company_ownership, is_owner, owner_keys, require_company_owner


def make_company(db, slug, created_by):
    company = Company(name=slug.title(), slug=slug, created_by=created_by)
    db.add(company)
    db.commit()
    return company


@pytest.mark.parametrize("created_by, identity, match_email, expected", [
    ("user-1", Identity(id="user-1", email="a@example.com"), True, True),
    ("a@example.com", Identity(id="user-1", email="a@example.com"), True, True),
    ("a@example.com", Identity(id="user-1", email="a@example.com"), False, False),
    ("user-1", Identity(id=None, email="a@example.com"), True, False),
    ("user-2", Identity(id="user-1", email="a@example.com"), True, False),
    (None, Identity(id="user-1", email="a@example.com"), True, False),
    (None, Identity(id=None, email=None), True, False),
])
def test_is_owner(created_by, identity, match_email, expected):
    company = Company(name="Acme", slug="acme", created_by=created_by)
    assert is_owner(company, identity, match_email) is expected


def test_owner_keys():
    identity = Identity(id="user-1", email="a@example.com")
    assert owner_keys(identity) == ["user-1", "a@example.com"]
    assert owner_keys(identity, match_email=False) == ["user-1"]


def test_check_company_ownership(db_session):
    make_company(db_session, "acme", "user-1")

    granted = check_company_ownership(db_session, "acme", Identity(id="user-1"))
    denied = check_company_ownership(db_session, "acme", Identity(id="user-2"))

    assert granted.has_access and granted.company.slug == "acme"
    assert not denied.has_access


def test_unknown_slug_is_not_found(db_session):
    with pytest.raises(CompanyNotFound):
        check_company_ownership(db_session, "missing", Identity(id="user-1"))


def test_require_company_owner(db_session):
    make_company(db_session, "acme", "user-1")

    assert require_company_owner(db_session, "acme", Identity(id="user-1")).slug == "acme"
    with pytest.raises(Forbidden, match="permission to edit"):
        require_company_owner(db_session, "acme", Identity(id="user-2", email="b@example.com"))
    with pytest.raises(Unauthorized):
        require_company_owner(db_session, "acme", None)


def test_ownerless_company_cannot_be_claimed(db_session):
    make_company(db_session, "demo", None)
    with pytest.raises(Forbidden):
        require_company_owner(db_session, "demo", Identity(id="user-1", email="a@example.com"))
