from __future__ import annotations

import pytest

from conftest import ORG_ID, OTHER_ORG_ID
from services.errors import DuplicateContactError, StorageError


def _create(repo, org=ORG_ID, **fields):
    base = {"first_name": "Ada", "last_name": "Lovelace", "custom_fields": {}}
    base.update(fields)
    return repo.create_contact(org, base)


def test_find_by_integration_id_is_exact_and_org_scoped(contacts):
    cid = _create(contacts, linkedin_urn_id="urn:li:AbC", custom_fields={"linkedinUrnId": "urn:li:AbC"})
    assert contacts.find_by_integration_id(ORG_ID, "urn:li:AbC").id == cid
    assert contacts.find_by_integration_id(ORG_ID, "urn:li:abc") is None
    assert contacts.find_by_integration_id(OTHER_ORG_ID, "urn:li:AbC") is None


def test_find_by_integration_id_reads_custom_fields_json(contacts):
    # Contacts written by other tools may only carry the URN in customFields
    cid = _create(contacts, custom_fields={"linkedinUrnId": "legacy-urn"})
    assert contacts.find_by_integration_id(ORG_ID, "legacy-urn").id == cid


def test_find_by_normalized_url_matches_any_variation(contacts):
    cid = _create(contacts, linkedin_url="http://linkedin.com/in/ada/")
    found = contacts.find_by_normalized_url(ORG_ID, ["https://www.linkedin.com/in/ada", "http://linkedin.com/in/ada/"])
    assert found.id == cid
    assert contacts.find_by_normalized_url(ORG_ID, []) is None


def test_find_by_email_is_case_insensitive(contacts):
    cid = _create(contacts, email="Ada@X.com")
    assert contacts.find_by_email(ORG_ID, "ada@x.COM").id == cid
    assert contacts.find_by_email(OTHER_ORG_ID, "ada@x.com") is None


def test_duplicate_urn_in_same_org_is_rejected(contacts):
    _create(contacts, linkedin_urn_id="u1")
    with pytest.raises(DuplicateContactError):
        _create(contacts, linkedin_urn_id="u1")
    # Same URN in another org is a different contact
    _create(contacts, org=OTHER_ORG_ID, linkedin_urn_id="u1")
    # Contacts without a URN never collide
    _create(contacts)
    _create(contacts)
    assert contacts.count(ORG_ID) == 3


def test_update_refuses_user_managed_fields(contacts):
    cid = _create(contacts, lead_status="QUALIFIED", owner_id="owner-1")
    with pytest.raises(ValueError):
        contacts.update_contact(cid, {"lead_status": "NEW"})
    with pytest.raises(ValueError):
        contacts.update_contact(cid, {"owner_id": None, "first_name": "X"})
    contact = contacts.get_contact(cid)
    assert (contact.lead_status, contact.owner_id, contact.first_name) == ("QUALIFIED", "owner-1", "Ada")


def test_update_round_trips_custom_fields(contacts):
    cid = _create(contacts)
    contacts.update_contact(cid, {"custom_fields": {"linkedinSkills": ["Math"], "crmNote": "keep"}, "job_title": "Analyst"})
    contact = contacts.get_contact(cid)
    assert contact.custom_fields == {"linkedinSkills": ["Math"], "crmNote": "keep"}
    assert contact.job_title == "Analyst"


def test_update_missing_contact_raises_storage_error(contacts):
    with pytest.raises(StorageError):
        contacts.update_contact("does-not-exist", {"first_name": "X"})
