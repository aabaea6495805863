# tests/test_documents.py
import pytest

from bto.db.enums import ActorRole, DocumentKind, DocumentStatus, FlatType
from bto.models.document import (
    Application,
    Enquiry,
    Registration,
    Withdrawal,
    document_kind_from_id,
    new_document_id,
)
from bto.repositories.document_repositories import DocumentRepository
from bto.schemas.error_type import ErrorType


def test_ids_are_type_prefixed():
    for kind, prefix in [
        (DocumentKind.APPLICATION, "APP-"),
        (DocumentKind.REGISTRATION, "REG-"),
        (DocumentKind.WITHDRAWAL, "WDR-"),
        (DocumentKind.ENQUIRY, "ENQ-"),
    ]:
        document_id = new_document_id(kind)
        assert document_id.startswith(prefix)
        assert len(document_id) == 12
        assert document_kind_from_id(document_id) == kind


def test_unknown_prefix_and_none_id():
    assert document_kind_from_id("XYZ-12345678") is None
    with pytest.raises(ValueError):
        document_kind_from_id(None)


def test_application_submit_flow(married_applicant, manager):
    application = Application.create(married_applicant, "Yishun-1")
    assert application.status == DocumentStatus.DRAFT
    assert application.submission_date is None

    assert application.submit(married_applicant).ok
    assert application.status == DocumentStatus.PENDING_APPROVAL
    assert application.submission_date is not None

    again = application.submit(married_applicant)
    assert again.error_type == ErrorType.STATE_ERROR


def test_only_submitter_submits_edits_deletes(married_applicant, single_applicant):
    application = Application.create(married_applicant, "Yishun-1")
    assert application.submit(single_applicant).error_type == ErrorType.AUTHORIZATION_ERROR
    assert application.edit(single_applicant, "Other").error_type == ErrorType.AUTHORIZATION_ERROR
    assert application.delete(single_applicant).error_type == ErrorType.AUTHORIZATION_ERROR
    assert application.status == DocumentStatus.DRAFT


def test_edit_only_in_draft_with_content(married_applicant):
    application = Application.create(married_applicant, "Yishun-1")
    assert application.edit(married_applicant, "  ").error_type == ErrorType.VALIDATION_ERROR
    assert application.edit(married_applicant, "Tengah-2").ok
    assert application.project_name == "Tengah-2"

    application.submit(married_applicant)
    assert application.edit(married_applicant, "Yishun-1").error_type == ErrorType.STATE_ERROR


def test_delete_marks_closed(married_applicant):
    application = Application.create(married_applicant, "Yishun-1")
    assert application.delete(married_applicant).ok
    assert application.status == DocumentStatus.CLOSED


def test_approve_and_reject_rules(married_applicant, manager, officer):
    application = Application.create(married_applicant, "Yishun-1")
    assert application.approve(manager).error_type == ErrorType.STATE_ERROR

    application.submit(married_applicant)
    assert application.approve(officer).error_type == ErrorType.AUTHORIZATION_ERROR
    assert application.reject(manager, "   ").error_type == ErrorType.VALIDATION_ERROR

    assert application.approve(manager).ok
    assert application.status == DocumentStatus.APPROVED
    assert application.last_modified_by == manager.nric

    # approving twice fails and changes nothing
    modified = application.last_modified_date
    assert application.approve(manager).error_type == ErrorType.STATE_ERROR
    assert application.last_modified_date == modified


def test_reject_twice_fails(married_applicant, manager):
    application = Application.create(married_applicant, "Yishun-1")
    application.submit(married_applicant)
    assert application.reject(manager, "incomplete").ok
    assert application.rejection_reason == "incomplete"
    assert application.reject(manager, "again").error_type == ErrorType.STATE_ERROR
    assert application.rejection_reason == "incomplete"


def test_booking_and_withdrawal_transitions(married_applicant, manager, officer):
    application = Application.create(married_applicant, "Yishun-1")
    assert application.mark_booked(officer, FlatType.TWO_ROOM).error_type == ErrorType.STATE_ERROR

    application.submit(married_applicant)
    application.approve(manager)
    assert application.mark_booked(officer, FlatType.TWO_ROOM).ok
    assert application.booked_flat_type == FlatType.TWO_ROOM
    assert application.status == DocumentStatus.BOOKED

    assert application.mark_withdrawn(manager).ok
    assert application.status == DocumentStatus.WITHDRAWN
    assert application.mark_withdrawn(manager).error_type == ErrorType.STATE_ERROR


def test_snapshot_restore(married_applicant, manager):
    application = Application.create(married_applicant, "Yishun-1")
    application.submit(married_applicant)
    snapshot = application.snapshot()
    application.approve(manager)
    application.restore(snapshot)
    assert application.status == DocumentStatus.PENDING_APPROVAL
    assert application.last_modified_by == married_applicant.nric


def test_withdrawal_requires_application(married_applicant):
    with pytest.raises(ValueError):
        Withdrawal.create(married_applicant, None)

    application = Application.create(married_applicant, "Yishun-1")
    withdrawal = Withdrawal.create(married_applicant, application)
    assert withdrawal.application_id == application.id
    assert withdrawal.project_name == "Yishun-1"
    assert withdrawal.edit(married_applicant, "anything").error_type == ErrorType.STATE_ERROR


def test_enquiry_lifecycle(married_applicant, officer, manager):
    enquiry = Enquiry.create(married_applicant, None, "When is the launch?")
    assert enquiry.reply(manager, "soon").error_type == ErrorType.STATE_ERROR

    assert enquiry.submit(married_applicant).ok
    assert enquiry.status == DocumentStatus.SUBMITTED
    assert enquiry.edit(married_applicant, "When exactly?").ok
    assert enquiry.reply(married_applicant, "self").error_type == ErrorType.AUTHORIZATION_ERROR
    assert enquiry.reply(officer, " ").error_type == ErrorType.VALIDATION_ERROR

    assert enquiry.reply(officer, "Next month").ok
    assert enquiry.status == DocumentStatus.REPLIED
    assert enquiry.replier_nric == officer.nric
    assert enquiry.edit(married_applicant, "late edit").error_type == ErrorType.STATE_ERROR
    assert enquiry.delete(married_applicant).error_type == ErrorType.STATE_ERROR


def test_submitted_enquiry_can_be_deleted(married_applicant):
    enquiry = Enquiry.create(married_applicant, "Yishun-1", "Parking?")
    enquiry.submit(married_applicant)
    assert enquiry.delete(married_applicant).ok
    assert enquiry.status == DocumentStatus.CLOSED


def test_repository_routes_by_prefix(db, married_applicant, officer, project):
    documents = DocumentRepository(db)
    application = Application.create(married_applicant, project.name)
    registration = Registration.create(officer, project.name)
    enquiry = Enquiry.create(married_applicant, None, "hello")
    for document in (application, registration, enquiry):
        documents.save(document)
    db.commit()

    assert isinstance(documents.find_by_id(application.id), Application)
    assert isinstance(documents.find_by_id(registration.id), Registration)
    assert isinstance(documents.find_by_id(enquiry.id), Enquiry)
    assert documents.find_by_id("XYZ-00000000") is None
    assert documents.count() == 3
    assert documents.applications.count() == 1
    assert documents.references_project(project.name)

    assert documents.delete_by_id(enquiry.id)
    assert not documents.delete_by_id(enquiry.id)
    assert documents.count() == 2


def test_officer_role_capabilities(officer, manager):
    assert officer.role == ActorRole.OFFICER
    assert officer.is_officer and not officer.is_manager
    assert manager.is_manager
