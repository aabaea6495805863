# tests/test_enquiry.py
from bto.db.enums import ActorRole, DocumentStatus
from bto.schemas.error_type import ErrorType
from bto.services.enquiry_service import EnquiryService


def test_create_edit_delete(db, married_applicant, project):
    service = EnquiryService(db)
    created = service.create_enquiry(married_applicant, project.name, "  Is there parking?  ")
    assert created.ok
    enquiry = created.entity
    assert enquiry.status == DocumentStatus.SUBMITTED
    assert enquiry.content == "Is there parking?"

    assert service.edit_enquiry(married_applicant, enquiry.id, "Is there sheltered parking?").ok
    assert enquiry.content == "Is there sheltered parking?"

    assert service.delete_enquiry(married_applicant, enquiry.id).ok
    assert service.view_my_enquiries(married_applicant) == []


def test_create_validation(db, married_applicant, manager):
    service = EnquiryService(db)
    assert service.create_enquiry(married_applicant, None, "   ").error_type == ErrorType.VALIDATION_ERROR
    assert service.create_enquiry(married_applicant, "Ghost", "hello").error_type == ErrorType.NOT_FOUND
    assert service.create_enquiry(manager, None, "hello").error_type == ErrorType.AUTHORIZATION_ERROR


def test_blank_project_name_is_general(db, married_applicant):
    created = EnquiryService(db).create_enquiry(married_applicant, "  ", "When is the next launch?")
    assert created.ok
    assert created.entity.project_name is None


def test_only_submitter_edits(db, married_applicant, single_applicant):
    service = EnquiryService(db)
    enquiry = service.create_enquiry(married_applicant, None, "hello").entity
    result = service.edit_enquiry(single_applicant, enquiry.id, "hijacked")
    assert result.error_type == ErrorType.AUTHORIZATION_ERROR
    assert enquiry.content == "hello"
    assert service.delete_enquiry(single_applicant, enquiry.id).error_type == ErrorType.AUTHORIZATION_ERROR


def test_assigned_officer_replies_to_project_enquiry(db, officer, married_applicant, assigned_project):
    service = EnquiryService(db)
    enquiry = service.create_enquiry(married_applicant, assigned_project.name, "Is there parking?").entity

    assert [e.id for e in service.list_handled_enquiries(officer)] == [enquiry.id]
    replied = service.reply_to_enquiry(officer, enquiry.id, "Yes, two levels.")
    assert replied.ok
    assert enquiry.status == DocumentStatus.REPLIED
    assert enquiry.reply_content == "Yes, two levels."
    assert enquiry.replier_nric == officer.nric

    assert service.reply_to_enquiry(officer, enquiry.id, "again").error_type == ErrorType.STATE_ERROR
    assert service.edit_enquiry(married_applicant, enquiry.id, "late").error_type == ErrorType.STATE_ERROR
    assert service.delete_enquiry(married_applicant, enquiry.id).error_type == ErrorType.STATE_ERROR


def test_unassigned_officer_cannot_reply(db, make_user, married_applicant, assigned_project):
    stranger = make_user("T8888888H", ActorRole.OFFICER)
    service = EnquiryService(db)
    enquiry = service.create_enquiry(married_applicant, assigned_project.name, "Is there parking?").entity
    result = service.reply_to_enquiry(stranger, enquiry.id, "No idea")
    assert result.error_type == ErrorType.AUTHORIZATION_ERROR
    assert enquiry.status == DocumentStatus.SUBMITTED


def test_project_manager_replies_other_manager_cannot(db, manager, other_manager, married_applicant, project):
    service = EnquiryService(db)
    enquiry = service.create_enquiry(married_applicant, project.name, "Launch date?").entity

    assert service.reply_to_enquiry(other_manager, enquiry.id, "Soon").error_type == ErrorType.AUTHORIZATION_ERROR
    assert [e.id for e in service.list_managed_enquiries(manager)] == [enquiry.id]
    assert service.list_managed_enquiries(other_manager) == []
    assert service.reply_to_enquiry(manager, enquiry.id, "March").ok


def test_general_enquiry_needs_manager(db, manager, officer, married_applicant):
    service = EnquiryService(db)
    enquiry = service.create_enquiry(married_applicant, None, "How do I apply?").entity

    assert service.reply_to_enquiry(officer, enquiry.id, "Online").error_type == ErrorType.AUTHORIZATION_ERROR
    assert service.reply_to_enquiry(manager, enquiry.id, "  ").error_type == ErrorType.VALIDATION_ERROR
    assert service.reply_to_enquiry(manager, enquiry.id, "Online").ok


def test_list_all_is_manager_only(db, manager, married_applicant, single_applicant, project):
    service = EnquiryService(db)
    service.create_enquiry(married_applicant, None, "first")
    service.create_enquiry(single_applicant, project.name, "second")

    assert [e.content for e in service.list_all_enquiries(manager)] == ["first", "second"]
    assert service.list_all_enquiries(married_applicant) == []


def test_missing_enquiry(db, manager, married_applicant):
    service = EnquiryService(db)
    assert service.edit_enquiry(married_applicant, "ENQ-00000000", "x").error_type == ErrorType.NOT_FOUND
    assert service.delete_enquiry(married_applicant, "ENQ-00000000").error_type == ErrorType.NOT_FOUND
    assert service.reply_to_enquiry(manager, "ENQ-00000000", "x").error_type == ErrorType.NOT_FOUND
