"""Tests for domain/summary.py and the wire shapes of the result models."""

from studio_actions.domain.action_parser import parse_action_data
from studio_actions.domain.models import ActionResult, ExecutedAction
from studio_actions.domain.summary import build_studio_links, build_summary


def executed(action_type, success=True, document_id=None, dry_run=False, **payload):
    action = parse_action_data({"type": action_type, "payload": payload})
    return ExecutedAction(
        action=action,
        result=ActionResult(success, "msg", document_id=document_id),
        dry_run=dry_run,
    )


class TestBuildSummary:
    def test_empty(self):
        summary = build_summary([])
        assert summary.to_dict() == {
            "totalActions": 0,
            "successfulActions": 0,
            "failedActions": 0,
            "createdDocuments": [],
            "updatedDocuments": [],
            "deletedDocuments": [],
        }

    def test_counts_and_ids(self):
        items = [
            executed("create", document_id="drafts.page-1", documentType="page"),
            executed("update", document_id="post-1"),
            executed("delete", document_id="post-2"),
            executed("delete", success=False, document_id="post-3"),
            executed("query"),
        ]
        summary = build_summary(items)
        assert summary.total_actions == 5
        assert summary.successful_actions == 4
        assert summary.failed_actions == 1
        assert summary.created_documents == ["drafts.page-1"]
        assert summary.updated_documents == ["post-1"]
        assert summary.deleted_documents == ["post-2"]

    def test_dry_run_adds_no_ids(self):
        summary = build_summary([executed("create", document_id="x", dry_run=True)])
        assert summary.successful_actions == 1
        assert summary.created_documents == []


class TestStudioLinks:
    def test_page_gets_presentation_url(self):
        items = [executed("create", document_id="drafts.page-abc", documentType="page")]
        links = build_studio_links(items, "https://studio.example.com/")
        assert len(links) == 1
        link = links[0].to_dict()
        assert link["structureUrl"] == "https://studio.example.com/structure/page;drafts.page-abc"
        assert link["presentationUrl"] == "https://studio.example.com/presentation?preview=/page-abc"

    def test_update_defaults_to_document_type(self):
        items = [executed("update", document_id="post-1")]
        link = build_studio_links(items, "https://s")[0]
        assert link.document_type == "document"
        assert link.presentation_url is None
        assert "presentationUrl" not in link.to_dict()

    def test_no_links_for_deletes(self):
        assert build_studio_links([executed("delete", document_id="p")], "https://s") == []


class TestWireShapes:
    def test_action_result_omits_empty(self):
        assert ActionResult(False, "nope").to_dict() == {"success": False, "message": "nope"}

    def test_action_result_camel_case(self):
        out = ActionResult(True, "ok", document_id="d", pre_state={"_id": "d"}).to_dict()
        assert out["documentId"] == "d"
        assert out["preState"] == {"_id": "d"}

    def test_action_to_dict(self):
        item = executed("create", document_id="d", documentType="page", fields={"a": 1})
        out = item.to_dict()
        assert out["dryRun"] is False
        assert out["action"]["type"] == "create"
        assert out["action"]["payload"] == {"documentType": "page", "fields": {"a": 1}}
