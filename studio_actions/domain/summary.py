"""Batch summary and studio links for executed actions."""

from typing import Dict, List, Optional

from studio_actions.domain.models import BatchSummary, ExecutedAction, StudioLink

_TRACKED = {
    "create": "created_documents",
    "update": "updated_documents",
    "delete": "deleted_documents",
}


def build_summary(executed: List[ExecutedAction]) -> BatchSummary:
    """Count outcomes and collect affected document ids.

    Failed results and dry-run entries never add ids.
    """
    summary = BatchSummary(total_actions=len(executed))
    for item in executed:
        if item.result.success:
            summary.successful_actions += 1
        else:
            summary.failed_actions += 1

        bucket = _TRACKED.get(item.action.type)
        if bucket and item.result.success and item.result.document_id and not item.dry_run:
            getattr(summary, bucket).append(item.result.document_id)
    return summary


def _document_types(executed: List[ExecutedAction]) -> Dict[str, str]:
    types: Dict[str, str] = {}
    for item in executed:
        document_type = getattr(item.action.payload, "document_type", None)
        if item.result.document_id and document_type:
            types[item.result.document_id] = document_type
    return types


def build_studio_links(
    executed: List[ExecutedAction],
    studio_url: str,
    summary: Optional[BatchSummary] = None,
) -> List[StudioLink]:
    """Studio URLs for created and updated documents."""
    summary = summary or build_summary(executed)
    document_types = _document_types(executed)
    base = studio_url.rstrip("/")

    links: List[StudioLink] = []
    for document_id in summary.created_documents + summary.updated_documents:
        document_type = document_types.get(document_id, "document")
        published_id = document_id[len("drafts."):] if document_id.startswith("drafts.") else document_id
        links.append(
            StudioLink(
                document_id=document_id,
                document_type=document_type,
                structure_url=f"{base}/structure/{document_type};{document_id}",
                presentation_url=(
                    f"{base}/presentation?preview=/{published_id}" if document_type == "page" else None
                ),
            )
        )
    return links
