"""
VaultMerkle Tree API Routes.

Compute Merkle trees for posted exports and diff two exports.
Requires Python 3.11+.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from merkle.differ import diff_trees
from normalizer.fields import CanonicalField
from pipeline.panel import CsvPanel
from utils.config import get_settings
from utils.logger import get_logger

router = APIRouter()
logger = get_logger("api.trees")


class TreeRequest(BaseModel):
    """An export to hash."""

    csv_text: str = Field(..., description="Raw CSV text of the export")
    fields: list[str] | None = Field(
        default=None,
        description="Fields to hash (title, username, password, last modified)",
    )


class DiffRequest(BaseModel):
    """Two exports to compare."""

    reference: TreeRequest
    candidate: TreeRequest


class BindingResponse(BaseModel):
    """A configured field and the header it matched."""

    label: str
    canonical: str
    header_name: str | None = None


class NodeResponse(BaseModel):
    """A single tree node."""

    hash: str
    title: str | None = None
    is_duplicate: bool = False


class TreeResponse(BaseModel):
    """Response model for a computed tree."""

    status: str
    message: str
    headers: list[str]
    bindings: list[BindingResponse]
    selected_fields: list[str]
    root: str | None = None
    root_prefix: str | None = None
    leaf_count: int = 0
    levels: list[list[NodeResponse]] = Field(default_factory=list)


class DiffResponse(BaseModel):
    """Response model for a comparison."""

    reference_root: str | None = None
    candidate_root: str | None = None
    differences: list[str]
    total: int


def _parse_fields(fields: list[str] | None) -> list[CanonicalField] | None:
    if fields is None:
        return None
    try:
        return [CanonicalField.parse(f) for f in fields]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _check_size(csv_text: str) -> None:
    limit = int(get_settings().csv.max_file_size_mb * 1024 * 1024)
    size = len(csv_text.encode("utf-8", errors="replace"))
    if size > limit:
        raise HTTPException(
            status_code=413,
            detail=f"CSV export is {size} bytes, limit is {limit} bytes",
        )


async def _load_panel(request: TreeRequest, name: str) -> tuple[CsvPanel, str, str]:
    _check_size(request.csv_text)
    panel = CsvPanel(name=name, default_fields=_parse_fields(request.fields))
    result = await panel.load_text(request.csv_text, source=name)
    status = result.status.value
    if result.ok and panel.tree is None:
        status = "empty"
    return panel, status, result.message


def _tree_response(panel: CsvPanel, status: str, message: str) -> TreeResponse:
    prefix_length = get_settings().display.prefix_length
    tree = panel.tree
    return TreeResponse(
        status=status,
        message=message,
        headers=panel.headers,
        bindings=[
            BindingResponse(
                label=b.label,
                canonical=b.canonical.value,
                header_name=b.header_name,
            )
            for b in panel.bindings
        ],
        selected_fields=[f.value for f in panel.selected_fields],
        root=tree.root if tree else None,
        root_prefix=tree.root_prefix(prefix_length) if tree else None,
        leaf_count=tree.leaf_count if tree else 0,
        levels=[
            [
                NodeResponse(hash=n.hash, title=n.title, is_duplicate=n.is_duplicate)
                for n in level
            ]
            for level in (tree.levels if tree else ())
        ],
    )


@router.post("", response_model=TreeResponse)
async def build_tree(request: TreeRequest) -> TreeResponse:
    """
    Hash an export and return its Merkle tree.

    Structural problems (no headers, no rows) are reported in ``status``.
    """
    panel, status, message = await _load_panel(request, "export")
    logger.info("tree_requested", status=status, rows=len(panel.rows))
    return _tree_response(panel, status, message)


@router.post("/diff", response_model=DiffResponse)
async def diff_exports(request: DiffRequest) -> DiffResponse:
    """
    Compare two exports.

    Returns the candidate rows (by identity hash) that are absent from
    the reference. Reference-only rows are not reported.
    """
    reference, _, _ = await _load_panel(request.reference, "reference")
    candidate, _, _ = await _load_panel(request.candidate, "candidate")

    differences = sorted(diff_trees(reference.tree, candidate.tree))
    logger.info(
        "diff_requested",
        reference_leaves=len(reference.leaves),
        candidate_leaves=len(candidate.leaves),
        differences=len(differences),
    )
    return DiffResponse(
        reference_root=reference.tree.root if reference.tree else None,
        candidate_root=candidate.tree.root if candidate.tree else None,
        differences=differences,
        total=len(differences),
    )
