"""Tests for the relation backfill.

Covers:
- Links derived from legacy parent references
- Re-running reaches a fixed point
- Per-item failures are counted, not raised
- Admin endpoint
"""

from uuid import uuid4

import pytest
from fastapi import status

from learntrack.backfill.service import RelationBackfill
from learntrack.catalog.models import LinkKind
from learntrack.catalog.relations import RelationStore
from learntrack.core.errors import UpstreamError
from tests.fakes import FakeCatalogRepository, FakeRelationRepository


@pytest.fixture
def legacy_catalog(catalog: FakeCatalogRepository):
    """One course with two legacy modules, each with two legacy lessons."""
    course = catalog.add_course()
    modules = [catalog.add_module(legacy_course_id=course.id) for _ in range(2)]
    lessons = [
        catalog.add_lesson(legacy_module_id=module.id)
        for module in modules
        for _ in range(2)
    ]
    return course, modules, lessons


class TestBackfill:
    """Tests for RelationBackfill.backfill."""

    @pytest.mark.asyncio
    async def test_creates_links_from_legacy_references(
        self,
        legacy_catalog,
        relations: FakeRelationRepository,
        course_modules: RelationStore,
        module_lessons: RelationStore,
        relation_backfill: RelationBackfill,
    ):
        course, modules, lessons = legacy_catalog

        report = await relation_backfill.backfill()

        assert report.created == 6
        assert report.skipped == 0
        assert report.failed == 0
        children = await course_modules.list_children(course.id)
        assert {c.child_id for c in children} == {m.id for m in modules}
        assert all(c.position == 0 for c in children)
        lessons_of_first = await module_lessons.list_children(modules[0].id)
        assert {c.child_id for c in lessons_of_first} == {lesson.id for lesson in lessons[:2]}

    @pytest.mark.asyncio
    async def test_second_run_is_fixed_point(
        self,
        legacy_catalog,
        relations: FakeRelationRepository,
        relation_backfill: RelationBackfill,
    ):
        """Re-running creates nothing and skips everything created before."""
        first = await relation_backfill.backfill()
        links_after_first = dict(relations.links)

        second = await relation_backfill.backfill()

        assert second.created == 0
        assert second.skipped == first.created
        assert second.failed == 0
        assert relations.links == links_after_first

    @pytest.mark.asyncio
    async def test_existing_link_keeps_order(
        self,
        legacy_catalog,
        course_modules: RelationStore,
        relation_backfill: RelationBackfill,
    ):
        """Links made before the backfill are skipped, not rewritten."""
        course, modules, _ = legacy_catalog
        await course_modules.link(course.id, modules[0].id, 4)

        report = await relation_backfill.backfill()

        assert report.skipped == 1
        children = await course_modules.list_children(course.id)
        assert {c.child_id: c.position for c in children}[modules[0].id] == 4

    @pytest.mark.asyncio
    async def test_dangling_parent_counted_as_failure(
        self, catalog: FakeCatalogRepository, relation_backfill: RelationBackfill
    ):
        """A legacy reference to a missing course fails that item only."""
        course = catalog.add_course()
        catalog.add_module(legacy_course_id=course.id)
        orphan = catalog.add_module(legacy_course_id=uuid4())

        report = await relation_backfill.backfill()

        assert report.created == 1
        assert report.failed == 1
        assert report.failures[0].child_id == orphan.id
        assert report.failures[0].kind is LinkKind.COURSE_MODULE

    @pytest.mark.asyncio
    async def test_storage_failure_on_one_item(
        self,
        legacy_catalog,
        relations: FakeRelationRepository,
        relation_backfill: RelationBackfill,
    ):
        """created + skipped + failed covers every candidate."""
        _, _, lessons = legacy_catalog
        relations.fail_for("insert_link", lessons[3].id)

        report = await relation_backfill.backfill()

        assert report.created == 5
        assert report.failed == 1
        assert report.created + report.skipped + report.failed == 6

        relations.heal("insert_link")
        retry = await relation_backfill.backfill()
        assert retry.created == 1
        assert retry.skipped == 5

    @pytest.mark.asyncio
    async def test_unreadable_catalog_raises(
        self, catalog: FakeCatalogRepository, relation_backfill: RelationBackfill
    ):
        catalog.fail("list_modules")

        with pytest.raises(UpstreamError):
            await relation_backfill.backfill()

    @pytest.mark.asyncio
    async def test_nothing_to_migrate(self, catalog, relation_backfill: RelationBackfill):
        catalog.add_module()
        catalog.add_lesson()

        report = await relation_backfill.backfill()

        assert (report.created, report.skipped, report.failed) == (0, 0, 0)


class TestBackfillEndpoint:
    """Tests for POST /v1/admin/backfill/relations."""

    def test_admin_runs_backfill(self, client, legacy_catalog, admin_headers):
        response = client.post("/v1/admin/backfill/relations", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "created": 6,
            "skipped": 0,
            "failed": 0,
            "failures": [],
        }

    def test_teacher_forbidden(self, client, teacher_headers):
        response = client.post("/v1/admin/backfill/relations", headers=teacher_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "forbidden"

    def test_unavailable_without_backfill(self, client, app, admin_headers):
        del app.state.relation_backfill

        response = client.post("/v1/admin/backfill/relations", headers=admin_headers)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["error"] == "service_unavailable"
