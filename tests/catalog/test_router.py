"""HTTP tests for the catalog relation endpoints."""

from uuid import uuid4

from fastapi import status

from tests.fakes import FakeCatalogRepository, FakeRelationRepository


class TestCourseModulesEndpoints:
    """Tests for /v1/courses/{course_id}/modules."""

    def test_link_module_created(
        self, client, catalog: FakeCatalogRepository, teacher_headers
    ):
        """First link answers 201 with the stored order."""
        course = catalog.add_course()
        module = catalog.add_module()

        response = client.post(
            f"/v1/courses/{course.id}/modules",
            json={"module_id": str(module.id), "order": 2},
            headers=teacher_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["child_id"] == str(module.id)
        assert data["order"] == 2
        assert data["kind"] == "course_module"

    def test_link_module_twice_returns_existing(
        self,
        client,
        catalog: FakeCatalogRepository,
        relations: FakeRelationRepository,
        teacher_headers,
    ):
        """Repeating a link answers 200 and keeps a single link."""
        course = catalog.add_course()
        module = catalog.add_module()
        url = f"/v1/courses/{course.id}/modules"

        client.post(url, json={"module_id": str(module.id), "order": 0}, headers=teacher_headers)
        response = client.post(
            url, json={"module_id": str(module.id), "order": 5}, headers=teacher_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["order"] == 0
        assert len(relations.links) == 1

    def test_link_unknown_course(self, client, catalog: FakeCatalogRepository, teacher_headers):
        """Unknown parent answers 404."""
        module = catalog.add_module()

        response = client.post(
            f"/v1/courses/{uuid4()}/modules",
            json={"module_id": str(module.id)},
            headers=teacher_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["details"] == "Course not found"

    def test_link_negative_order_rejected(self, client, teacher_headers):
        """Negative order fails request validation with 400."""
        response = client.post(
            f"/v1/courses/{uuid4()}/modules",
            json={"module_id": str(uuid4()), "order": -1},
            headers=teacher_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "validation_error"

    def test_link_requires_teacher(self, client, catalog: FakeCatalogRepository, student_headers):
        """Students cannot change course structure."""
        course = catalog.add_course()
        module = catalog.add_module()

        response = client.post(
            f"/v1/courses/{course.id}/modules",
            json={"module_id": str(module.id)},
            headers=student_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_requires_authentication(self, client):
        """Listing without a token answers 401."""
        response = client.get(f"/v1/courses/{uuid4()}/modules")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_in_order(
        self, client, catalog: FakeCatalogRepository, teacher_headers, student_headers
    ):
        """Modules are listed ascending by order."""
        course = catalog.add_course()
        second = catalog.add_module()
        first = catalog.add_module()
        url = f"/v1/courses/{course.id}/modules"
        client.post(url, json={"module_id": str(second.id), "order": 1}, headers=teacher_headers)
        client.post(url, json={"module_id": str(first.id), "order": 0}, headers=teacher_headers)

        response = client.get(url, headers=student_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert [item["child_id"] for item in data["items"]] == [str(first.id), str(second.id)]

    def test_unlink_is_idempotent(self, client, teacher_headers):
        """Deleting a pair that was never linked still answers 204."""
        response = client.delete(
            f"/v1/courses/{uuid4()}/modules/{uuid4()}", headers=teacher_headers
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_reorder_partial_set_rejected(
        self, client, catalog: FakeCatalogRepository, teacher_headers
    ):
        """Reorder needs every child exactly once."""
        course = catalog.add_course()
        modules = [catalog.add_module() for _ in range(2)]
        url = f"/v1/courses/{course.id}/modules"
        for position, module in enumerate(modules):
            client.post(
                url,
                json={"module_id": str(module.id), "order": position},
                headers=teacher_headers,
            )

        response = client.put(
            f"{url}/order",
            json={"module_ids": [str(modules[1].id)]},
            headers=teacher_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestModuleLessonsEndpoints:
    """Tests for /v1/modules/{module_id}/lessons."""

    def test_reorder_lessons(self, client, catalog: FakeCatalogRepository, teacher_headers):
        """Reorder returns the children in their new order."""
        module = catalog.add_module()
        lessons = [catalog.add_lesson() for _ in range(3)]
        url = f"/v1/modules/{module.id}/lessons"
        for lesson in lessons:
            client.post(url, json={"lesson_id": str(lesson.id)}, headers=teacher_headers)
        new_order = [str(lessons[1].id), str(lessons[2].id), str(lessons[0].id)]

        response = client.put(
            f"{url}/order", json={"lesson_ids": new_order}, headers=teacher_headers
        )

        assert response.status_code == status.HTTP_200_OK
        items = response.json()["items"]
        assert [item["child_id"] for item in items] == new_order
        assert [item["order"] for item in items] == [0, 1, 2]

    def test_storage_failure_is_masked(
        self,
        client,
        catalog: FakeCatalogRepository,
        relations: FakeRelationRepository,
        teacher_headers,
    ):
        """Storage errors answer 500 without leaking details."""
        module = catalog.add_module()
        lesson = catalog.add_lesson()
        relations.fail("insert_link")

        response = client.post(
            f"/v1/modules/{module.id}/lessons",
            json={"lesson_id": str(lesson.id)},
            headers=teacher_headers,
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["details"] == "Internal server error"
