"""
Tests for the project catalog.

Covers loading with fallback, persisted additions, id generation,
filtering and featured-first rendering.
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from portfolio.components.projects import (
    SEED_PROJECT,
    STORAGE_KEY,
    ProjectCatalog,
    slugify,
)
from portfolio.events import EventBus, ItemsDisplayed
from portfolio.exceptions import ValidationError
from portfolio.page import Page
from portfolio.storage import MemoryStore
from portfolio.testing import (
    FailingStore,
    create_mock_project,
    create_project_record,
    write_projects_file,
)

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_catalog(page, bus, store, source) -> ProjectCatalog:
    return ProjectCatalog(bus, page, store, source=source, now=lambda: FIXED_NOW)


def loaded_catalog(page, bus, store, source) -> ProjectCatalog:
    catalog = make_catalog(page, bus, store, source)
    asyncio.run(catalog.init())
    return catalog


def rendered_ids(page: Page) -> list[str]:
    grid = page.get("projects-grid")
    return [card.attrs["data-project-id"] for card in grid.children if card.has_class("project-card")]


class TestLoading:
    def test_load_bundled_document(self, page, bus, memory_store, projects_file) -> None:
        catalog = make_catalog(page, bus, memory_store, projects_file)

        projects = asyncio.run(catalog.load())

        assert [project.id for project in projects] == ["a", "b", "c"]
        assert catalog.settings.show_featured_first is True
        assert catalog.loaded
        assert catalog.view == catalog.projects

    def test_dates_are_timezone_aware(self, page, bus, memory_store, projects_file) -> None:
        catalog = make_catalog(page, bus, memory_store, projects_file)
        asyncio.run(catalog.load())

        assert catalog.get_project("b").created_at == datetime(2024, 6, 1, tzinfo=timezone.utc)

    def test_missing_file_falls_back_to_seed(self, page, bus, memory_store, tmp_path) -> None:
        catalog = make_catalog(page, bus, memory_store, tmp_path / "missing.json")

        projects = asyncio.run(catalog.load())

        assert len(projects) == 1
        assert projects[0].id == SEED_PROJECT["id"]
        assert projects[0].name == SEED_PROJECT["name"]
        assert projects[0].featured is True
        assert catalog.loaded

    def test_malformed_json_falls_back_to_seed(self, page, bus, memory_store, tmp_path) -> None:
        source = tmp_path / "projects.json"
        source.write_text("{not json", encoding="utf-8")
        catalog = make_catalog(page, bus, memory_store, source)

        projects = asyncio.run(catalog.load())

        assert [project.id for project in projects] == [SEED_PROJECT["id"]]

    def test_malformed_record_falls_back_to_seed(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [create_project_record("ok"), {"description": "no name"}],
        )
        catalog = make_catalog(page, bus, memory_store, source)

        projects = asyncio.run(catalog.load())

        assert [project.id for project in projects] == [SEED_PROJECT["id"]]

    def test_missing_ids_are_derived_from_names(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [
                create_project_record("My Project", id=None),
                create_project_record("My Project", id=None),
            ],
        )
        catalog = make_catalog(page, bus, memory_store, source)

        projects = asyncio.run(catalog.load())

        assert [project.id for project in projects] == ["my-project", "my-project-1"]

    def test_duplicate_ids_are_made_unique(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [
                {"name": "A"},
                {"id": "a", "name": "Other"},
                {"id": "x", "name": "first x"},
                {"id": "x", "name": "second x"},
            ],
        )
        catalog = loaded_catalog(page, bus, memory_store, source)

        assert [project.id for project in catalog.projects] == ["a-1", "a", "x", "x-1"]
        assert catalog.get_project("a").name == "Other"
        assert catalog.get_project("x").name == "first x"
        assert catalog.get_project("x-1").name == "second x"
        assert sorted(rendered_ids(page)) == ["a", "a-1", "x", "x-1"]

    def test_non_boolean_featured_and_non_list_technologies(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [
                {"id": "s", "name": "s", "featured": "false", "technologies": "Go"},
                {"id": "t", "name": "t", "featured": True, "technologies": ["Go", "gRPC"]},
            ],
        )
        catalog = make_catalog(page, bus, memory_store, source)

        loose, strict = asyncio.run(catalog.load())

        assert loose.featured is False
        assert loose.technologies == ()
        assert strict.featured is True
        assert strict.technologies == ("Go", "gRPC")

    def test_record_defaults(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [{"id": "bare", "name": "bare"}],
        )
        catalog = make_catalog(page, bus, memory_store, source)

        project = asyncio.run(catalog.load())[0]

        assert project.language == "Other"
        assert project.icon == "fas fa-code"
        assert project.color == "#333"
        assert project.status == "active"
        assert project.technologies == ()
        assert project.demo is None


class TestOrdering:
    def test_featured_first_then_newest(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        assert rendered_ids(page) == ["b", "c", "a"]
        assert [project.id for project in bus.history(ItemsDisplayed)[-1].view] == ["b", "c", "a"]

    def test_catalog_order_without_featured_first(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [
                create_project_record("a", created_at="2024-01-01"),
                create_project_record("b", created_at="2024-06-01", featured=True),
            ],
            show_featured_first=False,
        )
        loaded_catalog(page, bus, memory_store, source)

        assert rendered_ids(page) == ["a", "b"]

    def test_cards_are_staggered(self, page, bus, memory_store, projects_file) -> None:
        loaded_catalog(page, bus, memory_store, projects_file)

        cards = page.query(class_name="project-card")
        assert [card.style["animation-delay"] for card in cards] == ["0.0s", "0.1s", "0.2s"]
        assert all(card.has_class("fade-in") for card in cards)

    def test_language_variant_class(self, page, bus, memory_store, projects_file) -> None:
        loaded_catalog(page, bus, memory_store, projects_file)

        go_card = next(card for card in page.query(class_name="project-card") if card.attrs["data-project-id"] == "c")
        assert go_card.has_class("go-lang")


class TestRendering:
    def test_markup_is_escaped(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [create_project_record("<script>alert(1)</script>", id="xss", description='"quoted" & more')],
        )
        loaded_catalog(page, bus, memory_store, source)

        html = page.get("projects-grid").to_html()
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&quot;quoted&quot; &amp; more" in html

    def test_empty_view_shows_placeholder(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        assert catalog.search("no such project") == []
        assert page.query(class_name="projects-empty")
        assert not page.query(class_name="project-card")

    def test_missing_container(self, bus, memory_store, projects_file) -> None:
        catalog = make_catalog(Page(), bus, memory_store, projects_file)
        asyncio.run(catalog.load())

        assert catalog.render() == []
        assert bus.history(ItemsDisplayed) == []

    def test_demo_link_only_when_present(self, page, bus, memory_store, tmp_path) -> None:
        source = write_projects_file(
            tmp_path / "projects.json",
            [create_project_record("with-demo", demo="https://example.com/demo")],
        )
        loaded_catalog(page, bus, memory_store, source)

        html = page.get("projects-grid").to_html()
        assert "https://example.com/demo" in html
        assert html.count('class="project-link ') == 2


class TestFiltering:
    def test_filter_by_technology(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        assert [project.id for project in catalog.filter_by_technology("grpc")] == ["c"]
        assert rendered_ids(page) == ["c"]
        assert len(catalog.filter_by_technology(None)) == 3

    def test_filter_by_language_is_exact(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        assert [project.id for project in catalog.filter_by_language("go")] == ["c"]
        assert catalog.filter_by_language("Pyth") == []
        assert len(catalog.filter_by_language("")) == 3

    def test_search_matches_name_description_and_tags(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        assert [project.id for project in catalog.search("B")] == ["b"]
        assert [project.id for project in catalog.search("description of c")] == ["c"]
        assert [project.id for project in catalog.search("GRPC")] == ["c"]

    def test_empty_search_restores_full_catalog(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)
        catalog.search("c")

        assert catalog.search("") == catalog.projects
        assert catalog.search(None) == catalog.projects
        assert catalog.search("") == catalog.search("")

    @given(query=st.text(max_size=12))
    @settings(max_examples=100)
    def test_property_search_idempotent(self, query: str) -> None:
        """
        Property: Filter idempotence

        For any query q, search(q) twice yields the same view, and every
        result belongs to the catalog.
        """
        catalog = ProjectCatalog(EventBus(), Page.skeleton(), MemoryStore())
        catalog.projects = [
            create_mock_project(id="alpha", name="Alpha", technologies=("Python", "httpx")),
            create_mock_project(id="beta", name="Beta", technologies=("Go",), language="Go"),
            create_mock_project(id="gamma", name="Gamma", description="Rust parser", technologies=()),
        ]
        catalog.view = list(catalog.projects)

        first = catalog.search(query)
        second = catalog.search(query)

        assert first == second
        assert all(project in catalog.projects for project in first)


class TestAddProject:
    def test_requires_name_and_github(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)
        before = list(catalog.projects)

        with pytest.raises(ValidationError) as exc_info:
            catalog.add_project({})

        assert exc_info.value.fields == ["name", "github"]
        assert exc_info.value.code == "VALIDATION_ERROR"
        assert catalog.projects == before
        assert memory_store.get(STORAGE_KEY) is None

    def test_missing_github_only(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        with pytest.raises(ValidationError) as exc_info:
            catalog.add_project({"name": "x"})

        assert exc_info.value.fields == ["github"]

    def test_added_project_goes_first_and_is_persisted(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        project = catalog.add_project(
            {"name": "New Tool", "github": "https://github.com/mock-user/new-tool", "language": "Python"}
        )

        assert project.id == "new-tool"
        assert project.created_at == FIXED_NOW
        assert project.icon == "fab fa-python"
        assert catalog.projects[0] is project
        assert "new-tool" in rendered_ids(page)

        saved = json.loads(memory_store.get(STORAGE_KEY))
        assert saved["projects"][0]["id"] == "new-tool"
        assert saved["settings"]["showFeaturedFirst"] is True
        assert isinstance(saved["timestamp"], int)

    def test_ids_are_unique(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        first = catalog.add_project({"name": "My Project", "github": "https://github.com/u/p"})
        second = catalog.add_project({"name": "My Project", "github": "https://github.com/u/p"})
        explicit = catalog.add_project({"id": "a", "name": "A again", "github": "https://github.com/u/a"})

        assert first.id == "my-project"
        assert second.id == "my-project-1"
        assert explicit.id == "a-1"

    def test_generate_id(self, page, bus, memory_store) -> None:
        catalog = make_catalog(page, bus, memory_store, "unused.json")
        catalog.projects = [create_mock_project(id="my-project", name="My Project")]

        assert catalog.generate_id("My Project!") == "my-project-1"
        assert catalog.generate_id("!!!") == "project"
        assert catalog.generate_id("Other  Thing") == "other-thing"

        catalog.projects = []
        assert catalog.generate_id("My Project!") == "my-project"

    def test_failing_store_does_not_block_add(self, page, bus, projects_file) -> None:
        store = FailingStore(fail_get=False)
        catalog = loaded_catalog(page, bus, store, projects_file)

        project = catalog.add_project({"name": "kept", "github": "https://github.com/u/kept"})

        assert catalog.projects[0] is project
        assert catalog.save_to_storage() is False

    def test_non_boolean_featured_and_non_list_technologies(self, page, bus, memory_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, memory_store, projects_file)

        project = catalog.add_project(
            {
                "name": "loose",
                "github": "https://github.com/u/loose",
                "featured": "false",
                "technologies": "Python",
            }
        )

        assert project.featured is False
        assert project.technologies == ()
        saved = json.loads(memory_store.get(STORAGE_KEY))
        assert saved["projects"][0]["featured"] is False
        assert saved["projects"][0]["technologies"] == []


class TestPersistence:
    def test_restore_merges_saved_entries_first(self, page, bus, memory_store, projects_file) -> None:
        first = loaded_catalog(page, bus, memory_store, projects_file)
        first.add_project({"name": "persisted", "github": "https://github.com/u/persisted"})

        second = loaded_catalog(Page.skeleton(), EventBus(), memory_store, projects_file)

        assert [project.id for project in second.projects] == ["persisted", "a", "b", "c"]

    def test_unreadable_store_is_ignored(self, page, bus, failing_store, projects_file) -> None:
        catalog = loaded_catalog(page, bus, failing_store, projects_file)

        assert catalog.restore_from_storage() is False
        assert [project.id for project in catalog.projects] == ["a", "b", "c"]

    def test_corrupt_saved_state_is_ignored(self, page, bus, projects_file) -> None:
        store = MemoryStore({STORAGE_KEY: b"{broken"})
        catalog = loaded_catalog(page, bus, store, projects_file)

        assert [project.id for project in catalog.projects] == ["a", "b", "c"]

    def test_restored_duplicate_ids_are_made_unique(self, page, bus, projects_file) -> None:
        saved = {"projects": [{"id": "a", "name": "one"}, {"id": "a", "name": "two"}], "settings": {}}
        store = MemoryStore({STORAGE_KEY: json.dumps(saved).encode("utf-8")})
        catalog = loaded_catalog(page, bus, store, projects_file)

        assert [project.id for project in catalog.projects] == ["a", "a-1", "b", "c"]
        assert catalog.get_project("a").name == "one"


@given(name=st.text(max_size=30))
@settings(max_examples=100)
def test_property_slug_shape(name: str) -> None:
    """For any name the slug holds only lower-case alphanumerics and inner dashes."""
    slug = slugify(name)

    assert not slug.startswith("-")
    assert not slug.endswith("-")
    assert "--" not in slug
    assert all(ch.isascii() and (ch.isalnum() or ch == "-") for ch in slug)
    assert slug == slug.lower()
