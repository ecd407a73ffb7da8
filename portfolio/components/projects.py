"""Project catalog component.

Loads the bundled project list, merges additions persisted in the key-value
store, and renders the current view as cards into the projects grid.
"""

import asyncio
import json
import re
import time
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from html import escape
from pathlib import Path
from typing import TYPE_CHECKING, Any

from portfolio.config import DEFAULT_PROJECTS_PATH
from portfolio.events import EventBus, ItemsDisplayed
from portfolio.exceptions import StorageError, ValidationError
from portfolio.logging import get_logger
from portfolio.page import Element
from portfolio.types.projects import CatalogSettings, Project

if TYPE_CHECKING:
    from portfolio.page import Page
    from portfolio.storage import KeyValueStore

logger = get_logger("projects")

STORAGE_KEY = "portfolioProjects"
CONTAINER_ID = "projects-grid"

DEFAULT_ICON = "fas fa-code"
DEFAULT_COLOR = "#333"
DEFAULT_LANGUAGE = "Other"
DEFAULT_STATUS = "active"

LANGUAGE_ICONS = {
    "Go": "fab fa-golang",
    "JavaScript": "fab fa-js-square",
    "TypeScript": "fab fa-js-square",
    "Python": "fab fa-python",
    "React": "fab fa-react",
    "Vue": "fab fa-vuejs",
    "Node.js": "fab fa-node-js",
    "HTML": "fab fa-html5",
    "CSS": "fab fa-css3-alt",
    "PHP": "fab fa-php",
    "Java": "fab fa-java",
    "C++": "fas fa-code",
    "C#": "fas fa-code",
    "Ruby": "fas fa-gem",
    "Rust": "fas fa-cog",
    "Swift": "fab fa-swift",
    "Kotlin": "fas fa-mobile-alt",
}

CARD_VARIANTS = {
    "Go": "go-lang",
    "JavaScript": "javascript",
    "TypeScript": "javascript",
    "Python": "python",
    "React": "react",
    "Vue": "vue",
}

SEED_PROJECT: dict[str, Any] = {
    "id": "gominage",
    "name": "gominage",
    "description": "A browser game built on HTML5 Canvas with a small hand-written physics simulation.",
    "icon": "fab fa-js-square",
    "technologies": ["JavaScript", "HTML5", "CSS3", "Canvas"],
    "github": "https://github.com/minngk/gominage",
    "demo": None,
    "featured": True,
    "createdAt": "2025-01-01",
    "status": "active",
    "color": "#F7DF1E",
    "language": "JavaScript",
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def language_icon(language: str | None) -> str:
    """Icon class for a primary language."""
    return LANGUAGE_ICONS.get(language or "", DEFAULT_ICON)


def card_variant(language: str | None) -> str:
    """Extra card class for a primary language, or "" when there is none."""
    return CARD_VARIANTS.get(language or "", "")


def slugify(name: str) -> str:
    """Lower-case ``name`` and collapse every non-alphanumeric run to one dash."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def _parse_datetime(value: Any) -> datetime:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable project date %r", value)
            return _EPOCH
    else:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _flag(value: Any, field: str) -> bool:
    """Read a JSON boolean; anything that is not true or false counts as false."""
    if isinstance(value, bool):
        return value
    if value is not None:
        logger.warning("Ignoring non-boolean %s value %r", field, value)
    return False


def _tags(value: Any) -> tuple[str, ...]:
    """Read a JSON list of technology names."""
    if isinstance(value, (list, tuple)):
        return tuple(str(tech) for tech in value)
    if value is not None:
        logger.warning("Ignoring non-list technologies value %r", value)
    return ()


def _parse_settings(data: Any) -> CatalogSettings:
    if not isinstance(data, dict):
        raise ValueError("settings must be an object")
    extra = {key: value for key, value in data.items() if key != "showFeaturedFirst"}
    return CatalogSettings(show_featured_first=bool(data.get("showFeaturedFirst", False)), extra=extra)


def _settings_to_dict(settings: CatalogSettings) -> dict[str, Any]:
    return {**settings.extra, "showFeaturedFirst": settings.show_featured_first}


def project_to_dict(project: Project) -> dict[str, Any]:
    """Serialise a project in the bundled JSON record shape."""
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "icon": project.icon,
        "technologies": list(project.technologies),
        "github": project.github,
        "demo": project.demo,
        "featured": project.featured,
        "createdAt": project.created_at.isoformat(),
        "status": project.status,
        "color": project.color,
        "language": project.language,
    }


def render_card(project: Project) -> str:
    """Inner markup of a project card; every value is HTML-escaped."""
    technologies = "".join(
        f'<span class="tech-tag">{escape(tech)}</span>' for tech in project.technologies
    )

    github_link = (
        f'<a href="{escape(project.github)}" target="_blank" rel="noopener noreferrer" '
        f'class="project-link primary"><i class="fab fa-github"></i>GitHub</a>'
        if project.github
        else ""
    )
    demo_link = (
        f'<a href="{escape(project.demo)}" target="_blank" rel="noopener noreferrer" '
        f'class="project-link secondary"><i class="fas fa-external-link-alt"></i>Demo</a>'
        if project.demo
        else ""
    )
    featured_badge = '<div class="featured-badge">Featured</div>' if project.featured else ""

    return (
        f"{featured_badge}"
        '<div class="project-card-content">'
        f'<i class="{escape(project.icon or language_icon(project.language))} project-icon" aria-hidden="true"></i>'
        f'<h3 class="project-title">{escape(project.name)}</h3>'
        f'<p class="project-description">{escape(project.description)}</p>'
        f'<div class="project-technologies">{technologies}</div>'
        f'<div class="project-links">{github_link}{demo_link}</div>'
        "</div>"
    )


def _empty_placeholder() -> Element:
    return Element(
        classes={"projects-empty"},
        html=(
            '<i class="fas fa-folder-open"></i>'
            "<h3>No projects found</h3>"
            "<p>There are no projects to show right now.</p>"
        ),
    )


class ProjectCatalog:
    """
    Project list with filtering, search and persisted additions.

    ``projects`` is the full catalog, ``view`` the subset the last filter or
    search selected (in catalog order). Rendering applies the featured-first
    ordering on top of the view.
    """

    def __init__(
        self,
        bus: EventBus,
        page: "Page",
        store: "KeyValueStore",
        source: Path | str = DEFAULT_PROJECTS_PATH,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        """
        Initialize the catalog.

        Args:
            bus: Event bus that receives ``ItemsDisplayed``
            page: Page holding the projects grid
            store: Key-value store for persisted additions
            source: Bundled JSON document with ``projects`` and ``settings``
            now: Time source for the creation timestamp of added projects
        """
        self.bus = bus
        self.page = page
        self.store = store
        self.source = Path(source)
        self.now = now

        self.projects: list[Project] = []
        self.view: list[Project] = []
        self.settings = CatalogSettings()
        self.loaded = False

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    async def load(self) -> list[Project]:
        """
        Read the bundled project data.

        Falls back to the built-in seed project when the file cannot be read
        or parsed. Never raises.

        Returns:
            The loaded catalog
        """
        try:
            raw = await asyncio.to_thread(self.source.read_text, encoding="utf-8")
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("project data must be an object")
            projects = self._parse_records(data.get("projects") or [])
            settings = _parse_settings(data.get("settings") or {})
        except (OSError, ValueError, TypeError) as e:
            logger.error("Error loading projects from %s: %s", self.source, e)
            self._load_fallback()
        else:
            self.projects = projects
            self.settings = settings
            self.view = list(projects)

        self.loaded = True
        return self.projects

    def _load_fallback(self) -> None:
        self.projects = self._parse_records([SEED_PROJECT])
        self.settings = CatalogSettings()
        self.view = list(self.projects)
        self.loaded = True

    def _parse_records(self, records: Iterable[Any]) -> list[Project]:
        """
        Build projects from JSON records.

        Explicit ids are claimed first; a repeated explicit id and every
        missing id get a free ``-N`` suffixed slug, so ids stay unique.
        """
        records = list(records)
        for record in records:
            if not isinstance(record, dict) or not record.get("name"):
                raise ValueError(f"malformed project record: {record!r}")
        reserved = {str(record["id"]) for record in records if record.get("id")}

        projects: list[Project] = []
        taken: set[str] = set()
        for record in records:
            name = str(record["name"])
            explicit_id = str(record.get("id") or "")
            if explicit_id and explicit_id not in taken:
                project_id = explicit_id
            else:
                if explicit_id:
                    logger.warning("Duplicate project id %r", explicit_id)
                project_id = self._unique_id(explicit_id or slugify(name) or "project", taken | reserved)
            taken.add(project_id)
            language = record.get("language") or DEFAULT_LANGUAGE
            projects.append(
                Project(
                    id=project_id,
                    name=name,
                    description=str(record.get("description") or ""),
                    icon=record.get("icon") or language_icon(language),
                    technologies=_tags(record.get("technologies")),
                    github=str(record.get("github") or ""),
                    demo=record.get("demo") or None,
                    featured=_flag(record.get("featured"), "featured"),
                    created_at=_parse_datetime(record.get("createdAt")),
                    status=record.get("status") or DEFAULT_STATUS,
                    color=record.get("color") or DEFAULT_COLOR,
                    language=language,
                )
            )
        return projects

    def restore_from_storage(self) -> bool:
        """
        Merge the persisted catalog into the loaded one.

        Persisted entries come first; loaded entries whose id is not among
        them follow. Unreadable state is logged and ignored.

        Returns:
            True if persisted state was merged
        """
        try:
            raw = self.store.get(STORAGE_KEY)
            if raw is None:
                return False
            data = json.loads(raw)
            saved = self._parse_records(data["projects"])
        except (StorageError, ValueError, TypeError, KeyError) as e:
            logger.warning("Failed to restore projects from storage: %s", e)
            return False

        saved_ids = {project.id for project in saved}
        self.projects = saved + [project for project in self.projects if project.id not in saved_ids]
        self.view = list(self.projects)
        return True

    def save_to_storage(self) -> bool:
        """
        Persist the full catalog.

        Returns:
            True if the store accepted the write
        """
        payload = {
            "projects": [project_to_dict(project) for project in self.projects],
            "settings": _settings_to_dict(self.settings),
            "timestamp": int(time.time() * 1000),
        }
        try:
            self.store.put(STORAGE_KEY, json.dumps(payload, ensure_ascii=False).encode("utf-8"))
        except StorageError as e:
            logger.warning("Failed to save projects to storage: %s", e)
            return False
        return True

    async def init(self) -> None:
        """Load, merge persisted additions and render the first view."""
        try:
            await self.load()
            self.restore_from_storage()
            self.render()
        except Exception:
            logger.exception("Failed to initialize project catalog")
            self._load_fallback()
            self.render()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def filter_by_technology(self, technology: str | None) -> list[Project]:
        """Keep projects with a technology tag containing ``technology``."""
        if not technology:
            self.view = list(self.projects)
        else:
            needle = technology.lower()
            self.view = [
                project
                for project in self.projects
                if any(needle in tech.lower() for tech in project.technologies)
            ]
        self.render()
        return list(self.view)

    def filter_by_language(self, language: str | None) -> list[Project]:
        """Keep projects whose primary language equals ``language``."""
        if not language:
            self.view = list(self.projects)
        else:
            needle = language.lower()
            self.view = [
                project
                for project in self.projects
                if project.language and project.language.lower() == needle
            ]
        self.render()
        return list(self.view)

    def search(self, query: str | None) -> list[Project]:
        """Keep projects whose name, description or a tag contains ``query``."""
        if not query:
            self.view = list(self.projects)
        else:
            needle = query.lower()
            self.view = [
                project
                for project in self.projects
                if needle in project.name.lower()
                or needle in project.description.lower()
                or any(needle in tech.lower() for tech in project.technologies)
            ]
        self.render()
        return list(self.view)

    def ordered(self, projects: Iterable[Project]) -> list[Project]:
        """Apply the featured-first ordering when the settings ask for it."""
        ordered = list(projects)
        if self.settings.show_featured_first:
            ordered.sort(key=lambda project: project.created_at, reverse=True)
            ordered.sort(key=lambda project: not project.featured)
        return ordered

    def render(self, view: Iterable[Project] | None = None) -> list[Project]:
        """
        Rewrite the projects grid with ``view`` (default: the current view).

        Returns:
            The projects in the order they were rendered
        """
        container = self.page.get(CONTAINER_ID)
        if container is None:
            logger.error("Projects grid element #%s not found", CONTAINER_ID)
            return []

        projects = self.ordered(self.view if view is None else view)

        container.clear()
        if not projects:
            container.append(_empty_placeholder())
        for index, project in enumerate(projects):
            card = Element(
                classes={"project-card", "fade-in"},
                attrs={"data-project-id": project.id},
                style={"animation-delay": f"{index * 0.1:.1f}s"},
                html=render_card(project),
            )
            variant = card_variant(project.language)
            if variant:
                card.add_class(variant)
            container.append(card)

        self.bus.publish(ItemsDisplayed(tuple(projects)))
        return projects

    # ------------------------------------------------------------------
    # Catalog changes
    # ------------------------------------------------------------------

    def get_project(self, project_id: str) -> Project | None:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def generate_id(self, name: str) -> str:
        """Derive a catalog-unique id from a project name."""
        return self._unique_id(slugify(name) or "project", {project.id for project in self.projects})

    @staticmethod
    def _unique_id(base: str, taken: set[str]) -> str:
        candidate = base
        counter = 1
        while candidate in taken:
            candidate = f"{base}-{counter}"
            counter += 1
        return candidate

    def add_project(self, data: Mapping[str, Any]) -> Project:
        """
        Add a project to the front of the catalog and persist the catalog.

        Args:
            data: Project fields; ``name`` and ``github`` are required

        Returns:
            The stored Project with all defaults filled in

        Raises:
            ValidationError: If ``name`` or ``github`` is missing
        """
        missing = [key for key in ("name", "github") if not data.get(key)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

        taken = {project.id for project in self.projects}
        requested_id = data.get("id")
        project_id = (
            self._unique_id(str(requested_id), taken) if requested_id else self.generate_id(str(data["name"]))
        )

        language = data.get("language") or DEFAULT_LANGUAGE
        project = Project(
            id=project_id,
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            icon=data.get("icon") or language_icon(data.get("language")),
            technologies=_tags(data.get("technologies")),
            github=str(data["github"]),
            demo=data.get("demo") or None,
            featured=_flag(data.get("featured"), "featured"),
            created_at=self.now(),
            status=DEFAULT_STATUS,
            color=data.get("color") or DEFAULT_COLOR,
            language=language,
        )

        self.projects.insert(0, project)
        self.view = list(self.projects)
        self.render()
        self.save_to_storage()
        return project
