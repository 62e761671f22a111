"""Technology stack detection from configuration file contents.

Inspects a bounded set of "important" configuration files (manifests,
lockfiles, container descriptors, CI and build configs) and maps their
dependency names or content through fixed rule tables to categorized
technologies:
- package.json (npm)
- requirements*.txt, pyproject.toml, Pipfile (PyPI)
- go.mod (Go modules)
- pom.xml, build.gradle(.kts) (Maven/Gradle)
- Cargo.toml (crates.io)
- composer.json (Packagist), Gemfile (RubyGems)
- Dockerfile, docker-compose.yml
- CI and hosting configs

Each rule function is pure and returns a list of Detection values; the
detector merges them into a TechStackProfile. Malformed files are skipped
with a warning and never abort detection.
"""

import json
import logging
import re
from collections.abc import Callable
from pathlib import PurePosixPath

from reposcribe.models.analysis import Detection, TechStackProfile

logger = logging.getLogger(__name__)

# Canonical filenames of important configuration files, in selection order.
# A path is important if its lowercase form contains one of these markers.
IMPORTANT_FILE_MARKERS: tuple[str, ...] = (
    "package.json",
    "requirements",
    "pyproject.toml",
    "pipfile",
    "go.mod",
    "pom.xml",
    "build.gradle",
    "cargo.toml",
    "composer.json",
    "gemfile",
    "dockerfile",
    "docker-compose",
    ".github/workflows/",
    ".gitlab-ci.yml",
    "jenkinsfile",
    "vercel.json",
    "netlify.toml",
    "vite.config",
    "webpack.config",
    "next.config",
    "angular.json",
    "tsconfig.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "package-lock.json",
    "poetry.lock",
)

DEFAULT_IMPORTANT_FILE_LIMIT = 10

# npm package name -> detections. Keys ending in "/" match scoped prefixes.
NPM_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    # Frontend
    "react": (("frontend", "React"),),
    "react-dom": (("frontend", "React"),),
    "next": (("frontend", "Next.js"), ("backend", "Next.js")),
    "vue": (("frontend", "Vue.js"),),
    "nuxt": (("frontend", "Nuxt"),),
    "@angular/": (("frontend", "Angular"),),
    "svelte": (("frontend", "Svelte"),),
    "@sveltejs/kit": (("frontend", "SvelteKit"),),
    "tailwindcss": (("frontend", "Tailwind CSS"),),
    "styled-components": (("frontend", "styled-components"),),
    "@emotion/": (("frontend", "Emotion"),),
    "redux": (("frontend", "Redux"),),
    "@reduxjs/toolkit": (("frontend", "Redux"),),
    "zustand": (("frontend", "Zustand"),),
    "recoil": (("frontend", "Recoil"),),
    "@tanstack/react-query": (("frontend", "React Query"),),
    "@mui/material": (("frontend", "Material UI"),),
    "react-native": (("frontend", "React Native"),),
    # Backend
    "express": (("backend", "Express.js"),),
    "fastify": (("backend", "Fastify"),),
    "koa": (("backend", "Koa"),),
    "@nestjs/core": (("backend", "NestJS"),),
    "hapi": (("backend", "hapi"),),
    "@hapi/hapi": (("backend", "hapi"),),
    "socket.io": (("backend", "Socket.IO"),),
    "graphql": (("backend", "GraphQL"),),
    "@apollo/server": (("backend", "Apollo Server"),),
    "apollo-server": (("backend", "Apollo Server"),),
    # Database
    "mongoose": (("database", "MongoDB"),),
    "mongodb": (("database", "MongoDB"),),
    "pg": (("database", "PostgreSQL"),),
    "mysql": (("database", "MySQL"),),
    "mysql2": (("database", "MySQL"),),
    "sqlite3": (("database", "SQLite"),),
    "redis": (("database", "Redis"),),
    "ioredis": (("database", "Redis"),),
    "prisma": (("database", "Prisma"),),
    "@prisma/client": (("database", "Prisma"),),
    "typeorm": (("database", "TypeORM"),),
    "sequelize": (("database", "Sequelize"),),
    "@supabase/supabase-js": (("database", "Supabase"),),
    "firebase": (("database", "Firebase"),),
    # DevOps / build
    "vite": (("devops", "Vite"),),
    "webpack": (("devops", "Webpack"),),
    "aws-sdk": (("devops", "AWS"),),
    "@aws-sdk/": (("devops", "AWS"),),
    # Testing
    "jest": (("testing", "Jest"),),
    "vitest": (("testing", "Vitest"),),
    "mocha": (("testing", "Mocha"),),
    "cypress": (("testing", "Cypress"),),
    "@playwright/test": (("testing", "Playwright"),),
    "@testing-library/": (("testing", "Testing Library"),),
    "supertest": (("testing", "SuperTest"),),
    # Languages
    "typescript": ((None, "TypeScript"),),
}

PYPI_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    "django": (("backend", "Django"),),
    "djangorestframework": (("backend", "Django REST Framework"),),
    "flask": (("backend", "Flask"),),
    "fastapi": (("backend", "FastAPI"),),
    "starlette": (("backend", "Starlette"),),
    "aiohttp": (("backend", "aiohttp"),),
    "tornado": (("backend", "Tornado"),),
    "celery": (("backend", "Celery"),),
    "streamlit": (("frontend", "Streamlit"),),
    "sqlalchemy": (("database", "SQLAlchemy"),),
    "psycopg2": (("database", "PostgreSQL"),),
    "psycopg2-binary": (("database", "PostgreSQL"),),
    "psycopg": (("database", "PostgreSQL"),),
    "asyncpg": (("database", "PostgreSQL"),),
    "pymysql": (("database", "MySQL"),),
    "mysqlclient": (("database", "MySQL"),),
    "pymongo": (("database", "MongoDB"),),
    "motor": (("database", "MongoDB"),),
    "redis": (("database", "Redis"),),
    "supabase": (("database", "Supabase"),),
    "boto3": (("devops", "AWS"),),
    "pytest": (("testing", "pytest"),),
    "hypothesis": (("testing", "Hypothesis"),),
    "tox": (("testing", "tox"),),
}

GO_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    "github.com/gin-gonic/gin": (("backend", "Gin"),),
    "github.com/labstack/echo": (("backend", "Echo"),),
    "github.com/gofiber/fiber": (("backend", "Fiber"),),
    "github.com/gorilla/mux": (("backend", "Gorilla Mux"),),
    "gorm.io/gorm": (("database", "GORM"),),
    "github.com/lib/pq": (("database", "PostgreSQL"),),
    "github.com/jackc/pgx": (("database", "PostgreSQL"),),
    "github.com/go-sql-driver/mysql": (("database", "MySQL"),),
    "go.mongodb.org/mongo-driver": (("database", "MongoDB"),),
    "github.com/redis/go-redis": (("database", "Redis"),),
    "github.com/go-redis/redis": (("database", "Redis"),),
    "github.com/stretchr/testify": (("testing", "Testify"),),
}

JVM_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    "spring-boot": (("backend", "Spring Boot"),),
    "org.springframework": (("backend", "Spring Framework"),),
    "io.quarkus": (("backend", "Quarkus"),),
    "io.micronaut": (("backend", "Micronaut"),),
    "ktor": (("backend", "Ktor"),),
    "hibernate": (("database", "Hibernate"),),
    "spring-boot-starter-data-jpa": (("database", "JPA"),),
    "mysql-connector": (("database", "MySQL"),),
    "org.postgresql": (("database", "PostgreSQL"),),
    "com.h2database": (("database", "H2"),),
    "mongodb-driver": (("database", "MongoDB"),),
    "junit": (("testing", "JUnit"),),
    "mockito": (("testing", "Mockito"),),
}

CARGO_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    "actix-web": (("backend", "Actix Web"),),
    "axum": (("backend", "Axum"),),
    "rocket": (("backend", "Rocket"),),
    "tokio": (("backend", "Tokio"),),
    "diesel": (("database", "Diesel"),),
    "sqlx": (("database", "SQLx"),),
    "yew": (("frontend", "Yew"),),
    "leptos": (("frontend", "Leptos"),),
}

COMPOSER_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    "laravel/framework": (("backend", "Laravel"),),
    "symfony/": (("backend", "Symfony"),),
    "doctrine/orm": (("database", "Doctrine"),),
    "phpunit/phpunit": (("testing", "PHPUnit"),),
}

GEM_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    "rails": (("backend", "Ruby on Rails"),),
    "sinatra": (("backend", "Sinatra"),),
    "pg": (("database", "PostgreSQL"),),
    "mysql2": (("database", "MySQL"),),
    "redis": (("database", "Redis"),),
    "rspec": (("testing", "RSpec"),),
    "rspec-rails": (("testing", "RSpec"),),
    "minitest": (("testing", "Minitest"),),
}

# Container image / service substrings -> detections
CONTAINER_IMAGE_RULES: dict[str, tuple[tuple[str | None, str], ...]] = {
    "postgres": (("database", "PostgreSQL"),),
    "mysql": (("database", "MySQL"),),
    "mariadb": (("database", "MariaDB"),),
    "mongo": (("database", "MongoDB"),),
    "redis": (("database", "Redis"),),
    "nginx": (("devops", "Nginx"),),
    "node:": ((None, "Node.js"),),
    "python:": ((None, "Python"),),
}

# Lockfile -> package manager (detected only)
LOCKFILE_MANAGERS: dict[str, str] = {
    "yarn.lock": "Yarn",
    "pnpm-lock.yaml": "pnpm",
    "package-lock.json": "npm",
    "poetry.lock": "Poetry",
}

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_QUOTED_REQUIREMENT = re.compile(r"[\"']([A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*[<>=!~;\"']")
_GO_REQUIRE = re.compile(r"^\s*(?:require\s+)?([a-z0-9.\-]+\.[a-z]{2,}/[^\s]+)\s+v", re.MULTILINE)
_GEM_LINE = re.compile(r"""^\s*gem\s+["']([^"']+)["']""", re.MULTILINE)


def select_important_files(
    paths: list[str],
    limit: int = DEFAULT_IMPORTANT_FILE_LIMIT,
) -> list[str]:
    """Select important configuration files from tree paths.

    A path is important when its lowercase form contains one of the
    canonical markers. Results follow marker order (then path order) and are
    capped at ``limit``.

    Args:
        paths: Repository-relative file paths
        limit: Maximum number of files to select

    Returns:
        Selected paths
    """
    selected: list[str] = []
    seen: set[str] = set()
    lowered = [(path, path.lower()) for path in paths]

    for marker in IMPORTANT_FILE_MARKERS:
        for path, lower in lowered:
            if path in seen or marker not in lower:
                continue
            # Skip vendored copies of manifests
            if "node_modules/" in lower or "vendor/" in lower:
                continue
            selected.append(path)
            seen.add(path)
            if len(selected) >= limit:
                return selected

    return selected


def _apply_rules(
    names: list[str],
    rules: dict[str, tuple[tuple[str | None, str], ...]],
) -> list[Detection]:
    """Map dependency names through a rule table.

    Keys ending in "/" match as prefixes (scoped packages); all others
    match exactly, case-insensitively.
    """
    detections: list[Detection] = []
    for raw_name in names:
        name = raw_name.strip().lower()
        for key, targets in rules.items():
            if name == key or (key.endswith("/") and name.startswith(key)):
                detections.extend(Detection(category, tech) for category, tech in targets)
    return detections


def _apply_substring_rules(
    content: str,
    rules: dict[str, tuple[tuple[str | None, str], ...]],
) -> list[Detection]:
    lowered = content.lower()
    detections: list[Detection] = []
    for key, targets in rules.items():
        if key in lowered:
            detections.extend(Detection(category, tech) for category, tech in targets)
    return detections


# =============================================================================
# Rule functions (path, content) -> detections
# =============================================================================


def detect_package_json(content: str) -> list[Detection]:
    """Detect technologies from package.json dependencies.

    Raises:
        ValueError: If the content is not a JSON object
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("package.json is not a JSON object")

    names: list[str] = []
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        deps = data.get(section) or {}
        if isinstance(deps, dict):
            names.extend(deps.keys())

    detections = [Detection(None, "Node.js")]
    detections.extend(_apply_rules(names, NPM_RULES))
    return detections


def _requirement_names(content: str) -> list[str]:
    names: list[str] = []
    for line in content.splitlines():
        stripped = line.split("#", 1)[0].strip()
        if not stripped or stripped.startswith(("-", "[")):
            continue
        match = _REQUIREMENT_NAME.match(stripped)
        if match:
            names.append(match.group(1))
    return names


def detect_python_requirements(content: str) -> list[Detection]:
    """Detect technologies from a requirements file."""
    detections = [Detection(None, "Python")]
    detections.extend(_apply_rules(_requirement_names(content), PYPI_RULES))
    return detections


def detect_python_project(content: str) -> list[Detection]:
    """Detect technologies from pyproject.toml or Pipfile content.

    Dependency names are taken from quoted PEP 508 strings and from
    ``name = "version"`` table entries.
    """
    names = [m.group(1) for m in _QUOTED_REQUIREMENT.finditer(content)]
    for line in content.splitlines():
        match = re.match(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*=", line)
        if match:
            names.append(match.group(1))

    detections = [Detection(None, "Python")]
    detections.extend(_apply_rules(names, PYPI_RULES))
    return detections


def detect_go_mod(content: str) -> list[Detection]:
    """Detect technologies from go.mod require directives."""
    modules = [m.group(1) for m in _GO_REQUIRE.finditer(content)]
    detections = [Detection(None, "Go")]
    for module in modules:
        for key, targets in GO_RULES.items():
            if module == key or module.startswith(key + "/"):
                detections.extend(Detection(category, tech) for category, tech in targets)
    return detections


def detect_jvm_build(content: str) -> list[Detection]:
    """Detect technologies from pom.xml or build.gradle content."""
    detections = [Detection(None, "Java")]
    detections.extend(_apply_substring_rules(content, JVM_RULES))
    return detections


def detect_cargo_toml(content: str) -> list[Detection]:
    """Detect technologies from Cargo.toml dependency tables."""
    names: list[str] = []
    in_dependencies = False
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("["):
            in_dependencies = "dependencies" in stripped
            continue
        if in_dependencies:
            match = re.match(r"^([A-Za-z0-9_-]+)\s*=", stripped)
            if match:
                names.append(match.group(1))
    detections = [Detection(None, "Rust")]
    detections.extend(_apply_rules(names, CARGO_RULES))
    return detections


def detect_composer_json(content: str) -> list[Detection]:
    """Detect technologies from composer.json.

    Raises:
        ValueError: If the content is not a JSON object
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("composer.json is not a JSON object")
    names: list[str] = []
    for section in ("require", "require-dev"):
        deps = data.get(section) or {}
        if isinstance(deps, dict):
            names.extend(deps.keys())
    detections = [Detection(None, "PHP")]
    detections.extend(_apply_rules(names, COMPOSER_RULES))
    return detections


def detect_gemfile(content: str) -> list[Detection]:
    """Detect technologies from Gemfile gem declarations."""
    names = [m.group(1) for m in _GEM_LINE.finditer(content)]
    detections = [Detection(None, "Ruby")]
    detections.extend(_apply_rules(names, GEM_RULES))
    return detections


def detect_dockerfile(content: str) -> list[Detection]:
    """Detect Docker and base image technologies from a Dockerfile."""
    images = " ".join(
        line.split(None, 1)[1]
        for line in content.splitlines()
        if line.strip().upper().startswith("FROM ") and len(line.split(None, 1)) > 1
    )
    detections = [Detection("devops", "Docker")]
    detections.extend(_apply_substring_rules(images, CONTAINER_IMAGE_RULES))
    return detections


def detect_docker_compose(content: str) -> list[Detection]:
    """Detect Docker Compose and service images."""
    images = " ".join(
        line.split(":", 1)[1]
        for line in content.splitlines()
        if line.strip().startswith("image:")
    )
    detections = [Detection("devops", "Docker"), Detection("devops", "Docker Compose")]
    detections.extend(_apply_substring_rules(images, CONTAINER_IMAGE_RULES))
    return detections


def detect_ci_config(path: str) -> list[Detection]:
    """Detect CI/CD and hosting platforms from config file paths."""
    lower = path.lower()
    if ".github/workflows/" in lower:
        return [Detection("devops", "GitHub Actions")]
    if lower.endswith(".gitlab-ci.yml"):
        return [Detection("devops", "GitLab CI")]
    if lower.endswith("jenkinsfile"):
        return [Detection("devops", "Jenkins")]
    if lower.endswith("vercel.json"):
        return [Detection("devops", "Vercel")]
    if lower.endswith("netlify.toml"):
        return [Detection("devops", "Netlify")]
    return []


def detect_build_config(path: str) -> list[Detection]:
    """Detect build tooling from frontend build config file names."""
    name = PurePosixPath(path).name.lower()
    if name.startswith("vite.config"):
        return [Detection("devops", "Vite")]
    if name.startswith("webpack.config"):
        return [Detection("devops", "Webpack")]
    if name.startswith("next.config"):
        return [Detection("frontend", "Next.js")]
    if name == "angular.json":
        return [Detection("frontend", "Angular")]
    if name == "tsconfig.json":
        return [Detection(None, "TypeScript")]
    return []


def detect_lockfile(path: str) -> list[Detection]:
    """Detect the package manager from a lockfile name."""
    manager = LOCKFILE_MANAGERS.get(PurePosixPath(path).name.lower())
    return [Detection(None, manager)] if manager else []


def _content_rule(path: str) -> Callable[[str], list[Detection]] | None:
    """Return the content rule function for a path, if any."""
    name = PurePosixPath(path).name.lower()

    if name == "package.json":
        return detect_package_json
    if name.startswith("requirements") and name.endswith(".txt"):
        return detect_python_requirements
    if name in ("pyproject.toml", "pipfile"):
        return detect_python_project
    if name == "go.mod":
        return detect_go_mod
    if name == "pom.xml" or name.startswith("build.gradle"):
        return detect_jvm_build
    if name == "cargo.toml":
        return detect_cargo_toml
    if name == "composer.json":
        return detect_composer_json
    if name == "gemfile":
        return detect_gemfile
    if name.startswith("docker-compose") or name.startswith("compose."):
        return detect_docker_compose
    if name == "dockerfile" or name.startswith("dockerfile.") or name.endswith(".dockerfile"):
        return detect_dockerfile
    return None


def detect_file(path: str, content: str) -> list[Detection]:
    """Run every rule that applies to one file.

    Args:
        path: Repository-relative path
        content: File content

    Returns:
        Detections for the file (may be empty)

    Raises:
        ValueError: If the file content is malformed for its type
    """
    detections = detect_ci_config(path) + detect_build_config(path) + detect_lockfile(path)
    rule = _content_rule(path)
    if rule is not None:
        detections.extend(rule(content))
    return detections


class TechStackDetector:
    """Builds a TechStackProfile from important configuration files.

    Detection is purely additive and deterministic: each file contributes an
    independent profile and profiles are merged in sorted path order.
    """

    def detect(self, contents: dict[str, str]) -> TechStackProfile:
        """Detect technologies across configuration files.

        Args:
            contents: Mapping of path to file content

        Returns:
            TechStackProfile (empty if nothing was recognized)
        """
        profile = TechStackProfile()

        for path in sorted(contents):
            try:
                detections = detect_file(path, contents[path])
            except Exception as e:
                logger.warning("Skipping malformed config file %s: %s", path, e)
                continue

            if detections:
                profile = profile.merge(TechStackProfile.from_detections(detections))
                logger.debug("Detected %d technologies in %s", len(detections), path)

        if profile.is_empty:
            logger.info(
                "No technologies detected from %d config files (low confidence tech stack)",
                len(contents),
            )
        else:
            logger.debug("Detected tech stack: %s", sorted(profile.detected))

        return profile
