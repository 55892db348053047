"""
Web Technology Stacks
Per-stack conventions and the fixed scaffold layout rendered for each stack.
"""

from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from appforge.core.validate import UnknownIdentifierError


DEFAULT_STACK = "nextjs"


class UnknownStackError(UnknownIdentifierError):
    """Stack id not in the stack table."""

    kind = "stack"


class StackProfile(BaseModel):
    """Declared conventions for one web stack."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    framework: str
    language: str
    styling: str
    database: str
    auth: str
    deployment: str

    # Scaffold layout
    page_path: str
    component_path: str
    config_files: tuple[str, ...]
    has_frontend: bool = True
    has_backend: bool = False

    def page_file(self, page: str) -> str:
        return self.page_path.format(name=page, lower=page.lower())

    def component_file(self, component: str) -> str:
        return self.component_path.format(name=component, lower=component.lower())

    def conventions(self) -> Dict[str, str]:
        """Stack profile as embedded in the specification prompt."""
        return {
            "name": self.name,
            "framework": self.framework,
            "language": self.language,
            "styling": self.styling,
            "database": self.database,
            "auth": self.auth,
            "deployment": self.deployment,
        }


STACKS: Dict[str, StackProfile] = {
    "nextjs": StackProfile(
        id="nextjs",
        name="Next.js",
        framework="Next.js 14 App Router",
        language="TypeScript",
        styling="Tailwind CSS",
        database="PostgreSQL / Prisma",
        auth="NextAuth.js",
        deployment="Vercel",
        page_path="app/{lower}/page.tsx",
        component_path="components/{name}.tsx",
        config_files=("package.json", "tailwind.config.js", "next.config.js"),
    ),
    "fastapi": StackProfile(
        id="fastapi",
        name="FastAPI",
        framework="FastAPI",
        language="Python",
        styling="Tailwind CSS",
        database="PostgreSQL / SQLAlchemy",
        auth="JWT",
        deployment="Docker / Railway",
        page_path="app/templates/{lower}.html",
        component_path="app/templates/partials/{lower}.html",
        config_files=("main.py", "requirements.txt", "models.py", "schemas.py", "crud.py", "database.py"),
        has_frontend=False,
        has_backend=True,
    ),
    "react-express": StackProfile(
        id="react-express",
        name="React + Express",
        framework="React + Express",
        language="TypeScript",
        styling="Tailwind CSS",
        database="MongoDB / PostgreSQL",
        auth="JWT",
        deployment="Vercel + Render",
        page_path="client/src/pages/{name}.tsx",
        component_path="client/src/components/{name}.tsx",
        config_files=("client/package.json", "client/src/App.tsx", "server/package.json", "server/index.js"),
        has_backend=True,
    ),
    "vue": StackProfile(
        id="vue",
        name="Vue 3 + Nuxt",
        framework="Nuxt 3",
        language="TypeScript",
        styling="Tailwind CSS",
        database="PostgreSQL / Prisma",
        auth="NuxtAuth",
        deployment="Vercel",
        page_path="pages/{lower}.vue",
        component_path="components/{name}.vue",
        config_files=("package.json", "tailwind.config.js", "nuxt.config.ts"),
    ),
}


def list_stacks() -> List[StackProfile]:
    return list(STACKS.values())


def resolve_stack(stack_id: Optional[str], default: str = DEFAULT_STACK) -> StackProfile:
    """
    Look up a stack, using ``default`` when none is given.

    Raises:
        UnknownStackError: If the id (or the default) is not a known stack
    """
    key = stack_id if stack_id is not None else default
    profile = STACKS.get(key)
    if profile is None:
        raise UnknownStackError(key, list(STACKS))
    return profile


# ============================================================================
# Dependency manifests
# ============================================================================


def _slug(name: str) -> str:
    return "-".join(name.lower().split()) or "web-app"


def _nextjs_manifest(app_name: str) -> dict:
    return {
        "name": _slug(app_name),
        "version": "0.1.0",
        "private": True,
        "scripts": {"dev": "next dev", "build": "next build", "start": "next start", "lint": "next lint"},
        "dependencies": {"react": "^18", "react-dom": "^18", "next": "^14", "tailwindcss": "^3.4"},
    }


def _fastapi_manifest(app_name: str) -> dict:
    return {
        "python_version": "3.11",
        "dependencies": ["fastapi", "uvicorn", "sqlalchemy", "pydantic", "python-jose", "passlib"],
    }


def _react_express_manifest(app_name: str) -> dict:
    return {
        "client": {
            "name": f"{_slug(app_name)}-client",
            "scripts": {"dev": "vite", "build": "vite build"},
            "dependencies": {"react": "^18", "react-dom": "^18", "react-router-dom": "^6", "tailwindcss": "^3.4"},
        },
        "server": {
            "name": f"{_slug(app_name)}-server",
            "scripts": {"start": "node index.js"},
            "dependencies": {"express": "^4", "cors": "^2", "jsonwebtoken": "^9"},
        },
    }


def _vue_manifest(app_name: str) -> dict:
    return {
        "name": "nuxt-app",
        "scripts": {"dev": "nuxt dev", "build": "nuxt build", "generate": "nuxt generate"},
        "dependencies": {"nuxt": "^3", "vue": "^3", "@nuxtjs/tailwindcss": "^6"},
    }


MANIFESTS: Dict[str, Callable[[str], dict]] = {
    "nextjs": _nextjs_manifest,
    "fastapi": _fastapi_manifest,
    "react-express": _react_express_manifest,
    "vue": _vue_manifest,
}
