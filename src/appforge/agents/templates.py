"""
App Templates
Pre-built templates for common app patterns
"""

from typing import Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from appforge.core.validate import UnknownIdentifierError
from .models import Target


class TemplateNotFound(UnknownIdentifierError):
    """Template id not in the catalog."""

    kind = "template"


class Template(BaseModel):
    """App template definition"""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: str
    platforms: tuple[Target, ...]
    features: tuple[str, ...]
    screens: tuple[str, ...]
    difficulty: Literal["beginner", "intermediate", "advanced"]
    stack: Optional[str] = None

    @property
    def prompt(self) -> str:
        """Request prompt synthesized from the declared feature list."""
        return f"Create a {self.name} app with: {', '.join(self.features)}"


MOBILE = (Target.IOS, Target.ANDROID, Target.REACT_NATIVE)
WEB = (Target.WEB,)


def _mobile(id, name, description, category, features, screens, difficulty) -> Template:
    return Template(
        id=id, name=name, description=description, category=category, platforms=MOBILE,
        features=features, screens=screens, difficulty=difficulty,
    )


def _web(id, name, description, stack, pages, features, difficulty) -> Template:
    return Template(
        id=id, name=name, description=description, category="web", platforms=WEB,
        features=features, screens=pages, difficulty=difficulty, stack=stack,
    )


BUILTIN_TEMPLATES: List[Template] = [
    # Productivity
    _mobile("todo-app", "Todo List", "Task management with categories and reminders", "productivity",
            ("add-task", "delete-task", "mark-complete", "categories", "local-storage", "reminders"),
            ("Home", "AddTask", "Categories", "Settings"), "beginner"),
    _mobile("note-app", "Notes", "Notes and memo app with rich text", "productivity",
            ("create-note", "rich-text", "categories", "search", "backup"),
            ("Home", "NoteEditor", "Categories", "Search"), "beginner"),
    _mobile("calendar", "Calendar", "Event calendar with reminders", "productivity",
            ("events", "reminders", "recurring", "notifications"),
            ("Calendar", "EventDetail", "AddEvent", "Settings"), "intermediate"),
    # Health
    _mobile("fitness-tracker", "Fitness Tracker", "Track workouts and health data", "health",
            ("workouts", "steps", "calories", "charts", "goals", "health-integration"),
            ("Home", "Workouts", "Progress", "Profile"), "intermediate"),
    _mobile("water-tracker", "Water Tracker", "Track daily water intake", "health",
            ("track-water", "reminders", "goals", "history", "widgets"),
            ("Home", "History", "Settings"), "beginner"),
    # Social
    _mobile("social-feed", "Social Feed", "Instagram-style social app", "social",
            ("posts", "likes", "comments", "user-profiles", "image-upload", "notifications"),
            ("Feed", "Post", "Profile", "CreatePost", "Search"), "advanced"),
    _mobile("messaging-app", "Messaging", "Real-time chat app", "social",
            ("messages", "contacts", "media", "notifications", "encryption"),
            ("Chats", "Conversation", "Contacts", "Settings"), "advanced"),
    # E-commerce
    _mobile("ecommerce", "E-commerce", "Online shopping with cart", "ecommerce",
            ("products", "categories", "cart", "checkout", "orders", "payments", "search"),
            ("Home", "ProductList", "ProductDetail", "Cart", "Checkout", "Orders"), "advanced"),
    _mobile("marketplace", "Marketplace", "Buy and sell items", "ecommerce",
            ("list-item", "browse", "search", "messaging", "favorites", "location"),
            ("Home", "Listing", "ItemDetail", "Messages", "Profile"), "intermediate"),
    # Food
    _mobile("recipe-app", "Recipe Book", "Search and save recipes", "food",
            ("recipes", "search", "favorites", "shopping-list", "categories"),
            ("Home", "RecipeDetail", "Search", "Favorites", "ShoppingList"), "beginner"),
    # Finance
    _mobile("expense-tracker", "Expense Tracker", "Track income and expenses", "finance",
            ("transactions", "categories", "charts", "budgets", "reports", "export"),
            ("Home", "AddTransaction", "Reports", "Budgets", "Settings"), "intermediate"),
    # Utilities
    _mobile("weather-app", "Weather", "Weather forecast with location", "utilities",
            ("current-weather", "forecast", "location", "search", "widgets", "notifications"),
            ("Home", "Search", "Details", "Settings"), "intermediate"),
    _mobile("qr-scanner", "QR Scanner", "Scan QR codes and barcodes", "utilities",
            ("scan-qr", "scan-barcode", "history", "create-qr"),
            ("Scanner", "History", "Create"), "intermediate"),
    _mobile("calculator", "Calculator", "Scientific calculator", "utilities",
            ("basic-calc", "scientific", "history"),
            ("Calculator", "History"), "beginner"),
    # Education
    _mobile("flashcards", "Flashcards", "Study with flashcards", "education",
            ("decks", "flashcards", "study-mode", "spaced-repetition", "progress"),
            ("Home", "Deck", "Study", "Stats"), "beginner"),
    # News
    _mobile("news-reader", "News Reader", "News articles and RSS", "news",
            ("articles", "categories", "bookmarks", "offline-reading", "rss", "dark-mode"),
            ("Home", "Article", "Categories", "Bookmarks", "RSS"), "intermediate"),
    # Web
    _web("saas-dashboard", "SaaS Dashboard", "Complete SaaS dashboard with auth, billing, and analytics",
         "nextjs", ("Dashboard", "Settings", "Billing", "Users", "Analytics"),
         ("authentication", "stripe-integration", "charts", "data-table", "notifications"), "advanced"),
    _web("admin-panel", "Admin Panel", "Full-featured admin panel with users, settings, and analytics",
         "nextjs", ("Dashboard", "Users", "Settings", "Logs", "Analytics"),
         ("data-table", "charts", "forms", "authentication", "role-management"), "intermediate"),
    _web("blog-platform", "Blog Platform", "Full-featured blog with categories, tags, and SEO",
         "nextjs", ("Home", "Blog", "Post", "Category", "Author", "Search"),
         ("markdown", "seo", "comments", "newsletter", "dark-mode"), "intermediate"),
    _web("rest-api", "REST API", "Production-ready REST API with auth and CRUD",
         "fastapi", ("API",),
         ("rest-endpoints", "jwt-auth", "crud", "pagination", "validation", "docs"), "intermediate"),
    _web("url-shortener", "URL Shortener", "URL shortener with analytics",
         "fastapi", ("Home", "Analytics", "Dashboard"),
         ("url-shortening", "analytics", "custom-slugs", "qr-codes"), "beginner"),
    _web("portfolio", "Portfolio", "Personal portfolio with projects and blog",
         "nextjs", ("Home", "Projects", "About", "Blog", "Contact"),
         ("projects", "blog", "contact-form", "animations", "seo"), "beginner"),
    _web("dashboard-template", "Dashboard Template", "Reusable admin dashboard template",
         "vue", ("Dashboard", "Tables", "Forms", "Charts", "Settings"),
         ("sidebar", "data-tables", "charts", "dark-mode", "responsive"), "intermediate"),
]


class TemplateLibrary:
    """Library of app templates"""

    def __init__(self, templates: Optional[Iterable[Template]] = None) -> None:
        source = BUILTIN_TEMPLATES if templates is None else templates
        self.templates: Dict[str, Template] = {t.id: t for t in source}

    def get(self, template_id: str) -> Optional[Template]:
        """Get template by ID"""
        return self.templates.get(template_id)

    def require(self, template_id: str) -> Template:
        """Get template by ID, raising TemplateNotFound when absent."""
        template = self.templates.get(template_id)
        if template is None:
            raise TemplateNotFound(template_id)
        return template

    def list_all(self) -> List[Template]:
        """List all templates"""
        return list(self.templates.values())

    def by_category(self, category: str) -> List[Template]:
        return [t for t in self.templates.values() if t.category == category]

    def by_platform(self, platform: str | Target) -> List[Template]:
        target = Target.parse(platform)
        return [t for t in self.templates.values() if target in t.platforms]

    def categories(self) -> List[str]:
        return sorted({t.category for t in self.templates.values()})

    def search(self, query: str) -> List[Template]:
        """Search templates by name, description or feature"""
        query_lower = query.lower()
        return [
            t for t in self.templates.values()
            if query_lower in t.name.lower()
            or query_lower in t.description.lower()
            or any(query_lower in feature for feature in t.features)
        ]
